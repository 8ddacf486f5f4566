from .issuer import TokenClaims, TokenIssuer, TokenSigningConfig

__all__ = ["TokenClaims", "TokenIssuer", "TokenSigningConfig"]
