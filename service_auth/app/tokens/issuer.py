"""
Bearer token issuance and validation for Auth service.

Tokens are HMAC-signed JWTs carrying the subject, username and expiry.
Nothing is persisted: a token is valid exactly when its signature verifies
against the current secret and its expiry lies in the future.
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jose import jwt
from jose.exceptions import JWTError
from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr
from pydantic import ValidationError as ClaimsValidationError

from shared.logging import get_logger
from shared.errors import AuthenticationError


@dataclass(frozen=True)
class TokenSigningConfig:
    """Signing parameters shared by every token the issuer produces."""
    secret: str
    algorithm: str = "HS256"
    ttl: timedelta = timedelta(hours=24)


class TokenClaims(BaseModel):
    """Verified claim set of a bearer token."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    sub: StrictStr
    username: StrictStr
    exp: StrictInt


class TokenIssuer:
    """Issues and verifies signed, time-limited bearer tokens."""

    def __init__(self, signing: TokenSigningConfig,
                 clock: Optional[Callable[[], datetime]] = None):
        self._signing = signing
        self._clock = clock or (lambda: datetime.now(timezone.utc))
        self.logger = get_logger("auth.tokens")

    @property
    def algorithm(self) -> str:
        return self._signing.algorithm

    def issue(self, user_id: str, username: str) -> str:
        """Sign a token for the given identity, expiring after the configured TTL."""
        expires_at = self._clock() + self._signing.ttl
        claims = {
            "sub": user_id,
            "username": username,
            "exp": int(expires_at.timestamp()),
        }
        return jwt.encode(claims, self._signing.secret, algorithm=self._signing.algorithm)

    def decode(self, token: str) -> TokenClaims:
        """Verify signature, algorithm and expiry, then type-check the claims.

        Raises AuthenticationError for any token that does not pass.
        """
        try:
            payload = jwt.decode(
                token,
                self._signing.secret,
                algorithms=[self._signing.algorithm],
                options={"verify_aud": False}
            )
            claims = TokenClaims.model_validate(payload)
        except ClaimsValidationError as e:
            raise AuthenticationError("Invalid token claims", details={"reason": str(e)})
        except (JWTError, ValueError, TypeError) as e:
            raise AuthenticationError("Invalid token", details={"reason": str(e)})

        if not claims.sub:
            raise AuthenticationError("Invalid token claims", details={"reason": "empty subject"})

        return claims

    def rotate_secret(self, new_secret: str) -> None:
        """Replace the signing secret.

        Every token signed with the previous secret stops validating at once.
        """
        self._signing = replace(self._signing, secret=new_secret)
        self.logger.warning("Token signing secret rotated; outstanding tokens invalidated")
