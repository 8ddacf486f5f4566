"""
Unit tests for TokenIssuer.
"""

from datetime import timedelta

import pytest
from jose import jwt

from service_auth.app.tokens import TokenIssuer, TokenSigningConfig
from shared.errors import AuthenticationError
from shared.test_helpers import FakeClock, MockTokenGenerator, TestDataFactory, TEST_JWT_SECRET


class TestTokenIssuer:
    """Test cases for TokenIssuer."""

    @pytest.fixture
    def issuer(self):
        """Create TokenIssuer instance."""
        return TokenIssuer(TokenSigningConfig(secret=TEST_JWT_SECRET))

    def test_issue_embeds_identity_and_expiry(self):
        """Issued tokens carry sub, username and a 24h expiry."""
        clock = FakeClock()
        issuer = TokenIssuer(TokenSigningConfig(secret=TEST_JWT_SECRET), clock=clock)

        token = issuer.issue("user-1", "alice")

        payload = jwt.get_unverified_claims(token)
        assert payload["sub"] == "user-1"
        assert payload["username"] == "alice"
        assert payload["exp"] == int((clock.now + timedelta(hours=24)).timestamp())

    def test_decode_round_trip(self, issuer):
        """A freshly issued token decodes to the same identity."""
        claims = issuer.decode(issuer.issue("user-1", "alice"))

        assert claims.sub == "user-1"
        assert claims.username == "alice"

    def test_decode_expired_token(self):
        """Expired tokens are rejected."""
        user = TestDataFactory.create_test_users()[0]
        token = MockTokenGenerator().generate_expired_token(user)
        issuer = TokenIssuer(TokenSigningConfig(secret=TEST_JWT_SECRET))

        with pytest.raises(AuthenticationError):
            issuer.decode(token)

    def test_decode_wrong_secret(self, issuer):
        """Tokens signed with another secret are rejected."""
        user = TestDataFactory.create_test_users()[0]
        token = MockTokenGenerator(secret="another-secret").generate_token(user)

        with pytest.raises(AuthenticationError):
            issuer.decode(token)

    def test_decode_rejects_other_algorithm(self, issuer):
        """Only the configured algorithm is accepted."""
        user = TestDataFactory.create_test_users()[0]
        token = MockTokenGenerator(algorithm="HS512").generate_token(user)

        with pytest.raises(AuthenticationError):
            issuer.decode(token)

    def test_decode_rejects_wrong_claim_types(self, issuer):
        """A numeric subject is not a valid user ID."""
        token = jwt.encode(
            {"sub": 123, "username": "alice", "exp": 9999999999},
            TEST_JWT_SECRET,
            algorithm="HS256"
        )

        with pytest.raises(AuthenticationError):
            issuer.decode(token)

    def test_decode_rejects_missing_username(self, issuer):
        token = jwt.encode({"sub": "user-1", "exp": 9999999999}, TEST_JWT_SECRET, algorithm="HS256")

        with pytest.raises(AuthenticationError):
            issuer.decode(token)

    def test_decode_garbage(self, issuer):
        with pytest.raises(AuthenticationError):
            issuer.decode("not-a-token")

    def test_rotate_secret_invalidates_outstanding_tokens(self, issuer):
        """Tokens signed before a rotation stop validating."""
        token = issuer.issue("user-1", "alice")

        issuer.rotate_secret("rotated-secret")

        with pytest.raises(AuthenticationError):
            issuer.decode(token)
        assert issuer.decode(issuer.issue("user-1", "alice")).sub == "user-1"
