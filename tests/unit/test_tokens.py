"""
Unit tests for TokenIssuer.

Tests verify:
- A freshly issued token verifies to the same identity
- Expired, tampered, foreign and malformed tokens are all rejected
  with the same InvalidTokenError
"""

from datetime import UTC, datetime, timedelta

import jwt
import pytest

from src.domain.exceptions import AuthError, InvalidTokenError
from src.domain.tokens import Identity, TokenIssuer

SECRET = "unit-test-secret-key-that-is-long-enough"


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(secret=SECRET)


class TestIssue:
    def test_round_trip(self, issuer: TokenIssuer) -> None:
        token = issuer.issue(Identity(email="ana@example.com"))

        assert issuer.verify(token) == Identity(email="ana@example.com")

    def test_token_expires_after_ttl(self) -> None:
        issuer = TokenIssuer(secret=SECRET, ttl=timedelta(minutes=10))

        claims = jwt.decode(issuer.issue(Identity(email="ana@example.com")), SECRET, algorithms=["HS256"])

        assert claims["exp"] - claims["iat"] == 600

    def test_default_ttl_is_one_hour(self, issuer: TokenIssuer) -> None:
        assert issuer.ttl == timedelta(hours=1)


class TestVerify:
    def test_expired_token(self) -> None:
        issuer = TokenIssuer(secret=SECRET, ttl=timedelta(seconds=-1))
        token = issuer.issue(Identity(email="ana@example.com"))

        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_other_secret(self, issuer: TokenIssuer) -> None:
        foreign = TokenIssuer(secret="another-secret-key-that-is-long-enough").issue(
            Identity(email="ana@example.com")
        )

        with pytest.raises(InvalidTokenError):
            issuer.verify(foreign)

    def test_tampered_token(self, issuer: TokenIssuer) -> None:
        token = issuer.issue(Identity(email="ana@example.com"))
        header, payload, signature = token.split(".")
        forged = jwt.encode(
            {"email": "admin@example.com", "exp": datetime.now(UTC) + timedelta(hours=1)},
            "guess",
            algorithm="HS256",
        ).split(".")[1]

        with pytest.raises(InvalidTokenError):
            issuer.verify(f"{header}.{forged}.{signature}")

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
    def test_malformed_token(self, issuer: TokenIssuer, token: str) -> None:
        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_missing_email_claim(self, issuer: TokenIssuer) -> None:
        token = jwt.encode({"exp": datetime.now(UTC) + timedelta(hours=1)}, SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_missing_expiry_claim(self, issuer: TokenIssuer) -> None:
        token = jwt.encode({"email": "ana@example.com"}, SECRET, algorithm="HS256")

        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_is_an_auth_error(self) -> None:
        assert issubclass(InvalidTokenError, AuthError)
