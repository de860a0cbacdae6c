"""
Bearer tokens - Signed, time-limited identity tokens (HS256 JWT).

The identity claim is the user's email. Every verification failure
(bad signature, malformed token, expiry, missing claim) surfaces as a
single InvalidTokenError so callers cannot tell which check failed.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import jwt

from .exceptions import InvalidTokenError

_ALGORITHM = "HS256"


@dataclass(frozen=True)
class Identity:
    """Authenticated caller, as carried by a token."""

    email: str


@dataclass(frozen=True)
class TokenIssuer:
    """Issues and verifies bearer tokens with a process-wide secret."""

    secret: str
    ttl: timedelta = timedelta(hours=1)

    def issue(self, identity: Identity) -> str:
        now = datetime.now(UTC)
        payload = {"email": identity.email, "iat": now, "exp": now + self.ttl}
        return jwt.encode(payload, self.secret, algorithm=_ALGORITHM)

    def verify(self, token: str) -> Identity:
        """
        Decode a token and return its identity.

        Raises:
            InvalidTokenError: Signature, format or expiry check failed
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[_ALGORITHM],
                options={"require": ["exp", "email"]},
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError(str(e)) from None
        email = payload["email"]
        if not isinstance(email, str) or not email:
            raise InvalidTokenError("token carries no identity")
        return Identity(email=email)
