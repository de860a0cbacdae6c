"""
Domain exceptions - Semantic error types for the adoption service.

This module defines domain-specific exceptions that communicate
business rule and persistence failures without leaking infrastructure
details. The API layer translates each of them to an HTTP status.
"""


class AdoptionError(Exception):
    """Base class for adoption domain errors."""

    pass


class ValidationError(AdoptionError):
    """A record field violates its schema rule."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class DuplicateKeyError(AdoptionError):
    """A write collides with a uniqueness constraint in the store."""

    def __init__(self, field: str) -> None:
        super().__init__(f"duplicate value for {field}")
        self.field = field


class NotFoundError(AdoptionError):
    """The identifier has no matching record."""

    pass


class CastError(AdoptionError):
    """The identifier is not a well-formed record id."""

    def __init__(self, value: object) -> None:
        super().__init__(f"invalid id: {value!r}")
        self.value = value


class AuthError(AdoptionError):
    """Missing or unusable credentials on a protected request."""

    pass


class InvalidTokenError(AuthError):
    """Token signature, shape or expiry check failed."""

    pass


class UserAlreadyExists(AdoptionError):
    """Email is already registered."""

    pass


class InvalidCredentials(AdoptionError):
    """Unknown email or wrong password (deliberately indistinguishable)."""

    pass


class UserNotFound(NotFoundError):
    """Authenticated identity has no stored user."""

    pass
