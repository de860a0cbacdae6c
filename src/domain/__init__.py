"""
Domain layer - Pure business logic with zero web-framework imports.

This package contains the field rules, entity schemas, credential and
token handling, and account use cases of the adoption service. It
defines its own port interfaces for persistence, so storage adapters
plug in without the domain knowing about them.
"""

from .accounts import AccountService
from .credentials import PasswordHasher
from .exceptions import (
    AdoptionError,
    AuthError,
    CastError,
    DuplicateKeyError,
    InvalidCredentials,
    InvalidTokenError,
    NotFoundError,
    UserAlreadyExists,
    UserNotFound,
    ValidationError,
)
from .ports import PetRepository, UserRepository
from .schemas import Pet, PetKind, Role, SchemaOptions, User
from .tokens import Identity, TokenIssuer

__all__ = [
    "AccountService",
    "AdoptionError",
    "AuthError",
    "CastError",
    "DuplicateKeyError",
    "Identity",
    "InvalidCredentials",
    "InvalidTokenError",
    "NotFoundError",
    "PasswordHasher",
    "Pet",
    "PetKind",
    "PetRepository",
    "Role",
    "SchemaOptions",
    "TokenIssuer",
    "User",
    "UserAlreadyExists",
    "UserNotFound",
    "UserRepository",
    "ValidationError",
]
