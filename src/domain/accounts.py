"""
Account domain service - Registration, login and user management.

This module orchestrates the user repository, the password hasher and
the token issuer to implement the account use cases:

- register: validate input, reject a known email, hash, persist
- login: look up by email, compare hashes, issue a bearer token
- profile: resolve the authenticated identity to a stored user
- list/get/update/delete: user management behind the token guard

Login never reveals whether the email or the password was wrong: both
cases raise InvalidCredentials, and a dummy hash is compared when the
email is unknown so both paths cost one bcrypt check.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from .credentials import PasswordHasher
from .exceptions import (
    DuplicateKeyError,
    InvalidCredentials,
    UserAlreadyExists,
    UserNotFound,
    ValidationError,
)
from .ports import UserRepository
from .schemas import SchemaOptions, User, validate_registration
from .tokens import Identity, TokenIssuer
from .validators import validate_password

logger = logging.getLogger(__name__)


# Fields a caller may change directly; the hash only changes through `password`
EDITABLE_USER_FIELDS = frozenset({"name", "surname", "email", "phone", "role", "active"})

# Hash compared against when the email is unknown, one per work factor
_dummy_hashes: dict[PasswordHasher, str] = {}


async def _dummy_hash(hasher: PasswordHasher) -> str:
    if hasher not in _dummy_hashes:
        _dummy_hashes[hasher] = await hasher.hash_async("dummy_password_for_timing_safety")
    return _dummy_hashes[hasher]


@dataclass
class AccountService:
    """
    Domain service for user accounts.

    Wires the user repository, password hasher and token issuer
    together. Schema options decide phone format and surname rules.
    """

    users: UserRepository
    hasher: PasswordHasher
    tokens: TokenIssuer
    options: SchemaOptions = field(default_factory=SchemaOptions)

    async def register(self, data: Mapping[str, Any]) -> User:
        """
        Register a new user.

        Args:
            data: Submitted fields (name, surname, email, phone, password)

        Returns:
            The stored user

        Raises:
            ValidationError: If a submitted field is invalid
            UserAlreadyExists: If the email is already registered
        """
        registration = validate_registration(data, self.options)

        if await self.users.get_one({"email": registration.email}) is not None:
            raise UserAlreadyExists(registration.email)

        fields = registration.model_dump(exclude={"password"})
        fields["password_hash"] = await self.hasher.hash_async(registration.password)

        try:
            user = await self.users.create(fields)
        except DuplicateKeyError:
            # Lost a race with a concurrent registration; the unique index decided
            raise UserAlreadyExists(registration.email) from None

        logger.info("Registered user %s", user.id)
        return user

    async def login(self, email: str, password: str) -> tuple[User, str]:
        """
        Authenticate a user and issue a bearer token.

        Returns:
            Tuple of (user, token)

        Raises:
            InvalidCredentials: Unknown email or wrong password
        """
        user = await self.users.get_one({"email": self._normalize_email(email)})

        # Always run one bcrypt comparison, even for unknown emails
        stored_hash = user.password_hash if user is not None else await _dummy_hash(self.hasher)
        password_valid = await self.hasher.verify_async(password, stored_hash)

        if user is None or not password_valid:
            raise InvalidCredentials()

        last_access = await self.users.touch_last_access(user.id)
        user = user.model_copy(update={"last_access": last_access})
        logger.info("User %s authenticated", user.id)
        return user, self.tokens.issue(Identity(email=user.email))

    async def profile(self, identity: Identity) -> User:
        user = await self.users.get_one({"email": identity.email})
        if user is None:
            raise UserNotFound(identity.email)
        return user

    async def list_users(self) -> list[User]:
        return await self.users.get_all()

    async def get_user(self, id: str) -> User:
        user = await self.users.get_one(id)
        if user is None:
            raise UserNotFound(id)
        return user

    async def update_user(self, id: str, changes: Mapping[str, Any]) -> User:
        """
        Apply a partial update to a user.

        Only the fields in EDITABLE_USER_FIELDS are applied; anything else
        (the stored hash, timestamps, unknown keys) is ignored. A plaintext
        `password` is checked for complexity and stored as a fresh hash.

        Raises:
            CastError, NotFoundError, ValidationError, DuplicateKeyError
        """
        password = changes.get("password")
        changes = {k: v for k, v in changes.items() if k in EDITABLE_USER_FIELDS}

        if password is not None:
            result = validate_password(password)
            if not result:
                raise ValidationError("password", result.message)
            changes["password_hash"] = await self.hasher.hash_async(password)

        return await self.users.update(id, changes)

    async def delete_user(self, id: str) -> User:
        user = await self.users.delete(id)
        if user is None:
            raise UserNotFound(id)
        return user

    def _normalize_email(self, email: str) -> str:
        """
        Normalize email address for consistent lookup.

        Applies: strip whitespace + lowercase
        """
        return email.strip().lower()
