"""
Port interfaces - Protocol definitions for infrastructure abstraction.

This module defines the interfaces (ports) that the domain requires
from infrastructure. Adapters implement these protocols.
"""

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Protocol

from .schemas import Pet, User

# Either a record id or an equality filter on stored fields
Lookup = str | Mapping[str, Any]


class PetRepository(Protocol):
    """Port interface for pet persistence."""

    async def create(self, fields: Mapping[str, Any]) -> Pet:
        """
        Validate and store a new pet.

        Raises:
            ValidationError: If a field violates its schema rule
        """
        ...

    async def get_all(self) -> list[Pet]: ...

    async def get_one(self, lookup: Lookup) -> Pet | None:
        """
        Fetch one pet by id or filter.

        Returns:
            The pet, or None if nothing matches

        Raises:
            CastError: If an id is given and it is malformed
        """
        ...

    async def update(self, id: str, changes: Mapping[str, Any]) -> Pet:
        """
        Merge changes over the stored pet and persist the re-validated result.

        Fields absent from `changes` keep their stored values. If the merged
        record is invalid nothing is written.

        Raises:
            CastError: Malformed id
            NotFoundError: No pet with this id
            ValidationError: Merged record violates a schema rule
        """
        ...

    async def delete(self, id: str) -> Pet | None:
        """
        Remove a pet.

        Returns:
            The removed pet, or None if nothing matched
        """
        ...


class UserRepository(Protocol):
    """Port interface for user persistence. Emails are unique."""

    async def create(self, fields: Mapping[str, Any]) -> User:
        """
        Validate and store a new user.

        Raises:
            ValidationError: If a field violates its schema rule
            DuplicateKeyError: If the email is already stored
        """
        ...

    async def get_all(self) -> list[User]: ...

    async def get_one(self, lookup: Lookup) -> User | None: ...

    async def update(self, id: str, changes: Mapping[str, Any]) -> User:
        """Same merge semantics as PetRepository.update; may raise DuplicateKeyError."""
        ...

    async def delete(self, id: str) -> User | None: ...

    async def touch_last_access(self, id: str) -> datetime:
        """Record the current time as the user's last access and return it."""
        ...
