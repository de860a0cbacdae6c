"""
MongoDB repository adapter - Implements PetRepository and UserRepository.

This module provides the MongoDB implementation of the domain's
repository ports using the motor async driver with plain collection
operations.

Connection Lifecycle:
--------------------
MongoConnection is constructed explicitly at process start and passed
to every repository. connect() opens the client and ensures indexes;
close() releases it. Nothing connects at import time.

Write Semantics:
---------------
1. **Validation before every write**: create() and update() run the
   entity schema first, so an invalid record never reaches the store.

2. **Merge on update**: update() loads the stored record, overlays the
   supplied fields, re-validates the merged result and replaces the
   document. A failing merge writes nothing.

3. **Uniqueness at the store**: the users collection has a unique index
   on email. It is the real guard against concurrent registrations; the
   service-level existence check only produces a friendlier error.

4. **Timestamps**: created_at and updated_at are maintained here.
"""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any, ClassVar, Generic, TypeVar

from bson import ObjectId
from bson.errors import InvalidId
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pydantic import BaseModel
from pymongo.errors import DuplicateKeyError as MongoDuplicateKeyError

from src.domain.exceptions import CastError, DuplicateKeyError, NotFoundError
from src.domain.ports import Lookup
from src.domain.schemas import (
    Pet,
    PetFields,
    SchemaOptions,
    User,
    UserFields,
    validate_pet_async,
    validate_user_async,
)

logger = logging.getLogger(__name__)

PETS_COLLECTION = "mascotas"
USERS_COLLECTION = "usuarios"

_TIMESTAMP_FIELDS = ("created_at", "updated_at")


class MongoConnection:
    """
    Owns the motor client and the database handle.

    Args:
        uri: MongoDB connection URI
        db_name: Database holding the pets and users collections
        client: Pre-built client to use instead of creating one from `uri`
    """

    def __init__(
        self, uri: str, db_name: str, client: AsyncIOMotorClient | None = None
    ) -> None:
        self._uri = uri
        self._db_name = db_name
        self._client = client
        self._db: AsyncIOMotorDatabase | None = None

    @property
    def database(self) -> AsyncIOMotorDatabase:
        if self._db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self._db

    @property
    def is_connected(self) -> bool:
        return self._db is not None

    async def connect(self) -> None:
        """Open the client (once) and ensure collection indexes."""
        if self._db is not None:
            return
        if self._client is None:
            self._client = AsyncIOMotorClient(self._uri, tz_aware=True)
        self._db = self._client[self._db_name]
        await ensure_indexes(self._db)
        logger.info("Connected to database %s", self._db_name)

    async def close(self) -> None:
        """Close the client. Safe to call when not connected."""
        client, self._client, self._db = self._client, None, None
        if client is not None:
            client.close()
            logger.info("Database connection closed")

    async def ping(self) -> None:
        """Round-trip to the server; raises if it is unreachable."""
        await self.database.command("ping")


async def ensure_indexes(db: AsyncIOMotorDatabase) -> None:
    """
    Create the indexes the repositories rely on.

    Index creation is idempotent, so this runs on every startup.
    """
    await db[USERS_COLLECTION].create_index("email", unique=True)


def _object_id(value: Any) -> ObjectId:
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        raise CastError(value) from None


RecordT = TypeVar("RecordT", Pet, User)


class _MongoRepository(Generic[RecordT]):
    """
    Shared CRUD over one collection.

    Subclasses name the collection, the stored field schema, the record
    type returned to callers, and how to validate a field mapping.
    """

    collection_name: ClassVar[str]
    fields_cls: ClassVar[type[BaseModel]]
    record_cls: ClassVar[type[BaseModel]]
    unique_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, connection: MongoConnection, options: SchemaOptions | None = None) -> None:
        self._connection = connection
        self._options = options or SchemaOptions()

    @property
    def _collection(self) -> AsyncIOMotorCollection:
        return self._connection.database[self.collection_name]

    async def _validate(self, data: Mapping[str, Any]) -> BaseModel:
        raise NotImplementedError

    async def create(self, fields: Mapping[str, Any]) -> RecordT:
        validated = await self._validate(fields)
        now = datetime.now(UTC)
        document = {**validated.model_dump(), "created_at": now, "updated_at": now}

        result = await self._write(self._collection.insert_one(document))
        document["_id"] = result.inserted_id
        return self._to_record(document)

    async def get_all(self) -> list[RecordT]:
        documents = await self._collection.find({}).to_list(length=None)
        return [self._to_record(document) for document in documents]

    async def get_one(self, lookup: Lookup) -> RecordT | None:
        query = {"_id": _object_id(lookup)} if isinstance(lookup, str) else dict(lookup)
        document = await self._collection.find_one(query)
        return self._to_record(document) if document is not None else None

    async def update(self, id: str, changes: Mapping[str, Any]) -> RecordT:
        object_id = _object_id(id)
        existing = await self._collection.find_one({"_id": object_id})
        if existing is None:
            raise NotFoundError(f"no {self.collection_name} record with id {id}")

        merged = {**self._stored_fields(existing), **self._by_field_name(changes)}
        validated = await self._validate(merged)

        document = {
            **validated.model_dump(),
            "created_at": existing.get("created_at"),
            "updated_at": datetime.now(UTC),
        }
        await self._write(self._collection.replace_one({"_id": object_id}, document))
        document["_id"] = object_id
        return self._to_record(document)

    async def delete(self, id: str) -> RecordT | None:
        document = await self._collection.find_one_and_delete({"_id": _object_id(id)})
        return self._to_record(document) if document is not None else None

    async def _write(self, operation: Any) -> Any:
        try:
            return await operation
        except MongoDuplicateKeyError as e:
            raise DuplicateKeyError(self._duplicate_field(e)) from None

    def _duplicate_field(self, error: MongoDuplicateKeyError) -> str:
        key_pattern = (error.details or {}).get("keyPattern") or {}
        fallback = self.unique_fields[0] if self.unique_fields else "record"
        return next(iter(key_pattern), fallback)

    def _stored_fields(self, document: Mapping[str, Any]) -> dict[str, Any]:
        return {k: v for k, v in document.items() if k in self.fields_cls.model_fields}

    def _by_field_name(self, changes: Mapping[str, Any]) -> dict[str, Any]:
        """Map camelCase keys to field names so they override the stored values."""
        aliases = {
            info.alias: name for name, info in self.fields_cls.model_fields.items() if info.alias
        }
        return {aliases.get(key, key): value for key, value in changes.items()}

    def _to_record(self, document: Mapping[str, Any]) -> RecordT:
        # Stored documents were validated on write; rebuild without re-running rules
        values = self._stored_fields(document)
        values.update({k: document.get(k) for k in _TIMESTAMP_FIELDS})
        return self.record_cls.model_construct(id=str(document["_id"]), **values)


class MongoPetRepository(_MongoRepository[Pet]):
    """Implements PetRepository over the `mascotas` collection."""

    collection_name = PETS_COLLECTION
    fields_cls = PetFields
    record_cls = Pet

    async def _validate(self, data: Mapping[str, Any]) -> PetFields:
        return await validate_pet_async(data)


class MongoUserRepository(_MongoRepository[User]):
    """Implements UserRepository over the `usuarios` collection."""

    collection_name = USERS_COLLECTION
    fields_cls = UserFields
    record_cls = User
    unique_fields = ("email",)

    async def _validate(self, data: Mapping[str, Any]) -> UserFields:
        return await validate_user_async(data, self._options)

    async def touch_last_access(self, id: str) -> datetime:
        now = datetime.now(UTC)
        await self._collection.update_one({"_id": _object_id(id)}, {"$set": {"last_access": now}})
        return now
