"""Repository adapters - Database implementations."""

from .mongo import MongoConnection, MongoPetRepository, MongoUserRepository, ensure_indexes

__all__ = ["MongoConnection", "MongoPetRepository", "MongoUserRepository", "ensure_indexes"]
