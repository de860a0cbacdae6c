"""
Shared test fixtures and configuration.

This module provides pytest fixtures for:
- Test settings (fast bcrypt, fixed JWT secret)
- An in-memory MongoDB connection (mongomock-motor)
- Repositories and the application test client
"""

from collections.abc import AsyncGenerator, Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from mongomock_motor import AsyncMongoMockClient

from src.adapters.repository.mongo import MongoConnection, MongoPetRepository, MongoUserRepository
from src.api.main import create_app
from src.config.settings import Settings

TEST_SECRET = "test-secret-key-that-is-long-enough-for-hs256"

VALID_PASSWORD = "Test1234!"


@pytest.fixture
def settings() -> Settings:
    """Settings for tests: cheap bcrypt rounds and a fixed token secret."""
    return Settings(
        jwt_token_secret=TEST_SECRET,
        bcrypt_cost=4,
        db_name="test_adopciones",
        phone_format="international",
        require_surname=False,
    )


@pytest.fixture
def connection(settings: Settings) -> MongoConnection:
    """Unopened connection backed by an in-memory MongoDB."""
    return MongoConnection("mongodb://localhost:27017", settings.db_name, client=AsyncMongoMockClient())


@pytest.fixture
async def connected(connection: MongoConnection) -> AsyncGenerator[MongoConnection, None]:
    """Opened in-memory connection with indexes in place."""
    await connection.connect()
    yield connection
    await connection.close()


@pytest.fixture
def pet_repository(connected: MongoConnection) -> MongoPetRepository:
    return MongoPetRepository(connected)


@pytest.fixture
def user_repository(connected: MongoConnection, settings: Settings) -> MongoUserRepository:
    return MongoUserRepository(connected, settings.schema_options)


@pytest.fixture
def app(settings: Settings, connection: MongoConnection) -> FastAPI:
    """Application wired to the in-memory connection."""
    return create_app(settings, connection)


@pytest.fixture
def client(app: FastAPI) -> Generator[TestClient, None, None]:
    """Test client with lifespan (connect/close) running."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


@pytest.fixture
def user_data() -> dict[str, object]:
    """Valid registration body."""
    return {
        "name": "Ana",
        "surname": "García",
        "email": "ana@example.com",
        "phone": "+5491112345678",
        "password": VALID_PASSWORD,
    }


@pytest.fixture
def pet_data() -> dict[str, object]:
    """Valid pet body."""
    return {
        "name": "Firulais",
        "kind": "Dog",
        "breed": "Mestizo",
        "age": 5,
        "description": "Friendly and calm",
    }
