"""
FastAPI application factory and configuration.

This module creates the FastAPI application instance,
configures middleware, exception handlers, and lifespan events.
"""

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request

from src.adapters.repository.mongo import MongoConnection
from src.api.errors import register_exception_handlers
from src.api.middleware import require_supported_content_type
from src.api.routes import pets_router, users_router
from src.config.settings import Settings, get_settings

logger = logging.getLogger(__name__)

# OpenAPI tags for documentation grouping
tags_metadata = [
    {
        "name": "usuarios",
        "description": "User registration, login and management",
    },
    {
        "name": "mascotas",
        "description": "Pets available for adoption",
    },
]


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    FastAPI lifespan context manager.

    Manages application startup and shutdown:
    - Creates the database connection on startup (unless one was injected)
    - Ensures indexes on startup
    - Closes the connection on shutdown; a failed close is recorded on
      app.state.shutdown_failed so the process can exit non-zero
    """
    settings: Settings = app.state.settings

    logger.info("Starting application...")
    logger.info("Connecting to database...")

    if app.state.connection is None:
        app.state.connection = MongoConnection(settings.database_url, settings.db_name)
    connection: MongoConnection = app.state.connection
    await connection.connect()

    logger.info("Application startup complete")

    yield

    # Shutdown
    logger.info("Shutting down application...")
    try:
        await connection.close()
    except Exception:
        logger.exception("Error closing the database connection")
        app.state.shutdown_failed = True


def create_app(settings: Settings | None = None, connection: MongoConnection | None = None) -> FastAPI:
    """
    Build the application.

    Args:
        settings: Configuration; defaults to environment settings
        connection: Database connection to use instead of one built from settings
    """
    app = FastAPI(
        title="adopciones",
        description="Pet adoption API - users, authentication and pets",
        version="0.1.0",
        openapi_tags=tags_metadata,
        lifespan=lifespan,
    )
    app.state.settings = settings or get_settings()
    app.state.connection = connection
    app.state.shutdown_failed = False

    app.middleware("http")(require_supported_content_type)
    register_exception_handlers(app)

    app.include_router(users_router)
    app.include_router(pets_router)

    @app.get("/health")
    async def health_check(request: Request) -> dict[str, str]:
        """
        Health check endpoint with database validation.

        Returns 200 OK if application and database are healthy.
        Raises exception if database connection fails.
        """
        await request.app.state.connection.ping()
        return {"status": "healthy"}

    return app


app = create_app()
