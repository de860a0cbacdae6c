"""
FastAPI dependencies - Dependency injection factories.

This module provides Depends() factories for injecting domain services
and infrastructure adapters into routes, the bearer-token guard, and
the request-body reader shared by JSON and form submissions.
"""

from typing import Any

from fastapi import Depends, HTTPException, Request, status
from starlette.formparsers import FormParser

from src.adapters.repository.mongo import MongoConnection, MongoPetRepository, MongoUserRepository
from src.api.middleware import media_type
from src.config.settings import Settings
from src.domain.accounts import AccountService
from src.domain.credentials import PasswordHasher
from src.domain.exceptions import InvalidTokenError
from src.domain.tokens import Identity, TokenIssuer

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"

_BEARER_CHALLENGE = {"WWW-Authenticate": "Bearer"}


def get_settings(request: Request) -> Settings:
    """Settings the app was created with."""
    return request.app.state.settings


def get_connection(request: Request) -> MongoConnection:
    """
    Get the database connection from app state.

    The connection is opened during app lifespan startup and stored in app.state.
    """
    return request.app.state.connection


def get_pet_repository(request: Request) -> MongoPetRepository:
    return MongoPetRepository(get_connection(request))


def get_user_repository(request: Request) -> MongoUserRepository:
    """Create user repository with the configured validation options."""
    return MongoUserRepository(get_connection(request), get_settings(request).schema_options)


def get_password_hasher(request: Request) -> PasswordHasher:
    return PasswordHasher(rounds=get_settings(request).bcrypt_cost)


def get_token_issuer(request: Request) -> TokenIssuer:
    settings = get_settings(request)
    return TokenIssuer(secret=settings.jwt_token_secret, ttl=settings.token_ttl)


def get_account_service(request: Request) -> AccountService:
    """
    Create account service with injected dependencies.

    Wires together the user repository, password hasher and token issuer.
    """
    return AccountService(
        users=get_user_repository(request),
        hasher=get_password_hasher(request),
        tokens=get_token_issuer(request),
        options=get_settings(request).schema_options,
    )


def require_identity(
    request: Request, tokens: TokenIssuer = Depends(get_token_issuer)
) -> Identity:
    """
    Guard for protected routes.

    Reads `Authorization: Bearer <token>`:
    - header absent: 401 "Token required"
    - any other scheme, or a token that fails verification: 401 "Invalid token"

    On success the identity is stored on request.state and returned.
    """
    header = request.headers.get("Authorization")
    if not header:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token required",
            headers=_BEARER_CHALLENGE,
        )

    scheme, _, token = header.partition(" ")
    try:
        if scheme.lower() != "bearer" or not token.strip():
            raise InvalidTokenError("not a bearer token")
        identity = tokens.verify(token.strip())
    except InvalidTokenError:
        # Same response for every failure cause
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token",
            headers=_BEARER_CHALLENGE,
        ) from None

    request.state.identity = identity
    return identity


async def request_payload(request: Request) -> dict[str, Any]:
    """
    Read the request body as a flat mapping.

    Accepts JSON objects and url-encoded forms. An empty body reads as {}.
    """
    if media_type(request) == FORM_CONTENT_TYPE:
        # Parsed directly so the media type match stays case-insensitive
        form = await FormParser(request.headers, request.stream()).parse()
        return dict(form)

    if not await request.body():
        return {}
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="malformed JSON body") from None
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="request body must be a JSON object")
    return payload
