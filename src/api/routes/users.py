"""
User routes.

Public: register and login. Everything else requires a bearer token.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from src.api.dependencies import get_account_service, request_payload, require_identity
from src.api.models import ErrorResponse, LoginResponse, RegisterResponse, UserResponse
from src.domain.accounts import AccountService
from src.domain.exceptions import (
    InvalidCredentials,
    NotFoundError,
    UserAlreadyExists,
    ValidationError,
)
from src.domain.tokens import Identity

router = APIRouter(prefix="/api/usuarios", tags=["usuarios"])

_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Missing or invalid token"}}
_NOT_FOUND = {404: {"model": ErrorResponse, "description": "User not found"}}


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Invalid field or user already exists"}},
    summary="Register a new user",
)
async def register(
    payload: dict[str, Any] = Depends(request_payload),
    service: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    """
    Register a new user.

    - **name**, **email**, **phone**, **password** are required
    - **surname** is optional unless the deployment requires it
    """
    try:
        user = await service.register(payload)
    except UserAlreadyExists:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="user already exists",
        ) from None
    return RegisterResponse(message="user registered", user=UserResponse.from_record(user))


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={401: {"model": ErrorResponse, "description": "Invalid credentials"}},
    summary="Log in and obtain a bearer token",
)
async def login(
    payload: dict[str, Any] = Depends(request_payload),
    service: AccountService = Depends(get_account_service),
) -> LoginResponse:
    for field in ("email", "password"):
        if not isinstance(payload.get(field), str) or not payload[field]:
            raise ValidationError(field, f"{field} is required")

    try:
        user, token = await service.login(payload["email"], payload["password"])
    except InvalidCredentials:
        # Unknown email and wrong password are reported identically
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="invalid credentials",
        ) from None
    return LoginResponse(message="authenticated", user=UserResponse.from_record(user), token=token)


@router.get(
    "/profile",
    response_model=UserResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    summary="Current user's profile",
)
async def profile(
    identity: Identity = Depends(require_identity),
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    try:
        user = await service.profile(identity)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found") from None
    return UserResponse.from_record(user)


def _method_not_allowed(allow: str) -> Callable[[], Awaitable[None]]:
    async def handler() -> None:
        raise HTTPException(status_code=status.HTTP_405_METHOD_NOT_ALLOWED, headers={"Allow": allow})

    return handler


# Registered before "/{id}" so these fixed paths never fall through to the id routes
for _path, _allow in (("/register", "POST"), ("/login", "POST"), ("/profile", "GET")):
    router.add_api_route(
        _path,
        _method_not_allowed(_allow),
        methods=sorted({"GET", "POST", "PUT", "PATCH", "DELETE"} - {_allow}),
        include_in_schema=False,
    )


@router.get("", response_model=list[UserResponse], responses=_UNAUTHORIZED, summary="List users")
async def list_users(
    _: Identity = Depends(require_identity),
    service: AccountService = Depends(get_account_service),
) -> list[UserResponse]:
    return [UserResponse.from_record(user) for user in await service.list_users()]


@router.get(
    "/{id}",
    response_model=UserResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    summary="Get a user",
)
async def get_user(
    id: str,
    _: Identity = Depends(require_identity),
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    try:
        user = await service.get_user(id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found") from None
    return UserResponse.from_record(user)


@router.put(
    "/{id}",
    response_model=UserResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    summary="Update a user",
)
async def update_user(
    id: str,
    _: Identity = Depends(require_identity),
    payload: dict[str, Any] = Depends(request_payload),
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    """Partial update; fields not supplied keep their stored values."""
    try:
        user = await service.update_user(id, payload)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found") from None
    return UserResponse.from_record(user)


@router.delete(
    "/{id}",
    response_model=UserResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND},
    summary="Delete a user",
)
async def delete_user(
    id: str,
    _: Identity = Depends(require_identity),
    service: AccountService = Depends(get_account_service),
) -> UserResponse:
    try:
        user = await service.delete_user(id)
    except NotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="user not found") from None
    return UserResponse.from_record(user)
