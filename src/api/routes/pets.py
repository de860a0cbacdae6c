"""
Pet routes.

Reads are public; creating, updating and deleting require a bearer token.
"""

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status

from src.adapters.repository.mongo import MongoPetRepository
from src.api.dependencies import get_pet_repository, request_payload, require_identity
from src.api.models import ErrorResponse, PetResponse
from src.domain.exceptions import NotFoundError
from src.domain.tokens import Identity

router = APIRouter(prefix="/api/mascotas", tags=["mascotas"])

_UNAUTHORIZED = {401: {"model": ErrorResponse, "description": "Missing or invalid token"}}
_NOT_FOUND = {404: {"model": ErrorResponse, "description": "Pet not found"}}
_INVALID = {400: {"model": ErrorResponse, "description": "Invalid field or id"}}


def _pet_not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="pet not found")


@router.post(
    "",
    response_model=PetResponse,
    status_code=status.HTTP_201_CREATED,
    responses={**_UNAUTHORIZED, **_INVALID},
    summary="Create a pet",
)
async def create_pet(
    _: Identity = Depends(require_identity),
    payload: dict[str, Any] = Depends(request_payload),
    pets: MongoPetRepository = Depends(get_pet_repository),
) -> PetResponse:
    return PetResponse.from_record(await pets.create(payload))


@router.get("", response_model=list[PetResponse], summary="List pets")
async def list_pets(pets: MongoPetRepository = Depends(get_pet_repository)) -> list[PetResponse]:
    return [PetResponse.from_record(pet) for pet in await pets.get_all()]


@router.get(
    "/{id}",
    response_model=PetResponse,
    responses={**_NOT_FOUND, **_INVALID},
    summary="Get a pet",
)
async def get_pet(id: str, pets: MongoPetRepository = Depends(get_pet_repository)) -> PetResponse:
    pet = await pets.get_one(id)
    if pet is None:
        raise _pet_not_found()
    return PetResponse.from_record(pet)


@router.put(
    "/{id}",
    response_model=PetResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND, **_INVALID},
    summary="Update a pet",
)
async def update_pet(
    id: str,
    _: Identity = Depends(require_identity),
    payload: dict[str, Any] = Depends(request_payload),
    pets: MongoPetRepository = Depends(get_pet_repository),
) -> PetResponse:
    """Partial update; fields not supplied keep their stored values."""
    try:
        pet = await pets.update(id, payload)
    except NotFoundError:
        raise _pet_not_found() from None
    return PetResponse.from_record(pet)


@router.delete(
    "/{id}",
    response_model=PetResponse,
    responses={**_UNAUTHORIZED, **_NOT_FOUND, **_INVALID},
    summary="Delete a pet",
)
async def delete_pet(
    id: str,
    _: Identity = Depends(require_identity),
    pets: MongoPetRepository = Depends(get_pet_repository),
) -> PetResponse:
    """Returns the removed pet."""
    pet = await pets.delete(id)
    if pet is None:
        raise _pet_not_found()
    return PetResponse.from_record(pet)
