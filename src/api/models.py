"""
API request and response models.

Pydantic models for response serialization and OpenAPI schema
generation. Field names are camelCase on the wire.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, computed_field
from pydantic.alias_generators import to_camel

from src.domain import schemas
from src.domain.schemas import Pet, PetKind, Role, User


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class PetResponse(_CamelModel):
    """Pet as returned to clients, with its age in human years."""

    id: str
    name: str
    kind: PetKind
    breed: str | None = None
    age: int | None = None
    description: str | None = None
    adopted: bool = False
    adoption_date: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field(alias="humanAge")  # type: ignore[prop-decorator]
    @property
    def human_age(self) -> int | None:
        return schemas.human_age(self)

    @classmethod
    def from_record(cls, pet: Pet) -> "PetResponse":
        return cls.model_validate(pet)


class UserResponse(_CamelModel):
    """Sanitized user: the password hash never leaves the service."""

    id: str
    name: str
    surname: str | None = None
    email: str
    phone: str
    role: Role
    active: bool
    last_access: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @computed_field(alias="fullName")  # type: ignore[prop-decorator]
    @property
    def full_name(self) -> str:
        return schemas.full_name(self)

    @computed_field(alias="isAdmin")  # type: ignore[prop-decorator]
    @property
    def is_admin(self) -> bool:
        return schemas.is_admin(self)

    @classmethod
    def from_record(cls, user: User) -> "UserResponse":
        return cls.model_validate(user)


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    user: UserResponse


class LoginResponse(BaseModel):
    """Response model for successful login."""

    message: str
    user: UserResponse
    token: str


class ErrorResponse(BaseModel):
    """Standard error response model."""

    error: str
