"""
Entity schemas - Declarative constraint sets for pet and user records.

Each field is an Annotated type that carries its validator, so the
rule and its message live next to the field declaration. Validation
failures are raised as the domain ValidationError, scoped to the first
failing field (camelCase, as clients send it).

Derived attributes (human age, full name, admin check) are plain
functions of a record and are never persisted.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from enum import Enum
from functools import partial
from typing import Annotated, Any, Literal, TypeVar

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    ValidationInfo,
    field_validator,
)
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from .exceptions import ValidationError
from .validators import (
    ValidationResult,
    validate_age,
    validate_email,
    validate_international_phone,
    validate_length,
    validate_local_phone,
    validate_not_future,
    validate_password,
)


class PetKind(str, Enum):
    """Species accepted by the shelter."""

    DOG = "Dog"
    CAT = "Cat"
    RABBIT = "Rabbit"


class Role(str, Enum):
    ADMIN = "admin"
    USER = "user"


PhoneFormat = Literal["international", "local"]

_PHONE_VALIDATORS: dict[str, Callable[[Any], ValidationResult]] = {
    "international": validate_international_phone,
    "local": validate_local_phone,
}


@dataclass(frozen=True)
class SchemaOptions:
    """
    Deployment choices that change user validation.

    Attributes:
        phone_format: "international" (+E.164 style) or "local" (011 1234 5678)
        require_surname: Whether users must provide a surname
    """

    phone_format: PhoneFormat = "international"
    require_surname: bool = False


def rule(check: Callable[[Any], ValidationResult]) -> AfterValidator:
    """Attach a validator to an Annotated field; a failing result becomes a ValueError."""

    def _apply(value: Any) -> Any:
        result = check(value)
        if not result:
            raise ValueError(result.message)
        return value

    return AfterValidator(_apply)


Trimmed = StringConstraints(strip_whitespace=True)

Name = Annotated[str, Trimmed, rule(partial(validate_length, label="name", minimum=2, maximum=50))]
Surname = Annotated[
    str, Trimmed, rule(partial(validate_length, label="surname", minimum=2, maximum=50))
]
Breed = Annotated[str, Trimmed, rule(partial(validate_length, label="breed", maximum=50))]
Description = Annotated[
    str, Trimmed, rule(partial(validate_length, label="description", maximum=500))
]
Age = Annotated[int, rule(validate_age)]
AdoptionDate = Annotated[datetime, rule(partial(validate_not_future, label="adoptionDate"))]
Email = Annotated[str, StringConstraints(strip_whitespace=True, to_lower=True), rule(validate_email)]
Phone = Annotated[str, Trimmed]
Password = Annotated[str, rule(validate_password)]


def _blank_to_none(value: Any) -> Any:
    return None if isinstance(value, str) and not value.strip() else value


# Blank form inputs on optional fields count as absent
BlankAsNone = BeforeValidator(_blank_to_none)


class _Schema(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        use_enum_values=True,
    )


def _options(info: ValidationInfo) -> SchemaOptions:
    context = info.context or {}
    return context.get("options") or SchemaOptions()


class PetFields(_Schema):
    """Stored fields of a pet."""

    name: Name
    kind: PetKind
    breed: Annotated[Breed | None, BlankAsNone] = None
    age: Annotated[Age | None, BlankAsNone] = None
    description: Annotated[Description | None, BlankAsNone] = None
    adopted: bool = False
    adoption_date: Annotated[AdoptionDate | None, BlankAsNone] = None


class Pet(PetFields):
    """Pet as read back from the store."""

    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class _Contact(_Schema):
    """Identity fields shared by stored users and registration input."""

    name: Name
    surname: Annotated[Surname | None, BlankAsNone] = Field(default=None, validate_default=True)
    email: Email
    phone: Phone

    @field_validator("surname")
    @classmethod
    def _surname_presence(cls, value: str | None, info: ValidationInfo) -> str | None:
        if value is None and _options(info).require_surname:
            raise ValueError("surname is required")
        return value

    @field_validator("phone")
    @classmethod
    def _phone_format(cls, value: str, info: ValidationInfo) -> str:
        result = _PHONE_VALIDATORS[_options(info).phone_format](value)
        if not result:
            raise ValueError(result.message)
        return value


class UserFields(_Contact):
    """Stored fields of a user. Only the password hash is ever persisted."""

    password_hash: str = Field(min_length=1)
    role: Role = Field(default=Role.USER, validate_default=True)
    active: bool = True
    last_access: datetime = Field(default_factory=lambda: datetime.now(UTC))


class User(UserFields):
    """User as read back from the store."""

    id: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class Registration(_Contact):
    """Registration input: contact fields plus the plaintext password."""

    password: Password


SchemaT = TypeVar("SchemaT", bound=_Schema)


def _describe(field: str, error: Mapping[str, Any]) -> str:
    kind = error["type"]
    if kind == "missing" or error.get("input", ...) is None:
        return f"{field} is required"
    if kind == "value_error":
        return str(error["ctx"]["error"])
    if kind == "enum":
        return f"{error['input']} is not a valid {field}"
    if kind.startswith("int_"):
        return f"{field} must be a whole number"
    if kind.startswith("bool_"):
        return f"{field} must be true or false"
    if kind.startswith(("datetime_", "date_")):
        return f"{field} must be a valid date"
    if kind == "string_type":
        return f"{field} must be a string"
    return f"{field}: {error['msg']}"


def _validate(
    schema: type[SchemaT], data: Mapping[str, Any], options: SchemaOptions | None
) -> SchemaT:
    try:
        return schema.model_validate(dict(data), context={"options": options or SchemaOptions()})
    except PydanticValidationError as e:
        error = e.errors()[0]
        field = ".".join(str(part) for part in error["loc"]) or "record"
        raise ValidationError(field, _describe(field, error)) from None


def validate_pet(data: Mapping[str, Any]) -> PetFields:
    """
    Validate pet fields synchronously.

    Raises:
        ValidationError: Scoped to the first failing field
    """
    return _validate(PetFields, data, None)


async def validate_pet_async(data: Mapping[str, Any]) -> PetFields:
    """Awaitable counterpart of validate_pet with the same outcome."""
    return validate_pet(data)


def validate_user(data: Mapping[str, Any], options: SchemaOptions | None = None) -> UserFields:
    """
    Validate stored user fields synchronously.

    Raises:
        ValidationError: Scoped to the first failing field
    """
    return _validate(UserFields, data, options)


async def validate_user_async(
    data: Mapping[str, Any], options: SchemaOptions | None = None
) -> UserFields:
    """Awaitable counterpart of validate_user with the same outcome."""
    return validate_user(data, options)


def validate_registration(
    data: Mapping[str, Any], options: SchemaOptions | None = None
) -> Registration:
    return _validate(Registration, data, options)


_HUMAN_AGE_FACTORS = {PetKind.DOG: 7, PetKind.CAT: 6}


def human_age(pet: PetFields) -> int | None:
    """Age in human years: x7 for dogs, x6 for cats, unchanged otherwise."""
    if pet.age is None:
        return None
    return pet.age * _HUMAN_AGE_FACTORS.get(pet.kind, 1)


def full_name(user: _Contact) -> str:
    return " ".join(part.strip() for part in (user.name, user.surname) if part)


def is_admin(user: UserFields) -> bool:
    return user.role == Role.ADMIN
