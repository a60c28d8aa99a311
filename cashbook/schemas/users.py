"""Pydantic schemas for user administration."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from cashbook.models.user import RoleName, normalize_email


def _validate_name(value: str) -> str:
    if not value or len(value.strip()) < 2:
        raise ValueError("El nombre debe tener al menos 2 caracteres")
    return value.strip()


def _validate_email(value: str) -> str:
    if not value or "@" not in value:
        raise ValueError("El email debe ser válido")
    return normalize_email(value)


class UserInput(BaseModel):
    """Body for creating a user. Email is stored lower-case."""

    name: str = Field(..., max_length=255, description="Display name")
    email: str = Field(..., max_length=320, description="Email (unique, case-insensitive)")
    role: RoleName = Field(default="USER", description="USER or ADMIN")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)


class UserUpdateInput(BaseModel):
    """Body for PUT /users/{id}. An omitted role leaves the stored role unchanged."""

    name: str = Field(..., max_length=255, description="Display name")
    email: str = Field(..., max_length=320, description="Email (unique, case-insensitive)")
    role: RoleName | None = Field(default=None, description="USER or ADMIN; omit to keep")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        return _validate_name(v)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        return _validate_email(v)


class UserOut(BaseModel):
    """User as returned by the admin endpoints (no password hash)."""

    id: str
    name: str
    email: str
    phone: str | None = None
    role: RoleName
    createdAt: datetime = Field(validation_alias="created_at")

    model_config = {"from_attributes": True, "populate_by_name": True}


class UserDeleteRequest(BaseModel):
    """Body for DELETE /users."""

    userId: str = Field(..., min_length=1, max_length=64)


class DeletedUser(BaseModel):
    id: str
    email: str


class UserDeleteResponse(BaseModel):
    message: str
    deletedUser: DeletedUser
