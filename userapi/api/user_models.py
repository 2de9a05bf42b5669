"""Request/response models for user endpoints."""

from typing import List, Optional
from pydantic import BaseModel, EmailStr, Field, ValidationInfo, field_validator
from pydantic_core import PydanticCustomError

from userapi.models.pagination import PaginationMeta
from userapi.models.user import User

NAME_MAX_LENGTH = 255
EMAIL_MAX_LENGTH = 255
PASSWORD_MIN_LENGTH = 8


def _strip(value):
    return value.strip() if isinstance(value, str) else value


def _check_email_length(value: Optional[str]) -> Optional[str]:
    if value is not None and len(value) > EMAIL_MAX_LENGTH:
        raise PydanticCustomError(
            "string_too_long",
            "String should have at most {max_length} characters",
            {"max_length": EMAIL_MAX_LENGTH},
        )
    return value


class CreateUserRequest(BaseModel):
    """Request model for creating a user."""

    name: str = Field(..., min_length=1, max_length=NAME_MAX_LENGTH)
    email: EmailStr = Field(..., description="Must not already belong to another user")
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    password_confirmation: Optional[str] = Field(None, description="Must equal password")

    @field_validator("name", "email", mode="before")
    @classmethod
    def _strip_whitespace(cls, v):
        return _strip(v)

    @field_validator("email")
    @classmethod
    def _validate_email_length(cls, v):
        return _check_email_length(v)


class UpdateUserRequest(BaseModel):
    """Request model for a partial user update.

    Omitted fields are left unchanged; an explicit null is rejected.
    """

    name: Optional[str] = Field(None, min_length=1, max_length=NAME_MAX_LENGTH)
    email: Optional[EmailStr] = None
    password: Optional[str] = Field(None, min_length=PASSWORD_MIN_LENGTH)
    password_confirmation: Optional[str] = None

    @field_validator("name", "email", mode="before")
    @classmethod
    def _strip_whitespace(cls, v):
        return _strip(v)

    @field_validator("name", "email", "password")
    @classmethod
    def _reject_null(cls, v, info: ValidationInfo):
        if v is None:
            raise PydanticCustomError("not_null", "The {field} field must not be null.", {"field": info.field_name})
        return v

    @field_validator("email")
    @classmethod
    def _validate_email_length(cls, v):
        return _check_email_length(v)


class UserResponse(BaseModel):
    """Response model for reading a single user."""
    status: str = "success"
    data: User


class UserMutationResponse(BaseModel):
    """Response model for create/update."""
    status: str = "success"
    message: str
    data: User


class UserListResponse(BaseModel):
    """Response model for the paginated user list."""
    status: str = "success"
    data: List[User]
    pagination: PaginationMeta


class MessageResponse(BaseModel):
    """Envelope without data (delete, errors)."""
    status: str
    message: str
