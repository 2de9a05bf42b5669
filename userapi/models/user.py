"""User data models for userapi."""

from datetime import datetime
from pydantic import BaseModel, Field


class User(BaseModel):
    """Public view of a user (what the API returns)."""

    id: int = Field(..., description="Auto-assigned user identifier")
    name: str = Field(..., description="User display name")
    email: str = Field(..., description="User email address (unique)")
    created_at: datetime = Field(..., description="User creation timestamp")
    updated_at: datetime = Field(..., description="User last update timestamp")


class UserRecord(User):
    """Stored user, including the password hash.

    Only repositories and the service see this model; the API converts it to
    `User` before responding.
    """

    password: str = Field(..., repr=False, description="bcrypt hash of the password")

    def to_public(self) -> User:
        return User(**self.model_dump(exclude={"password"}))
