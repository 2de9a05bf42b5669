"""SQLAlchemy database models for userapi."""

from datetime import datetime, timezone
from sqlalchemy import Column, Integer, String, DateTime

from userapi.database.database import Base


def utcnow() -> datetime:
    """Naive UTC timestamp (SQLite does not keep tzinfo)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


class UserDB(Base):
    """Database model for User."""

    __tablename__ = "users"

    # Primary key (auto-assigned by the store)
    id = Column(Integer, primary_key=True, autoincrement=True)

    # User profile
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False, unique=True, index=True)

    # bcrypt hash, never the plaintext
    password = Column(String(255), nullable=False)

    # Timestamps
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def to_pydantic(self):
        """Convert database model to Pydantic model."""
        from userapi.models.user import UserRecord
        return UserRecord(
            id=self.id,
            name=self.name,
            email=self.email,
            password=self.password,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )
