"""Repository for User database operations."""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from userapi.database.models import UserDB
from userapi.errors import DuplicateEmailError
from userapi.models.pagination import Page, DEFAULT_PER_PAGE, validate_page_args
from userapi.models.user import UserRecord

logger = logging.getLogger(__name__)

# Columns a caller may set; anything else in a payload is ignored.
WRITABLE_FIELDS = ("name", "email", "password")


def writable_fields(fields: Dict[str, object]) -> Dict[str, object]:
    return {key: fields[key] for key in WRITABLE_FIELDS if key in fields}


class BaseUserRepository(ABC):
    """Storage interface the service layer depends on."""

    @abstractmethod
    def get_all(self) -> List[UserRecord]:
        """All users in insertion order."""

    @abstractmethod
    def paginate(self, per_page: int = DEFAULT_PER_PAGE, page: int = 1) -> Page:
        """One page of users ordered by id."""

    @abstractmethod
    def get(self, user_id: int) -> Optional[UserRecord]:
        """User by id, or None."""

    @abstractmethod
    def get_by_email(self, email: str) -> Optional[UserRecord]:
        """User by email, or None."""

    @abstractmethod
    def create(self, fields: Dict[str, object]) -> UserRecord:
        """Insert a user. Raises DuplicateEmailError if the email exists."""

    @abstractmethod
    def update(self, user_id: int, fields: Dict[str, object]) -> bool:
        """Partial update. False if no user has this id."""

    @abstractmethod
    def delete(self, user_id: int) -> bool:
        """Hard delete. False if no user has this id."""

    @abstractmethod
    def transaction(self):
        """Context manager grouping writes into one atomic unit."""


class UserRepository(BaseUserRepository):
    """SQLAlchemy-backed repository for User database operations."""

    def __init__(self, db: Session):
        self.db = db
        self._in_transaction = False

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Commit every write made inside the block together, or none of them."""
        if self._in_transaction:
            yield
            return

        self._in_transaction = True
        try:
            yield
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise
        finally:
            self._in_transaction = False

    def _commit(self) -> None:
        # Inside transaction() the block owner commits; just push SQL so ids are assigned.
        if self._in_transaction:
            self.db.flush()
        else:
            self.db.commit()

    def _raise_if_email_taken(self, email: Optional[object], error: IntegrityError) -> None:
        """Translate a failed write into DuplicateEmailError when the email is the cause."""
        if email and self.get_by_email(str(email)) is not None:
            raise DuplicateEmailError(str(email)) from error

    def get_all(self) -> List[UserRecord]:
        """Get all users ordered by id."""
        users_db = self.db.query(UserDB).order_by(UserDB.id).all()
        return [user_db.to_pydantic() for user_db in users_db]

    def paginate(self, per_page: int = DEFAULT_PER_PAGE, page: int = 1) -> Page:
        """Get one page of users ordered by id.

        Args:
            per_page: Page size (positive integer)
            page: 1-based page number (positive integer)

        Returns:
            Page with the users on that page and the total row count
        """
        validate_page_args(per_page, page)
        query = self.db.query(UserDB)
        total = query.count()
        users_db = (
            query.order_by(UserDB.id)
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return Page(
            items=[user_db.to_pydantic() for user_db in users_db],
            total=total,
            per_page=per_page,
            current_page=page,
        )

    def get(self, user_id: int) -> Optional[UserRecord]:
        """Get user by ID."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        return user_db.to_pydantic() if user_db else None

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        """Get user by email."""
        user_db = self.db.query(UserDB).filter(UserDB.email == email).first()
        return user_db.to_pydantic() if user_db else None

    def create(self, fields: Dict[str, object]) -> UserRecord:
        """Create a new user.

        Args:
            fields: name, email and an already-hashed password

        Returns:
            Created UserRecord with generated id and timestamps

        Raises:
            DuplicateEmailError: If the email is already stored
        """
        try:
            user_db = UserDB(**writable_fields(fields))
            self.db.add(user_db)
            self._commit()
            self.db.refresh(user_db)
            logger.debug(f"Created user {user_db.id}: {user_db.email}")
            return user_db.to_pydantic()
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Failed to create user {fields.get('email')}: {type(e).__name__}: {str(e.orig)}")
            self._raise_if_email_taken(fields.get("email"), e)
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to create user {fields.get('email')}: {type(e).__name__}: {str(e)}")
            raise

    def update(self, user_id: int, fields: Dict[str, object]) -> bool:
        """Update the given fields of a user.

        Returns:
            True if the user exists (an empty update is a successful no-op), False otherwise
        """
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        if not user_db:
            return False

        values = writable_fields(fields)
        if not values:
            return True

        for key, value in values.items():
            setattr(user_db, key, value)

        try:
            self._commit()
            logger.debug(f"Updated user {user_id}: {sorted(values)}")
            return True
        except IntegrityError as e:
            self.db.rollback()
            logger.error(f"Failed to update user {user_id}: {type(e).__name__}: {str(e.orig)}")
            self._raise_if_email_taken(values.get("email"), e)
            raise
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to update user {user_id}: {type(e).__name__}: {str(e)}")
            raise

    def delete(self, user_id: int) -> bool:
        """Permanently delete a user by ID."""
        user_db = self.db.query(UserDB).filter(UserDB.id == user_id).first()
        if not user_db:
            return False

        try:
            self.db.delete(user_db)
            self._commit()
            logger.debug(f"Deleted user {user_id}")
            return True
        except Exception as e:
            self.db.rollback()
            logger.error(f"Failed to delete user {user_id}: {type(e).__name__}: {str(e)}")
            raise
