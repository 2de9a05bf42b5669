"""In-memory user store.

Same contract as `UserRepository` without a database: used by service tests
and anywhere a throwaway store is enough.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional

from userapi.database.models import utcnow
from userapi.database.user_repository import BaseUserRepository, writable_fields
from userapi.errors import DuplicateEmailError
from userapi.models.pagination import Page, DEFAULT_PER_PAGE, validate_page_args
from userapi.models.user import UserRecord

logger = logging.getLogger(__name__)


class InMemoryUserRepository(BaseUserRepository):
    """Dict-backed repository keyed by user id."""

    def __init__(self):
        self._users: Dict[int, UserRecord] = {}
        self._next_id = 1
        self._lock = threading.RLock()

    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Restore the previous contents if the block raises."""
        with self._lock:
            users_snapshot = dict(self._users)
            next_id_snapshot = self._next_id
            try:
                yield
            except Exception:
                self._users = users_snapshot
                self._next_id = next_id_snapshot
                raise

    def _email_owner(self, email: str) -> Optional[UserRecord]:
        for user in self._users.values():
            if user.email == email:
                return user
        return None

    def get_all(self) -> List[UserRecord]:
        with self._lock:
            return [self._users[user_id] for user_id in sorted(self._users)]

    def paginate(self, per_page: int = DEFAULT_PER_PAGE, page: int = 1) -> Page:
        validate_page_args(per_page, page)
        users = self.get_all()
        start = (page - 1) * per_page
        return Page(
            items=users[start:start + per_page],
            total=len(users),
            per_page=per_page,
            current_page=page,
        )

    def get(self, user_id: int) -> Optional[UserRecord]:
        with self._lock:
            return self._users.get(user_id)

    def get_by_email(self, email: str) -> Optional[UserRecord]:
        with self._lock:
            return self._email_owner(email)

    def create(self, fields: Dict[str, object]) -> UserRecord:
        values = writable_fields(fields)
        with self._lock:
            if self._email_owner(values.get("email")) is not None:
                logger.error(f"Failed to create user {values.get('email')}: email already taken")
                raise DuplicateEmailError(str(values.get("email")))

            now = utcnow()
            user = UserRecord(id=self._next_id, created_at=now, updated_at=now, **values)
            self._users[user.id] = user
            self._next_id += 1
            logger.debug(f"Created user {user.id}: {user.email}")
            return user

    def update(self, user_id: int, fields: Dict[str, object]) -> bool:
        values = writable_fields(fields)
        with self._lock:
            user = self._users.get(user_id)
            if user is None:
                return False
            if not values:
                return True

            if "email" in values:
                owner = self._email_owner(values["email"])
                if owner is not None and owner.id != user_id:
                    logger.error(f"Failed to update user {user_id}: email already taken")
                    raise DuplicateEmailError(str(values["email"]))

            self._users[user_id] = user.model_copy(update={**values, "updated_at": utcnow()})
            logger.debug(f"Updated user {user_id}: {sorted(values)}")
            return True

    def delete(self, user_id: int) -> bool:
        with self._lock:
            if self._users.pop(user_id, None) is None:
                return False
            logger.debug(f"Deleted user {user_id}")
            return True
