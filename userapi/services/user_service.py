"""Business logic for user management."""

import logging
from typing import Any, Dict, List, Mapping, Optional

from userapi.auth.passwords import hash_password, verify_password
from userapi.database.user_repository import BaseUserRepository
from userapi.jobs.user_created import UserCreatedNotificationJob
from userapi.models.pagination import Page, DEFAULT_PER_PAGE
from userapi.models.user import UserRecord

logger = logging.getLogger(__name__)


class UserService:
    """Orchestrates repository calls, password hashing and the created-user notification."""

    def __init__(self, repository: BaseUserRepository, job_queue, notifier,
                 include_password_in_notification: Optional[bool] = None):
        """Initialize the service.

        Args:
            repository: User storage
            job_queue: Queue the user-created notification is submitted to
            notifier: Sender handed to the notification job (e.g. SlackClient)
            include_password_in_notification: Overrides NOTIFY_INCLUDE_PASSWORD when set
        """
        self.repository = repository
        self.job_queue = job_queue
        self.notifier = notifier
        self.include_password_in_notification = include_password_in_notification

    def get_all_users(self) -> List[UserRecord]:
        return self.repository.get_all()

    def get_users_paginated(self, per_page: int = DEFAULT_PER_PAGE, page: int = 1) -> Page:
        return self.repository.paginate(per_page, page)

    def get_user_by_id(self, user_id: int) -> Optional[UserRecord]:
        return self.repository.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[UserRecord]:
        return self.repository.get_by_email(email)

    def user_exists_by_email(self, email: str) -> bool:
        return self.get_user_by_email(email) is not None

    def create_user(self, fields: Mapping[str, Any]) -> UserRecord:
        """Create a user and queue the user-created notification.

        The insert runs in a transaction; the job is queued only after it
        commits, with the fields as submitted (plaintext password included).

        Raises:
            DuplicateEmailError: If the email is already stored (nothing is queued)
        """
        submitted = dict(fields)
        with self.repository.transaction():
            data = {**submitted, "password": hash_password(submitted["password"])}
            user = self.repository.create(data)

        job = UserCreatedNotificationJob(
            user.to_public(),
            submitted,
            self.notifier,
            include_password=self.include_password_in_notification,
        )
        self.job_queue.enqueue(job.run)
        logger.info(f"Created user {user.id}")
        return user

    def update_user(self, user_id: int, fields: Mapping[str, Any]) -> bool:
        """Update a user; a supplied password is re-hashed before storage."""
        data: Dict[str, Any] = dict(fields)
        if data.get("password") is not None:
            data["password"] = hash_password(data["password"])
        return self.repository.update(user_id, data)

    def delete_user(self, user_id: int) -> bool:
        return self.repository.delete(user_id)

    def authenticate(self, email: str, password: str) -> Optional[UserRecord]:
        """Return the user if the plaintext password matches the stored hash."""
        user = self.repository.get_by_email(email)
        if user is None or not verify_password(password, user.password):
            return None
        return user
