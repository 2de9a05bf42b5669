"""Notification sent after a user account is created."""

import os
import logging
from typing import Mapping, Optional
from dotenv import load_dotenv

from userapi.models.user import User

load_dotenv()

logger = logging.getLogger(__name__)

# The original notification carried the plaintext password to the webhook.
# It is only included when explicitly enabled.
NOTIFY_INCLUDE_PASSWORD = os.getenv("NOTIFY_INCLUDE_PASSWORD", "False").lower() == "true"

WITHHELD_PASSWORD = "[withheld]"


def format_user_created_message(
    user: User,
    submitted: Optional[Mapping[str, object]],
    include_password: bool = False,
) -> str:
    """Build the plain-text notification for a newly created user.

    Args:
        user: Persisted user
        submitted: Fields as originally submitted (before hashing), may be None
        include_password: Embed the plaintext password instead of a placeholder

    Returns:
        Message text. The password line is omitted when nothing was submitted.
    """
    lines = [
        f"User name: {user.name}",
        f"Email: {user.email}",
    ]
    password = (submitted or {}).get("password")
    if password:
        lines.append(f"Password: {password if include_password else WITHHELD_PASSWORD}")
    lines.append(f"Created at: {user.created_at.isoformat(sep=' ', timespec='seconds')}")
    return "\n".join(lines)


class UserCreatedNotificationJob:
    """Send the user-created message through a notifier, once, best effort."""

    def __init__(self, user: User, submitted: Optional[Mapping[str, object]], notifier,
                 include_password: Optional[bool] = None):
        self.user = user
        self.submitted = dict(submitted) if submitted is not None else None
        self.notifier = notifier
        self.include_password = NOTIFY_INCLUDE_PASSWORD if include_password is None else include_password

    def run(self) -> None:
        error = f"Send notification error. User id: {self.user.id}"
        try:
            message = format_user_created_message(self.user, self.submitted, self.include_password)
            sent = self.notifier.send(message)
        except Exception as e:
            logger.error(f"{error}: {type(e).__name__}: {str(e)}")
            return
        if not sent:
            logger.error(error)
            return
        logger.info(f"Sent user-created notification for user {self.user.id}")
