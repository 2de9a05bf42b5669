"""Tests for the user-created notification job."""

import logging
from datetime import datetime
from unittest.mock import MagicMock

from userapi.jobs.user_created import (
    UserCreatedNotificationJob,
    WITHHELD_PASSWORD,
    format_user_created_message,
)
from userapi.models.user import User


def _user():
    created = datetime(2026, 1, 2, 3, 4, 5)
    return User(id=7, name="Jane Doe", email="jane@example.com", created_at=created, updated_at=created)


class TestFormatMessage:
    def test_withholds_password_by_default(self):
        message = format_user_created_message(_user(), {"password": "password123"})

        assert message.splitlines() == [
            "User name: Jane Doe",
            "Email: jane@example.com",
            f"Password: {WITHHELD_PASSWORD}",
            "Created at: 2026-01-02 03:04:05",
        ]

    def test_includes_password_when_enabled(self):
        message = format_user_created_message(_user(), {"password": "password123"}, include_password=True)
        assert "Password: password123" in message

    def test_omits_password_line_without_submitted_data(self):
        message = format_user_created_message(_user(), None, include_password=True)

        assert "Password" not in message
        assert message.endswith("Created at: 2026-01-02 03:04:05")


class TestUserCreatedNotificationJob:
    def test_sends_formatted_message(self):
        notifier = MagicMock()
        notifier.send.return_value = True

        UserCreatedNotificationJob(_user(), {"password": "password123"}, notifier, include_password=False).run()

        notifier.send.assert_called_once_with(
            format_user_created_message(_user(), {"password": "password123"}, include_password=False)
        )

    def test_unsuccessful_send_is_logged_not_raised(self, caplog):
        notifier = MagicMock()
        notifier.send.return_value = False

        with caplog.at_level(logging.ERROR, logger="userapi.jobs.user_created"):
            UserCreatedNotificationJob(_user(), {"password": "password123"}, notifier).run()

        assert "Send notification error. User id: 7" in caplog.text
        notifier.send.assert_called_once()

    def test_sender_exception_is_logged_not_raised(self, caplog):
        notifier = MagicMock()
        notifier.send.side_effect = TimeoutError("webhook timed out")

        with caplog.at_level(logging.ERROR, logger="userapi.jobs.user_created"):
            UserCreatedNotificationJob(_user(), None, notifier).run()

        assert "Send notification error. User id: 7: TimeoutError: webhook timed out" in caplog.text

    def test_submitted_fields_are_copied(self):
        submitted = {"password": "password123"}
        job = UserCreatedNotificationJob(_user(), submitted, MagicMock())
        submitted["password"] = "changed"
        assert job.submitted["password"] == "password123"
