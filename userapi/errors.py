"""Exceptions shared by the repository and service layers."""


class UserServiceError(Exception):
    """Base class for user-management failures."""


class DuplicateEmailError(UserServiceError):
    """The store rejected a write because the email is already taken."""

    def __init__(self, email: str):
        super().__init__(f"The email {email!r} has already been taken.")
        self.email = email
