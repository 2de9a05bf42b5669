"""Data models for userapi."""

from userapi.models.user import User, UserRecord
from userapi.models.pagination import Page, PaginationMeta, DEFAULT_PER_PAGE

__all__ = [
    "User",
    "UserRecord",
    "Page",
    "PaginationMeta",
    "DEFAULT_PER_PAGE",
]
