"""Pagination result model for userapi."""

import math
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")

DEFAULT_PER_PAGE = 15
MAX_PER_PAGE = 1000
# Keeps (page - 1) * per_page inside a signed 64-bit OFFSET.
MAX_PAGE = 2**31 - 1


class PaginationMeta(BaseModel):
    """Metadata returned alongside a page of items."""

    current_page: int
    per_page: int
    total: int
    last_page: int
    from_: Optional[int] = Field(None, alias="from")
    to: Optional[int] = None

    model_config = ConfigDict(populate_by_name=True)


class Page(BaseModel, Generic[T]):
    """A single page of items plus the numbers needed to describe it."""

    items: List[T]
    total: int
    per_page: int
    current_page: int

    @property
    def last_page(self) -> int:
        return max(math.ceil(self.total / self.per_page), 1)

    @property
    def first_item(self) -> Optional[int]:
        """1-based index of the first item on this page (None if empty)."""
        if not self.items:
            return None
        return (self.current_page - 1) * self.per_page + 1

    @property
    def last_item(self) -> Optional[int]:
        if not self.items:
            return None
        return self.first_item + len(self.items) - 1

    def meta(self) -> PaginationMeta:
        return PaginationMeta(
            current_page=self.current_page,
            per_page=self.per_page,
            total=self.total,
            last_page=self.last_page,
            from_=self.first_item,
            to=self.last_item,
        )


def validate_page_args(per_page: int, page: int) -> None:
    """Raise ValueError unless both arguments are positive integers within bounds."""
    if not isinstance(per_page, int) or isinstance(per_page, bool) or not 1 <= per_page <= MAX_PER_PAGE:
        raise ValueError(f"per_page must be an integer between 1 and {MAX_PER_PAGE}, got {per_page!r}")
    if not isinstance(page, int) or isinstance(page, bool) or not 1 <= page <= MAX_PAGE:
        raise ValueError(f"page must be an integer between 1 and {MAX_PAGE}, got {page!r}")
