from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from .jsonable import json_safe

__all__ = [
    "Page",
]

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of an ordered collection plus boundary metadata."""
    items: list[T]
    page: int
    limit: int
    total_items: int
    total_pages: int
    has_next_page: bool
    has_prev_page: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "items": json_safe(self.items),
            "page": self.page,
            "limit": self.limit,
            "totalItems": self.total_items,
            "totalPages": self.total_pages,
            "hasNextPage": self.has_next_page,
            "hasPrevPage": self.has_prev_page,
        }
