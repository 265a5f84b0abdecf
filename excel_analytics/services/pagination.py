from __future__ import annotations

import math
from collections.abc import Sequence
from typing import Any, TypeVar

from ..models.page import Page

__all__ = [
    "DATA_PAGE_LIMIT",
    "TABLE_PAGE_LIMIT",
    "parse_positive_int",
    "paginate",
]

DATA_PAGE_LIMIT = 100  # data / analyze views
TABLE_PAGE_LIMIT = 10  # table views

T = TypeVar("T")


def parse_positive_int(value: Any, default: int) -> int:
    """Parse a query-style value; absent, unparseable or non-positive -> default.

    >>> parse_positive_int("3", 1)
    3
    >>> parse_positive_int("0", 10)
    10
    >>> parse_positive_int(None, 100)
    100
    """
    if value is None or isinstance(value, bool):
        return default
    if isinstance(value, int):
        parsed = value
    else:
        try:
            parsed = int(str(value).strip())
        except ValueError:
            return default
    return parsed if parsed > 0 else default


def paginate(
    items: Sequence[T], page: Any = None, limit: Any = None, *, default_limit: int = DATA_PAGE_LIMIT
) -> Page[T]:
    """Slice an ordered collection into one page.

    Args:
        items: Ordered collection (rows, records, ...)
        page: 1-based page number; defaults to 1
        limit: Page size; defaults to ``default_limit``
        default_limit: Caller-chosen default page size

    Returns:
        Page with the slice and boundary metadata. A page past the end has no
        items.
    """
    page_no = parse_positive_int(page, 1)
    size = parse_positive_int(limit, default_limit)
    total = len(items)
    total_pages = math.ceil(total / size) if total else 0

    start = min((page_no - 1) * size, total)
    end = min(page_no * size, total)
    return Page(
        items=list(items[start:end]),
        page=page_no,
        limit=size,
        total_items=total,
        total_pages=total_pages,
        has_next_page=end < total,
        has_prev_page=page_no > 1,
    )
