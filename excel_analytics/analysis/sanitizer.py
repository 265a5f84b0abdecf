from __future__ import annotations

import re

__all__ = [
    "sanitize_column_name",
    "ColumnNameRegistry",
]

_WHITESPACE_RE = re.compile(r"\s+")
_UNSAFE_RE = re.compile(r"[^a-zA-Z0-9_]")
_LEADING_RE = re.compile(r"^[0-9_]")


def sanitize_column_name(original: object) -> str:
    """Map an arbitrary header to a storage-safe identifier.

    >>> sanitize_column_name("Sales Amount (USD)")
    'sales_amount_usd'
    >>> sanitize_column_name("2023")
    'col_2023'
    """
    cleaned = _WHITESPACE_RE.sub("_", str(original))
    cleaned = cleaned.replace(".", "_")
    cleaned = _UNSAFE_RE.sub("", cleaned).lower()
    if _LEADING_RE.match(cleaned):
        cleaned = "col_" + cleaned
    if not cleaned:
        cleaned = "column"
    return cleaned


class ColumnNameRegistry:
    """Assigns unique sanitized names within one sheet.

    Create one registry per processing call; it is never shared between sheets.
    Colliding names get the first free ``_1``, ``_2``, ... suffix in the order
    headers are registered.
    """

    def __init__(self) -> None:
        self._originals: dict[str, str] = {}

    def register(self, original: str) -> str:
        base = sanitize_column_name(original)
        unique = base
        counter = 1
        while unique in self._originals:
            unique = f"{base}_{counter}"
            counter += 1
        self._originals[unique] = original
        return unique

    def original_of(self, name: str) -> str:
        return self._originals[name]

    @property
    def mapping(self) -> dict[str, str]:
        """Unique sanitized name -> original header, in registration order."""
        return dict(self._originals)

    def __contains__(self, name: object) -> bool:
        return name in self._originals

    def __len__(self) -> int:
        return len(self._originals)
