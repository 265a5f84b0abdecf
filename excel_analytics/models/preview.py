from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from .jsonable import json_safe

"""Lightweight sheet preview built from the raw cell grid (no type inference).

Preview data is provisional: it is produced independently of the full sheet
processor and may disagree with it until the full parse completes.
"""

__all__ = [
    "SheetPreview",
]


@dataclass(frozen=True)
class SheetPreview:
    name: str
    columns: list[Any]  # header row as read
    row_count: int  # data rows, header excluded
    preview_data: list[list[Any]]  # header row + leading data rows

    @property
    def data_rows_shown(self) -> int:
        return max(len(self.preview_data) - 1, 0)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "columns": json_safe(self.columns),
            "rowCount": self.row_count,
            "previewData": json_safe(self.preview_data),
        }
