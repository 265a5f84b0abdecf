from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .column import ColumnDescriptor
from .jsonable import json_safe

"""ProcessedSheet document model.

One ProcessedSheet is produced per (file, sheet) pair. The caller owns it and is
expected to persist it keyed uniquely by that pair.
"""

__all__ = [
    "SheetSummary",
    "ProcessedSheet",
]


@dataclass(frozen=True)
class SheetSummary:
    """Whole-sheet summary counters."""
    row_count: int
    column_count: int
    empty_rows: int
    data_types: dict[str, int]  # dataType -> number of columns

    def to_dict(self) -> dict[str, Any]:
        return {
            "rowCount": self.row_count,
            "columnCount": self.column_count,
            "emptyRows": self.empty_rows,
            "dataTypes": dict(self.data_types),
        }


@dataclass(frozen=True)
class ProcessedSheet:
    """Result of processing one worksheet.

    ``data`` rows are keyed by sanitized column names, in the same order as
    ``columns``. ``summary`` is None for a sheet without data rows.
    """
    sheet_name: str
    columns: list[ColumnDescriptor] = field(default_factory=list)
    data: list[dict[str, Any]] = field(default_factory=list)
    summary: SheetSummary | None = None

    @property
    def row_count(self) -> int:
        return len(self.data)

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    def column(self, name: str) -> ColumnDescriptor | None:
        for c in self.columns:
            if c.name == name:
                return c
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the JSON document handed to the persistence layer."""
        return {
            "sheetName": self.sheet_name,
            "columns": [c.to_dict() for c in self.columns],
            "data": [json_safe(row) for row in self.data],
            "rowCount": self.row_count,
            "summary": self.summary.to_dict() if self.summary is not None else {},
        }
