from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

from .cell_value import DataType
from .jsonable import json_safe

"""Column metadata models.

ColumnDescriptor is created once per column while a sheet is processed and never
mutated afterwards; reprocessing a sheet produces a new descriptor set.
"""

__all__ = [
    "ColumnStatistics",
    "ColumnDescriptor",
]

# dataclass field -> document key
_STAT_KEYS = {
    "count": "count",
    "null_count": "nullCount",
    "unique_count": "uniqueCount",
    "min": "min",
    "max": "max",
    "sum": "sum",
    "mean": "mean",
    "variance": "variance",
    "std_dev": "stdDev",
    "min_length": "minLength",
    "max_length": "maxLength",
    "most_common": "mostCommon",
}


@dataclass(frozen=True)
class ColumnStatistics:
    """Descriptive statistics for one column.

    ``count`` and ``null_count`` are always set. ``unique_count`` is set when the
    column holds at least one non-null value; the remaining fields depend on the
    column's DataType and stay None when they do not apply.
    """
    count: int
    null_count: int
    unique_count: int | None = None
    # number / date
    min: Any = None
    max: Any = None
    # number
    sum: float | None = None
    mean: float | None = None
    variance: float | None = None
    std_dev: float | None = None
    # string
    min_length: int | None = None
    max_length: int | None = None
    most_common: Any = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None and f.name not in ("count", "null_count"):
                continue
            out[_STAT_KEYS[f.name]] = json_safe(value)
        return out


@dataclass(frozen=True)
class ColumnDescriptor:
    """Structured metadata describing one processed column."""
    name: str  # sanitized, unique within the sheet
    original_name: str  # header as read (not necessarily unique after sanitizing)
    data_type: DataType
    statistics: ColumnStatistics
    nullable: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "originalName": self.original_name,
            "dataType": self.data_type.value,
            "statistics": self.statistics.to_dict(),
            "nullable": self.nullable,
        }
