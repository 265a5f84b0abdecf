from __future__ import annotations

import math
import statistics
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from ..models.cell_value import CellValue, DataType
from ..models.column import ColumnStatistics

"""Per-column descriptive statistics keyed on the inferred DataType.

Statistics are computed over non-null values only. Type-specific aggregates are
taken over the cells of the matching kind, so a stray text cell in a numeric
column does not poison min/max/sum.
"""

__all__ = [
    "calculate_statistics",
    "most_common_value",
]


def _cells(values: Sequence[Any]) -> list[CellValue]:
    return [v if isinstance(v, CellValue) else CellValue.of(v) for v in values]


def most_common_value(cells: Sequence[CellValue]) -> Any:
    """Return the value that first reaches the highest occurrence count.

    Scans left to right and replaces the current winner only when a value's
    running count strictly exceeds the best count so far.
    """
    frequency: dict[tuple[str, Any], int] = {}
    best_count = 0
    winner: Any = None
    for c in cells:
        key = c.identity()
        n = frequency.get(key, 0) + 1
        frequency[key] = n
        if n > best_count:
            best_count = n
            winner = c.value
    return winner


def _numeric_fields(cells: list[CellValue]) -> dict[str, Any]:
    nums = [c.value for c in cells if c.kind is DataType.NUMBER]
    if not nums:
        return {}
    total = sum(nums)
    mean = total / len(nums)
    out: dict[str, Any] = {
        "min": min(nums),
        "max": max(nums),
        "sum": total,
        "mean": mean,
    }
    if len(nums) > 1:
        # 母分散 (除数 = 件数)
        variance = statistics.pvariance(nums, mu=mean)
        out["variance"] = variance
        out["std_dev"] = math.sqrt(variance)
    return out


def _text(c: CellValue) -> str:
    return c.value if isinstance(c.value, str) else str(c.value)


def _string_fields(cells: list[CellValue]) -> dict[str, Any]:
    lengths = [len(_text(c)) for c in cells]
    return {
        "min_length": min(lengths),
        "max_length": max(lengths),
        "most_common": most_common_value(cells),
    }


def _comparable(dates: list[datetime]) -> list[datetime]:
    """Make naive and aware datetimes comparable (naive values taken as UTC)."""
    if all(d.tzinfo is None for d in dates) or all(d.tzinfo is not None for d in dates):
        return dates
    return [d.replace(tzinfo=UTC) if d.tzinfo is None else d for d in dates]


def _date_fields(cells: list[CellValue]) -> dict[str, Any]:
    dates = [c.as_datetime() for c in cells if c.kind is DataType.DATE]
    if not dates:
        return {}
    dates = _comparable(dates)
    return {"min": min(dates), "max": max(dates)}


def calculate_statistics(values: Sequence[Any], data_type: DataType) -> ColumnStatistics:
    """Compute the statistics record for one column.

    Args:
        values: Raw column values in row order (nulls included)
        data_type: The column's inferred DataType

    Returns:
        ColumnStatistics with count/null_count always set, unique_count when any
        non-null value exists, and the type-specific fields for number, string
        and date columns.
    """
    cells = _cells(values)
    present = [c for c in cells if not c.is_null]
    count = len(cells)
    null_count = count - len(present)
    if not present:
        return ColumnStatistics(count=count, null_count=null_count)

    unique_count = len({c.identity() for c in present})

    extra: dict[str, Any] = {}
    if data_type is DataType.NUMBER:
        extra = _numeric_fields(present)
    elif data_type is DataType.STRING:
        extra = _string_fields(present)
    elif data_type is DataType.DATE:
        extra = _date_fields(present)

    return ColumnStatistics(
        count=count,
        null_count=null_count,
        unique_count=unique_count,
        **extra,
    )
