from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from ..models.cell_value import CellValue, DataType

__all__ = [
    "classify_value",
    "infer_column_type",
]


def classify_value(value: Any) -> DataType:
    """Classify a single raw cell value.

    Text is tested for date-parseability before being treated as a plain string;
    numeric-looking text is not coerced to a number.
    """
    if isinstance(value, CellValue):
        return value.kind
    return CellValue.of(value).kind


def infer_column_type(values: Iterable[Any]) -> DataType:
    """Return the dominant DataType of a column.

    Every value is classified (nulls count toward ``null``). The type with the
    highest frequency wins; on a tie the type encountered first in the column
    wins. An empty column yields ``null``.
    """
    tally: dict[DataType, int] = {}
    for v in values:
        kind = classify_value(v)
        tally[kind] = tally.get(kind, 0) + 1

    dominant = DataType.NULL
    best = 0
    # dict は挿入順 = 初出順
    for kind, count in tally.items():
        if count > best:
            best = count
            dominant = kind
    return dominant
