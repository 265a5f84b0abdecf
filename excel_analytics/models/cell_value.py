from __future__ import annotations

import json
import math
from dataclasses import dataclass
from datetime import date, datetime, time
from enum import Enum
from typing import Any

import numpy as np
import pandas as pd
from dateutil import parser as dateparser

"""Cell value model.

Raw cells arrive from pandas/openpyxl as an open set of Python and numpy types.
CellValue closes that set at the read boundary: every cell is tagged with exactly
one DataType so the statistics and inference code can branch on ``kind`` instead
of re-testing runtime types.

Classification policy (kept deliberately simple):
- text is tested for date-parseability first (permissive ``dateutil`` parser),
  and is never coerced to a number even when it looks numeric
- native date/datetime cells (openpyxl returns them typed) are ``date``
- NaN / NaT / None are ``null``
"""

__all__ = [
    "DataType",
    "CellValue",
    "parses_as_date",
    "to_python_scalar",
]


class DataType(Enum):
    """Column / cell data type vocabulary."""
    STRING = "string"
    NUMBER = "number"
    DATE = "date"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    NULL = "null"
    MIXED = "mixed"


def parses_as_date(text: str) -> bool:
    """Return True when ``text`` parses as a calendar date under dateutil."""
    try:
        dateparser.parse(text)
    except (ValueError, OverflowError):
        return False
    return True


def to_python_scalar(raw: Any) -> Any:
    """Unwrap numpy / pandas scalars and map missing markers to None."""
    if raw is None or raw is pd.NA or raw is pd.NaT:
        return None
    if isinstance(raw, np.generic):
        raw = raw.item()
    if isinstance(raw, float) and math.isnan(raw):
        return None
    if isinstance(raw, pd.Timestamp):
        return raw.to_pydatetime()
    return raw


@dataclass(frozen=True)
class CellValue:
    """A single cell tagged with its DataType.

    ``value`` keeps the cell as read (a date-like string stays a string), so
    re-keyed rows carry the original representation.
    """
    kind: DataType
    value: Any

    @staticmethod
    def of(raw: Any) -> CellValue:
        value = to_python_scalar(raw)
        if value is None:
            return CellValue(DataType.NULL, None)
        # bool は int のサブクラスなので先に判定
        if isinstance(value, bool):
            return CellValue(DataType.BOOLEAN, value)
        if isinstance(value, (int, float)):
            return CellValue(DataType.NUMBER, value)
        if isinstance(value, str):
            kind = DataType.DATE if parses_as_date(value) else DataType.STRING
            return CellValue(kind, value)
        if isinstance(value, (datetime, date, time)):
            return CellValue(DataType.DATE, value)
        if isinstance(value, (list, tuple)):
            return CellValue(DataType.ARRAY, value)
        if isinstance(value, dict):
            return CellValue(DataType.OBJECT, value)
        return CellValue(DataType.MIXED, value)

    @property
    def is_null(self) -> bool:
        return self.kind is DataType.NULL

    def as_datetime(self) -> datetime:
        """Return the parsed datetime of a ``date`` cell.

        Raises:
            ValueError: if the cell is not a date cell
        """
        if self.kind is not DataType.DATE:
            raise ValueError(f"cell of kind {self.kind.value} has no date value")
        v = self.value
        if isinstance(v, datetime):
            return v
        if isinstance(v, date):
            return datetime.combine(v, time.min)
        if isinstance(v, time):
            return datetime.combine(date.min, v)
        return dateparser.parse(v)

    def identity(self) -> tuple[str, Any]:
        """Hashable identity used for distinct-value counting.

        The kind is part of the key so ``True`` and ``1`` stay distinct.
        """
        v = self.value
        if self.kind in (DataType.ARRAY, DataType.OBJECT):
            v = json.dumps(v, sort_keys=True, default=str, ensure_ascii=False)
        else:
            try:
                hash(v)
            except TypeError:
                v = repr(v)
        return (self.kind.value, v)
