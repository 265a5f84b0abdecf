from __future__ import annotations

import io
import math
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Union

import pandas as pd
import pandas._libs.parsers as parsers

from ..errors import SheetNotFoundError, WorkbookNotFoundError
from ..models.cell_value import to_python_scalar

"""Workbook reader.

Reads .xlsx/.xls workbooks through pandas (openpyxl engine) and .csv files through
``pandas.read_csv``. A CSV source is exposed as a single sheet named ``Sheet1``.

Header handling mirrors the usual spreadsheet-to-JSON convention:
- the first non-blank row is the header row
- blank header cells become ``__EMPTY``, ``__EMPTY_1``, ...
- repeated headers become ``Name_1``, ``Name_2``, ... so row keys stay unique
- every data row carries every header key; a missing cell is None
"""

__all__ = [
    "CSV_SHEET_NAME",
    "WorkbookSource",
    "ReaderOptions",
    "SheetData",
    "Workbook",
    "describe_source",
    "normalize_headers",
    "list_sheet_names",
    "read_sheet",
    "read_raw_grid",
]

CSV_SHEET_NAME = "Sheet1"
EMPTY_HEADER = "__EMPTY"

WorkbookSource = Union[str, os.PathLike, bytes, BinaryIO]


@dataclass(frozen=True)
class ReaderOptions:
    """Reader behaviour.

    By default only empty cells are missing; text such as ``"NA"`` or ``"null"``
    is kept as text. ``pandas_na`` opts in to pandas' NA-string list.
    """
    pandas_na: bool = False  # True: "NA", "N/A", "null" などを欠損扱い
    keep_na_strings: list[str] | None = None  # pandas_na 時に NA 変換から除外する文字列 (例: ['NA'])
    skip_blank_rows: bool = True  # 全セル空の行を読み飛ばす


@dataclass
class SheetData:
    sheet_name: str
    columns: list[str]  # ヘッダ順 (明示的な順序)
    rows: list[dict[str, Any]] = field(default_factory=list)  # 列名→値


def describe_source(source: WorkbookSource) -> str:
    """Short identifier of a source for log and error records."""
    if isinstance(source, (str, os.PathLike)):
        return Path(source).name
    name = getattr(source, "name", None)
    if isinstance(name, str):
        return Path(name).name
    return "<buffer>"


def _na_options(options: ReaderOptions) -> dict[str, Any]:
    if not options.pandas_na:
        # 空セルのみ欠損
        return {"keep_default_na": False, "na_values": [""]}
    keep_na_strings = options.keep_na_strings
    if keep_na_strings:
        # 既定の NA 値から keep_na_strings を除外
        custom_na = parsers.STR_NA_VALUES - set(keep_na_strings)
        return {"keep_default_na": False, "na_values": list(custom_na)}
    return {"keep_default_na": True, "na_values": None}


def _frame_to_grid(df: pd.DataFrame) -> list[list[Any]]:
    return [[to_python_scalar(v) for v in row] for row in df.itertuples(index=False, name=None)]


def _csv_cell(value: Any) -> Any:
    """Convert one CSV text cell the way a spreadsheet would.

    ``TRUE``/``FALSE`` become booleans and finite numeric text becomes a number
    (integral values as int); anything else stays text.

    >>> [_csv_cell(v) for v in ["10", "2.5", "abc", "TRUE", "1_000", "inf", None]]
    [10, 2.5, 'abc', True, '1_000', 'inf', None]
    """
    if not isinstance(value, str):
        return value
    text = value.strip()
    if text.upper() in ("TRUE", "FALSE"):
        return text.upper() == "TRUE"
    if not text or "_" in text:
        return value
    number = to_python_scalar(pd.to_numeric(text, errors="coerce"))
    if number is None or not math.isfinite(number):
        return value
    if isinstance(number, float) and number.is_integer():
        return int(number)
    return number


def _is_blank(values: list[Any]) -> bool:
    return all(v is None for v in values)


def normalize_headers(header_row: list[Any]) -> list[str]:
    """Turn a raw header row into unique header strings (order preserved)."""
    out: list[str] = []
    seen: set[str] = set()
    for cell in header_row:
        base = "" if cell is None else str(cell).strip()
        if not base:
            base = EMPTY_HEADER
        name = base
        counter = 1
        while name in seen:
            name = f"{base}_{counter}"
            counter += 1
        seen.add(name)
        out.append(name)
    return out


class Workbook:
    """An opened workbook source.

    Usage::

        with Workbook(path) as wb:
            name = wb.resolve_sheet(None)
            grid = wb.raw_grid(name)
    """

    def __init__(self, source: WorkbookSource, options: ReaderOptions | None = None) -> None:
        self.options = options or ReaderOptions()
        self.identifier = describe_source(source)
        self._csv_path: Path | None = None
        self._excel: pd.ExcelFile | None = None

        if isinstance(source, (str, os.PathLike)):
            path = Path(source)
            if not path.exists():
                raise WorkbookNotFoundError(f"File not found at path: {path}")
            if path.suffix.lower() == ".csv":
                self._csv_path = path
            else:
                self._excel = pd.ExcelFile(path)
        elif isinstance(source, (bytes, bytearray)):
            self._excel = pd.ExcelFile(io.BytesIO(source))
        else:
            if hasattr(source, "seek"):
                source.seek(0)
            self._excel = pd.ExcelFile(source)

    @property
    def sheet_names(self) -> list[str]:
        """Sheet names in the workbook's declared order."""
        if self._csv_path is not None:
            return [CSV_SHEET_NAME]
        assert self._excel is not None
        return [str(n) for n in self._excel.sheet_names]

    def resolve_sheet(self, sheet_name: str | None) -> str:
        """Return ``sheet_name`` if present, or the first sheet when omitted.

        Raises:
            SheetNotFoundError: if the requested sheet is absent
        """
        names = self.sheet_names
        target = sheet_name or (names[0] if names else None)
        if target is None or target not in names:
            raise SheetNotFoundError(str(sheet_name), names)
        return target

    def raw_grid(self, sheet_name: str) -> list[list[Any]]:
        """Raw cell grid of one sheet, leading blank rows removed.

        Cells are plain Python values; blank cells are None.
        """
        na = _na_options(self.options)
        if self._csv_path is not None:
            grid = self._read_csv_grid(na)
        else:
            assert self._excel is not None
            # dtype=object: openpyxl のセル型 (int/float/datetime/bool) をそのまま保持
            df = self._excel.parse(sheet_name, header=None, dtype=object, **na)
            grid = _frame_to_grid(df)
        while grid and _is_blank(grid[0]):
            grid.pop(0)
        return grid

    def _read_csv_grid(self, na: dict[str, Any]) -> list[list[Any]]:
        assert self._csv_path is not None
        try:
            header = pd.read_csv(self._csv_path, header=None, nrows=1, dtype=str, **na)
        except pd.errors.EmptyDataError:
            return []
        try:
            # 本文も文字列で読み、数値はセル単位で変換 (列単位の型推定は混在列を文字列化する)
            body = pd.read_csv(self._csv_path, header=None, skiprows=1, dtype=str, **na)
        except pd.errors.EmptyDataError:
            body = pd.DataFrame()
        width = max(header.shape[1], body.shape[1])
        body_grid = [[_csv_cell(v) for v in row] for row in _frame_to_grid(body)]
        grid = _frame_to_grid(header) + body_grid
        return [row + [None] * (width - len(row)) for row in grid]

    def read_sheet(self, sheet_name: str) -> SheetData:
        """Read one sheet as header-keyed row dicts."""
        grid = self.raw_grid(sheet_name)
        if not grid:
            return SheetData(sheet_name=sheet_name, columns=[], rows=[])
        columns = normalize_headers(grid[0])
        rows: list[dict[str, Any]] = []
        for raw in grid[1:]:
            values = list(raw[: len(columns)]) + [None] * (len(columns) - len(raw))
            if self.options.skip_blank_rows and _is_blank(values):
                continue
            rows.append(dict(zip(columns, values, strict=True)))
        return SheetData(sheet_name=sheet_name, columns=columns, rows=rows)

    def close(self) -> None:
        if self._excel is not None:
            self._excel.close()
            self._excel = None

    def __enter__(self) -> Workbook:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()


def list_sheet_names(source: WorkbookSource) -> list[str]:
    with Workbook(source) as wb:
        return wb.sheet_names


def read_sheet(
    source: WorkbookSource, sheet_name: str | None = None, options: ReaderOptions | None = None
) -> SheetData:
    """Read a sheet (first sheet when ``sheet_name`` is None) as row dicts."""
    with Workbook(source, options) as wb:
        return wb.read_sheet(wb.resolve_sheet(sheet_name))


def read_raw_grid(
    source: WorkbookSource, sheet_name: str | None = None, options: ReaderOptions | None = None
) -> tuple[str, list[list[Any]]]:
    """Return ``(resolved sheet name, raw cell grid)``."""
    with Workbook(source, options) as wb:
        name = wb.resolve_sheet(sheet_name)
        return name, wb.raw_grid(name)
