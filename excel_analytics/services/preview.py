from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

from ..errors import FileTooLargeError, UnsupportedFileTypeError, WorkbookNotFoundError
from ..excel.reader import ReaderOptions, Workbook, WorkbookSource
from ..models.preview import SheetPreview

logger = logging.getLogger(__name__)

"""Upload validation and lightweight previews.

These read only the raw cell grid (header row + cells, no type inference) to
give fast feedback after an upload. They are independent of the full sheet
processor; callers must treat preview data as provisional.
"""

__all__ = [
    "DEFAULT_ALLOWED_EXTENSIONS",
    "DEFAULT_MAX_FILE_SIZE",
    "UPLOAD_PREVIEW_ROWS",
    "SHEET_PREVIEW_ROWS",
    "validate_upload",
    "build_upload_preview",
    "preview_sheet",
    "read_sheet_records",
]

DEFAULT_ALLOWED_EXTENSIONS = (".xlsx", ".xls", ".csv")
DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024  # 10MB
UPLOAD_PREVIEW_ROWS = 100
SHEET_PREVIEW_ROWS = 10


def validate_upload(
    path: str | os.PathLike,
    *,
    allowed_extensions: tuple[str, ...] | list[str] = DEFAULT_ALLOWED_EXTENSIONS,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> Path:
    """Check an uploaded file's extension and size.

    Raises:
        WorkbookNotFoundError: the path does not exist
        UnsupportedFileTypeError: extension not in ``allowed_extensions``
        FileTooLargeError: file larger than ``max_file_size`` bytes
    """
    p = Path(path)
    if not p.exists():
        raise WorkbookNotFoundError(f"File not found at path: {p}")
    allowed = {e.lower() for e in allowed_extensions}
    if p.suffix.lower() not in allowed:
        raise UnsupportedFileTypeError(
            f"Invalid file type '{p.suffix}'. Allowed: {', '.join(sorted(allowed))}"
        )
    size = p.stat().st_size
    if size > max_file_size:
        raise FileTooLargeError(f"File is {size} bytes; limit is {max_file_size} bytes")
    return p


def _preview(name: str, grid: list[list[Any]], data_rows: int) -> SheetPreview:
    columns = list(grid[0]) if grid else []
    return SheetPreview(
        name=name,
        columns=columns,
        row_count=max(len(grid) - 1, 0),
        preview_data=[list(r) for r in grid[: data_rows + 1]],
    )


def build_upload_preview(
    source: WorkbookSource, max_rows: int = UPLOAD_PREVIEW_ROWS, options: ReaderOptions | None = None
) -> list[SheetPreview]:
    """Preview every sheet: header row plus up to ``max_rows`` data rows."""
    with Workbook(source, options) as wb:
        previews = [_preview(name, wb.raw_grid(name), max_rows) for name in wb.sheet_names]
        logger.debug("upload preview file=%s sheets=%d", wb.identifier, len(previews))
        return previews


def preview_sheet(
    source: WorkbookSource,
    sheet_name: str | None = None,
    limit: int = SHEET_PREVIEW_ROWS,
    options: ReaderOptions | None = None,
) -> SheetPreview:
    """Preview one sheet (first sheet when omitted) with ``limit`` data rows."""
    with Workbook(source, options) as wb:
        name = wb.resolve_sheet(sheet_name)
        return _preview(name, wb.raw_grid(name), limit)


def read_sheet_records(
    source: WorkbookSource, sheet_name: str | None = None, options: ReaderOptions | None = None
) -> tuple[str, list[dict[str, Any]]]:
    """Read raw header-keyed rows of a sheet without type inference.

    Returns:
        (resolved sheet name, rows keyed by original headers)
    """
    with Workbook(source, options) as wb:
        name = wb.resolve_sheet(sheet_name)
        return name, wb.read_sheet(name).rows
