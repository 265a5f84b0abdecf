from __future__ import annotations

from ..models.processed_sheet import ProcessedSheet
from .sheet_processor import WorkbookResult

"""SUMMARY line rendering.

Formats:
    SUMMARY file={file} sheet={sheet} rows={rows} columns={columns} empty_rows={empty} types={types}
    SUMMARY file={file} sheets={done}/{total} success={ok} failed={failed} rows={rows}

``types`` is ``dataType:count`` pairs joined by commas, in column order of first
appearance, or ``-`` for a sheet without columns.
"""

__all__ = [
    "render_sheet_summary",
    "render_workbook_summary",
]


def _format_types(data_types: dict[str, int]) -> str:
    if not data_types:
        return "-"
    return ",".join(f"{k}:{v}" for k, v in data_types.items())


def render_sheet_summary(file: str, sheet: ProcessedSheet) -> str:
    """Render the SUMMARY line for one processed sheet.

    Examples:
        >>> from excel_analytics.models.processed_sheet import ProcessedSheet
        >>> render_sheet_summary("sales.xlsx", ProcessedSheet(sheet_name="Q1"))
        'SUMMARY file=sales.xlsx sheet=Q1 rows=0 columns=0 empty_rows=0 types=-'
    """
    summary = sheet.summary
    empty_rows = summary.empty_rows if summary is not None else 0
    types = _format_types(summary.data_types if summary is not None else {})
    return (
        f"SUMMARY file={file} "
        f"sheet={sheet.sheet_name} "
        f"rows={sheet.row_count} "
        f"columns={len(sheet.columns)} "
        f"empty_rows={empty_rows} "
        f"types={types}"
    )


def render_workbook_summary(result: WorkbookResult) -> str:
    """Render the SUMMARY line for a whole-workbook run."""
    ok = len(result.sheets)
    failed = len(result.failures)
    total = ok + failed
    rows = sum(s.row_count for s in result.sheets)
    return (
        f"SUMMARY file={result.file} "
        f"sheets={total}/{total} "
        f"success={ok} "
        f"failed={failed} "
        f"rows={rows}"
    )
