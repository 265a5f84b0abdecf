from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from ..analysis.column_statistics import calculate_statistics
from ..analysis.inference import infer_column_type
from ..analysis.sanitizer import ColumnNameRegistry
from ..errors import AnalyticsError, ProcessingError
from ..excel.reader import ReaderOptions, SheetData, Workbook, WorkbookSource, describe_source
from ..logging.error_log import ErrorLogBuffer
from ..logging.init import sheet_logger
from ..models.cell_value import CellValue
from ..models.column import ColumnDescriptor
from ..models.error_record import PROCESSING_ERROR, WORKBOOK_READ_ERROR
from ..models.processed_sheet import ProcessedSheet, SheetSummary
from .progress import ProgressTracker

logger = logging.getLogger(__name__)

"""Sheet processing service.

Turns one worksheet into a ProcessedSheet:
1. Read header-keyed rows (missing cells -> None)
2. Return an empty document when there are no data rows
3. Per header, in sheet order: infer DataType, compute statistics, assign a
   unique sanitized name
4. Re-key every row to the sanitized names
5. Build the sheet summary

Everything is computed in memory for a single call; the name registry is local
to the call so concurrent processing of different sheets cannot interfere.
"""

__all__ = [
    "SheetFailure",
    "WorkbookResult",
    "build_processed_sheet",
    "process_sheet",
    "process_workbook",
]


@dataclass(frozen=True)
class SheetFailure:
    sheet_name: str
    error: str


@dataclass(frozen=True)
class WorkbookResult:
    """Outcome of processing every sheet of a workbook."""
    file: str
    sheets: list[ProcessedSheet] = field(default_factory=list)
    failures: list[SheetFailure] = field(default_factory=list)

    @property
    def success(self) -> bool:
        return not self.failures


def _is_empty_value(value: Any) -> bool:
    return value is None or value == ""


def build_processed_sheet(sheet: SheetData) -> ProcessedSheet:
    """Build the ProcessedSheet document from already-read sheet rows."""
    if not sheet.rows:
        return ProcessedSheet(sheet_name=sheet.sheet_name)

    registry = ColumnNameRegistry()
    columns: list[ColumnDescriptor] = []
    renames: list[tuple[str, str]] = []  # (original, unique sanitized)

    for original in sheet.columns:
        cells = [CellValue.of(row.get(original)) for row in sheet.rows]
        data_type = infer_column_type(cells)
        stats = calculate_statistics(cells, data_type)
        name = registry.register(original)
        renames.append((original, name))
        columns.append(
            ColumnDescriptor(
                name=name,
                original_name=original,
                data_type=data_type,
                statistics=stats,
                nullable=stats.null_count > 0,
            )
        )

    data = [{name: row.get(original) for original, name in renames} for row in sheet.rows]

    type_counts = Counter(c.data_type.value for c in columns)
    summary = SheetSummary(
        row_count=len(sheet.rows),
        column_count=len(columns),
        empty_rows=sum(1 for row in sheet.rows if all(_is_empty_value(v) for v in row.values())),
        data_types=dict(type_counts),
    )
    return ProcessedSheet(sheet_name=sheet.sheet_name, columns=columns, data=data, summary=summary)


def _record_failure(
    error_log: ErrorLogBuffer | None, file: str, sheet: str, error_type: str, message: str
) -> None:
    if error_log is not None:
        error_log.record(file, sheet, error_type, message)


def _process_opened(wb: Workbook, sheet_name: str, error_log: ErrorLogBuffer | None) -> ProcessedSheet:
    log = sheet_logger(logger, wb.identifier, sheet_name)
    try:
        sheet = wb.read_sheet(sheet_name)
        processed = build_processed_sheet(sheet)
    except AnalyticsError:
        raise
    except Exception as e:
        log.error("processing failed: %s", e)
        log.debug("processing traceback", exc_info=True)
        _record_failure(error_log, wb.identifier, sheet_name, PROCESSING_ERROR, str(e))
        raise ProcessingError(f"failed to process sheet '{sheet_name}'") from e
    log.debug("processed rows=%d columns=%d", processed.row_count, len(processed.columns))
    return processed


def _open(source: WorkbookSource, options: ReaderOptions | None, error_log: ErrorLogBuffer | None) -> Workbook:
    try:
        return Workbook(source, options)
    except AnalyticsError:
        raise
    except Exception as e:
        ident = describe_source(source)
        logger.error("could not open workbook file=%s: %s", ident, e)
        _record_failure(error_log, ident, "", WORKBOOK_READ_ERROR, str(e))
        raise ProcessingError(f"failed to read workbook '{ident}'") from e


def process_sheet(
    source: WorkbookSource,
    sheet_name: str | None = None,
    *,
    reader_options: ReaderOptions | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> ProcessedSheet:
    """Process one worksheet into a ProcessedSheet.

    Args:
        source: Path to the workbook, or its bytes / binary file object
        sheet_name: Sheet to process; the first sheet in declared order when None
        reader_options: Reader behaviour (NA strings, blank-row skipping)
        error_log: Optional buffer receiving an ErrorRecord on unexpected failure

    Returns:
        ProcessedSheet (a sheet either fully processes or the call fails)

    Raises:
        WorkbookNotFoundError: the source path does not exist
        SheetNotFoundError: ``sheet_name`` is absent from the workbook
        ProcessingError: any other failure while reading or computing statistics
    """
    with _open(source, reader_options, error_log) as wb:
        target = wb.resolve_sheet(sheet_name)
        return _process_opened(wb, target, error_log)


def process_workbook(
    source: WorkbookSource,
    *,
    reader_options: ReaderOptions | None = None,
    error_log: ErrorLogBuffer | None = None,
) -> WorkbookResult:
    """Process every sheet of a workbook in declared order.

    A failing sheet is recorded in ``failures`` and does not stop the remaining
    sheets; successfully processed sheets are complete documents.
    """
    with _open(source, reader_options, error_log) as wb:
        names = wb.sheet_names
        sheets: list[ProcessedSheet] = []
        failures: list[SheetFailure] = []
        with ProgressTracker(len(names), description=f"Processing {wb.identifier}") as progress:
            for name in names:
                progress.start_sheet(name)
                try:
                    sheets.append(_process_opened(wb, name, error_log))
                except ProcessingError as e:
                    failures.append(SheetFailure(sheet_name=name, error=str(e)))
                    progress.finish_sheet(success=False)
                    continue
                progress.finish_sheet(success=True)
                progress.set_postfix(rows=sheets[-1].row_count, failed=progress.failed_sheets)
        return WorkbookResult(file=wb.identifier, sheets=sheets, failures=failures)
