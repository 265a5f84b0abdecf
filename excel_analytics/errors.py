from __future__ import annotations

"""Error taxonomy for the analytics engine.

None of these are retried by the engine; every failure is terminal for the
current call and surfaced to the caller.
"""

__all__ = [
    "AnalyticsError",
    "WorkbookNotFoundError",
    "SheetNotFoundError",
    "InvalidChartRequestError",
    "MissingAxisError",
    "UnsupportedFileTypeError",
    "FileTooLargeError",
    "ProcessingError",
]


class AnalyticsError(Exception):
    """Base error class for the analytics engine."""


class WorkbookNotFoundError(AnalyticsError, FileNotFoundError):
    """Raised when the source workbook path does not exist."""


class SheetNotFoundError(AnalyticsError):
    """Raised when a requested sheet is absent from the workbook."""

    def __init__(self, sheet_name: str, available: list[str] | None = None) -> None:
        self.sheet_name = sheet_name
        self.available = list(available or [])
        super().__init__(f'Sheet "{sheet_name}" not found in workbook')


class InvalidChartRequestError(AnalyticsError):
    """Raised when a chart parameter is invalid."""

    def __init__(self, message: str, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class MissingAxisError(InvalidChartRequestError):
    """Raised when a required chart axis parameter is absent."""

    def __init__(self, field: str, chart_type: str | None = None) -> None:
        if chart_type:
            message = f"{field} parameter is required for {chart_type} charts"
        else:
            message = f"{field} parameter is required"
        super().__init__(message, field=field)


class UnsupportedFileTypeError(AnalyticsError):
    """Raised when an uploaded file does not have an accepted extension."""


class FileTooLargeError(AnalyticsError):
    """Raised when an uploaded file exceeds the configured size limit."""


class ProcessingError(AnalyticsError):
    """Raised for unexpected failures while parsing or computing statistics."""
