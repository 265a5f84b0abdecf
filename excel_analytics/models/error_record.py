from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for processing-failure logging.

Each record identifies the workbook and sheet whose processing failed, so that a
failure surfaced to the caller as a generic server error can still be traced
from the JSON Lines error log.
"""

__all__ = [
    "ErrorRecord",
    "PROCESSING_ERROR",
    "WORKBOOK_READ_ERROR",
]

# error_type values written by the sheet processor
PROCESSING_ERROR = "PROCESSING_ERROR"  # シート処理中の想定外エラー
WORKBOOK_READ_ERROR = "WORKBOOK_READ_ERROR"  # ブックを開けない (破損・形式不明)


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: Workbook identifier (file name or "<buffer>")
        sheet: Sheet name; empty when the failure happened before a sheet was chosen
        error_type: Error classification in UPPER_SNAKE_CASE format
        message: Description of the failure
    """
    timestamp: str  # ISO8601 UTC
    file: str
    sheet: str
    error_type: str  # UPPER_SNAKE
    message: str

    @staticmethod
    def create(file: str, sheet: str, error_type: str, message: str) -> ErrorRecord:
        """Create a new ErrorRecord stamped with the current UTC time."""
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            sheet=sheet,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        """Serialize to one JSON Lines entry (no extra keys)."""
        return json.dumps(asdict(self), ensure_ascii=False)
