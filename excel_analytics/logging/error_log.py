from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Error log buffering.

Processing failures are surfaced to callers as generic errors; the buffered
ErrorRecords keep the file/sheet context. One ``logs/errors-YYYYMMDD-HHMMSS.log``
(UTC) file per run, created on first flush.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
]

LOGS_DIR = Path("./logs")
TIMESTAMP_FMT = "%Y%m%d-%H%M%S"


class ErrorLogBuffer:
    """In-memory buffer for error records. Flush appends JSON Lines.

    Not thread-safe; use one buffer per processing run.
    """

    def __init__(self, logs_dir: Path | None = None) -> None:
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self._logs_dir = logs_dir or LOGS_DIR

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            self._logs_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self._logs_dir / f"errors-{stamp}.log"
        return self._file_path

    @property
    def records(self) -> list[ErrorRecord]:
        return list(self._records)

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)

    def record(self, file: str, sheet: str, error_type: str, message: str) -> ErrorRecord:
        """Create a timestamped ErrorRecord and buffer it."""
        rec = ErrorRecord.create(file, sheet, error_type, message)
        self._records.append(rec)
        return rec

    def failed_sheets(self) -> list[tuple[str, str]]:
        """Distinct (file, sheet) pairs with buffered errors, in first-seen order."""
        return list(dict.fromkeys((r.file, r.sheet) for r in self._records))

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records; returns the log path, or None when empty."""
        if not self._records:
            return None
        fp = self.file_path
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
