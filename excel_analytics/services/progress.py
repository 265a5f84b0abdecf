from __future__ import annotations

import sys
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Progress display service with tqdm (TTY only).

Shows sheet progress while a whole workbook is processed. In non-TTY
environments (CI, piped output) no bar is created so stdout stays clean JSON.
"""

__all__ = [
    "ProgressTracker",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    """Return True when stdout is a TTY and progress should be displayed."""
    return sys.stdout.isatty()


class ProgressTracker:
    """Progress tracker using tqdm for sheet processing."""

    def __init__(self, total_sheets: int, *, description: str = "Processing sheets") -> None:
        """Initialize progress tracker.

        Args:
            total_sheets: Total number of sheets to process
            description: Description for the progress bar
        """
        self.total_sheets = total_sheets
        self.description = description
        self.current_sheet = 0
        self.failed_sheets = 0

        self.enabled = is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_sheets,
                desc=description,
                unit="sheet",
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def start_sheet(self, sheet_name: str) -> None:
        self.current_sheet += 1
        if self.enabled and self.pbar is not None:
            self.pbar.set_description(f"{self.description} ({sheet_name})")

    def finish_sheet(self, success: bool = True) -> None:
        if not success:
            self.failed_sheets += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(1)
            self.pbar.set_description(self.description)
            if not success:
                # 失敗数はバー右側に常時表示
                self.pbar.set_postfix(failed=self.failed_sheets)

    @property
    def succeeded_sheets(self) -> int:
        """Sheets finished without failure so far."""
        return self.current_sheet - self.failed_sheets

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> ProgressTracker:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
