from __future__ import annotations

import logging
import sys

"""Logging initialization with labeled prefixes.

Log lines are prefixed with a label (INFO|WARN|ERROR|SUMMARY) and written to
stdout. Module loggers (``logging.getLogger(__name__)`` inside the package) are
children of the ``excel_analytics`` logger and share its handler.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "get_logger",
    "log_summary",
    "apply_level",
    "sheet_logger",
    "reset_logging",
]

LOGGER_NAME = "excel_analytics"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """Formatter that renders ``LABEL message``."""

    LEVEL_LABELS = {
        logging.DEBUG: "DEBUG",
        logging.INFO: "INFO",
        logging.WARNING: "WARN",
        logging.ERROR: "ERROR",
        logging.CRITICAL: "CRITICAL",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_label = self.LEVEL_LABELS.get(record.levelno, record.levelname)
        message = f"{level_label} {record.getMessage()}"
        if record.exc_info:
            message += "\n" + self.formatException(record.exc_info)
        return message


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Configure the package logger (idempotent).

    Returns:
        Configured logger instance for the application
    """
    global _logger

    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear any existing handlers to avoid duplication
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate output
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    """Return the configured package logger, configuring it on first use."""
    if _logger is None:
        return setup_logging()
    return _logger


def log_summary(message: str) -> None:
    """Log a message at SUMMARY level."""
    get_logger().log(SUMMARY_LEVEL, message)


def apply_level(level: int | str) -> logging.Logger:
    """Set the level of the package logger and its handlers.

    Args:
        level: A logging level number or name (``"DEBUG"``, ``"INFO"``, ...)
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger = get_logger()
    logger.setLevel(level)
    for h in logger.handlers:
        h.setLevel(level)
    return logger


class _SheetContextAdapter(logging.LoggerAdapter):
    """Prefixes messages with the workbook and sheet being processed."""

    def process(self, msg: object, kwargs: dict) -> tuple[str, dict]:
        extra = self.extra or {}
        return f"file={extra.get('file')} sheet={extra.get('sheet')} {msg}", kwargs


def sheet_logger(logger: logging.Logger, file: str, sheet: str) -> logging.LoggerAdapter:
    """Wrap ``logger`` so every line carries ``file=... sheet=...``."""
    return _SheetContextAdapter(logger, {"file": file, "sheet": sheet})


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    _logger = None
