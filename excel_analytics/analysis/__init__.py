"""Column-level analysis: type inference, statistics and name sanitizing."""

from .column_statistics import calculate_statistics
from .inference import classify_value, infer_column_type
from .sanitizer import ColumnNameRegistry, sanitize_column_name

__all__ = [
    "calculate_statistics",
    "classify_value",
    "infer_column_type",
    "ColumnNameRegistry",
    "sanitize_column_name",
]
