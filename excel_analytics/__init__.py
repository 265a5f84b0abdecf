"""Spreadsheet ingestion and analytics engine.

Reads uploaded workbooks, infers per-column types and statistics, sanitizes
column names and reshapes processed rows into chart-ready series.
"""

__version__ = "0.1.0"
