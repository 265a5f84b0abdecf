"""Domain models for the spreadsheet analytics engine."""

from .cell_value import CellValue, DataType
from .chart import ChartDataset, ChartRequest, ChartResponse, ChartSeries, ChartType
from .column import ColumnDescriptor, ColumnStatistics
from .error_record import ErrorRecord
from .page import Page
from .preview import SheetPreview
from .processed_sheet import ProcessedSheet, SheetSummary

__all__ = [
    # Cell / column models
    "CellValue",
    "DataType",
    "ColumnDescriptor",
    "ColumnStatistics",
    # Sheet models
    "ProcessedSheet",
    "SheetSummary",
    "SheetPreview",
    # Chart models
    "ChartDataset",
    "ChartRequest",
    "ChartResponse",
    "ChartSeries",
    "ChartType",
    # Misc
    "ErrorRecord",
    "Page",
]
