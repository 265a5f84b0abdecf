from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .jsonable import json_safe

"""Chart request / series models.

ChartRequest is built per request and never persisted. ChartSeries is computed on
demand and shaped for direct consumption by a charting UI (labels + datasets, or
x/y point datasets for scatter).
"""

__all__ = [
    "DEFAULT_CHART_LIMIT",
    "ChartType",
    "ChartRequest",
    "ChartDataset",
    "ChartSeries",
    "ChartResponse",
    "ChartField",
    "ChartMetadata",
]

DEFAULT_CHART_LIMIT = 1000


class ChartType(Enum):
    BAR = "bar"
    LINE = "line"
    PIE = "pie"
    SCATTER = "scatter"
    TABLE = "table"
    DOUGHNUT = "doughnut"
    AREA = "area"

    @classmethod
    def parse(cls, value: str | None) -> ChartType | None:
        """Return the matching ChartType, or None for unrecognized values."""
        if value is None:
            return None
        try:
            return cls(value.strip().lower())
        except ValueError:
            return None


@dataclass(frozen=True)
class ChartRequest:
    """Parameters of one chart-data request.

    ``chart_type`` keeps the raw requested value; unrecognized values are served
    by the simple bar/line aggregation.
    """
    x_axis: str | None
    chart_type: str = ChartType.BAR.value
    y_axis: str | None = None
    group_by: str | None = None
    limit: int = DEFAULT_CHART_LIMIT

    @property
    def kind(self) -> ChartType | None:
        return ChartType.parse(self.chart_type)


@dataclass(frozen=True)
class ChartDataset:
    label: Any  # group value for grouped series
    data: list[Any]
    background_color: str | list[str] | None = None
    border_color: str | None = None
    border_width: int | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"label": json_safe(self.label), "data": json_safe(self.data)}
        if self.background_color is not None:
            out["backgroundColor"] = self.background_color
        if self.border_color is not None:
            out["borderColor"] = self.border_color
        if self.border_width is not None:
            out["borderWidth"] = self.border_width
        return out


@dataclass(frozen=True)
class ChartSeries:
    """Chart-ready data. ``labels`` is None for scatter series."""
    datasets: list[ChartDataset]
    labels: list[Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {}
        if self.labels is not None:
            out["labels"] = json_safe(self.labels)
        out["datasets"] = [d.to_dict() for d in self.datasets]
        return out


@dataclass(frozen=True)
class ChartResponse:
    """Envelope returned by chart-data endpoints."""
    request: ChartRequest
    data_points: int  # rows considered after limit truncation
    chart_data: ChartSeries

    def to_dict(self) -> dict[str, Any]:
        return {
            "chartType": self.request.chart_type,
            "xAxis": self.request.x_axis,
            "yAxis": self.request.y_axis,
            "groupBy": self.request.group_by,
            "dataPoints": self.data_points,
            "chartData": self.chart_data.to_dict(),
        }


@dataclass(frozen=True)
class ChartField:
    """One column offered for axis selection."""
    name: str
    label: str
    data_type: str
    suitable_for: list[str]
    statistics: dict[str, Any]
    nullable: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "dataType": self.data_type,
            "suitableFor": list(self.suitable_for),
            "statistics": self.statistics,
            "nullable": self.nullable,
        }


@dataclass(frozen=True)
class ChartMetadata:
    sheet_name: str
    available_fields: list[ChartField] = field(default_factory=list)
    recommended_charts: list[str] = field(default_factory=list)
    summary: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "sheetName": self.sheet_name,
            "availableFields": [f.to_dict() for f in self.available_fields],
            "recommendedCharts": list(self.recommended_charts),
            "summary": self.summary,
        }
