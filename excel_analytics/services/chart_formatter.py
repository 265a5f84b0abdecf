from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from datetime import date, datetime, time
from typing import Any

from ..errors import InvalidChartRequestError, MissingAxisError
from ..models.chart import (
    DEFAULT_CHART_LIMIT,
    ChartDataset,
    ChartRequest,
    ChartResponse,
    ChartSeries,
    ChartType,
)
from ..models.column import ColumnDescriptor
from .pagination import parse_positive_int

logger = logging.getLogger(__name__)

"""Chart data formatting service.

Reshapes processed rows (keyed by sanitized column names) into chart-ready
series:
- pie / doughnut: one value per x category, categories in first-seen order
- scatter: raw {x, y} pairs in row order
- bar / line / area (and any other type): sum or count per x value, labels
  sorted ascending; with ``group_by`` one dataset per group

Rows are truncated to the request limit *before* aggregation. This bounds the
response size; aggregates then describe the leading rows only.
"""

__all__ = [
    "PIE_COLORS",
    "DEFAULT_COLOR",
    "to_number",
    "format_chart_data",
    "build_chart_response",
]

PIE_COLORS = [
    "#FF6384", "#36A2EB", "#FFCE56", "#4BC0C0", "#9966FF",
    "#FF9F40", "#FF6384", "#C9CBCF", "#4BC0C0", "#FF6384",
]
DEFAULT_COLOR = "#36A2EB"

Row = Mapping[str, Any]


def to_number(value: Any) -> int | float:
    """Coerce a cell to a number; anything non-numeric or non-finite counts as 0."""
    if value is None:
        return 0
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return 0 if isinstance(value, float) and not math.isfinite(value) else value
    if isinstance(value, str):
        text = value.strip()
        # float() は "1_000" も受け付ける
        if not text or "_" in text:
            return 0
        try:
            n = float(text)
        except ValueError:
            return 0
        if not math.isfinite(n):
            return 0
        return int(n) if n.is_integer() else n
    return 0


def _group_key(value: Any) -> tuple[bool, Any]:
    # True == 1 なので bool を区別する
    try:
        hash(value)
    except TypeError:
        value = repr(value)
    return (isinstance(value, bool), value)


def _sort_key(value: Any) -> tuple[int, float, str]:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return (0, value, "")
    if isinstance(value, (datetime, date, time)):
        return (1, 0, value.isoformat())
    return (2, 0, str(value))


def _column_names(columns: Sequence[ColumnDescriptor | str]) -> set[str]:
    return {c.name if isinstance(c, ColumnDescriptor) else str(c) for c in columns}


def _validate(request: ChartRequest, columns: Sequence[ColumnDescriptor | str]) -> None:
    if not request.x_axis:
        raise MissingAxisError("xAxis")
    if request.kind is ChartType.SCATTER and not request.y_axis:
        raise MissingAxisError("yAxis", chart_type=ChartType.SCATTER.value)
    names = _column_names(columns)
    for field_name, value in (("xAxis", request.x_axis), ("yAxis", request.y_axis), ("groupBy", request.group_by)):
        if value and value not in names:
            raise InvalidChartRequestError(
                f"{field_name} '{value}' does not reference an existing column", field=field_name
            )


def _pie(rows: Sequence[Row], x: str, y: str | None) -> ChartSeries:
    labels: dict[tuple[bool, Any], Any] = {}
    totals: dict[tuple[bool, Any], int | float] = {}
    for row in rows:
        xv = row.get(x)
        if xv is None:
            continue
        key = _group_key(xv)
        if key not in totals:
            labels[key] = xv
            totals[key] = 0
        totals[key] += to_number(row.get(y)) if y else 1
    return ChartSeries(
        labels=list(labels.values()),
        datasets=[ChartDataset(label=y or "Count", data=list(totals.values()), background_color=list(PIE_COLORS))],
    )


def _scatter(rows: Sequence[Row], x: str, y: str) -> ChartSeries:
    points = [
        {"x": row.get(x), "y": row.get(y)}
        for row in rows
        if row.get(x) is not None and row.get(y) is not None
    ]
    return ChartSeries(
        datasets=[ChartDataset(label=f"{y} vs {x}", data=points, background_color=DEFAULT_COLOR)],
    )


def _simple(rows: Sequence[Row], x: str, y: str | None) -> ChartSeries:
    labels: dict[tuple[bool, Any], Any] = {}
    totals: dict[tuple[bool, Any], int | float] = {}
    for row in rows:
        xv = row.get(x)
        if xv is None:
            continue
        key = _group_key(xv)
        if key not in totals:
            labels[key] = xv
            totals[key] = 0
        totals[key] += to_number(row.get(y)) if y else 1
    ordered = sorted(totals, key=lambda k: _sort_key(labels[k]))
    return ChartSeries(
        labels=[labels[k] for k in ordered],
        datasets=[
            ChartDataset(
                label=y or "Count",
                data=[totals[k] for k in ordered],
                background_color=DEFAULT_COLOR,
                border_color=DEFAULT_COLOR,
                border_width=1,
            )
        ],
    )


def _grouped(rows: Sequence[Row], x: str, y: str | None, group_by: str) -> ChartSeries:
    x_labels: dict[tuple[bool, Any], Any] = {}
    group_labels: dict[tuple[bool, Any], Any] = {}
    cells: dict[tuple[bool, Any], dict[tuple[bool, Any], int | float]] = {}
    for row in rows:
        xv = row.get(x)
        if xv is None:
            continue
        x_key = _group_key(xv)
        x_labels.setdefault(x_key, xv)
        gv = row.get(group_by)
        g_key = _group_key(gv)
        if g_key not in cells:
            group_labels[g_key] = gv
            cells[g_key] = {}
        series = cells[g_key]
        series[x_key] = series.get(x_key, 0) + (to_number(row.get(y)) if y else 1)

    ordered_x = sorted(x_labels, key=lambda k: _sort_key(x_labels[k]))
    datasets = [
        ChartDataset(
            label=group_labels[g_key],
            data=[series.get(k, 0) for k in ordered_x],
            background_color=f"hsl({index * 60}, 70%, 50%)",
            border_color=f"hsl({index * 60}, 70%, 40%)",
            border_width=1,
        )
        for index, (g_key, series) in enumerate(cells.items())
    ]
    return ChartSeries(labels=[x_labels[k] for k in ordered_x], datasets=datasets)


def _truncate(rows: Sequence[Row], request: ChartRequest) -> Sequence[Row]:
    return rows[: parse_positive_int(request.limit, DEFAULT_CHART_LIMIT)]


def format_chart_data(
    rows: Sequence[Row], columns: Sequence[ColumnDescriptor | str], request: ChartRequest
) -> ChartSeries:
    """Format processed rows for the requested chart.

    Args:
        rows: Processed rows keyed by sanitized column names
        columns: Column descriptors (or plain names) of the sheet
        request: Chart parameters

    Raises:
        MissingAxisError: xAxis absent, or yAxis absent for a scatter chart
        InvalidChartRequestError: an axis does not name an existing column
    """
    _validate(request, columns)
    chart_rows = _truncate(rows, request)
    x = request.x_axis
    assert x is not None
    kind = request.kind

    if kind in (ChartType.PIE, ChartType.DOUGHNUT):
        return _pie(chart_rows, x, request.y_axis)
    if kind is ChartType.SCATTER:
        assert request.y_axis is not None
        return _scatter(chart_rows, x, request.y_axis)
    if kind is None:
        logger.debug("unrecognized chartType=%r -> simple aggregation", request.chart_type)
    if request.group_by:
        return _grouped(chart_rows, x, request.y_axis, request.group_by)
    return _simple(chart_rows, x, request.y_axis)


def build_chart_response(
    rows: Sequence[Row], columns: Sequence[ColumnDescriptor | str], request: ChartRequest
) -> ChartResponse:
    """Format chart data and wrap it with the request echo and point count."""
    series = format_chart_data(rows, columns, request)
    return ChartResponse(
        request=request,
        data_points=len(_truncate(rows, request)),
        chart_data=series,
    )
