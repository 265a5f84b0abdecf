from __future__ import annotations

from ..models.cell_value import DataType
from ..models.chart import ChartField, ChartMetadata
from ..models.processed_sheet import ProcessedSheet

__all__ = [
    "suitable_roles",
    "recommend_charts",
    "build_chart_metadata",
]

_ROLES: dict[DataType, list[str]] = {
    DataType.NUMBER: ["x-axis", "y-axis", "value", "size"],
    DataType.DATE: ["x-axis", "category"],
    DataType.STRING: ["category", "label", "group"],
}


def suitable_roles(data_type: DataType) -> list[str]:
    """Axis/role hints offered for a column of ``data_type``."""
    return list(_ROLES.get(data_type, []))


def recommend_charts(data_types: list[DataType]) -> list[str]:
    """Chart types worth offering for a sheet, de-duplicated in first-added order."""
    has_numeric = DataType.NUMBER in data_types
    has_date = DataType.DATE in data_types
    has_categorical = DataType.STRING in data_types

    recommended: list[str] = []
    if has_numeric and has_categorical:
        recommended += ["bar", "line", "pie"]
    if has_numeric and has_date:
        recommended += ["line", "area"]
    if has_numeric:
        recommended += ["scatter", "histogram"]
    if has_categorical:
        recommended += ["pie", "doughnut"]
    return list(dict.fromkeys(recommended))


def build_chart_metadata(sheet: ProcessedSheet) -> ChartMetadata:
    """Describe the fields of a processed sheet for chart axis selection."""
    fields = [
        ChartField(
            name=c.name,
            label=c.original_name,
            data_type=c.data_type.value,
            suitable_for=suitable_roles(c.data_type),
            statistics=c.statistics.to_dict(),
            nullable=c.nullable,
        )
        for c in sheet.columns
    ]
    return ChartMetadata(
        sheet_name=sheet.sheet_name,
        available_fields=fields,
        recommended_charts=recommend_charts([c.data_type for c in sheet.columns]),
        summary=sheet.summary.to_dict() if sheet.summary is not None else {},
    )
