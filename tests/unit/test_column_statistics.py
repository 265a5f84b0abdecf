from __future__ import annotations

import math
from datetime import datetime

import pytest

from excel_analytics.analysis.column_statistics import calculate_statistics, most_common_value
from excel_analytics.models.cell_value import CellValue, DataType


def test_numeric_statistics_scenario():
    stats = calculate_statistics([10, 20, None, 30], DataType.NUMBER)
    assert stats.count == 4
    assert stats.null_count == 1
    assert stats.unique_count == 3
    assert stats.min == 10
    assert stats.max == 30
    assert stats.sum == 60
    assert stats.mean == 20
    # 母分散: (100 + 0 + 100) / 3
    assert stats.variance == pytest.approx(200 / 3)
    assert stats.std_dev == pytest.approx(math.sqrt(200 / 3))


def test_single_numeric_value_has_no_variance():
    stats = calculate_statistics([5, None], DataType.NUMBER)
    assert stats.mean == 5
    assert stats.variance is None
    assert stats.std_dev is None


@pytest.mark.parametrize(
    "values",
    [
        [1, 1],
        [0.1, 0.2, 0.3],
        [-5, 10, 1000, 3.25, 7],
        [1e6, 1e6 + 1, None],
    ],
)
def test_variance_non_negative_and_std_dev_is_root(values):
    stats = calculate_statistics(values, DataType.NUMBER)
    assert stats.variance >= 0
    assert stats.std_dev == pytest.approx(math.sqrt(stats.variance))


def test_all_null_column_has_only_counts():
    stats = calculate_statistics([None, None, None], DataType.NULL)
    assert stats.count == 3
    assert stats.null_count == 3
    assert stats.unique_count is None
    assert stats.to_dict() == {"count": 3, "nullCount": 3}


def test_string_statistics():
    stats = calculate_statistics(["apple", "kiwi", "apple", None, "banana"], DataType.STRING)
    assert stats.unique_count == 3
    assert stats.min_length == 4
    assert stats.max_length == 6
    assert stats.most_common == "apple"
    assert stats.min is None


def test_most_common_prefers_value_reaching_max_first():
    cells = [CellValue.of(v) for v in ["b", "a", "a", "b"]]
    assert most_common_value(cells) == "a"


def test_date_statistics_from_text():
    stats = calculate_statistics(["2023-01-15", "2022-06-01", None, "2024-02-29"], DataType.DATE)
    assert stats.min == datetime(2022, 6, 1)
    assert stats.max == datetime(2024, 2, 29)
    assert stats.null_count == 1


def test_date_statistics_from_datetime_cells():
    stats = calculate_statistics([datetime(2021, 5, 1), datetime(2020, 1, 2)], DataType.DATE)
    assert stats.min == datetime(2020, 1, 2)
    assert stats.max == datetime(2021, 5, 1)


def test_boolean_column_only_common_fields():
    stats = calculate_statistics([True, False, True], DataType.BOOLEAN)
    assert stats.to_dict() == {"count": 3, "nullCount": 0, "uniqueCount": 2}


def test_unique_count_keeps_bool_and_number_apart():
    stats = calculate_statistics([1, True], DataType.NUMBER)
    assert stats.unique_count == 2
    # 数値集計は number セルのみ
    assert stats.sum == 1


def test_to_dict_uses_document_keys():
    out = calculate_statistics([1, 2, 3], DataType.NUMBER).to_dict()
    assert set(out) == {"count", "nullCount", "uniqueCount", "min", "max", "sum", "mean", "variance", "stdDev"}


def test_date_stats_serialize_as_iso_strings():
    out = calculate_statistics(["2023-01-15", "2023-03-01"], DataType.DATE).to_dict()
    assert out["min"] == "2023-01-15T00:00:00"
    assert out["max"] == "2023-03-01T00:00:00"
