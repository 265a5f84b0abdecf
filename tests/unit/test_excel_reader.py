from __future__ import annotations

from pathlib import Path

import pytest

from excel_analytics.errors import SheetNotFoundError, WorkbookNotFoundError
from excel_analytics.excel.reader import (
    CSV_SHEET_NAME,
    ReaderOptions,
    Workbook,
    describe_source,
    list_sheet_names,
    normalize_headers,
    read_raw_grid,
    read_sheet,
)


def test_list_sheet_names_in_declared_order(sales_workbook: Path):
    assert list_sheet_names(sales_workbook) == ["Sales", "Notes"]


def test_read_first_sheet_when_name_omitted(sales_workbook: Path):
    sheet = read_sheet(sales_workbook)
    assert sheet.sheet_name == "Sales"
    assert sheet.columns == ["Region", "Amount", "Sales $", "Sales #", "2023", "Order Date"]
    assert len(sheet.rows) == 3
    first = sheet.rows[0]
    assert first["Region"] == "North"
    assert first["Amount"] == 500
    assert first["Order Date"] == "2023-01-15"


def test_missing_cells_are_none(sales_workbook: Path):
    sheet = read_sheet(sales_workbook, "Sales")
    assert sheet.rows[2]["Sales #"] is None
    # 全行が全ヘッダキーを持つ
    assert all(list(r) == sheet.columns for r in sheet.rows)


def test_unknown_sheet_raises(sales_workbook: Path):
    with pytest.raises(SheetNotFoundError) as exc:
        read_sheet(sales_workbook, "Missing")
    assert exc.value.sheet_name == "Missing"
    assert exc.value.available == ["Sales", "Notes"]
    assert str(exc.value) == 'Sheet "Missing" not found in workbook'


def test_missing_file_raises(temp_workdir: Path):
    with pytest.raises(WorkbookNotFoundError):
        Workbook(temp_workdir / "data" / "nope.xlsx")


def test_missing_file_is_also_file_not_found(temp_workdir: Path):
    with pytest.raises(FileNotFoundError):
        read_sheet(temp_workdir / "nope.xlsx")


def test_bytes_source(sales_workbook: Path):
    sheet = read_sheet(sales_workbook.read_bytes(), "Notes")
    assert sheet.columns == ["note"]
    assert sheet.rows == [{"note": "hello"}]


def test_file_object_source(sales_workbook: Path):
    with sales_workbook.open("rb") as fh:
        assert list_sheet_names(fh) == ["Sales", "Notes"]


def test_normalize_headers_blank_and_duplicates():
    assert normalize_headers(["Name", None, "Name", "", " Name "]) == [
        "Name", "__EMPTY", "Name_1", "__EMPTY_1", "Name_2",
    ]


def test_leading_blank_rows_are_skipped(workbook_factory):
    path = workbook_factory("blank.xlsx", {"S": [[None, None], ["a", "b"], [1, 2]]})
    name, grid = read_raw_grid(path)
    assert name == "S"
    assert grid[0] == ["a", "b"]
    sheet = read_sheet(path)
    assert sheet.rows == [{"a": 1, "b": 2}]


def test_blank_data_rows_skipped_by_default(temp_workdir: Path):
    path = temp_workdir / "data" / "gaps.csv"
    path.write_text("k,v\n1,2\n,\n3,4\n", encoding="utf-8")
    assert [r["k"] for r in read_sheet(path).rows] == [1, 3]


def test_blank_data_rows_kept_when_disabled(temp_workdir: Path):
    path = temp_workdir / "data" / "gaps.csv"
    path.write_text("k,v\n1,2\n,\n3,4\n", encoding="utf-8")
    rows = read_sheet(path, options=ReaderOptions(skip_blank_rows=False)).rows
    assert len(rows) == 3
    assert rows[1] == {"k": None, "v": None}


def test_header_only_sheet_has_no_rows(workbook_factory):
    path = workbook_factory("header.xlsx", {"S": [["a", "b"]]})
    sheet = read_sheet(path)
    assert sheet.columns == ["a", "b"]
    assert sheet.rows == []


def test_csv_is_single_sheet(temp_workdir: Path):
    path = temp_workdir / "data" / "items.csv"
    path.write_text("item,qty\nWidget,3\nGadget,5\n", encoding="utf-8")
    assert list_sheet_names(path) == [CSV_SHEET_NAME]
    sheet = read_sheet(path)
    assert sheet.sheet_name == "Sheet1"
    assert sheet.rows == [{"item": "Widget", "qty": 3}, {"item": "Gadget", "qty": 5}]


def test_csv_numeric_header_stays_text(temp_workdir: Path):
    path = temp_workdir / "data" / "years.csv"
    path.write_text("2023,2024\n1,2\n", encoding="utf-8")
    sheet = read_sheet(path)
    assert sheet.columns == ["2023", "2024"]


def test_empty_csv_has_no_columns(temp_workdir: Path):
    path = temp_workdir / "data" / "empty.csv"
    path.write_text("", encoding="utf-8")
    sheet = read_sheet(path)
    assert sheet.columns == []
    assert sheet.rows == []


def test_na_like_text_kept_by_default(temp_workdir: Path):
    path = temp_workdir / "data" / "na.csv"
    path.write_text("code,label\nNA,null\nEU,\n", encoding="utf-8")
    rows = read_sheet(path).rows
    assert rows[0] == {"code": "NA", "label": "null"}
    # 空セルだけが欠損
    assert rows[1] == {"code": "EU", "label": None}


def test_pandas_na_is_opt_in(temp_workdir: Path):
    path = temp_workdir / "data" / "na.csv"
    path.write_text("code,label\nNA,North America\nEU,Europe\n", encoding="utf-8")
    converted = read_sheet(path, options=ReaderOptions(pandas_na=True)).rows
    assert converted[0]["code"] is None
    kept = read_sheet(path, options=ReaderOptions(pandas_na=True, keep_na_strings=["NA"])).rows
    assert kept[0]["code"] == "NA"


def test_excel_na_like_header_and_cells_kept(workbook_factory):
    path = workbook_factory("na.xlsx", {"S": [["NA", "b"], ["N/A", None], ["None", "nan"]]})
    sheet = read_sheet(path)
    assert sheet.columns == ["NA", "b"]
    assert sheet.rows == [{"NA": "N/A", "b": None}, {"NA": "None", "b": "nan"}]


def test_csv_mixed_column_keeps_numbers_numeric(temp_workdir: Path):
    path = temp_workdir / "data" / "mixed.csv"
    path.write_text("Code,Flag\n10,TRUE\nabc,false\n20.5,maybe\n1_000,\n", encoding="utf-8")
    rows = read_sheet(path).rows
    assert [r["Code"] for r in rows] == [10, "abc", 20.5, "1_000"]
    assert isinstance(rows[0]["Code"], int)
    assert [r["Flag"] for r in rows] == [True, False, "maybe", None]


def test_describe_source(sales_workbook: Path):
    assert describe_source(sales_workbook) == "sales.xlsx"
    assert describe_source(str(sales_workbook)) == "sales.xlsx"
    assert describe_source(b"raw") == "<buffer>"
