# Shared pytest fixtures
from __future__ import annotations

import tempfile
from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest

from excel_analytics.logging.init import reset_logging


def make_excel(path: Path, sheets: dict[str, list[list[object]]]) -> Path:
    """Write a real .xlsx file; each sheet's first row is its header row."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with pd.ExcelWriter(path, engine="openpyxl") as writer:
        for sheet, rows in sheets.items():
            df = pd.DataFrame(rows)
            df.to_excel(writer, sheet_name=sheet, header=False, index=False)
    return path


@pytest.fixture()
def temp_workdir(monkeypatch) -> Path:
    with tempfile.TemporaryDirectory() as d:
        p = Path(d)
        (p / "config").mkdir()
        (p / "data").mkdir()
        (p / "logs").mkdir()
        monkeypatch.chdir(p)
        monkeypatch.delenv("EXCEL_ANALYTICS_CONFIG", raising=False)
        yield p


@pytest.fixture()
def workbook_factory(temp_workdir: Path) -> Callable[..., Path]:
    def _factory(name: str, sheets: dict[str, list[list[object]]]) -> Path:
        return make_excel(temp_workdir / "data" / name, sheets)
    return _factory


@pytest.fixture()
def sales_rows() -> list[list[object]]:
    return [
        ["Region", "Amount", "Sales $", "Sales #", "2023", "Order Date"],
        ["North", 500, "apple", 1, "open", "2023-01-15"],
        ["South", 300, "pear", 2, "closed", "2023-02-01"],
        ["North", 200, "plum", None, "open", "2023-03-10"],
    ]


@pytest.fixture()
def sales_workbook(workbook_factory, sales_rows) -> Path:
    return workbook_factory("sales.xlsx", {"Sales": sales_rows, "Notes": [["note"], ["hello"]]})


@pytest.fixture()
def clean_logging():
    reset_logging()
    yield
    reset_logging()
