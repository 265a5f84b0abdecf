from __future__ import annotations

from pathlib import Path

import excel_analytics.services.sheet_processor as sheet_processor
from excel_analytics.cli.__main__ import main as cli_main
from excel_analytics.logging.init import reset_logging

"""CLI exit code contract: 0 success, 1 fatal, 2 partial failure, 3 client error."""


def test_exit_code_success(sales_workbook: Path, temp_workdir: Path):
    reset_logging()
    code = cli_main(["process", str(sales_workbook), "--output", str(temp_workdir / "out.json")])
    assert code == 0


def test_exit_code_fatal_config(sales_workbook: Path, temp_workdir: Path, capsys):
    reset_logging()
    (temp_workdir / "config" / "analytics.yml").write_text("bogus: 1\n", encoding="utf-8")
    code = cli_main(["process", str(sales_workbook)])
    assert code == 1
    assert "ERROR config:" in capsys.readouterr().out


def test_exit_code_partial_failure(sales_workbook: Path, temp_workdir: Path, monkeypatch, capsys):
    reset_logging()
    original = sheet_processor.calculate_statistics

    def fail_on_notes(values, data_type):
        if any(getattr(v, "value", None) == "hello" for v in values):
            raise ValueError("bad notes")
        return original(values, data_type)

    monkeypatch.setattr(sheet_processor, "calculate_statistics", fail_on_notes)
    code = cli_main(["process", str(sales_workbook), "--all-sheets", "--output", str(temp_workdir / "o.json")])
    assert code == 2
    out = capsys.readouterr().out
    assert "SUMMARY file=sales.xlsx sheets=2/2 success=1 failed=1 rows=3" in out
    assert list((temp_workdir / "logs").glob("errors-*.log"))


def test_exit_code_client_error_missing_sheet(sales_workbook: Path, capsys):
    reset_logging()
    code = cli_main(["process", str(sales_workbook), "--sheet", "Nope"])
    assert code == 3
    assert 'ERROR process: Sheet "Nope" not found in workbook' in capsys.readouterr().out


def test_exit_code_client_error_bad_chart(sales_workbook: Path, capsys):
    reset_logging()
    code = cli_main(["chart", str(sales_workbook), "--chart-type", "scatter", "--x-axis", "amount"])
    assert code == 3
    assert "yAxis parameter is required for scatter charts" in capsys.readouterr().out


def test_exit_code_fatal_processing(sales_workbook: Path, monkeypatch, capsys):
    reset_logging()

    def boom(values, data_type):
        raise RuntimeError("nope")

    monkeypatch.setattr(sheet_processor, "calculate_statistics", boom)
    code = cli_main(["process", str(sales_workbook)])
    assert code == 1
    out = capsys.readouterr().out
    assert "ERROR processing:" in out
    assert "error log written:" in out
