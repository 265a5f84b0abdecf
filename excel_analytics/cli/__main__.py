from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from excel_analytics.config.loader import AnalyticsConfig, ConfigError, resolve_config
from excel_analytics.errors import (
    FileTooLargeError,
    InvalidChartRequestError,
    ProcessingError,
    SheetNotFoundError,
    UnsupportedFileTypeError,
    WorkbookNotFoundError,
)
from excel_analytics.logging.error_log import ErrorLogBuffer
from excel_analytics.logging.init import apply_level, log_summary, setup_logging
from excel_analytics.models.chart import ChartRequest
from excel_analytics.models.jsonable import json_safe
from excel_analytics.services.chart_formatter import build_chart_response
from excel_analytics.services.chart_metadata import build_chart_metadata
from excel_analytics.services.pagination import paginate, parse_positive_int
from excel_analytics.services.preview import (
    build_upload_preview,
    preview_sheet,
    read_sheet_records,
    validate_upload,
)
from excel_analytics.services.sheet_processor import process_sheet, process_workbook
from excel_analytics.services.summary import render_sheet_summary, render_workbook_summary

"""CLI entrypoint.

    python -m excel_analytics.cli process  FILE [--sheet S | --all-sheets] [--output PATH]
    python -m excel_analytics.cli preview  FILE [--sheet S] [--limit N] [--upload]
    python -m excel_analytics.cli data     FILE [--sheet S] [--page P] [--limit L] [--table] [--raw]
    python -m excel_analytics.cli chart    FILE --x-axis X [--y-axis Y] [--group-by G] [--chart-type T]
    python -m excel_analytics.cli metadata FILE [--sheet S]

JSON goes to stdout (or --output); log lines are labeled (INFO|WARN|ERROR|SUMMARY).
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_PARTIAL_FAILURE = 2
EXIT_CLIENT_ERROR = 3

_CLIENT_ERRORS = (
    WorkbookNotFoundError,
    SheetNotFoundError,
    InvalidChartRequestError,
    UnsupportedFileTypeError,
    FileTooLargeError,
)


def _load_env_file(path: Path, override: bool = True) -> None:
    """Load .env so EXCEL_ANALYTICS_CONFIG can be set per checkout."""
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="excel-analytics", description="Spreadsheet ingestion and analytics")
    p.add_argument("--config", type=Path, default=None, help="Path to analytics.yml")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    def _file_cmd(name: str, help_text: str) -> argparse.ArgumentParser:
        sp = sub.add_parser(name, help=help_text)
        sp.add_argument("file", type=Path)
        sp.add_argument("--sheet", default=None)
        sp.add_argument("--output", type=Path, default=None, help="Write JSON here instead of stdout")
        return sp

    sp = _file_cmd("process", "Process a sheet into columns/data/summary")
    sp.add_argument("--all-sheets", action="store_true")

    sp = _file_cmd("preview", "Raw header + leading rows (no type inference)")
    sp.add_argument("--limit", default=None)
    sp.add_argument("--upload", action="store_true", help="Validate as an upload and preview every sheet")

    sp = _file_cmd("data", "Paginated rows")
    sp.add_argument("--page", default=None)
    sp.add_argument("--limit", default=None)
    sp.add_argument("--table", action="store_true", help="Use the table-view default page size")
    sp.add_argument("--raw", action="store_true", help="Paginate raw sheet records instead of processed rows")

    sp = _file_cmd("chart", "Chart-ready series")
    sp.add_argument("--chart-type", default="bar")
    sp.add_argument("--x-axis", default=None)
    sp.add_argument("--y-axis", default=None)
    sp.add_argument("--group-by", default=None)
    sp.add_argument("--limit", default=None)

    _file_cmd("metadata", "Fields and recommended charts")
    return p.parse_args(argv)


def _emit(payload: Any, output: Path | None) -> None:
    text = json.dumps(json_safe(payload), ensure_ascii=False, indent=2, default=str)
    if output is not None:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(text + "\n", encoding="utf-8")
    else:
        print(text)


def _cmd_process(args: argparse.Namespace, cfg: AnalyticsConfig, error_log: ErrorLogBuffer) -> int:
    if args.all_sheets:
        result = process_workbook(args.file, reader_options=cfg.reader, error_log=error_log)
        _emit(
            {
                "file": result.file,
                "sheets": [s.to_dict() for s in result.sheets],
                "failures": [{"sheet": f.sheet_name, "error": f.error} for f in result.failures],
            },
            args.output,
        )
        log_summary(render_workbook_summary(result)[len("SUMMARY "):])
        return EXIT_SUCCESS if result.success else EXIT_PARTIAL_FAILURE

    sheet = process_sheet(args.file, args.sheet, reader_options=cfg.reader, error_log=error_log)
    _emit(sheet.to_dict(), args.output)
    log_summary(render_sheet_summary(args.file.name, sheet)[len("SUMMARY "):])
    return EXIT_SUCCESS


def _cmd_preview(args: argparse.Namespace, cfg: AnalyticsConfig) -> int:
    if args.upload:
        validate_upload(
            args.file,
            allowed_extensions=cfg.upload.allowed_extensions,
            max_file_size=cfg.upload.max_file_size_bytes,
        )
        previews = build_upload_preview(args.file, cfg.preview.upload_rows, cfg.reader)
        _emit({"fileName": args.file.name, "sheets": [p.to_dict() for p in previews]}, args.output)
        return EXIT_SUCCESS

    limit = parse_positive_int(args.limit, cfg.preview.default_rows)
    preview = preview_sheet(args.file, args.sheet, limit, cfg.reader)
    payload = preview.to_dict()
    payload.update(
        {
            "fileName": args.file.name,
            "requestedLimit": limit,
            "actualDataRows": preview.data_rows_shown,
        }
    )
    _emit(payload, args.output)
    return EXIT_SUCCESS


def _cmd_data(args: argparse.Namespace, cfg: AnalyticsConfig, error_log: ErrorLogBuffer) -> int:
    default_limit = cfg.pagination.table_limit if args.table else cfg.pagination.data_limit
    if args.raw:
        sheet_name, rows = read_sheet_records(args.file, args.sheet, cfg.reader)
    else:
        sheet = process_sheet(args.file, args.sheet, reader_options=cfg.reader, error_log=error_log)
        sheet_name, rows = sheet.sheet_name, sheet.data
    page = paginate(rows, args.page, args.limit, default_limit=default_limit)
    payload = page.to_dict()
    payload["sheetName"] = sheet_name
    _emit(payload, args.output)
    return EXIT_SUCCESS


def _cmd_chart(args: argparse.Namespace, cfg: AnalyticsConfig, error_log: ErrorLogBuffer) -> int:
    request = ChartRequest(
        x_axis=args.x_axis,
        chart_type=args.chart_type,
        y_axis=args.y_axis,
        group_by=args.group_by,
        limit=parse_positive_int(args.limit, cfg.chart_default_limit),
    )
    sheet = process_sheet(args.file, args.sheet, reader_options=cfg.reader, error_log=error_log)
    response = build_chart_response(sheet.data, sheet.columns, request)
    _emit(response.to_dict(), args.output)
    return EXIT_SUCCESS


def _cmd_metadata(args: argparse.Namespace, cfg: AnalyticsConfig, error_log: ErrorLogBuffer) -> int:
    sheet = process_sheet(args.file, args.sheet, reader_options=cfg.reader, error_log=error_log)
    _emit(build_chart_metadata(sheet).to_dict(), args.output)
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None のときのみシステム引数を読む (テストで [] を渡すケース)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    try:
        cfg = resolve_config(args.config)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    apply_level(logging.DEBUG if args.debug else cfg.log_level)
    logger.debug("debug mode enabled")

    error_log = ErrorLogBuffer()
    try:
        if args.command == "process":
            return _cmd_process(args, cfg, error_log)
        if args.command == "preview":
            return _cmd_preview(args, cfg)
        if args.command == "data":
            return _cmd_data(args, cfg, error_log)
        if args.command == "chart":
            return _cmd_chart(args, cfg, error_log)
        return _cmd_metadata(args, cfg, error_log)
    except _CLIENT_ERRORS as e:
        logger.error(f"{args.command}: {e}")
        return EXIT_CLIENT_ERROR
    except ProcessingError as e:
        logger.error(f"processing: {e}")
        return EXIT_FATAL
    finally:
        failed = error_log.failed_sheets()
        path = error_log.flush()
        if path is not None:
            logger.info(f"error log written: {path} (sheets={len(failed)})")


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
