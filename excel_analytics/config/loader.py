from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..excel.reader import ReaderOptions
from ..models.chart import DEFAULT_CHART_LIMIT
from ..services.pagination import DATA_PAGE_LIMIT, TABLE_PAGE_LIMIT
from ..services.preview import (
    DEFAULT_ALLOWED_EXTENSIONS,
    DEFAULT_MAX_FILE_SIZE,
    SHEET_PREVIEW_ROWS,
    UPLOAD_PREVIEW_ROWS,
)

"""Config loader.

Responsibilities:
- Load YAML config (default ``config/analytics.yml``)
- Validate against the bundled JSON schema
- Apply defaults for every omitted key
"""

SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
DEFAULT_CONFIG_PATH = Path("config/analytics.yml")
CONFIG_ENV_VAR = "EXCEL_ANALYTICS_CONFIG"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class PaginationConfig:
    data_limit: int = DATA_PAGE_LIMIT
    table_limit: int = TABLE_PAGE_LIMIT


@dataclass(frozen=True)
class PreviewConfig:
    upload_rows: int = UPLOAD_PREVIEW_ROWS
    default_rows: int = SHEET_PREVIEW_ROWS


@dataclass(frozen=True)
class UploadConfig:
    allowed_extensions: tuple[str, ...] = DEFAULT_ALLOWED_EXTENSIONS
    max_file_size_bytes: int = DEFAULT_MAX_FILE_SIZE


@dataclass(frozen=True)
class AnalyticsConfig:
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    chart_default_limit: int = DEFAULT_CHART_LIMIT
    preview: PreviewConfig = field(default_factory=PreviewConfig)
    reader: ReaderOptions = field(default_factory=ReaderOptions)
    upload: UploadConfig = field(default_factory=UploadConfig)
    log_level: str = "INFO"


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the bundled JSON schema.

    Raises:
        ConfigError: if the schema file is missing or invalid, or the config
            fails validation (unknown keys, wrong types, out-of-range values)
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _from_mapping(data: dict[str, Any]) -> AnalyticsConfig:
    pag = data.get("pagination", {})
    chart = data.get("chart", {})
    prev = data.get("preview", {})
    rdr = data.get("reader", {})
    upl = data.get("upload", {})
    log = data.get("logging", {})
    return AnalyticsConfig(
        pagination=PaginationConfig(
            data_limit=pag.get("data_limit", DATA_PAGE_LIMIT),
            table_limit=pag.get("table_limit", TABLE_PAGE_LIMIT),
        ),
        chart_default_limit=chart.get("default_limit", DEFAULT_CHART_LIMIT),
        preview=PreviewConfig(
            upload_rows=prev.get("upload_rows", UPLOAD_PREVIEW_ROWS),
            default_rows=prev.get("default_rows", SHEET_PREVIEW_ROWS),
        ),
        reader=ReaderOptions(
            pandas_na=rdr.get("pandas_na", False),
            keep_na_strings=list(rdr.get("keep_na_strings", [])) or None,
            skip_blank_rows=rdr.get("skip_blank_rows", True),
        ),
        upload=UploadConfig(
            allowed_extensions=tuple(e.lower() for e in upl.get("allowed_extensions", DEFAULT_ALLOWED_EXTENSIONS)),
            max_file_size_bytes=upl.get("max_file_size_bytes", DEFAULT_MAX_FILE_SIZE),
        ),
        log_level=log.get("level", "INFO"),
    )


def load_config(path: Path) -> AnalyticsConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("config root must be a mapping")

    _validate_config_schema(data)
    return _from_mapping(data)


def resolve_config(path: Path | None = None) -> AnalyticsConfig:
    """Load the effective configuration.

    Resolution order: explicit ``path`` > ``$EXCEL_ANALYTICS_CONFIG`` >
    ``config/analytics.yml``. An explicit or environment path must exist; the
    default path falls back to built-in defaults when absent.
    """
    if path is not None:
        return load_config(path)
    env_path = os.getenv(CONFIG_ENV_VAR)
    if env_path:
        return load_config(Path(env_path))
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    return AnalyticsConfig()
