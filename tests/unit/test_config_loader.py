from __future__ import annotations

from pathlib import Path

import pytest

from excel_analytics.config.loader import (
    AnalyticsConfig,
    ConfigError,
    load_config,
    resolve_config,
)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_when_no_file(temp_workdir: Path):
    cfg = resolve_config()
    assert cfg == AnalyticsConfig()
    assert cfg.pagination.data_limit == 100
    assert cfg.pagination.table_limit == 10
    assert cfg.chart_default_limit == 1000
    assert cfg.preview.upload_rows == 100
    assert cfg.reader.skip_blank_rows is True
    assert cfg.reader.pandas_na is False
    assert cfg.upload.allowed_extensions == (".xlsx", ".xls", ".csv")


def test_default_path_is_read(temp_workdir: Path):
    _write(temp_workdir / "config" / "analytics.yml", "pagination:\n  data_limit: 25\n")
    cfg = resolve_config()
    assert cfg.pagination.data_limit == 25
    assert cfg.pagination.table_limit == 10


def test_env_var_takes_precedence(temp_workdir: Path, monkeypatch):
    _write(temp_workdir / "config" / "analytics.yml", "chart:\n  default_limit: 5\n")
    other = _write(temp_workdir / "other.yml", "chart:\n  default_limit: 50\n")
    monkeypatch.setenv("EXCEL_ANALYTICS_CONFIG", str(other))
    assert resolve_config().chart_default_limit == 50


def test_explicit_path_wins(temp_workdir: Path, monkeypatch):
    env = _write(temp_workdir / "env.yml", "chart:\n  default_limit: 50\n")
    explicit = _write(temp_workdir / "explicit.yml", "chart:\n  default_limit: 7\n")
    monkeypatch.setenv("EXCEL_ANALYTICS_CONFIG", str(env))
    assert resolve_config(explicit).chart_default_limit == 7


def test_reader_and_upload_sections(temp_workdir: Path):
    path = _write(
        temp_workdir / "c.yml",
        "reader:\n  pandas_na: true\n  keep_na_strings: [NA]\n  skip_blank_rows: false\n"
        "upload:\n  allowed_extensions: [.XLSX]\n  max_file_size_bytes: 1024\n"
        "logging:\n  level: DEBUG\n",
    )
    cfg = load_config(path)
    assert cfg.reader.pandas_na is True
    assert cfg.reader.keep_na_strings == ["NA"]
    assert cfg.reader.skip_blank_rows is False
    assert cfg.upload.allowed_extensions == (".xlsx",)
    assert cfg.upload.max_file_size_bytes == 1024
    assert cfg.log_level == "DEBUG"


def test_empty_file_gives_defaults(temp_workdir: Path):
    assert load_config(_write(temp_workdir / "empty.yml", "")) == AnalyticsConfig()


def test_missing_explicit_file(temp_workdir: Path):
    with pytest.raises(ConfigError, match="config file not found"):
        resolve_config(temp_workdir / "absent.yml")


def test_invalid_yaml(temp_workdir: Path):
    with pytest.raises(ConfigError, match="invalid yaml"):
        load_config(_write(temp_workdir / "bad.yml", "pagination: [1, 2\n"))


def test_root_must_be_mapping(temp_workdir: Path):
    with pytest.raises(ConfigError, match="mapping"):
        load_config(_write(temp_workdir / "list.yml", "- a\n- b\n"))


@pytest.mark.parametrize(
    "text",
    [
        "pagination:\n  data_limit: 0\n",
        "pagination:\n  data_limit: ten\n",
        "unknown_section: {}\n",
        "logging:\n  level: LOUD\n",
    ],
)
def test_schema_violations(temp_workdir: Path, text: str):
    with pytest.raises(ConfigError, match="config validation failed"):
        load_config(_write(temp_workdir / "invalid.yml", text))


def test_repository_config_is_valid():
    repo_config = Path(__file__).resolve().parents[2] / "config" / "analytics.yml"
    cfg = load_config(repo_config)
    assert cfg.pagination.data_limit == 100
