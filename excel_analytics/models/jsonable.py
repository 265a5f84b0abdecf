from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

__all__ = [
    "json_safe",
]


def json_safe(value: Any) -> Any:
    """Convert a processed value into something ``json.dumps`` accepts.

    Datetimes become ISO-8601 strings; containers are converted recursively.
    """
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value
