from __future__ import annotations

import datetime as dt
import json
from typing import Any, TypeVar

T = TypeVar("T")


def now_iso() -> str:
    return dt.datetime.now(dt.UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_or_default(text: str | None, fallback: T) -> T:
    """Parse JSON text, returning ``fallback`` for anything unusable.

    Missing text, invalid JSON and values whose type differs from the
    fallback's all yield the fallback. Never raises.
    """
    if not text:
        return fallback
    try:
        value: Any = json.loads(text)
    except (json.JSONDecodeError, TypeError, ValueError):
        return fallback
    if fallback is not None and not isinstance(value, type(fallback)):
        return fallback
    return value
