"""
Helpers for turning handler results into JSON-ready data.
"""

import base64
import dataclasses
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel


def to_jsonable(value: Any) -> Any:
    """
    Recursively convert a value into JSON-compatible data.

    Pydantic models and dataclasses become dicts, enums their values,
    bytes a base64 marker dict. Anything unknown falls back to ``str()``.

    Example:
        >>> to_jsonable({"when": datetime(2024, 1, 1), "tags": {"a"}})
        {'when': '2024-01-01T00:00:00', 'tags': ['a']}
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, BaseModel):
        return to_jsonable(value.model_dump(mode="json"))
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Enum):
        return to_jsonable(value.value)
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, (bytes, bytearray)):
        return {"type": "bytes", "base64": base64.b64encode(bytes(value)).decode("ascii")}
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    return str(value)


def truncate(text: str, limit: int, suffix: str = "...") -> str:
    """Cut ``text`` to ``limit`` characters, appending ``suffix`` when cut."""
    if len(text) <= limit:
        return text
    return text[:limit] + suffix
