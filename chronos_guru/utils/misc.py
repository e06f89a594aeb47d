"""Miscellaneous utility functions for Chronos Guru."""

import json
from typing import Any


def byte_size_json(obj: Any) -> int:
    """Return the size in bytes of the JSON-encoded object."""
    return len(json.dumps(obj, ensure_ascii=False, default=str).encode("utf-8"))


def preview(text: str, limit: int = 80) -> str:
    """Single-line preview of ``text`` for log messages."""
    flat = " ".join(str(text).split())
    return flat if len(flat) <= limit else flat[: limit - 1] + "…"
