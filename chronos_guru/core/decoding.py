"""Lenient decoding of structured model replies.

Models are asked for bare JSON but often wrap it in prose or markdown
fences. Decoding never raises; callers receive a tagged result and pick
their own fallback.
"""

from __future__ import annotations

import json
import re
from typing import Any, NamedTuple, Optional, Type, TypeVar

from loguru import logger
from pydantic import BaseModel, ValidationError

M = TypeVar("M", bound=BaseModel)

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)
_OBJECT_RE = re.compile(r"\{.*\}", re.DOTALL)


class Decoded(NamedTuple):
    """Tagged decoding result."""

    ok: bool
    value: Any = None
    error: Optional[str] = None


def decode_json(text: Optional[str]) -> Decoded:
    """Decode a JSON object from a model reply.

    Tries the whole (fence-stripped) reply first, then the outermost
    ``{...}`` span found inside it.
    """
    if not text or not text.strip():
        return Decoded(ok=False, error="empty reply")

    cleaned = _FENCE_RE.sub("", text.strip())
    try:
        return Decoded(ok=True, value=json.loads(cleaned))
    except json.JSONDecodeError:
        pass

    match = _OBJECT_RE.search(cleaned)
    if not match:
        logger.debug(f"No JSON object found in reply: {text[:120]!r}")
        return Decoded(ok=False, error="no JSON object in reply")
    try:
        return Decoded(ok=True, value=json.loads(match.group(0)))
    except json.JSONDecodeError as e:
        logger.debug(f"JSON object in reply did not parse: {e}")
        return Decoded(ok=False, error=f"invalid JSON: {e}")


def decode_model(text: Optional[str], model: Type[M]) -> Decoded:
    """Decode a reply and validate it into ``model``."""
    decoded = decode_json(text)
    if not decoded.ok:
        return decoded
    try:
        return Decoded(ok=True, value=model.model_validate(decoded.value))
    except ValidationError as e:
        logger.debug(f"Reply did not match {model.__name__}: {e}")
        return Decoded(ok=False, error=f"unexpected shape: {e.error_count()} error(s)")
