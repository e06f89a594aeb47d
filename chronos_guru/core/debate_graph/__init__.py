"""Debate graph package."""

from .context import DebateContext, make_context
from .core import DebateGraph, composite_prompt
from .state import DebateState, make_state

__all__ = [
    "DebateGraph",
    "DebateContext",
    "DebateState",
    "composite_prompt",
    "make_context",
    "make_state",
]
