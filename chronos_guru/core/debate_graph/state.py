"""Graph state schema definition."""

from __future__ import annotations

from typing import Any, Literal, Optional, Sequence

from loguru import logger
from typing_extensions import TypedDict

from chronos_guru.core.models import Message
from chronos_guru.utils.misc import preview

DebatePhase = Literal["IDLE", "AWAITING_FIRST_SPEAKER", "AWAITING_NEXT_SPEAKER"]


class DebateState(TypedDict, total=True):
    """Shared state for one user turn.

    A few langgraph notes:
    - Nodes receive the whole state and return only the keys they change.
    - No reducers are declared, so returned keys overwrite; nodes always
      return complete lists.
    """

    phase: DebatePhase
    user_message: str
    # transcript as it was before the user's message for this turn
    history: list[Message]
    figures: list[str]
    first_speaker: Optional[str]
    # figures still to respond, in order
    queue: list[str]
    # replies produced so far this turn (plus the apology, if any)
    responses: list[Message]
    # messages produced by the most recent node; read by stream consumers
    new_messages: list[Message]
    failed: bool
    error: Optional[str]


def make_state(
    user_message: str,
    history: Sequence[Message],
    figures: Sequence[str],
) -> DebateState:
    """Create the initial state for one turn."""
    if not figures:
        raise ValueError("At least one figure is required")
    return {
        "phase": "IDLE",
        "user_message": user_message,
        "history": list(history),
        "figures": list(figures),
        "first_speaker": None,
        "queue": [],
        "responses": [],
        "new_messages": [],
        "failed": False,
        "error": None,
    }


def display_state_snapshot(state: dict[str, Any]) -> None:
    """Log a compact snapshot of the turn state in one call."""
    parts = ["Debate state snapshot:"]
    for k in ("phase", "figures", "first_speaker", "queue", "failed", "error"):
        parts.append(f"{k}: {state.get(k)}")
    parts.append(f"history length: {len(state.get('history') or [])}")
    for m in state.get("responses") or []:
        parts.append(f"  {m.speaker}: {preview(m.content)}")
    logger.debug("\n".join(parts))
