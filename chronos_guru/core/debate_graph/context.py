"""Graph context schema definition."""

from __future__ import annotations

import random
import time
from typing import Callable, Optional, Sequence

from loguru import logger
from typing_extensions import TypedDict

from chronos_guru.core.completion import CompletionClient
from chronos_guru.core.constants import DEBATE_PACING_SECONDS
from chronos_guru.core.models import Message


class DebateContext(TypedDict, total=True):
    """Static collaborators for one turn. Not meant to change during a run."""

    completion: CompletionClient
    language: Optional[str]
    # figure the conversation was opened with; apologies are tagged to it
    primary_figure: str
    # appends a message to the transcript
    publish: Callable[[Message], None]
    # speaks a message and returns once playback has completed
    speak: Callable[[Message], None]
    # picks the first respondent
    choose: Callable[[Sequence[str]], str]
    # sleeps between speakers
    pause: Callable[[float], None]
    pacing_seconds: float


def make_context(
    completion: CompletionClient,
    primary_figure: str,
    language: Optional[str] = None,
    publish: Optional[Callable[[Message], None]] = None,
    speak: Optional[Callable[[Message], None]] = None,
    choose: Optional[Callable[[Sequence[str]], str]] = None,
    pause: Optional[Callable[[float], None]] = None,
    pacing_seconds: float = DEBATE_PACING_SECONDS,
) -> DebateContext:
    """Create a DebateContext, filling unset collaborators with defaults."""
    if publish is None:
        logger.debug("No publish callback provided; replies are only returned.")
    if speak is None:
        logger.debug("No speak callback provided; replies will not be spoken.")
    return {
        "completion": completion,
        "language": language,
        "primary_figure": primary_figure,
        "publish": publish or (lambda _m: None),
        "speak": speak or (lambda _m: None),
        "choose": choose or random.choice,
        "pause": pause or time.sleep,
        "pacing_seconds": pacing_seconds,
    }
