"""Test doubles for the completion service, the voice service and playback."""

from __future__ import annotations

import json
import random
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Union

import httpx

from chronos_guru.core.completion import CompletionClient, CompletionError, HistoryItem
from chronos_guru.core.models import Message, SpeechCue
from chronos_guru.core.speech import PlaybackError
from chronos_guru.utils.murf import MurfClient

Reply = Union[str, Exception]


class Call(NamedTuple):
    """One recorded completion request."""

    history: List[HistoryItem]
    system: Optional[str]
    profile: str

    @property
    def last_content(self) -> str:
        """Content of the final history item."""
        last = self.history[-1]
        return last.content if isinstance(last, Message) else str(last["content"])


def _no_model(temperature: float, max_tokens: int) -> Any:
    raise AssertionError("FakeCompletion never builds a chat model")


class FakeCompletion(CompletionClient):
    """Completion client that answers from per-profile scripts.

    Each profile has a queue of replies; an ``Exception`` in the queue is
    raised instead of returned. An exhausted queue answers ``default``.
    """

    def __init__(
        self,
        replies: Optional[Dict[str, Sequence[Reply]]] = None,
        default: str = "Indeed.",
    ) -> None:
        super().__init__(model_factory=_no_model)
        self.replies: Dict[str, List[Reply]] = {
            k: list(v) for k, v in (replies or {}).items()
        }
        self.default = default
        self.calls: List[Call] = []

    def script(self, profile: str, *replies: Reply) -> "FakeCompletion":
        """Append replies for ``profile``."""
        self.replies.setdefault(profile, []).extend(replies)
        return self

    def complete(
        self,
        history: Sequence[HistoryItem],
        system: Optional[str] = None,
        profile: str = "chat",
    ) -> str:
        self.calls.append(Call(list(history), system, profile))
        queue = self.replies.get(profile)
        if queue:
            item = queue.pop(0)
            if isinstance(item, Exception):
                raise item
            return item
        return self.default

    def calls_for(self, profile: str) -> List[Call]:
        """Recorded requests for one profile."""
        return [c for c in self.calls if c.profile == profile]


def failing(message: str = "service down") -> CompletionError:
    """A completion failure to put in a script."""
    return CompletionError(message)


class RecordingPlayer:
    """Speech player that records cues; optionally rejects hosted audio."""

    def __init__(
        self,
        voices: Optional[Sequence[Mapping[str, Any]]] = None,
        fail_audio: bool = False,
        on_play: Optional[Callable[[SpeechCue], None]] = None,
    ) -> None:
        self.voices = list(voices or [])
        self.fail_audio = fail_audio
        self.on_play = on_play
        self.played: List[SpeechCue] = []
        self.stops = 0

    def play(self, cue: SpeechCue) -> None:
        if self.fail_audio and cue.kind == "audio":
            raise PlaybackError("autoplay blocked")
        if self.on_play is not None:
            self.on_play(cue)
        self.played.append(cue)

    def stop(self) -> None:
        self.stops += 1


def murf_client(
    handler: Callable[[httpx.Request], httpx.Response], api_key: Optional[str] = "test-key"
) -> MurfClient:
    """MurfClient whose HTTP traffic is served by ``handler``."""
    transport = httpx.MockTransport(handler)
    return MurfClient(api_key=api_key, http_client=httpx.Client(transport=transport))


def quiz_reply(n: int = 5, correct: int = 0) -> str:
    """A well-formed quiz reply with ``n`` questions."""
    questions = [
        {
            "question": f"Question {i + 1}?",
            "options": [f"Q{i + 1} option {k}" for k in "ABCD"],
            "correctAnswer": correct,
            "explanation": f"Because of fact {i + 1}.",
        }
        for i in range(n)
    ]
    return json.dumps({"questions": questions})


class QuietRandom(random.Random):
    """Random source whose rolls never fire, so speech text is left undecorated."""

    def random(self) -> float:
        return 0.99
