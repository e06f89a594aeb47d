"""Dictation buffer for browser speech-recognition results."""

from __future__ import annotations

from typing import Sequence

from chronos_guru.core.models import DomainModel


class RecognitionResult(DomainModel):
    """One recognition result as reported by the browser."""

    transcript: str
    is_final: bool = False


class DictationBuffer:
    """Accumulate final fragments and surface the latest usable text.

    Mirrors how recognition events arrive: each event carries the results
    list and the index of the first changed result. Final fragments are
    appended for the rest of the session; interim fragments only count
    until something final exists.
    """

    def __init__(self) -> None:
        """Initialize an empty buffer."""
        self.reset()

    def reset(self) -> None:
        """Start a new dictation."""
        self.final_transcript = ""
        self.text = ""

    def feed(self, results: Sequence[RecognitionResult], result_index: int = 0) -> str:
        """Consume one recognition event and return the text to show."""
        interim = ""
        for res in results[result_index:]:
            if res.is_final:
                self.final_transcript += res.transcript
            else:
                interim += res.transcript
        text = (self.final_transcript or interim).strip()
        if text:
            self.text = text
        return self.text
