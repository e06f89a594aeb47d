"""Domain models shared by the core, the API and the widget.

All models serialize with camelCase keys so that persisted documents and
HTTP payloads keep the field names browser clients already use
(e.g. ``correctAnswer``, ``englishTranslation``).
"""

from __future__ import annotations

from typing import Dict, List, Literal, Optional

from pydantic import ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from chronos_guru.core.constants import OPTIONS_PER_QUESTION
from chronos_guru.utils.serde import SerdeMixin

Role = Literal["user", "assistant"]
Gender = Literal["male", "female"]


class DomainModel(SerdeMixin):
    """Base model with camelCase aliases that still accepts snake_case names."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Message(DomainModel):
    """One transcript entry.

    Attributes:
        role: "user" or "assistant". Alternation is not enforced.
        content: The message text.
        english_translation: English rendering, filled on request.
        speaker: Figure that produced an assistant message ("System" for notices).
    """

    role: Role
    content: str
    english_translation: Optional[str] = None
    speaker: Optional[str] = None


class Badge(DomainModel):
    """An achievement awarded on quiz completion."""

    id: str
    name: str
    description: str
    icon: str
    earned: bool = True


class QuizQuestion(DomainModel):
    """A four-option multiple choice question."""

    question: str
    options: List[str]
    correct_answer: int = Field(ge=0, le=OPTIONS_PER_QUESTION - 1)
    explanation: str = ""

    @field_validator("options")
    @classmethod
    def _four_options(cls, v: List[str]) -> List[str]:
        if len(v) != OPTIONS_PER_QUESTION:
            raise ValueError(
                f"Each question needs exactly {OPTIONS_PER_QUESTION} options,"
                f" got {len(v)}."
            )
        return v


class WrongAnswer(DomainModel):
    """A missed question reported with option text rather than indices."""

    index: int
    question: str
    user_answer: str
    correct_answer: str
    explanation: str = ""


class QuizResult(DomainModel):
    """Outcome of a completed quiz attempt."""

    score: int = Field(ge=0)
    total: int = Field(ge=1)
    wrong: List[WrongAnswer] = Field(default_factory=list)
    badges: List[Badge] = Field(default_factory=list)

    @model_validator(mode="after")
    def _consistent(self) -> "QuizResult":
        if self.score > self.total:
            raise ValueError("score cannot exceed total")
        if len(self.wrong) != self.total - self.score:
            raise ValueError("wrong answers must account for every missed point")
        return self


class FigureRecord(DomainModel):
    """Per-figure quiz history."""

    quizzes: int = 0
    perfect: bool = False


class Progress(DomainModel):
    """The persisted learning progress document."""

    points: int = 0
    badges: List[Badge] = Field(default_factory=list)
    figures: Dict[str, FigureRecord] = Field(default_factory=dict)


class TimelineItem(DomainModel):
    """One dated entry of a learning summary."""

    date: str
    event: str


class Summary(DomainModel):
    """Learning summary extracted from a conversation."""

    points: List[str] = Field(default_factory=list)
    timeline: List[TimelineItem] = Field(default_factory=list)


class AudioClip(DomainModel):
    """Base64 encoded audio returned by the hosted voice service."""

    audio_data: str
    mime_type: str = "audio/mpeg"


class SpeechCue(DomainModel):
    """One playback instruction handed to a speech player.

    ``kind == "audio"`` carries hosted audio; ``kind == "native"`` asks the
    client to run its own speech synthesis with the given locale and voice.
    """

    kind: Literal["audio", "native"]
    speaker: Optional[str] = None
    text: str
    locale: str
    voice: Optional[str] = None
    rate: float = 1.0
    audio_data: Optional[str] = None
    mime_type: Optional[str] = None
