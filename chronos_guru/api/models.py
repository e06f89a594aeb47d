"""Pydantic models (request/response schemas) for the API.

Defines the schema used by FastAPI to validate requests and shape
responses. These models also drive the generated OpenAPI spec.

Notes/Assumptions:
    - Field names travel as camelCase (``sourceLanguage``, ``audioData``)
      so existing browser clients can talk to the API unchanged.
    - Stateless request fields are optional at the schema level; routes
      answer 400 "Missing required parameters" themselves.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from chronos_guru.core.models import (
    Badge,
    FigureRecord,
    Message,
    QuizQuestion,
    QuizResult,
    SpeechCue,
    TimelineItem,
    WrongAnswer,
)
from chronos_guru.core.recognition import RecognitionResult


class ApiModel(BaseModel):
    """Base schema with camelCase aliases that also accepts snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ErrorResponse(ApiModel):
    """Error body returned by the stateless routes."""

    error: str
    fallback_to_browser: Optional[bool] = None


# ---------------------------
# Stateless routes
# ---------------------------


class ChatRequest(ApiModel):
    """Request body for one persona reply.

    Attributes:
        figure (str): The figure who answers.
        messages (List[Message]): Conversation so far, ending with the prompt.
        language (Optional[str]): Reply language code or "auto".
        multi_figure_mode (bool): Add the debate block to the persona prompt.
        all_figures (Optional[List[str]]): Participants when in debate mode.
        responding_to (Optional[str]): Figure whose reply is being answered.
        debate_context (Optional[str]): Extra free-form debate context.
    """

    figure: Optional[str] = Field(None, examples=["Albert Einstein"])
    messages: List[Message] = []
    language: Optional[str] = None
    multi_figure_mode: bool = False
    all_figures: Optional[List[str]] = None
    responding_to: Optional[str] = None
    debate_context: Optional[str] = None


class MessageResponse(ApiModel):
    """A single generated text."""

    message: str


class FigureRequest(ApiModel):
    """Request naming a single figure."""

    figure: Optional[str] = Field(None, examples=["Cleopatra"])


class GenderResponse(ApiModel):
    """Inferred gender of a figure."""

    gender: str


class LanguageResponse(ApiModel):
    """Inferred primary language of a figure."""

    code: str
    name: str


class QuizRequest(ApiModel):
    """Request to generate quiz questions from a conversation."""

    figure: Optional[str] = None
    messages: List[Message] = []


class QuizResponse(ApiModel):
    """Generated quiz questions."""

    questions: List[QuizQuestion]


class ReflectionRequest(ApiModel):
    """Request for the figure's first-person quiz reflection."""

    figure: Optional[str] = None
    score: Optional[int] = None
    total: Optional[int] = None
    wrong: Optional[List[WrongAnswer]] = None
    language: Optional[str] = None


class SummaryRequest(ApiModel):
    """Request for a learning summary of a conversation."""

    figure: Optional[str] = None
    messages: List[Message] = []
    language: Optional[str] = None


class SummaryResponse(ApiModel):
    """Key points and timeline extracted from a conversation."""

    points: List[str] = []
    timeline: List[TimelineItem] = []


class TranslateRequest(ApiModel):
    """Request for the hosted translation service."""

    target_language: Optional[str] = Field(None, examples=["es-ES"])
    texts: Optional[List[str]] = None


class TranslateToEnglishRequest(ApiModel):
    """Request to translate one text into English."""

    text: Optional[str] = None
    source_language: Optional[str] = Field(None, examples=["fr"])


class TranslationResponse(ApiModel):
    """English translation of a text."""

    translation: str


class TtsRequest(ApiModel):
    """Request for hosted speech synthesis."""

    text: Optional[str] = None
    gender: Optional[str] = None


class TtsResponse(ApiModel):
    """Base64 audio produced by the hosted voice."""

    audio_data: str
    mime_type: str


# ---------------------------
# Session routes
# ---------------------------


class CreateSessionRequest(ApiModel):
    """Request body to open a chat session.

    Attributes:
        figure (str): The figure the learner wants to talk to.
        language (str): Reply language code or "auto".
    """

    figure: str = Field(..., examples=["Leonardo da Vinci"])
    language: str = "en"


class SendMessageRequest(ApiModel):
    """A learner message for the current session."""

    text: str


class AddFigureRequest(ApiModel):
    """A figure to invite into the conversation."""

    figure: str


class SetLanguageRequest(ApiModel):
    """New reply and speech language."""

    language: str


class SpeakRequest(ApiModel):
    """Ask the session to speak a transcript message."""

    index: int


class DictationRequest(ApiModel):
    """One speech-recognition event."""

    results: List[RecognitionResult] = []
    result_index: int = 0


class DictationResponse(ApiModel):
    """Text to display in the input box."""

    text: str


class AnswerRequest(ApiModel):
    """Selection for one quiz question."""

    index: int
    option: int


class SessionSnapshot(ApiModel):
    """Serializable view of a chat session.

    Attributes:
        session_id (str): Registry identifier.
        figure (str): Figure the session was opened with.
        figures (List[str]): Every participant, in join order.
        language (str): Current language selector.
        messages (List[Message]): Full transcript.
        loading (bool): Whether a turn is running.
        suggestions (List[str]): Figures offered in the add-member picker.
    """

    session_id: str
    figure: str
    figures: List[str]
    language: str
    messages: List[Message]
    loading: bool
    suggestions: List[str] = []


class SessionResponse(ApiModel):
    """Session snapshot plus what the call produced.

    Attributes:
        session (SessionSnapshot): Session after the call.
        new_messages (List[Message]): Messages appended by this call.
        cues (List[SpeechCue]): Speech for the client to play, in order.
        stop_audio (bool): Client should cancel any playing speech first.
    """

    session: SessionSnapshot
    new_messages: List[Message] = []
    cues: List[SpeechCue] = []
    stop_audio: bool = False


class QuizStateResponse(ApiModel):
    """Quiz attempt status for a session.

    Questions are sent without their correct answers while in progress.
    """

    status: str
    questions: List[Dict[str, Any]] = []
    answers: List[Optional[int]] = []
    result: Optional[QuizResult] = None


class FinishQuizResponse(ApiModel):
    """Result, reflection and updated progress after finishing a quiz."""

    result: QuizResult
    reflection: Message
    progress: "ProgressResponse"


class ExportRequest(ApiModel):
    """Summary export options."""

    save: bool = False


class ExportResponse(ApiModel):
    """Rendered summary document."""

    html: str
    path: Optional[str] = None


class ProgressResponse(ApiModel):
    """Stored learning progress."""

    points: int = 0
    badges: List[Badge] = []
    figures: Dict[str, FigureRecord] = {}


FinishQuizResponse.model_rebuild()
