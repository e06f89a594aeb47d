"""Chat session manager that owns one learner's conversation state."""

from __future__ import annotations

import random
import time
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, Iterator, List, Optional, Sequence

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field

from chronos_guru.core.completion import CompletionClient, CompletionError
from chronos_guru.core.constants import (
    APOLOGY_MSG,
    AUTO_LANGUAGE,
    DEBATE_ACTIVATED_TEMPLATE,
    DEFAULT_LANGUAGE,
    GREETING_TEMPLATE,
    INTRODUCTION_TEMPLATE,
    LANGUAGE_NAMES,
    OUTPUT_FPATH,
    SYSTEM_SPEAKER,
)
from chronos_guru.core.debate_graph import DebateGraph, make_context, make_state
from chronos_guru.core.export import render_summary_html, save_summary_html
from chronos_guru.core.inference import (
    detect_gender,
    fallback_reflection,
    summarize,
    translate_to_english,
    write_reflection,
)
from chronos_guru.core.models import (
    Message,
    Progress,
    QuizQuestion,
    QuizResult,
    SpeechCue,
)
from chronos_guru.core.progress import ProgressStore
from chronos_guru.core.quiz import QuizAttempt, generate_quiz
from chronos_guru.core.recognition import DictationBuffer, RecognitionResult
from chronos_guru.core.speech import SpeechController
from chronos_guru.helpers.suggestion_helpers import suggest_figures


class SessionBusyError(RuntimeError):
    """A message was sent while a turn is still running."""


class ChatSession(BaseModel):
    """One learner's conversation with one or more historical figures.

    Create via ``ChatSession.create(...)``. All collaborators are injected
    so the API, the widget and tests can each supply their own.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    figure: str
    figures: List[str]
    language: str = DEFAULT_LANGUAGE
    messages: List[Message] = Field(default_factory=list)
    genders: Dict[str, str] = Field(default_factory=dict)
    loading: bool = False
    source: str = "unknown"
    start_ts: datetime = Field(default_factory=datetime.now)
    last_result: Optional[QuizResult] = None

    completion: CompletionClient = Field(exclude=True)
    speech: SpeechController = Field(exclude=True)
    progress: ProgressStore = Field(exclude=True)
    graph: DebateGraph = Field(exclude=True)
    quiz: QuizAttempt = Field(default_factory=QuizAttempt, exclude=True)
    dictation: DictationBuffer = Field(default_factory=DictationBuffer, exclude=True)
    choose: Callable[[Sequence[str]], str] = Field(
        default=random.choice, exclude=True
    )
    pause: Callable[[float], None] = Field(default=time.sleep, exclude=True)

    @classmethod
    def create(
        cls,
        figure: str,
        completion: CompletionClient,
        speech: SpeechController,
        progress: ProgressStore,
        language: str = DEFAULT_LANGUAGE,
        source: str = "unknown",
        graph: Optional[DebateGraph] = None,
        choose: Optional[Callable[[Sequence[str]], str]] = None,
        pause: Optional[Callable[[float], None]] = None,
    ) -> "ChatSession":
        """Open a conversation with ``figure`` and greet the learner."""
        figure = (figure or "").strip()
        if not figure:
            raise ValueError("A historical figure is required")
        check_language(language)
        logger.info(f"Creating chat session with {figure} (source={source})")
        session = cls(
            figure=figure,
            figures=[figure],
            language=language,
            source=source,
            completion=completion,
            speech=speech,
            progress=progress,
            graph=graph or DebateGraph.compile(),
            choose=choose or random.choice,
            pause=pause or time.sleep,
        )
        session.messages.append(
            Message(
                role="assistant",
                content=GREETING_TEMPLATE.format(figure=figure),
                speaker=figure,
            )
        )
        return session

    # ---------------------------
    # Figures and language
    # ---------------------------

    def gender_of(self, figure: str) -> str:
        """Inferred gender of ``figure``, detected once and cached."""
        if figure not in self.genders:
            self.genders[figure] = detect_gender(self.completion, figure)
            logger.debug(f"Detected gender for {figure}: {self.genders[figure]}")
        return self.genders[figure]

    def add_figure(self, name: str) -> List[Message]:
        """Invite another figure; returns the introduction messages added.

        Names already present (case-insensitive) are ignored.
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("A historical figure is required")
        if any(f.lower() == name.lower() for f in self.figures):
            logger.debug(f"{name} is already in the conversation")
            return []
        self.figures.append(name)
        added = [
            Message(
                role="assistant",
                content=INTRODUCTION_TEMPLATE.format(new_figure=name, figure=self.figure),
                speaker=name,
            ),
            Message(
                role="assistant",
                content=DEBATE_ACTIVATED_TEMPLATE.format(
                    figure=self.figure, new_figure=name
                ),
                speaker=SYSTEM_SPEAKER,
            ),
        ]
        self.messages.extend(added)
        logger.info(f"{name} joined the conversation with {self.figures[:-1]}")
        return added

    def suggestions(self) -> List[str]:
        """Figures to offer in the add-member picker."""
        return suggest_figures(self.figures)

    def set_language(self, language: str) -> None:
        """Change the reply and speech language."""
        check_language(language)
        self.language = language

    # ---------------------------
    # Conversation
    # ---------------------------

    def _publish(self, message: Message) -> None:
        self.messages.append(message)

    def _speak(self, message: Message) -> None:
        self.speak(message.content, message.speaker)

    def stream_send(self, text: str) -> Iterator[List[Message]]:
        """Send a learner message, yielding replies as each speaker finishes.

        Raises:
            ValueError: If ``text`` is blank.
            SessionBusyError: If a turn is already running.
        """
        text = (text or "").strip()
        if not text:
            raise ValueError("Message cannot be empty")
        if self.loading:
            raise SessionBusyError("Still waiting for the previous reply")

        history = list(self.messages)
        self._publish(Message(role="user", content=text))
        state = make_state(text, history, self.figures)
        context = make_context(
            self.completion,
            primary_figure=self.figure,
            language=self.language,
            publish=self._publish,
            speak=self._speak,
            choose=self.choose,
            pause=self.pause,
        )
        self.loading = True
        try:
            yield from self.graph.stream(state, context)
        except Exception:
            logger.exception("Turn failed outside of a completion request")
            apology = Message(role="assistant", content=APOLOGY_MSG, speaker=self.figure)
            self._publish(apology)
            yield [apology]
        finally:
            self.loading = False

    def send(self, text: str) -> List[Message]:
        """Send a learner message and return every reply of the turn."""
        replies: List[Message] = []
        for new in self.stream_send(text):
            replies.extend(new)
        return replies

    def speak(self, text: str, speaker: Optional[str] = None) -> SpeechCue:
        """Speak arbitrary text in the voice of ``speaker`` (default: primary)."""
        speaker = speaker or self.figure
        return self.speech.speak(text, self.language, self.gender_of(speaker), speaker)

    def _message(self, index: int) -> Message:
        # transcript positions only; negative indices are not positions
        if index < 0:
            raise IndexError(f"No message at {index}")
        return self.messages[index]

    def read_aloud(self, index: int) -> SpeechCue:
        """Speak an existing transcript message."""
        message = self._message(index)
        return self.speak(message.content, message.speaker)

    def stop_audio(self) -> None:
        """Stop any playing speech. Pending requests are not aborted."""
        self.speech.stop()

    def translate_message(self, index: int) -> Optional[str]:
        """Attach an English translation to an assistant message.

        Returns the translation, or None when it could not be produced.
        """
        message = self._message(index)
        if message.role != "assistant":
            raise ValueError("Only figure replies can be translated")
        if self.language == DEFAULT_LANGUAGE:
            return message.content
        try:
            english = translate_to_english(
                self.completion, message.content, self.language
            )
        except CompletionError as e:
            logger.warning(f"Translation of message {index} failed: {e}")
            return None
        if english:
            message.english_translation = english
        return english or None

    def dictate(self, results: Sequence[RecognitionResult], result_index: int = 0) -> str:
        """Feed one speech-recognition event; returns the text to show."""
        return self.dictation.feed(results, result_index)

    # ---------------------------
    # Quiz and progress
    # ---------------------------

    def start_quiz(self) -> List[QuizQuestion]:
        """Generate questions from the conversation and begin an attempt.

        Raises:
            QuizGenerationError: If the questions could not be generated.
        """
        if self.quiz.status != "NOT_STARTED":
            self.quiz.reset()
        questions = generate_quiz(self.completion, self.figure, self.messages)
        self.quiz.start(questions)
        return questions

    def answer_quiz(self, index: int, option: int) -> None:
        """Record a selection for the current attempt."""
        self.quiz.answer(index, option)

    def finish_quiz(self) -> tuple[QuizResult, Message, Progress]:
        """Score the attempt, post the figure's reflection and update progress."""
        result = self.quiz.finish()
        self.last_result = result
        try:
            text = write_reflection(
                self.completion,
                self.figure,
                result.score,
                result.total,
                result.wrong,
                self.language,
            )
        except CompletionError as e:
            logger.warning(f"Reflection request failed ({e}); using fallback text")
            text = ""
        if not text:
            text = fallback_reflection(
                self.figure, result.score, result.total, result.wrong, result.badges
            )
        reflection = Message(role="assistant", content=text, speaker=self.figure)
        self.messages.append(reflection)
        progress = self.progress.record_quiz(self.figure, result)
        return result, reflection, progress

    def reset_quiz(self) -> None:
        """Discard the current attempt."""
        self.quiz.reset()

    # ---------------------------
    # Summary export
    # ---------------------------

    def export_summary(
        self, save: bool = False, out_dir: Path = OUTPUT_FPATH
    ) -> tuple[str, Optional[Path]]:
        """Render the learning summary as printable HTML.

        Returns:
            tuple[str, Optional[Path]]: The page and, when ``save`` is set,
            where it was written.

        Raises:
            CompletionError: If the summary request fails.
        """
        summary = summarize(self.completion, self.figure, self.messages, self.language)
        html = render_summary_html(self.figure, summary)
        path = save_summary_html(html, self.figure, out_dir) if save else None
        return html, path


def check_language(language: str) -> None:
    """Raise ValueError for selectors other than a known code or "auto"."""
    if language != AUTO_LANGUAGE and language not in LANGUAGE_NAMES:
        raise ValueError(f"Unsupported language: {language}")
