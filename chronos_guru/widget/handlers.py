"""Web handlers for the Gradio interface to Chronos Guru.

Each handler takes the per-browser ``SessionState`` and returns component
updates. Speech produced during a handler is drained from the session's
``CuePlayer`` into the hidden cue JSON, which the browser plays in order.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, List, Tuple

import gradio as gr
from loguru import logger
from pydantic import ValidationError

from chronos_guru.core.completion import CompletionError
from chronos_guru.core.constants import DEFAULT_LANGUAGE
from chronos_guru.core.quiz import QuizGenerationError, QuizStateError
from chronos_guru.core.recognition import RecognitionResult
from chronos_guru.core.session_manager import SessionBusyError
from chronos_guru.widget.constants import (
    QUIZ_FAILED_ALERT,
    USER_FRIENDLY_EXC,
)
from chronos_guru.widget.helpers import (
    chatbot_value,
    create_session,
    cue_payload,
    progress_markdown,
    progress_store,
    require_session,
)
from chronos_guru.widget.session_state import SessionState

Update = Dict[str, Any]
ChatValue = List[Dict[str, str]]


# ---------------------------
# Landing
# ---------------------------


def load_progress() -> str:
    """Render stored progress for the landing page."""
    return progress_markdown(progress_store().load())


def on_start(
    state: SessionState, figure: str, language: str
) -> Tuple[SessionState, Update, Update, ChatValue, Update, Update]:
    """Handle clicking Start on the landing page."""
    if not figure or not figure.strip():
        raise gr.Error("Please enter a historical figure.")
    session = create_session(state, figure, language or DEFAULT_LANGUAGE)
    logger.debug(f"Widget session started with {session.figure}")
    return (
        state,
        gr.update(visible=False),  # hide landing
        gr.update(visible=True),  # show chat
        chatbot_value(state),
        gr.update(value=session.language),
        gr.update(choices=session.suggestions(), value=None),
    )


def on_reset_progress() -> str:
    """Clear the stored journey after the browser confirmed."""
    try:
        progress = progress_store().reset()
    except Exception as e:
        logger.error(f"Error resetting progress: {e}", exc_info=True)
        raise gr.Error(USER_FRIENDLY_EXC)
    return progress_markdown(progress)


def on_back(
    state: SessionState,
) -> Tuple[SessionState, Update, Update, Update, str, Dict[str, Any]]:
    """Leave the conversation and return to the landing page."""
    if "session" in state:
        state["session"].stop_audio()
    payload = cue_payload(state)
    state.pop("session", None)
    state.pop("player", None)
    return (
        state,
        gr.update(visible=True),  # show landing
        gr.update(visible=False),  # hide chat
        gr.update(visible=False),  # hide quiz
        load_progress(),
        payload,
    )


# ---------------------------
# Conversation
# ---------------------------


def on_send(
    state: SessionState, text: str
) -> Iterator[Tuple[SessionState, ChatValue, Update, Dict[str, Any]]]:
    """Send a learner message, yielding the transcript as each figure replies."""
    session = require_session(state)
    text = (text or "").strip()
    if not text:
        return
    # show the learner's message while the first figure is thinking
    pending = chatbot_value(state) + [{"role": "user", "content": text}]
    yield state, pending, gr.update(value="", interactive=False), cue_payload(state)
    try:
        for _new in session.stream_send(text):
            yield state, chatbot_value(state), gr.update(), cue_payload(state)
    except SessionBusyError:
        gr.Warning("Still waiting for the previous reply.")
    except Exception as e:
        logger.error(f"Error while sending message: {e}", exc_info=True)
        raise gr.Error(USER_FRIENDLY_EXC)
    yield state, chatbot_value(state), gr.update(interactive=True), cue_payload(state)


def on_add_figure(
    state: SessionState, name: str
) -> Tuple[SessionState, ChatValue, Update]:
    """Invite another figure into the conversation."""
    session = require_session(state)
    if not name or not name.strip():
        raise gr.Error("Please choose or type a figure to add.")
    session.add_figure(name)
    return (
        state,
        chatbot_value(state),
        gr.update(choices=session.suggestions(), value=None),
    )


def on_language_change(state: SessionState, language: str) -> SessionState:
    """Switch the reply and speech language."""
    session = require_session(state)
    try:
        session.set_language(language)
    except ValueError as e:
        raise gr.Error(str(e))
    return state


def on_read_aloud(
    state: SessionState, evt: gr.SelectData
) -> Tuple[SessionState, Dict[str, Any]]:
    """Speak the clicked transcript message."""
    session = require_session(state)
    index = evt.index if isinstance(evt.index, int) else evt.index[0]
    try:
        session.read_aloud(index)
    except IndexError:
        logger.warning(f"Read aloud requested for missing message {index}")
    return state, cue_payload(state)


def on_stop_audio(state: SessionState) -> Tuple[SessionState, Dict[str, Any]]:
    """Stop any speech that is playing."""
    session = require_session(state)
    session.stop_audio()
    return state, cue_payload(state)


def on_toggle_english(
    state: SessionState, show: bool
) -> Tuple[SessionState, ChatValue]:
    """Show or hide English translations under figure replies."""
    session = require_session(state)
    state["show_english"] = bool(show)
    if show and session.language != DEFAULT_LANGUAGE:
        for i, m in enumerate(session.messages):
            if m.role == "assistant" and m.english_translation is None:
                if session.translate_message(i) is None:
                    gr.Warning("Some replies could not be translated.")
                    break
    return state, chatbot_value(state)


def on_export(state: SessionState) -> Update:
    """Generate the learning summary and offer it as a download."""
    session = require_session(state)
    try:
        _html, path = session.export_summary(save=True)
    except CompletionError as e:
        logger.error(f"Summary export failed: {e}", exc_info=True)
        raise gr.Error("Failed to generate summary. Please try again.")
    return gr.update(value=str(path), visible=True)


def on_dictation(state: SessionState, raw: str) -> str:
    """Turn a browser recognition event into the text for the input box."""
    session = require_session(state)
    try:
        event = json.loads(raw or "{}")
        results = [RecognitionResult.model_validate(r) for r in event.get("results", [])]
    except (json.JSONDecodeError, ValidationError, AttributeError) as e:
        logger.warning(f"Ignoring malformed dictation event: {e}")
        return session.dictation.text
    return session.dictate(results, int(event.get("resultIndex", 0)))


def on_mic_start(state: SessionState) -> SessionState:
    """Start a fresh dictation."""
    require_session(state).dictation.reset()
    return state


# ---------------------------
# Quiz
# ---------------------------


def _question_updates(state: SessionState) -> Tuple[str, Update, Update]:
    quiz = require_session(state).quiz
    i = state.get("quiz_index", 0)
    q = quiz.questions[i]
    last = i == len(quiz.questions) - 1
    # the radio preprocesses to an index but its value is the option text
    selected = quiz.answers[i]
    return (
        f"**Question {i + 1} of {len(quiz.questions)}**\n\n{q.question}",
        gr.update(
            choices=q.options,
            value=q.options[selected] if selected is not None else None,
            visible=True,
        ),
        gr.update(value="Finish" if last else "Next", visible=True),
    )


def on_quiz_start(
    state: SessionState,
) -> Tuple[SessionState, Update, Update, str, Update, Update, Update, Update]:
    """Generate questions from the conversation and open the quiz panel."""
    session = require_session(state)
    try:
        session.start_quiz()
    except QuizGenerationError as e:
        logger.warning(f"Quiz generation failed: {e}")
        raise gr.Error(QUIZ_FAILED_ALERT)
    state["quiz_index"] = 0
    question, radio, next_btn = _question_updates(state)
    return (
        state,
        gr.update(visible=False),  # hide chat
        gr.update(visible=True),  # show quiz
        question,
        radio,
        next_btn,
        gr.update(visible=False, value=""),  # result
        gr.update(visible=False),  # close
    )


def on_quiz_select(state: SessionState, option: int | None) -> SessionState:
    """Record the selection for the question on screen."""
    if option is None:
        return state
    session = require_session(state)
    try:
        session.answer_quiz(state.get("quiz_index", 0), option)
    except (QuizStateError, IndexError) as e:
        logger.warning(f"Ignoring quiz selection: {e}")
    return state


def on_quiz_next(
    state: SessionState,
) -> Tuple[SessionState, str, Update, Update, Update, Update, ChatValue]:
    """Advance to the next question, or score the quiz after the last one."""
    session = require_session(state)
    quiz = session.quiz
    i = state.get("quiz_index", 0)
    if i < len(quiz.questions) - 1:
        state["quiz_index"] = i + 1
        question, radio, next_btn = _question_updates(state)
        return (
            state,
            question,
            radio,
            next_btn,
            gr.update(),
            gr.update(),
            chatbot_value(state),
        )

    try:
        result, _reflection, progress = session.finish_quiz()
    except QuizStateError as e:
        logger.error(f"Quiz finish failed: {e}", exc_info=True)
        raise gr.Error(USER_FRIENDLY_EXC)
    badges = " ".join(f"{b.icon} {b.name}" for b in result.badges)
    summary = (
        f"## You scored {result.score}/{result.total}\n\n"
        f"**Badges earned:** {badges}\n\n{progress_markdown(progress)}"
    )
    if result.wrong:
        summary += "\n\n### Review\n" + "\n".join(
            f"- **{w.question}**  \n  You said: {w.user_answer}  \n"
            f"  Correct: {w.correct_answer}"
            for w in result.wrong
        )
    return (
        state,
        "",
        gr.update(visible=False),
        gr.update(visible=False),
        gr.update(visible=True, value=summary),
        gr.update(visible=True),
        chatbot_value(state),
    )


def on_quiz_close(state: SessionState) -> Tuple[SessionState, Update, Update]:
    """Return from the quiz panel to the conversation."""
    require_session(state).reset_quiz()
    state["quiz_index"] = 0
    return state, gr.update(visible=True), gr.update(visible=False)
