"""Session-related API routes (create, converse, speak, quiz, export, delete)."""

from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger

from chronos_guru.api.deps import (
    get_completion,
    get_progress_store,
    get_session,
    get_voice_client,
)
from chronos_guru.api.models import (
    AddFigureRequest,
    AnswerRequest,
    CreateSessionRequest,
    DictationRequest,
    DictationResponse,
    ExportRequest,
    ExportResponse,
    FinishQuizResponse,
    ProgressResponse,
    QuizStateResponse,
    SendMessageRequest,
    SessionResponse,
    SessionSnapshot,
    SetLanguageRequest,
    SpeakRequest,
)
from chronos_guru.api.services.registry import SessionRegistry, get_registry
from chronos_guru.core.completion import CompletionClient, CompletionError
from chronos_guru.core.progress import ProgressStore
from chronos_guru.core.quiz import QuizAttempt, QuizGenerationError, QuizStateError
from chronos_guru.core.session_manager import ChatSession, SessionBusyError
from chronos_guru.core.speech import CuePlayer
from chronos_guru.utils.murf import MurfClient

router = APIRouter()


# ---------------------------
# Helpers
# ---------------------------


def _snapshot(session_id: str, session: ChatSession) -> SessionSnapshot:
    return SessionSnapshot(
        session_id=session_id,
        figure=session.figure,
        figures=list(session.figures),
        language=session.language,
        messages=list(session.messages),
        loading=session.loading,
        suggestions=session.suggestions(),
    )


def _respond(session_id: str, session: ChatSession, before: int) -> SessionResponse:
    """Snapshot plus the messages appended since ``before`` and the queued cues."""
    player = session.speech.player
    stop_audio = False
    cues = []
    if isinstance(player, CuePlayer):
        stop_audio = player.stop_requested
        cues = player.drain()
    return SessionResponse(
        session=_snapshot(session_id, session),
        new_messages=session.messages[before:],
        cues=cues,
        stop_audio=stop_audio,
    )


def _quiz_state(quiz: QuizAttempt) -> QuizStateResponse:
    # correct answers stay server-side until the attempt is scored
    hidden = {"correct_answer", "explanation"} if quiz.status == "IN_PROGRESS" else set()
    questions: List[Dict[str, Any]] = [
        q.model_dump(by_alias=True, exclude=hidden) for q in quiz.questions
    ]
    return QuizStateResponse(
        status=quiz.status,
        questions=questions,
        answers=list(quiz.answers),
        result=quiz.result,
    )


# ---------------------------
# Routes
# ---------------------------


@router.post(
    "/sessions",
    response_model=SessionResponse,
    summary="Open a conversation with a historical figure",
)
def create_session(
    payload: CreateSessionRequest,
    registry: SessionRegistry = Depends(get_registry),
    completion: CompletionClient = Depends(get_completion),
    voice: MurfClient = Depends(get_voice_client),
    progress: ProgressStore = Depends(get_progress_store),
) -> SessionResponse:
    """Create a ChatSession and register it."""
    try:
        session_id, session = registry.create(
            payload.figure, payload.language, completion, voice, progress
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _respond(session_id, session, before=0)


@router.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    summary="Get the current session state",
)
def get_session_state(
    session_id: str, session: ChatSession = Depends(get_session)
) -> SessionResponse:
    """Return the transcript and participants."""
    return _respond(session_id, session, before=len(session.messages))


@router.post(
    "/sessions/{session_id}/messages",
    response_model=SessionResponse,
    summary="Send a learner message and collect every reply of the turn",
)
def send_message(
    session_id: str, body: SendMessageRequest, session: ChatSession = Depends(get_session)
) -> SessionResponse:
    """Run one single-figure or debate turn."""
    before = len(session.messages)
    try:
        session.send(body.text)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except SessionBusyError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return _respond(session_id, session, before)


@router.post(
    "/sessions/{session_id}/figures",
    response_model=SessionResponse,
    summary="Invite another figure into the conversation",
)
def add_figure(
    session_id: str, body: AddFigureRequest, session: ChatSession = Depends(get_session)
) -> SessionResponse:
    """Add a debate participant; duplicates are ignored."""
    before = len(session.messages)
    try:
        session.add_figure(body.figure)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _respond(session_id, session, before)


@router.put(
    "/sessions/{session_id}/language",
    response_model=SessionResponse,
    summary="Change the reply and speech language",
)
def set_language(
    session_id: str, body: SetLanguageRequest, session: ChatSession = Depends(get_session)
) -> SessionResponse:
    """Switch language for later replies."""
    try:
        session.set_language(body.language)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _respond(session_id, session, before=len(session.messages))


@router.post(
    "/sessions/{session_id}/speech",
    response_model=SessionResponse,
    summary="Read a transcript message aloud",
)
def read_aloud(
    session_id: str, body: SpeakRequest, session: ChatSession = Depends(get_session)
) -> SessionResponse:
    """Produce the speech cue for one message."""
    try:
        session.read_aloud(body.index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Message not found")
    return _respond(session_id, session, before=len(session.messages))


@router.post(
    "/sessions/{session_id}/speech/stop",
    response_model=SessionResponse,
    summary="Stop any playing speech",
)
def stop_speech(
    session_id: str, session: ChatSession = Depends(get_session)
) -> SessionResponse:
    """Drop queued cues and tell the client to cancel playback."""
    session.stop_audio()
    return _respond(session_id, session, before=len(session.messages))


@router.post(
    "/sessions/{session_id}/messages/{index}/translation",
    response_model=SessionResponse,
    summary="Attach an English translation to a reply",
)
def translate_message(
    session_id: str, index: int, session: ChatSession = Depends(get_session)
) -> SessionResponse:
    """Translate one assistant message into English."""
    try:
        english = session.translate_message(index)
    except IndexError:
        raise HTTPException(status_code=404, detail="Message not found")
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if english is None:
        raise HTTPException(status_code=502, detail="Failed to translate text")
    return _respond(session_id, session, before=len(session.messages))


@router.post(
    "/sessions/{session_id}/dictation",
    response_model=DictationResponse,
    summary="Feed one speech-recognition event",
)
def dictate(
    session_id: str, body: DictationRequest, session: ChatSession = Depends(get_session)
) -> DictationResponse:
    """Return the text the input box should show."""
    return DictationResponse(text=session.dictate(body.results, body.result_index))


@router.get(
    "/sessions/{session_id}/quiz",
    response_model=QuizStateResponse,
    summary="Get the quiz attempt state",
)
def get_quiz(session_id: str, session: ChatSession = Depends(get_session)) -> QuizStateResponse:
    """Return status, questions, answers and any result."""
    return _quiz_state(session.quiz)


@router.post(
    "/sessions/{session_id}/quiz/start",
    response_model=QuizStateResponse,
    summary="Generate questions and start a quiz",
)
def start_quiz(
    session_id: str, session: ChatSession = Depends(get_session)
) -> QuizStateResponse:
    """Start a new attempt from the conversation so far."""
    try:
        session.start_quiz()
    except QuizGenerationError:
        logger.exception("Quiz generation failed")
        raise HTTPException(status_code=502, detail="Failed to generate quiz")
    return _quiz_state(session.quiz)


@router.post(
    "/sessions/{session_id}/quiz/answer",
    response_model=QuizStateResponse,
    summary="Record a selection",
)
def answer_quiz(
    session_id: str, body: AnswerRequest, session: ChatSession = Depends(get_session)
) -> QuizStateResponse:
    """Select an option for one question."""
    try:
        session.answer_quiz(body.index, body.option)
    except QuizStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except IndexError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _quiz_state(session.quiz)


@router.post(
    "/sessions/{session_id}/quiz/finish",
    response_model=FinishQuizResponse,
    summary="Score the quiz and update progress",
)
def finish_quiz(
    session_id: str, session: ChatSession = Depends(get_session)
) -> FinishQuizResponse:
    """Score, post the reflection and record the result."""
    try:
        result, reflection, progress = session.finish_quiz()
    except QuizStateError as e:
        raise HTTPException(status_code=409, detail=str(e))
    return FinishQuizResponse(
        result=result,
        reflection=reflection,
        progress=ProgressResponse(**progress.model_dump()),
    )


@router.post(
    "/sessions/{session_id}/quiz/reset",
    response_model=QuizStateResponse,
    summary="Discard the quiz attempt",
)
def reset_quiz(
    session_id: str, session: ChatSession = Depends(get_session)
) -> QuizStateResponse:
    """Return the attempt to NOT_STARTED."""
    session.reset_quiz()
    return _quiz_state(session.quiz)


@router.post(
    "/sessions/{session_id}/summary",
    response_model=ExportResponse,
    summary="Render the printable learning summary",
)
def export_summary(
    session_id: str, body: ExportRequest, session: ChatSession = Depends(get_session)
) -> ExportResponse:
    """Summarize the conversation as an HTML page."""
    try:
        html, path = session.export_summary(save=body.save)
    except CompletionError:
        logger.exception("Summary export failed")
        raise HTTPException(status_code=502, detail="Failed to generate summary")
    return ExportResponse(html=html, path=str(path) if path else None)


@router.delete(
    "/sessions/{session_id}",
    status_code=204,
    response_class=Response,
)
def delete_session(
    session_id: str, registry: SessionRegistry = Depends(get_registry)
) -> Response:
    """Delete a session from the registry."""
    registry.remove(session_id)
    return Response(status_code=204)
