"""Stateless service routes (chat, inference, quiz, summary, translation, TTS).

Each route wraps a single request to the completion or voice service.
Error bodies are ``{"error": ...}``; missing parameters answer 400.
"""

from __future__ import annotations

from typing import Any, Dict, Union

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from loguru import logger

from chronos_guru.api.deps import get_completion, get_voice_client
from chronos_guru.api.models import (
    ChatRequest,
    FigureRequest,
    GenderResponse,
    LanguageResponse,
    MessageResponse,
    QuizRequest,
    QuizResponse,
    ReflectionRequest,
    SummaryRequest,
    SummaryResponse,
    TranslateRequest,
    TranslateToEnglishRequest,
    TranslationResponse,
    TtsRequest,
    TtsResponse,
)
from chronos_guru.core.completion import CompletionClient, CompletionError
from chronos_guru.core.inference import (
    detect_gender,
    detect_language,
    summarize,
    translate_to_english,
    write_reflection,
)
from chronos_guru.core.persona import build_persona_prompt
from chronos_guru.core.quiz import QuizGenerationError, generate_quiz
from chronos_guru.utils.murf import MurfClient, VoiceNotConfiguredError, VoiceServiceError

router = APIRouter()

MISSING_PARAMS = "Missing required parameters"


def _error(status_code: int, message: str, **extra: Any) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@router.post("/chat", response_model=MessageResponse, summary="One persona reply")
def chat(
    body: ChatRequest, completion: CompletionClient = Depends(get_completion)
) -> Union[MessageResponse, JSONResponse]:
    """Answer as ``figure``, optionally as one voice in a debate."""
    if not body.figure:
        return _error(400, MISSING_PARAMS)
    system = build_persona_prompt(
        body.figure,
        body.language,
        all_figures=body.all_figures if body.multi_figure_mode else None,
        responding_to=body.responding_to,
        debate_context=body.debate_context,
    )
    try:
        text = completion.complete(body.messages, system=system, profile="chat")
    except CompletionError:
        logger.exception("Chat completion failed")
        return _error(500, "Failed to generate response")
    return MessageResponse(message=text)


@router.post(
    "/figure-gender", response_model=GenderResponse, summary="Infer a figure's gender"
)
def figure_gender(
    body: FigureRequest, completion: CompletionClient = Depends(get_completion)
) -> Union[GenderResponse, JSONResponse]:
    """Return "male" or "female"; "male" whenever inference fails."""
    if not body.figure:
        return _error(400, "Missing figure")
    return GenderResponse(gender=detect_gender(completion, body.figure))


@router.post(
    "/figure-language",
    response_model=LanguageResponse,
    summary="Infer a figure's primary language",
)
def figure_language(
    body: FigureRequest, completion: CompletionClient = Depends(get_completion)
) -> Union[LanguageResponse, JSONResponse]:
    """Return a locale code and language name; en-US / English on failure."""
    if not body.figure:
        return _error(400, "Missing figure")
    code, name = detect_language(completion, body.figure)
    return LanguageResponse(code=code, name=name)


@router.post("/quiz", response_model=QuizResponse, summary="Generate quiz questions")
def quiz(
    body: QuizRequest, completion: CompletionClient = Depends(get_completion)
) -> Union[QuizResponse, JSONResponse]:
    """Generate five questions from a conversation."""
    if not body.figure or not body.messages:
        return _error(400, MISSING_PARAMS)
    try:
        questions = generate_quiz(completion, body.figure, body.messages)
    except QuizGenerationError:
        logger.exception("Quiz generation failed")
        return _error(500, "Failed to generate quiz")
    return QuizResponse(questions=questions)


@router.post(
    "/reflection", response_model=MessageResponse, summary="Figure's quiz reflection"
)
def reflection(
    body: ReflectionRequest, completion: CompletionClient = Depends(get_completion)
) -> Union[MessageResponse, JSONResponse]:
    """Write the figure's first-person reflection on a quiz result."""
    if not body.figure or body.score is None or body.total is None or body.wrong is None:
        return _error(400, MISSING_PARAMS)
    try:
        text = write_reflection(
            completion, body.figure, body.score, body.total, body.wrong, body.language
        )
    except CompletionError:
        logger.exception("Reflection request failed")
        return _error(500, "Failed to generate reflection")
    return MessageResponse(message=text)


@router.post(
    "/summary", response_model=SummaryResponse, summary="Learning summary of a chat"
)
def summary(
    body: SummaryRequest, completion: CompletionClient = Depends(get_completion)
) -> Union[SummaryResponse, JSONResponse]:
    """Extract key points and a timeline from a conversation."""
    if not body.figure or not body.messages:
        return _error(400, MISSING_PARAMS)
    try:
        result = summarize(completion, body.figure, body.messages, body.language)
    except CompletionError:
        logger.exception("Summary request failed")
        return _error(500, "Failed to generate summary")
    return SummaryResponse(points=result.points, timeline=result.timeline)


@router.post(
    "/translate", response_model=None, summary="Hosted translation (raw service response)"
)
def translate(
    body: TranslateRequest, voice: MurfClient = Depends(get_voice_client)
) -> Union[Dict[str, Any], JSONResponse]:
    """Forward a batch translation to the voice service."""
    if not body.target_language or not body.texts:
        return _error(400, "Missing targetLanguage or texts")
    try:
        return voice.translate_raw(body.texts, body.target_language)
    except VoiceNotConfiguredError:
        return _error(503, "Translation service not configured")
    except VoiceServiceError:
        logger.exception("Translation request failed")
        return _error(500, "Translation failed")


@router.post(
    "/translate-to-english",
    response_model=TranslationResponse,
    summary="Translate a reply into English",
)
def translate_english(
    body: TranslateToEnglishRequest,
    completion: CompletionClient = Depends(get_completion),
) -> Union[TranslationResponse, JSONResponse]:
    """Translate ``text`` from ``sourceLanguage``; English is returned as is."""
    if not body.text or not body.source_language:
        return _error(400, "Missing required fields: text, sourceLanguage")
    try:
        out = translate_to_english(completion, body.text, body.source_language)
    except CompletionError:
        logger.exception("Translation to English failed")
        return _error(500, "Failed to translate text")
    return TranslationResponse(translation=out)


@router.post("/tts", response_model=TtsResponse, summary="Hosted speech synthesis")
def tts(
    body: TtsRequest, voice: MurfClient = Depends(get_voice_client)
) -> Union[TtsResponse, JSONResponse]:
    """Synthesize speech; failures tell the client to use browser speech."""
    if not body.text:
        return _error(400, "Missing text")
    try:
        clip = voice.synthesize(body.text, body.gender)
    except VoiceNotConfiguredError:
        return _error(503, "TTS service not configured", fallbackToBrowser=True)
    except VoiceServiceError as e:
        logger.warning(f"TTS failed: {e}")
        return _error(500, "TTS request failed", fallbackToBrowser=True)
    return TtsResponse(audio_data=clip.audio_data, mime_type=clip.mime_type)
