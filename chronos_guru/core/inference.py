"""Figure inference helpers delegated to the completion service.

Gender and primary-language detection are lenient: any failure yields the
documented default. Translation, reflection and summary requests raise
``CompletionError`` so the caller can choose its own fallback.
"""

from __future__ import annotations

from typing import Optional, Sequence

from loguru import logger

from chronos_guru.core.completion import CompletionClient, CompletionError, HistoryItem
from chronos_guru.core.constants import (
    AUTO_LANGUAGE,
    DEFAULT_GENDER,
    DEFAULT_LANGUAGE,
    DEFAULT_LANGUAGE_NAME,
    DEFAULT_LOCALE,
    LANGUAGE_NAMES,
)
from chronos_guru.core.decoding import decode_json, decode_model
from chronos_guru.core.models import Badge, Message, Summary, WrongAnswer
from chronos_guru.core.persona import language_name

GENDER_PROMPT = """Determine the gender of the historical figure "{figure}".
Return only JSON with this exact format:
{{"gender":"male"}} or {{"gender":"female"}}
Rules:
- Only return "male" or "female"
- Base on historical records
- If uncertain, return "male" as default
No commentary."""

LANGUAGE_PROMPT = """Return only JSON with the likely primary language for the historical figure "{figure}".
Exact format:
{{"code":"xx-XX","name":"Language Name"}}
Rules:
- Use a valid BCP-47 or ISO-like code commonly used in TTS, e.g., en-US, hi-IN, es-ES, fr-FR, de-DE, it-IT, ar-SA, zh-CN, ja-JP, ru-RU, pt-PT.
- If uncertain, use {{"code":"en-US","name":"English"}}.
No commentary."""

TRANSLATE_PROMPT = (
    "Translate the following {source} text to English. Provide ONLY the English"
    " translation, no explanations or additional text:\n\n{text}"
)

REFLECTION_PROMPT = """You are {figure} speaking in first person. Create a concise, friendly quiz reflection.
Tone: warm, natural, a bit playful; begin with a short acknowledgment like "Oh! It seems a few details about me got a bit tangled, let me clarify." Use first person throughout.
Content: Mention the score ({score}/{total}). If there are mistakes, explain each one briefly in your own words.
Format: plain text only, no markdown, no emojis unless they fit naturally. Keep it under 12 lines.
{language_directive}

WRONG ANSWERS:
{wrong_block}
"""

SUMMARY_PROMPT = """Extract a concise learning summary from a conversation with {figure}.

Conversation:
{conversation}

Return ONLY valid JSON with this exact structure (no markdown):
{{
  "points": ["... up to 10 key points ..."],
  "timeline": [
    {{ "date": "YEAR or DATE", "event": "Short description" }}
  ]
}}

Rules:
- Keep points concise, factual, and based on the conversation.
- Timeline should be chronological and 3-10 entries when possible.
- If uncertain, omit rather than invent.
- Write ONLY in {language} for all points and timeline text.
"""


def transcript_text(messages: Sequence[HistoryItem]) -> str:
    """Flatten a transcript into ``role: content`` lines."""
    lines = []
    for m in messages:
        if isinstance(m, Message):
            lines.append(f"{m.role}: {m.content}")
        else:
            lines.append(f"{m.get('role', 'user')}: {m.get('content', '')}")
    return "\n".join(lines)


def detect_gender(client: CompletionClient, figure: str) -> str:
    """Return "male" or "female" for ``figure``; "male" on any failure."""
    try:
        reply = client.ask(GENDER_PROMPT.format(figure=figure), profile="gender")
    except CompletionError as e:
        logger.warning(f"Gender detection failed for {figure}: {e}")
        return DEFAULT_GENDER
    decoded = decode_json(reply)
    if decoded.ok and isinstance(decoded.value, dict):
        gender = str(decoded.value.get("gender") or "").strip().lower()
        if gender in ("male", "female"):
            return gender
    logger.debug(f"Gender reply for {figure} unusable; using {DEFAULT_GENDER}")
    return DEFAULT_GENDER


def detect_language(client: CompletionClient, figure: str) -> tuple[str, str]:
    """Return ``(code, name)`` of the figure's primary language."""
    default = (DEFAULT_LOCALE, DEFAULT_LANGUAGE_NAME)
    try:
        reply = client.ask(LANGUAGE_PROMPT.format(figure=figure), profile="language")
    except CompletionError as e:
        logger.warning(f"Language detection failed for {figure}: {e}")
        return default
    decoded = decode_json(reply)
    if not decoded.ok or not isinstance(decoded.value, dict):
        return default
    return (
        str(decoded.value.get("code") or DEFAULT_LOCALE),
        str(decoded.value.get("name") or DEFAULT_LANGUAGE_NAME),
    )


def translate_to_english(client: CompletionClient, text: str, source: str) -> str:
    """Translate ``text`` from language ``source`` into English.

    English input is returned unchanged without a request.
    """
    if source == DEFAULT_LANGUAGE:
        return str(text)
    reply = client.ask(
        TRANSLATE_PROMPT.format(
            source=LANGUAGE_NAMES.get(source, "the source language"), text=text
        ),
        profile="translate",
    )
    return reply.strip()


def _reflection_language(figure: str, language: Optional[str]) -> str:
    if language == AUTO_LANGUAGE:
        return (
            f"Write ONLY in the language most associated with {figure} (their native"
            " or historically primary language). If uncertain, use English."
        )
    if language:
        name = language_name(language)
        return f"Write ONLY in {name}. All your writing must be in {name}."
    return "Write ONLY in English unless the context implies otherwise."


def write_reflection(
    client: CompletionClient,
    figure: str,
    score: int,
    total: int,
    wrong: Sequence[WrongAnswer],
    language: Optional[str] = None,
) -> str:
    """Ask the figure for a first-person reflection on a quiz result."""
    wrong_block = "\n\n".join(
        f"{i}) {w.question}\n- User said: {w.user_answer}\n"
        f"- Correct: {w.correct_answer}\n- Context: {w.explanation}"
        for i, w in enumerate(wrong, start=1)
    )
    prompt = REFLECTION_PROMPT.format(
        figure=figure,
        score=score,
        total=total,
        language_directive=_reflection_language(figure, language),
        wrong_block=wrong_block or "None",
    )
    return client.ask(prompt, profile="reflection").strip()


def fallback_reflection(
    figure: str,
    score: int,
    total: int,
    wrong: Sequence[WrongAnswer],
    badges: Sequence[Badge],
) -> str:
    """Static reflection used when the completion service is unavailable."""
    text = f"You scored {score}/{total}."
    if badges:
        text += "\nBadges earned: " + ", ".join(f"{b.icon} {b.name}" for b in badges) + "."
    text += f"\nAs {figure}, here's how I'd put it:"
    if wrong:
        text += (
            "\n\nOh! It seems a few details about me got a bit tangled."
            " Let me clarify in my own words:\n"
        )
        text += "\n".join(
            f"\n{i}) {w.question}\n• You said: {w.user_answer}"
            f"\n• Actually: {w.correct_answer}\n• My take: {w.explanation}"
            for i, w in enumerate(wrong, start=1)
        )
    else:
        text += "\nBrilliant! You understood me perfectly!"
    return text


def summarize(
    client: CompletionClient,
    figure: str,
    messages: Sequence[HistoryItem],
    language: Optional[str] = None,
) -> Summary:
    """Extract key points and a timeline from a conversation.

    An unusable reply gives an empty summary; request failures raise.
    """
    if language == AUTO_LANGUAGE:
        lang = (
            f"the language most associated with {figure} (their native or primary"
            " language), otherwise English"
        )
    else:
        lang = language_name(language)
    reply = client.ask(
        SUMMARY_PROMPT.format(
            figure=figure, conversation=transcript_text(messages), language=lang
        ),
        profile="summary",
    )
    decoded = decode_model(reply, Summary)
    if not decoded.ok:
        logger.warning(f"Summary reply unusable ({decoded.error}); using empty summary")
        return Summary()
    return decoded.value
