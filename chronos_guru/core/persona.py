"""Persona prompt construction.

Builds the system instruction that keeps a model in character as a
historical figure, answering in the selected language and, when more than
one figure is active, engaging with the other speakers.
"""

from __future__ import annotations

from typing import Optional, Sequence

from chronos_guru.core.constants import (
    AUTO_LANGUAGE,
    DEFAULT_LANGUAGE_NAME,
    LANGUAGE_NAMES,
)

PERSONA_TEMPLATE = """You are {figure}, a historical figure. You will answer questions about your life, era, and expertise.

CRITICAL RULES:
1. You are {figure}, and you ONLY answer about topics related to your era and your field of expertise.
2. If asked about anything after your death or outside your lifetime, politely decline and redirect to your era.
3. Speak in first person as {figure}.
4. Keep responses conversational and educational, 2-3 sentences typically.
5. If you don't know something from your era, admit it honestly.
6. NEVER pretend to know about modern events, technology, or people unless they existed in your time.
7. NEVER break character under any circumstances.
8. Be authentic to your historical persona and knowledge.{debate_block}

LANGUAGE:
{language_directive}"""

DEBATE_TEMPLATE = """

CROSS-ERA DEBATE MODE:
You are in a conversation with other historical figures: {others}.
{responding_line}
{debate_context}

IMPORTANT:
- Directly address what {addressee} said
- Either agree, disagree, add nuance, or provide a contrasting perspective
- Make it conversational - speak TO the other figure(s), not just answer the question
- Reference specific points they made
- Keep your response 2-3 sentences
- Stay in character as {figure} from your era"""


def language_name(code: Optional[str]) -> str:
    """Resolve a language code to its display name; unknown codes mean English."""
    if not code:
        return DEFAULT_LANGUAGE_NAME
    return LANGUAGE_NAMES.get(code, DEFAULT_LANGUAGE_NAME)


def language_directive(figure: str, language: Optional[str]) -> str:
    """Return the LANGUAGE instruction for a persona prompt.

    ``"auto"`` leaves the choice to the model and never consults the
    code table; an unset selector means English.
    """
    if language == AUTO_LANGUAGE:
        return (
            f"Respond ONLY in the language most associated with {figure} (their"
            " native or historically primary language). If uncertain, use English."
        )
    if language:
        name = language_name(language)
        return f"Respond ONLY in {name}. All your responses must be in {name}."
    return "Respond ONLY in English. All your responses must be in English."


def build_persona_prompt(
    figure: str,
    language: Optional[str] = None,
    all_figures: Optional[Sequence[str]] = None,
    responding_to: Optional[str] = None,
    debate_context: Optional[str] = None,
) -> str:
    """Build the system instruction for ``figure``.

    Args:
        figure: The historical figure being simulated.
        language: Language code, ``"auto"`` or None (English).
        all_figures: Every figure active in the conversation. Debate
            directives are added only when there is more than one.
        responding_to: Figure whose statement this reply should address.
        debate_context: Free text appended to the debate directives.

    Returns:
        str: The complete persona instruction.
    """
    debate_block = ""
    if all_figures and len(all_figures) > 1:
        others = [f for f in all_figures if f != figure]
        debate_block = DEBATE_TEMPLATE.format(
            others=", ".join(others),
            responding_line=(
                f"You are specifically responding to {responding_to}'s last statement."
                if responding_to
                else ""
            ),
            debate_context=debate_context or "",
            addressee=responding_to or "the previous speaker",
            figure=figure,
        )
    return PERSONA_TEMPLATE.format(
        figure=figure,
        debate_block=debate_block,
        language_directive=language_directive(figure, language),
    )
