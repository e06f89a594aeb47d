"""Tests for persona prompt construction."""

from unittest.mock import Mock

import pytest

from chronos_guru.core import persona
from chronos_guru.core.persona import build_persona_prompt, language_directive, language_name


@pytest.mark.unit
def test_prompt_keeps_figure_in_character() -> None:
    """The figure's name appears in the identity line and the rules."""
    prompt = build_persona_prompt("Cleopatra")
    assert prompt.startswith("You are Cleopatra, a historical figure.")
    assert "Speak in first person as Cleopatra." in prompt
    assert "NEVER break character" in prompt
    assert "CROSS-ERA DEBATE MODE" not in prompt


@pytest.mark.unit
def test_no_language_means_english() -> None:
    """An unset selector asks for English."""
    prompt = build_persona_prompt("Cleopatra")
    assert "Respond ONLY in English. All your responses must be in English." in prompt


@pytest.mark.unit
def test_known_code_uses_language_name() -> None:
    """A known code is spelled out by name."""
    assert language_directive("Napoleon", "fr") == (
        "Respond ONLY in French. All your responses must be in French."
    )


@pytest.mark.unit
@pytest.mark.parametrize("code", ["xx", "klingon", ""])
def test_unknown_codes_resolve_to_english(code: str) -> None:
    """Anything outside the table is English."""
    assert language_name(code) == "English"
    assert "English" in build_persona_prompt("Napoleon", code or None)


@pytest.mark.unit
def test_auto_never_consults_the_code_table(monkeypatch: pytest.MonkeyPatch) -> None:
    """"auto" defers to the figure's native language without a lookup."""
    lookup = Mock(side_effect=AssertionError("lookup must not be called"))
    monkeypatch.setattr(persona, "language_name", lookup)

    prompt = build_persona_prompt("Confucius", "auto")

    lookup.assert_not_called()
    assert "the language most associated with Confucius" in prompt


@pytest.mark.unit
def test_single_figure_list_has_no_debate_block() -> None:
    """A one-element figure list is not a debate."""
    prompt = build_persona_prompt("Plato", all_figures=["Plato"])
    assert "CROSS-ERA DEBATE MODE" not in prompt


@pytest.mark.unit
def test_debate_block_names_others_and_addressee() -> None:
    """In a debate the prompt lists the other figures and who to answer."""
    prompt = build_persona_prompt(
        "Aristotle",
        "en",
        all_figures=["Plato", "Aristotle", "Socrates"],
        responding_to="Plato",
        debate_context="Topic: the ideal state",
    )
    assert "other historical figures: Plato, Socrates." in prompt
    assert "You are specifically responding to Plato's last statement." in prompt
    assert "Directly address what Plato said" in prompt
    assert "Topic: the ideal state" in prompt
    assert "Stay in character as Aristotle from your era" in prompt


@pytest.mark.unit
def test_debate_without_addressee_targets_previous_speaker() -> None:
    """The first debate speaker has nobody specific to answer."""
    prompt = build_persona_prompt("Plato", all_figures=["Plato", "Aristotle"])
    assert "specifically responding" not in prompt
    assert "Directly address what the previous speaker said" in prompt
