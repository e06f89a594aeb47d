"""Tests for speech output and its fallbacks."""

import json
import random

import httpx
import pytest

from chronos_guru.core.speech import (
    CuePlayer,
    SpeechController,
    inject_disfluencies,
    locale_for,
    pick_native_voice,
)
from tests.fakes import QuietRandom, RecordingPlayer, murf_client

VOICES = [
    {"name": "Microsoft David", "lang": "en-US"},
    {"name": "Google français", "lang": "fr-FR"},
    {"name": "Google Deutsch", "lang": "de-DE"},
]


def _tts_ok(request: httpx.Request) -> httpx.Response:
    if request.url.path.endswith("speech/generate"):
        return httpx.Response(200, json={"audioContent": "QUJD"})
    body = json.loads(request.content)
    return httpx.Response(200, json={"translations": [{"text": f"[{body['targetLanguage']}]"}]})


def _everything_fails(request: httpx.Request) -> httpx.Response:
    return httpx.Response(500, json={"error": "down"})


@pytest.mark.unit
def test_english_uses_hosted_voice() -> None:
    """With a voice client, English is played as hosted audio."""
    player = RecordingPlayer()
    speech = SpeechController(player, murf_client(_tts_ok), rng=QuietRandom())

    cue = speech.speak("I am Newton.", "en", gender="male", speaker="Isaac Newton")

    assert cue.kind == "audio"
    assert cue.audio_data == "QUJD"
    assert cue.mime_type == "audio/mpeg"
    assert cue.speaker == "Isaac Newton"
    assert player.played == [cue]


@pytest.mark.unit
def test_no_voice_client_means_native() -> None:
    """Without a hosted voice, English falls back to native synthesis."""
    player = RecordingPlayer(voices=VOICES)
    cue = SpeechController(player, None, rng=QuietRandom()).speak("Hello.", "en")

    assert cue.kind == "native"
    assert cue.locale == "en-US"
    assert cue.voice == "Microsoft David"
    assert cue.rate == 0.9


@pytest.mark.unit
def test_hosted_failure_falls_back_to_native() -> None:
    """A voice service error yields native speech of the same text."""
    player = RecordingPlayer()
    cue = SpeechController(player, murf_client(_everything_fails), rng=QuietRandom()).speak(
        "Hello there."
    )
    assert cue.kind == "native"
    assert cue.text == "Hello there."
    assert [c.kind for c in player.played] == ["native"]


@pytest.mark.unit
def test_non_object_tts_reply_falls_back_to_native() -> None:
    """A JSON list from the voice service is recovered locally."""
    player = RecordingPlayer()
    speech = SpeechController(
        player,
        murf_client(lambda request: httpx.Response(200, json=["unexpected"])),
        rng=QuietRandom(),
    )
    cue = speech.speak("Hello there.", "en", "male", "Plato")
    assert cue.kind == "native"
    assert cue.text == "Hello there."


@pytest.mark.unit
def test_missing_key_falls_back_to_native() -> None:
    """An unconfigured voice client behaves like a failing one."""
    player = RecordingPlayer()
    cue = SpeechController(player, murf_client(_tts_ok, api_key=None), rng=QuietRandom()).speak(
        "Hi."
    )
    assert cue.kind == "native"


@pytest.mark.unit
def test_playback_failure_speaks_undecorated_text() -> None:
    """When hosted audio is rejected, the original text is spoken natively."""

    class _AlwaysDecorate(random.Random):
        def random(self) -> float:
            return 0.0

    player = RecordingPlayer(fail_audio=True)
    speech = SpeechController(player, murf_client(_tts_ok), rng=_AlwaysDecorate())

    cue = speech.speak("First. Second.", "en")

    assert cue.kind == "native"
    assert cue.text == "First. Second."
    assert [c.kind for c in player.played] == ["native"]


@pytest.mark.unit
def test_other_languages_translate_then_speak_natively() -> None:
    """Non-English text is translated to the locale and spoken natively."""
    player = RecordingPlayer(voices=VOICES)
    speech = SpeechController(player, murf_client(_tts_ok), rng=QuietRandom())

    cue = speech.speak("Bonjour.", "fr", speaker="Napoleon")

    assert cue.kind == "native"
    assert cue.text == "[fr-FR]"
    assert cue.locale == "fr-FR"
    assert cue.voice == "Google français"


@pytest.mark.unit
def test_failed_translation_speaks_original() -> None:
    """A translation failure keeps the original text."""
    player = RecordingPlayer()
    cue = SpeechController(player, murf_client(_everything_fails), rng=QuietRandom()).speak(
        "Guten Tag.", "de"
    )
    assert cue.text == "Guten Tag."
    assert cue.locale == "de-DE"


@pytest.mark.unit
def test_auto_skips_translation() -> None:
    """"auto" speaks the text as is, with no translation request."""
    requests: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request.url.path)
        return _tts_ok(request)

    player = RecordingPlayer()
    cue = SpeechController(player, murf_client(handler), rng=QuietRandom()).speak(
        "Veni, vidi, vici.", "auto"
    )

    assert cue.kind == "native"
    assert cue.text == "Veni, vidi, vici."
    assert requests == []


@pytest.mark.unit
def test_stop_is_forwarded() -> None:
    """Stop always reaches the player."""
    player = RecordingPlayer()
    SpeechController(player).stop()
    assert player.stops == 1


@pytest.mark.unit
def test_disfluencies_only_at_sentence_boundaries() -> None:
    """Decorations go before later sentences and never before the first."""

    class _Rolls(random.Random):
        def __init__(self, rolls: list[float]) -> None:
            super().__init__()
            self.rolls = list(rolls)

        def random(self) -> float:
            return self.rolls.pop(0) if self.rolls else 0.99

    # pieces: "One" "." " Two" "."; before " Two" the gate passes, cough fails, chuckles fires
    text = inject_disfluencies("One. Two.", _Rolls([0.99, 0.05, 0.5, 0.1]))
    assert text == "One.*chuckles*  Two."
    assert inject_disfluencies("Just one", _Rolls([0.0, 0.0])) == "Just one"
    assert inject_disfluencies("One. Two.", QuietRandom()) == "One. Two."


@pytest.mark.unit
def test_native_voice_preference() -> None:
    """Exact locale, then language prefix, then the first voice."""
    assert pick_native_voice(VOICES, "de-DE")["name"] == "Google Deutsch"
    assert pick_native_voice([{"name": "x", "lang": "fr-CA"}], "fr-FR")["name"] == "x"
    assert pick_native_voice(VOICES, "ja-JP")["name"] == "Microsoft David"
    assert pick_native_voice([], "en-US") is None


@pytest.mark.unit
def test_locale_table() -> None:
    """Known codes map to locales; everything else is en-US."""
    assert locale_for("hi") == "hi-IN"
    assert locale_for("auto") == "en-US"
    assert locale_for(None) == "en-US"


@pytest.mark.unit
def test_cue_player_queue() -> None:
    """CuePlayer queues, drains and clears on stop."""
    player = CuePlayer()
    SpeechController(player, rng=QuietRandom()).speak("A.", speaker="Plato")
    assert player.cues[0].speaker == "Plato"

    player.stop()
    assert player.cues == [] and player.stop_requested

    SpeechController(player, rng=QuietRandom()).speak("B.")
    drained = player.drain()
    assert [c.text for c in drained] == ["B."]
    assert player.cues == [] and not player.stop_requested
