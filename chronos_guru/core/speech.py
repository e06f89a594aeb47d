"""Speech output: translation, disfluencies, hosted voice and native fallback.

The controller decides *what* to say and *how*; a ``SpeechPlayer`` does
the actual playback. ``play`` blocks until the segment has finished, which
is what lets the debate orchestrator serialize speakers.
"""

from __future__ import annotations

import random
import re
from typing import Any, List, Mapping, Optional, Protocol, Sequence

from loguru import logger

from chronos_guru.core.constants import (
    AUTO_LANGUAGE,
    DEFAULT_LANGUAGE,
    DEFAULT_LOCALE,
    DISFLUENCIES,
    DISFLUENCY_GATE,
    LOCALES,
    NATIVE_SPEECH_RATE,
    NATIVE_VOICE_VENDOR_HINT,
)
from chronos_guru.core.models import SpeechCue
from chronos_guru.utils.misc import preview
from chronos_guru.utils.murf import MurfClient, VoiceServiceError

_SENTENCE_SPLIT_RE = re.compile(r"([.!?]+)")


class PlaybackError(RuntimeError):
    """Hosted audio could not be played."""


class SpeechPlayer(Protocol):
    """Plays speech cues one at a time."""

    voices: Sequence[Mapping[str, Any]]

    def play(self, cue: SpeechCue) -> None:
        """Play ``cue`` and return once playback has completed."""
        ...

    def stop(self) -> None:
        """Halt hosted playback and cancel native synthesis."""
        ...


class CuePlayer:
    """Player that records cues for a remote client to perform.

    Used by the API and the widget: the browser plays the queued cues in
    order, so from the server's point of view playback completes as soon
    as the cue is queued.

    Limitation: audio order is preserved but the transcript is not held in
    lockstep with it. The debate pause and the next speaker's request run
    while the browser may still be playing the previous cue, so the next
    reply can appear on screen before the previous one has finished
    speaking.
    """

    def __init__(self, voices: Optional[Sequence[Mapping[str, Any]]] = None) -> None:
        """Initialize the player."""
        self.voices: Sequence[Mapping[str, Any]] = list(voices or [])
        self.cues: List[SpeechCue] = []
        self.stop_requested = False

    def play(self, cue: SpeechCue) -> None:
        """Queue the cue."""
        logger.debug(f"Queued {cue.kind} cue for {cue.speaker}: {preview(cue.text)}")
        self.cues.append(cue)

    def stop(self) -> None:
        """Drop queued cues and flag the client to cancel playback."""
        self.cues.clear()
        self.stop_requested = True

    def drain(self) -> List[SpeechCue]:
        """Return and clear queued cues."""
        out, self.cues = self.cues, []
        self.stop_requested = False
        return out


def locale_for(language: Optional[str]) -> str:
    """BCP-47 locale for a language selector; unknown or auto means en-US."""
    return LOCALES.get(language or DEFAULT_LANGUAGE, DEFAULT_LOCALE)


def pick_native_voice(
    voices: Sequence[Mapping[str, Any]], locale: str
) -> Optional[Mapping[str, Any]]:
    """Choose a native synthesis voice for ``locale``.

    Exact locale match, then language-prefix match, then a Google voice for
    the language, then the first voice. None when there are no voices.
    """
    if not voices:
        return None
    target = locale.lower()
    prefix = target[:2]

    def lang(v: Mapping[str, Any]) -> str:
        return str(v.get("lang") or "").lower()

    for v in voices:
        if lang(v) == target:
            return v
    for v in voices:
        if lang(v).startswith(prefix):
            return v
    for v in voices:
        name = str(v.get("name") or "").lower()
        if NATIVE_VOICE_VENDOR_HINT in name and lang(v).startswith(prefix):
            return v
    return voices[0]


def inject_disfluencies(text: str, rng: random.Random) -> str:
    """Randomly decorate sentence boundaries with paralinguistic cues.

    The text is split on sentence punctuation (kept as separate pieces);
    before every piece after the first there is a 10% chance of inserting
    the first variation whose own probability roll succeeds.
    """
    pieces = [p for p in _SENTENCE_SPLIT_RE.split(str(text)) if p.strip()]
    out: List[str] = []
    for i, piece in enumerate(pieces):
        if i > 0 and rng.random() < DISFLUENCY_GATE:
            for sound, chance in DISFLUENCIES:
                if rng.random() < chance:
                    out.append(sound)
                    break
        out.append(piece)
    return "".join(out)


class SpeechController:
    """Turn reply text into played speech with graceful fallbacks.

    Args:
        player: Performs playback.
        voice_client: Hosted voice and translation client. None disables
            the hosted voice entirely (native synthesis only).
        rng: Random source for disfluencies.
    """

    def __init__(
        self,
        player: SpeechPlayer,
        voice_client: Optional[MurfClient] = None,
        rng: Optional[random.Random] = None,
    ) -> None:
        """Initialize the controller."""
        self.player = player
        self.voice_client = voice_client
        self.rng = rng or random.Random()

    def speak(
        self,
        text: str,
        language: Optional[str] = DEFAULT_LANGUAGE,
        gender: Optional[str] = None,
        speaker: Optional[str] = None,
    ) -> SpeechCue:
        """Speak ``text`` and return once playback has completed.

        Returns:
            SpeechCue: The cue that was ultimately played.
        """
        language = language or DEFAULT_LANGUAGE
        if language != DEFAULT_LANGUAGE:
            locale = locale_for(language)
            speech_text = text
            if language != AUTO_LANGUAGE:
                speech_text = self._translate(text, locale) or text
            return self._speak_native(
                inject_disfluencies(speech_text, self.rng), locale, speaker
            )

        decorated = inject_disfluencies(text, self.rng)
        if self.voice_client is None:
            return self._speak_native(decorated, DEFAULT_LOCALE, speaker)
        try:
            clip = self.voice_client.synthesize(decorated, gender)
        except VoiceServiceError as e:
            logger.info(f"Hosted voice unavailable ({e}); using native synthesis")
            return self._speak_native(decorated, DEFAULT_LOCALE, speaker)

        cue = SpeechCue(
            kind="audio",
            speaker=speaker,
            text=decorated,
            locale=DEFAULT_LOCALE,
            audio_data=clip.audio_data,
            mime_type=clip.mime_type,
        )
        try:
            self.player.play(cue)
        except PlaybackError as e:
            logger.warning(f"Hosted playback failed ({e}); using native synthesis")
            return self._speak_native(text, DEFAULT_LOCALE, speaker)
        return cue

    def stop(self) -> None:
        """Stop hosted playback and native synthesis unconditionally."""
        self.player.stop()

    def _translate(self, text: str, locale: str) -> str:
        if self.voice_client is None:
            return ""
        try:
            return self.voice_client.translate(text, locale)
        except VoiceServiceError as e:
            logger.info(f"Speech translation to {locale} failed ({e}); speaking original")
            return ""

    def _speak_native(self, text: str, locale: str, speaker: Optional[str]) -> SpeechCue:
        voice = pick_native_voice(self.player.voices, locale)
        cue = SpeechCue(
            kind="native",
            speaker=speaker,
            text=text,
            locale=str(voice.get("lang") or locale) if voice else locale,
            voice=str(voice.get("name")) if voice else None,
            rate=NATIVE_SPEECH_RATE,
        )
        self.player.play(cue)
        return cue
