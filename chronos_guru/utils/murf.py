"""Client for the Murf voice synthesis and translation API."""

from __future__ import annotations

import base64
import os
from typing import Any, Optional, Sequence

import httpx
from dotenv import load_dotenv
from loguru import logger

from chronos_guru.core.constants import AUDIO_MIME_TYPE, HOSTED_VOICES, MURF_BASE_URL
from chronos_guru.core.models import AudioClip

load_dotenv()

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


class VoiceServiceError(RuntimeError):
    """The voice or translation service failed."""


class VoiceNotConfiguredError(VoiceServiceError):
    """MURF_API_KEY is not set."""


def voice_for(gender: Optional[str]) -> str:
    """Hosted voice id for a gender; always the first entry of its list."""
    key = "female" if gender == "female" else "male"
    return HOSTED_VOICES[key][0]


def first_translation(data: Any) -> str:
    """Pull the first translated text out of the service's response variants.

    Handles ``translations[0]`` as a string or as an object with ``text`` /
    ``translatedText``, and ``translatedTexts[0]``. Returns "" otherwise.
    """
    if not isinstance(data, dict):
        return ""
    translations = data.get("translations")
    if isinstance(translations, list) and translations:
        first = translations[0]
        if isinstance(first, str):
            return first
        if isinstance(first, dict):
            return str(first.get("text") or first.get("translatedText") or "")
        return ""
    texts = data.get("translatedTexts")
    if isinstance(texts, list) and texts:
        return str(texts[0] or "")
    return ""


class MurfClient:
    """Thin synchronous wrapper over the Murf REST endpoints.

    Args:
        api_key: Defaults to the MURF_API_KEY environment variable.
        http_client: Optional preconfigured ``httpx.Client`` (tests pass one
            backed by ``httpx.MockTransport``).
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: str = MURF_BASE_URL,
        http_client: Optional[httpx.Client] = None,
    ) -> None:
        """Initialize the client."""
        self.api_key = api_key or os.getenv("MURF_API_KEY")
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.Client(timeout=DEFAULT_TIMEOUT)

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            raise VoiceNotConfiguredError("MURF_API_KEY is not set")
        return {
            "api-key": self.api_key,
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        headers = self._headers()
        url = f"{self.base_url}/{path}"
        try:
            resp = self._http.post(url, json=payload, headers=headers)
        except httpx.HTTPError as e:
            raise VoiceServiceError(f"Request to {url} failed: {e}") from e
        if resp.status_code >= 400:
            logger.error(f"Murf error {resp.status_code} at {path}: {resp.text[:300]}")
            raise VoiceServiceError(f"Murf returned {resp.status_code}")
        try:
            data = resp.json()
        except ValueError as e:
            raise VoiceServiceError(f"Murf returned invalid JSON at {path}") from e
        if not isinstance(data, dict):
            raise VoiceServiceError(f"Murf returned an unexpected payload at {path}")
        return data

    def synthesize(self, text: str, gender: Optional[str] = None) -> AudioClip:
        """Generate MP3 speech for ``text`` with the gender's hosted voice.

        Raises:
            VoiceNotConfiguredError: If no API key is configured.
            VoiceServiceError: On any request or payload failure.
        """
        voice_id = voice_for(gender)
        logger.debug(f"Murf TTS using voice {voice_id}")
        data = self._post(
            "speech/generate",
            {
                "voiceId": voice_id,
                "text": text,
                "format": "MP3",
                "speed": 0,
                "pitch": 0,
                "sampleRate": 48000,
                "audioEncoding": "MP3",
            },
        )
        if data.get("audioFile"):
            try:
                audio = self._http.get(data["audioFile"])
                audio.raise_for_status()
            except httpx.HTTPError as e:
                raise VoiceServiceError(f"Failed to fetch audio file: {e}") from e
            encoded = base64.b64encode(audio.content).decode("ascii")
            return AudioClip(audio_data=encoded, mime_type=AUDIO_MIME_TYPE)
        if data.get("audioContent"):
            return AudioClip(audio_data=data["audioContent"], mime_type=AUDIO_MIME_TYPE)
        raise VoiceServiceError("No audio data received from Murf")

    def translate_raw(
        self, texts: Sequence[str], target_language: str
    ) -> dict[str, Any]:
        """Call the translation endpoint and return its JSON body unchanged."""
        return self._post(
            "text/translate", {"targetLanguage": target_language, "texts": list(texts)}
        )

    def translate(self, text: str, target_language: str) -> str:
        """Translate one text; returns "" when the response carries no text."""
        return first_translation(self.translate_raw([text], target_language))
