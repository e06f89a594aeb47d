"""Tests for the Murf voice client."""

import base64
import json

import httpx
import pytest

from chronos_guru.utils.murf import (
    VoiceNotConfiguredError,
    VoiceServiceError,
    first_translation,
    voice_for,
)
from tests.fakes import murf_client


@pytest.mark.unit
def test_synthesize_posts_first_voice_for_gender() -> None:
    """TTS requests use the gender's first voice and the api-key header."""
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"audioContent": "QUJD"})

    clip = murf_client(handler).synthesize("Bonjour", "female")

    assert clip.audio_data == "QUJD"
    assert clip.mime_type == "audio/mpeg"
    (req,) = seen
    assert req.url.path == "/v1/speech/generate"
    assert req.headers["api-key"] == "test-key"
    body = json.loads(req.content)
    assert body["voiceId"] == "en-US-natalie"
    assert body["format"] == "MP3"
    assert body["sampleRate"] == 48000


@pytest.mark.unit
def test_synthesize_fetches_audio_file() -> None:
    """An audioFile URL is downloaded and base64 encoded."""

    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("speech/generate"):
            return httpx.Response(200, json={"audioFile": "https://cdn.example/a.mp3"})
        return httpx.Response(200, content=b"ID3-mp3-bytes")

    clip = murf_client(handler).synthesize("Hello")
    assert base64.b64decode(clip.audio_data) == b"ID3-mp3-bytes"


@pytest.mark.unit
@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, json={}),
        httpx.Response(401, json={"error": "bad key"}),
        httpx.Response(200, content=b"not json"),
        httpx.Response(200, json=["unexpected"]),
    ],
)
def test_synthesize_failures(response: httpx.Response) -> None:
    """Missing audio, HTTP errors and non-object payloads raise VoiceServiceError."""
    with pytest.raises(VoiceServiceError):
        murf_client(lambda request: response).synthesize("Hello")


@pytest.mark.unit
def test_unconfigured_client_raises_before_request() -> None:
    """No API key means no request at all."""
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200, json={"audioContent": "x"})

    client = murf_client(handler, api_key=None)
    with pytest.raises(VoiceNotConfiguredError):
        client.synthesize("Hello")
    assert calls == []


@pytest.mark.unit
def test_translate_sends_target_and_texts() -> None:
    """Translation posts the target language with a list of texts."""
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(200, json={"translations": ["Hola"]})

    client = murf_client(handler)
    assert client.translate("Hello", "es-ES") == "Hola"
    assert seen == [{"targetLanguage": "es-ES", "texts": ["Hello"]}]


@pytest.mark.unit
@pytest.mark.parametrize(
    "data, expected",
    [
        ({"translations": ["Hola"]}, "Hola"),
        ({"translations": [{"text": "Salut"}]}, "Salut"),
        ({"translations": [{"translatedText": "Hallo"}]}, "Hallo"),
        ({"translatedTexts": ["Ciao"]}, "Ciao"),
        ({"translations": []}, ""),
        ({}, ""),
        (["Hola"], ""),
    ],
)
def test_first_translation_variants(data, expected: str) -> None:
    """Every known response shape is understood."""
    assert first_translation(data) == expected


@pytest.mark.unit
def test_voice_for_gender() -> None:
    """Unknown or missing genders use the male list."""
    assert voice_for("female") == "en-US-natalie"
    assert voice_for("male") == "en-US-ken"
    assert voice_for(None) == "en-US-ken"
