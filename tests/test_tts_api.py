"""Integration tests for the Flask text-to-speech endpoints."""

from __future__ import annotations

from urllib.parse import unquote

import pytest

from main_app import create_app
from errors import ConfigurationError
from routes.tts import encode_header_value
from tests.fakes import FAKE_MP3
from voice_catalog import DEFAULT_VOICES

TTS_URL = "/api/azure/text-to-speech"


def test_mandarin_request_returns_audio_and_pinyin_header(client) -> None:
    resp = client.post(TTS_URL, json={"text": "你好", "language": "zh-CN"})

    assert resp.status_code == 200
    assert resp.mimetype == "audio/mpeg"
    assert resp.data == FAKE_MP3
    assert resp.headers["X-Voice-Name"] == "zh-CN-XiaoxiaoNeural"
    assert unquote(resp.headers["X-Pinyin"]) == "nǐ hǎo"
    assert resp.headers["X-Pinyin"].isascii()


@pytest.mark.parametrize("language", ["ja-JP", "en-US", "fr-FR"])
def test_other_languages_send_empty_pinyin_header(client, language) -> None:
    resp = client.post(TTS_URL, json={"text": "hello", "language": language})

    assert resp.status_code == 200
    assert resp.headers["X-Pinyin"] == ""


def test_legacy_path_is_served_too(client) -> None:
    resp = client.post("/api/text-to-speech", json={"text": "hello", "language": "en-US", "voice": "en-US-GuyNeural"})

    assert resp.status_code == 200
    assert resp.headers["X-Voice-Name"] == "en-US-GuyNeural"


@pytest.mark.parametrize("language", [*DEFAULT_VOICES, "xx-XX", None])
@pytest.mark.parametrize("body_text", [None, ""])
def test_missing_text_is_400_for_any_language(client, azure_session, language, body_text) -> None:
    payload = {"language": language, "voice": "en-US-GuyNeural"}
    if body_text is not None:
        payload["text"] = body_text

    resp = client.post(TTS_URL, json=payload)

    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Text is required"}
    assert azure_session.calls == []


def test_non_json_body_is_400(client) -> None:
    resp = client.post(TTS_URL, data="text=hello", content_type="application/x-www-form-urlencoded")

    assert resp.status_code == 400


def test_upstream_failure_is_500_without_audio(client, upstream_failure) -> None:
    resp = client.post(TTS_URL, json={"text": "こんにちは", "language": "ja-JP"})

    assert resp.status_code == 500
    assert resp.mimetype == "application/json"
    assert resp.get_json() == {"error": "Internal Server Error"}
    assert FAKE_MP3 not in resp.data


def test_transport_failure_is_500(client, transport_failure) -> None:
    resp = client.post(TTS_URL, json={"text": "hello", "language": "en-US"})

    assert resp.status_code == 500


def test_unexpected_error_is_500(app, monkeypatch) -> None:
    gateway = app.extensions["synthesis_gateway"]

    def explode(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(gateway, "synthesize", explode)

    resp = app.test_client().post(TTS_URL, json={"text": "hello"})

    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal Server Error"}


def test_voices_endpoint_lists_catalog(client) -> None:
    data = client.get("/api/azure/voices").get_json()

    assert set(data["languages"]) == {"ja-JP", "en-US", "zh-CN", "fr-FR"}
    assert data["languages"]["zh-CN"]["voices"][0] == {
        "id": "zh-CN-XiaoxiaoNeural",
        "gender": "female",
        "display": "晓晓 (女性)",
    }
    assert data["aliases"]["english"] == "en-US"


def test_cors_exposes_custom_headers(client) -> None:
    resp = client.post(
        TTS_URL,
        json={"text": "你好", "language": "zh-CN"},
        headers={"Origin": "http://localhost:3000"},
    )

    assert resp.headers["Access-Control-Allow-Origin"] == "http://localhost:3000"
    assert "X-Pinyin" in resp.headers["Access-Control-Expose-Headers"]


def test_header_encoding_matches_encode_uri_component() -> None:
    assert encode_header_value(None) == ""
    assert encode_header_value("nǐ hǎo") == "n%C7%90%20h%C7%8Eo"
    assert encode_header_value("a(b)!*'~") == "a(b)!*'~"
    assert encode_header_value("，") == "%EF%BC%8C"


def test_create_app_without_credentials_fails_fast() -> None:
    with pytest.raises(ConfigurationError):
        create_app({"AZURE_SPEECH_KEY": None, "AZURE_SPEECH_REGION": None})


def test_create_app_builds_gateway_from_config(tmp_path) -> None:
    app = create_app({"AZURE_SPEECH_KEY": "k", "AZURE_SPEECH_REGION": "eastus", "AZURE_SPEECH_TIMEOUT": 3.0})

    speech_client = app.extensions["synthesis_gateway"].speech_client
    assert speech_client.url == "https://eastus.tts.speech.microsoft.com/cognitiveservices/v1"
    assert speech_client.timeout == 3.0
    assert app.extensions["voice_catalog"].languages() == ("ja-JP", "en-US", "zh-CN", "fr-FR")


@pytest.mark.parametrize(
    "payload",
    [
        {"text": "你好", "language": ["zh-CN"]},
        {"text": "你好", "language": {"code": "zh-CN"}},
        {"text": "hello", "language": "en-US", "voice": ["en-US-GuyNeural"]},
    ],
)
def test_non_string_language_or_voice_is_400(client, azure_session, payload) -> None:
    resp = client.post(TTS_URL, json=payload)

    assert resp.status_code == 400
    assert "error" in resp.get_json()
    assert azure_session.calls == []


def test_whitespace_only_mandarin_text_still_gets_pinyin_header(client) -> None:
    resp = client.post(TTS_URL, json={"text": "  ", "language": "zh-CN"})

    assert resp.status_code == 200
    assert resp.headers["X-Pinyin"] != ""
    assert unquote(resp.headers["X-Pinyin"]).strip() == ""
