# services/tts_client.py
"""HTTP client for the proxy's own `/api/azure/text-to-speech` endpoint."""

from typing import Optional
from urllib.parse import unquote

import requests

from errors import ClientFetchError
from services.synthesis_gateway import SynthesisRequest, SynthesisResult

TTS_PATH = "/api/azure/text-to-speech"


class SpeechProxyClient:
    """Fetches audio from a running proxy; every failure surfaces as ClientFetchError."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    def fetch(self, req: SynthesisRequest) -> SynthesisResult:
        payload = {"text": req.text, "language": req.language, "voice": req.voice}
        try:
            r = self.session.post(self.base_url + TTS_PATH, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            raise ClientFetchError(f"Request to {self.base_url} failed: {e}") from e

        if not r.ok:
            raise ClientFetchError(f"Failed to fetch audio data (HTTP {r.status_code})")

        # 拼音信息在 header 里 (percent-encoded)
        pinyin_header = r.headers.get("X-Pinyin")
        phonetic = unquote(pinyin_header) if pinyin_header else None

        return SynthesisResult(
            audio=r.content,
            phonetic=phonetic,
            voice=r.headers.get("X-Voice-Name") or req.voice,
            language=req.language,
        )
