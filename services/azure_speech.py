# services/azure_speech.py
"""
Azure Speech REST client
========================
Builds the SSML document for one utterance and posts it to the regional
Azure text-to-speech endpoint.
"""

import logging
from typing import Optional
from xml.sax.saxutils import escape, quoteattr

import requests

from errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)

ENDPOINT_TEMPLATE = "https://{region}.tts.speech.microsoft.com/cognitiveservices/v1"
DEFAULT_OUTPUT_FORMAT = "audio-16khz-128kbitrate-mono-mp3"
USER_AGENT = "azure-tts-proxy"


def build_ssml(text: str, language: str, voice_name: str) -> str:
    """Wrap text in a single-voice SSML document. Text and attributes are XML-escaped."""
    return (
        "<speak version='1.0' xmlns='http://www.w3.org/2001/10/synthesis' "
        f"xml:lang={quoteattr(language)}>"
        f"<voice name={quoteattr(voice_name)}>{escape(text)}</voice>"
        "</speak>"
    )


class AzureSpeechClient:
    """Thin wrapper around the Azure `cognitiveservices/v1` synthesis endpoint."""

    def __init__(
        self,
        subscription_key: Optional[str],
        region: Optional[str],
        output_format: str = DEFAULT_OUTPUT_FORMAT,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        if not subscription_key:
            raise ConfigurationError("AZURE_SPEECH_KEY is not configured")
        if not region:
            raise ConfigurationError("AZURE_SPEECH_REGION is not configured")

        self.subscription_key = subscription_key
        self.region = region
        self.output_format = output_format
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def url(self) -> str:
        return ENDPOINT_TEMPLATE.format(region=self.region)

    def synthesize(self, ssml: str) -> bytes:
        """
        Send an SSML document and return the audio bytes.

        Raises:
            UpstreamError: Azure answered with a non-2xx status or the request failed
        """
        headers = {
            "Ocp-Apim-Subscription-Key": self.subscription_key,
            "Content-Type": "application/ssml+xml",
            "X-Microsoft-OutputFormat": self.output_format,
            "User-Agent": USER_AGENT,
        }

        try:
            r = self.session.post(self.url, headers=headers, data=ssml.encode("utf-8"), timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"[AzureSpeech] Request failed: {e}")
            raise UpstreamError("Failed to reach Azure Speech API") from e

        if not r.ok:
            body = r.text
            logger.error(f"[AzureSpeech] API error: {r.status_code} {r.reason}")
            logger.error(f"[AzureSpeech] Error body: {body}")
            raise UpstreamError("Failed to fetch audio from Azure Speech API", status=r.status_code, body=body)

        return r.content
