# services/synthesis_gateway.py
"""Request orchestration: validate, resolve voice, transliterate, call Azure."""

import logging
from dataclasses import dataclass
from typing import Optional

from errors import ValidationError
from services.azure_speech import AzureSpeechClient, build_ssml
from services.transliteration import to_pinyin
from voice_catalog import MANDARIN, VoiceCatalog, normalize_language

logger = logging.getLogger(__name__)


@dataclass
class SynthesisRequest:
    text: str
    language: str
    voice: Optional[str] = None


@dataclass
class SynthesisResult:
    """Audio for one request. `phonetic` is set for Mandarin only."""
    audio: bytes
    phonetic: Optional[str] = None
    voice: Optional[str] = None
    language: Optional[str] = None


class SynthesisGateway:
    """
    Server-side handler behind `POST /api/azure/text-to-speech`.

    Both collaborators are injected; the gateway holds no ambient state.
    """

    def __init__(self, catalog: VoiceCatalog, speech_client: AzureSpeechClient, transliterate=to_pinyin):
        self.catalog = catalog
        self.speech_client = speech_client
        self.transliterate = transliterate

    def synthesize(self, text, language=None, voice=None) -> SynthesisResult:
        """
        Synthesize `text` in `language`.

        Raises:
            ValidationError: text missing or empty, language/voice not strings
            UpstreamError: Azure call failed
        """
        if not text or not isinstance(text, str):
            raise ValidationError("Text is required")
        if language is not None and not isinstance(language, str):
            raise ValidationError("language must be a string")
        if voice is not None and not isinstance(voice, str):
            raise ValidationError("voice must be a string")

        language = normalize_language(language)
        voice_name = self.catalog.resolve_voice(language, voice)

        # 中文时生成拼音
        phonetic = None
        if language == MANDARIN:
            phonetic = self.transliterate(text)

        # 未指定语言时用回退语言
        lang_attr = language or self.catalog.fallback_language
        ssml = build_ssml(text, lang_attr, voice_name)

        logger.info(f"[TTS] Synthesizing {len(text)} chars with {voice_name} ({lang_attr})")
        audio = self.speech_client.synthesize(ssml)

        return SynthesisResult(audio=audio, phonetic=phonetic, voice=voice_name, language=lang_attr)
