# voice_catalog.py
"""
Voice Catalog
=============
Static mapping from Azure language code to the ordered list of neural voices
offered for it. The table is built once at startup and handed to the gateway
and the client controllers.
"""

import json
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Optional, Tuple

from errors import CatalogError

MANDARIN = "zh-CN"
DEFAULT_FALLBACK_VOICE = "ja-JP-NanamiNeural"
# xml:lang used with the fallback voice when no language is given
DEFAULT_FALLBACK_LANGUAGE = "ja-JP"

GENDERS = ("male", "female")


@dataclass(frozen=True)
class VoiceDescriptor:
    """One synthesis persona: Azure voice name plus display metadata"""
    id: str
    gender: str
    display: str

    def to_dict(self) -> dict:
        return {"id": self.id, "gender": self.gender, "display": self.display}


# 每种语言可用的声音 (第一个为默认)
DEFAULT_VOICES: Dict[str, Tuple[VoiceDescriptor, ...]] = {
    "ja-JP": (
        VoiceDescriptor("ja-JP-NanamiNeural", "female", "七海（女性）"),
        VoiceDescriptor("ja-JP-KeitaNeural", "male", "圭太（男性）"),
        VoiceDescriptor("ja-JP-AoiNeural", "female", "葵（女性）"),
        VoiceDescriptor("ja-JP-DaichiNeural", "male", "大地（男性）"),
        VoiceDescriptor("ja-JP-MayuNeural", "female", "まゆ（女性）"),
        VoiceDescriptor("ja-JP-ShioriNeural", "female", "志織（女性）"),
    ),
    "en-US": (
        VoiceDescriptor("en-US-JennyNeural", "female", "Jenny (女性)"),
        VoiceDescriptor("en-US-GuyNeural", "male", "Guy (男性)"),
        VoiceDescriptor("en-US-AriaNeural", "female", "Aria (女性)"),
        VoiceDescriptor("en-US-DavisNeural", "male", "Davis (男性)"),
        VoiceDescriptor("en-US-AmberNeural", "female", "Amber (女性)"),
        VoiceDescriptor("en-US-AndrewNeural", "male", "Andrew (男性)"),
    ),
    "zh-CN": (
        VoiceDescriptor("zh-CN-XiaoxiaoNeural", "female", "晓晓 (女性)"),
        VoiceDescriptor("zh-CN-YunjianNeural", "male", "云健 (男性)"),
        VoiceDescriptor("zh-CN-XiaoyiNeural", "female", "晓伊 (女性)"),
        VoiceDescriptor("zh-CN-YunyangNeural", "male", "云扬 (男性)"),
        VoiceDescriptor("zh-CN-XiaochenNeural", "female", "晓辰 (女性)"),
        VoiceDescriptor("zh-CN-YunxiNeural", "male", "云希 (男性)"),
    ),
    "fr-FR": (
        VoiceDescriptor("fr-FR-DeniseNeural", "female", "Denise (女性)"),
        VoiceDescriptor("fr-FR-HenriNeural", "male", "Henri (男性)"),
        VoiceDescriptor("fr-FR-EloiseNeural", "female", "Eloise (女性)"),
        VoiceDescriptor("fr-FR-JacquelineNeural", "female", "Jacqueline (女性)"),
        VoiceDescriptor("fr-FR-JeromeNeural", "male", "Jerome (男性)"),
        VoiceDescriptor("fr-FR-YvesNeural", "male", "Yves (男性)"),
    ),
}

# 前端用语言名称时的映射: 名称 -> Azure 语言代码
LANGUAGE_ALIASES = {
    "japanese": "ja-JP",
    "english": "en-US",
    "chinese": "zh-CN",
    "french": "fr-FR",
}

# 切换语言时的示例文本
SAMPLE_TEXTS = {
    "ja-JP": "こんにちは、Azure Speech APIです！",
    "en-US": "Hello, this is Azure Speech API!",
    "zh-CN": "你好，这是Azure语音API！",
    "fr-FR": "Bonjour, c'est l'API Azure Speech !",
}


def normalize_language(language: Optional[str]) -> Optional[str]:
    """Map a language name alias (e.g. 'english') to its code; anything else is returned as-is."""
    if not isinstance(language, str):
        return language
    return LANGUAGE_ALIASES.get(language.lower(), language)


class VoiceCatalog:
    """
    Immutable language -> voices table.

    Usage:
        catalog = VoiceCatalog.default()
        catalog.resolve_voice("zh-CN", None)  # 'zh-CN-XiaoxiaoNeural'
    """

    def __init__(
        self,
        voices: Mapping[str, Iterable[VoiceDescriptor]],
        sample_texts: Optional[Mapping[str, str]] = None,
        fallback_voice: str = DEFAULT_FALLBACK_VOICE,
        fallback_language: str = DEFAULT_FALLBACK_LANGUAGE,
    ):
        self._voices = MappingProxyType({lang: tuple(items) for lang, items in voices.items()})
        self._sample_texts = MappingProxyType(dict(sample_texts or {}))
        self.fallback_voice = fallback_voice
        self.fallback_language = fallback_language

    @classmethod
    def default(cls, fallback_voice: str = DEFAULT_FALLBACK_VOICE) -> "VoiceCatalog":
        return cls(DEFAULT_VOICES, SAMPLE_TEXTS, fallback_voice)

    @classmethod
    def from_file(cls, path: str, fallback_voice: str = DEFAULT_FALLBACK_VOICE) -> "VoiceCatalog":
        """
        Load a catalog from JSON shaped like the `/api/azure/voices` payload:

            {"languages": {"ja-JP": {"voices": [{"id": ..., "gender": ..., "display": ...}],
                                     "sample_text": "..."}}}

        Raises:
            CatalogError: file unreadable or an entry is malformed
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise CatalogError(f"Cannot read voice catalog {path}: {e}") from e

        languages = data.get("languages") if isinstance(data, dict) else None
        if not isinstance(languages, dict) or not languages:
            raise CatalogError(f"Voice catalog {path} has no 'languages' table")

        voices = {}
        sample_texts = {}
        for lang, entry in languages.items():
            items = entry.get("voices") if isinstance(entry, dict) else None
            if not isinstance(items, list) or not items:
                raise CatalogError(f"Language {lang} has no voices")
            voices[lang] = tuple(_parse_voice(lang, item) for item in items)
            if entry.get("sample_text"):
                sample_texts[lang] = entry["sample_text"]

        return cls(voices, sample_texts, fallback_voice)

    def languages(self) -> Tuple[str, ...]:
        return tuple(self._voices)

    def voices(self, language: Optional[str]) -> Tuple[VoiceDescriptor, ...]:
        """Voices for a language, or an empty tuple if the language is unknown"""
        return self._voices.get(normalize_language(language), ())

    def contains(self, language: Optional[str], voice_id: Optional[str]) -> bool:
        return any(v.id == voice_id for v in self.voices(language))

    def default_voice(self, language: Optional[str]) -> Optional[str]:
        voices = self.voices(language)
        return voices[0].id if voices else None

    def resolve_voice(self, language: Optional[str], voice_id: Optional[str] = None) -> str:
        """
        Pick the voice to synthesize with.

        The requested voice wins only if it belongs to the language's list;
        otherwise the language's first voice, otherwise the fallback voice.
        """
        if voice_id and self.contains(language, voice_id):
            return voice_id
        return self.default_voice(language) or self.fallback_voice

    def sample_text(self, language: Optional[str]) -> Optional[str]:
        return self._sample_texts.get(normalize_language(language))

    def to_dict(self) -> dict:
        return {
            "languages": {
                lang: {
                    "voices": [v.to_dict() for v in voices],
                    "sample_text": self._sample_texts.get(lang),
                }
                for lang, voices in self._voices.items()
            },
            "aliases": dict(LANGUAGE_ALIASES),
            "fallback_voice": self.fallback_voice,
        }


def _parse_voice(language: str, item) -> VoiceDescriptor:
    if not isinstance(item, dict) or not item.get("id"):
        raise CatalogError(f"Language {language}: voice entry without id: {item!r}")
    gender = item.get("gender")
    if gender not in GENDERS:
        raise CatalogError(f"Voice {item['id']}: gender must be one of {GENDERS}, got {gender!r}")
    return VoiceDescriptor(id=item["id"], gender=gender, display=item.get("display") or item["id"])
