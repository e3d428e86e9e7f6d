# services/transliteration.py
"""Pinyin rendering of Mandarin text, shown next to playback."""

from pypinyin import Style, pinyin


def to_pinyin(text: str) -> str:
    """
    Convert text to tone-marked pinyin, one reading per character.

    Non-Chinese runs (latin words, punctuation, whitespace) are kept as-is.

        >>> to_pinyin("你好")
        'nǐ hǎo'
    """
    # heteronym=False: 多音字只取第一个读音
    readings = pinyin(text, style=Style.TONE, heteronym=False)
    return " ".join(reading[0] for reading in readings if reading)
