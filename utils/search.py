from __future__ import annotations

from typing import Iterable, Optional

# Initial consonants (choseong) in Unicode syllable order.
CHOSUNG_LIST = [
    "ㄱ", "ㄲ", "ㄴ", "ㄷ", "ㄸ", "ㄹ", "ㅁ", "ㅂ", "ㅃ", "ㅅ",
    "ㅆ", "ㅇ", "ㅈ", "ㅉ", "ㅊ", "ㅋ", "ㅌ", "ㅍ", "ㅎ",
]
_CHOSUNG_SET = frozenset(CHOSUNG_LIST)

HANGUL_BASE = 0xAC00
HANGUL_LAST = 0xD7A3
# 21 medial vowels x 28 finals per initial consonant
SYLLABLES_PER_INITIAL = 588


def get_chosung(char: str) -> str:
    """Initial consonant of a precomposed Hangul syllable; other characters pass through."""
    code = ord(char)
    if code < HANGUL_BASE or code > HANGUL_LAST:
        return char
    return CHOSUNG_LIST[(code - HANGUL_BASE) // SYLLABLES_PER_INITIAL]


def chosung_string(text: str) -> str:
    return "".join(get_chosung(char) for char in text)


def is_chosung_query(query: str) -> bool:
    return bool(query) and all(char in _CHOSUNG_SET for char in query)


def chosung_includes(text: Optional[str], query: Optional[str]) -> bool:
    """True if ``query`` occurs in ``text`` literally or by initial consonants.

    A query made only of consonant jamo ("ㅂㄹㅇ") is looked up in the text's
    consonant string ("빌려온" -> "ㅂㄹㅇ"). A mixed query is reduced to its own
    consonant string first, so "빌ㄹ" also matches "빌려온".
    """
    if not text or not query:
        return False
    if query.lower() in text.lower():
        return True
    text_chosung = chosung_string(text)
    if is_chosung_query(query):
        return query in text_chosung
    return chosung_string(query) in text_chosung


def chosung_startswith(text: Optional[str], query: Optional[str]) -> bool:
    if not text or not query:
        return False
    if text.lower().startswith(query.lower()):
        return True
    if is_chosung_query(query):
        return chosung_string(text).startswith(query)
    return False


def normalize_query(raw: Optional[str]) -> str:
    """Lowercase and strip a search keyword; None becomes ''."""
    if raw is None:
        return ""
    return raw.strip().lower()


def text_matches(fields: Iterable[Optional[str]], query: str) -> bool:
    """Match a normalized query against each field, literally or by initial consonants."""
    for field in fields:
        value = str(field or "")
        if query in value.lower() or chosung_includes(value, query):
            return True
    return False
