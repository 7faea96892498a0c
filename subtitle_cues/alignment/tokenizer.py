"""Script tokenization and comparable-character decomposition.

WHY: Alignment compares only letters and digits; punctuation and
whitespace differ freely between a human script and recognizer output.
Script text also needs splitting into tokens that survive alignment
intact: acronyms like "P/E" and numbers like "2026" must stay atomic, and
CJK punctuation must stay attached to the ideograph before it.

HOW: to_comparable_chars() applies NFKC, lowercases, and keeps Unicode
letters/numbers plus CJK ideographs. tokenize_script_text() scans the
NFKC script once. build_script_core_chars() and build_whisper_core_chars()
flatten tokens and recognizer words into per-character units; recognizer
characters receive an even share of their word's time span.

RULES:
- Whitespace only separates tokens; it is never part of one.
- ASCII letters, digits and "/" accumulate into one token.
- With is_cjk, a CJK character swallows trailing non-comparable,
  non-whitespace characters ("賣。" stays one token).
- Any other character is a single-character token.
"""

import math
import string
import unicodedata
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..models import WhisperWord
from ..presets import FALLBACK_WORD_DURATION_SEC, MIN_CHAR_DURATION_SEC, MIN_TOKEN_DURATION_SEC
from ..text import CJK_RE

_ASCII_WORD_CHARS = frozenset(string.ascii_letters + string.digits + "/")


@dataclass
class ScriptCoreChar:
    char: str
    token_index: int


@dataclass
class WhisperCoreChar:
    char: str
    start: float
    end: float
    mid: float


def is_comparable_char(ch: str) -> bool:
    """True for Unicode letters and numbers, and CJK characters."""
    return unicodedata.category(ch)[0] in ("L", "N") or CJK_RE.match(ch) is not None


def to_comparable_chars(text: str) -> List[str]:
    normalized = unicodedata.normalize("NFKC", text).lower()
    return [ch for ch in normalized if is_comparable_char(ch)]


def _is_trailing_punctuation(ch: str) -> bool:
    return not is_comparable_char(ch) and not ch.isspace()


def tokenize_script_text(script_text: str, is_cjk: bool = False) -> List[str]:
    """Split a script into alignment tokens.

    Args:
        script_text: Authoritative script text.
        is_cjk: Attach trailing punctuation to CJK characters.

    Returns:
        Tokens in script order, NFKC-normalized.
    """
    chars = unicodedata.normalize("NFKC", script_text or "")
    tokens = []  # type: List[str]
    ascii_buffer = []  # type: List[str]

    def flush_ascii():
        if ascii_buffer:
            tokens.append("".join(ascii_buffer))
            del ascii_buffer[:]

    i = 0
    while i < len(chars):
        ch = chars[i]
        if ch.isspace():
            flush_ascii()
            i += 1
            continue

        if ch in _ASCII_WORD_CHARS:
            ascii_buffer.append(ch)
            i += 1
            continue

        flush_ascii()

        if is_cjk and CJK_RE.match(ch):
            j = i + 1
            while j < len(chars) and _is_trailing_punctuation(chars[j]):
                j += 1
            tokens.append(chars[i:j])
            i = j
            continue

        tokens.append(ch)
        i += 1

    flush_ascii()
    return tokens


def build_script_core_chars(script_tokens: Sequence[str]) -> Tuple[List[ScriptCoreChar], List[List[int]]]:
    """Flatten tokens into core chars.

    Returns:
        (chars, token_core_indices) where token_core_indices[t] lists the
        positions in ``chars`` that belong to token t (empty for pure
        punctuation).
    """
    chars = []  # type: List[ScriptCoreChar]
    token_core_indices = []  # type: List[List[int]]

    for token_index, token in enumerate(script_tokens):
        indices = []
        for ch in to_comparable_chars(token):
            indices.append(len(chars))
            chars.append(ScriptCoreChar(char=ch, token_index=token_index))
        token_core_indices.append(indices)

    return chars, token_core_indices


def clean_word_timing(word: WhisperWord) -> Tuple[float, float]:
    """Return a (start, end) span with start >= 0 and a minimum duration."""
    start = word.start if _is_finite(word.start) else 0.0
    start = max(0.0, float(start))
    raw_end = float(word.end) if _is_finite(word.end) else start + FALLBACK_WORD_DURATION_SEC
    return start, max(start + MIN_TOKEN_DURATION_SEC, raw_end)


def _is_finite(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def split_word_into_comparable_chars(word: WhisperWord) -> List[WhisperCoreChar]:
    """Divide one recognizer word's span evenly among its comparable chars."""
    start, end = clean_word_timing(word)
    chars = to_comparable_chars(word.word or "")
    if not chars:
        return []

    duration = max(MIN_TOKEN_DURATION_SEC, end - start)
    count = len(chars)
    parts = []
    for index, ch in enumerate(chars):
        part_start = start + duration * index / count
        part_end = start + duration * (index + 1) / count
        safe_end = max(part_start + MIN_CHAR_DURATION_SEC, part_end)
        parts.append(WhisperCoreChar(
            char=ch,
            start=part_start,
            end=safe_end,
            mid=(part_start + safe_end) / 2,
        ))
    return parts


def build_whisper_core_chars(whisper_words: Sequence[WhisperWord]) -> List[WhisperCoreChar]:
    """Time-order recognizer words and flatten them into core chars."""
    ordered = sorted(whisper_words, key=clean_word_timing)
    chars = []  # type: List[WhisperCoreChar]
    for word in ordered:
        chars.extend(split_word_into_comparable_chars(word))
    return chars
