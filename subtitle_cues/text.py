"""Character classes and the word-joining rule.

WHY: The normalizer, segmenter, line wrapper, and alignment tokenizer all
need to agree on what counts as CJK, what counts as punctuation, and when
two tokens are separated by a space. One module keeps those rules identical
everywhere.

RULES:
- CJK covers kana, CJK Unified Ideographs (incl. extension A) and
  compatibility ideographs.
- No space between two CJK characters.
- No space before punctuation-only tokens or tokens that start with
  line-start punctuation.
- No space after an opening quote or bracket.
"""

import re
from typing import Iterable

CJK_RANGES = "\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uf900-\ufaff"
PUNCT_CHARS = ",.;:!?。，！？、…"

CJK_RE = re.compile("[{}]".format(CJK_RANGES))
SENTENCE_END_RE = re.compile(r"[.!?。！？]\Z")
PUNCT_ONLY_RE = re.compile("[{}]+".format(re.escape(PUNCT_CHARS)))
LINE_START_PUNCT_RE = re.compile("[{}]".format(re.escape(PUNCT_CHARS)))
APOS_PREFIX_RE = re.compile(r"['’][a-z]+", re.IGNORECASE)

OPENING_CHARS = frozenset("“‘([")


def is_cjk_text(text: str) -> bool:
    """True if text contains at least one CJK character."""
    return CJK_RE.search(text) is not None


def is_punct_only(text: str) -> bool:
    return PUNCT_ONLY_RE.fullmatch(text) is not None


def starts_with_punct(text: str) -> bool:
    """True if text would be an orphan if it started a new line."""
    return LINE_START_PUNCT_RE.match(text) is not None


def ends_sentence(text: str) -> bool:
    return SENTENCE_END_RE.search(text) is not None


def is_apostrophe_suffix(text: str) -> bool:
    """True for contraction tails such as 't, 's, ’ll."""
    return APOS_PREFIX_RE.fullmatch(text) is not None


def needs_space(previous: str, current: str) -> bool:
    """Decide whether a space separates ``previous`` and ``current``."""
    if not previous or not current:
        return False
    if is_punct_only(current) or starts_with_punct(current):
        return False

    prev_last = previous[-1]
    curr_first = current[0]
    if is_cjk_text(prev_last) and is_cjk_text(curr_first):
        return False
    if prev_last in OPENING_CHARS:
        return False
    return True


def append_word(text: str, word: str) -> str:
    """Append one token to already-joined text using the joining rule."""
    if not text:
        return word
    if needs_space(text, word):
        return text + " " + word
    return text + word


def join_words(words: Iterable[str]) -> str:
    """Join tokens into natural prose text (no leading/trailing space)."""
    text = ""
    for word in words:
        text = append_word(text, word)
    return text.strip()
