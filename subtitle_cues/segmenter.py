"""Cue segmenter: group normalized words into draft cues.

WHY: A cue should hold one thought: it ends at a sentence boundary or a
noticeable pause, and it must stay within the on-screen character and
duration budgets so the layout engine can fit it.

HOW: One left-to-right scan accumulates a bucket of words. The bucket is
flushed before a word that would push the joined text past the character
budget (max_chars_per_line * max_lines), and after any word where:
  (a) the word ends a sentence (. ! ? 。 ！ ？),
  (b) the silence before the next word is >= pause_split_sec,
  (c) the joined text reaches the character budget,
  (d) the bucket spans >= max_cue_duration_sec.
Whatever remains at the end is flushed as the last draft.

RULES:
- Words are never reordered, dropped, or altered.
- A single word longer than the budget still forms its own draft.
"""

from typing import List

from .models import CueDraft, NormalizedWord, SubtitleGenerationOptions
from .text import append_word, ends_sentence


def _make_draft(bucket: List[NormalizedWord], text: str) -> CueDraft:
    return CueDraft(
        words=list(bucket),
        start=bucket[0].start,
        end=bucket[-1].end,
        text=text.strip(),
    )


def split_into_draft_cues(
    words: List[NormalizedWord],
    options: SubtitleGenerationOptions,
) -> List[CueDraft]:
    """Segment normalized words into draft cues.

    Args:
        words: Time-ordered normalized words.
        options: Limits used for the budget, pause, and duration rules.

    Returns:
        Drafts in input order; each yields exactly one cue.
    """
    drafts = []  # type: List[CueDraft]
    bucket = []  # type: List[NormalizedWord]
    text = ""
    char_budget = options.max_chars_per_line * options.max_lines

    for index, word in enumerate(words):
        candidate = append_word(text, word.text)
        if bucket and len(candidate) > char_budget:
            drafts.append(_make_draft(bucket, text))
            bucket = []
            candidate = word.text

        bucket.append(word)
        text = candidate

        next_word = words[index + 1] if index + 1 < len(words) else None
        pause_to_next = next_word.start - word.end if next_word is not None else 0.0
        duration = word.end - bucket[0].start

        if (
            ends_sentence(word.text)
            or pause_to_next >= options.pause_split_sec
            or len(text) >= char_budget
            or duration >= options.max_cue_duration_sec
        ):
            drafts.append(_make_draft(bucket, text))
            bucket = []
            text = ""

    if bucket:
        drafts.append(_make_draft(bucket, text))

    return drafts
