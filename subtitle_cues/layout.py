"""Timing and layout engine: cue windows and balanced line wrapping.

WHY: Draft cues carry the recognizer's natural timing, which is often too
short to read, overlapping, or too long to keep on screen. Each cue also
needs its text broken into at most max_lines lines, ideally two balanced
lines that never start with stray punctuation.

HOW: apply_cue_timing_and_layout() walks the drafts in order, keeping the
previous cue's end. Duration targets the reading speed (chars / max_cps),
clamped to [min_cue_duration_sec, max_cue_duration_sec]. Start is pushed
past the previous end plus min_gap_sec. wrap_lines() scores every word
boundary split as 2 * |len1 - len2| + max(len1, len2) and keeps the lowest;
unbreakable text falls back to hard_wrap_text().

RULES:
- Times are rounded to milliseconds.
- cps is the actual reading speed after clamping and is never re-clamped;
  overflow is reported by the pipeline, not fixed by cutting text.
- Text is never truncated. Hard wrapping puts any remainder on the last line.
- A second line may not start with , . ; : ! ? 。 ， ！ ？ 、 …
"""

import math
from typing import List, Optional, Tuple

from .models import CueDraft, SubtitleCue, SubtitleGenerationOptions
from .presets import MIN_CUE_SPAN_SEC, MIN_WORD_DURATION_SEC
from .text import is_cjk_text, starts_with_punct


def round_time(value: float) -> float:
    """Round seconds to millisecond precision."""
    return round(value, 3)


def _hard_break_index(remaining: str, max_chars_per_line: int) -> int:
    """Cut position at most max_chars_per_line that keeps punctuation off the next line."""
    cut = max_chars_per_line
    while cut > 1 and starts_with_punct(remaining[cut:].lstrip()):
        cut -= 1
    if starts_with_punct(remaining[cut:].lstrip()):
        return max_chars_per_line
    return cut


def hard_wrap_text(text: str, max_chars_per_line: int, max_lines: int) -> List[str]:
    """Cut text at fixed character boundaries, at most ``max_lines`` lines.

    A cut that would start the next line with punctuation moves back until
    it does not. The last allowed line takes whatever remains, even if it
    is longer.
    """
    lines = []  # type: List[str]
    remaining = text.strip()
    while remaining and len(lines) < max_lines:
        if len(remaining) <= max_chars_per_line or len(lines) == max_lines - 1:
            lines.append(remaining)
            break
        cut = _hard_break_index(remaining, max_chars_per_line)
        lines.append(remaining[:cut].rstrip())
        remaining = remaining[cut:].lstrip()
    return lines


def best_line_break(words: List[str], max_chars_per_line: int) -> Optional[Tuple[str, str]]:
    """Find the most balanced two-line split at a word boundary.

    Returns:
        (first, second) with the lowest score, ties going to the earliest
        split, or None when no split fits.
    """
    best = None
    best_score = math.inf

    for i in range(1, len(words)):
        first = " ".join(words[:i])
        second = " ".join(words[i:])

        if len(first) > max_chars_per_line or len(second) > max_chars_per_line:
            continue
        if starts_with_punct(second):
            continue

        score = abs(len(first) - len(second)) * 2 + max(len(first), len(second))
        if score < best_score:
            best_score = score
            best = (first, second)

    return best


def wrap_lines(text: str, max_chars_per_line: int, max_lines: int) -> List[str]:
    """Wrap cue text into at most ``max_lines`` lines."""
    trimmed = text.strip()
    if not trimmed:
        return []

    if len(trimmed) <= max_chars_per_line:
        return [trimmed]

    if max_lines < 2 or (is_cjk_text(trimmed) and " " not in trimmed):
        return hard_wrap_text(trimmed, max_chars_per_line, max_lines)

    words = trimmed.split()
    if len(words) <= 1:
        return hard_wrap_text(trimmed, max_chars_per_line, max_lines)

    best = best_line_break(words, max_chars_per_line)
    if best is not None:
        return list(best)
    return hard_wrap_text(trimmed, max_chars_per_line, max_lines)


def apply_cue_timing_and_layout(
    drafts: List[CueDraft],
    options: SubtitleGenerationOptions,
) -> List[SubtitleCue]:
    """Turn drafts into final, monotonic, wrapped cues.

    Args:
        drafts: Draft cues in time order.
        options: Duration, reading speed, gap, and line limits.

    Returns:
        One SubtitleCue per draft, ids "cue-1", "cue-2", ...
    """
    cues = []  # type: List[SubtitleCue]
    prev_end = 0.0

    for index, draft in enumerate(drafts):
        char_count = len(draft.text)
        target_duration = max(options.min_cue_duration_sec, char_count / options.max_cps)
        capped_duration = min(options.max_cue_duration_sec, target_duration)

        min_start = 0.0 if index == 0 else prev_end + options.min_gap_sec
        start = round_time(max(draft.start, min_start))
        end = round_time(start + max(capped_duration, MIN_CUE_SPAN_SEC))
        duration = max(MIN_WORD_DURATION_SEC, end - start)
        lines = wrap_lines(draft.text, options.max_chars_per_line, options.max_lines)

        cues.append(SubtitleCue(
            id="cue-{}".format(index + 1),
            start=start,
            end=end,
            text=draft.text,
            lines=lines,
            cps=char_count / duration,
            cpl=max((len(line) for line in lines), default=0),
        ))
        prev_end = end

    return cues


def cue_statistics(cues: List[SubtitleCue]) -> Tuple[float, float, int]:
    """Return (avg_cps, max_cps, max_cpl) over the cues; zeros when empty."""
    if not cues:
        return 0.0, 0.0, 0
    cps_values = [cue.cps for cue in cues]
    return (
        sum(cps_values) / len(cps_values),
        max(cps_values),
        max(cue.cpl for cue in cues),
    )
