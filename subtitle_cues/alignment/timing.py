"""Timing reconstruction for aligned script characters and tokens.

WHY: Matching only tells which script characters the recognizer heard.
Every script character, and then every script token, still needs a time
window, including characters the recognizer missed and tokens that are
pure punctuation.

HOW:
  1. derive_script_char_timings(): matched chars copy their recognizer
     char's window. Unmatched chars between two anchors get a window of
     avg_char_duration centered on the linear interpolation of the anchor
     midpoints; with one anchor they extend one avg_char_duration away from
     it; with none they are spread across the recognizer's time range. A
     final pass pushes each char to start no earlier than the previous end.
  2. resolve_punctuation_token_timing(): tokens without core chars sit
     between their nearest timed neighbours (or just outside them at the
     edges), MIN_TOKEN_DURATION_SEC wide.
  3. finalize_token_monotonicity(): tokens never start before the previous
     token ends and always last at least MIN_TOKEN_DURATION_SEC.

RULES:
- Time only moves forward in the monotonic passes.
- avg_char_duration is the clamped mean recognizer char duration.
"""

import dataclasses
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from ..models import TimedScriptToken
from ..presets import (
    DEFAULT_AVG_CHAR_DURATION_SEC,
    MAX_AVG_CHAR_DURATION_SEC,
    MIN_CHAR_DURATION_SEC,
    MIN_TOKEN_DURATION_SEC,
)
from .tokenizer import ScriptCoreChar, WhisperCoreChar


@dataclass
class CharTiming:
    start: float
    end: float
    matched: bool


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def average_char_duration(whisper_chars: Sequence[WhisperCoreChar]) -> float:
    if not whisper_chars:
        return DEFAULT_AVG_CHAR_DURATION_SEC
    total = sum(max(MIN_CHAR_DURATION_SEC, c.end - c.start) for c in whisper_chars)
    return _clamp(total / len(whisper_chars), MIN_CHAR_DURATION_SEC, MAX_AVG_CHAR_DURATION_SEC)


def derive_script_char_timings(
    script_chars: Sequence[ScriptCoreChar],
    whisper_chars: Sequence[WhisperCoreChar],
    matches: Sequence[Tuple[int, int]],
) -> List[CharTiming]:
    """Give every script core char a time window."""
    n = len(script_chars)
    if n == 0:
        return []

    mapped = [-1] * n
    for script_index, whisper_index in matches:
        mapped[script_index] = whisper_index

    avg = average_char_duration(whisper_chars)
    global_start = whisper_chars[0].start if whisper_chars else 0.0
    global_end = whisper_chars[-1].end if whisper_chars else global_start + avg * n

    prev_match = [-1] * n
    last = -1
    for i in range(n):
        if mapped[i] != -1:
            last = i
        prev_match[i] = last

    next_match = [-1] * n
    last = -1
    for i in range(n - 1, -1, -1):
        if mapped[i] != -1:
            last = i
        next_match[i] = last

    timings = []  # type: List[CharTiming]
    for i in range(n):
        if mapped[i] != -1:
            source = whisper_chars[mapped[i]]
            timings.append(CharTiming(source.start, source.end, True))
            continue

        left = prev_match[i]
        right = next_match[i]
        if left != -1 and right != -1 and left != right:
            left_timing = timings[left]
            ratio = (i - left) / (right - left)
            left_mid = (left_timing.start + left_timing.end) / 2
            right_mid = whisper_chars[mapped[right]].mid
            center = left_mid + (right_mid - left_mid) * ratio
            timings.append(CharTiming(center - avg / 2, center + avg / 2, False))
        elif left != -1:
            left_end = timings[left].end
            timings.append(CharTiming(left_end, left_end + avg, False))
        elif right != -1:
            right_start = whisper_chars[mapped[right]].start
            timings.append(CharTiming(right_start - avg, right_start, False))
        else:
            ratio = 0.0 if n <= 1 else i / (n - 1)
            center = global_start + (global_end - global_start) * ratio
            timings.append(CharTiming(center - avg / 2, center + avg / 2, False))

    cursor = global_start
    for timing in timings:
        timing.start = max(cursor, timing.start)
        timing.end = max(timing.start + MIN_CHAR_DURATION_SEC, timing.end)
        cursor = timing.end

    return timings


def resolve_punctuation_token_timing(index: int, tokens: Sequence[TimedScriptToken]) -> Tuple[float, float]:
    """Place a token without core chars between its nearest timed neighbours."""
    prev_token = None
    for i in range(index - 1, -1, -1):
        if tokens[i].total_core_chars > 0:
            prev_token = tokens[i]
            break

    next_token = None
    for i in range(index + 1, len(tokens)):
        if tokens[i].total_core_chars > 0:
            next_token = tokens[i]
            break

    if prev_token is not None and next_token is not None:
        gap = max(0.0, next_token.start - prev_token.end)
        if gap < MIN_TOKEN_DURATION_SEC:
            return prev_token.end, prev_token.end + MIN_TOKEN_DURATION_SEC
        center = prev_token.end + gap / 2
        return center - MIN_TOKEN_DURATION_SEC / 2, center + MIN_TOKEN_DURATION_SEC / 2

    if prev_token is not None:
        return prev_token.end, prev_token.end + MIN_TOKEN_DURATION_SEC

    if next_token is not None:
        return max(0.0, next_token.start - MIN_TOKEN_DURATION_SEC), next_token.start

    return 0.0, MIN_TOKEN_DURATION_SEC


def finalize_token_monotonicity(tokens: Sequence[TimedScriptToken]) -> List[TimedScriptToken]:
    """Return copies with start_i >= end_{i-1} and a minimum span."""
    if not tokens:
        return []

    cursor = max(0.0, tokens[0].start)
    output = []
    for token in tokens:
        start = max(cursor, token.start)
        end = max(start + MIN_TOKEN_DURATION_SEC, token.end)
        output.append(dataclasses.replace(token, start=start, end=end))
        cursor = end
    return output
