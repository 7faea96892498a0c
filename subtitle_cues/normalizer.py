"""Word normalizer: timing sanitation, ordering, and fragment merging.

WHY: Recognizer output is noisy. Words arrive with negative or missing
times, out of order, or split into fragments ("don" + "'t", "world" + "!").
Cue segmentation needs a clean, time-ordered list of writable units.

HOW: extract_words() flattens the transcript (synthesizing evenly spaced
pseudo-words for segments that lack word timings), sanitizes each word,
and stably sorts by (start, end). normalize_token_sequence() then folds
punctuation-only tokens, apostrophe suffixes, and lone hyphens into the
preceding word.

RULES:
- start >= 0 and end >= start + 0.04 for every output word.
- Merging extends the host word's end, never its start.
- Anomalies are recorded on the RunReport; nothing here raises.
- Words with empty text after trimming are dropped.
"""

import math
from typing import List

from .models import NormalizedWord, WhisperTranscript, WhisperWord
from .presets import (
    FALLBACK_WORD_DURATION_SEC,
    MIN_FALLBACK_SEGMENT_SPAN_SEC,
    MIN_WORD_DURATION_SEC,
)
from .report import RunReport
from .text import is_apostrophe_suffix, is_cjk_text, is_punct_only


def _finite_or(value, default: float) -> float:
    if isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value):
        return float(value)
    return default


def sanitize_word_timing(word: WhisperWord) -> NormalizedWord:
    """Clamp a recognizer word to a valid, non-empty time span."""
    start = max(0.0, _finite_or(word.start, 0.0))
    raw_end = _finite_or(word.end, math.nan)
    if math.isnan(raw_end):
        end = start + FALLBACK_WORD_DURATION_SEC
    else:
        end = max(start + MIN_WORD_DURATION_SEC, raw_end)
    return NormalizedWord(text=(word.word or "").strip(), start=start, end=end)


def split_fallback_words(text: str, start: float, end: float) -> List[NormalizedWord]:
    """Synthesize evenly spaced pseudo-words for a segment without word timings.

    CJK text splits per character, everything else on whitespace.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return []

    if is_cjk_text(trimmed):
        units = [ch for ch in trimmed if not ch.isspace()]
    else:
        units = trimmed.split()
    if not units:
        return []

    start = _finite_or(start, 0.0)
    end = _finite_or(end, start)
    span = max(MIN_FALLBACK_SEGMENT_SPAN_SEC, end - start)
    step = span / len(units)

    words = []
    for index, unit in enumerate(units):
        w_start = start + step * index
        w_end = end if index == len(units) - 1 else w_start + step
        words.append(NormalizedWord(
            text=unit,
            start=w_start,
            end=max(w_start + MIN_WORD_DURATION_SEC, w_end),
        ))
    return words


def extract_words(transcript: WhisperTranscript, report: RunReport) -> List[NormalizedWord]:
    """Flatten, sanitize, and time-order every word in the transcript.

    Args:
        transcript: Recognizer output.
        report: Run accumulator; receives anomalies and "extract" events.

    Returns:
        Words sorted by (start, end); the sort is stable.
    """
    words = []  # type: List[NormalizedWord]

    for segment in transcript.segments or []:
        if segment.words:
            for word in segment.words:
                normalized = sanitize_word_timing(word)
                if normalized.text:
                    words.append(normalized)
            continue

        fallback = split_fallback_words(segment.text, segment.start, segment.end)
        if fallback:
            data = {"segmentId": segment.id, "tokenCount": len(fallback)}
            report.add_issue(
                "segment_without_words",
                "Whisper segment missing word-level timestamps; using fallback tokenization.",
                "warn",
                dict(data),
            )
            report.log(
                "extract",
                "warn",
                "Segment missing word timings. Fallback tokenization applied.",
                dict(data),
            )
            words.extend(fallback)

    ordered = sorted(words, key=lambda w: (w.start, w.end))
    if any(a is not b for a, b in zip(words, ordered)):
        report.metrics.anomalies_detected += 1
        report.add_issue(
            "non_monotonic_word_input",
            "Input word timings were non-monotonic and have been re-ordered.",
            "warn",
        )
        report.log(
            "extract",
            "warn",
            "Detected non-monotonic word timestamps; sorted for alignment.",
            {"inputCount": len(words)},
        )
    else:
        report.log(
            "extract",
            "info",
            "Extracted word-level timings.",
            {"inputCount": len(words)},
        )

    return ordered


def normalize_token_sequence(words: List[NormalizedWord], report: RunReport) -> List[NormalizedWord]:
    """Merge punctuation, contraction suffixes, and lone hyphens into the previous word.

    Counts each merge in ``report.metrics`` (punctuation_fixes or
    split_word_fixes). Running it again on its own output changes nothing.
    """
    normalized = []  # type: List[NormalizedWord]
    metrics = report.metrics

    for word in words:
        if not word.text:
            continue

        if not normalized:
            normalized.append(NormalizedWord(word.text, word.start, word.end))
            continue

        prev = normalized[-1]
        if is_punct_only(word.text):
            metrics.punctuation_fixes += 1
        elif is_apostrophe_suffix(word.text):
            metrics.split_word_fixes += 1
        elif word.text == "-" and prev.text:
            metrics.split_word_fixes += 1
        else:
            normalized.append(NormalizedWord(word.text, word.start, word.end))
            continue

        prev.text += word.text
        prev.end = max(prev.end, word.end)

    return normalized
