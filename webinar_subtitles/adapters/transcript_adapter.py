"""Adapter between request payloads and the subtitle_cues models.

WHY: Transcripts arrive as JSON (HTTP body, CLI file) in the recognizer's
camelCase shape. The cue library works on typed dataclasses. Script
alignment produces timed tokens that must re-enter the pipeline as a
transcript. This module is the single bridge in both directions.

HOW:
  validate_transcript_payload()  jsonschema check against transcript.schema.json
  transcript_from_payload()      dict -> WhisperTranscript
  flatten_whisper_words()        every segment's words, in transcript order
  aligned_transcript()           ScriptAlignmentResult -> one synthetic segment

RULES:
- A transcript must have at least one segment; otherwise SubtitleRequestError.
- Missing or null word times become NaN; the library sanitizes them.
- Segments without words keep their text so the library can fall back.
- Aligned token text is joined with "" for CJK scripts and " " otherwise.
"""

from __future__ import annotations

import json
import math
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional

import jsonschema

from subtitle_cues import (
    ScriptAlignmentResult,
    WhisperSegment,
    WhisperTranscript,
    WhisperWord,
)
from webinar_subtitles.errors import SubtitleRequestError

_SCHEMA_PATH = Path(__file__).resolve().parent / "transcript.schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def _get_schema() -> Dict[str, Any]:
    """Load the transcript schema once per process."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def validate_transcript_payload(payload: Any) -> None:
    """Raise SubtitleRequestError if payload is not a usable transcript."""
    try:
        jsonschema.validate(instance=payload, schema=_get_schema())
    except jsonschema.ValidationError as exc:
        location = "/".join(str(p) for p in exc.absolute_path) or "transcript"
        raise SubtitleRequestError("Invalid transcript at '{}': {}".format(location, exc.message)) from exc


def _number(value: Any, default: float) -> float:
    if value is None or isinstance(value, bool):
        return default
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def _word_from_payload(raw: Mapping[str, Any]) -> WhisperWord:
    probability = raw.get("probability")
    return WhisperWord(
        word=str(raw.get("word") or ""),
        start=_number(raw.get("start"), math.nan),
        end=_number(raw.get("end"), math.nan),
        probability=None if probability is None else _number(probability, 0.0),
        id=raw.get("id"),
    )


def transcript_from_payload(payload: Any) -> WhisperTranscript:
    """Build a WhisperTranscript from a JSON-decoded payload.

    Raises:
        SubtitleRequestError: If payload is not an object or has no segments.
    """
    if not isinstance(payload, Mapping):
        raise SubtitleRequestError("transcript must be a JSON object.")
    raw_segments = payload.get("segments")
    if not isinstance(raw_segments, list) or not raw_segments:
        raise SubtitleRequestError("transcript.segments is required.")

    segments = []  # type: List[WhisperSegment]
    for raw in raw_segments:
        if not isinstance(raw, Mapping):
            raise SubtitleRequestError("transcript.segments must contain objects.")
        raw_words = raw.get("words")
        words = None
        if isinstance(raw_words, list):
            words = [_word_from_payload(w) for w in raw_words if isinstance(w, Mapping)]
        segments.append(WhisperSegment(
            id=raw.get("id"),
            start=_number(raw.get("start"), 0.0),
            end=_number(raw.get("end"), 0.0),
            text=str(raw.get("text") or ""),
            words=words,
        ))

    duration = payload.get("durationSec", payload.get("duration"))
    return WhisperTranscript(
        segments=segments,
        language=payload.get("language"),
        duration_sec=None if duration is None else _number(duration, 0.0),
        text=payload.get("text"),
    )


def flatten_whisper_words(transcript: WhisperTranscript) -> List[WhisperWord]:
    """All recognizer words across segments, in transcript order."""
    words = []  # type: List[WhisperWord]
    for segment in transcript.segments:
        if segment.words:
            words.extend(segment.words)
    return words


def aligned_transcript(
    alignment: ScriptAlignmentResult,
    source: WhisperTranscript,
    is_cjk: bool,
) -> WhisperTranscript:
    """Repackage timed script tokens as a single-segment transcript.

    Each token becomes one word; its alignment confidence becomes the
    word probability. Language and duration carry over from ``source``.
    """
    words = [
        WhisperWord(
            id=index,
            word=token.text,
            start=token.start,
            end=token.end,
            probability=token.confidence,
        )
        for index, token in enumerate(alignment.tokens)
    ]
    separator = "" if is_cjk else " "
    segment = WhisperSegment(
        id=0,
        start=words[0].start if words else 0.0,
        end=words[-1].end if words else 0.0,
        text=separator.join(token.text for token in alignment.tokens),
        words=words,
    )
    return WhisperTranscript(
        segments=[segment],
        language=source.language,
        duration_sec=source.duration_sec,
        text=source.text,
    )
