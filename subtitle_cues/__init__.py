"""Subtitle cue generation and script alignment library.

WHY: Speech recognizers return word-level timings, but viewers need
readable subtitle cues: sentences broken at natural points, at most two
balanced lines, a comfortable reading speed, and no overlaps. When an
authoritative script exists, its exact text should replace the
recognizer's guesses while keeping the recognizer's timing.

HOW: Two public entry points:
  generate_subtitle_cues()              transcript -> cues, metrics, issues, debug
  assign_timestamps_to_script_tokens()  script + recognizer words -> timed tokens
Both are pure functions. Diagnostics flow through the optional
SubtitleGenerationHooks.on_log callback and the returned debug list.

RULES:
- No I/O and no global state; concurrent calls are safe.
- Malformed recognizer data never raises; problems come back as issues.
- Invalid options raise ValueError.
- Python 3.9 compatible (no slots=True, no match/case, no X | Y unions).
"""

from .alignment import assign_timestamps_to_script_tokens, tokenize_script_text
from .lookup import find_active_cue
from .models import (
    ScriptAlignmentResult,
    ScriptAlignmentStats,
    SubtitleCue,
    SubtitleGenerationHooks,
    SubtitleGenerationLogEvent,
    SubtitleGenerationMetrics,
    SubtitleGenerationOptions,
    SubtitleGenerationResult,
    SubtitleIssue,
    TimedScriptToken,
    WhisperSegment,
    WhisperTranscript,
    WhisperWord,
)
from .pipeline import generate_subtitle_cues
from .presets import DEFAULT_OPTIONS, PRESETS, resolve_options

__all__ = [
    "DEFAULT_OPTIONS",
    "PRESETS",
    "ScriptAlignmentResult",
    "ScriptAlignmentStats",
    "SubtitleCue",
    "SubtitleGenerationHooks",
    "SubtitleGenerationLogEvent",
    "SubtitleGenerationMetrics",
    "SubtitleGenerationOptions",
    "SubtitleGenerationResult",
    "SubtitleIssue",
    "TimedScriptToken",
    "WhisperSegment",
    "WhisperTranscript",
    "WhisperWord",
    "assign_timestamps_to_script_tokens",
    "find_active_cue",
    "generate_subtitle_cues",
    "resolve_options",
    "tokenize_script_text",
]
