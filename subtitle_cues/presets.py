"""Option presets and tuned constants for cue generation and alignment.

WHY: Different delivery targets (cinema-style 16:9 player, vertical social
video, dense CJK text) need different line and reading-speed limits. The
alignment engine also relies on a handful of tuned thresholds. Keeping
both as named constants makes them easy to find and safe to override per
call without touching any global state.

HOW: Each preset is a frozen SubtitleGenerationOptions. PRESETS maps names
to presets. resolve_options() turns whatever a caller passes (nothing, a
preset name, an options object, or a partial mapping) into one validated
options object.

RULES:
- Presets are frozen; callers get new objects via dataclasses.replace().
- Mappings may use snake_case field names or camelCase wire names.
- None values in a mapping are ignored (treated as "not supplied").
- Unknown keys and out-of-range limits raise ValueError.
- The alignment constants were validated against the regression fixtures;
  re-run the alignment tests before changing them.
"""

import dataclasses
import math
from typing import Any, Dict, Mapping, Optional, Union

from .models import OPTION_ALIASES, SubtitleGenerationOptions

# -----------------------------------------------------------------------------
# Option presets
# -----------------------------------------------------------------------------

DEFAULT_OPTIONS = SubtitleGenerationOptions()
"""Cinema defaults: 2 x 42 chars, 1-6 s cues, 17 cps, 80 ms gaps."""

PRESET_VERTICAL = SubtitleGenerationOptions(
    max_chars_per_line=24,
    max_lines=1,
    min_cue_duration_sec=0.8,
    max_cue_duration_sec=3.5,
    max_cps=15.0,
)
"""Single short line for 9:16 social video."""

PRESET_CJK = SubtitleGenerationOptions(
    max_chars_per_line=16,
    max_lines=2,
    max_cps=9.0,
)
"""Ideographic text carries more information per character."""

PRESETS: Dict[str, SubtitleGenerationOptions] = {
    "cinema": DEFAULT_OPTIONS,
    "default": DEFAULT_OPTIONS,
    "vertical": PRESET_VERTICAL,
    "cjk": PRESET_CJK,
}

# -----------------------------------------------------------------------------
# Timing constants
# -----------------------------------------------------------------------------

MIN_WORD_DURATION_SEC = 0.04
"""Shortest span a sanitized recognizer word may have."""

MIN_CUE_SPAN_SEC = 0.001
"""Shortest cue window after millisecond rounding, so end > start always holds."""

FALLBACK_WORD_DURATION_SEC = 0.2
"""Span given to a word whose end time is missing or not finite."""

MIN_FALLBACK_SEGMENT_SPAN_SEC = 0.2
"""Minimum span spread across pseudo-words of a segment without word timings."""

CPS_OVERFLOW_TOLERANCE = 0.01
"""Reading speed may exceed max_cps by this much before an issue is raised."""

# -----------------------------------------------------------------------------
# Alignment constants
# -----------------------------------------------------------------------------

LCS_MAX_CELLS = 6_000_000
"""Above this many DP cells (script chars x recognizer chars) use greedy matching."""

GREEDY_LOOKAHEAD = 12
"""How far the greedy matcher searches ahead on each side after a mismatch."""

MIN_TOKEN_DURATION_SEC = 0.04
"""Shortest span of an aligned script token."""

MIN_CHAR_DURATION_SEC = 0.01
"""Shortest span of an aligned script character."""

MAX_AVG_CHAR_DURATION_SEC = 0.12
"""Upper clamp for the mean recognizer character duration."""

DEFAULT_AVG_CHAR_DURATION_SEC = 0.05
"""Character duration used when the recognizer produced no comparable chars."""

LOW_COVERAGE_WARN_RATIO = 0.98
"""Coverage below this adds a low-coverage warning."""

UNMATCHED_WHISPER_WARN_RATIO = 0.1
"""Unused recognizer chars above this fraction of script chars add a warning."""


# -----------------------------------------------------------------------------
# Resolution
# -----------------------------------------------------------------------------

OptionsInput = Union[None, str, SubtitleGenerationOptions, Mapping[str, Any]]

_INT_FIELDS = ("max_chars_per_line", "max_lines")
_POSITIVE_FIELDS = ("max_chars_per_line", "max_lines", "max_cps", "max_cue_duration_sec")
_NON_NEGATIVE_FIELDS = ("min_cue_duration_sec", "min_gap_sec", "pause_split_sec")


def resolve_options(
    overrides: OptionsInput = None,
    base: Optional[SubtitleGenerationOptions] = None,
) -> SubtitleGenerationOptions:
    """Merge caller overrides over a base preset and validate the result.

    Args:
        overrides: None, a preset name, a SubtitleGenerationOptions, or a
            partial mapping (snake_case or camelCase keys).
        base: Options to merge onto. Default: DEFAULT_OPTIONS.

    Returns:
        A validated SubtitleGenerationOptions.

    Raises:
        ValueError: Unknown preset name or key, wrong value type, or a limit
            outside its allowed range.
    """
    options = base if base is not None else DEFAULT_OPTIONS

    if overrides is None:
        pass
    elif isinstance(overrides, SubtitleGenerationOptions):
        options = overrides
    elif isinstance(overrides, str):
        if overrides not in PRESETS:
            raise ValueError(
                "Unknown preset '{}'. Available: {}".format(
                    overrides, ", ".join(PRESETS.keys())
                )
            )
        options = PRESETS[overrides]
    else:
        changes = {}
        for key, value in overrides.items():
            if value is None:
                continue
            name = OPTION_ALIASES.get(key, key)
            if name not in _field_names():
                raise ValueError("Unknown subtitle option '{}'".format(key))
            changes[name] = _coerce(name, value)
        options = dataclasses.replace(options, **changes)

    _validate(options)
    return options


def _field_names():
    return {f.name for f in dataclasses.fields(SubtitleGenerationOptions)}


def _coerce(name: str, value: Any) -> Any:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValueError("Option '{}' must be a number, got {!r}".format(name, value))
    if name in _INT_FIELDS:
        if float(value) != int(value):
            raise ValueError("Option '{}' must be a whole number, got {!r}".format(name, value))
        return int(value)
    return float(value)


def _validate(options: SubtitleGenerationOptions) -> None:
    for name in _POSITIVE_FIELDS:
        value = getattr(options, name)
        if not math.isfinite(value) or value <= 0:
            raise ValueError("Option '{}' must be > 0, got {!r}".format(name, value))
    for name in _NON_NEGATIVE_FIELDS:
        value = getattr(options, name)
        if not math.isfinite(value) or value < 0:
            raise ValueError("Option '{}' must be >= 0, got {!r}".format(name, value))
    if options.min_cue_duration_sec > options.max_cue_duration_sec:
        raise ValueError(
            "min_cue_duration_sec ({}) exceeds max_cue_duration_sec ({})".format(
                options.min_cue_duration_sec, options.max_cue_duration_sec
            )
        )
