"""Script alignment engine: recognizer timings onto authoritative script tokens.

WHY: When a human-written script exists, its text is correct but untimed,
while the recognizer's words are timed but noisy. Aligning the two at the
character level gives the script's exact text with the recognizer's
timing, plus statistics that tell the caller whether to trust the result.

HOW: Script tokens (given, or produced by tokenize_script_text) and
recognizer words are reduced to comparable characters, matched with
match_core_chars(), and timed with derive_script_char_timings(). A token
spans its first to last core char; pure punctuation tokens are placed
between their neighbours; a final pass makes tokens monotonic.

RULES:
- Non-empty script_tokens take precedence over script_text; supplying both
  adds a warning.
- Quality problems are warnings, never exceptions. The accept/reject
  policy belongs to the caller.
- coverage_ratio is 1.0 when the script has no comparable characters.
- When hooks are given, one "align" event is emitted.
"""

from typing import List, Optional, Sequence

from ..models import (
    ScriptAlignmentResult,
    ScriptAlignmentStats,
    SubtitleGenerationHooks,
    SubtitleGenerationLogEvent,
    TimedScriptToken,
    WhisperWord,
)
from ..presets import (
    GREEDY_LOOKAHEAD,
    LCS_MAX_CELLS,
    LOW_COVERAGE_WARN_RATIO,
    MIN_TOKEN_DURATION_SEC,
    UNMATCHED_WHISPER_WARN_RATIO,
)
from .matcher import match_core_chars
from .timing import (
    derive_script_char_timings,
    finalize_token_monotonicity,
    resolve_punctuation_token_timing,
)
from .tokenizer import build_script_core_chars, build_whisper_core_chars, tokenize_script_text

BOTH_INPUTS_WARNING = "Both scriptTokens and scriptText supplied; using scriptTokens."


def assign_timestamps_to_script_tokens(
    whisper_words: Sequence[WhisperWord],
    script_tokens: Optional[Sequence[str]] = None,
    script_text: Optional[str] = None,
    is_cjk: bool = False,
    hooks: Optional[SubtitleGenerationHooks] = None,
    max_lcs_cells: int = LCS_MAX_CELLS,
    lookahead: int = GREEDY_LOOKAHEAD,
    low_coverage_ratio: float = LOW_COVERAGE_WARN_RATIO,
    unmatched_whisper_ratio: float = UNMATCHED_WHISPER_WARN_RATIO,
) -> ScriptAlignmentResult:
    """Time every script token from the recognizer's words.

    Args:
        whisper_words: Recognizer words, in any order.
        script_tokens: Pre-split script units; used when non-empty.
        script_text: Raw script, tokenized when script_tokens is empty.
        is_cjk: Tokenizer mode for script_text (see tokenize_script_text).
        hooks: Optional sink for the "align" event.
        max_lcs_cells: Table size above which greedy matching is used.
        lookahead: Greedy resynchronization window.
        low_coverage_ratio: Coverage below this adds a warning.
        unmatched_whisper_ratio: Unused recognizer chars above this fraction
            of script chars add a warning.

    Returns:
        ScriptAlignmentResult with one TimedScriptToken per script token.
    """
    warnings = []  # type: List[str]
    if script_tokens:
        tokens_in = list(script_tokens)
        if script_text:
            warnings.append(BOTH_INPUTS_WARNING)
    else:
        tokens_in = tokenize_script_text(script_text or "", is_cjk)

    whisper_chars = build_whisper_core_chars(list(whisper_words or []))
    script_chars, token_core_indices = build_script_core_chars(tokens_in)

    matches, strategy = match_core_chars(
        [c.char for c in script_chars],
        [c.char for c in whisper_chars],
        max_lcs_cells=max_lcs_cells,
        lookahead=lookahead,
    )
    char_timings = derive_script_char_timings(script_chars, whisper_chars, matches)

    matched_script = [False] * len(script_chars)
    for script_index, _ in matches:
        matched_script[script_index] = True

    tokens = []  # type: List[TimedScriptToken]
    for text, indices in zip(tokens_in, token_core_indices):
        if not indices:
            tokens.append(TimedScriptToken(
                text=text,
                start=0.0,
                end=MIN_TOKEN_DURATION_SEC,
                confidence=1.0,
                matched_chars=0,
                total_core_chars=0,
            ))
            continue

        matched = sum(1 for idx in indices if matched_script[idx])
        tokens.append(TimedScriptToken(
            text=text,
            start=char_timings[indices[0]].start,
            end=char_timings[indices[-1]].end,
            confidence=matched / len(indices),
            matched_chars=matched,
            total_core_chars=len(indices),
        ))

    for index, token in enumerate(tokens):
        if token.total_core_chars == 0:
            token.start, token.end = resolve_punctuation_token_timing(index, tokens)

    final_tokens = finalize_token_monotonicity(tokens)

    matched_chars = len(matches)
    stats = ScriptAlignmentStats(
        script_core_chars=len(script_chars),
        whisper_core_chars=len(whisper_chars),
        matched_chars=matched_chars,
        unmatched_script_chars=max(0, len(script_chars) - matched_chars),
        unmatched_whisper_chars=max(0, len(whisper_chars) - matched_chars),
        coverage_ratio=matched_chars / len(script_chars) if script_chars else 1.0,
        unmatched_core_script_tokens=sum(
            1 for token in final_tokens
            if token.total_core_chars > 0 and token.matched_chars == 0
        ),
        strategy=strategy,
    )

    if stats.coverage_ratio < low_coverage_ratio:
        warnings.append("Low script coverage: {:.2f}%".format(stats.coverage_ratio * 100))
    if stats.unmatched_core_script_tokens > 0:
        warnings.append("Unmatched core script tokens: {}".format(stats.unmatched_core_script_tokens))
    if stats.unmatched_whisper_chars > len(script_chars) * unmatched_whisper_ratio:
        warnings.append("Whisper had substantial unmatched chars: {}".format(stats.unmatched_whisper_chars))

    if hooks is not None and hooks.on_log is not None:
        data = stats.to_dict()
        data["tokenCount"] = len(final_tokens)
        data["warnings"] = list(warnings)
        hooks.on_log(SubtitleGenerationLogEvent(
            stage="align",
            level="warn" if warnings else "info",
            message="Aligned recognizer timings to script tokens.",
            data=data,
        ))

    return ScriptAlignmentResult(tokens=final_tokens, stats=stats, warnings=warnings)
