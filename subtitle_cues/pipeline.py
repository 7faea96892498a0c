"""Pipeline orchestrator: transcript in, subtitle cues out.

WHY: Callers need one entry point that turns a word-timed transcript into
finished cues plus everything needed to judge their quality: metrics,
issues, and an ordered diagnostic trail.

HOW: generate_subtitle_cues() resolves options, then runs
extract_words -> normalize_token_sequence -> split_into_draft_cues ->
apply_cue_timing_and_layout, threading one RunReport through every stage.
Each stage emits at least one event through the optional on_log hook.

RULES:
- Never raises for malformed-but-parseable input; an unusable transcript
  returns zero cues and an "empty_transcript" error issue.
- Invalid options raise ValueError (see presets.resolve_options).
- Callers must check ``result.issues`` for severity "error".
- No state survives between calls.
"""

from typing import Optional

from .layout import apply_cue_timing_and_layout, cue_statistics
from .models import SubtitleGenerationHooks, SubtitleGenerationResult, WhisperTranscript
from .normalizer import extract_words, normalize_token_sequence
from .presets import CPS_OVERFLOW_TOLERANCE, OptionsInput, resolve_options
from .report import RunReport
from .segmenter import split_into_draft_cues


def generate_subtitle_cues(
    transcript: WhisperTranscript,
    options: OptionsInput = None,
    hooks: Optional[SubtitleGenerationHooks] = None,
) -> SubtitleGenerationResult:
    """Convert a recognizer transcript into subtitle cues.

    Args:
        transcript: Word-timed recognizer output.
        options: Partial overrides merged over the defaults: a mapping
            (snake_case or camelCase keys), a preset name, or a full
            SubtitleGenerationOptions.
        hooks: Optional sinks; ``on_log`` receives each event in order.

    Returns:
        SubtitleGenerationResult with cues, metrics, issues, and debug events.

    Raises:
        ValueError: If ``options`` is invalid.
    """
    resolved = resolve_options(options)
    report = RunReport(hooks)
    metrics = report.metrics

    extracted = extract_words(transcript, report)
    if not extracted:
        report.add_issue(
            "empty_transcript",
            "Transcript does not include words that can be converted into subtitle cues.",
            "error",
        )
        report.log("pipeline", "error", "No usable words found in transcript.")
        return SubtitleGenerationResult(cues=[], metrics=metrics, issues=report.issues, debug=report.debug)

    normalized = normalize_token_sequence(extracted, report)
    report.log(
        "normalize",
        "info",
        "Normalized punctuation and split words.",
        {
            "inputCount": len(extracted),
            "outputCount": len(normalized),
            "punctuationFixes": metrics.punctuation_fixes,
            "splitWordFixes": metrics.split_word_fixes,
        },
    )

    drafts = split_into_draft_cues(normalized, resolved)
    report.log(
        "segment",
        "info",
        "Segmented normalized words into cue drafts.",
        {"draftCount": len(drafts)},
    )

    cues = apply_cue_timing_and_layout(drafts, resolved)
    metrics.avg_cps, metrics.max_cps, metrics.max_cpl = cue_statistics(cues)
    metrics.cue_count = len(cues)
    report.log(
        "layout",
        "info",
        "Applied cue timing and line layout.",
        {"cueCount": len(cues)},
    )

    if metrics.max_cps > resolved.max_cps + CPS_OVERFLOW_TOLERANCE:
        report.add_issue(
            "cps_overflow",
            "Some cues still exceed max CPS after normalization.",
            "warn",
            {
                "maxCps": metrics.max_cps,
                "threshold": resolved.max_cps,
                "cueIds": [
                    cue.id for cue in cues
                    if cue.cps > resolved.max_cps + CPS_OVERFLOW_TOLERANCE
                ],
            },
        )

    overflowing = [
        cue.id for cue in cues
        if len(cue.lines) > resolved.max_lines or cue.cpl > resolved.max_chars_per_line
    ]
    if overflowing:
        report.add_issue(
            "line_overflow",
            "Some cues contain text that cannot fit the line budget; text was kept intact.",
            "warn",
            {"cueIds": overflowing, "maxCharsPerLine": resolved.max_chars_per_line},
        )

    report.log(
        "finalize",
        "info",
        "Generated subtitle cues and quality metrics.",
        {
            "cueCount": metrics.cue_count,
            "avgCps": round(metrics.avg_cps, 2),
            "maxCps": round(metrics.max_cps, 2),
            "maxCpl": metrics.max_cpl,
            "anomalyCount": metrics.anomalies_detected,
            "issueCount": len(report.issues),
        },
    )

    return SubtitleGenerationResult(cues=cues, metrics=metrics, issues=report.issues, debug=report.debug)
