"""Subtitle generation service: the host workflow around the cue library.

WHY: The HTTP API and the CLI must behave identically: same alignment
gate, same synthetic transcript, same log trail, same persistence rules.
Putting the workflow here leaves both surfaces as thin translation layers.

HOW: generate_subtitles() runs one request:
  1. log the request
  2. when a script is supplied, align it against the recognizer words and
     apply the strict quality gate
  3. feed the (possibly aligned) transcript through generate_subtitle_cues()
     with the run logger as the pipeline's log hook
  4. optionally persist cues onto the webinar record
  5. log the response and flush the run's records

RULES:
- Gate: coverage < STRICT_MIN_COVERAGE_RATIO or any fully unmatched core
  token fails when strict_alignment is on. The run is logged and flushed,
  then AlignmentGateError is raised.
- Non-empty script_tokens take precedence over script_text.
- Persistence happens only with persist_to_webinar and a webinar_id; an
  unknown webinar is a warning, not a failure.
- The caller handles unexpected exceptions (see write_generation_error).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from subtitle_cues import (
    ScriptAlignmentResult,
    SubtitleGenerationOptions,
    SubtitleGenerationResult,
    WhisperTranscript,
    assign_timestamps_to_script_tokens,
    generate_subtitle_cues,
    resolve_options,
)
from webinar_subtitles.adapters.transcript_adapter import aligned_transcript, flatten_whisper_words
from webinar_subtitles.config import (
    DEFAULT_IS_CJK,
    DEFAULT_STRICT_ALIGNMENT,
    STRICT_MIN_COVERAGE_RATIO,
)
from webinar_subtitles.diagnostics.run_logger import SubtitleRunLogger
from webinar_subtitles.errors import AlignmentGateError, SubtitleRequestError
from webinar_subtitles.records import WebinarRecordStore

logger = logging.getLogger(__name__)


@dataclass
class GenerationRequest:
    """Everything one generation run needs.

    Attributes:
        transcript: Recognizer transcript.
        webinar_id: Webinar the run belongs to, if any.
        persist_to_webinar: Write cues back onto the webinar record.
        script_text: Authoritative script as raw text.
        script_tokens: Authoritative script pre-split into tokens.
        is_cjk: Script tokenizer mode and aligned-text joiner.
        strict_alignment: Reject runs that fail the alignment gate.
        options: Partial cue options (snake_case or camelCase keys).
        preset: Named option preset the overrides are merged onto.
    """

    transcript: WhisperTranscript
    webinar_id: Optional[str] = None
    persist_to_webinar: bool = False
    script_text: Optional[str] = None
    script_tokens: Optional[List[str]] = None
    is_cjk: bool = DEFAULT_IS_CJK
    strict_alignment: bool = DEFAULT_STRICT_ALIGNMENT
    options: Dict[str, Any] = field(default_factory=dict)
    preset: Optional[str] = None

    @property
    def script_anchored(self) -> bool:
        return bool(self.script_text) or bool(self.script_tokens)


@dataclass
class GenerationOutcome:
    run_id: str
    result: SubtitleGenerationResult
    alignment: Optional[ScriptAlignmentResult] = None
    transcript: Optional[WhisperTranscript] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "runId": self.run_id,
            "alignment": self.alignment.to_dict() if self.alignment is not None else None,
        }  # type: Dict[str, Any]
        out.update(self.result.to_dict())
        return out


def alignment_gate_failed(alignment: ScriptAlignmentResult) -> bool:
    """True if the alignment is too weak to trust its timings."""
    return (
        alignment.stats.coverage_ratio < STRICT_MIN_COVERAGE_RATIO
        or alignment.stats.unmatched_core_script_tokens > 0
    )


def _align_data(alignment: ScriptAlignmentResult) -> Dict[str, Any]:
    stats = alignment.stats
    return {
        "scriptCoreChars": stats.script_core_chars,
        "whisperCoreChars": stats.whisper_core_chars,
        "matchedChars": stats.matched_chars,
        "unmatchedScriptChars": stats.unmatched_script_chars,
        "unmatchedCoreScriptTokens": stats.unmatched_core_script_tokens,
        "coverageRatio": round(stats.coverage_ratio, 4),
        "strategy": stats.strategy,
        "warnings": list(alignment.warnings),
    }


def _resolve_options(request: GenerationRequest) -> SubtitleGenerationOptions:
    try:
        base = resolve_options(request.preset) if request.preset else None
        return resolve_options(dict(request.options or {}), base=base)
    except ValueError as exc:
        raise SubtitleRequestError(str(exc)) from exc


def generate_subtitles(
    request: GenerationRequest,
    run_logger: SubtitleRunLogger,
    record_store: Optional[WebinarRecordStore] = None,
) -> GenerationOutcome:
    """Run one subtitle generation request end to end.

    Args:
        request: The generation request.
        run_logger: Buffered sink for this run's log records.
        record_store: Webinar records for persistence; required only when
            the request asks to persist.

    Returns:
        GenerationOutcome with the run id, alignment (if any), and result.

    Raises:
        SubtitleRequestError: If the cue options are invalid.
        AlignmentGateError: If strict alignment is on and the gate fails.
    """
    options = _resolve_options(request)
    transcript = request.transcript

    run_logger.log_event(
        "request",
        "info",
        "Subtitle generation request received.",
        {
            "segmentCount": len(transcript.segments),
            "persistToWebinar": bool(request.persist_to_webinar),
            "scriptAnchored": request.script_anchored,
        },
    )

    alignment = None
    if request.script_anchored:
        alignment = assign_timestamps_to_script_tokens(
            flatten_whisper_words(transcript),
            script_tokens=request.script_tokens,
            script_text=request.script_text,
            is_cjk=request.is_cjk,
        )
        run_logger.log_event(
            "align",
            "warn" if alignment.warnings else "info",
            "Aligned Whisper timings to script tokens.",
            _align_data(alignment),
        )

        if request.strict_alignment and alignment_gate_failed(alignment):
            run_logger.log_event(
                "align",
                "error",
                "Alignment quality gate failed. Aborting subtitle generation.",
                {
                    "coverageRatio": round(alignment.stats.coverage_ratio, 4),
                    "unmatchedCoreScriptTokens": alignment.stats.unmatched_core_script_tokens,
                },
            )
            run_logger.flush()
            raise AlignmentGateError(run_logger.run_id, alignment)

        transcript = aligned_transcript(alignment, transcript, request.is_cjk)

    result = generate_subtitle_cues(transcript, options, run_logger.as_hooks())

    if request.persist_to_webinar and request.webinar_id:
        if record_store is None:
            raise ValueError("persist_to_webinar requires a record store")
        webinar = record_store.update_subtitles(
            request.webinar_id,
            result.cues,
            transcript.language,
        )
        if webinar is None:
            run_logger.log_event(
                "persist",
                "warn",
                "Could not persist subtitles because webinar was not found.",
                {"webinarId": request.webinar_id},
            )
        else:
            run_logger.log_event(
                "persist",
                "info",
                "Subtitle cues persisted to webinar record.",
                {"webinarId": request.webinar_id, "cueCount": len(result.cues)},
            )

    run_logger.log_event(
        "response",
        "info",
        "Subtitle generation completed.",
        {
            "cueCount": len(result.cues),
            "maxCps": round(result.metrics.max_cps, 2),
            "maxCpl": result.metrics.max_cpl,
        },
    )
    run_logger.flush()

    return GenerationOutcome(
        run_id=run_logger.run_id,
        result=result,
        alignment=alignment,
        transcript=transcript,
    )
