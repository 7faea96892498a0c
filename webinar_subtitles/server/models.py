"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. The request
body keeps the recognizer's camelCase field names so existing clients can
post Whisper output unchanged.

HOW: Request models accept camelCase aliases (``populate_by_name`` also
allows snake_case). Response models describe the payloads the routes
build from ``GenerationOutcome.to_dict()`` and the log store.

RULES:
- All models use Field(description=...) for OpenAPI documentation.
- Error bodies carry ``error`` and, where a run started, ``runId``.
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing).
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class WhisperWordModel(BaseModel):
    """One recognizer word."""

    id: Optional[int] = Field(default=None, description="Recognizer word index.")
    word: str = Field(description="Word text as emitted by the recognizer.")
    start: Optional[float] = Field(default=None, description="Start time in seconds.")
    end: Optional[float] = Field(default=None, description="End time in seconds.")
    probability: Optional[float] = Field(default=None, description="Recognizer confidence.")


class WhisperSegmentModel(BaseModel):
    """One recognizer segment; ``words`` may be omitted for coarse output."""

    id: Optional[Union[int, str]] = Field(default=None, description="Segment id.")
    start: float = Field(default=0.0, description="Segment start in seconds.")
    end: float = Field(default=0.0, description="Segment end in seconds.")
    text: str = Field(default="", description="Segment text, used when words are missing.")
    words: Optional[List[WhisperWordModel]] = Field(default=None, description="Word-level timings.")


class WhisperTranscriptModel(BaseModel):
    """Word-timed recognizer transcript."""

    model_config = ConfigDict(populate_by_name=True)

    language: Optional[str] = Field(default=None, description="Source language code.")
    duration_sec: Optional[float] = Field(default=None, alias="durationSec", description="Media duration in seconds.")
    text: Optional[str] = Field(default=None, description="Full transcript text.")
    segments: List[WhisperSegmentModel] = Field(default_factory=list, description="Recognizer segments.")


class SubtitleOptionsModel(BaseModel):
    """Partial cue options; omitted fields use the defaults."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    max_chars_per_line: Optional[int] = Field(default=None, alias="maxCharsPerLine", description="Per-line character limit (default 42).")
    max_lines: Optional[int] = Field(default=None, alias="maxLines", description="Lines per cue (default 2).")
    min_cue_duration_sec: Optional[float] = Field(default=None, alias="minCueDurationSec", description="Shortest cue (default 1.0 s).")
    max_cue_duration_sec: Optional[float] = Field(default=None, alias="maxCueDurationSec", description="Longest cue (default 6.0 s).")
    max_cps: Optional[float] = Field(default=None, alias="maxCps", description="Reading speed target (default 17 cps).")
    min_gap_sec: Optional[float] = Field(default=None, alias="minGapSec", description="Gap between cues (default 0.08 s).")
    pause_split_sec: Optional[float] = Field(default=None, alias="pauseSplitSec", description="Silence that forces a break (default 0.65 s).")


class GenerateSubtitlesRequest(BaseModel):
    """Body of POST /subtitles/generate."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "examples": [
                {
                    "webinarId": "w-123",
                    "persistToWebinar": True,
                    "transcript": {
                        "language": "en",
                        "segments": [
                            {
                                "start": 0.0,
                                "end": 0.54,
                                "text": "Hello, world!",
                                "words": [
                                    {"word": "Hello", "start": 0.0, "end": 0.2},
                                    {"word": ",", "start": 0.2, "end": 0.24},
                                    {"word": "world", "start": 0.26, "end": 0.5},
                                    {"word": "!", "start": 0.5, "end": 0.54},
                                ],
                            }
                        ],
                    },
                    "options": {"maxCharsPerLine": 32},
                }
            ]
        },
    )

    webinar_id: Optional[str] = Field(default=None, alias="webinarId", description="Webinar the run belongs to.")
    persist_to_webinar: bool = Field(default=False, alias="persistToWebinar", description="Store cues on the webinar record.")
    transcript: Optional[WhisperTranscriptModel] = Field(default=None, description="Recognizer transcript (required).")
    script_text: Optional[str] = Field(default=None, alias="scriptText", description="Authoritative script as raw text.")
    script_tokens: Optional[List[str]] = Field(default=None, alias="scriptTokens", description="Authoritative script, pre-split. Wins over scriptText.")
    is_cjk: Optional[bool] = Field(default=None, alias="isCjk", description="Script is CJK (default true).")
    strict_alignment: Optional[bool] = Field(default=None, alias="strictAlignment", description="Reject weak alignments with 422 (default true).")
    preset: Optional[str] = Field(default=None, description="Named option preset: cinema, vertical or cjk.")
    options: Optional[SubtitleOptionsModel] = Field(default=None, description="Partial cue options.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Error body for failed generation requests."""

    model_config = ConfigDict(populate_by_name=True)

    error: str = Field(description="Human-readable error message.")
    run_id: Optional[str] = Field(default=None, alias="runId", description="Run id for log lookup, when a run started.")
    alignment: Optional[Dict[str, Any]] = Field(default=None, description="Alignment diagnostics (422 only).")


class DetailResponse(BaseModel):
    """Error body produced by HTTPException (e.g. 404)."""

    detail: str = Field(description="Human-readable error message.")


class LogRecordModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Record id.")
    run_id: str = Field(alias="runId", description="Generation run id.")
    webinar_id: Optional[str] = Field(default=None, alias="webinarId", description="Webinar id.")
    created_at: str = Field(alias="createdAt", description="ISO-8601 UTC timestamp.")
    stage: str = Field(description="Pipeline stage.")
    level: str = Field(description="info, warn or error.")
    message: str = Field(description="Event summary.")
    data: Optional[Dict[str, Any]] = Field(default=None, description="Structured details.")


class LogListResponse(BaseModel):
    """Body of GET /subtitles/logs."""

    count: int = Field(description="Number of records returned.")
    logs: List[LogRecordModel] = Field(description="Matching records, oldest first.")


class FormatInfo(BaseModel):
    key: str = Field(description="Format key for /subtitles/export/{format}.")
    name: str = Field(description="Human-readable format name.")
    media_type: str = Field(description="MIME type of the rendered file.")


class FormatListResponse(BaseModel):
    formats: List[FormatInfo] = Field(description="Available output formats.")


class HealthResponse(BaseModel):
    status: str = Field(description="Service status.")
    version: str = Field(description="Package version.")
