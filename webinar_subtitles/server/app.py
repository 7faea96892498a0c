"""FastAPI application exposing subtitle generation and its diagnostics.

WHY: The webinar admin panel and batch tools post recognizer transcripts
(optionally with the presenter's script) and need cues back, a way to
export them as subtitle files, and a way to inspect what happened in a
given run. FastAPI gives request validation and OpenAPI docs for free.

HOW: One app with routes grouped by tag. POST /subtitles/generate adapts
the body into a GenerationRequest and runs the service with a fresh
SubtitleRunLogger. The log store and webinar record store are module
singletons created from config, so tests can swap them.

RULES:
- Malformed bodies return 400 (FastAPI's 422 is reserved for the
  alignment gate).
- Alignment gate failures return 422 with the alignment diagnostics.
- Unexpected failures are logged to the diagnostics store and return 500
  with the run id.
- Generation runs synchronously in FastAPI's threadpool (plain ``def``).
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import logging
import re
from typing import Annotated, Optional

from fastapi import FastAPI, HTTPException, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response

from webinar_subtitles import __version__
from webinar_subtitles.adapters.transcript_adapter import transcript_from_payload
from webinar_subtitles.config import (
    API_HOST,
    API_PORT,
    DEFAULT_IS_CJK,
    DEFAULT_STRICT_ALIGNMENT,
    LOG_READ_DEFAULT_LIMIT,
    SUBTITLE_LOG_FILE,
    WEBINAR_STORE_FILE,
)
from webinar_subtitles.diagnostics import SubtitleLogStore, SubtitleRunLogger, write_generation_error
from webinar_subtitles.errors import AlignmentGateError, SubtitleRequestError
from webinar_subtitles.formatters import FORMATTERS
from webinar_subtitles.records import WebinarRecordStore
from webinar_subtitles.server.models import (
    DetailResponse,
    ErrorResponse,
    FormatInfo,
    FormatListResponse,
    GenerateSubtitlesRequest,
    HealthResponse,
    LogListResponse,
)
from webinar_subtitles.service import GenerationOutcome, GenerationRequest, generate_subtitles

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

log_store = SubtitleLogStore(SUBTITLE_LOG_FILE)
record_store = WebinarRecordStore(WEBINAR_STORE_FILE)

app = FastAPI(
    title="Webinar Subtitles API",
    description=(
        "Turn word-timed speech recognition transcripts into readable subtitle "
        "cues, optionally re-anchored onto the presenter's script. Every run "
        "is logged under a run id that can be inspected via /subtitles/logs."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed bodies as 400 so 422 always means a failed alignment gate."""
    errors = exc.errors()
    if any(err.get("type") == "json_invalid" for err in errors):
        message = "Invalid JSON body."
    else:
        message = "Invalid request body."
    return JSONResponse(
        status_code=400,
        content={"error": message, "detail": jsonable_encoder(errors)},
    )


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _build_request(body: GenerateSubtitlesRequest) -> GenerationRequest:
    """Adapt the HTTP body into a service request.

    Raises:
        SubtitleRequestError: If the transcript has no segments.
    """
    if body.transcript is None:
        raise SubtitleRequestError("transcript.segments is required.")
    transcript = transcript_from_payload(body.transcript.model_dump(by_alias=True))
    options = body.options.model_dump(exclude_none=True) if body.options is not None else {}
    return GenerationRequest(
        transcript=transcript,
        webinar_id=body.webinar_id,
        persist_to_webinar=body.persist_to_webinar,
        script_text=body.script_text,
        script_tokens=body.script_tokens,
        is_cjk=DEFAULT_IS_CJK if body.is_cjk is None else body.is_cjk,
        strict_alignment=DEFAULT_STRICT_ALIGNMENT if body.strict_alignment is None else body.strict_alignment,
        options=options,
        preset=body.preset,
    )


_UNSAFE_FILENAME_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def _safe_filename_stem(value: str) -> str:
    """Reduce an id to characters that are safe inside a quoted filename."""
    return _UNSAFE_FILENAME_CHARS.sub("_", value).strip("._")


def _run_generation(body: GenerateSubtitlesRequest):
    """Run one request; return a GenerationOutcome or an error JSONResponse."""
    try:
        request = _build_request(body)
    except SubtitleRequestError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    run_logger = SubtitleRunLogger(log_store, webinar_id=body.webinar_id)
    try:
        return generate_subtitles(request, run_logger, record_store)
    except AlignmentGateError as exc:
        return JSONResponse(
            status_code=422,
            content={
                "error": "Alignment quality gate failed.",
                "runId": exc.run_id,
                "alignment": exc.alignment.to_dict(),
            },
        )
    except SubtitleRequestError as exc:
        return JSONResponse(status_code=400, content={"error": str(exc), "runId": run_logger.run_id})
    except Exception as exc:
        logger.exception("Subtitle generation failed for run %s", run_logger.run_id)
        run_id = write_generation_error(
            log_store,
            "Subtitle generation failed.",
            run_id=run_logger.run_id,
            webinar_id=body.webinar_id,
            data={"message": str(exc) or exc.__class__.__name__},
        )
        return JSONResponse(
            status_code=500,
            content={"error": "Subtitle generation failed.", "runId": run_id},
        )


# ---------------------------------------------------------------------------
# Subtitle routes
# ---------------------------------------------------------------------------


@app.post(
    "/subtitles/generate",
    tags=["subtitles"],
    summary="Generate subtitle cues from a transcript",
    description=(
        "Convert a word-timed transcript into subtitle cues. When scriptText or "
        "scriptTokens is supplied, recognizer timings are first aligned onto the "
        "script; with strictAlignment (default) a weak alignment is rejected. "
        "The response carries cues, metrics, issues, debug events, the alignment "
        "result (or null) and the runId for log lookup."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Malformed request body or options"},
        422: {"model": ErrorResponse, "description": "Alignment quality gate failed"},
        500: {"model": ErrorResponse, "description": "Unexpected generation failure"},
    },
)
def generate_subtitles_route(body: GenerateSubtitlesRequest):
    outcome = _run_generation(body)
    if not isinstance(outcome, GenerationOutcome):
        return outcome
    return outcome.to_dict()


@app.post(
    "/subtitles/export/{format_key}",
    tags=["subtitles"],
    summary="Generate subtitles and download them as a file",
    description=(
        "Same body and error handling as /subtitles/generate, but the response "
        "is the rendered subtitle file (srt, vtt or json)."
    ),
    responses={
        404: {"model": DetailResponse, "description": "Unknown output format"},
        422: {"model": ErrorResponse, "description": "Alignment quality gate failed"},
    },
)
def export_subtitles(format_key: str, body: GenerateSubtitlesRequest) -> Response:
    if format_key not in FORMATTERS:
        raise HTTPException(
            status_code=404,
            detail="Unknown format '{}'. Available: {}".format(format_key, ", ".join(sorted(FORMATTERS))),
        )

    outcome = _run_generation(body)
    if not isinstance(outcome, GenerationOutcome):
        return outcome

    output = FORMATTERS[format_key]().format(outcome)
    stem = _safe_filename_stem(body.webinar_id or "") or outcome.run_id
    filename = "{}{}".format(stem, output.suffix)
    return Response(
        content=output.content,
        media_type=output.media_type,
        headers={
            "Content-Disposition": 'attachment; filename="{}"'.format(filename),
            "X-Subtitle-Run-Id": outcome.run_id,
        },
    )


@app.get(
    "/subtitles/logs",
    response_model=LogListResponse,
    response_model_by_alias=True,
    tags=["diagnostics"],
    summary="Read subtitle generation logs",
    description=(
        "Return the newest log records (oldest first), optionally filtered by "
        "run id and/or webinar id. limit defaults to 200 and is clamped to 1-2000."
    ),
)
def read_subtitle_logs(
    limit: Annotated[
        Optional[str],
        Query(description="Maximum number of records (1-2000, default 200)."),
    ] = None,
    run_id: Annotated[
        Optional[str],
        Query(alias="runId", description="Only records of this run."),
    ] = None,
    webinar_id: Annotated[
        Optional[str],
        Query(alias="webinarId", description="Only records of this webinar."),
    ] = None,
) -> dict:
    records = log_store.read(
        limit=limit if limit is not None else LOG_READ_DEFAULT_LIMIT,
        run_id=run_id or None,
        webinar_id=webinar_id or None,
    )
    return {"count": len(records), "logs": [r.to_dict() for r in records]}


@app.get(
    "/subtitles/formats",
    response_model=FormatListResponse,
    tags=["subtitles"],
    summary="List output formats",
)
def list_formats() -> FormatListResponse:
    formats = []
    for key, formatter_cls in FORMATTERS.items():
        formatter = formatter_cls()
        formats.append(FormatInfo(key=key, name=formatter.name, media_type=formatter.media_type))
    return FormatListResponse(formats=formats)


# ---------------------------------------------------------------------------
# Webinar routes
# ---------------------------------------------------------------------------


@app.get(
    "/webinars/{webinar_id}/subtitles",
    tags=["webinars"],
    summary="Read persisted subtitles of a webinar",
    responses={404: {"model": DetailResponse, "description": "Webinar not found"}},
)
def get_webinar_subtitles(webinar_id: str) -> dict:
    record = record_store.get(webinar_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Webinar not found: {}".format(webinar_id))
    return {
        "webinarId": webinar_id,
        "subtitleLanguage": record.get("subtitleLanguage"),
        "subtitleLastGeneratedAt": record.get("subtitleLastGeneratedAt"),
        "cues": record.get("subtitleCues") or [],
    }


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
)
def health() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the ``webinar-subtitles serve`` command."""
    import uvicorn
    uvicorn.run(app, host=API_HOST, port=API_PORT)
