"""Command-line interface for webinar subtitle generation.

WHY: Editors and batch jobs need to turn recognizer transcripts into
subtitle files without running the HTTP service, and operators need to
read the diagnostics log from a shell. The CLI runs the exact same
service workflow as the API, so a run behaves identically either way.

HOW: argparse with three subcommands:
  generate  transcript JSON (+ optional script) -> .srt / .vtt / .json files
  logs      print diagnostics records as NDJSON
  serve     start the FastAPI app under uvicorn
Status messages go to stderr; ``logs`` writes its rows to stdout so it
can be piped into jq.

RULES:
- Transcript files are validated with jsonschema before generation.
- Output naming: {stem}{suffix}, numeric suffix on conflict (talk-2.srt).
- Exit codes: 0 success, 1 generation failure, 2 bad input, 3 alignment gate.
- --script and --script-tokens are mutually exclusive.
- Python 3.9 compatible (no match/case, no X | Y unions)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from subtitle_cues import PRESETS
from webinar_subtitles.adapters.transcript_adapter import (
    transcript_from_payload,
    validate_transcript_payload,
)
from webinar_subtitles.config import (
    DEFAULT_IS_CJK,
    LOG_READ_DEFAULT_LIMIT,
    SUBTITLE_LOG_FILE,
    WEBINAR_STORE_FILE,
)
from webinar_subtitles.diagnostics import SubtitleLogStore, SubtitleRunLogger, write_generation_error
from webinar_subtitles.errors import AlignmentGateError, SubtitleRequestError
from webinar_subtitles.formatters import FORMATTERS
from webinar_subtitles.formatters.base import FormatterOutput
from webinar_subtitles.records import WebinarRecordStore
from webinar_subtitles.service import GenerationOutcome, GenerationRequest, generate_subtitles

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_BAD_INPUT = 2
EXIT_ALIGNMENT_GATE = 3

# CLI flag dest -> option field
_OPTION_FLAGS = {
    "max_chars_per_line": "max_chars_per_line",
    "max_lines": "max_lines",
    "max_cps": "max_cps",
    "min_duration": "min_cue_duration_sec",
    "max_duration": "max_cue_duration_sec",
    "min_gap": "min_gap_sec",
    "pause_split": "pause_split_sec",
}


def _status(msg: str) -> None:
    """Print a status message to stderr, flushed immediately."""
    print(msg, file=sys.stderr, flush=True)


def _error(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr, flush=True)


def _resolve_output_path(stem: str, suffix: str, output_dir: Path) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    RULES:
    - First attempt: {stem}{suffix} (e.g. talk.srt)
    - Conflict: the counter goes before the final extension
      (talk-2.srt, talk.subtitles-2.json)
    - Counter starts at 2 and increments
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx >= 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    path = _resolve_output_path(stem, output.suffix, output_dir)
    if isinstance(output.content, bytes):
        path.write_bytes(output.content)
    else:
        path.write_text(output.content, encoding="utf-8")
    return path


def _load_json_file(path: Path, what: str) -> Any:
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except OSError as exc:
        raise SubtitleRequestError("Cannot read {} {}: {}".format(what, path, exc.strerror or exc)) from exc
    except ValueError as exc:
        raise SubtitleRequestError("{} {} is not valid JSON: {}".format(what.capitalize(), path, exc)) from exc


def _load_script_tokens(path: Path) -> List[str]:
    """Read pre-split script tokens: a JSON array of strings."""
    tokens = _load_json_file(path, "script tokens file")
    if not isinstance(tokens, list) or not all(isinstance(t, str) for t in tokens):
        raise SubtitleRequestError("Script tokens file {} must hold a JSON array of strings.".format(path))
    return tokens


def _parse_formats(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(FORMATTERS.keys())
    keys = [f.strip() for f in raw.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            raise SubtitleRequestError("Unknown format '{}'. Available formats: {}".format(
                key, ", ".join(sorted(FORMATTERS.keys()))
            ))
    return keys


def _build_request(args: argparse.Namespace) -> GenerationRequest:
    """Load and validate every input file named on the command line.

    Raises:
        SubtitleRequestError: On unreadable files, invalid JSON, or a
            transcript that fails the schema.
    """
    payload = _load_json_file(Path(args.transcript), "transcript")
    validate_transcript_payload(payload)
    transcript = transcript_from_payload(payload)

    script_text = None
    script_tokens = None
    if args.script:
        try:
            script_text = Path(args.script).read_text(encoding="utf-8")
        except OSError as exc:
            raise SubtitleRequestError("Cannot read script {}: {}".format(args.script, exc.strerror or exc)) from exc
    elif args.script_tokens:
        script_tokens = _load_script_tokens(Path(args.script_tokens))

    options = {}  # type: Dict[str, Any]
    for dest, field_name in _OPTION_FLAGS.items():
        value = getattr(args, dest)
        if value is not None:
            options[field_name] = value

    return GenerationRequest(
        transcript=transcript,
        webinar_id=args.webinar_id,
        persist_to_webinar=args.persist,
        script_text=script_text,
        script_tokens=script_tokens,
        is_cjk=args.cjk,
        strict_alignment=args.strict,
        options=options,
        preset=args.preset,
    )


def _print_summary(outcome: GenerationOutcome) -> None:
    metrics = outcome.result.metrics
    _status("  Run id: {}".format(outcome.run_id))
    if outcome.alignment is not None:
        stats = outcome.alignment.stats
        _status("  Alignment: {:.2f}% coverage ({} strategy)".format(stats.coverage_ratio * 100, stats.strategy))
    _status("  {} cues, avg {:.2f} cps, max {:.2f} cps, max {} chars/line".format(
        metrics.cue_count, metrics.avg_cps, metrics.max_cps, metrics.max_cpl,
    ))
    for issue in outcome.result.issues:
        _status("  [{}] {}: {}".format(issue.severity, issue.code, issue.message))


def _run_generate(args: argparse.Namespace) -> int:
    transcript_path = Path(args.transcript).resolve()
    output_dir = Path(args.output_dir).resolve() if args.output_dir else transcript_path.parent

    try:
        if not output_dir.is_dir():
            raise SubtitleRequestError("Output directory does not exist: {}".format(output_dir))
        if args.persist and not args.webinar_id:
            raise SubtitleRequestError("--persist requires --webinar-id.")
        format_keys = _parse_formats(args.formats)
        _status("Loading {}...".format(transcript_path.name))
        request = _build_request(args)
    except SubtitleRequestError as exc:
        _error(str(exc))
        return EXIT_BAD_INPUT

    log_store = SubtitleLogStore(args.log_file)
    record_store = WebinarRecordStore(args.webinar_store)
    run_logger = SubtitleRunLogger(log_store, webinar_id=args.webinar_id)

    _status("Generating subtitles...")
    try:
        outcome = generate_subtitles(request, run_logger, record_store)
    except SubtitleRequestError as exc:
        _error(str(exc))
        return EXIT_BAD_INPUT
    except AlignmentGateError as exc:
        stats = exc.alignment.stats
        _error("Alignment quality gate failed (coverage {:.2f}%, {} unmatched script tokens). Run id: {}".format(
            stats.coverage_ratio * 100, stats.unmatched_core_script_tokens, exc.run_id,
        ))
        for warning in exc.alignment.warnings:
            _status("  {}".format(warning))
        return EXIT_ALIGNMENT_GATE
    except Exception as exc:
        logger.exception("Subtitle generation failed for run %s", run_logger.run_id)
        run_id = write_generation_error(
            log_store,
            "Subtitle generation failed.",
            run_id=run_logger.run_id,
            webinar_id=args.webinar_id,
            data={"message": str(exc) or exc.__class__.__name__},
        )
        _error("Subtitle generation failed: {}. Run id: {}".format(exc, run_id))
        return EXIT_FAILURE

    _print_summary(outcome)

    stem = transcript_path.stem
    saved_files = []  # type: List[Path]
    for key in format_keys:
        formatter = FORMATTERS[key]()
        saved_path = _save_output(formatter.format(outcome), stem, output_dir)
        saved_files.append(saved_path)
        _status("  Saved: {}".format(saved_path.name))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))
    return EXIT_FAILURE if outcome.result.has_errors else EXIT_OK


def _run_logs(args: argparse.Namespace) -> int:
    store = SubtitleLogStore(args.log_file)
    records = store.read(limit=args.limit, run_id=args.run_id, webinar_id=args.webinar_id)
    for record in records:
        print(json.dumps(record.to_dict(), ensure_ascii=False))
    _status("{} record(s)".format(len(records)))
    return EXIT_OK


def _run_serve(args: argparse.Namespace) -> int:
    from webinar_subtitles.server.app import run_api
    run_api()
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    Kept separate from main() so tests can inspect the parser.
    """
    parser = argparse.ArgumentParser(
        prog="webinar-subtitles",
        description="Generate readable subtitle cues from word-timed speech "
                    "recognition transcripts, optionally anchored to a script.",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable debug logging.",
    )
    parser.add_argument(
        "--log-file",
        default=str(SUBTITLE_LOG_FILE),
        help="Diagnostics NDJSON file (default: %(default)s).",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # generate
    gen = subparsers.add_parser(
        "generate",
        help="Generate subtitle files from a transcript JSON file.",
    )
    gen.add_argument("transcript", help="Path to the recognizer transcript JSON.")
    script_group = gen.add_mutually_exclusive_group()
    script_group.add_argument(
        "--script",
        default=None,
        help="Path to the authoritative script (plain text).",
    )
    script_group.add_argument(
        "--script-tokens",
        default=None,
        help="Path to a JSON array of pre-split script tokens.",
    )
    gen.add_argument(
        "--cjk",
        action=argparse.BooleanOptionalAction,
        default=DEFAULT_IS_CJK,
        help="Tokenize the script as CJK text (default: %(default)s).",
    )
    gen.add_argument(
        "--no-strict",
        dest="strict",
        action="store_false",
        help="Keep going when the script alignment is weak.",
    )
    gen.add_argument(
        "--preset",
        choices=sorted(PRESETS.keys()),
        default=None,
        help="Named option preset applied before individual overrides.",
    )
    gen.add_argument("--max-chars-per-line", type=int, default=None, help="Per-line character limit.")
    gen.add_argument("--max-lines", type=int, default=None, help="Lines per cue.")
    gen.add_argument("--max-cps", type=float, default=None, help="Reading speed target (chars/sec).")
    gen.add_argument("--min-duration", type=float, default=None, help="Shortest cue in seconds.")
    gen.add_argument("--max-duration", type=float, default=None, help="Longest cue in seconds.")
    gen.add_argument("--min-gap", type=float, default=None, help="Gap between cues in seconds.")
    gen.add_argument("--pause-split", type=float, default=None, help="Silence that forces a cue break.")
    gen.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )
    gen.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: next to the transcript).",
    )
    gen.add_argument("--webinar-id", default=None, help="Webinar the run belongs to.")
    gen.add_argument(
        "--persist",
        action="store_true",
        help="Store the cues on the webinar record (requires --webinar-id).",
    )
    gen.add_argument(
        "--webinar-store",
        default=str(WEBINAR_STORE_FILE),
        help="Webinar record JSON file (default: %(default)s).",
    )
    gen.set_defaults(handler=_run_generate)

    # logs
    logs = subparsers.add_parser("logs", help="Print diagnostics log records as NDJSON.")
    logs.add_argument(
        "--limit",
        type=int,
        default=LOG_READ_DEFAULT_LIMIT,
        help="Maximum records (default: %(default)s, max 2000).",
    )
    logs.add_argument("--run-id", default=None, help="Only records of this run.")
    logs.add_argument("--webinar-id", default=None, help="Only records of this webinar.")
    logs.set_defaults(handler=_run_logs)

    # serve
    serve = subparsers.add_parser("serve", help="Run the HTTP API with uvicorn.")
    serve.set_defaults(handler=_run_serve)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for ``webinar-subtitles`` and ``python -m webinar_subtitles``.

    argv=None means use sys.argv; explicit argv is for testing.
    Exits with the handler's status code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    sys.exit(args.handler(args))


if __name__ == "__main__":
    main()
