"""Webinar Subtitles: subtitle generation service for recorded webinars.

WHY: Webinar recordings come back from speech recognition as word-timed
transcripts, sometimes with an authoritative presenter script. Editors and
the webinar player need finished, readable subtitle cues, an audit trail
of how each run went, and the cues stored on the webinar record.

HOW: Thin host around the ``subtitle_cues`` library. Request payloads are
adapted into library models, optionally script-aligned behind a strict
quality gate, run through the cue pipeline, rendered by pluggable
formatters, and logged per run to an NDJSON diagnostics store. Exposed via
a FastAPI app and an argparse CLI.

RULES:
- All subtitle logic lives in ``subtitle_cues``; this package does I/O only.
- Every generation run gets a run id that correlates its log records.
"""

__version__ = "0.1.0"
