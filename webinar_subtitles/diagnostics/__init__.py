"""Structured, per-run diagnostics for subtitle generation."""

from webinar_subtitles.diagnostics.log_store import SubtitleLogRecord, SubtitleLogStore
from webinar_subtitles.diagnostics.run_logger import SubtitleRunLogger, write_generation_error

__all__ = [
    "SubtitleLogRecord",
    "SubtitleLogStore",
    "SubtitleRunLogger",
    "write_generation_error",
]
