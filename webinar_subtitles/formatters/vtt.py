"""WebVTT (.vtt) formatter for HTML5 players.

RULES:
- Output starts with the "WEBVTT" header and a blank line.
- Each cue carries its id (cue-N) as the cue identifier.
- Timestamps are HH:MM:SS.mmm.
"""

from __future__ import annotations

from webinar_subtitles.formatters.base import BaseFormatter, FormatterOutput, format_timestamp
from webinar_subtitles.service import GenerationOutcome


class WebVTTFormatter(BaseFormatter):
    """Formatter that renders cues as a WebVTT file."""

    suffix = ".vtt"
    media_type = "text/vtt"

    @property
    def name(self) -> str:
        return "WebVTT"

    def format(self, outcome: GenerationOutcome) -> FormatterOutput:
        parts = ["WEBVTT\n"]
        for cue in outcome.result.cues:
            body = "\n".join(cue.lines) if cue.lines else cue.text
            parts.append("{}\n{} --> {}\n{}\n".format(
                cue.id,
                format_timestamp(cue.start, "."),
                format_timestamp(cue.end, "."),
                body,
            ))
        return FormatterOutput(
            suffix=self.suffix,
            content="\n".join(parts),
            media_type=self.media_type,
        )
