"""SubRip (.srt) formatter.

RULES:
- Indices are 1-based and follow cue order.
- Timestamps are HH:MM:SS,mmm.
- Cue lines are written one per row; cues without lines fall back to text.
- Blocks are separated by one blank line.
"""

from __future__ import annotations

from typing import List

from webinar_subtitles.formatters.base import BaseFormatter, FormatterOutput, format_timestamp
from webinar_subtitles.service import GenerationOutcome


class SRTFormatter(BaseFormatter):
    """Formatter that renders cues as a SubRip file."""

    suffix = ".srt"
    media_type = "application/x-subrip"

    @property
    def name(self) -> str:
        return "SubRip (SRT)"

    def format(self, outcome: GenerationOutcome) -> FormatterOutput:
        blocks = []  # type: List[str]
        for index, cue in enumerate(outcome.result.cues, 1):
            body = "\n".join(cue.lines) if cue.lines else cue.text
            blocks.append("{}\n{} --> {}\n{}\n".format(
                index,
                format_timestamp(cue.start, ","),
                format_timestamp(cue.end, ","),
                body,
            ))
        return FormatterOutput(
            suffix=self.suffix,
            content="\n".join(blocks),
            media_type=self.media_type,
        )
