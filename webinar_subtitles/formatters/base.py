"""Abstract base formatter and output container.

WHY: A generation run can be delivered as a JSON payload, a SubRip file,
or a WebVTT file. A shared interface lets the CLI and the API render any
format by key without knowing its details.

HOW: BaseFormatter is an ABC with ``name``, ``suffix`` and ``format()``.
FormatterOutput bundles a file suffix with its content and MIME type.

RULES:
- Subclasses MUST implement ``name`` and ``format()``.
- ``suffix`` includes the dot, e.g. ``".srt"``; callers prepend the stem.
- Formatters never modify the outcome they render.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Union

from webinar_subtitles.service import GenerationOutcome


@dataclass
class FormatterOutput:
    """One rendered output file.

    Attributes:
        suffix: File suffix appended to the source stem, e.g. ``".srt"``.
        content: Rendered file content.
        media_type: MIME type for the content, e.g. ``"application/x-subrip"``.
    """

    suffix: str
    content: Union[str, bytes]
    media_type: str


def format_timestamp(seconds: float, separator: str = ",") -> str:
    """Render seconds as HH:MM:SS<sep>mmm, rounding to the nearest millisecond."""
    total_ms = max(0, int(round(seconds * 1000)))
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    secs, millis = divmod(rest, 1000)
    return "{:02d}:{:02d}:{:02d}{}{:03d}".format(hours, minutes, secs, separator, millis)


class BaseFormatter(ABC):
    """Abstract base for all output formatters.

    To add a new output format:
    1. Create a new file in formatters/
    2. Subclass BaseFormatter
    3. Implement format() and name
    4. Register in FORMATTERS dict in formatters/__init__.py
    """

    suffix = ""
    media_type = "application/octet-stream"

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'SubRip (SRT)'."""

    @abstractmethod
    def format(self, outcome: GenerationOutcome) -> FormatterOutput:
        """Render one generation outcome.

        Args:
            outcome: Run id, alignment, and pipeline result of one run.

        Returns:
            The rendered file.
        """
