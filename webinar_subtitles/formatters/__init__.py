"""Output formatter registry.

FORMATTERS maps format keys (used by the CLI ``--formats`` flag and the
``/subtitles/export/{format}`` route) to formatter classes. Callers
instantiate as needed: ``FORMATTERS["srt"]()``.
"""

from __future__ import annotations

from typing import Dict, Type

from webinar_subtitles.formatters.base import BaseFormatter, FormatterOutput
from webinar_subtitles.formatters.json_cues import JSONCuesFormatter
from webinar_subtitles.formatters.srt import SRTFormatter
from webinar_subtitles.formatters.vtt import WebVTTFormatter

FORMATTERS: Dict[str, Type[BaseFormatter]] = {
    "json": JSONCuesFormatter,
    "srt": SRTFormatter,
    "vtt": WebVTTFormatter,
}

__all__ = ["BaseFormatter", "FORMATTERS", "FormatterOutput"]
