"""JSON formatter: the full generation payload, schema-validated.

WHY: Downstream tools (the webinar player, QA scripts) consume the same
payload the HTTP API returns. Writing it to a file from the CLI gives them
identical input either way.

HOW: Serializes GenerationOutcome.to_dict() and validates it against
cues.schema.json before returning.

RULES:
- Output shape: {runId, alignment, cues, metrics, issues, debug}.
- Schema validation is mandatory; raises on invalid output.
- Non-ASCII text is written as-is (ensure_ascii=False).
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional

import jsonschema

from webinar_subtitles.formatters.base import BaseFormatter, FormatterOutput
from webinar_subtitles.service import GenerationOutcome

_SCHEMA_PATH = Path(__file__).resolve().parent / "cues.schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def get_cues_schema() -> Dict[str, Any]:
    """Load the output schema once per process."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


class JSONCuesFormatter(BaseFormatter):
    """Formatter producing the complete generation payload as JSON."""

    suffix = ".subtitles.json"
    media_type = "application/json"

    @property
    def name(self) -> str:
        return "Subtitle JSON"

    def format(self, outcome: GenerationOutcome) -> FormatterOutput:
        """Render the outcome as JSON.

        Raises:
            jsonschema.ValidationError: If the payload does not match
                cues.schema.json.
        """
        payload = outcome.to_dict()
        jsonschema.validate(instance=payload, schema=get_cues_schema())
        return FormatterOutput(
            suffix=self.suffix,
            content=json.dumps(payload, indent=2, ensure_ascii=False),
            media_type=self.media_type,
        )
