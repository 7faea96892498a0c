"""Exceptions raised by the subtitle host.

RULES:
- SubtitleRequestError: the caller sent a malformed request (HTTP 400, CLI exit 2).
- AlignmentGateError: the strict alignment gate rejected the script (HTTP 422, CLI exit 3).
- Anything else escaping generation is unexpected (HTTP 500, CLI exit 1).
"""

from __future__ import annotations

from subtitle_cues import ScriptAlignmentResult


class SubtitleRequestError(ValueError):
    """Malformed generation request or transcript payload."""


class AlignmentGateError(Exception):
    """The script alignment did not meet the strict quality gate.

    Attributes:
        run_id: Run id of the rejected generation, for log lookup.
        alignment: The full alignment result, for diagnosis.
    """

    def __init__(self, run_id: str, alignment: ScriptAlignmentResult):
        super().__init__("Alignment quality gate failed.")
        self.run_id = run_id
        self.alignment = alignment
