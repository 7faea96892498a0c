"""Configuration constants and .env loading.

WHY: Storage locations, alignment policy defaults, and API settings differ
between a developer laptop, CI, and the server. Keeping them in one module,
overridable from the environment, means no code change is needed to
relocate data or loosen a policy.

HOW: python-dotenv loads the .env file on import. Every setting is a
module-level constant read with os.getenv and a documented default.

RULES:
- All defaults can be overridden via environment variables.
- Paths are relative to the working directory unless given absolute.
- Boolean settings accept "true"/"false" (case-insensitive).
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from the project root (where the service is run from)
load_dotenv()


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


# ---------------------------------------------------------------------------
# Storage locations
# ---------------------------------------------------------------------------

DATA_DIR = Path(os.getenv("SUBTITLE_DATA_DIR", "data"))
"""Directory holding the diagnostics log and the webinar record file."""

SUBTITLE_LOG_FILE = Path(os.getenv("SUBTITLE_LOG_FILE", str(DATA_DIR / "subtitle-generation.ndjson")))
"""Append-only NDJSON file of subtitle generation log records."""

WEBINAR_STORE_FILE = Path(os.getenv("WEBINAR_STORE_FILE", str(DATA_DIR / "webinars.json")))
"""JSON array of webinar records that generated cues are persisted onto."""

# ---------------------------------------------------------------------------
# Generation policy defaults
# ---------------------------------------------------------------------------

DEFAULT_IS_CJK = _env_bool("DEFAULT_IS_CJK", True)
"""Script tokenizer mode when a request does not say."""

DEFAULT_STRICT_ALIGNMENT = _env_bool("DEFAULT_STRICT_ALIGNMENT", True)
"""Reject script-anchored requests that fail the alignment quality gate."""

STRICT_MIN_COVERAGE_RATIO = float(os.getenv("STRICT_MIN_COVERAGE_RATIO", "0.97"))
"""Alignment coverage below this fails the strict quality gate."""

# ---------------------------------------------------------------------------
# Log reading limits
# ---------------------------------------------------------------------------

LOG_READ_DEFAULT_LIMIT = 200
LOG_READ_MAX_LIMIT = 2000

# ---------------------------------------------------------------------------
# HTTP API
# ---------------------------------------------------------------------------

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))
