"""Append-only NDJSON store for subtitle generation log records.

WHY: Operators need to answer "what happened in run X?" or "why did the
subtitles for webinar Y come out wrong?" long after a request finished.
An append-only newline-delimited JSON file is trivially greppable,
survives restarts, and needs no database.

HOW: Each SubtitleLogRecord is one JSON line. Appends are serialized with
a threading.Lock so concurrent requests never interleave partial lines.
read() scans from the newest line backwards, applies the run/webinar
filters, stops at ``limit``, and returns the matches oldest-first.

RULES:
- Records are never rewritten or deleted.
- A missing file reads as empty; the parent directory is created on first write.
- Malformed lines are skipped with a warning, never raised.
- limit is clamped to [1, LOG_READ_MAX_LIMIT]; non-numeric limits use the default.
"""

from __future__ import annotations

import json
import logging
import math
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from webinar_subtitles.config import LOG_READ_DEFAULT_LIMIT, LOG_READ_MAX_LIMIT

logger = logging.getLogger(__name__)


@dataclass
class SubtitleLogRecord:
    """One persisted diagnostic event, tagged with its run.

    Attributes:
        id: Unique record id.
        run_id: Correlates all records of one generation run.
        created_at: ISO-8601 UTC timestamp.
        stage: Pipeline stage ("request", "extract", "align", ...).
        level: "info", "warn" or "error".
        message: Human-readable summary.
        webinar_id: Webinar the run belongs to, if any.
        data: Structured details, stored verbatim.
    """

    id: str
    run_id: str
    created_at: str
    stage: str
    level: str
    message: str
    webinar_id: Optional[str] = None
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {
            "id": self.id,
            "runId": self.run_id,
            "createdAt": self.created_at,
            "stage": self.stage,
            "level": self.level,
            "message": self.message,
        }  # type: Dict[str, Any]
        if self.webinar_id is not None:
            out["webinarId"] = self.webinar_id
        if self.data is not None:
            out["data"] = self.data
        return out

    @classmethod
    def from_dict(cls, row: Dict[str, Any]) -> "SubtitleLogRecord":
        return cls(
            id=str(row["id"]),
            run_id=str(row["runId"]),
            created_at=str(row["createdAt"]),
            stage=str(row["stage"]),
            level=str(row["level"]),
            message=str(row["message"]),
            webinar_id=row.get("webinarId"),
            data=row.get("data"),
        )


def clamp_limit(limit: Union[int, float, str, None]) -> int:
    """Coerce a requested limit into [1, LOG_READ_MAX_LIMIT]."""
    try:
        value = float(limit) if limit is not None else math.nan
    except (TypeError, ValueError):
        value = math.nan
    if not math.isfinite(value):
        value = LOG_READ_DEFAULT_LIMIT
    return int(min(max(value, 1), LOG_READ_MAX_LIMIT))


class SubtitleLogStore:
    """Thread-safe NDJSON log file.

    Args:
        path: Location of the NDJSON file.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def append(self, record: SubtitleLogRecord) -> None:
        self.append_batch([record])

    def append_batch(self, records: Iterable[SubtitleLogRecord]) -> None:
        """Append records in order as one write. Empty input is a no-op."""
        lines = [json.dumps(r.to_dict(), ensure_ascii=False) for r in records]
        if not lines:
            return
        payload = "\n".join(lines) + "\n"
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(payload)

    def read(
        self,
        limit: Union[int, float, str, None] = LOG_READ_DEFAULT_LIMIT,
        run_id: Optional[str] = None,
        webinar_id: Optional[str] = None,
    ) -> List[SubtitleLogRecord]:
        """Return the newest matching records, oldest first.

        Args:
            limit: Maximum records to return (clamped).
            run_id: Only records of this run.
            webinar_id: Only records of this webinar.
        """
        max_rows = clamp_limit(limit)
        with self._lock:
            if not self.path.exists():
                return []
            lines = self.path.read_text(encoding="utf-8").splitlines()

        matched = []  # type: List[SubtitleLogRecord]
        for line_number in range(len(lines) - 1, -1, -1):
            line = lines[line_number].strip()
            if not line:
                continue
            try:
                record = SubtitleLogRecord.from_dict(json.loads(line))
            except (ValueError, KeyError, TypeError, AttributeError):
                logger.warning("Skipping malformed log row %d in %s", line_number + 1, self.path)
                continue
            if run_id and record.run_id != run_id:
                continue
            if webinar_id and record.webinar_id != webinar_id:
                continue
            matched.append(record)
            if len(matched) >= max_rows:
                break

        matched.reverse()
        return matched
