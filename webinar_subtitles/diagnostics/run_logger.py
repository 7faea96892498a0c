"""Per-run buffered logger that feeds the NDJSON log store.

WHY: One generation run emits a dozen events from the host and the cue
pipeline. Buffering them and flushing once keeps a run's records
contiguous in the log file and costs one write instead of many.

HOW: SubtitleRunLogger stamps each SubtitleGenerationLogEvent with a record
id, the run id, the webinar id, and a UTC timestamp, and buffers it.
flush() hands the buffer to the store. as_hooks() adapts the logger to the
pipeline's on_log hook. write_generation_error() writes one error record
immediately, for failures outside a normal flush path.

RULES:
- run_id defaults to "subrun-<uuid4 hex>".
- flush() empties the buffer even if it was already empty.
- Records are also mirrored to the standard ``logging`` module at debug level.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from subtitle_cues import SubtitleGenerationHooks, SubtitleGenerationLogEvent
from webinar_subtitles.diagnostics.log_store import SubtitleLogRecord, SubtitleLogStore

logger = logging.getLogger(__name__)


def new_run_id() -> str:
    return "subrun-{}".format(uuid.uuid4().hex)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class SubtitleRunLogger:
    """Buffered log sink for one generation run.

    Args:
        store: Where flushed records go.
        run_id: Correlation id; generated when omitted.
        webinar_id: Webinar the run belongs to, if any.
    """

    def __init__(
        self,
        store: SubtitleLogStore,
        run_id: Optional[str] = None,
        webinar_id: Optional[str] = None,
    ):
        self.store = store
        self.run_id = run_id or new_run_id()
        self.webinar_id = webinar_id
        self._buffer = []  # type: List[SubtitleLogRecord]

    @property
    def pending(self) -> List[SubtitleLogRecord]:
        """Records logged but not yet flushed."""
        return list(self._buffer)

    def log(self, event: SubtitleGenerationLogEvent) -> SubtitleLogRecord:
        record = SubtitleLogRecord(
            id=uuid.uuid4().hex,
            run_id=self.run_id,
            created_at=_now_iso(),
            stage=event.stage,
            level=event.level,
            message=event.message,
            webinar_id=self.webinar_id,
            data=event.data,
        )
        self._buffer.append(record)
        logger.debug("[%s] %s/%s: %s", self.run_id, event.stage, event.level, event.message)
        return record

    def log_event(
        self,
        stage: str,
        level: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> SubtitleLogRecord:
        """Shorthand for log() with the event fields spelled out."""
        return self.log(SubtitleGenerationLogEvent(stage=stage, level=level, message=message, data=data))

    def flush(self) -> None:
        self.store.append_batch(self._buffer)
        self._buffer = []

    def log_and_flush(self, event: SubtitleGenerationLogEvent) -> SubtitleLogRecord:
        record = self.log(event)
        self.flush()
        return record

    def as_hooks(self) -> SubtitleGenerationHooks:
        """Pipeline hooks that buffer every pipeline event in this run."""
        return SubtitleGenerationHooks(on_log=self.log)


def write_generation_error(
    store: SubtitleLogStore,
    message: str,
    run_id: Optional[str] = None,
    webinar_id: Optional[str] = None,
    data: Optional[Dict[str, Any]] = None,
) -> str:
    """Append one pipeline/error record immediately and return its run id."""
    resolved = run_id or new_run_id()
    store.append(SubtitleLogRecord(
        id=uuid.uuid4().hex,
        run_id=resolved,
        created_at=_now_iso(),
        stage="pipeline",
        level="error",
        message=message,
        webinar_id=webinar_id,
        data=data,
    ))
    return resolved
