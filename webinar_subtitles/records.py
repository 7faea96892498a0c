"""JSON-file store of webinar records that receive generated subtitles.

WHY: The webinar player reads cues straight off the webinar record, so a
generation run may write its cues, language, and timestamp back onto it.
The records are owned by the wider webinar application; this service only
looks them up and merges subtitle fields in.

HOW: The file holds a JSON array of record objects keyed by "id". Each
update reads the array, merges fields into the matching record, stamps
"updatedAt", and rewrites the file via a temporary file and rename. A
threading.Lock serializes read-modify-write cycles within the process.

RULES:
- Unknown ids return None; nothing is created.
- Only subtitleCues, subtitleLanguage, subtitleLastGeneratedAt and
  updatedAt are written; other fields are preserved untouched.
- A missing file behaves like an empty array.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from subtitle_cues import SubtitleCue

logger = logging.getLogger(__name__)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class WebinarRecordStore:
    """Thread-safe access to the webinar record file.

    Args:
        path: Location of the JSON array file.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self._lock = threading.Lock()

    def _load(self) -> List[Dict[str, Any]]:
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, list):
            raise ValueError("Webinar store {} must contain a JSON array".format(self.path))
        return data

    def _write(self, records: List[Dict[str, Any]]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(records, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, self.path)

    def get(self, webinar_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            for record in self._load():
                if record.get("id") == webinar_id:
                    return record
        return None

    def update_subtitles(
        self,
        webinar_id: str,
        cues: Sequence[SubtitleCue],
        language: Optional[str],
        generated_at: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """Merge generated subtitles into a webinar record.

        Args:
            webinar_id: Record id.
            cues: Cues to store (serialized with to_dict()).
            language: Source language; stored as "unknown" when None.
            generated_at: ISO timestamp; defaults to now.

        Returns:
            The updated record, or None if no record has that id.
        """
        stamp = generated_at or _now_iso()
        with self._lock:
            records = self._load()
            for index, record in enumerate(records):
                if record.get("id") != webinar_id:
                    continue
                updated = dict(record)
                updated.update({
                    "subtitleCues": [cue.to_dict() for cue in cues],
                    "subtitleLanguage": language or "unknown",
                    "subtitleLastGeneratedAt": stamp,
                    "updatedAt": _now_iso(),
                })
                records[index] = updated
                self._write(records)
                logger.info("Stored %d subtitle cues on webinar %s", len(cues), webinar_id)
                return updated
        return None
