"""Active-cue lookup for players and overlays."""

import bisect
from typing import List, Optional

from .models import SubtitleCue


def find_active_cue(cues: List[SubtitleCue], time_sec: float) -> Optional[SubtitleCue]:
    """Return the cue whose [start, end] window contains ``time_sec``.

    Cues are ordered by (start, end) first, so unsorted input is fine.
    Boundaries are inclusive; between cues the result is None.
    """
    ordered = sorted(cues, key=lambda cue: (cue.start, cue.end))
    starts = [cue.start for cue in ordered]
    index = bisect.bisect_right(starts, time_sec) - 1
    if index < 0:
        return None
    cue = ordered[index]
    if time_sec <= cue.end:
        return cue
    return None
