"""Per-run accumulator for metrics, issues, and diagnostic events.

WHY: Every pipeline stage may record anomalies or emit log events, and the
caller's on_log hook must see those events synchronously and in order. A
single builder owned by one run keeps that bookkeeping out of the stage
functions' return values without any shared state between runs.

RULES:
- One RunReport per pipeline call; never reused or shared.
- log() appends to ``debug`` first, then calls the hook.
"""

from typing import Any, Dict, List, Optional

from .models import (
    SubtitleGenerationHooks,
    SubtitleGenerationLogEvent,
    SubtitleGenerationMetrics,
    SubtitleIssue,
)


class RunReport:
    """Mutable builder threaded through the stages of one pipeline run."""

    def __init__(self, hooks: Optional[SubtitleGenerationHooks] = None):
        self.hooks = hooks
        self.metrics = SubtitleGenerationMetrics()
        self.issues = []  # type: List[SubtitleIssue]
        self.debug = []  # type: List[SubtitleGenerationLogEvent]

    def log(
        self,
        stage: str,
        level: str,
        message: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> SubtitleGenerationLogEvent:
        event = SubtitleGenerationLogEvent(stage=stage, level=level, message=message, data=data)
        self.debug.append(event)
        if self.hooks is not None and self.hooks.on_log is not None:
            self.hooks.on_log(event)
        return event

    def add_issue(
        self,
        code: str,
        message: str,
        severity: str,
        data: Optional[Dict[str, Any]] = None,
    ) -> SubtitleIssue:
        issue = SubtitleIssue(code=code, message=message, severity=severity, data=data)
        self.issues.append(issue)
        return issue
