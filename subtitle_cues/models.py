"""Data models for the subtitle cue pipeline and script alignment.

WHY: Recognizer output, pipeline options, finished cues, and alignment
results cross several module boundaries (normalizer, segmenter, layout,
alignment engine, and the host application). Plain dataclasses give every
stage the same typed vocabulary without pulling in any I/O dependency.

HOW: Input types (WhisperWord, WhisperSegment, WhisperTranscript) mirror the
recognizer's JSON. Transient stage types (NormalizedWord, CueDraft) live only
inside one pipeline run. Output types (SubtitleCue, SubtitleIssue, metrics,
log events, alignment results) expose ``to_dict()`` producing the camelCase
wire shape consumed by the log store and the webinar record store.

RULES:
- All times are float seconds.
- Input models are read-only to the pipeline; stages work on copies.
- ``to_dict()`` keys are camelCase and stable; external stores read them verbatim.
- Python 3.9 compatible (no X | Y unions, no slots=True).
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Callable, Dict, List, Optional


# =============================================================================
# Recognizer input
# =============================================================================

@dataclass
class WhisperWord:
    """One recognized word with timing.

    Attributes:
        word: Raw word text as emitted by the recognizer (may carry spaces).
        start: Start time in seconds.
        end: End time in seconds.
        probability: Recognizer confidence, when known.
        id: Recognizer-assigned index, when known.
    """
    word: str
    start: float
    end: float
    probability: Optional[float] = None
    id: Optional[int] = None


@dataclass
class WhisperSegment:
    """A recognizer segment; ``words`` may be missing for coarse output."""
    start: float
    end: float
    text: str = ""
    words: Optional[List[WhisperWord]] = None
    id: Optional[Any] = None


@dataclass
class WhisperTranscript:
    """A complete word-timed transcript."""
    segments: List[WhisperSegment] = field(default_factory=list)
    language: Optional[str] = None
    duration_sec: Optional[float] = None
    text: Optional[str] = None


# =============================================================================
# Pipeline-internal
# =============================================================================

@dataclass
class NormalizedWord:
    """A sanitized, writable unit (word plus any merged punctuation)."""
    text: str
    start: float
    end: float


@dataclass
class CueDraft:
    """A group of normalized words that will become exactly one cue."""
    words: List[NormalizedWord]
    start: float
    end: float
    text: str


# =============================================================================
# Options
# =============================================================================

@dataclass(frozen=True)
class SubtitleGenerationOptions:
    """Layout and timing limits for one pipeline run.

    Attributes:
        max_chars_per_line: Hard per-line character limit.
        max_lines: Maximum number of lines in a cue.
        min_cue_duration_sec: Shortest on-screen duration.
        max_cue_duration_sec: Longest on-screen duration.
        max_cps: Reading-speed target in characters per second.
        min_gap_sec: Minimum gap between consecutive cues.
        pause_split_sec: A silence at least this long forces a cue break.
    """
    max_chars_per_line: int = 42
    max_lines: int = 2
    min_cue_duration_sec: float = 1.0
    max_cue_duration_sec: float = 6.0
    max_cps: float = 17.0
    min_gap_sec: float = 0.08
    pause_split_sec: float = 0.65

    def to_dict(self) -> Dict[str, Any]:
        return {
            "maxCharsPerLine": self.max_chars_per_line,
            "maxLines": self.max_lines,
            "minCueDurationSec": self.min_cue_duration_sec,
            "maxCueDurationSec": self.max_cue_duration_sec,
            "maxCps": self.max_cps,
            "minGapSec": self.min_gap_sec,
            "pauseSplitSec": self.pause_split_sec,
        }


OPTION_ALIASES: Dict[str, str] = {
    "maxCharsPerLine": "max_chars_per_line",
    "maxLines": "max_lines",
    "minCueDurationSec": "min_cue_duration_sec",
    "maxCueDurationSec": "max_cue_duration_sec",
    "maxCps": "max_cps",
    "minGapSec": "min_gap_sec",
    "pauseSplitSec": "pause_split_sec",
}
"""camelCase wire names → SubtitleGenerationOptions field names."""


# =============================================================================
# Pipeline output
# =============================================================================

@dataclass
class SubtitleCue:
    """One finished subtitle display unit."""
    id: str
    start: float
    end: float
    text: str
    lines: List[str]
    cps: float
    cpl: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class SubtitleIssue:
    """A quality problem or anomaly recorded during a run.

    ``severity`` is one of "info", "warn", "error".
    """
    code: str
    message: str
    severity: str
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {"code": self.code, "message": self.message, "severity": self.severity}
        if self.data is not None:
            out["data"] = self.data
        return out


@dataclass
class SubtitleGenerationMetrics:
    cue_count: int = 0
    punctuation_fixes: int = 0
    split_word_fixes: int = 0
    anomalies_detected: int = 0
    avg_cps: float = 0.0
    max_cps: float = 0.0
    max_cpl: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cueCount": self.cue_count,
            "punctuationFixes": self.punctuation_fixes,
            "splitWordFixes": self.split_word_fixes,
            "anomaliesDetected": self.anomalies_detected,
            "avgCps": self.avg_cps,
            "maxCps": self.max_cps,
            "maxCpl": self.max_cpl,
        }


@dataclass
class SubtitleGenerationLogEvent:
    """A structured diagnostic event; ``level`` is "info", "warn" or "error"."""
    stage: str
    level: str
    message: str
    data: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        out = {"stage": self.stage, "level": self.level, "message": self.message}
        if self.data is not None:
            out["data"] = self.data
        return out


@dataclass
class SubtitleGenerationHooks:
    """Caller-supplied sinks. ``on_log`` receives every event, in order."""
    on_log: Optional[Callable[[SubtitleGenerationLogEvent], None]] = None


@dataclass
class SubtitleGenerationResult:
    cues: List[SubtitleCue]
    metrics: SubtitleGenerationMetrics
    issues: List[SubtitleIssue]
    debug: List[SubtitleGenerationLogEvent]

    @property
    def has_errors(self) -> bool:
        """True if any issue has error severity (e.g. empty transcript)."""
        return any(issue.severity == "error" for issue in self.issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "cues": [cue.to_dict() for cue in self.cues],
            "metrics": self.metrics.to_dict(),
            "issues": [issue.to_dict() for issue in self.issues],
            "debug": [event.to_dict() for event in self.debug],
        }


# =============================================================================
# Script alignment output
# =============================================================================

@dataclass
class TimedScriptToken:
    """A script token with recognizer-derived timing.

    Attributes:
        text: The script token, exactly as supplied.
        start: Start time in seconds.
        end: End time in seconds.
        confidence: matched_chars / total_core_chars (1.0 with no core chars).
        matched_chars: Core characters that matched a recognizer character.
        total_core_chars: Comparable characters (letters, digits, CJK) in text.
    """
    text: str
    start: float
    end: float
    confidence: float
    matched_chars: int
    total_core_chars: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.text,
            "start": self.start,
            "end": self.end,
            "confidence": self.confidence,
            "matchedChars": self.matched_chars,
            "totalCoreChars": self.total_core_chars,
        }


@dataclass
class ScriptAlignmentStats:
    script_core_chars: int = 0
    whisper_core_chars: int = 0
    matched_chars: int = 0
    unmatched_script_chars: int = 0
    unmatched_whisper_chars: int = 0
    coverage_ratio: float = 1.0
    unmatched_core_script_tokens: int = 0
    strategy: str = "none"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scriptCoreChars": self.script_core_chars,
            "whisperCoreChars": self.whisper_core_chars,
            "matchedChars": self.matched_chars,
            "unmatchedScriptChars": self.unmatched_script_chars,
            "unmatchedWhisperChars": self.unmatched_whisper_chars,
            "coverageRatio": self.coverage_ratio,
            "unmatchedCoreScriptTokens": self.unmatched_core_script_tokens,
            "strategy": self.strategy,
        }


@dataclass
class ScriptAlignmentResult:
    tokens: List[TimedScriptToken]
    stats: ScriptAlignmentStats
    warnings: List[str]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tokens": [token.to_dict() for token in self.tokens],
            "stats": self.stats.to_dict(),
            "warnings": list(self.warnings),
        }
