"""Shared test fixtures for the subtitle test suite.

WHY: The pipeline, alignment, service, API and CLI tests all need the same
recognizer transcripts. Centralizing them here keeps every module testing
against identical, hand-checked input.

HOW: Word lists are module constants; fixtures turn them into
WhisperTranscript objects or JSON payloads. ``make_transcript`` is a
builder fixture for tests that need their own word list. Store fixtures
point the log and webinar stores at ``tmp_path``.

RULES:
- Word timings are in seconds and match the regression scenarios exactly.
- Every fixture returns fresh objects; tests may mutate them freely.
"""

import json
from typing import Any, Dict, List, Tuple

import pytest

from subtitle_cues import WhisperSegment, WhisperTranscript, WhisperWord
from webinar_subtitles.diagnostics import SubtitleLogStore
from webinar_subtitles.records import WebinarRecordStore


# ---------------------------------------------------------------------------
# Regression word lists: (text, start, end)
# ---------------------------------------------------------------------------

PUNCTUATION_WORDS: List[Tuple[str, float, float]] = [
    ("Hello", 0.0, 0.2),
    (",", 0.2, 0.24),
    ("world", 0.26, 0.5),
    ("!", 0.5, 0.54),
    ("I", 0.9, 1.0),
    ("don", 1.02, 1.2),
    ("'t", 1.2, 1.27),
    ("know", 1.3, 1.55),
    (".", 1.55, 1.58),
]

DENSE_WORDS: List[Tuple[str, float, float]] = [
    ("This", 0.0, 0.08),
    ("is", 0.08, 0.14),
    ("a", 0.14, 0.17),
    ("very", 0.17, 0.26),
    ("dense", 0.26, 0.35),
    ("line", 0.35, 0.42),
    ("that", 0.42, 0.49),
    ("would", 0.49, 0.58),
    ("otherwise", 0.58, 0.7),
    ("be", 0.7, 0.76),
    ("too", 0.76, 0.83),
    ("fast", 0.83, 0.9),
    ("to", 0.9, 0.95),
    ("read", 0.95, 1.02),
    (".", 1.02, 1.04),
]

WRAP_WORDS: List[Tuple[str, float, float]] = [
    ("Cinematic", 0.0, 0.2),
    ("subtitle", 0.2, 0.42),
    ("systems", 0.42, 0.62),
    ("must", 0.62, 0.75),
    ("preserve", 0.75, 0.94),
    ("phrase", 0.94, 1.1),
    ("boundaries", 1.1, 1.34),
    ("for", 1.34, 1.44),
    ("comfort", 1.44, 1.64),
    (".", 1.64, 1.68),
]

BROKEN_TIMING_WORDS: List[Tuple[str, float, float]] = [
    ("Broken", 0.4, 0.6),
    ("timing", 0.2, 0.5),
    ("input", 0.5, 0.7),
    (".", 0.7, 0.72),
]

# 42 CJK characters then a sentence end, so the default 42-char line
# budget would put the full stop alone on the second line.
CJK_SENTENCE_WORDS: List[Tuple[str, float, float]] = [
    (ch, round(index * 0.1, 2), round(index * 0.1 + 0.1, 2))
    for index, ch in enumerate("我們今天討論估值" * 5 + "我們")
] + [("。", 4.2, 4.25)]


def _build_transcript(words: List[Tuple[str, float, float]], language: str = "en") -> WhisperTranscript:
    return WhisperTranscript(
        language=language,
        segments=[
            WhisperSegment(
                id=0,
                start=words[0][1] if words else 0.0,
                end=words[-1][2] if words else 0.0,
                text=" ".join(w[0] for w in words),
                words=[
                    WhisperWord(id=index, word=text, start=start, end=end, probability=0.95)
                    for index, (text, start, end) in enumerate(words)
                ],
            )
        ],
    )


def _build_payload(words: List[Tuple[str, float, float]], language: str = "en") -> Dict[str, Any]:
    return {
        "language": language,
        "segments": [
            {
                "id": 0,
                "start": words[0][1],
                "end": words[-1][2],
                "text": " ".join(w[0] for w in words),
                "words": [
                    {"id": index, "word": text, "start": start, "end": end, "probability": 0.95}
                    for index, (text, start, end) in enumerate(words)
                ],
            }
        ],
    }


# ---------------------------------------------------------------------------
# Transcript fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def make_transcript():
    """Builder: list of (text, start, end) -> single-segment WhisperTranscript."""
    return _build_transcript


@pytest.fixture
def punctuation_transcript():
    return _build_transcript(PUNCTUATION_WORDS)


@pytest.fixture
def dense_transcript():
    return _build_transcript(DENSE_WORDS)


@pytest.fixture
def wrap_transcript():
    return _build_transcript(WRAP_WORDS)


@pytest.fixture
def broken_timing_transcript():
    return _build_transcript(BROKEN_TIMING_WORDS)


@pytest.fixture
def cjk_sentence_transcript():
    return _build_transcript(CJK_SENTENCE_WORDS, language="zh")


@pytest.fixture
def punctuation_payload():
    """JSON-shaped transcript, as posted to the API or read by the CLI."""
    return _build_payload(PUNCTUATION_WORDS)


@pytest.fixture
def cjk_payload():
    """CJK transcript whose characters match CJK_SCRIPT_TEXT one for one."""
    return _build_payload(
        [
            ("我", 0.0, 0.2),
            ("們", 0.2, 0.4),
            ("討", 0.4, 0.56),
            ("論", 0.56, 0.72),
            ("估", 0.8, 0.95),
            ("值", 0.95, 1.1),
        ],
        language="zh",
    )


CJK_SCRIPT_TEXT = "我們討論估值。"


# ---------------------------------------------------------------------------
# Store fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def log_store(tmp_path):
    return SubtitleLogStore(tmp_path / "logs" / "subtitle-generation.ndjson")


@pytest.fixture
def webinar_store_path(tmp_path):
    path = tmp_path / "webinars.json"
    path.write_text(
        json.dumps([
            {"id": "w-1", "title": "Valuation basics", "updatedAt": "2026-01-01T00:00:00.000Z"},
            {"id": "w-2", "title": "Q&A"},
        ]),
        encoding="utf-8",
    )
    return path


@pytest.fixture
def record_store(webinar_store_path):
    return WebinarRecordStore(webinar_store_path)


@pytest.fixture
def cjk_script_text():
    return CJK_SCRIPT_TEXT
