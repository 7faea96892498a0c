"""Tests for the payload <-> subtitle_cues adapter."""

import math

import pytest

from subtitle_cues import ScriptAlignmentResult, ScriptAlignmentStats, TimedScriptToken, WhisperTranscript
from webinar_subtitles.adapters.transcript_adapter import (
    aligned_transcript,
    flatten_whisper_words,
    transcript_from_payload,
    validate_transcript_payload,
)
from webinar_subtitles.errors import SubtitleRequestError


class TestValidateTranscriptPayload:

    def test_valid_payload(self, punctuation_payload):
        validate_transcript_payload(punctuation_payload)

    @pytest.mark.parametrize("payload", [
        [],
        {},
        {"segments": []},
        {"segments": [{"words": [{"start": 0.0}]}]},
        {"segments": [{"start": "zero"}]},
    ])
    def test_invalid_payloads(self, payload):
        with pytest.raises(SubtitleRequestError):
            validate_transcript_payload(payload)


class TestTranscriptFromPayload:

    def test_builds_dataclasses(self, punctuation_payload):
        transcript = transcript_from_payload(punctuation_payload)
        assert transcript.language == "en"
        words = transcript.segments[0].words
        assert words[0].word == "Hello"
        assert words[0].probability == 0.95
        assert words[0].id == 0

    def test_missing_times_become_nan(self):
        transcript = transcript_from_payload({"segments": [{"words": [{"word": "a", "start": None}]}]})
        word = transcript.segments[0].words[0]
        assert math.isnan(word.start)
        assert math.isnan(word.end)

    def test_segment_without_words_keeps_text(self):
        transcript = transcript_from_payload({"segments": [{"start": 0, "end": 1, "text": "hi there"}]})
        assert transcript.segments[0].words is None
        assert transcript.segments[0].text == "hi there"

    @pytest.mark.parametrize("payload", [None, {"segments": []}, {"segments": "x"}, {"segments": [1]}])
    def test_rejects_unusable_payloads(self, payload):
        with pytest.raises(SubtitleRequestError):
            transcript_from_payload(payload)


class TestAlignedTranscript:

    def _alignment(self):
        return ScriptAlignmentResult(
            tokens=[
                TimedScriptToken("我們", 0.0, 0.4, 1.0, 2, 2),
                TimedScriptToken("好。", 0.5, 0.8, 0.5, 1, 2),
            ],
            stats=ScriptAlignmentStats(),
            warnings=[],
        )

    def test_cjk_tokens_join_without_separator(self):
        source = WhisperTranscript(segments=[], language="zh", duration_sec=3.0)
        transcript = aligned_transcript(self._alignment(), source, is_cjk=True)
        segment = transcript.segments[0]
        assert len(transcript.segments) == 1
        assert segment.text == "我們好。"
        assert segment.start == 0.0
        assert segment.end == 0.8
        assert [w.id for w in segment.words] == [0, 1]
        assert [w.probability for w in segment.words] == [1.0, 0.5]
        assert transcript.language == "zh"
        assert transcript.duration_sec == 3.0

    def test_latin_tokens_join_with_space(self):
        transcript = aligned_transcript(self._alignment(), WhisperTranscript(segments=[]), is_cjk=False)
        assert transcript.segments[0].text == "我們 好。"

    def test_flatten_whisper_words(self, punctuation_payload):
        transcript = transcript_from_payload(punctuation_payload)
        assert [w.word for w in flatten_whisper_words(transcript)][:3] == ["Hello", ",", "world"]
