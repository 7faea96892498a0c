"""Unit tests for word extraction and normalization.

WHY: Everything downstream assumes clean, time-ordered words. Bad timing
repair or a missed merge shows up as cues starting with "," or words like
"don 't" on screen.

HOW: Tests call the normalizer functions directly with a fresh RunReport
and check the words, metrics, issues, and events it produces.
"""

import math

import pytest

from subtitle_cues.models import NormalizedWord, WhisperSegment, WhisperTranscript, WhisperWord
from subtitle_cues.normalizer import (
    extract_words,
    normalize_token_sequence,
    sanitize_word_timing,
    split_fallback_words,
)
from subtitle_cues.report import RunReport


def _nw(text, start, end):
    return NormalizedWord(text=text, start=start, end=end)


# ---------------------------------------------------------------------------
# sanitize_word_timing
# ---------------------------------------------------------------------------


class TestSanitizeWordTiming:

    def test_valid_word_unchanged(self):
        word = sanitize_word_timing(WhisperWord(word=" hello ", start=1.0, end=1.5))
        assert word.text == "hello"
        assert word.start == 1.0
        assert word.end == 1.5

    def test_negative_start_clamped_to_zero(self):
        word = sanitize_word_timing(WhisperWord(word="a", start=-0.5, end=0.3))
        assert word.start == 0.0
        assert word.end == 0.3

    def test_missing_end_gets_fallback_duration(self):
        word = sanitize_word_timing(WhisperWord(word="a", start=2.0, end=math.nan))
        assert word.end == pytest.approx(2.2)

    def test_nan_start_becomes_zero(self):
        word = sanitize_word_timing(WhisperWord(word="a", start=math.nan, end=0.5))
        assert word.start == 0.0
        assert word.end == 0.5

    def test_end_before_start_gets_minimum_duration(self):
        word = sanitize_word_timing(WhisperWord(word="a", start=1.0, end=0.5))
        assert word.end == pytest.approx(1.04)

    def test_infinite_end_treated_as_missing(self):
        word = sanitize_word_timing(WhisperWord(word="a", start=1.0, end=math.inf))
        assert word.end == pytest.approx(1.2)


# ---------------------------------------------------------------------------
# split_fallback_words
# ---------------------------------------------------------------------------


class TestSplitFallbackWords:

    def test_latin_text_splits_on_whitespace(self):
        words = split_fallback_words("hello big  world", 0.0, 0.3)
        assert [w.text for w in words] == ["hello", "big", "world"]
        assert words[0].start == pytest.approx(0.0)
        assert words[1].start == pytest.approx(0.1)
        assert words[2].end == pytest.approx(0.3)

    def test_cjk_text_splits_per_character_without_spaces(self):
        words = split_fallback_words("你好 嗎", 0.0, 0.9)
        assert [w.text for w in words] == ["你", "好", "嗎"]

    def test_empty_text_yields_nothing(self):
        assert split_fallback_words("   ", 0.0, 1.0) == []

    def test_zero_span_uses_minimum_span(self):
        words = split_fallback_words("a b", 1.0, 1.0)
        assert len(words) == 2
        assert words[1].start == pytest.approx(1.1)
        for w in words:
            assert w.end >= w.start + 0.04


# ---------------------------------------------------------------------------
# extract_words
# ---------------------------------------------------------------------------


class TestExtractWords:

    def test_ordered_input_logs_info(self, punctuation_transcript):
        report = RunReport()
        words = extract_words(punctuation_transcript, report)
        assert len(words) == 9
        assert report.metrics.anomalies_detected == 0
        assert report.issues == []
        assert report.debug[0].stage == "extract"
        assert report.debug[0].level == "info"
        assert report.debug[0].data == {"inputCount": 9}

    def test_non_monotonic_input_is_sorted_and_reported(self, broken_timing_transcript):
        report = RunReport()
        words = extract_words(broken_timing_transcript, report)
        assert [w.text for w in words] == ["timing", "Broken", "input", "."]
        assert report.metrics.anomalies_detected == 1
        assert [i.code for i in report.issues] == ["non_monotonic_word_input"]
        assert report.debug[-1].level == "warn"

    def test_equal_keys_do_not_count_as_reordering(self):
        transcript = WhisperTranscript(segments=[WhisperSegment(
            start=0.0, end=1.0,
            words=[WhisperWord("a", 0.0, 0.5), WhisperWord("b", 0.0, 0.5)],
        )])
        report = RunReport()
        words = extract_words(transcript, report)
        assert [w.text for w in words] == ["a", "b"]
        assert report.metrics.anomalies_detected == 0

    def test_segment_without_words_uses_fallback(self):
        transcript = WhisperTranscript(segments=[
            WhisperSegment(id=7, start=0.0, end=1.0, text="no word timings", words=None),
        ])
        report = RunReport()
        words = extract_words(transcript, report)
        assert [w.text for w in words] == ["no", "word", "timings"]
        issue = report.issues[0]
        assert issue.code == "segment_without_words"
        assert issue.severity == "warn"
        assert issue.data == {"segmentId": 7, "tokenCount": 3}
        assert report.debug[0].stage == "extract"
        assert report.debug[0].level == "warn"

    def test_blank_words_are_dropped(self):
        transcript = WhisperTranscript(segments=[WhisperSegment(
            start=0.0, end=1.0,
            words=[WhisperWord("  ", 0.0, 0.1), WhisperWord("ok", 0.1, 0.3)],
        )])
        words = extract_words(transcript, RunReport())
        assert [w.text for w in words] == ["ok"]

    def test_hook_receives_events(self, punctuation_transcript):
        from subtitle_cues import SubtitleGenerationHooks

        seen = []
        report = RunReport(SubtitleGenerationHooks(on_log=seen.append))
        extract_words(punctuation_transcript, report)
        assert seen == report.debug


# ---------------------------------------------------------------------------
# normalize_token_sequence
# ---------------------------------------------------------------------------


class TestNormalizeTokenSequence:

    def test_punctuation_merges_into_previous_word(self):
        report = RunReport()
        words = normalize_token_sequence(
            [_nw("Hello", 0.0, 0.2), _nw(",", 0.2, 0.24), _nw("world", 0.26, 0.5)],
            report,
        )
        assert [w.text for w in words] == ["Hello,", "world"]
        assert words[0].end == 0.24
        assert words[0].start == 0.0
        assert report.metrics.punctuation_fixes == 1

    def test_apostrophe_suffix_merges(self):
        report = RunReport()
        words = normalize_token_sequence(
            [_nw("don", 1.02, 1.2), _nw("'t", 1.2, 1.27), _nw("we", 1.3, 1.4), _nw("’ll", 1.4, 1.5)],
            report,
        )
        assert [w.text for w in words] == ["don't", "we’ll"]
        assert report.metrics.split_word_fixes == 2

    def test_lone_hyphen_merges(self):
        report = RunReport()
        words = normalize_token_sequence([_nw("well", 0.0, 0.2), _nw("-", 0.2, 0.25)], report)
        assert [w.text for w in words] == ["well-"]
        assert report.metrics.split_word_fixes == 1

    def test_leading_punctuation_is_kept(self):
        words = normalize_token_sequence([_nw(",", 0.0, 0.1), _nw("so", 0.1, 0.3)], RunReport())
        assert [w.text for w in words] == [",", "so"]

    def test_merge_never_shortens_end(self):
        words = normalize_token_sequence([_nw("end", 0.0, 0.5), _nw(".", 0.3, 0.4)], RunReport())
        assert words[0].end == 0.5

    def test_input_words_are_not_mutated(self):
        original = [_nw("Hi", 0.0, 0.2), _nw("!", 0.2, 0.3)]
        normalize_token_sequence(original, RunReport())
        assert original[0].text == "Hi"

    def test_second_pass_is_a_no_op(self, punctuation_transcript):
        report = RunReport()
        first = normalize_token_sequence(extract_words(punctuation_transcript, report), report)
        second_report = RunReport()
        second = normalize_token_sequence(first, second_report)
        assert [(w.text, w.start, w.end) for w in second] == [(w.text, w.start, w.end) for w in first]
        assert second_report.metrics.punctuation_fixes == 0
        assert second_report.metrics.split_word_fixes == 0
