"""Tests for the generation service workflow.

WHY: The API and the CLI both delegate to generate_subtitles(). The
alignment gate, the log trail, and persistence must behave the same for
both, so they are tested here once against real stores in tmp_path.
"""

import pytest

from webinar_subtitles.adapters.transcript_adapter import transcript_from_payload
from webinar_subtitles.diagnostics import SubtitleRunLogger
from webinar_subtitles.errors import AlignmentGateError, SubtitleRequestError
from webinar_subtitles.service import GenerationRequest, alignment_gate_failed, generate_subtitles


def _stages(log_store, run_id):
    return [(r.stage, r.level) for r in log_store.read(run_id=run_id)]


class TestPlainGeneration:

    def test_generates_cues_and_logs_run(self, log_store, punctuation_payload):
        request = GenerationRequest(transcript=transcript_from_payload(punctuation_payload))
        outcome = generate_subtitles(request, SubtitleRunLogger(log_store))

        assert outcome.alignment is None
        assert [c.text for c in outcome.result.cues] == ["Hello, world!", "I don't know."]
        assert [s for s, _ in _stages(log_store, outcome.run_id)] == [
            "request", "extract", "normalize", "segment", "layout", "finalize", "response",
        ]

    def test_request_and_response_event_data(self, log_store, punctuation_payload):
        request = GenerationRequest(transcript=transcript_from_payload(punctuation_payload))
        outcome = generate_subtitles(request, SubtitleRunLogger(log_store))
        records = log_store.read(run_id=outcome.run_id)
        assert records[0].data == {"segmentCount": 1, "persistToWebinar": False, "scriptAnchored": False}
        assert records[-1].data["cueCount"] == 2
        assert records[-1].data["maxCpl"] == outcome.result.metrics.max_cpl

    def test_options_and_preset(self, log_store, punctuation_payload):
        request = GenerationRequest(
            transcript=transcript_from_payload(punctuation_payload),
            preset="vertical",
            options={"maxCps": 12},
        )
        outcome = generate_subtitles(request, SubtitleRunLogger(log_store))
        assert all(len(c.lines) == 1 for c in outcome.result.cues)

    def test_invalid_options_raise_request_error(self, log_store, punctuation_payload):
        request = GenerationRequest(
            transcript=transcript_from_payload(punctuation_payload),
            options={"maxLines": 0},
        )
        with pytest.raises(SubtitleRequestError):
            generate_subtitles(request, SubtitleRunLogger(log_store))

    def test_unknown_preset_raises_request_error(self, log_store, punctuation_payload):
        request = GenerationRequest(transcript=transcript_from_payload(punctuation_payload), preset="imax")
        with pytest.raises(SubtitleRequestError):
            generate_subtitles(request, SubtitleRunLogger(log_store))

    def test_to_dict_shape(self, log_store, punctuation_payload):
        request = GenerationRequest(transcript=transcript_from_payload(punctuation_payload))
        data = generate_subtitles(request, SubtitleRunLogger(log_store)).to_dict()
        assert list(data) == ["runId", "alignment", "cues", "metrics", "issues", "debug"]
        assert data["alignment"] is None


class TestScriptAnchoredGeneration:

    def test_aligned_script_text_replaces_recognizer_text(self, log_store, cjk_payload, cjk_script_text):
        request = GenerationRequest(
            transcript=transcript_from_payload(cjk_payload),
            script_text=cjk_script_text,
            is_cjk=True,
        )
        outcome = generate_subtitles(request, SubtitleRunLogger(log_store))

        assert outcome.alignment.stats.coverage_ratio == 1.0
        assert [c.text for c in outcome.result.cues] == ["我們討論估值。"]
        assert outcome.transcript.language == "zh"
        assert ("align", "info") in _stages(log_store, outcome.run_id)

    def test_script_tokens_are_used(self, log_store, cjk_payload):
        request = GenerationRequest(
            transcript=transcript_from_payload(cjk_payload),
            script_tokens=["我們", "討論", "估值。"],
            is_cjk=True,
        )
        outcome = generate_subtitles(request, SubtitleRunLogger(log_store))
        assert [t.text for t in outcome.alignment.tokens] == ["我們", "討論", "估值。"]

    def test_gate_failure_raises_and_logs(self, log_store, cjk_payload):
        request = GenerationRequest(
            transcript=transcript_from_payload(cjk_payload),
            script_text="我們討論價格。",
            is_cjk=True,
        )
        run_logger = SubtitleRunLogger(log_store, webinar_id="w-1")
        with pytest.raises(AlignmentGateError) as exc_info:
            generate_subtitles(request, run_logger)

        assert exc_info.value.run_id == run_logger.run_id
        assert exc_info.value.alignment.stats.unmatched_core_script_tokens > 0
        stages = _stages(log_store, run_logger.run_id)
        assert stages[-1] == ("align", "error")
        assert ("response", "info") not in stages

    def test_non_strict_accepts_weak_alignment(self, log_store, cjk_payload):
        request = GenerationRequest(
            transcript=transcript_from_payload(cjk_payload),
            script_text="我們討論價格。",
            is_cjk=True,
            strict_alignment=False,
        )
        outcome = generate_subtitles(request, SubtitleRunLogger(log_store))
        assert outcome.alignment.warnings
        assert outcome.result.cues[0].text == "我們討論價格。"
        assert ("align", "warn") in _stages(log_store, outcome.run_id)

    def test_gate_rule(self, log_store, cjk_payload, cjk_script_text):
        request = GenerationRequest(transcript=transcript_from_payload(cjk_payload), script_text=cjk_script_text)
        outcome = generate_subtitles(request, SubtitleRunLogger(log_store))
        assert not alignment_gate_failed(outcome.alignment)
        outcome.alignment.stats.coverage_ratio = 0.96
        assert alignment_gate_failed(outcome.alignment)


class TestPersistence:

    def test_persists_to_known_webinar(self, log_store, record_store, punctuation_payload):
        request = GenerationRequest(
            transcript=transcript_from_payload(punctuation_payload),
            webinar_id="w-1",
            persist_to_webinar=True,
        )
        outcome = generate_subtitles(request, SubtitleRunLogger(log_store, webinar_id="w-1"), record_store)

        stored = record_store.get("w-1")
        assert len(stored["subtitleCues"]) == len(outcome.result.cues)
        assert stored["subtitleLanguage"] == "en"
        assert ("persist", "info") in _stages(log_store, outcome.run_id)

    def test_unknown_webinar_is_a_warning(self, log_store, record_store, punctuation_payload):
        request = GenerationRequest(
            transcript=transcript_from_payload(punctuation_payload),
            webinar_id="w-404",
            persist_to_webinar=True,
        )
        outcome = generate_subtitles(request, SubtitleRunLogger(log_store), record_store)
        assert outcome.result.cues
        assert ("persist", "warn") in _stages(log_store, outcome.run_id)

    def test_no_persist_without_flag(self, log_store, record_store, punctuation_payload):
        request = GenerationRequest(transcript=transcript_from_payload(punctuation_payload), webinar_id="w-1")
        generate_subtitles(request, SubtitleRunLogger(log_store), record_store)
        assert "subtitleCues" not in record_store.get("w-1")
