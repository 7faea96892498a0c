"""Tests for option presets and resolve_options()."""

import pytest

from subtitle_cues import DEFAULT_OPTIONS, PRESETS, SubtitleGenerationOptions, resolve_options


class TestResolveOptions:

    def test_none_gives_defaults(self):
        assert resolve_options(None) == DEFAULT_OPTIONS
        assert DEFAULT_OPTIONS.max_chars_per_line == 42
        assert DEFAULT_OPTIONS.max_lines == 2
        assert DEFAULT_OPTIONS.max_cps == 17.0

    def test_preset_name(self):
        assert resolve_options("vertical") == PRESETS["vertical"]
        assert resolve_options("vertical").max_lines == 1

    def test_unknown_preset_raises(self):
        with pytest.raises(ValueError, match="Unknown preset"):
            resolve_options("imax")

    def test_partial_camel_case_mapping(self):
        options = resolve_options({"maxCharsPerLine": 32, "minGapSec": 0.1})
        assert options.max_chars_per_line == 32
        assert options.min_gap_sec == 0.1
        assert options.max_lines == 2

    def test_none_values_are_ignored(self):
        options = resolve_options({"maxCps": None, "max_lines": 1})
        assert options.max_cps == 17.0
        assert options.max_lines == 1

    def test_merges_onto_base(self):
        options = resolve_options({"maxCps": 12}, base=PRESETS["cjk"])
        assert options.max_chars_per_line == 16
        assert options.max_cps == 12.0

    def test_options_object_passes_through(self):
        custom = SubtitleGenerationOptions(max_chars_per_line=30)
        assert resolve_options(custom) is custom

    def test_whole_float_accepted_for_int_field(self):
        assert resolve_options({"maxLines": 2.0}).max_lines == 2

    @pytest.mark.parametrize("overrides", [
        {"maxWords": 3},
        {"maxLines": 0},
        {"maxCharsPerLine": -1},
        {"maxCps": 0},
        {"maxCueDurationSec": 0},
        {"minGapSec": -0.01},
        {"pauseSplitSec": -1},
        {"minCueDurationSec": 7.0},
        {"maxLines": 1.5},
        {"maxLines": True},
        {"maxCps": "fast"},
    ])
    def test_invalid_overrides_raise(self, overrides):
        with pytest.raises(ValueError):
            resolve_options(overrides)

    def test_zero_gap_and_pause_allowed(self):
        options = resolve_options({"minGapSec": 0, "pauseSplitSec": 0, "minCueDurationSec": 0})
        assert options.min_gap_sec == 0.0

    def test_options_are_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_OPTIONS.max_lines = 3

    def test_to_dict_uses_wire_names(self):
        assert DEFAULT_OPTIONS.to_dict() == {
            "maxCharsPerLine": 42,
            "maxLines": 2,
            "minCueDurationSec": 1.0,
            "maxCueDurationSec": 6.0,
            "maxCps": 17.0,
            "minGapSec": 0.08,
            "pauseSplitSec": 0.65,
        }
