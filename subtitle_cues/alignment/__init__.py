"""Character-level alignment of script text against recognizer timings."""

from .engine import assign_timestamps_to_script_tokens
from .matcher import greedy_anchor_match, lcs_match_indices, match_core_chars
from .tokenizer import to_comparable_chars, tokenize_script_text

__all__ = [
    "assign_timestamps_to_script_tokens",
    "greedy_anchor_match",
    "lcs_match_indices",
    "match_core_chars",
    "to_comparable_chars",
    "tokenize_script_text",
]
