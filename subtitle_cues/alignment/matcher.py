"""Character sequence matching: exact LCS with a greedy fallback.

WHY: Script and recognizer disagree locally (dropped words, extra filler,
split numbers) but agree on order. The longest common subsequence gives
the best order-preserving pairing. Its O(n*m) table becomes too slow and
too large for long transcripts, so above LCS_MAX_CELLS a greedy matcher
that resynchronizes within a bounded lookahead takes over.

HOW: lcs_match_indices() fills a numpy uint16 table one row at a time.
For a fixed row, dp[i][j] = max(dp[i][j-1], c[j]) where c[j] is
dp[i-1][j-1] + 1 on equal chars and dp[i-1][j] otherwise, so each row is
a running maximum of c. When the recognizer side is shorter, the same
table is filled one column at a time by the mirrored recurrence, so the
Python loop always runs over the shorter sequence. Backtracking walks
from the bottom-right corner, taking the diagonal on equal chars and
otherwise moving up when dp[i-1][j] >= dp[i][j-1].

greedy_anchor_match() walks both sequences together. On a mismatch it looks
up to ``lookahead`` positions ahead on each side and takes the shorter
jump (recognizer side wins ties); if neither side finds the char, both
advance by one.

RULES:
- Returned pairs are (script_index, whisper_index), strictly increasing
  in both coordinates.
- uint16 is safe: LCS length <= min(n, m) <= sqrt(LCS_MAX_CELLS) < 65535.
"""

from typing import List, Sequence, Tuple

import numpy as np

from ..presets import GREEDY_LOOKAHEAD, LCS_MAX_CELLS

MatchPairs = List[Tuple[int, int]]


def _codes(chars: Sequence[str]) -> np.ndarray:
    return np.fromiter((ord(ch) for ch in chars), dtype=np.int64, count=len(chars))


def lcs_match_indices(script_chars: Sequence[str], whisper_chars: Sequence[str]) -> MatchPairs:
    """Return the LCS pairing of two character sequences."""
    n = len(script_chars)
    m = len(whisper_chars)
    if n == 0 or m == 0:
        return []

    a = _codes(script_chars)
    b = _codes(whisper_chars)
    dp = np.zeros((n + 1, m + 1), dtype=np.uint16)

    if n <= m:
        for i in range(1, n + 1):
            prev = dp[i - 1]
            candidate = np.where(b == a[i - 1], prev[:-1] + 1, prev[1:])
            dp[i, 1:] = np.maximum.accumulate(candidate)
    else:
        for j in range(1, m + 1):
            prev = dp[:, j - 1]
            candidate = np.where(a == b[j - 1], prev[:-1] + 1, prev[1:])
            dp[1:, j] = np.maximum.accumulate(candidate)

    matches = []  # type: MatchPairs
    i, j = n, m
    while i > 0 and j > 0:
        if a[i - 1] == b[j - 1]:
            matches.append((i - 1, j - 1))
            i -= 1
            j -= 1
        elif dp[i - 1, j] >= dp[i, j - 1]:
            i -= 1
        else:
            j -= 1

    matches.reverse()
    return matches


def greedy_anchor_match(
    script_chars: Sequence[str],
    whisper_chars: Sequence[str],
    lookahead: int = GREEDY_LOOKAHEAD,
) -> MatchPairs:
    """Linear-time approximate pairing with bounded resynchronization."""
    matches = []  # type: MatchPairs
    n = len(script_chars)
    m = len(whisper_chars)
    i = j = 0

    while i < n and j < m:
        if script_chars[i] == whisper_chars[j]:
            matches.append((i, j))
            i += 1
            j += 1
            continue

        whisper_jump = -1
        for k in range(1, lookahead + 1):
            if j + k >= m:
                break
            if script_chars[i] == whisper_chars[j + k]:
                whisper_jump = j + k
                break

        script_jump = -1
        for k in range(1, lookahead + 1):
            if i + k >= n:
                break
            if script_chars[i + k] == whisper_chars[j]:
                script_jump = i + k
                break

        if whisper_jump != -1 and (script_jump == -1 or whisper_jump - j <= script_jump - i):
            j = whisper_jump
        elif script_jump != -1:
            i = script_jump
        else:
            i += 1
            j += 1

    return matches


def match_core_chars(
    script_chars: Sequence[str],
    whisper_chars: Sequence[str],
    max_lcs_cells: int = LCS_MAX_CELLS,
    lookahead: int = GREEDY_LOOKAHEAD,
) -> Tuple[MatchPairs, str]:
    """Pick a strategy by table size and run it.

    Returns:
        (matches, strategy) where strategy is "lcs", "greedy", or "none"
        when either sequence is empty.
    """
    if not script_chars or not whisper_chars:
        return [], "none"
    if len(script_chars) * len(whisper_chars) > max_lcs_cells:
        return greedy_anchor_match(script_chars, whisper_chars, lookahead), "greedy"
    return lcs_match_indices(script_chars, whisper_chars), "lcs"
