"""Fuzzy match scoring for completion candidates.

A query matches a word when its characters appear in the word in order,
not necessarily contiguously. Among all such alignments the one with the
highest score wins. Scoring rules (weights from ScoringWeights):

First query character:
- at index 0: start weight
- at a word boundary: boundary weight
- elsewhere: interior weight

Following query characters:
- right after the previous match: contiguous weight
- at a word boundary: follow-boundary weight
- elsewhere: follow-interior weight

Boundary weights decay for every boundary skipped on the way (never below
the interior weight). Each rule has an "exact" weight for identical
characters and a lower "ignore_case" weight for case-insensitive matches.

Score 0 is reserved for "no match".
"""

from __future__ import annotations

from enum import Enum
from typing import NamedTuple, Sequence

from .classify import CharClass, boundary_mask, classify, get_char_codes
from .config import DEFAULT_WEIGHTS, ScoringWeights

# Rounding keeps sums like 5 + 0.1 + 0.1 equal to 5.2
SCORE_PRECISION = 6


class CaseMatch(Enum):
    """How two characters compare."""

    NONE = "none"
    EXACT = "exact"
    IGNORE_CASE = "ignore_case"


class MatchResult(NamedTuple):
    """Winning alignment: total score and matched word indices."""

    score: float
    positions: list[int]


def _to_codes(value: str | Sequence[int]) -> Sequence[int]:
    if isinstance(value, str):
        return get_char_codes(value)
    return value


def compare_chars(query_code: int, word_code: int, smart_case: bool = True) -> CaseMatch:
    """Compare a query character against a word character.

    With smart case an uppercase query character only matches itself.
    """
    if query_code == word_code:
        return CaseMatch.EXACT
    if smart_case and classify(query_code) is CharClass.UPPER:
        return CaseMatch.NONE
    if chr(query_code).lower() == chr(word_code).lower():
        return CaseMatch.IGNORE_CASE
    return CaseMatch.NONE


def case_score(
    query_code: int,
    word_code: int,
    index: int,
    weights: ScoringWeights | None = None,
) -> float:
    """Score one aligned pair as a first character, ignoring boundaries."""
    weights = weights or DEFAULT_WEIGHTS
    kind = compare_chars(query_code, word_code, weights.smart_case)
    if kind is CaseMatch.NONE:
        return 0.0
    exact = kind is CaseMatch.EXACT
    if index == 0:
        return weights.start_exact if exact else weights.start_ignore_case
    return weights.interior_exact if exact else weights.interior_ignore_case


class _Scorer:
    """Per-call scoring context for one word."""

    def __init__(self, codes: Sequence[int], weights: ScoringWeights):
        self.weights = weights
        self.boundaries = boundary_mask(codes)
        # skipped[i]: boundaries at indices 1..i-1
        self.skipped: list[int] = [0] * (len(codes) + 1)
        for i in range(1, len(codes)):
            self.skipped[i + 1] = self.skipped[i] + (1 if self.boundaries[i] else 0)

    def _decayed(self, full: float, floor: float, anchor: int, index: int) -> float:
        skipped = self.skipped[index] - self.skipped[anchor + 1]
        return max(full * self.weights.boundary_decay ** skipped, floor)

    def first(self, index: int, exact: bool) -> float:
        w = self.weights
        if index == 0:
            return w.start_exact if exact else w.start_ignore_case
        interior = w.interior_exact if exact else w.interior_ignore_case
        if self.boundaries[index]:
            full = w.boundary_exact if exact else w.boundary_ignore_case
            return self._decayed(full, interior, 0, index)
        return interior

    def follow(self, previous: int, index: int, exact: bool) -> float:
        w = self.weights
        if index == previous + 1:
            return w.contiguous_exact if exact else w.contiguous_ignore_case
        interior = w.follow_interior_exact if exact else w.follow_interior_ignore_case
        if self.boundaries[index]:
            full = w.follow_boundary_exact if exact else w.follow_boundary_ignore_case
            return self._decayed(full, interior, previous, index)
        return interior


def match_score_with_positions(
    word: str | Sequence[int],
    query: str | Sequence[int],
    weights: ScoringWeights | None = None,
) -> MatchResult | None:
    """Find the best-scoring alignment of ``query`` inside ``word``.

    Args:
        word: Candidate word (text or code points)
        query: Typed input (code points or text)
        weights: Scoring table, defaults to DEFAULT_WEIGHTS

    Returns:
        MatchResult with the score and one word index per query character,
        or None when the query is empty or cannot be aligned.
    """
    weights = weights or DEFAULT_WEIGHTS
    codes = _to_codes(word)
    inputs = _to_codes(query)
    size, count = len(codes), len(inputs)
    if count == 0 or count > size:
        return None

    # Candidate cells per query index: (word index, exact?)
    candidates: list[list[tuple[int, bool]]] = []
    for k, query_code in enumerate(inputs):
        row = []
        # Leave room for the remaining query characters
        for i in range(k, size - (count - 1 - k)):
            kind = compare_chars(query_code, codes[i], weights.smart_case)
            if kind is not CaseMatch.NONE:
                row.append((i, kind is CaseMatch.EXACT))
        if not row:
            return None
        candidates.append(row)

    scorer = _Scorer(codes, weights)

    # tables[k][i] = (best score of query[k+1:], word index chosen for k+1)
    tables: list[dict[int, tuple[float, int | None]]] = [{} for _ in range(count)]
    tables[count - 1] = {i: (0.0, None) for i, _ in candidates[count - 1]}
    for k in range(count - 2, -1, -1):
        following = tables[k + 1]
        for i, _ in candidates[k]:
            best: float | None = None
            best_next: int | None = None
            for j, exact in candidates[k + 1]:
                if j <= i or j not in following:
                    continue
                total = scorer.follow(i, j, exact) + following[j][0]
                if best is None or total > best:
                    best, best_next = total, j
            if best is not None:
                tables[k][i] = (best, best_next)

    score: float | None = None
    start: int | None = None
    for i, exact in candidates[0]:
        if i not in tables[0]:
            continue
        total = scorer.first(i, exact) + tables[0][i][0]
        if score is None or total > score:
            score, start = total, i
    if score is None or start is None:
        return None

    positions = [start]
    for k in range(count - 1):
        next_index = tables[k][positions[-1]][1]
        assert next_index is not None
        positions.append(next_index)
    return MatchResult(round(score, SCORE_PRECISION), positions)


def match_score(
    word: str | Sequence[int],
    query: str | Sequence[int],
    weights: ScoringWeights | None = None,
) -> float:
    """Score ``query`` against ``word``; 0 means no match."""
    result = match_score_with_positions(word, query, weights)
    if result is None:
        return 0
    return result.score
