"""Services for completion-rank."""

from completion_rank.services.classify import (
    CharClass,
    classify,
    is_word_boundary,
    get_char_codes,
)
from completion_rank.services.match import (
    MatchResult,
    case_score,
    match_score,
    match_score_with_positions,
)
from completion_rank.services.cancellation import CancellationToken
from completion_rank.services.word_distance import (
    SelectionRangeProvider,
    WordDistance,
    WordRangeProvider,
)
from completion_rank.services.word_ranges import DocumentWordRanges
from completion_rank.services.ranking import RankedCandidate, Ranker, rank_candidates

__all__ = [
    "CharClass",
    "classify",
    "is_word_boundary",
    "get_char_codes",
    "MatchResult",
    "case_score",
    "match_score",
    "match_score_with_positions",
    "CancellationToken",
    "SelectionRangeProvider",
    "WordDistance",
    "WordRangeProvider",
    "DocumentWordRanges",
    "RankedCandidate",
    "Ranker",
    "rank_candidates",
]
