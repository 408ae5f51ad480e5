"""Candidate ordering for the completion popup.

Combines the two ranking signals:
- fuzzy match score (higher is better)
- structural word distance (lower is better, tie-breaker)

then falls back to alphabetical order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from ..models.completion import CompleteOption, CompletionItem
from ..models.text import Position
from .cancellation import CancellationToken
from .classify import get_char_codes
from .config import Config, ConfigManager, ScoringWeights
from .events import ConfigChangedEvent, EventBus
from .match import match_score_with_positions
from .word_distance import SelectionRangeProvider, WordDistance, WordRangeProvider
from .word_ranges import DocumentWordRanges

logger = logging.getLogger(__name__)


@dataclass
class RankedCandidate:
    """A candidate with its ranking signals and highlight positions."""

    item: CompletionItem
    score: float = 0.0
    positions: list[int] = field(default_factory=list)
    distance: int = 0

    @property
    def word(self) -> str:
        return self.item.display_word


def rank_candidates(
    query: str,
    items: Iterable[CompletionItem],
    *,
    word_distance: WordDistance = WordDistance.NONE,
    position: Position | None = None,
    weights: ScoringWeights | None = None,
) -> list[RankedCandidate]:
    """Rank items by fuzzy match quality, then proximity.

    Args:
        query: Text typed since the completion start column
        items: Candidates to rank
        word_distance: Proximity scorer of the current session
        position: Cursor position for proximity lookups
        weights: Scoring table

    Returns:
        Matching candidates, best first. An empty query keeps every item
        with a neutral score.
    """
    if not query:
        # No query = keep all with neutral score
        return [RankedCandidate(item=item) for item in items]

    codes = get_char_codes(query)
    results: list[RankedCandidate] = []
    for item in items:
        match = match_score_with_positions(item.display_word, codes, weights)
        if match is None:
            continue
        distance = word_distance.distance(position, item) if position is not None else 0
        results.append(
            RankedCandidate(
                item=item,
                score=match.score,
                positions=match.positions,
                distance=distance,
            )
        )

    # Score descending, then nearest scope, then alphabetically
    results.sort(key=lambda c: (-c.score, c.distance, c.word.lower()))
    return results


class Ranker:
    """Ranks completion sessions with the current configuration.

    Reads scoring weights and proximity settings from the ConfigManager and
    reloads them on ConfigChangedEvent, so updates apply to the next call.

    Example:
        ranker = Ranker(ConfigManager(), selection_ranges=server)
        word_distance = await ranker.start_session(option, token)
        ranked = ranker.rank(option.input, items, word_distance=word_distance,
                             position=option.position)
    """

    def __init__(
        self,
        config_manager: ConfigManager,
        *,
        selection_ranges: SelectionRangeProvider | None = None,
        word_ranges: WordRangeProvider | None = None,
    ) -> None:
        self._config_manager = config_manager
        self._selection_ranges = selection_ranges
        self._word_ranges = word_ranges if word_ranges is not None else DocumentWordRanges()
        self._config = config_manager.config
        EventBus.get().subscribe(ConfigChangedEvent, self._on_config_changed, weak=True)

    @property
    def config(self) -> Config:
        return self._config

    def _on_config_changed(self, event: ConfigChangedEvent) -> None:
        logger.debug(f"Config section '{event.key}' changed, reloading ranker settings")
        self._config = self._config_manager.config

    async def start_session(
        self,
        option: CompleteOption,
        token: CancellationToken,
    ) -> WordDistance:
        """Build the proximity scorer for a new completion session."""
        settings = self._config.word_distance
        return await WordDistance.create(
            settings.enabled,
            option,
            token,
            selection_ranges=self._selection_ranges,
            word_ranges=self._word_ranges,
            timeout=settings.index_timeout,
        )

    def rank(
        self,
        query: str,
        items: Iterable[CompletionItem],
        *,
        word_distance: WordDistance = WordDistance.NONE,
        position: Position | None = None,
    ) -> list[RankedCandidate]:
        """Rank items with the configured scoring weights."""
        return rank_candidates(
            query,
            items,
            word_distance=word_distance,
            position=position,
            weights=self._config.scoring,
        )
