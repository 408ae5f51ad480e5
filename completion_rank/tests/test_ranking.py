"""Tests for candidate ranking."""

from conftest import FakeSelectionRanges, FakeWordRanges, run

from completion_rank.models import CompletionItem, Position, Range
from completion_rank.services.cancellation import CancellationToken
from completion_rank.services.config import ScoringWeights, WordDistanceSettings
from completion_rank.services.ranking import RankedCandidate, Ranker, rank_candidates
from completion_rank.services.word_distance import WordDistance


def items(*words: str) -> list[CompletionItem]:
    return [CompletionItem(word=word) for word in words]


class TestRankCandidates:
    """Tests for rank_candidates()."""

    def test_empty_query_keeps_all(self):
        """Empty query keeps order with neutral scores."""
        ranked = rank_candidates("", items("b", "a"))
        assert [c.word for c in ranked] == ["b", "a"]
        assert all(c.score == 0 and c.positions == [] for c in ranked)

    def test_drops_non_matches(self):
        """Items that don't match are filtered out."""
        ranked = rank_candidates("fb", items("fooBar", "baz", "foo_bar"))
        assert {c.word for c in ranked} == {"fooBar", "foo_bar"}

    def test_score_order(self):
        """Better matches come first."""
        ranked = rank_candidates("art", items("artist", "ArrayRotateTail", "cart"))
        assert [c.word for c in ranked] == ["artist", "ArrayRotateTail", "cart"]
        assert ranked[0].positions == [0, 1, 2]

    def test_alphabetical_tie_break(self):
        """Equal scores sort case-insensitively."""
        ranked = rank_candidates("a", items("ab", "AC", "Ab", "aa"))
        assert [c.word for c in ranked] == ["aa", "ab", "Ab", "AC"]

    def test_distance_tie_break(self, option):
        """Nearer words win at equal score."""
        word_distance = WordDistance(
            option,
            [Range.create(0, 0, 1, 0), Range.create(0, 0, 9, 0)],
            {"near": [Range.create(4, 0, 4, 4)], "nest": [Range.create(0, 5, 0, 9)]},
        )
        ranked = rank_candidates(
            "ne",
            items("near", "nest"),
            word_distance=word_distance,
            position=Position(0, 0),
        )
        assert [(c.word, c.distance) for c in ranked] == [("nest", 0), ("near", 1)]

    def test_no_position_no_distance(self, option):
        """Without a cursor position proximity is skipped."""
        word_distance = WordDistance(
            option, [Range.create(0, 0, 1, 0)], {"nest": [Range.create(4, 0, 4, 4)]}
        )
        ranked = rank_candidates("ne", items("nest"), word_distance=word_distance)
        assert ranked[0].distance == 0

    def test_custom_weights(self):
        """Weights change the order."""
        weights = ScoringWeights(follow_interior_exact=3.0)
        ranked = rank_candidates("ab", items("a_b", "axxb"), weights=weights)
        assert ranked[0].word == "axxb"

    def test_result_type(self):
        """Results carry the original item."""
        item = CompletionItem(word="foo", kind="Function")
        ranked = rank_candidates("f", [item])
        assert isinstance(ranked[0], RankedCandidate)
        assert ranked[0].item is item


class TestRanker:
    """Tests for the configured Ranker."""

    def test_uses_configured_weights(self, config_manager):
        """Scoring updates apply to the next rank() call."""
        ranker = Ranker(config_manager)
        assert ranker.rank("ab", items("a_b", "axxb"))[0].word == "a_b"

        config_manager.update_scoring(ScoringWeights(follow_interior_exact=3.0))
        assert ranker.rank("ab", items("a_b", "axxb"))[0].word == "axxb"

    def test_reloads_after_reset(self, config_manager):
        """Reset replaces the config and the ranker follows."""
        ranker = Ranker(config_manager)
        config_manager.update_scoring(ScoringWeights(follow_interior_exact=3.0))
        config_manager.reset()
        assert ranker.config is config_manager.config
        assert ranker.rank("ab", items("a_b", "axxb"))[0].word == "a_b"

    def test_disabled_word_distance(self, config_manager, option, nested_selection):
        """Disabled proximity makes no provider request."""
        config_manager.update_word_distance(WordDistanceSettings(enabled=False))
        selections = FakeSelectionRanges([nested_selection])
        ranker = Ranker(config_manager, selection_ranges=selections)

        result = run(ranker.start_session(option, CancellationToken()))

        assert result is WordDistance.NONE
        assert selections.calls == []

    def test_configured_timeout(self, config_manager, option, nested_selection):
        """The index request is bounded by the configured timeout."""
        config_manager.update_word_distance(WordDistanceSettings(index_timeout=0.01))
        words = FakeWordRanges({"bar": [Range.create(0, 4, 0, 7)]}, delay=0.5)
        ranker = Ranker(
            config_manager,
            selection_ranges=FakeSelectionRanges([nested_selection]),
            word_ranges=words,
        )
        assert run(ranker.start_session(option, CancellationToken())) is WordDistance.NONE

    def test_session_with_document_index(self, config_manager, option, nested_selection):
        """Default word-range provider scans the document."""
        config_manager.update_word_distance(WordDistanceSettings(index_timeout=1.0))
        ranker = Ranker(config_manager, selection_ranges=FakeSelectionRanges([nested_selection]))

        word_distance = run(ranker.start_session(option, CancellationToken()))
        ranked = ranker.rank(
            "",
            items("def", "bar"),
            word_distance=word_distance,
            position=option.position,
        )
        assert [c.word for c in ranked] == ["def", "bar"]
        ranked = ranker.rank(
            "e",
            items("def", "bar"),
            word_distance=word_distance,
            position=option.position,
        )
        assert [(c.word, c.distance) for c in ranked] == [("def", 1)]
