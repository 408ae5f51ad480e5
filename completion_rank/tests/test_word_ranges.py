"""Tests for the document word index provider."""

import re

import pytest
from conftest import run

from completion_rank.models import ProviderError, Range, TextDocument
from completion_rank.services.cancellation import CancellationToken
from completion_rank.services.word_ranges import DocumentWordRanges


def whole(document: TextDocument) -> Range:
    return Range.create(0, 0, document.line_count, 0)


@pytest.fixture
def source() -> TextDocument:
    return TextDocument(
        uri="file:///tmp/a.py",
        text="def foo(bar):\n    return bar + 42\r\n_baz = foo\n",
    )


class TestCollect:
    """Tests for DocumentWordRanges.collect()."""

    def test_full_document(self, source):
        """Every identifier occurrence is indexed."""
        index = DocumentWordRanges().collect(source, whole(source))
        assert index["bar"] == [Range.create(0, 8, 0, 11), Range.create(1, 11, 1, 14)]
        assert index["foo"] == [Range.create(0, 4, 0, 7), Range.create(2, 7, 2, 10)]
        assert index["_baz"] == [Range.create(2, 0, 2, 4)]
        assert "42" not in index

    def test_partial_region(self, source):
        """Only text inside the region counts."""
        index = DocumentWordRanges().collect(source, Range.create(0, 4, 1, 10))
        assert set(index) == {"foo", "bar", "return"}
        assert index["bar"] == [Range.create(0, 8, 0, 11)]

    def test_region_past_end_clamped(self, document):
        """Regions reaching beyond the document are clamped."""
        index = DocumentWordRanges().collect(document, Range.create(0, 0, 10, 0))
        assert index["def"] == [Range.create(1, 0, 1, 3)]

    def test_region_outside_document(self, document):
        """A region starting after the last line is a provider error."""
        with pytest.raises(ProviderError):
            DocumentWordRanges().collect(document, Range.create(5, 0, 6, 0))

    def test_min_length(self, document):
        """Short words can be skipped."""
        index = DocumentWordRanges(min_length=4).collect(document, whole(document))
        assert index == {}

    def test_custom_pattern(self, document):
        """The word pattern is configurable."""
        index = DocumentWordRanges(pattern=re.compile(r"[a-z]")).collect(
            document, whole(document)
        )
        assert len(index["o"]) == 2

    def test_cancelled(self, document):
        """Cancelled scans return None."""
        token = CancellationToken()
        token.cancel()
        assert DocumentWordRanges().collect(document, whole(document), token) is None

    def test_unicode_identifiers(self):
        """Non-ASCII letters are word characters."""
        doc = TextDocument(uri="file:///tmp/u.txt", text="größe = 1")
        assert DocumentWordRanges().collect(doc, whole(doc)) == {
            "größe": [Range.create(0, 0, 0, 5)]
        }


class TestComputeWordRanges:
    """Tests for the async provider entry point."""

    def test_runs_off_loop(self, document, token):
        """Async call returns the same index."""
        provider = DocumentWordRanges()
        index = run(provider.compute_word_ranges(document, whole(document), token))
        assert index == provider.collect(document, whole(document))
