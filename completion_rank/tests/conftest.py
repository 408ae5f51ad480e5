"""Shared test fixtures for completion-rank."""

import asyncio
from pathlib import Path

import pytest

from completion_rank.models import CompleteOption, Position, Range, SelectionRange, TextDocument
from completion_rank.services.cancellation import CancellationToken
from completion_rank.services.config import ConfigManager
from completion_rank.services.events import EventBus


class FakeSelectionRanges:
    """Selection-range provider returning a fixed answer."""

    def __init__(self, selections: list[SelectionRange] | None = None, error: Exception | None = None):
        self.selections = selections
        self.error = error
        self.calls: list[tuple[TextDocument, list[Position]]] = []

    async def provide_selection_ranges(self, document, positions, token):
        self.calls.append((document, positions))
        if self.error is not None:
            raise self.error
        return self.selections


class FakeWordRanges:
    """Word-range provider returning a fixed index after an optional delay."""

    def __init__(
        self,
        index: dict[str, list[Range]] | None = None,
        delay: float = 0.0,
        error: Exception | None = None,
    ):
        self.index = index
        self.delay = delay
        self.error = error
        self.regions: list[Range] = []
        self.tokens: list[CancellationToken] = []

    async def compute_word_ranges(self, document, region, token):
        self.regions.append(region)
        self.tokens.append(token)
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.index


def run(coro):
    return asyncio.run(coro)


@pytest.fixture(autouse=True)
def bus():
    """Fresh event bus for each test."""
    EventBus.reset()
    yield EventBus.get()
    EventBus.reset()


@pytest.fixture
def config_manager(tmp_path: Path) -> ConfigManager:
    """Create a ConfigManager with temp directory."""
    return ConfigManager(config_dir=tmp_path / "config")


@pytest.fixture
def document() -> TextDocument:
    """Two-line buffer used by the proximity tests."""
    return TextDocument(uri="file:///tmp/t.txt", text="foo bar\ndef")


@pytest.fixture
def option(document: TextDocument) -> CompleteOption:
    """Completion session at the start of the first line."""
    return CompleteOption(document=document, position=Position(0, 0), bufnr=1)


@pytest.fixture
def nested_selection() -> SelectionRange:
    """Inner scope on line 0, outer scope over the whole buffer."""
    return SelectionRange(
        range=Range.create(0, 0, 1, 0),
        parent=SelectionRange(range=Range.create(0, 0, 3, 0)),
    )


@pytest.fixture
def token() -> CancellationToken:
    return CancellationToken()
