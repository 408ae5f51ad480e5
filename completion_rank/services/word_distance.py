"""WordDistance: structural proximity between the cursor and a candidate.

Distance is measured in syntactic scopes rather than characters. The
selection-range provider gives the chain of scopes around the cursor
(innermost first); the word-range provider gives every occurrence of every
word inside the outermost scope. A candidate's distance is the index of the
innermost scope that contains both the cursor and one of its occurrences:

    0   same innermost scope as the cursor
    n   found only in the n-th enclosing scope
    max found, but outside every recorded scope

Every failure path (disabled, unsupported, empty, timed out, cancelled)
resolves to WordDistance.NONE, whose distance is always 0. A slow language
server must never stall completion, so there is no retry.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Mapping, Protocol, Sequence, TypeVar

from ..models.completion import CompleteOption, CompletionItem
from ..models.text import Position, Range, SelectionRange, TextDocument
from .cancellation import CancellationToken
from .config import WordDistanceSettings
from .events import CompletionSessionEndedEvent, CursorMovedEvent, EventBus

logger = logging.getLogger(__name__)

T = TypeVar("T")

DEFAULT_INDEX_TIMEOUT = WordDistanceSettings().index_timeout


class SelectionRangeProvider(Protocol):
    """Supplies nested selection ranges for positions in a document."""

    async def provide_selection_ranges(
        self,
        document: TextDocument,
        positions: list[Position],
        token: CancellationToken,
    ) -> list[SelectionRange] | None:
        ...


class WordRangeProvider(Protocol):
    """Supplies the occurrence index of words inside a region."""

    async def compute_word_ranges(
        self,
        document: TextDocument,
        region: Range,
        token: CancellationToken,
    ) -> dict[str, list[Range]] | None:
        ...


async def _race(
    request: Callable[[CancellationToken], Awaitable[T]],
    token: CancellationToken,
    timeout: float | None = None,
) -> tuple[bool, T | None]:
    """Run a provider call against cancellation and an optional timeout.

    The provider gets a child token that follows ``token`` and is also
    cancelled when the call loses, so work running in a thread stops too.
    Returns (completed, result). Provider exceptions propagate to the caller.
    """
    child = CancellationToken()
    unlink = token.on_cancelled(child.cancel)
    task = asyncio.ensure_future(request(child))
    cancelled = asyncio.ensure_future(token.wait())
    try:
        done, _ = await asyncio.wait(
            {task, cancelled},
            timeout=timeout,
            return_when=asyncio.FIRST_COMPLETED,
        )
    finally:
        unlink()
        if not task.done():
            child.cancel()
        for pending in (task, cancelled):
            if not pending.done():
                pending.cancel()
    if task not in done or token.is_cancelled:
        return False, None
    return True, task.result()


class WordDistance:
    """Per-session proximity scorer.

    Holds an immutable snapshot of the scope chain and word index taken
    when the session started. Moving the cursor to another line makes the
    snapshot stale; a new instance must be created for the new position.
    """

    NONE: WordDistance

    def __init__(
        self,
        option: CompleteOption | None = None,
        ranges: Sequence[Range] = (),
        word_ranges: Mapping[str, Sequence[Range]] | None = None,
    ) -> None:
        self._ranges: tuple[Range, ...] = tuple(ranges)
        self._word_ranges: dict[str, tuple[Range, ...]] = {
            word: tuple(spans) for word, spans in (word_ranges or {}).items()
        }
        self._cache: dict[tuple[Position, str], int] = {}
        self._stale = False
        self._bufnr = option.bufnr if option else 0
        self._line = option.position.line if option else -1
        self._subscribed = option is not None
        if self._subscribed:
            bus = EventBus.get()
            bus.subscribe(CursorMovedEvent, self._on_cursor_moved, weak=True)
            bus.subscribe(CompletionSessionEndedEvent, self._on_session_ended, weak=True)

    @classmethod
    async def create(
        cls,
        enabled: bool,
        option: CompleteOption | None,
        token: CancellationToken,
        *,
        selection_ranges: SelectionRangeProvider | None = None,
        word_ranges: WordRangeProvider | None = None,
        timeout: float | None = None,
    ) -> WordDistance:
        """Build a scorer for the session described by ``option``.

        Args:
            enabled: Feature switch; disabled returns NONE without any request
            option: Completion session context (document and cursor)
            token: Cancellation token of the completion session
            selection_ranges: Selection-range provider
            word_ranges: Word-range index provider
            timeout: Seconds allowed for the word index request

        Returns:
            A session scorer, or WordDistance.NONE when no signal is available
        """
        if not enabled:
            return cls.NONE
        if option is None or selection_ranges is None or word_ranges is None:
            logger.debug("Word distance unavailable: missing option or provider")
            return cls.NONE
        if token.is_cancelled:
            return cls.NONE

        document = option.document
        try:
            completed, selections = await _race(
                lambda child: selection_ranges.provide_selection_ranges(
                    document, [option.position], child
                ),
                token,
            )
        except Exception as e:
            logger.debug(f"Selection range provider failed: {e}")
            return cls.NONE
        if not completed or not selections:
            logger.debug("No selection ranges for word distance")
            return cls.NONE

        ranges = list(selections[0].walk())
        outermost = ranges[-1]
        if outermost.is_empty:
            return cls.NONE

        if timeout is None:
            timeout = DEFAULT_INDEX_TIMEOUT
        try:
            completed, index = await _race(
                lambda child: word_ranges.compute_word_ranges(document, outermost, child),
                token,
                timeout,
            )
        except Exception as e:
            logger.debug(f"Word range provider failed: {e}")
            return cls.NONE
        if not completed:
            logger.debug(f"Word range index not ready within {timeout}s")
            return cls.NONE
        if not index:
            return cls.NONE

        return cls(option, ranges, index)

    @property
    def ranges(self) -> tuple[Range, ...]:
        """Scope chain, innermost first."""
        return self._ranges

    @property
    def max_distance(self) -> int:
        return len(self._ranges)

    @property
    def is_stale(self) -> bool:
        return self._stale

    def distance(self, position: Position, item: CompletionItem | str) -> int:
        """Scope distance from ``position`` to the nearest occurrence of the item's word.

        Returns 0 when there is no signal: NONE or stale instance, unknown
        word, empty word, or a word that only occurs at the cursor itself.
        """
        if self._stale or not self._ranges:
            return 0
        word = item if isinstance(item, str) else item.display_word
        if not word:
            return 0
        key = (position, word)
        if key not in self._cache:
            self._cache[key] = self._compute(position, word)
        return self._cache[key]

    def _compute(self, position: Position, word: str) -> int:
        best: int | None = None
        for span in self._word_ranges.get(word, ()):
            if span.contains(position):
                # The token being typed
                continue
            level = self._scope_level(position, span)
            if best is None or level < best:
                best = level
                if best == 0:
                    break
        return best if best is not None else 0

    def _scope_level(self, position: Position, span: Range) -> int:
        # Innermost scope shared by the cursor and the occurrence
        for level, scope in enumerate(self._ranges):
            if scope.contains(position) and scope.contains(span):
                return level
        return self.max_distance

    def _on_cursor_moved(self, event: CursorMovedEvent) -> None:
        if event.bufnr == self._bufnr and event.line != self._line and not self._stale:
            logger.debug(f"Cursor left line {self._line}, word distance is stale")
            self._stale = True

    def _on_session_ended(self, event: CompletionSessionEndedEvent) -> None:
        if event.bufnr == self._bufnr:
            self._stale = True

    def dispose(self) -> None:
        """Stop listening for editor events and drop the snapshot."""
        if self._subscribed:
            bus = EventBus.get()
            bus.unsubscribe(CursorMovedEvent, self._on_cursor_moved)
            bus.unsubscribe(CompletionSessionEndedEvent, self._on_session_ended)
            self._subscribed = False
        self._stale = True
        self._cache.clear()


WordDistance.NONE = WordDistance()
