"""Text position types shared by the proximity scorer and its providers.

Positions are zero-based (line, character) pairs. A Range is a span from
``start`` to ``end``; containment is inclusive at both ends so that a range
always contains itself and a collapsed range at its boundary.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import total_ordering
from typing import Iterator


@total_ordering
@dataclass(frozen=True)
class Position:
    """A zero-based line/character location in a document."""

    line: int
    character: int

    def __lt__(self, other: Position) -> bool:
        return (self.line, self.character) < (other.line, other.character)


@dataclass(frozen=True)
class Range:
    """A span between two positions (start <= end)."""

    start: Position
    end: Position

    @classmethod
    def create(cls, start_line: int, start_character: int, end_line: int, end_character: int) -> Range:
        """Build a range from four integers."""
        return cls(Position(start_line, start_character), Position(end_line, end_character))

    @property
    def is_empty(self) -> bool:
        """True when the range has collapsed to a single point."""
        return self.start == self.end

    def contains(self, other: Range | Position) -> bool:
        """Check whether a position or range lies inside this range."""
        if isinstance(other, Position):
            return self.start <= other <= self.end
        return self.start <= other.start and other.end <= self.end


@dataclass(frozen=True)
class SelectionRange:
    """A syntactic scope around the cursor, linked to its enclosing scope."""

    range: Range
    parent: SelectionRange | None = None

    def walk(self) -> Iterator[Range]:
        """Yield ranges from this (innermost) scope outward."""
        node: SelectionRange | None = self
        while node is not None:
            yield node.range
            node = node.parent


_LINE_BREAK = re.compile(r"\r\n|\r|\n")


@dataclass
class TextDocument:
    """Minimal read-only text snapshot handed to providers.

    Editors own the real buffer; this only carries what the reference
    providers need to compute ranges.
    """

    uri: str
    text: str
    version: int = 0
    _lines: list[str] | None = field(default=None, init=False, repr=False, compare=False)

    @property
    def lines(self) -> list[str]:
        if self._lines is None:
            self._lines = _LINE_BREAK.split(self.text)
        return self._lines

    @property
    def line_count(self) -> int:
        return len(self.lines)
