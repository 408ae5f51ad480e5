"""Completion session context and candidate items.

These only carry what the ranking core reads. Building items from
language-server payloads belongs to the editor layer.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .text import Position, TextDocument


@dataclass
class CompleteOption:
    """Context captured when a completion session starts.

    Attributes:
        document: Snapshot of the buffer the cursor is in
        position: Cursor position at session start
        word: Word under the cursor (may be partially typed)
        input: Text typed since the completion start column
        bufnr: Editor buffer number, used to match cursor events
    """

    document: TextDocument
    position: Position
    word: str = ""
    input: str = ""
    bufnr: int = 0


@dataclass
class CompletionItem:
    """A candidate shown in the completion popup."""

    word: str
    abbr: str = ""
    kind: str = ""
    menu: str = ""
    source: str = ""
    data: dict = field(default_factory=dict)

    @property
    def display_word(self) -> str:
        """Word used for matching and proximity lookups."""
        return self.word
