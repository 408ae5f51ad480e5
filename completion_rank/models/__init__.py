"""Data models for completion-rank."""

from .text import Position, Range, SelectionRange, TextDocument
from .completion import CompleteOption, CompletionItem
from .exceptions import (
    RankError,
    ConfigError,
    ConfigValidationError,
    ProviderError,
)

__all__ = [
    # Text positions
    "Position",
    "Range",
    "SelectionRange",
    "TextDocument",
    # Completion context
    "CompleteOption",
    "CompletionItem",
    # Exceptions
    "RankError",
    "ConfigError",
    "ConfigValidationError",
    "ProviderError",
]
