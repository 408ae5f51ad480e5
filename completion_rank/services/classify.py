"""Character classification and word-boundary detection.

Every scorer inspects characters by code point. A word boundary is where a
new sub-word starts:
- the first character of the word
- a cased letter after a separator (``foo_bar`` -> ``b``)
- an uppercase letter after a lowercase letter or digit (``fooBar`` -> ``B``)

Digits and punctuation never start a boundary themselves.
"""

from __future__ import annotations

from enum import Enum
from typing import Sequence


class CharClass(Enum):
    """Kind of a single code point."""

    SEPARATOR = "separator"  # Not alphanumeric
    LOWER = "lower"
    UPPER = "upper"
    DIGIT = "digit"
    OTHER = "other"  # Alphanumeric without case (e.g. CJK)


_LETTERS = (CharClass.LOWER, CharClass.UPPER)
_OPENERS = (CharClass.SEPARATOR, CharClass.OTHER)
_CAMEL_PREDECESSORS = (CharClass.LOWER, CharClass.DIGIT)


def classify(code: int) -> CharClass:
    """Classify a code point."""
    # ASCII fast path, hit for nearly every identifier
    if 97 <= code <= 122:
        return CharClass.LOWER
    if 65 <= code <= 90:
        return CharClass.UPPER
    if 48 <= code <= 57:
        return CharClass.DIGIT
    if code < 128:
        return CharClass.SEPARATOR

    char = chr(code)
    if not char.isalnum():
        return CharClass.SEPARATOR
    if char.isdigit():
        return CharClass.DIGIT
    if char.islower():
        return CharClass.LOWER
    if char.isupper():
        return CharClass.UPPER
    return CharClass.OTHER


def is_word_boundary(codes: Sequence[int], index: int) -> bool:
    """Check whether a sub-word starts at ``index``."""
    if index == 0:
        return True
    current = classify(codes[index])
    if current not in _LETTERS:
        return False
    previous = classify(codes[index - 1])
    if previous in _OPENERS:
        return True
    return current is CharClass.UPPER and previous in _CAMEL_PREDECESSORS


def boundary_mask(codes: Sequence[int]) -> list[bool]:
    """Boundary flag for every index of ``codes``."""
    return [is_word_boundary(codes, i) for i in range(len(codes))]


def get_char_codes(text: str) -> list[int]:
    """Convert text to a list of code points."""
    return [ord(ch) for ch in text]
