"""Word occurrence index over a document region.

Reference implementation of the word-range provider used by WordDistance
when no language server supplies one. Scanning runs in a worker thread so
large regions don't block the event loop; the cancellation token is checked
between lines.
"""

from __future__ import annotations

import asyncio
import logging
import re

from ..models.exceptions import ProviderError
from ..models.text import Range, TextDocument
from .cancellation import CancellationToken

logger = logging.getLogger(__name__)

# Identifiers: a letter or underscore followed by word characters
WORD_PATTERN = re.compile(r"[^\W\d]\w*", re.U)


class DocumentWordRanges:
    """Computes ``word -> [Range]`` for a region of a TextDocument.

    Example:
        provider = DocumentWordRanges()
        index = await provider.compute_word_ranges(doc, region, token)
    """

    def __init__(self, pattern: re.Pattern[str] = WORD_PATTERN, min_length: int = 1):
        self._pattern = pattern
        self._min_length = min_length

    def collect(
        self,
        document: TextDocument,
        region: Range,
        token: CancellationToken = CancellationToken.NONE,
    ) -> dict[str, list[Range]] | None:
        """Scan the region synchronously. Returns None when cancelled.

        Raises:
            ProviderError: If the region starts past the end of the document
        """
        if region.start.line >= document.line_count:
            raise ProviderError(
                f"Region starts at line {region.start.line}, document has {document.line_count}",
                "Request ranges from a current document snapshot",
            )
        index: dict[str, list[Range]] = {}
        last_line = min(region.end.line, document.line_count - 1)
        for line_no in range(region.start.line, last_line + 1):
            if token.is_cancelled:
                logger.debug(f"Word range scan cancelled at line {line_no}")
                return None
            text = document.lines[line_no]
            start = region.start.character if line_no == region.start.line else 0
            end = region.end.character if line_no == region.end.line else len(text)
            for match in self._pattern.finditer(text, start, end):
                word = match.group()
                if len(word) < self._min_length:
                    continue
                index.setdefault(word, []).append(
                    Range.create(line_no, match.start(), line_no, match.end())
                )
        return index

    async def compute_word_ranges(
        self,
        document: TextDocument,
        region: Range,
        token: CancellationToken,
    ) -> dict[str, list[Range]] | None:
        """Scan the region without blocking the event loop."""
        return await asyncio.to_thread(self.collect, document, region, token)
