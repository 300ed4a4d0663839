"""In-memory substring search over the knowledge base text.

Matching is case-insensitive and exact (no tokenizing, no fuzziness).
Occurrences are reported left to right; scanning resumes one character past
the previous match start, so overlapping occurrences are enumerable:

    >>> engine = SearchEngine(context_characters=2)
    >>> engine.load("aaaa")
    >>> [m.position for m in engine.search("aa", max_results=10)]
    [0, 1, 2]
"""

from __future__ import annotations

import re
from typing import Optional

from domain_kb_mcp.models import SearchMatch

DEFAULT_CONTEXT_CHARACTERS = 100
DEFAULT_MAX_CONTENT_LENGTH = 3000


class SearchEngine:
    """Position-ordered substring search with bounded context windows.

    Parameters
    ----------
    context_characters : int
        Width of the context window on each side of a match. The matched
        window uses half of it.
    max_content_length : int
        Upper bound on ``matched_text``; longer windows are truncated.
    """

    def __init__(
        self,
        context_characters: int = DEFAULT_CONTEXT_CHARACTERS,
        max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH,
    ) -> None:
        if context_characters < 0:
            raise ValueError("context_characters must be >= 0")
        if max_content_length < 1:
            raise ValueError("max_content_length must be >= 1")
        self.context_characters = context_characters
        self.max_content_length = max_content_length
        self._content: Optional[str] = None

    @property
    def is_loaded(self) -> bool:
        return self._content is not None

    @property
    def content(self) -> str:
        return self._content or ""

    def load(self, content: str) -> None:
        """Load the text to search. Later calls replace it."""
        self._content = content

    def _window(self, start: int, end: int) -> str:
        content = self.content
        return content[max(0, start) : min(len(content), end)]

    def _build_match(self, position: int, query_length: int) -> SearchMatch:
        ctx = self.context_characters
        half = ctx // 2
        match_end = position + query_length

        matched = self._window(position - half, match_end + half)
        context = self._window(position - ctx, match_end + ctx)

        truncated = len(matched) > self.max_content_length
        if truncated:
            matched = matched[: self.max_content_length]

        return SearchMatch(
            position=position,
            matched_text=matched,
            context_text=context,
            truncated=truncated,
        )

    def search(self, query: str, max_results: int) -> list[SearchMatch]:
        """Find up to ``max_results`` occurrences of ``query``.

        Returns an empty list when nothing is loaded, the query is blank or
        ``max_results`` is not positive.
        """
        if self._content is None or not query or not query.strip():
            return []
        if max_results <= 0:
            return []

        pattern = re.compile(re.escape(query), re.IGNORECASE)
        content = self._content
        matches: list[SearchMatch] = []
        start = 0

        while len(matches) < max_results and start <= len(content):
            found = pattern.search(content, start)
            if found is None:
                break
            position = found.start()
            matches.append(self._build_match(position, found.end() - position))
            start = position + 1

        return matches
