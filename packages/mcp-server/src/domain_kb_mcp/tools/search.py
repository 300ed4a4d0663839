"""Search tool for the KB server.

Exposes case-insensitive substring search over the loaded knowledge base.
"""

from __future__ import annotations

from typing import Optional

from fastmcp import FastMCP

from domain_kb_common import get_logger

from domain_kb_mcp.formatters import format_search_error, format_search_results
from domain_kb_mcp.service import KnowledgeBaseService

logger = get_logger(__name__)

DEFAULT_MAX_RESULTS = 3
MIN_RESULTS = 1
MAX_RESULTS = 5


def clamp_max_results(max_results: Optional[int]) -> int:
    """Apply the default and clamp into MIN_RESULTS..MAX_RESULTS."""
    if max_results is None:
        max_results = DEFAULT_MAX_RESULTS
    return max(MIN_RESULTS, min(MAX_RESULTS, max_results))


def register_search_tools(mcp: FastMCP, service: KnowledgeBaseService) -> None:
    """Register search tools with the MCP server."""

    @mcp.tool()
    async def search_knowledge(query: str, max_results: Optional[int] = None) -> str:
        """Search the knowledge base for a keyword or phrase.

        Matching is case-insensitive exact substring; results are ordered by
        position in the text.

        Args:
            query: Keyword or phrase to look for
            max_results: Maximum number of results (1-5, default 3)

        Returns:
            JSON object with:
            - results: list of {content, context, matchInfo, position, truncated}
            - totalMatches: number of results returned
            - query: the query as received
        """
        query = query or ""
        if not query.strip():
            logger.warning("search_knowledge_empty_query")
            return format_search_results(query, [])

        limit = clamp_max_results(max_results)
        try:
            matches = service.search(query, limit)
        except Exception as e:
            logger.error("search_knowledge_failed", query=query, error=str(e))
            return format_search_error(query)

        logger.info("search_knowledge_called", query=query, max_results=limit, result_count=len(matches))
        return format_search_results(query, matches)
