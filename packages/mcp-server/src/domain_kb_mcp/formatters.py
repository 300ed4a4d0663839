"""Response formatters for KB tool outputs.

Every tool returns a JSON object serialized as the single text content item
of its reply.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from domain_kb_mcp.models import KnowledgeBaseInfo, SearchMatch

SEARCH_ERROR_MESSAGE = "Search error occurred. Please try again with a different query."


def to_json(payload: dict[str, Any]) -> str:
    """Serialize a tool payload."""
    return json.dumps(payload, ensure_ascii=False)


def format_content(content: str) -> str:
    """Format the full knowledge base text."""
    return to_json(
        {
            "status": "ok" if content else "empty",
            "contentLength": len(content),
            "content": content,
        }
    )


def format_content_error(message: str) -> str:
    return to_json({"status": "error", "error": message})


def info_to_dict(info: KnowledgeBaseInfo) -> dict[str, Any]:
    return info.model_dump(by_alias=True, mode="json")


def format_info(info: KnowledgeBaseInfo, status: Optional[str] = None) -> str:
    """Format knowledge base info with a human-readable status line."""
    if status is None:
        status = (
            "Knowledge base is available and loaded"
            if info.available
            else "Knowledge base is not available"
        )
    return to_json({"info": info_to_dict(info), "status": status})


def format_match(match: SearchMatch) -> dict[str, Any]:
    """One search result item."""
    return {
        "content": match.matched_text,
        "context": match.context_text,
        "matchInfo": f"Position: {match.position}" + (", truncated" if match.truncated else ""),
        "position": match.position,
        "truncated": match.truncated,
    }


def format_search_results(query: str, matches: list[SearchMatch]) -> str:
    """Format search results."""
    results = [format_match(m) for m in matches]
    return to_json({"results": results, "totalMatches": len(results), "query": query})


def format_search_error(query: str) -> str:
    return to_json(
        {
            "results": [{"content": SEARCH_ERROR_MESSAGE, "matchInfo": "Error"}],
            "totalMatches": 0,
            "query": query,
        }
    )
