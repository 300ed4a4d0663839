"""Full-content tool for the KB server."""

from __future__ import annotations

from fastmcp import FastMCP

from domain_kb_common import get_logger

from domain_kb_mcp.formatters import format_content, format_content_error
from domain_kb_mcp.service import KnowledgeBaseService

logger = get_logger(__name__)


def register_content_tools(mcp: FastMCP, service: KnowledgeBaseService) -> None:
    """Register the raw-content tool with the MCP server."""

    @mcp.tool()
    async def get_kb_content() -> str:
        """Return the full raw knowledge base content.

        Intended for small and medium text files; the whole file is returned
        in one reply.

        Returns:
            JSON object with:
            - status: "ok", "empty" or "error"
            - contentLength: number of characters
            - content: the knowledge base text (absent on error)
        """
        try:
            raw = service.get_raw_content()
        except Exception as e:
            logger.error("get_kb_content_failed", error=str(e))
            return format_content_error(str(e))

        logger.info("get_kb_content_called", content_length=len(raw))
        return format_content(raw)
