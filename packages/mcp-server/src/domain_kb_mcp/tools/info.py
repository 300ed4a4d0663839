"""Knowledge base info tool."""

from __future__ import annotations

from fastmcp import FastMCP

from domain_kb_common import get_logger

from domain_kb_mcp.formatters import format_info
from domain_kb_mcp.models import KnowledgeBaseInfo
from domain_kb_mcp.service import KnowledgeBaseService

logger = get_logger(__name__)


def register_info_tools(mcp: FastMCP, service: KnowledgeBaseService) -> None:
    """Register the info tool with the MCP server."""

    @mcp.tool()
    async def get_kb_info() -> str:
        """Get information about the knowledge base.

        Returns:
            JSON object with:
            - info: sizeBytes, contentLength, available, lastModified,
              description, filePath, error
            - status: human-readable availability message
        """
        try:
            info = service.get_info()
        except Exception as e:
            logger.error("get_kb_info_failed", error=str(e))
            return format_info(
                KnowledgeBaseInfo(available=False, error=str(e)),
                status="Error retrieving knowledge base information",
            )

        logger.info(
            "get_kb_info_called",
            available=info.available,
            content_length=info.content_length,
        )
        return format_info(info)
