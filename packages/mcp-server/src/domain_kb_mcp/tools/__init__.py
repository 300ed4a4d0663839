"""MCP tool implementations for the KB server."""

from domain_kb_mcp.tools.content import register_content_tools
from domain_kb_mcp.tools.info import register_info_tools
from domain_kb_mcp.tools.search import register_search_tools

__all__ = [
    "register_content_tools",
    "register_info_tools",
    "register_search_tools",
]
