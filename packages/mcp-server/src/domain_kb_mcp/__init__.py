"""Knowledge base MCP server.

Loads a text file once and serves it over the Model Context Protocol
(stdio transport): full content, info, and substring search.
"""

from domain_kb_mcp.config import KnowledgeBaseConfig
from domain_kb_mcp.engine import SearchEngine
from domain_kb_mcp.models import KnowledgeBaseInfo, SearchMatch
from domain_kb_mcp.service import KnowledgeBaseService

__all__ = [
    "KnowledgeBaseConfig",
    "KnowledgeBaseInfo",
    "KnowledgeBaseService",
    "SearchEngine",
    "SearchMatch",
]
__version__ = "0.1.0"
