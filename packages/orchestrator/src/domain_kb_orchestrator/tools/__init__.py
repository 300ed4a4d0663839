"""MCP tool implementations for the orchestrator."""

from domain_kb_orchestrator.tools.ask import register_ask_tools
from domain_kb_orchestrator.tools.status import register_status_tools

__all__ = [
    "register_ask_tools",
    "register_status_tools",
]
