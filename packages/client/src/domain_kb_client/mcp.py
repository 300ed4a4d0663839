"""MCP client calls on top of :class:`StdioRpcTransport`.

Only the subset the orchestrator needs: the ``initialize`` handshake,
``tools/list`` and ``tools/call``, plus pulling the first text payload out of
a tool reply.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import ValidationError

from domain_kb_common import ReplyExtractionError, ToolCallError, get_logger

from domain_kb_client.models import TextContent, ToolCallResult
from domain_kb_client.transport import StdioRpcTransport

logger = get_logger(__name__)

PROTOCOL_VERSION = "2024-11-05"


async def initialize(
    transport: StdioRpcTransport,
    client_name: str,
    client_version: str,
    protocol_version: str = PROTOCOL_VERSION,
    timeout: Optional[float] = None,
) -> dict[str, Any]:
    """Perform the MCP handshake.

    Sends ``initialize`` and, once it is answered, the
    ``notifications/initialized`` notification.

    Returns:
        The server's initialize result (serverInfo, capabilities, ...)
    """
    result = await transport.send(
        "initialize",
        {
            "protocolVersion": protocol_version,
            "capabilities": {},
            "clientInfo": {"name": client_name, "version": client_version},
        },
        timeout=timeout,
    )
    await transport.notify("notifications/initialized")

    result = result if isinstance(result, dict) else {}
    logger.debug(
        "mcp_initialized",
        server=(result.get("serverInfo") or {}).get("name"),
        protocol=result.get("protocolVersion"),
    )
    return result


async def list_tool_names(transport: StdioRpcTransport, timeout: Optional[float] = None) -> list[str]:
    """Return the names of the tools the server exposes."""
    result = await transport.send("tools/list", {}, timeout=timeout)
    tools = result.get("tools", []) if isinstance(result, dict) else []
    return [
        tool["name"]
        for tool in tools
        if isinstance(tool, dict) and isinstance(tool.get("name"), str)
    ]


async def call_tool(
    transport: StdioRpcTransport,
    name: str,
    arguments: Optional[dict[str, Any]] = None,
    timeout: Optional[float] = None,
) -> Any:
    """Invoke a tool and return the raw ``result`` member of the reply."""
    return await transport.send(
        "tools/call",
        {"name": name, "arguments": arguments or {}},
        timeout=timeout,
    )


def _find_text_item(node: Any) -> Optional[str]:
    """Depth-first search for the first ``{"type": "text", "text": str}`` object."""
    if isinstance(node, dict):
        if node.get("type") == "text" and isinstance(node.get("text"), str):
            return node["text"]
        children = node.values()
    elif isinstance(node, list):
        children = node
    else:
        return None

    for child in children:
        found = _find_text_item(child)
        if found is not None:
            return found
    return None


def extract_first_text(result: Any) -> str:
    """Return the first text payload of a ``tools/call`` result.

    Decodes the standard ``content`` array first; if the reply does not have
    that shape, scans the JSON tree once for a text item.

    Raises:
        ToolCallError: The server marked the call as an error
        ReplyExtractionError: No text item anywhere in the reply
    """
    try:
        call = ToolCallResult.model_validate(result)
    except ValidationError:
        call = None

    if call is not None:
        for item in call.content:
            try:
                text = TextContent.model_validate(item).text
            except ValidationError:
                continue
            if call.is_error:
                raise ToolCallError(f"Tool reported an error: {text}")
            return text
        if call.is_error:
            raise ToolCallError("Tool reported an error without details")

    found = _find_text_item(result)
    if found is not None:
        logger.debug("reply_text_found_by_fallback")
        return found

    raise ReplyExtractionError(f"No text content in tool reply of type {type(result).__name__}")
