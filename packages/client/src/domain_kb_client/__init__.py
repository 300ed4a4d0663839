"""Domain-KB client: locate and talk to a KB server over stdio JSON-RPC.

Quick Start
-----------
>>> from domain_kb_client import ExecutableResolver, StdioRpcTransport
>>> resolution = ExecutableResolver().resolve("domain-kb-server")
>>> if resolution.resolved:
...     async with await StdioRpcTransport.start(
...         resolution.launch_command, resolution.launch_args
...     ) as transport:
...         await initialize(transport, "my-client", "0.1.0")
...         names = await list_tool_names(transport)
"""

from .mcp import (
    PROTOCOL_VERSION,
    call_tool,
    extract_first_text,
    initialize,
    list_tool_names,
)
from .models import (
    ExecutableResolution,
    RpcEnvelope,
    RpcErrorObject,
    TextContent,
    ToolCallResult,
)
from .resolver import ExecutableResolver, strip_quotes
from .transport import DEFAULT_TIMEOUT, StdioRpcTransport

__all__ = [
    # Resolution
    "ExecutableResolver",
    "ExecutableResolution",
    "strip_quotes",
    # Transport
    "StdioRpcTransport",
    "DEFAULT_TIMEOUT",
    # Models
    "RpcEnvelope",
    "RpcErrorObject",
    "TextContent",
    "ToolCallResult",
    # MCP calls
    "PROTOCOL_VERSION",
    "initialize",
    "list_tool_names",
    "call_tool",
    "extract_first_text",
]

__version__ = "0.1.0"
