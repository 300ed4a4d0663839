"""Pydantic models for the stdio JSON-RPC client.

Wire models use camelCase aliases so they round-trip against MCP servers.
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class RpcErrorObject(BaseModel):
    """JSON-RPC error member."""

    code: int = Field(description="Error code (negative integer)")
    message: str = Field(description="Human-readable message")
    data: Optional[Any] = Field(default=None, description="Optional error payload")


class RpcEnvelope(BaseModel):
    """A single JSON-RPC 2.0 message (request, notification or reply)."""

    model_config = ConfigDict(extra="allow")

    jsonrpc: Literal["2.0"] = "2.0"
    id: Optional[int | str] = Field(default=None, description="Absent on notifications")
    method: Optional[str] = Field(default=None)
    params: Optional[dict[str, Any] | list[Any]] = Field(default=None)
    result: Optional[Any] = Field(default=None)
    error: Optional[RpcErrorObject] = Field(default=None)

    @model_validator(mode="after")
    def _result_xor_error(self) -> "RpcEnvelope":
        if self.error is not None and self.result is not None:
            raise ValueError("reply cannot carry both result and error")
        return self

    def to_wire(self) -> dict[str, Any]:
        """Serialize, omitting members that are not set."""
        return self.model_dump(exclude_none=True)


class TextContent(BaseModel):
    """MCP text content item."""

    type: Literal["text"]
    text: str


class ToolCallResult(BaseModel):
    """Result member of a ``tools/call`` reply."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    content: list[dict[str, Any]] = Field(default_factory=list)
    is_error: bool = Field(default=False)


class ExecutableResolution(BaseModel):
    """Outcome of resolving a configured server path.

    ``resolved`` implies ``configured``; ``launch_command`` is set iff
    ``resolved``. ``probed_paths`` lists every candidate checked, in order.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    configured: bool
    resolved: bool
    resolved_path: Optional[str] = None
    launch_command: Optional[str] = None
    launch_args: tuple[str, ...] = ()
    probed_paths: tuple[str, ...] = ()

    @model_validator(mode="after")
    def _check_invariants(self) -> "ExecutableResolution":
        if self.resolved and not self.configured:
            raise ValueError("resolved implies configured")
        if (self.launch_command is not None) != self.resolved:
            raise ValueError("launch_command must be set iff resolved")
        return self
