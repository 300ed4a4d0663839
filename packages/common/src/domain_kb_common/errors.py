"""Custom error types for the domain-kb system.

Operational failures (KB unreachable, LLM down) are raised with explicit
messages at the component boundary and converted to disclaimers by the
orchestration pipeline. Only input validation is surfaced to callers as an
error.
"""

from __future__ import annotations

from typing import Any, Optional


class DomainKBError(Exception):
    """Base exception for all domain-kb errors."""

    pass


class ConfigurationError(DomainKBError):
    """Required configuration is missing or invalid."""

    pass


class KnowledgeBaseError(DomainKBError):
    """Error loading or reading the knowledge base file."""

    pass


class TransportError(DomainKBError):
    """Error on the stdio JSON-RPC channel to a child process."""

    pass


class TransportStartError(TransportError):
    """Child process could not be launched."""

    pass


class TransportClosedError(TransportError):
    """Child process closed its output (or was disposed) before replying."""

    pass


class RpcTimeoutError(TransportError):
    """No reply with the expected id arrived before the deadline."""

    def __init__(self, request_id: int | str, timeout: float):
        self.request_id = request_id
        self.timeout = timeout
        super().__init__(f"Timed out after {timeout:g}s waiting for response id {request_id}")


class RpcError(TransportError):
    """Reply carried a JSON-RPC error object."""

    def __init__(self, code: int, message: str, data: Optional[Any] = None):
        self.code = code
        self.message = message
        self.data = data
        super().__init__(f"RPC error {code}: {message}")


class ToolCallError(TransportError):
    """Tool call completed but the server flagged it as an error."""

    pass


class ReplyExtractionError(DomainKBError):
    """Tool reply did not match any known content shape."""

    pass


class LLMError(DomainKBError):
    """Error from the language-model backend."""

    pass


class InvalidQuestionError(DomainKBError):
    """Question failed input validation; the only caller-facing error."""

    pass
