"""Shared configuration, logging and error types for domain-kb packages."""

from domain_kb_common.config import Settings, get_settings
from domain_kb_common.errors import (
    ConfigurationError,
    DomainKBError,
    InvalidQuestionError,
    KnowledgeBaseError,
    LLMError,
    ReplyExtractionError,
    RpcError,
    RpcTimeoutError,
    ToolCallError,
    TransportClosedError,
    TransportError,
    TransportStartError,
)
from domain_kb_common.logging_config import configure_logging, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "DomainKBError",
    "ConfigurationError",
    "KnowledgeBaseError",
    "TransportError",
    "TransportStartError",
    "TransportClosedError",
    "RpcTimeoutError",
    "RpcError",
    "ToolCallError",
    "ReplyExtractionError",
    "LLMError",
    "InvalidQuestionError",
]
