"""Explicitly constructed dependencies for the orchestration pipeline."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Sequence

from domain_kb_client import ExecutableResolver, StdioRpcTransport
from domain_kb_common import get_logger

from domain_kb_orchestrator.config import OrchestratorConfig
from domain_kb_orchestrator.llm import ChatClient, create_chat_client

ChatClientFactory = Callable[[OrchestratorConfig], ChatClient]
TransportFactory = Callable[..., Awaitable[StdioRpcTransport]]


def compile_greeting_patterns(patterns: Sequence[str]) -> tuple[re.Pattern[str], ...]:
    return tuple(re.compile(p, re.IGNORECASE) for p in patterns)


@dataclass
class OrchestratorContext:
    """Everything one pipeline needs; nothing is read from globals.

    Tests swap ``chat_client_factory`` and ``transport_factory`` (or build a
    config by hand) instead of mutating the process environment.
    """

    config: OrchestratorConfig
    logger: Any
    greeting_patterns: tuple[re.Pattern[str], ...]
    resolver: ExecutableResolver
    chat_client_factory: ChatClientFactory = create_chat_client
    transport_factory: TransportFactory = field(default=StdioRpcTransport.start)

    @classmethod
    def from_config(
        cls,
        config: Optional[OrchestratorConfig] = None,
        *,
        chat_client_factory: Optional[ChatClientFactory] = None,
        transport_factory: Optional[TransportFactory] = None,
        resolver: Optional[ExecutableResolver] = None,
    ) -> "OrchestratorContext":
        config = config or OrchestratorConfig()
        return cls(
            config=config,
            logger=get_logger("domain_kb_orchestrator"),
            greeting_patterns=compile_greeting_patterns(config.greeting_patterns),
            resolver=resolver or ExecutableResolver(base_directory=config.kb_base_directory),
            chat_client_factory=chat_client_factory or create_chat_client,
            transport_factory=transport_factory or StdioRpcTransport.start,
        )

    def is_greeting(self, question: str) -> bool:
        """True when a greeting pattern matches at the start of the question."""
        text = question.strip()
        return any(p.match(text) for p in self.greeting_patterns)
