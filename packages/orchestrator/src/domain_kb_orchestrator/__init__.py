"""Domain question orchestrator.

Answers questions with an LLM, grounded in content fetched from a KB server
launched as a child process. Every degradation (KB missing, KB failing, LLM
missing or failing) is reported as a disclaimer instead of an error.
"""

__version__ = "0.1.0"

from domain_kb_orchestrator.config import OrchestratorConfig  # noqa: E402
from domain_kb_orchestrator.context import OrchestratorContext  # noqa: E402
from domain_kb_orchestrator.llm import (  # noqa: E402
    AzureOpenAIChatClient,
    ChatClient,
    create_chat_client,
)
from domain_kb_orchestrator.pipeline import OrchestrationPipeline  # noqa: E402
from domain_kb_orchestrator.results import (  # noqa: E402
    KbOutcome,
    KbSkipped,
    KbSuccess,
    KbUnavailable,
    KbUnreachable,
    OrchestrationError,
    OrchestrationResult,
)

__all__ = [
    "__version__",
    "OrchestratorConfig",
    "OrchestratorContext",
    "OrchestrationPipeline",
    "ChatClient",
    "AzureOpenAIChatClient",
    "create_chat_client",
    "KbOutcome",
    "KbSkipped",
    "KbSuccess",
    "KbUnavailable",
    "KbUnreachable",
    "OrchestrationError",
    "OrchestrationResult",
]
