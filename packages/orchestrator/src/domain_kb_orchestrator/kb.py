"""KB retrieval: resolve, launch, handshake, call one content tool.

Every failure becomes a :data:`KbOutcome` value; nothing raises.
"""

from __future__ import annotations

import json
from typing import Any, Optional

from domain_kb_client import (
    ExecutableResolution,
    call_tool,
    extract_first_text,
    initialize,
    list_tool_names,
)
from domain_kb_common import DomainKBError, KnowledgeBaseError

from domain_kb_orchestrator import __version__
from domain_kb_orchestrator.context import OrchestratorContext
from domain_kb_orchestrator.results import (
    KbOutcome,
    KbSuccess,
    KbUnavailable,
    KbUnreachable,
)

CLIENT_NAME = "domain-kb-orchestrator"

CONTENT_TOOL = "get_kb_content"
SEARCH_TOOL = "search_knowledge"
# Preference order
RECOGNIZED_TOOLS = (CONTENT_TOOL, SEARCH_TOOL)

NOT_CONFIGURED = "KB server path not configured"
NO_CONTENT_TOOL = "KB server exposes no recognized content tool"
EMPTY_CONTENT = "KB returned no content"


def not_found_reason(resolution: ExecutableResolution) -> str:
    return f"KB server executable not found (probed {len(resolution.probed_paths)} paths)"


def select_tool(names: list[str]) -> Optional[str]:
    """Pick the preferred recognized tool, or None."""
    for name in RECOGNIZED_TOOLS:
        if name in names:
            return name
    return None


def tool_arguments(tool: str, question: str, max_results: int) -> dict[str, Any]:
    if tool == SEARCH_TOOL:
        return {"query": question, "max_results": max_results}
    return {}


def snippet_from_text(text: str) -> str:
    """Reduce a KB tool reply to plain snippet text.

    JSON objects with a string ``content`` yield that; objects with
    ``results`` yield their contents joined by blank lines (nothing when
    ``totalMatches`` is 0); anything else is used as-is.

    Raises:
        KnowledgeBaseError: The tool reported ``status: "error"``
    """
    try:
        payload = json.loads(text)
    except json.JSONDecodeError:
        return text

    if not isinstance(payload, dict):
        return text

    if payload.get("status") == "error":
        raise KnowledgeBaseError(f"KB tool error: {payload.get('error', 'unknown error')}")

    content = payload.get("content")
    if isinstance(content, str):
        return content

    results = payload.get("results")
    if isinstance(results, list):
        # Error placeholders come back as one item with totalMatches 0
        if payload.get("totalMatches") == 0:
            return ""
        parts = [
            item["content"]
            for item in results
            if isinstance(item, dict) and isinstance(item.get("content"), str)
        ]
        return "\n\n".join(parts)

    return text


class KbRetriever:
    """Fetches KB content for one question through a fresh transport."""

    def __init__(self, context: OrchestratorContext):
        self.context = context
        self.logger = context.logger

    def resolve(self) -> ExecutableResolution:
        return self.context.resolver.resolve(self.context.config.kb_executable_path)

    async def fetch(
        self,
        question: str,
        max_results: int,
        resolution: Optional[ExecutableResolution] = None,
    ) -> KbOutcome:
        config = self.context.config
        resolution = resolution or self.resolve()

        if not resolution.configured:
            return KbUnavailable(NOT_CONFIGURED)
        if not resolution.resolved or resolution.launch_command is None:
            self.logger.warning("kb_executable_not_found", probed=list(resolution.probed_paths))
            return KbUnavailable(not_found_reason(resolution))

        try:
            transport = await self.context.transport_factory(
                resolution.launch_command,
                list(resolution.launch_args),
                name="kb-server",
                default_timeout=config.kb_timeout,
            )
        except Exception as e:
            self.logger.warning("kb_launch_failed", command=resolution.launch_command, error=str(e))
            return KbUnreachable(str(e))

        try:
            await initialize(transport, CLIENT_NAME, __version__)
            names = await list_tool_names(transport)

            tool = select_tool(names)
            if tool is None:
                self.logger.warning("kb_no_content_tool", tools=names)
                return KbUnavailable(NO_CONTENT_TOOL)

            result = await call_tool(transport, tool, tool_arguments(tool, question, max_results))
            snippet = snippet_from_text(extract_first_text(result))
        except DomainKBError as e:
            self.logger.warning("kb_call_failed", error=str(e), error_type=type(e).__name__)
            return KbUnreachable(str(e))
        except Exception as e:
            self.logger.error("kb_call_unexpected_error", error=str(e), error_type=type(e).__name__)
            return KbUnreachable(str(e))
        finally:
            await transport.close()

        if not snippet.strip():
            return KbUnavailable(EMPTY_CONTENT)

        if len(snippet) > config.kb_snippet_max_chars:
            snippet = snippet[: config.kb_snippet_max_chars]

        self.logger.info("kb_content_retrieved", tool=tool, snippet_length=len(snippet))
        return KbSuccess(snippet=snippet, tool=tool)
