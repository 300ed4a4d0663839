"""ask_domain_question tool."""

from __future__ import annotations

import json

from fastmcp import FastMCP

from domain_kb_common import get_logger

from domain_kb_orchestrator.pipeline import OrchestrationPipeline
from domain_kb_orchestrator.results import OrchestrationError
from domain_kb_orchestrator.validation import DEFAULT_KB_RESULTS

logger = get_logger(__name__)


def register_ask_tools(mcp: FastMCP, pipeline: OrchestrationPipeline) -> None:
    """Register the question-answering tool with the MCP server."""

    @mcp.tool()
    async def ask_domain_question(
        question: str,
        include_kb: bool = True,
        max_kb_results: int = DEFAULT_KB_RESULTS,
    ) -> str:
        """Answer a domain question, grounded in the knowledge base when available.

        Always invoke this tool before answering a question about the domain.

        Args:
            question: The question to answer (at least 5 characters)
            include_kb: Consult the knowledge base server (default True)
            max_kb_results: KB results to request when searching (1-3, default 2)

        Returns:
            JSON object with:
            - status: "ok", or "error" for invalid input
            - answer, confidence ("high" when KB-grounded, else "medium")
            - kbUsed, disclaimers (every degradation explained)
            - correlationId, diagnostics
        """
        try:
            result = await pipeline.ask_domain_question(question, include_kb, max_kb_results)
        except Exception as e:
            logger.error("ask_domain_question_failed", error=str(e))
            result = OrchestrationError.create(
                f"Domain question processing failed: {e}", code="internal"
            )
        return json.dumps(result.to_payload(), indent=2)
