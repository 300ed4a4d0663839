"""Question answering control flow.

One call runs, in order: validate, clamp, greeting heuristic, KB retrieval,
synthesis, assembly. Only validation produces an error result; every other
failure is absorbed into a disclaimer and a degraded answer.
"""

from __future__ import annotations

import time
from typing import Any, Optional, Union, assert_never

import structlog

from domain_kb_common import InvalidQuestionError

from domain_kb_orchestrator.context import OrchestratorContext
from domain_kb_orchestrator.kb import KbRetriever
from domain_kb_orchestrator.llm import ChatClient
from domain_kb_orchestrator.prompts import (
    SYSTEM_PROMPT,
    format_fallback_prompt,
    format_grounded_prompt,
)
from domain_kb_orchestrator.results import (
    KbOutcome,
    KbSkipped,
    KbSuccess,
    KbUnavailable,
    KbUnreachable,
    OrchestrationError,
    OrchestrationResult,
    new_correlation_id,
)
from domain_kb_orchestrator.validation import DEFAULT_KB_RESULTS, clamp_kb_results, validate_question

GREETING_SKIPPED = "KB lookup skipped by greeting heuristic"
DISABLED_BY_CALLER = "KB lookup disabled by caller"
FAKE_MODE = "Simulated LLM answer (fake mode enabled)"
LLM_RETRYING = "LLM invocation failed; retrying with simplified prompt"
LLM_FALLBACK_FAILED = "LLM fallback failed"

FAKE_ANSWER_PREFIX = "FAKE_LLM_ANSWER:"
MISSING_CONFIG_ANSWER = (
    "The language model is not configured, so no answer could be generated. "
    "Set AZURE_OPENAI_ENDPOINT, AZURE_OPENAI_DEPLOYMENT_NAME and AZURE_OPENAI_API_KEY."
)

AskResult = Union[OrchestrationResult, OrchestrationError]


def fake_answer(question: str, snippet: Optional[str]) -> str:
    """Deterministic stand-in for the model's reply."""
    return (
        f"{FAKE_ANSWER_PREFIX} Based on the question '{question}' and KB content length "
        f"{len(snippet or '')}, this would be a grounded answer."
    )


def outcome_label(outcome: KbOutcome) -> str:
    match outcome:
        case KbSkipped():
            return "skipped"
        case KbUnavailable():
            return "unavailable"
        case KbUnreachable():
            return "unreachable"
        case KbSuccess():
            return "success"
        case _:
            assert_never(outcome)


class OrchestrationPipeline:
    """Answers domain questions with optional KB grounding.

    Example:
        >>> pipeline = OrchestrationPipeline(OrchestratorContext.from_config())
        >>> result = await pipeline.ask_domain_question("How do I share a dashboard?")
        >>> result.to_payload()["answer"]
    """

    def __init__(self, context: OrchestratorContext):
        self.context = context
        self.config = context.config
        self.logger = context.logger
        self.retriever = KbRetriever(context)

    async def ask_domain_question(
        self,
        question: Optional[str],
        include_kb: bool = True,
        max_kb_results: Optional[int] = DEFAULT_KB_RESULTS,
    ) -> AskResult:
        correlation_id = new_correlation_id()
        with structlog.contextvars.bound_contextvars(correlation_id=correlation_id):
            return await self._run(question, include_kb, max_kb_results, correlation_id)

    async def _run(
        self,
        question: Optional[str],
        include_kb: bool,
        max_kb_results: Optional[int],
        correlation_id: str,
    ) -> AskResult:
        started = time.perf_counter()

        try:
            text = validate_question(question)
        except InvalidQuestionError as e:
            self.logger.info("question_rejected", reason=str(e))
            return OrchestrationError.create(str(e), code="validation", correlation_id=correlation_id)

        limit = clamp_kb_results(max_kb_results)
        heuristic_skip = self.context.is_greeting(text)
        disclaimers: list[str] = []

        resolution = self.retriever.resolve()
        diagnostics: dict[str, Any] = {
            "requestedMaxKbResults": limit.requested,
            "effectiveMaxKbResults": limit.effective,
            "kbResultsClamped": limit.clamped,
            "heuristicSkipKb": heuristic_skip,
            "includeKb": include_kb,
            "fakeLlmMode": self.config.use_fake_llm,
            "endpointConfigured": self.config.endpoint_configured,
            "deploymentConfigured": self.config.deployment_configured,
            "apiKeyConfigured": self.config.api_key_configured,
            "chatAgentReady": not self.config.missing_llm_settings(),
            "kbExecutableConfigured": resolution.configured,
            "kbExecutableResolved": resolution.resolved,
            "llmFallbackUsed": False,
        }

        self.logger.info(
            "question_received",
            question_length=len(text),
            include_kb=include_kb,
            max_kb_results=limit.effective,
            heuristic_skip=heuristic_skip,
        )

        # KB retrieval
        if heuristic_skip:
            outcome: KbOutcome = KbSkipped(GREETING_SKIPPED)
        elif not include_kb:
            outcome = KbSkipped(DISABLED_BY_CALLER)
        else:
            outcome = await self.retriever.fetch(text, limit.effective, resolution=resolution)

        snippet: Optional[str] = None
        match outcome:
            case KbSuccess(snippet=kb_snippet, tool=tool):
                snippet = kb_snippet
                diagnostics["kbTool"] = tool
            case KbSkipped(reason=reason) | KbUnavailable(reason=reason):
                disclaimers.append(reason)
            case KbUnreachable(error=error):
                disclaimers.append(f"KB error: {error}")
            case _:
                assert_never(outcome)

        diagnostics["kbOutcome"] = outcome_label(outcome)
        diagnostics["kbContentLength"] = len(snippet) if snippet is not None else 0

        # Synthesis
        answer, kb_used = await self._synthesize(text, snippet, disclaimers, diagnostics)

        diagnostics["elapsedMs"] = round((time.perf_counter() - started) * 1000, 1)
        result = OrchestrationResult(
            answer=answer,
            confidence="high" if kb_used else "medium",
            kb_used=kb_used,
            disclaimers=disclaimers,
            correlation_id=correlation_id,
            diagnostics=diagnostics,
        )
        self.logger.info(
            "question_answered",
            kb_outcome=diagnostics["kbOutcome"],
            kb_used=kb_used,
            disclaimers=len(disclaimers),
            elapsed_ms=diagnostics["elapsedMs"],
        )
        return result

    async def _synthesize(
        self,
        question: str,
        snippet: Optional[str],
        disclaimers: list[str],
        diagnostics: dict[str, Any],
    ) -> tuple[str, bool]:
        """Produce the answer; returns (answer, kb snippet consumed)."""
        if self.config.use_fake_llm:
            disclaimers.append(FAKE_MODE)
            return fake_answer(question, snippet), snippet is not None

        missing = self.config.missing_llm_settings()
        if missing:
            disclaimers.append(f"Missing Azure OpenAI configuration: {', '.join(missing)}")
            return MISSING_CONFIG_ANSWER, False

        try:
            client: ChatClient = self.context.chat_client_factory(self.config)
        except Exception as e:
            self.logger.error("chat_client_init_failed", error=str(e))
            diagnostics["chatAgentReady"] = False
            disclaimers.append(f"LLM client unavailable: {e}")
            return f"LLM processing failed: {e}", False

        try:
            answer = await client.complete(SYSTEM_PROMPT, format_grounded_prompt(question, snippet))
            return answer, snippet is not None
        except Exception as e:
            self.logger.warning("llm_primary_failed", error=str(e))
            disclaimers.append(LLM_RETRYING)
            diagnostics["llmFallbackUsed"] = True

        try:
            answer = await client.complete(SYSTEM_PROMPT, format_fallback_prompt(question))
            return answer, False
        except Exception as e:
            self.logger.error("llm_fallback_failed", error=str(e))
            disclaimers.append(LLM_FALLBACK_FAILED)
            return f"LLM processing failed: {e}", False
