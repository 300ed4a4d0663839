"""Chat-completion clients for answer synthesis.

The pipeline depends only on :class:`ChatClient`; the Azure OpenAI SDK is
imported lazily by :class:`AzureOpenAIChatClient`.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Optional

from domain_kb_common import ConfigurationError, LLMError, get_logger

from domain_kb_orchestrator.config import OrchestratorConfig

logger = get_logger(__name__)

NO_RESPONSE = "No response generated"


class ChatClient(ABC):
    """Prompt in, text out."""

    @abstractmethod
    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Return the model's reply.

        Raises:
            LLMError: If the backend call fails
        """


class AzureOpenAIChatClient(ChatClient):
    """Azure OpenAI chat-completions client.

    Example:
        >>> client = AzureOpenAIChatClient(
        ...     endpoint="https://example.openai.azure.com/",
        ...     deployment="gpt-4o",
        ...     api_key="...",
        ... )
        >>> answer = await client.complete("You are helpful.", "What is RBAC?")
    """

    def __init__(
        self,
        endpoint: str,
        deployment: str,
        api_key: str,
        api_version: str = "2024-06-01",
        temperature: float = 0.1,
        max_tokens: int = 2000,
    ):
        self.endpoint = endpoint
        self.deployment = deployment
        self.temperature = temperature
        self.max_tokens = max_tokens

        # Import here so fake mode and tests do not need the SDK
        try:
            from openai import AzureOpenAI
        except ImportError:
            raise ImportError("openai package not installed. Run: pip install openai")

        self._client = AzureOpenAI(
            azure_endpoint=endpoint,
            api_key=api_key,
            api_version=api_version,
        )
        logger.info(
            "azure_openai_client_initialized",
            endpoint=endpoint,
            deployment=deployment,
            api_version=api_version,
        )

    def _call_api(self, system_prompt: str, user_prompt: str) -> str:
        try:
            response = self._client.chat.completions.create(
                model=self.deployment,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
        except Exception as e:
            logger.error("azure_openai_api_error", error=str(e), deployment=self.deployment)
            raise LLMError(f"Azure OpenAI error: {e}") from e

        content: Optional[str] = None
        if response.choices:
            content = response.choices[0].message.content
        if not content:
            logger.warning("azure_openai_empty_response", deployment=self.deployment)
            return NO_RESPONSE
        return content

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        logger.debug(
            "llm_request",
            deployment=self.deployment,
            prompt_length=len(user_prompt),
        )
        # Run sync SDK call in thread pool
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._call_api, system_prompt, user_prompt)


def create_chat_client(config: OrchestratorConfig) -> ChatClient:
    """Default chat client factory.

    Raises:
        ConfigurationError: Required Azure OpenAI settings are missing
    """
    missing = config.missing_llm_settings()
    if missing:
        raise ConfigurationError(f"Missing Azure OpenAI configuration: {', '.join(missing)}")

    assert config.azure_openai_api_key is not None
    return AzureOpenAIChatClient(
        endpoint=config.azure_openai_endpoint or "",
        deployment=config.azure_openai_deployment_name or "",
        api_key=config.azure_openai_api_key.get_secret_value(),
        api_version=config.azure_openai_api_version,
        temperature=config.llm_temperature,
        max_tokens=config.llm_max_tokens,
    )
