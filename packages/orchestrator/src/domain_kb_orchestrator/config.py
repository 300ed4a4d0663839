"""Orchestrator configuration.

Each field accepts its short name (for code and tests) or the environment
variable listed in ``validation_alias``.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Optional

from pydantic import AliasChoices, Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_GREETING_PATTERNS = [
    r"hi\b",
    r"hello\b",
    r"hey\b",
    r"greetings\b",
    r"good\s+(morning|afternoon|evening)\b",
    r"howdy\b",
    r"yo\b",
]

DEFAULT_ENVIRONMENT = "Production"
DEFAULT_API_VERSION = "2024-06-01"


def _env(name: str, env_name: str) -> AliasChoices:
    return AliasChoices(name, env_name)


class OrchestratorConfig(BaseSettings):
    """Settings for KB lookup and answer synthesis."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # KB server
    kb_executable_path: Optional[str] = Field(
        default=None,
        validation_alias=_env("kb_executable_path", "KB_MCP_SERVER_EXECUTABLE_PATH"),
        description="KB server executable or script (absolute or relative)",
    )
    kb_base_directory: Optional[Path] = Field(
        default=None,
        validation_alias=_env("kb_base_directory", "KB_MCP_SERVER_BASE_DIRECTORY"),
        description="Base for relative kb_executable_path (default: interpreter directory)",
    )
    kb_timeout: float = Field(
        default=15.0,
        gt=0,
        validation_alias=_env("kb_timeout", "KB_MCP_SERVER_TIMEOUT"),
        description="Per-request timeout for KB RPC calls (seconds)",
    )
    kb_snippet_max_chars: int = Field(
        default=6000,
        ge=1,
        validation_alias=_env("kb_snippet_max_chars", "ORCHESTRATOR_KB_SNIPPET_MAX_CHARS"),
    )

    # Behaviour
    use_fake_llm: bool = Field(
        default=False,
        validation_alias=_env("use_fake_llm", "ORCHESTRATOR_USE_FAKE_LLM"),
    )
    greeting_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_GREETING_PATTERNS),
        validation_alias=_env("greeting_patterns", "ORCHESTRATOR_GREETING_PATTERNS"),
        description="Regexes matched case-insensitively at the start of the question",
    )
    environment: str = Field(
        default=DEFAULT_ENVIRONMENT,
        validation_alias=_env("environment", "ORCHESTRATOR_ENVIRONMENT"),
    )

    # Azure OpenAI
    azure_openai_endpoint: Optional[str] = None
    azure_openai_deployment_name: Optional[str] = None
    azure_openai_api_key: Optional[SecretStr] = None
    azure_openai_api_version: str = DEFAULT_API_VERSION
    llm_temperature: float = 0.1
    llm_max_tokens: int = 2000

    @field_validator("greeting_patterns")
    @classmethod
    def validate_greeting_patterns(cls, value: list[str]) -> list[str]:
        for pattern in value:
            try:
                re.compile(pattern)
            except re.error as e:
                raise ValueError(f"invalid greeting pattern {pattern!r}: {e}") from e
        return value

    @property
    def endpoint_configured(self) -> bool:
        return bool(self.azure_openai_endpoint and self.azure_openai_endpoint.strip())

    @property
    def deployment_configured(self) -> bool:
        return bool(self.azure_openai_deployment_name and self.azure_openai_deployment_name.strip())

    @property
    def api_key_configured(self) -> bool:
        return bool(
            self.azure_openai_api_key and self.azure_openai_api_key.get_secret_value().strip()
        )

    def missing_llm_settings(self) -> list[str]:
        """Environment names of the required LLM settings that are unset."""
        missing = []
        if not self.endpoint_configured:
            missing.append("AZURE_OPENAI_ENDPOINT")
        if not self.deployment_configured:
            missing.append("AZURE_OPENAI_DEPLOYMENT_NAME")
        if not self.api_key_configured:
            missing.append("AZURE_OPENAI_API_KEY")
        return missing
