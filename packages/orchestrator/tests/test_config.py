"""Tests for orchestrator configuration."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from domain_kb_orchestrator.config import (
    DEFAULT_ENVIRONMENT,
    DEFAULT_GREETING_PATTERNS,
    OrchestratorConfig,
)

pytestmark = pytest.mark.unit


class TestDefaults:
    """Defaults with an empty environment."""

    def test_defaults(self, make_config):
        config = make_config()
        assert config.kb_executable_path is None
        assert config.kb_base_directory is None
        assert config.kb_timeout == 15.0
        assert config.kb_snippet_max_chars == 6000
        assert config.use_fake_llm is False
        assert config.environment == DEFAULT_ENVIRONMENT
        assert config.greeting_patterns == DEFAULT_GREETING_PATTERNS
        assert config.llm_temperature == 0.1
        assert config.llm_max_tokens == 2000

    def test_nothing_configured_means_all_llm_settings_missing(self, make_config):
        assert make_config().missing_llm_settings() == [
            "AZURE_OPENAI_ENDPOINT",
            "AZURE_OPENAI_DEPLOYMENT_NAME",
            "AZURE_OPENAI_API_KEY",
        ]


class TestEnvironmentVariables:
    """Settings are read from their documented environment names."""

    def test_kb_variables(self, monkeypatch):
        monkeypatch.setenv("KB_MCP_SERVER_EXECUTABLE_PATH", '"bin/kb-server"')
        monkeypatch.setenv("KB_MCP_SERVER_BASE_DIRECTORY", "/opt/kb")
        monkeypatch.setenv("KB_MCP_SERVER_TIMEOUT", "3.5")

        config = OrchestratorConfig(_env_file=None)

        # Quotes are stripped by the resolver, not here
        assert config.kb_executable_path == '"bin/kb-server"'
        assert config.kb_base_directory == Path("/opt/kb")
        assert config.kb_timeout == 3.5

    def test_orchestrator_variables(self, monkeypatch):
        monkeypatch.setenv("ORCHESTRATOR_USE_FAKE_LLM", "true")
        monkeypatch.setenv("ORCHESTRATOR_ENVIRONMENT", "Development")
        monkeypatch.setenv("ORCHESTRATOR_GREETING_PATTERNS", '["hola\\\\b"]')

        config = OrchestratorConfig(_env_file=None)

        assert config.use_fake_llm is True
        assert config.environment == "Development"
        assert config.greeting_patterns == ["hola\\b"]

    def test_azure_variables(self, monkeypatch):
        monkeypatch.setenv("AZURE_OPENAI_ENDPOINT", "https://example.openai.azure.com/")
        monkeypatch.setenv("AZURE_OPENAI_DEPLOYMENT_NAME", "gpt-4o")
        monkeypatch.setenv("AZURE_OPENAI_API_KEY", "s3cr3t-value")

        config = OrchestratorConfig(_env_file=None)

        assert config.missing_llm_settings() == []
        assert config.azure_openai_api_key.get_secret_value() == "s3cr3t-value"
        assert "s3cr3t-value" not in repr(config)


class TestLlmSettings:
    """Readiness flags."""

    def test_blank_values_count_as_missing(self, make_config):
        config = make_config(
            azure_openai_endpoint="  ",
            azure_openai_deployment_name="gpt-4o",
            azure_openai_api_key="",
        )
        assert config.endpoint_configured is False
        assert config.deployment_configured is True
        assert config.api_key_configured is False
        assert config.missing_llm_settings() == ["AZURE_OPENAI_ENDPOINT", "AZURE_OPENAI_API_KEY"]

    def test_complete(self, make_config, llm_settings):
        assert make_config(**llm_settings).missing_llm_settings() == []


class TestValidation:
    """Invalid values are rejected at construction."""

    def test_invalid_greeting_pattern(self, make_config):
        with pytest.raises(ValidationError, match="invalid greeting pattern"):
            make_config(greeting_patterns=["(unclosed"])

    def test_non_positive_timeout(self, make_config):
        with pytest.raises(ValidationError):
            make_config(kb_timeout=0)
