"""Test configuration for orchestrator tests."""

from __future__ import annotations

import json
from unittest.mock import AsyncMock, MagicMock

import pytest

from domain_kb_client import PROTOCOL_VERSION, ExecutableResolver
from domain_kb_orchestrator.config import OrchestratorConfig
from domain_kb_orchestrator.context import OrchestratorContext

# Variables OrchestratorConfig reads; cleared so the host environment cannot leak in
CONFIG_ENV_VARS = (
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_API_VERSION",
    "AZURE_OPENAI_DEPLOYMENT_NAME",
    "AZURE_OPENAI_ENDPOINT",
    "KB_MCP_SERVER_BASE_DIRECTORY",
    "KB_MCP_SERVER_EXECUTABLE_PATH",
    "KB_MCP_SERVER_TIMEOUT",
    "LLM_MAX_TOKENS",
    "LLM_TEMPERATURE",
    "ORCHESTRATOR_ENVIRONMENT",
    "ORCHESTRATOR_GREETING_PATTERNS",
    "ORCHESTRATOR_KB_SNIPPET_MAX_CHARS",
    "ORCHESTRATOR_USE_FAKE_LLM",
)

KB_CONTENT = "Azure Managed Grafana dashboards can be shared with viewer role assignments."

LLM_SETTINGS = {
    "azure_openai_endpoint": "https://example.openai.azure.com/",
    "azure_openai_deployment_name": "gpt-4o",
    "azure_openai_api_key": "test-key",
}


class MockFastMCP:
    """Mock FastMCP server for testing tool registration."""

    def __init__(self):
        self.tools = {}

    def tool(self, **kwargs):
        """Decorator that captures tool functions."""

        def decorator(func):
            self.tools[func.__name__] = {
                "func": func,
                "kwargs": kwargs,
            }
            return func

        return decorator


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in CONFIG_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def mock_mcp():
    return MockFastMCP()


@pytest.fixture
def llm_settings():
    """Complete Azure OpenAI settings."""
    return dict(LLM_SETTINGS)


@pytest.fixture
def make_config():
    """Build configs without reading a .env file."""

    def _make(**overrides) -> OrchestratorConfig:
        return OrchestratorConfig(_env_file=None, **overrides)

    return _make


@pytest.fixture
def kb_script(tmp_path):
    """Placeholder KB server script; resolves as ``kb-server``."""
    path = tmp_path / "kb-server.py"
    path.write_text("# placeholder\n", encoding="utf-8")
    return path


@pytest.fixture
def kb_content():
    """Content the fake KB server returns from get_kb_content."""
    return KB_CONTENT


@pytest.fixture
def kb_replies():
    """Replies of the fake KB server, keyed by method.

    Tests edit entries; an exception value is raised instead of returned.
    """
    return {
        "initialize": {
            "protocolVersion": PROTOCOL_VERSION,
            "serverInfo": {"name": "domain-kb", "version": "0.1.0"},
            "capabilities": {"tools": {}},
        },
        "tools/list": {
            "tools": [{"name": "get_kb_info"}, {"name": "search_knowledge"}, {"name": "get_kb_content"}]
        },
        "tools/call": {
            "content": [
                {
                    "type": "text",
                    "text": json.dumps(
                        {"status": "ok", "contentLength": len(KB_CONTENT), "content": KB_CONTENT}
                    ),
                }
            ]
        },
    }


@pytest.fixture
def fake_transport(kb_replies):
    """Transport double answering from ``kb_replies``."""

    async def send(method, params=None, **kwargs):
        reply = kb_replies[method]
        if isinstance(reply, Exception):
            raise reply
        return reply

    transport = MagicMock()
    transport.send = AsyncMock(side_effect=send)
    transport.notify = AsyncMock()
    transport.close = AsyncMock()
    return transport


@pytest.fixture
def transport_factory(fake_transport):
    return AsyncMock(return_value=fake_transport)


@pytest.fixture
def make_context(make_config, transport_factory, tmp_path):
    """Build a context with test doubles.

    ``chat_client`` becomes the product of the chat client factory; relative
    KB paths resolve against ``tmp_path`` only.
    """

    def _make(config=None, chat_client=None, **overrides) -> OrchestratorContext:
        config = config or make_config(**overrides)
        factory = (lambda cfg: chat_client) if chat_client is not None else None
        return OrchestratorContext.from_config(
            config,
            chat_client_factory=factory,
            transport_factory=transport_factory,
            resolver=ExecutableResolver(base_directory=tmp_path, max_depth=1),
        )

    return _make


@pytest.fixture
def chat_client():
    """ChatClient double returning a fixed answer."""
    client = MagicMock()
    client.complete = AsyncMock(return_value="Share the dashboard and grant the Viewer role.")
    return client
