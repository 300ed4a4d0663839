"""Test configuration for KB server tests."""

from __future__ import annotations

import pytest

from domain_kb_mcp.config import KnowledgeBaseConfig
from domain_kb_mcp.service import KnowledgeBaseService

SAMPLE_KB = """Azure Managed Grafana Overview
Azure Managed Grafana is a fully managed service for analytics and monitoring.
Dashboards can be shared across teams. Alerting rules notify on-call engineers.
Data sources include Azure Monitor, Prometheus and Azure Data Explorer.
"""


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


@pytest.fixture
def mock_mcp():
    return MockFastMCP()


@pytest.fixture
def kb_file(tmp_path):
    """Knowledge base file with sample content."""
    path = tmp_path / "knowledge-base.txt"
    path.write_text(SAMPLE_KB, encoding="utf-8")
    return path


@pytest.fixture
def kb_config(kb_file):
    return KnowledgeBaseConfig(_env_file=None, file_path=str(kb_file))


@pytest.fixture
def service(kb_config):
    """Initialized service over the sample knowledge base."""
    svc = KnowledgeBaseService(kb_config)
    assert svc.initialize()
    return svc
