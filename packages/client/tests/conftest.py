"""Pytest fixtures for client tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import pytest_asyncio

from domain_kb_client import StdioRpcTransport

FIXTURES = Path(__file__).parent / "fixtures"
SCRIPTED_SERVER = FIXTURES / "scripted_rpc_server.py"


@pytest.fixture
def scripted_server_path() -> Path:
    """Path to the scripted JSON-RPC server script."""
    return SCRIPTED_SERVER


@pytest_asyncio.fixture
async def transport():
    """Transport attached to a running scripted server."""
    t = await StdioRpcTransport.start(
        sys.executable,
        [str(SCRIPTED_SERVER)],
        name="scripted",
        default_timeout=10.0,
    )
    try:
        yield t
    finally:
        await t.close()
