"""FastMCP server exposing the domain question orchestrator over stdio.

Usage:
    domain-kb-orchestrator

Configuration comes from the environment (see OrchestratorConfig).
"""

from __future__ import annotations

import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional

# Configure logging IMMEDIATELY to ensure stderr usage
from domain_kb_common import configure_logging, get_logger

configure_logging()

from fastmcp import FastMCP  # noqa: E402

from domain_kb_orchestrator.context import OrchestratorContext  # noqa: E402
from domain_kb_orchestrator.pipeline import OrchestrationPipeline  # noqa: E402
from domain_kb_orchestrator.tools import (  # noqa: E402
    register_ask_tools,
    register_status_tools,
)

logger = get_logger(__name__)

SERVER_NAME = "domain-kb-orchestrator"


@dataclass
class AppContext:
    """Application context available to all tools."""

    context: OrchestratorContext
    pipeline: OrchestrationPipeline


def create_server(context: Optional[OrchestratorContext] = None) -> FastMCP:
    """Build the orchestrator MCP server.

    Args:
        context: Explicit dependencies; built from the environment when omitted
    """
    context = context or OrchestratorContext.from_config()
    pipeline = OrchestrationPipeline(context)

    @asynccontextmanager
    async def app_lifespan(server: FastMCP):
        config = context.config
        logger.info(
            "mcp_server_starting",
            server_name=server.name,
            environment=config.environment,
            fake_llm=config.use_fake_llm,
            kb_configured=config.kb_executable_path is not None,
            missing_llm_settings=config.missing_llm_settings(),
        )
        try:
            yield AppContext(context=context, pipeline=pipeline)
        finally:
            logger.info("mcp_server_stopped", server_name=server.name)

    mcp = FastMCP(SERVER_NAME, lifespan=app_lifespan)

    register_ask_tools(mcp, pipeline)
    register_status_tools(mcp, context)

    return mcp


def main() -> int:
    """Entry point for the domain-kb-orchestrator command."""
    try:
        mcp = create_server()
    except Exception as e:
        logger.error("orchestrator_configuration_failed", error=str(e))
        return 1

    try:
        mcp.run()
    except KeyboardInterrupt:
        logger.info("mcp_server_interrupted")
    except Exception as e:
        logger.error("mcp_server_error", error=str(e))
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
