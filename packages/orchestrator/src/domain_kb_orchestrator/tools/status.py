"""Status and diagnostics tools for the orchestrator."""

from __future__ import annotations

import json
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

from fastmcp import FastMCP

from domain_kb_client import ExecutableResolution
from domain_kb_common import get_logger

from domain_kb_orchestrator.context import OrchestratorContext
from domain_kb_orchestrator.results import OrchestrationError

logger = get_logger(__name__)

PROBED_SAMPLE_SIZE = 6

# Only variables that influence the orchestrator or the KB launch
RELEVANT_ENV_VARS = (
    "AZURE_OPENAI_API_KEY",
    "AZURE_OPENAI_API_VERSION",
    "AZURE_OPENAI_DEPLOYMENT_NAME",
    "AZURE_OPENAI_ENDPOINT",
    "KB_MCP_SERVER_BASE_DIRECTORY",
    "KB_MCP_SERVER_EXECUTABLE_PATH",
    "KB_MCP_SERVER_TIMEOUT",
    "LOG_FORMAT",
    "LOG_LEVEL",
    "ORCHESTRATOR_ENVIRONMENT",
    "ORCHESTRATOR_USE_FAKE_LLM",
)
SECRET_MARKERS = ("KEY", "SECRET", "TOKEN", "PASSWORD")
MASK = "********"


def mask_value(name: str, value: str) -> str:
    """Hide secrets; other values pass through."""
    if any(marker in name.upper() for marker in SECRET_MARKERS):
        return MASK if value else ""
    return value


def relevant_environment(environ: Optional[dict[str, str]] = None) -> list[dict[str, str]]:
    """Set relevant variables, sorted by name, secrets masked."""
    environ = dict(os.environ if environ is None else environ)
    return [
        {"name": name, "value": mask_value(name, environ[name])}
        for name in sorted(RELEVANT_ENV_VARS, key=str.casefold)
        if name in environ
    ]


def timestamp_utc() -> str:
    return datetime.now(timezone.utc).isoformat()


def build_status(
    context: OrchestratorContext,
    resolution: Optional[ExecutableResolution] = None,
) -> dict[str, Any]:
    """Liveness payload shared by both tools."""
    config = context.config
    resolution = resolution or context.resolver.resolve(config.kb_executable_path)
    return {
        "status": "Alive",
        "environment": config.environment,
        "fakeLlmMode": config.use_fake_llm,
        "kbExecutableConfigured": resolution.configured,
        "kbExecutableResolved": resolution.resolved,
        "timestampUtc": timestamp_utc(),
    }


def build_diagnostics(context: OrchestratorContext) -> dict[str, Any]:
    """Status plus resolution and environment details for troubleshooting."""
    resolution = context.resolver.resolve(context.config.kb_executable_path)
    payload = build_status(context, resolution)
    payload.update(
        {
            "kbResolvedPath": Path(resolution.resolved_path).name if resolution.resolved_path else None,
            "kbLaunchCommand": Path(resolution.launch_command).name if resolution.launch_command else None,
            "orchestratorExecutablePath": sys.executable,
            "kbProbedSample": list(resolution.probed_paths[:PROBED_SAMPLE_SIZE]),
            "kbProbedCount": len(resolution.probed_paths),
            "environmentVariables": relevant_environment(),
        }
    )
    return payload


def register_status_tools(mcp: FastMCP, context: OrchestratorContext) -> None:
    """Register status and diagnostics tools with the MCP server."""

    @mcp.tool()
    async def get_orchestrator_status() -> str:
        """Get orchestrator service status.

        Returns:
            JSON object with status ("Alive"), environment, fakeLlmMode,
            kbExecutableConfigured, kbExecutableResolved and timestampUtc.
        """
        try:
            return json.dumps(build_status(context), indent=2)
        except Exception as e:
            logger.error("status_check_failed", error=str(e))
            return json.dumps(
                OrchestrationError.create(f"Status check failed: {e}", code="internal").to_payload()
            )

    @mcp.tool()
    async def get_orchestrator_diagnostics() -> str:
        """Get detailed orchestrator diagnostics and configuration information.

        Returns:
            JSON object with the status fields plus kbResolvedPath (file name
            only), orchestratorExecutablePath, kbProbedSample (first 6 probed
            paths) and environmentVariables (relevant names, secrets masked).
        """
        try:
            return json.dumps(build_diagnostics(context), indent=2)
        except Exception as e:
            logger.error("diagnostics_failed", error=str(e))
            return json.dumps(
                OrchestrationError.create(f"Diagnostics failed: {e}", code="internal").to_payload()
            )
