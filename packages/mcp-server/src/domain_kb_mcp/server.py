"""FastMCP server exposing the knowledge base over stdio.

Usage:
    domain-kb-server [--file PATH]        serve MCP on stdin/stdout
    domain-kb-server --get-kb-info        print KB info as JSON and exit
"""

from __future__ import annotations

import argparse
import json
import sys
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Optional, Sequence

# Configure logging IMMEDIATELY to ensure stderr usage
from domain_kb_common import configure_logging, get_logger

configure_logging()

from fastmcp import FastMCP  # noqa: E402

from domain_kb_mcp.config import KnowledgeBaseConfig  # noqa: E402
from domain_kb_mcp.formatters import info_to_dict  # noqa: E402
from domain_kb_mcp.service import KnowledgeBaseService  # noqa: E402
from domain_kb_mcp.tools import (  # noqa: E402
    register_content_tools,
    register_info_tools,
    register_search_tools,
)

logger = get_logger(__name__)

SERVER_NAME = "domain-kb"


@dataclass
class AppContext:
    """Application context available to all tools."""

    service: KnowledgeBaseService


def create_server(service: KnowledgeBaseService) -> FastMCP:
    """Build the MCP server around an (initialized) service."""

    @asynccontextmanager
    async def app_lifespan(server: FastMCP):
        logger.info(
            "mcp_server_starting",
            server_name=server.name,
            content_length=len(service.get_raw_content()),
        )
        try:
            yield AppContext(service=service)
        finally:
            logger.info("mcp_server_stopped", server_name=server.name)

    mcp = FastMCP(SERVER_NAME, lifespan=app_lifespan)

    register_content_tools(mcp, service)
    register_info_tools(mcp, service)
    register_search_tools(mcp, service)

    return mcp


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="domain-kb-server",
        description="Serve a text knowledge base over MCP (stdio).",
    )
    parser.add_argument(
        "--file",
        dest="file_path",
        help="Knowledge base file (overrides KB_FILE_PATH)",
    )
    parser.add_argument(
        "--get-kb-info",
        action="store_true",
        help="Print knowledge base info as JSON and exit",
    )
    return parser


def print_kb_info(service: KnowledgeBaseService) -> None:
    """Diagnostic mode: one JSON object on stdout."""
    service.initialize()
    info = service.get_info()
    payload = {
        "info": info_to_dict(info),
        "status": "available" if info.available else "unavailable",
    }
    sys.stdout.write(json.dumps(payload) + "\n")
    sys.stdout.flush()


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Entry point for the domain-kb-server command."""
    args = build_parser().parse_args(argv)

    overrides = {"file_path": args.file_path} if args.file_path else {}
    service = KnowledgeBaseService(KnowledgeBaseConfig(**overrides))

    if args.get_kb_info:
        print_kb_info(service)
        return 0

    if not service.initialize():
        logger.error("kb_initialization_failed", file_path=service.config.file_path)
        return 1

    mcp = create_server(service)
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
