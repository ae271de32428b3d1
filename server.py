"""
FastMCP Server for the Honeybadger error-tracking API

Exposes Honeybadger projects and faults as MCP tools. Read tools are always
available; project write tools (create, update, delete) are registered only
when HONEYBADGER_READ_ONLY=false.

Usage:
    python server.py                      # stdio transport
    python server.py --log-level DEBUG    # verbose diagnostics on stderr
"""

from __future__ import annotations

import argparse
import logging
import os
import sys
from contextlib import asynccontextmanager
from typing import Annotated, Any, Optional

from fastmcp import FastMCP
from fastmcp.tools import Tool, ToolResult
from pydantic import Field
from pydantic.json_schema import SkipJsonSchema

from src.honeybadger_mcp.client import HoneybadgerClient
from src.honeybadger_mcp.config import Configuration
from src.honeybadger_mcp.operations import OperationSpec
from src.honeybadger_mcp.registry import ToolRegistry, select_operations

logger = logging.getLogger(__name__)

SERVER_NAME = "Honeybadger"

INSTRUCTIONS = (
    "This server provides access to Honeybadger error tracking. "
    "Use list_faults and get_fault to find errors, list_fault_notices for individual "
    "occurrences, and analyze_fault for a full report with fix suggestions. "
    "project_id may be omitted when a default project is configured."
)

WRITE_INSTRUCTIONS = (
    " Write tools (create_project, update_project, delete_project) are enabled; "
    "delete_project requires confirm=true."
)


# =============================================================================
# Tool Adapter
# =============================================================================


class GatewayTool(Tool):
    """MCP tool backed by one registered operation.

    The input schema comes from the operation's contract; validation itself
    happens inside the registry so failures come back as error results.
    """

    registry: Annotated[SkipJsonSchema[Any], Field(exclude=True)] = None

    @classmethod
    def from_operation(cls, op: OperationSpec, registry: ToolRegistry) -> "GatewayTool":
        return cls(
            name=op.name,
            description=op.description,
            parameters=op.contract.model_json_schema(),
            annotations=op.annotations,
            registry=registry,
        )

    async def run(self, arguments: dict[str, Any]) -> ToolResult:
        result = await self.registry.invoke(self.name, arguments)
        return ToolResult(content=result.render(), is_error=result.is_error)


# =============================================================================
# Server Factory
# =============================================================================


def create_server(config: Optional[Configuration] = None) -> FastMCP:
    """Build the FastMCP server for a configuration.

    Args:
        config: Gateway configuration (read from the environment if omitted)

    Raises:
        ConfigurationError: If HONEYBADGER_PROJECT_ID is invalid
    """
    config = config or Configuration.from_env()
    client = HoneybadgerClient(config)
    registry = ToolRegistry(select_operations(config), client, config)

    @asynccontextmanager
    async def lifespan(server: FastMCP):
        """Open the HTTP session for the lifetime of the server."""
        async with client:
            logger.info(f"Honeybadger client ready ({config.base_url})")
            yield {"registry": registry}

    instructions = INSTRUCTIONS + (WRITE_INSTRUCTIONS if config.write_enabled else "")
    mcp = FastMCP(name=SERVER_NAME, instructions=instructions, lifespan=lifespan)

    for op in registry.values():
        mcp.add_tool(GatewayTool.from_operation(op, registry))

    if config.write_enabled:
        logger.info(f"Write tools enabled: {', '.join(registry.write_tool_names)}")
    else:
        logger.info("Running read-only; set HONEYBADGER_READ_ONLY=false to enable write tools")

    return mcp


# =============================================================================
# Server Entry Point
# =============================================================================


def main() -> None:
    parser = argparse.ArgumentParser(description="Honeybadger MCP Server")
    parser.add_argument(
        "--log-level",
        default=os.getenv("LOG_LEVEL", "INFO"),
        help="Logging level (default: LOG_LEVEL or INFO)",
    )
    args = parser.parse_args()

    # stdout carries the MCP stream
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )

    mcp = create_server()
    logger.info("Honeybadger MCP server running on stdio")
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
