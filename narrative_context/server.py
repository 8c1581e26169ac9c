"""
Narrative Context - Server

FastMCP server using stdio transport (Model Context Protocol).

Exposes the compaction engine as three tools:
- optimize_context: compact narrative text into a size budget
- estimate_size: measure text in budget units
- get_optimization_settings: current engine configuration
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastmcp import FastMCP

from . import tools
from .config import load_config
from .observability import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def server_lifespan(server: Any) -> Any:
    """Server lifespan manager (startup/shutdown)."""
    initialize_server()
    yield
    cleanup_server()


mcp = FastMCP("Narrative Context", lifespan=server_lifespan)

mcp.tool()(tools.optimize_context)
mcp.tool()(tools.estimate_size)
mcp.tool()(tools.get_optimization_settings)


def initialize_server() -> None:
    """Load configuration, set up logging and warm the default engine."""
    config = load_config()
    setup_logging(str(config.log_level), json_format=config.observability.json_logs)
    tools.get_engine()
    logger.info(
        f"Narrative Context server initialized (environment: {config.environment})",
        extra={"environment": config.environment, "estimator": config.estimator},
    )


def cleanup_server() -> None:
    tools.reset_engines()
    logger.info("Narrative Context server cleanup complete")


def main() -> None:
    """Entry point for the narrative-context-server command."""
    mcp.run()


if __name__ == "__main__":
    main()
