#!/usr/bin/env python3
"""
PromptForge MCP Server
Domain-aware prompt optimization exposed as MCP tools

CRITICAL: This server uses stdio transport for MCP protocol communication.
- stdout is reserved for MCP JSON-RPC messages
- All logging/debug output must go to stderr or files
"""

import asyncio
import logging
import sys

__version__ = "1.0.0"

from .config import config  # noqa: E402

# Configure logging to stderr only - NEVER stdout in MCP servers
logging.basicConfig(
    level=config.log_level.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

from .core.server import get_mcp_server, run_stdio  # noqa: E402

__all__ = ["__version__", "create_server", "http_main", "main"]


def _warn_missing_settings() -> None:
    for name in config.missing_settings():
        logger.warning(f"{name} is not set; falling back to built-in defaults for that service")


def create_server():
    """Create and return the MCP server instance.

    Returns:
        The low-level MCP server with all tools registered.
    """
    return get_mcp_server()


def main() -> None:
    """Run the MCP server with stdio transport (default)"""
    logger.info("Starting PromptForge MCP server (stdio)")
    _warn_missing_settings()

    try:
        asyncio.run(run_stdio())
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


def http_main(host: str | None = None, port: int | None = None) -> None:
    """Run the MCP server with the HTTP JSON-RPC transport.

    Args:
        host: Host to bind to (default: MCP_HTTP_HOST or 127.0.0.1)
        port: Port to bind to (default: MCP_HTTP_PORT or 8000)
    """
    import uvicorn

    from .transport import create_http_app

    host = host or config.http_host
    port = port or config.http_port
    logger.info(f"Starting PromptForge MCP server (HTTP) on {host}:{port}")
    _warn_missing_settings()

    try:
        app = create_http_app()
        uvicorn_config = uvicorn.Config(
            app=app,
            host=host,
            port=port,
            log_level="warning",  # Reduce uvicorn logging, let our logger handle it
            access_log=False,
        )
        uvicorn.Server(uvicorn_config).run()
    except KeyboardInterrupt:
        logger.info("Server shutdown requested")
    except Exception:
        logger.exception("Server error")
        raise
