#!/usr/bin/env python3
# MIT License
#
# Copyright (c) 2025 PromptForge Contributors
#
# Permission is hereby granted, free of charge, to any person obtaining a copy
# of this software and associated documentation files (the "Software"), to deal
# in the Software without restriction, including without limitation the rights
# to use, copy, modify, merge, publish, distribute, sublicense, and/or sell
# copies of the Software, and to permit persons to whom the Software is
# furnished to do so, subject to the following conditions:
#
# The above copyright notice and this permission notice shall be included in all
# copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND, EXPRESS OR
# IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF MERCHANTABILITY,
# FITNESS FOR A PARTICULAR PURPOSE AND NONINFRINGEMENT. IN NO EVENT SHALL THE
# AUTHORS OR COPYRIGHT HOLDERS BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER
# LIABILITY, WHETHER IN AN ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM,
# OUT OF OR IN CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.


"""
MCP server setup and tool error handling for PromptForge
"""

import json
import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from .errors import (
    ConfigurationError,
    UpstreamUnavailable,
    ValidationError,
    create_error_response,
)

logger = logging.getLogger(__name__)

SERVER_NAME = "promptforge"

ToolHandler = Callable[[dict[str, Any]], Awaitable[dict[str, Any]]]

_server: Server | None = None


def handle_tool_errors(func: ToolHandler) -> ToolHandler:
    """
    Decorator to handle standard error patterns for MCP tools.

    Every exception becomes a ``{"success": False, ...}`` payload so nothing
    reaches a transport uncaught.
    """

    @wraps(func)
    async def wrapper(arguments: dict[str, Any]) -> dict[str, Any]:
        tool_name = func.__name__
        try:
            return await func(arguments)
        except ValidationError as e:
            logger.warning(f"Validation error in {tool_name}: {e}")
            return create_error_response(e, tool_name)
        except (UpstreamUnavailable, ConfigurationError) as e:
            logger.warning(f"External service error in {tool_name}: {e}")
            return create_error_response(e, tool_name)
        except Exception as e:
            logger.exception(f"Unexpected error in {tool_name}")
            return create_error_response(e, tool_name)

    return wrapper


def is_error_result(result: dict[str, Any]) -> bool:
    return result.get("success") is False


def to_text_content(result: dict[str, Any]) -> list[TextContent]:
    return [TextContent(type="text", text=json.dumps(result, indent=2))]


def get_mcp_server() -> Server:
    """Create the low-level MCP server with the PromptForge tools registered"""
    global _server
    if _server is not None:
        return _server

    # Tools import the core engine; import them lazily to keep core importable on its own
    from ..tools import TOOLS, handle_call_tool

    server = Server(SERVER_NAME)

    @server.list_tools()
    async def handle_list_tools() -> list[Tool]:
        """List available tools"""
        return list(TOOLS)

    @server.call_tool()
    async def handle_tool_call(name: str, arguments: dict | None) -> list[TextContent]:
        """Handle tool calls"""
        # UnknownToolError propagates; the SDK reports it as an error result
        result = await handle_call_tool(name, arguments or {})
        return to_text_content(result)

    _server = server
    return server


async def run_stdio() -> None:
    """Serve MCP over stdin/stdout until the client disconnects"""
    from ..tools import drain_background_tasks

    server = get_mcp_server()
    try:
        async with stdio_server() as streams:
            await server.run(streams[0], streams[1], server.create_initialization_options())
    finally:
        # Let analytics scheduled before disconnect finish before the loop closes
        await drain_background_tasks()


__all__ = [
    "SERVER_NAME",
    "get_mcp_server",
    "handle_tool_errors",
    "is_error_result",
    "run_stdio",
    "to_text_content",
]
