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
HTTP JSON-RPC transport for PromptForge MCP.

Stateless: every POST /mcp carries one JSON-RPC 2.0 message and is answered
directly with JSON. Tools run through the same dispatcher as the stdio server.
"""

import json
import logging
from contextlib import asynccontextmanager
from typing import Any

from mcp.types import LATEST_PROTOCOL_VERSION
from starlette.applications import Starlette
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.routing import Route

from .. import __version__
from ..config import ServerConfig, config
from ..core import UnknownToolError
from ..core.server import SERVER_NAME, is_error_result
from ..tools import TOOL_NAMES, TOOLS, drain_background_tasks, handle_call_tool

logger = logging.getLogger(__name__)

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603


class JSONRPCHandler:
    """Handle JSON-RPC 2.0 messages."""

    def __init__(self):
        self.metrics = {"requests_handled": 0, "tool_calls": 0, "errors": 0}

    @staticmethod
    def create_error_response(request_id: Any, code: int, message: str, data: Any = None) -> dict:
        """Create error response."""
        error: dict[str, Any] = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        return {"jsonrpc": "2.0", "id": request_id, "error": error}

    @staticmethod
    def create_success_response(request_id: Any, result: Any) -> dict:
        """Create success response."""
        return {"jsonrpc": "2.0", "id": request_id, "result": result}

    @staticmethod
    def is_valid_request(body: Any) -> bool:
        return (
            isinstance(body, dict)
            and body.get("jsonrpc") == "2.0"
            and isinstance(body.get("method"), str)
            and isinstance(body.get("params", {}), dict)
        )

    async def handle(self, body: dict[str, Any]) -> dict[str, Any]:
        """Dispatch one request to its method and build the response message"""
        self.metrics["requests_handled"] += 1
        request_id = body.get("id")
        method = body["method"]
        params = body.get("params") or {}

        if method == "initialize":
            return self.create_success_response(request_id, self._initialize_result(params))
        if method == "ping":
            return self.create_success_response(request_id, {})
        if method == "tools/list":
            tools = [
                tool.model_dump(mode="json", by_alias=True, exclude_none=True) for tool in TOOLS
            ]
            return self.create_success_response(request_id, {"tools": tools})
        if method == "tools/call":
            return await self._call_tool(request_id, params)

        return self.create_error_response(
            request_id, METHOD_NOT_FOUND, f"Method not found: {method}"
        )

    async def _call_tool(self, request_id: Any, params: dict[str, Any]) -> dict[str, Any]:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            return self.create_error_response(request_id, INVALID_PARAMS, "Tool name is required")

        self.metrics["tool_calls"] += 1
        try:
            result = await handle_call_tool(name, params.get("arguments") or {})
        except UnknownToolError as e:
            return self.create_error_response(
                request_id, INVALID_PARAMS, str(e), {"available_tools": list(TOOL_NAMES)}
            )

        return self.create_success_response(
            request_id,
            {
                "content": [{"type": "text", "text": json.dumps(result, indent=2)}],
                "isError": is_error_result(result),
            },
        )

    @staticmethod
    def _initialize_result(params: dict[str, Any]) -> dict[str, Any]:
        return {
            "protocolVersion": params.get("protocolVersion") or LATEST_PROTOCOL_VERSION,
            "capabilities": {"tools": {"listChanged": False}},
            "serverInfo": {"name": SERVER_NAME, "version": __version__},
        }


def create_http_app(settings: ServerConfig | None = None) -> Starlette:
    """Create Starlette HTTP app for the MCP server.

    Returns:
        Starlette application instance
    """
    settings = settings or config
    handler = JSONRPCHandler()
    allowed_origins = set(settings.cors_origins)

    async def handle_mcp_request(request: Request) -> Response:
        """Handle MCP requests via HTTP."""
        # Reject cross-site requests from origins that are not allowed
        origin = request.headers.get("origin", "")
        if origin and origin not in allowed_origins:
            logger.warning(f"Invalid origin rejected: {origin}")
            return JSONResponse({"error": "Invalid origin"}, status_code=403)

        try:
            body = await request.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"JSON parse error: {e}")
            return JSONResponse(
                handler.create_error_response(None, PARSE_ERROR, "Parse error", str(e)),
                status_code=400,
            )

        if not handler.is_valid_request(body):
            return JSONResponse(
                handler.create_error_response(
                    body.get("id") if isinstance(body, dict) else None,
                    INVALID_REQUEST,
                    "Invalid Request",
                    "Missing or invalid JSON-RPC 2.0 structure",
                ),
                status_code=400,
            )

        # Notifications have no id and get no response body
        if "id" not in body:
            logger.debug(f"Notification received: {body['method']}")
            return Response(status_code=202)

        try:
            return JSONResponse(await handler.handle(body))
        except Exception:
            handler.metrics["errors"] += 1
            logger.exception("Request handling error")
            return JSONResponse(
                handler.create_error_response(body.get("id"), INTERNAL_ERROR, "Internal error"),
                status_code=500,
            )

    async def health_check(request: Request) -> JSONResponse:
        """Health check endpoint."""
        return JSONResponse(
            {
                "status": "ok",
                "server": "promptforge-mcp",
                "version": __version__,
                "transport": "http",
                "tools": list(TOOL_NAMES),
                "metrics": dict(handler.metrics),
            }
        )

    @asynccontextmanager
    async def lifespan(app: Starlette):
        logger.info(f"HTTP transport ready on http://{settings.http_host}:{settings.http_port}/mcp")
        yield
        await drain_background_tasks()

    app = Starlette(
        routes=[
            Route("/mcp", handle_mcp_request, methods=["POST"]),
            Route("/health", health_check, methods=["GET"]),
            Route("/", health_check, methods=["GET"]),
        ],
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    return app
