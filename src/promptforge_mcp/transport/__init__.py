"""HTTP transport for PromptForge MCP"""

from .http_server import JSONRPCHandler, create_http_app

__all__ = ["JSONRPCHandler", "create_http_app"]
