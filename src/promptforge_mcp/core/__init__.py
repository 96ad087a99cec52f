"""Core prompt-optimization engine and MCP server helpers"""

# Import decorators and engine types only - tools are imported lazily by get_mcp_server
from .errors import (
    ConfigurationError,
    PromptForgeError,
    UnknownToolError,
    UpstreamUnavailable,
    ValidationError,
)
from .optimizer import OptimizationResult, PromptOptimizer
from .server import handle_tool_errors

__all__ = [
    "ConfigurationError",
    "OptimizationResult",
    "PromptForgeError",
    "PromptOptimizer",
    "UnknownToolError",
    "UpstreamUnavailable",
    "ValidationError",
    "handle_tool_errors",
]
