"""MCP tools for PromptForge"""

from .analytics import track_analytics
from .definitions import TOOL_NAMES, TOOLS
from .dispatch import TOOL_HANDLERS, handle_call_tool
from .optimization import optimize_prompt
from .patterns import manage_patterns
from .runtime import build_optimizer, drain_background_tasks, get_optimizer, set_optimizer

__all__ = [
    "TOOLS",
    "TOOL_HANDLERS",
    "TOOL_NAMES",
    "build_optimizer",
    "drain_background_tasks",
    "get_optimizer",
    "handle_call_tool",
    "manage_patterns",
    "optimize_prompt",
    "set_optimizer",
    "track_analytics",
]
