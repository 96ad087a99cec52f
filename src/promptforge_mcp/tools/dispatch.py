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
Tool dispatcher shared by the stdio and HTTP transports
"""

from typing import Any

from ..core import UnknownToolError
from ..core.server import ToolHandler
from .analytics import track_analytics
from .optimization import optimize_prompt, test_optimization
from .patterns import manage_patterns

TOOL_HANDLERS: dict[str, ToolHandler] = {
    "optimize_prompt": optimize_prompt,
    "manage_patterns": manage_patterns,
    "track_analytics": track_analytics,
    "test_optimization": test_optimization,
}


async def handle_call_tool(name: str, arguments: dict[str, Any] | None) -> dict[str, Any]:
    """
    Run one tool and return its JSON payload.

    Tool failures come back as ``{"success": False, ...}`` payloads.

    Raises:
        UnknownToolError: If no tool is registered under ``name``
    """
    handler = TOOL_HANDLERS.get(name)
    if handler is None:
        raise UnknownToolError(name)
    if not isinstance(arguments, dict):
        arguments = {}
    return await handler(arguments)
