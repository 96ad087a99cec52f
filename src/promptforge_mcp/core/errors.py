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
Error types and AI-assistant-friendly error responses.
Provides structured error payloads that help AI assistants understand and recover from errors.
"""

import logging
from typing import Any

logger = logging.getLogger(__name__)


class PromptForgeError(Exception):
    """Base class for all PromptForge errors"""


class ConfigurationError(PromptForgeError):
    """A required external endpoint or key is missing"""


class UpstreamUnavailable(PromptForgeError):
    """The pattern store or analytics sink could not be reached"""


class ValidationError(PromptForgeError):
    """Tool arguments failed validation"""


class UnknownToolError(PromptForgeError):
    """A tool name that is not registered was invoked"""

    def __init__(self, name: str):
        super().__init__(f"Unknown tool: {name}")
        self.name = name


def create_error_response(error: Exception, context: str) -> dict[str, Any]:
    """
    Create error response with AI-actionable hints.

    Args:
        error: The exception that occurred
        context: Context about where the error occurred (usually the tool name)

    Returns:
        Dict with error details and AI-friendly recovery hints
    """
    error_type = type(error).__name__
    error_msg = str(error)

    response: dict[str, Any] = {
        "success": False,
        "error": error_msg,
        "error_type": error_type,
        "context": context,
    }

    if isinstance(error, ValidationError):
        response.update(
            {
                "_ai_diagnosis": "Tool arguments were rejected",
                "_ai_suggestion": "Check required fields and enum values with tools/list",
            }
        )

    elif isinstance(error, ConfigurationError):
        response.update(
            {
                "_ai_diagnosis": "External service is not configured",
                "_ai_suggestion": "Optimization still works with the built-in patterns",
                "_human_action": (
                    "Set PATTERNS_API_ENDPOINT / ANALYTICS_API_ENDPOINT and their keys in .env"
                ),
            }
        )

    elif isinstance(error, UpstreamUnavailable):
        response.update(
            {
                "_ai_diagnosis": "Pattern store or analytics service unreachable",
                "_ai_suggestion": "Retry later; optimize_prompt falls back to default patterns",
                "_human_action": "Check network access and the configured API endpoints",
            }
        )

    elif isinstance(error, UnknownToolError):
        response.update(
            {
                "_ai_diagnosis": f"No tool named '{error.name}'",
                "_ai_suggestion": "Call tools/list to see available tools",
            }
        )

    else:
        response.update(
            {
                "_ai_diagnosis": f"Unexpected error in {context}",
                "_ai_suggestion": "Check server logs for details",
                "_ai_context": {"error_type": error_type},
            }
        )

    return response
