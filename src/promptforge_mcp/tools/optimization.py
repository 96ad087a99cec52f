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
Optimization tools: optimize_prompt and test_optimization
"""

import logging
from typing import Any

from ..core import handle_tool_errors
from .arguments import optional_bool, optional_mapping, optional_str
from .runtime import get_optimizer

logger = logging.getLogger(__name__)


@handle_tool_errors
async def optimize_prompt(arguments: dict[str, Any]) -> dict[str, Any]:
    """Detect the prompt's domain and apply its enhancements"""
    user_context = optional_mapping(arguments, "userContext")
    if user_context is None:
        # Older clients send the request context as "context"
        user_context = optional_mapping(arguments, "context")

    result = await get_optimizer().optimize(
        arguments.get("prompt"),
        domain=optional_str(arguments, "domain"),
        intent=optional_str(arguments, "intent"),
        desired_format=optional_str(arguments, "desiredFormat"),
        user_context=user_context,
        bypass=optional_bool(arguments, "bypassOptimization", False),
        chain_of_thought=optional_bool(arguments, "chainOfThought", False),
        record_analytics=optional_bool(arguments, "recordAnalytics", True),
    )
    logger.info(
        f"Optimized prompt for {result.domain} "
        f"({len(result.modifications)} modifications, confidence {result.confidence})"
    )
    return result.to_dict()


@handle_tool_errors
async def test_optimization(arguments: dict[str, Any]) -> dict[str, Any]:
    """Preview an optimization without recording analytics"""
    prompt = arguments.get("prompt")
    show_diff = optional_bool(arguments, "showDiff", True)

    result = await get_optimizer().optimize(prompt, record_analytics=False)
    was_optimized = result.optimized != result.original

    response: dict[str, Any] = {
        "success": True,
        "original": result.original,
        "optimized": result.optimized,
        "domain": result.domain,
        "confidence": result.confidence,
        "wasOptimized": was_optimized,
    }
    if show_diff and was_optimized:
        original_length = len(result.original)
        optimized_length = len(result.optimized)
        response["comparison"] = {
            "originalLength": original_length,
            "optimizedLength": optimized_length,
            "lengthIncrease": f"{round((optimized_length / original_length - 1) * 100)}%",
            "modifications": [m.to_dict() for m in result.modifications],
        }
    return response
