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
Tool definitions advertised through tools/list
"""

from mcp.types import Tool

from ..core.analytics import TIME_RANGES
from ..core.enhancement import OUTPUT_FORMATS

PATTERN_ACTIONS = ("get", "add", "update", "delete")
ANALYTICS_ACTIONS = ("record", "query")

TOOLS: list[Tool] = [
    Tool(
        name="optimize_prompt",
        description=(
            "Optimize a prompt for better AI responses. "
            "Detects the prompt's domain (marketing, data analysis, tax, code, ...) "
            "and applies that domain's enhancement rules. "
            "Returns the optimized prompt with confidence and a list of modifications."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "description": "The prompt to optimize"},
                "domain": {
                    "type": "string",
                    "description": "Domain to use instead of detection ('auto' to detect)",
                    "default": "auto",
                },
                "intent": {
                    "type": "string",
                    "description": "Optional hint about what the user wants; used for detection",
                },
                "desiredFormat": {
                    "type": "string",
                    "enum": list(OUTPUT_FORMATS),
                    "description": "Ask for the answer in this output format",
                },
                "userContext": {
                    "type": "object",
                    "description": "Context rendered into the prompt (company, industry, audience, tone, goals)",
                },
                "bypassOptimization": {
                    "type": "boolean",
                    "default": False,
                    "description": "Return the prompt unchanged",
                },
                "chainOfThought": {
                    "type": "boolean",
                    "default": False,
                    "description": "Add step-by-step reasoning guidance",
                },
                "recordAnalytics": {
                    "type": "boolean",
                    "default": True,
                    "description": "Record this optimization in analytics",
                },
            },
            "required": ["prompt"],
        },
    ),
    Tool(
        name="manage_patterns",
        description=(
            "Get, add, update or delete domain patterns. "
            "Patterns define trigger keywords and the enhancements applied to matching prompts."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "action": {"type": "string", "enum": list(PATTERN_ACTIONS)},
                "domain": {"type": "string", "description": "Domain name of the pattern"},
                "pattern": {
                    "type": "object",
                    "description": (
                        "Pattern definition: displayName, triggerKeywords, keywordWeights, "
                        "features, enhancements [{type, value, reason}], examples"
                    ),
                },
                "forceRefresh": {
                    "type": "boolean",
                    "default": False,
                    "description": "Bypass the pattern cache when reading",
                },
            },
            "required": ["action"],
        },
    ),
    Tool(
        name="track_analytics",
        description="Record an optimization event or query aggregated optimization analytics",
        inputSchema={
            "type": "object",
            "properties": {
                "action": {"type": "string", "enum": list(ANALYTICS_ACTIONS)},
                "data": {
                    "type": "object",
                    "description": (
                        "Event for action 'record': domain, confidence, originalLength, "
                        "optimizedLength, modificationCount"
                    ),
                },
                "queryParams": {
                    "type": "object",
                    "properties": {
                        "timeRange": {
                            "type": "string",
                            "enum": list(TIME_RANGES),
                            "default": "week",
                        },
                        "domain": {"type": "string"},
                    },
                },
            },
            "required": ["action"],
        },
    ),
    Tool(
        name="test_optimization",
        description=(
            "Preview how a prompt would be optimized without recording analytics. "
            "Set showDiff for a before/after comparison."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "prompt": {"type": "string", "description": "The prompt to test"},
                "showDiff": {
                    "type": "boolean",
                    "default": True,
                    "description": "Include a before/after comparison",
                },
            },
            "required": ["prompt"],
        },
    ),
]

TOOL_NAMES = tuple(tool.name for tool in TOOLS)
