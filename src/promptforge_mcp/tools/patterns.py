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
Pattern management tool: get, add, update and delete domain patterns
"""

import logging
from typing import Any

from ..core import ValidationError, handle_tool_errors
from ..core.patterns import FALLBACK_DOMAIN, Pattern, pattern_from_dict
from .arguments import optional_bool, optional_mapping, optional_str, require_choice, require_str
from .definitions import PATTERN_ACTIONS
from .runtime import get_optimizer

logger = logging.getLogger(__name__)


def _pattern_argument(domain: str, arguments: dict[str, Any]) -> Pattern:
    data = optional_mapping(arguments, "pattern")
    if data is None:
        raise ValidationError("pattern is required for add and update")
    pattern = pattern_from_dict(domain, data)
    if not pattern.trigger_keywords and domain != FALLBACK_DOMAIN:
        raise ValidationError(f"Pattern '{domain}' needs at least one trigger keyword")
    return pattern


@handle_tool_errors
async def manage_patterns(arguments: dict[str, Any]) -> dict[str, Any]:
    """Read or change the pattern library"""
    action = require_choice(arguments, "action", PATTERN_ACTIONS)
    cache = get_optimizer().cache

    if action == "get":
        force_refresh = optional_bool(arguments, "forceRefresh", False)
        patterns = await cache.load(force_refresh=force_refresh)
        domain = optional_str(arguments, "domain")
        if domain:
            pattern = patterns.get(domain)
            return {
                "success": True,
                "domain": domain,
                "pattern": pattern.to_dict() if pattern else None,
            }
        return {
            "success": True,
            "patterns": {name: pattern.to_dict() for name, pattern in patterns.items()},
            "count": len(patterns),
        }

    domain = require_str(arguments, "domain")

    if action == "delete":
        await cache.delete_pattern(domain)
        return {"success": True, "message": f"Pattern for {domain} deleted", "domain": domain}

    pattern = _pattern_argument(domain, arguments)
    if action == "add":
        await cache.add_pattern(domain, pattern)
        return {"success": True, "message": f"Pattern for {domain} added", "domain": domain}

    await cache.update_pattern(domain, pattern)
    return {"success": True, "message": f"Pattern for {domain} updated", "domain": domain}
