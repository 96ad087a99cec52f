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
Analytics tool: record optimization events and query summaries
"""

import logging
from typing import Any

from ..core import ValidationError, handle_tool_errors
from ..core.analytics import AnalyticsEvent
from .arguments import optional_mapping, optional_str, require_choice
from .definitions import ANALYTICS_ACTIONS
from .runtime import get_optimizer

logger = logging.getLogger(__name__)


@handle_tool_errors
async def track_analytics(arguments: dict[str, Any]) -> dict[str, Any]:
    """Record one event or summarize recorded events"""
    action = require_choice(arguments, "action", ANALYTICS_ACTIONS)
    recorder = get_optimizer().recorder
    if recorder is None:
        raise ValidationError("Analytics are disabled")

    if action == "record":
        data = optional_mapping(arguments, "data")
        if data is None:
            raise ValidationError("data is required for action 'record'")
        event = AnalyticsEvent.from_record(dict(data))
        recorded = await recorder.record(event)
        return {
            "success": True,
            "recorded": recorded,
            "timestamp": event.timestamp.isoformat(),
        }

    query_params = optional_mapping(arguments, "queryParams") or {}
    time_range = optional_str(query_params, "timeRange") or "week"
    domain = optional_str(query_params, "domain")
    summary = await recorder.query(time_range=time_range, domain=domain)
    return {"success": True, **summary}
