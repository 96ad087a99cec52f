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
Optimization analytics: event model, time-range aggregation and the
fire-and-forget recorder used by the optimizer.
"""

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import TYPE_CHECKING, Any

from .errors import ValidationError

if TYPE_CHECKING:
    from ..clients.analytics import AnalyticsSink

logger = logging.getLogger(__name__)

TIME_RANGES = ("today", "week", "month", "all")
EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_timestamp(value: Any) -> datetime:
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    else:
        return utcnow()
    return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)


@dataclass(frozen=True)
class AnalyticsEvent:
    """One recorded optimization; never updated after creation"""

    domain: str
    confidence: float
    original_length: int
    optimized_length: int
    modification_count: int
    timestamp: datetime = field(default_factory=utcnow)

    def to_record(self) -> dict[str, Any]:
        """Row representation sent to the analytics sink"""
        return {
            "domain": self.domain,
            "confidence": self.confidence,
            "original_length": self.original_length,
            "optimized_length": self.optimized_length,
            "modification_count": self.modification_count,
            "created_at": self.timestamp.isoformat(),
        }

    @classmethod
    def from_record(cls, row: dict[str, Any]) -> "AnalyticsEvent":
        """Build an event from a sink row (snake_case) or tool payload (camelCase)"""

        def pick(snake: str, camel: str, default: Any) -> Any:
            if snake in row:
                return row[snake]
            return row.get(camel, default)

        try:
            return cls(
                domain=str(row.get("domain") or "general"),
                confidence=float(row.get("confidence") or 0.0),
                original_length=int(pick("original_length", "originalLength", 0)),
                optimized_length=int(pick("optimized_length", "optimizedLength", 0)),
                modification_count=int(pick("modification_count", "modificationCount", 0)),
                timestamp=_parse_timestamp(pick("created_at", "timestamp", None)),
            )
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid analytics record: {e}") from e


def resolve_time_range(time_range: str, now: datetime | None = None) -> datetime:
    """
    Start of the window for a named time range.

    ``today`` starts at UTC midnight, ``week`` and ``month`` reach back
    7 and 30 days, ``all`` starts at the epoch.
    """
    now = now or utcnow()
    if time_range == "today":
        return now.replace(hour=0, minute=0, second=0, microsecond=0)
    if time_range == "week":
        return now - timedelta(days=7)
    if time_range == "month":
        return now - timedelta(days=30)
    if time_range == "all":
        return EPOCH
    raise ValidationError(f"Invalid timeRange '{time_range}'. Use one of: {', '.join(TIME_RANGES)}")


def summarize(
    events: Iterable[AnalyticsEvent],
    time_range: str,
    from_date: datetime,
    to_date: datetime,
) -> dict[str, Any]:
    """Aggregate events into totals, mean confidence and a per-domain breakdown"""
    events = list(events)
    breakdown: dict[str, int] = {}
    for event in events:
        breakdown[event.domain] = breakdown.get(event.domain, 0) + 1

    average = sum(e.confidence for e in events) / len(events) if events else 0.0
    return {
        "totalOptimizations": len(events),
        "averageConfidence": round(average, 2),
        "domainBreakdown": breakdown,
        "timeRange": time_range,
        "fromDate": from_date.isoformat(),
        "toDate": to_date.isoformat(),
    }


class AnalyticsRecorder:
    """
    Sends optimization events to an analytics sink.

    Recording is best effort: failures are logged and never reach the caller.
    """

    def __init__(self, sink: "AnalyticsSink", clock: Callable[[], datetime] = utcnow):
        self.sink = sink
        self._clock = clock
        # Strong references so background tasks are not garbage collected mid-flight
        self._pending: set[asyncio.Task] = set()

    async def record(self, event: AnalyticsEvent) -> bool:
        """Record one event, returning whether the sink accepted it"""
        try:
            await self.sink.record(event)
            return True
        except Exception as e:
            logger.warning(f"Analytics recording failed for domain '{event.domain}': {e}")
            return False

    def record_in_background(self, event: AnalyticsEvent) -> asyncio.Task:
        """Schedule recording without waiting for it"""
        task = asyncio.create_task(self.record(event))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    async def drain(self) -> None:
        """Wait for all background recordings (used at shutdown and in tests)"""
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def query(self, time_range: str = "week", domain: str | None = None) -> dict[str, Any]:
        """
        Summarize recorded optimizations.

        Raises:
            ValidationError: For an unknown time range
            UpstreamUnavailable: If the sink cannot be queried
        """
        now = self._clock()
        from_date = resolve_time_range(time_range, now)
        events = await self.sink.query(since=from_date, domain=domain)
        return summarize(events, time_range, from_date, now)
