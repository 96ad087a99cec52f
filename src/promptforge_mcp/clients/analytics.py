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
Analytics sinks: append-only storage for optimization events.
"""

import logging
from datetime import datetime
from typing import Protocol

import httpx

from ..config import ServerConfig, config
from ..core.analytics import AnalyticsEvent
from ..core.errors import ConfigurationError, UpstreamUnavailable, ValidationError

logger = logging.getLogger(__name__)


class AnalyticsSink(Protocol):
    async def record(self, event: AnalyticsEvent) -> None: ...

    async def query(self, since: datetime, domain: str | None = None) -> list[AnalyticsEvent]: ...


class InMemoryAnalyticsSink:
    """Keeps events for the life of the process"""

    def __init__(self):
        self._events: list[AnalyticsEvent] = []

    async def record(self, event: AnalyticsEvent) -> None:
        self._events.append(event)

    async def query(self, since: datetime, domain: str | None = None) -> list[AnalyticsEvent]:
        return [
            event
            for event in self._events
            if event.timestamp >= since and (domain is None or event.domain == domain)
        ]

    def __len__(self) -> int:
        return len(self._events)


class HttpAnalyticsSink:
    """Analytics table behind a PostgREST-style API (e.g. Supabase)"""

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        if not endpoint:
            raise ConfigurationError("Analytics API endpoint not configured")
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = config.analytics_timeout if timeout is None else timeout
        self._client = client

    def _headers(self) -> dict[str, str]:
        if not self.api_key:
            return {}
        return {"apikey": self.api_key, "Authorization": f"Bearer {self.api_key}"}

    def _client_or_new(self) -> httpx.AsyncClient:
        return self._client or httpx.AsyncClient(timeout=self.timeout)

    async def record(self, event: AnalyticsEvent) -> None:
        client = self._client_or_new()
        try:
            response = await client.post(
                self.endpoint,
                headers={
                    **self._headers(),
                    "Content-Type": "application/json",
                    "Prefer": "return=minimal",
                },
                json=event.to_record(),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"Failed to record analytics: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Failed to record analytics: {type(e).__name__}") from e
        finally:
            if client is not self._client:
                await client.aclose()

    async def query(self, since: datetime, domain: str | None = None) -> list[AnalyticsEvent]:
        params = {"created_at": f"gte.{since.isoformat()}"}
        if domain:
            params["domain"] = f"eq.{domain}"

        client = self._client_or_new()
        try:
            response = await client.get(
                self.endpoint, headers=self._headers(), params=params, timeout=self.timeout
            )
            response.raise_for_status()
            rows = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"Failed to fetch analytics: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Failed to fetch analytics: {type(e).__name__}") from e
        except ValueError as e:
            raise UpstreamUnavailable("Analytics service returned invalid JSON") from e
        finally:
            if client is not self._client:
                await client.aclose()

        if not isinstance(rows, list):
            raise UpstreamUnavailable("Analytics service returned an unexpected payload")

        events = []
        for row in rows:
            try:
                events.append(AnalyticsEvent.from_record(row))
            except (ValidationError, AttributeError) as e:
                logger.warning(f"Skipping malformed analytics row: {e}")
        return events


def create_analytics_sink(settings: ServerConfig | None = None) -> AnalyticsSink:
    """Build the configured sink, falling back to memory when no endpoint is set"""
    settings = settings or config
    try:
        return HttpAnalyticsSink(
            settings.analytics_api_endpoint,
            api_key=settings.analytics_api_key,
            timeout=settings.analytics_timeout,
        )
    except ConfigurationError as e:
        logger.warning(f"{e}; analytics are kept in memory only")
        return InMemoryAnalyticsSink()
