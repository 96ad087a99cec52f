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
Pattern storage backends.
The store is the durable home of the pattern library; the cache sits in front of it.
"""

import logging
from collections.abc import Mapping
from typing import Protocol

import httpx

from ..config import ServerConfig, config
from ..core.errors import ConfigurationError, UpstreamUnavailable, ValidationError
from ..core.patterns import (
    DEFAULT_PATTERNS,
    Pattern,
    parse_pattern_set,
    serialize_pattern_set,
)

logger = logging.getLogger(__name__)


class PatternStore(Protocol):
    """Durable mapping from domain name to Pattern"""

    async def get_all(self, strict: bool = False) -> dict[str, Pattern]: ...

    async def get(self, domain: str) -> Pattern | None: ...

    async def replace_all(self, patterns: Mapping[str, Pattern]) -> None: ...


class InMemoryPatternStore:
    """Process-local store, seeded with the built-in patterns by default"""

    def __init__(self, patterns: Mapping[str, Pattern] | None = None):
        self._patterns: dict[str, Pattern] = dict(
            DEFAULT_PATTERNS if patterns is None else patterns
        )

    async def get_all(self, strict: bool = False) -> dict[str, Pattern]:
        return dict(self._patterns)

    async def get(self, domain: str) -> Pattern | None:
        return self._patterns.get(domain)

    async def replace_all(self, patterns: Mapping[str, Pattern]) -> None:
        self._patterns = dict(patterns)


class HttpPatternStore:
    """
    Pattern library kept as a single JSON document behind a REST endpoint
    (JSONBin-compatible: GET returns the document, PUT replaces it).
    """

    def __init__(
        self,
        endpoint: str,
        api_key: str = "",
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        if not endpoint:
            raise ConfigurationError("Patterns API endpoint not configured")
        self.endpoint = endpoint
        self.api_key = api_key
        self.timeout = config.store_timeout if timeout is None else timeout
        self._client = client

    def _headers(self) -> dict[str, str]:
        headers = {"X-Bin-Meta": "false"}
        if self.api_key:
            headers["X-Master-Key"] = self.api_key
        return headers

    def _client_or_new(self) -> httpx.AsyncClient:
        return self._client or httpx.AsyncClient(timeout=self.timeout)

    async def get_all(self, strict: bool = False) -> dict[str, Pattern]:
        """
        Fetch the whole pattern document.

        With ``strict`` a document holding any malformed entry is refused
        rather than returned without it.

        Raises:
            UpstreamUnavailable: On network failure, timeout, bad status or bad payload
        """
        client = self._client_or_new()
        try:
            response = await client.get(self.endpoint, headers=self._headers(), timeout=self.timeout)
            response.raise_for_status()
            document = response.json()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"Failed to load patterns: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Failed to load patterns: {type(e).__name__}") from e
        except ValueError as e:
            raise UpstreamUnavailable("Pattern store returned invalid JSON") from e
        finally:
            if client is not self._client:
                await client.aclose()

        # JSONBin wraps the document in "record" unless X-Bin-Meta is honored
        if isinstance(document, dict) and isinstance(document.get("record"), dict):
            document = document["record"]
        try:
            return parse_pattern_set(document, strict=strict)
        except ValidationError as e:
            raise UpstreamUnavailable(f"Pattern store returned an unusable document: {e}") from e

    async def get(self, domain: str) -> Pattern | None:
        return (await self.get_all()).get(domain)

    async def replace_all(self, patterns: Mapping[str, Pattern]) -> None:
        """
        Overwrite the stored document with ``patterns``.

        Raises:
            UpstreamUnavailable: If the write did not succeed
        """
        client = self._client_or_new()
        try:
            response = await client.put(
                self.endpoint,
                headers={**self._headers(), "Content-Type": "application/json"},
                json=serialize_pattern_set(patterns),
                timeout=self.timeout,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise UpstreamUnavailable(
                f"Failed to update patterns: {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamUnavailable(f"Failed to update patterns: {type(e).__name__}") from e
        finally:
            if client is not self._client:
                await client.aclose()


def create_pattern_store(settings: ServerConfig | None = None) -> PatternStore:
    """Build the configured store, falling back to memory when no endpoint is set"""
    settings = settings or config
    try:
        store = HttpPatternStore(
            settings.patterns_api_endpoint,
            api_key=settings.patterns_api_key,
            timeout=settings.store_timeout,
        )
    except ConfigurationError as e:
        logger.warning(f"{e}; using in-memory pattern store (changes are not durable)")
        return InMemoryPatternStore()

    if not settings.patterns_api_key:
        logger.warning("PATTERNS_API_KEY is not set; pattern store requests are unauthenticated")
    return store
