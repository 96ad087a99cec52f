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
Time-limited pattern cache in front of the pattern store.

The cached snapshot is a read-only mapping swapped in as a whole, so
concurrent readers always see a complete pattern set. Expiry is checked
when the cache is read; there is no background timer.
"""

import asyncio
import logging
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..config import config
from .errors import ConfigurationError, UpstreamUnavailable, ValidationError
from .patterns import DEFAULT_PATTERNS, FALLBACK_DOMAIN, Pattern, PatternSet, ensure_fallback

if TYPE_CHECKING:
    from ..clients.pattern_store import PatternStore

logger = logging.getLogger(__name__)


class PatternCache:
    """Read-mostly cache of the full pattern set with write-through updates"""

    def __init__(
        self,
        store: "PatternStore",
        ttl_seconds: float | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.store = store
        self.ttl_seconds = config.cache_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._clock = clock
        # (snapshot, expires_at) replaced as a single reference
        self._entry: tuple[PatternSet, float] | None = None
        # Bumped on every invalidation so an in-flight fetch cannot cache stale data
        self._generation = 0
        self._refresh_lock = asyncio.Lock()
        self._write_lock = asyncio.Lock()

    def _fresh_snapshot(self) -> PatternSet | None:
        entry = self._entry
        if entry is not None and entry[1] > self._clock():
            return entry[0]
        return None

    @property
    def is_warm(self) -> bool:
        return self._fresh_snapshot() is not None

    def invalidate(self) -> None:
        self._generation += 1
        self._entry = None

    async def load(self, force_refresh: bool = False) -> PatternSet:
        """
        Return the active pattern set.

        Serves the cached snapshot while it is fresh. Otherwise fetches from
        the store; if the store is unreachable or unconfigured the built-in
        defaults are returned (and not cached, so the next call retries).
        """
        if not force_refresh:
            snapshot = self._fresh_snapshot()
            if snapshot is not None:
                return snapshot

        async with self._refresh_lock:
            if not force_refresh:
                # Another caller may have refilled the cache while we waited
                snapshot = self._fresh_snapshot()
                if snapshot is not None:
                    return snapshot

            generation = self._generation
            try:
                patterns = await self.store.get_all()
            except (UpstreamUnavailable, ConfigurationError) as e:
                logger.warning(f"Error loading patterns, using defaults: {e}")
                return ensure_fallback(DEFAULT_PATTERNS)

            snapshot = ensure_fallback(patterns)
            if generation == self._generation:
                self._entry = (snapshot, self._clock() + self.ttl_seconds)
            logger.debug(f"Pattern cache refreshed with {len(snapshot)} patterns")
            return snapshot

    async def get_pattern(self, domain: str, force_refresh: bool = False) -> Pattern | None:
        return (await self.load(force_refresh)).get(domain)

    async def update_pattern(self, domain: str, pattern: Pattern) -> None:
        """Insert or replace one pattern in the store, then invalidate the cache"""
        async with self._write_lock:
            patterns = await self.store.get_all(strict=True)
            patterns[domain] = pattern
            await self.store.replace_all(patterns)
            self.invalidate()
        logger.info(f"Pattern for {domain} updated")

    async def add_pattern(self, domain: str, pattern: Pattern) -> None:
        """Add a new pattern; fails if the domain already exists"""
        async with self._write_lock:
            patterns = await self.store.get_all(strict=True)
            if domain in patterns:
                raise ValidationError(
                    f"Pattern '{domain}' already exists; use action 'update' to replace it"
                )
            patterns[domain] = pattern
            await self.store.replace_all(patterns)
            self.invalidate()
        logger.info(f"Pattern for {domain} added")

    async def delete_pattern(self, domain: str) -> None:
        """Remove a pattern; the fallback domain cannot be deleted"""
        if domain == FALLBACK_DOMAIN:
            raise ValidationError(f"The '{FALLBACK_DOMAIN}' pattern is required and cannot be deleted")
        async with self._write_lock:
            patterns = await self.store.get_all(strict=True)
            if domain not in patterns:
                raise ValidationError(f"Pattern '{domain}' does not exist")
            del patterns[domain]
            await self.store.replace_all(patterns)
            self.invalidate()
        logger.info(f"Pattern for {domain} deleted")
