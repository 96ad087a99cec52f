"""
Tests for the time-limited pattern cache
"""

import asyncio
import json
from unittest.mock import AsyncMock

import httpx
import pytest

from promptforge_mcp.clients import HttpPatternStore, InMemoryPatternStore
from promptforge_mcp.core.cache import PatternCache
from promptforge_mcp.core.errors import ConfigurationError, UpstreamUnavailable, ValidationError
from promptforge_mcp.core.patterns import DEFAULT_PATTERNS, FALLBACK_DOMAIN, Pattern


class CountingStore(InMemoryPatternStore):
    """In-memory store that counts full reads"""

    def __init__(self, patterns=None):
        super().__init__(patterns)
        self.reads = 0

    async def get_all(self, strict=False):
        self.reads += 1
        return await super().get_all(strict)


class SlowStore(CountingStore):
    """Store whose reads take a while, so callers overlap"""

    async def get_all(self, strict=False):
        await asyncio.sleep(0.01)
        return await super().get_all(strict)


def legal_pattern(keyword="law"):
    return Pattern("legal", display_name="Legal", trigger_keywords=(keyword,))


class TestPatternCacheLoad:
    """Test cache hits, expiry and forced refresh"""

    @pytest.mark.asyncio
    async def test_hit_within_ttl(self, clock):
        store = CountingStore()
        cache = PatternCache(store, ttl_seconds=300, clock=clock)

        first = await cache.load()
        clock.advance(299)
        second = await cache.load()

        assert first is second
        assert store.reads == 1
        assert cache.is_warm

    @pytest.mark.asyncio
    async def test_expired_entry_refetched(self, clock):
        store = CountingStore()
        cache = PatternCache(store, ttl_seconds=300, clock=clock)

        await cache.load()
        clock.advance(300)
        assert not cache.is_warm
        await cache.load()

        assert store.reads == 2

    @pytest.mark.asyncio
    async def test_force_refresh(self, clock):
        store = CountingStore()
        cache = PatternCache(store, ttl_seconds=300, clock=clock)

        await cache.load()
        await cache.load(force_refresh=True)

        assert store.reads == 2

    @pytest.mark.asyncio
    async def test_concurrent_misses_share_one_fetch(self, clock):
        """Callers racing on a cold cache wait for a single store read"""
        store = SlowStore()
        cache = PatternCache(store, ttl_seconds=300, clock=clock)

        results = await asyncio.gather(*(cache.load() for _ in range(5)))

        assert store.reads == 1
        assert all(result is results[0] for result in results)

    @pytest.mark.asyncio
    async def test_snapshot_is_read_only(self, clock):
        cache = PatternCache(CountingStore(), clock=clock)
        snapshot = await cache.load()
        with pytest.raises(TypeError):
            snapshot["legal"] = legal_pattern()

    @pytest.mark.asyncio
    async def test_fallback_domain_always_present(self, clock):
        store = CountingStore({"legal": legal_pattern()})
        cache = PatternCache(store, clock=clock)

        patterns = await cache.load()

        assert list(patterns) == ["legal", FALLBACK_DOMAIN]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("error", [UpstreamUnavailable("down"), ConfigurationError("unset")])
    async def test_store_failure_returns_defaults_uncached(self, clock, error):
        store = AsyncMock()
        store.get_all.side_effect = error
        cache = PatternCache(store, clock=clock)

        patterns = await cache.load()

        assert dict(patterns) == dict(DEFAULT_PATTERNS)
        assert not cache.is_warm
        await cache.load()
        assert store.get_all.await_count == 2

    @pytest.mark.asyncio
    async def test_unexpected_errors_propagate(self, clock):
        store = AsyncMock()
        store.get_all.side_effect = RuntimeError("bug")
        cache = PatternCache(store, clock=clock)

        with pytest.raises(RuntimeError):
            await cache.load()

    @pytest.mark.asyncio
    async def test_ttl_defaults_from_config(self):
        cache = PatternCache(CountingStore())
        assert cache.ttl_seconds == 300


class TestPatternCacheWrites:
    """Test write-through updates and invalidation"""

    @pytest.mark.asyncio
    async def test_update_invalidates_cache(self, clock):
        store = CountingStore()
        cache = PatternCache(store, clock=clock)
        await cache.load()

        await cache.update_pattern("legal", legal_pattern())
        patterns = await cache.load()

        assert patterns["legal"] == legal_pattern()
        assert store.reads == 3  # load, read-modify-write, reload

    @pytest.mark.asyncio
    async def test_update_replaces_existing(self, clock):
        cache = PatternCache(CountingStore(), clock=clock)

        await cache.update_pattern("legal", legal_pattern("law"))
        await cache.update_pattern("legal", legal_pattern("contract"))

        assert (await cache.get_pattern("legal")).trigger_keywords == ("contract",)

    @pytest.mark.asyncio
    async def test_add_rejects_existing_domain(self, clock):
        cache = PatternCache(CountingStore(), clock=clock)
        with pytest.raises(ValidationError):
            await cache.add_pattern("marketing_copy", legal_pattern())

    @pytest.mark.asyncio
    async def test_add_new_domain(self, clock):
        store = CountingStore()
        cache = PatternCache(store, clock=clock)

        await cache.add_pattern("legal", legal_pattern())

        assert "legal" in await store.get_all()
        assert "legal" in await cache.load()

    @pytest.mark.asyncio
    async def test_delete_domain(self, clock):
        cache = PatternCache(CountingStore(), clock=clock)
        await cache.load()

        await cache.delete_pattern("tax_accounting")

        assert "tax_accounting" not in await cache.load()

    @pytest.mark.asyncio
    async def test_delete_fallback_rejected(self, clock):
        cache = PatternCache(CountingStore(), clock=clock)
        with pytest.raises(ValidationError):
            await cache.delete_pattern(FALLBACK_DOMAIN)

    @pytest.mark.asyncio
    async def test_delete_missing_rejected(self, clock):
        cache = PatternCache(CountingStore(), clock=clock)
        with pytest.raises(ValidationError):
            await cache.delete_pattern("unknown")

    @pytest.mark.asyncio
    async def test_failed_write_propagates(self, clock):
        store = AsyncMock()
        store.get_all.return_value = {}
        store.replace_all.side_effect = UpstreamUnavailable("write failed")
        cache = PatternCache(store, clock=clock)

        with pytest.raises(UpstreamUnavailable):
            await cache.update_pattern("legal", legal_pattern())

    @pytest.mark.asyncio
    async def test_invalidate_during_fetch_is_not_cached(self, clock):
        """A fetch that started before an invalidation must not repopulate the cache"""
        store = CountingStore()
        cache = PatternCache(store, clock=clock)
        original_get_all = store.get_all

        async def get_all_then_invalidate():
            result = await original_get_all()
            cache.invalidate()
            return result

        store.get_all = get_all_then_invalidate
        await cache.load()

        assert not cache.is_warm


class TestWriteThroughRemoteDocument:
    """Test write-through against a remote document holding unreadable entries"""

    DOCUMENT = {
        "general": {"triggerKeywords": []},
        "legacy": {"triggerKeywords": "not-a-list"},
    }

    def make_cache(self, clock, puts):
        def handler(request):
            if request.method == "PUT":
                puts.append(json.loads(request.content))
                return httpx.Response(200, json={})
            return httpx.Response(200, json={"record": self.DOCUMENT})

        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        store = HttpPatternStore("https://patterns.example.com/b/1", timeout=1.0, client=client)
        return PatternCache(store, clock=clock)

    @pytest.mark.asyncio
    async def test_reads_skip_unreadable_entries(self, clock):
        cache = self.make_cache(clock, [])
        patterns = await cache.load()
        assert "legacy" not in patterns
        assert FALLBACK_DOMAIN in patterns

    @pytest.mark.asyncio
    async def test_update_refused_instead_of_dropping_entries(self, clock):
        puts = []
        cache = self.make_cache(clock, puts)

        with pytest.raises(UpstreamUnavailable):
            await cache.update_pattern("legal", legal_pattern())

        assert puts == []

    @pytest.mark.asyncio
    async def test_delete_refused_instead_of_dropping_entries(self, clock):
        puts = []
        cache = self.make_cache(clock, puts)

        with pytest.raises(UpstreamUnavailable):
            await cache.delete_pattern("legacy")

        assert puts == []
