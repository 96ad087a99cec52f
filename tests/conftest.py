"""Shared fixtures for PromptForge tests"""

import pytest

from promptforge_mcp.clients import InMemoryAnalyticsSink, InMemoryPatternStore
from promptforge_mcp.core.analytics import AnalyticsRecorder
from promptforge_mcp.core.cache import PatternCache
from promptforge_mcp.core.optimizer import PromptOptimizer
from promptforge_mcp.tools import set_optimizer


class FakeClock:
    """Monotonic clock that only moves when told to"""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def pattern_store():
    return InMemoryPatternStore()


@pytest.fixture
def analytics_sink():
    return InMemoryAnalyticsSink()


@pytest.fixture
def optimizer(pattern_store, analytics_sink):
    cache = PatternCache(pattern_store, ttl_seconds=300)
    return PromptOptimizer(cache, recorder=AnalyticsRecorder(analytics_sink))


@pytest.fixture
def installed_optimizer(optimizer):
    """Make ``optimizer`` the one the tool handlers use"""
    set_optimizer(optimizer)
    yield optimizer
    set_optimizer(None)
