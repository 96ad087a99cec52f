"""Pattern store and analytics sink clients"""

from .analytics import (
    AnalyticsSink,
    HttpAnalyticsSink,
    InMemoryAnalyticsSink,
    create_analytics_sink,
)
from .pattern_store import (
    HttpPatternStore,
    InMemoryPatternStore,
    PatternStore,
    create_pattern_store,
)

__all__ = [
    "AnalyticsSink",
    "HttpAnalyticsSink",
    "HttpPatternStore",
    "InMemoryAnalyticsSink",
    "InMemoryPatternStore",
    "PatternStore",
    "create_analytics_sink",
    "create_pattern_store",
]
