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
Process-wide optimizer used by the tool handlers, created on first use
"""

import logging

from ..clients import create_analytics_sink, create_pattern_store
from ..config import ServerConfig, config
from ..core.analytics import AnalyticsRecorder
from ..core.cache import PatternCache
from ..core.detector import DomainDetector
from ..core.optimizer import PromptOptimizer

logger = logging.getLogger(__name__)

# Initialize global optimizer (will be created on first use)
_optimizer: PromptOptimizer | None = None


def build_optimizer(settings: ServerConfig | None = None) -> PromptOptimizer:
    """Wire store, cache, sink and engine together from configuration"""
    settings = settings or config
    cache = PatternCache(create_pattern_store(settings), ttl_seconds=settings.cache_ttl_seconds)
    recorder = AnalyticsRecorder(create_analytics_sink(settings))
    detector = DomainDetector(mode=settings.detection_mode)
    return PromptOptimizer(cache, recorder=recorder, detector=detector)


def get_optimizer() -> PromptOptimizer:
    """Lazy initialization of the optimizer"""
    global _optimizer
    if _optimizer is None:
        _optimizer = build_optimizer()
        logger.info(f"Optimizer initialized: {config.to_dict()}")
    return _optimizer


def set_optimizer(optimizer: PromptOptimizer | None) -> None:
    """Replace the global optimizer (None resets to lazy creation)"""
    global _optimizer
    _optimizer = optimizer


async def drain_background_tasks() -> None:
    """Wait for pending analytics recordings, if an optimizer was ever created"""
    if _optimizer is not None and _optimizer.recorder is not None:
        await _optimizer.recorder.drain()
