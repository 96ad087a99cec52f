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
Prompt optimizer: ties the pattern cache, domain detector, enhancement
engine, confidence estimator and analytics recorder together.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from ..config import config
from .analytics import AnalyticsEvent, AnalyticsRecorder
from .cache import PatternCache
from .confidence import ConfidenceEstimator
from .detector import DetectionResult, DomainDetector, DomainScore
from .enhancement import EnhancementEngine, Modification
from .errors import ValidationError
from .patterns import FALLBACK_DOMAIN

logger = logging.getLogger(__name__)

AUTO_DOMAIN = "auto"


@dataclass
class OptimizationResult:
    """Result of one optimize call; not persisted"""

    original: str
    optimized: str
    domain: str
    confidence: float
    modifications: list[Modification] = field(default_factory=list)
    alternatives: list[DomainScore] = field(default_factory=list)
    detection_confidence: float = 0.0
    explanation: str = ""
    bypassed: bool = False

    def to_dict(self) -> dict[str, Any]:
        """Convert result to the tool response shape"""
        return {
            "success": True,
            "original": self.original,
            "optimized": self.optimized,
            "domain": self.domain,
            "confidence": self.confidence,
            "modifications": [m.to_dict() for m in self.modifications],
            "explanation": self.explanation,
            "alternatives": [a.to_dict() for a in self.alternatives],
            "detectionConfidence": self.detection_confidence,
            "bypassed": self.bypassed,
        }


def validate_prompt(prompt: Any) -> str:
    """
    Validate the prompt argument.

    Raises:
        ValidationError: If the prompt is missing, blank or too long
    """
    if not isinstance(prompt, str) or not prompt.strip():
        raise ValidationError("prompt is required and must be a non-empty string")
    if len(prompt) > config.max_prompt_length:
        raise ValidationError(
            f"Prompt too long (maximum {config.max_prompt_length} characters)"
        )
    return prompt


class PromptOptimizer:
    """Single core engine behind every transport"""

    def __init__(
        self,
        cache: PatternCache,
        recorder: AnalyticsRecorder | None = None,
        detector: DomainDetector | None = None,
        engine: EnhancementEngine | None = None,
        estimator: ConfidenceEstimator | None = None,
    ):
        self.cache = cache
        self.recorder = recorder
        self.detector = detector or DomainDetector()
        self.engine = engine or EnhancementEngine()
        self.estimator = estimator or ConfidenceEstimator()

    async def optimize(
        self,
        prompt: str,
        domain: str | None = None,
        intent: str | None = None,
        desired_format: str | None = None,
        user_context: Mapping[str, Any] | None = None,
        bypass: bool = False,
        chain_of_thought: bool = False,
        record_analytics: bool = True,
    ) -> OptimizationResult:
        """
        Optimize a prompt.

        Args:
            prompt: The raw prompt
            domain: Explicit domain override ("auto" or None to detect)
            intent: Optional hint used during detection
            desired_format: Output format instruction to append (json, xml, ...)
            user_context: Request context rendered by context_injection rules
            bypass: Return the prompt untouched with confidence 1.0
            chain_of_thought: Add step-by-step reasoning guidance
            record_analytics: Send an analytics event in the background

        Returns:
            OptimizationResult
        """
        prompt = validate_prompt(prompt)
        if user_context is not None and not isinstance(user_context, Mapping):
            raise ValidationError("userContext must be an object")

        requested = domain if domain and domain != AUTO_DOMAIN else None

        if bypass:
            return OptimizationResult(
                original=prompt,
                optimized=prompt,
                domain=requested or FALLBACK_DOMAIN,
                confidence=1.0,
                explanation="Optimization bypassed; prompt returned unchanged",
                bypassed=True,
            )

        patterns = await self.cache.load()
        detection: DetectionResult = self.detector.detect(prompt, patterns, intent=intent)

        if requested and requested in patterns:
            resolved = requested
            domain_matched = True
        else:
            if requested:
                logger.info(f"Unknown domain '{requested}' requested, using detection")
            resolved = detection.domain
            domain_matched = detection.matched

        pattern = patterns.get(resolved) or patterns[FALLBACK_DOMAIN]
        outcome = self.engine.apply(
            prompt,
            pattern,
            request_context=user_context,
            chain_of_thought=chain_of_thought,
            desired_format=desired_format,
        )
        confidence = self.estimator.estimate(outcome.modifications, domain_matched)

        label = pattern.display_name or resolved
        result = OptimizationResult(
            original=prompt,
            optimized=outcome.optimized,
            domain=resolved,
            confidence=confidence,
            modifications=outcome.modifications,
            alternatives=detection.alternatives,
            detection_confidence=detection.confidence,
            explanation=(
                f"Applied {len(outcome.modifications)} enhancements based on {label} pattern"
            ),
        )

        if record_analytics and self.recorder is not None:
            self.recorder.record_in_background(
                AnalyticsEvent(
                    domain=result.domain,
                    confidence=result.confidence,
                    original_length=len(result.original),
                    optimized_length=len(result.optimized),
                    modification_count=len(result.modifications),
                )
            )

        return result
