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
Domain detection for PromptForge
Scores every known pattern against a prompt using keyword and feature signals
"""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from ..config import config
from .patterns import FALLBACK_DOMAIN, Pattern, PatternSet

logger = logging.getLogger(__name__)


class ScoringMode(Enum):
    """Keyword scoring strategy"""

    WEIGHTED = "weighted"
    RATIO = "ratio"


# Verb families that mark the intent of a prompt
FEATURE_VERBS: dict[str, list[str]] = {
    "creative": ["write", "create", "generate", "draft", "compose", "design", "brainstorm"],
    "analytical": ["analyze", "analyse", "compare", "evaluate", "assess", "measure", "forecast"],
    "debugging": ["debug", "fix", "error", "bug", "traceback", "exception", "crash"],
    "instructional": ["explain", "how to", "how do", "teach", "describe", "guide", "tutorial"],
    "persuasive": ["persuade", "convince", "sell", "promote", "pitch", "convert"],
}

SHORT_PROMPT_WORDS = 10
LONG_PROMPT_WORDS = 50


def extract_features(text: str) -> frozenset[str]:
    """
    Derive abstract feature tags from simple lexical signals.

    This is a fixed rule table: length bucket, punctuation and code
    markers, and the verb families in FEATURE_VERBS.
    """
    features: set[str] = set()
    lowered = text.lower()

    word_count = len(text.split())
    if word_count < SHORT_PROMPT_WORDS:
        features.add("short")
    elif word_count > LONG_PROMPT_WORDS:
        features.add("long")
    else:
        features.add("medium")

    if "?" in text:
        features.add("question")
    if "```" in text or re.search(r"`[^`\n]+`", text):
        features.add("code")
    if "\n" in text.strip() or re.search(r"^\s*(?:[-*]|\d+\.)\s", text, re.MULTILINE):
        features.add("structured")

    for feature, verbs in FEATURE_VERBS.items():
        for verb in verbs:
            if re.search(r"\b" + re.escape(verb) + r"\b", lowered):
                features.add(feature)
                break

    return frozenset(features)


@dataclass
class DomainScore:
    domain: str
    score: float
    matched_keywords: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"domain": self.domain, "score": round(self.score, 4)}


@dataclass
class DetectionResult:
    """Outcome of scoring a prompt against a pattern set"""

    domain: str
    confidence: float
    score: float
    alternatives: list[DomainScore] = field(default_factory=list)
    features: frozenset[str] = frozenset()

    @property
    def matched(self) -> bool:
        return self.score > 0


class DomainDetector:
    """Detects the appropriate domain for a given prompt"""

    def __init__(
        self,
        mode: ScoringMode | str | None = None,
        feature_bonus: float | None = None,
        k: float | None = None,
        max_confidence: float | None = None,
        ratio_threshold: float | None = None,
    ):
        self.mode = ScoringMode(mode or config.detection_mode)
        self.feature_bonus = config.feature_bonus if feature_bonus is None else feature_bonus
        self.k = config.detection_k if k is None else k
        self.max_confidence = (
            config.max_detection_confidence if max_confidence is None else max_confidence
        )
        self.ratio_threshold = (
            config.ratio_threshold if ratio_threshold is None else ratio_threshold
        )

    def score_pattern(
        self, text: str, pattern: Pattern, features: frozenset[str]
    ) -> DomainScore:
        """Score a single pattern; ``text`` must already be lower-cased"""
        matched = [kw for kw in pattern.trigger_keywords if kw and kw in text]

        if self.mode is ScoringMode.RATIO:
            if not pattern.trigger_keywords:
                return DomainScore(pattern.domain, 0.0)
            ratio = len(matched) / len(pattern.trigger_keywords)
            score = ratio if ratio > self.ratio_threshold else 0.0
            return DomainScore(pattern.domain, score, matched)

        if not matched:
            return DomainScore(pattern.domain, 0.0)

        score = sum(pattern.weight_for(kw) for kw in matched)
        score += self.feature_bonus * len(features & pattern.features)
        return DomainScore(pattern.domain, score, matched)

    def _rank(
        self, lowered: str, patterns: PatternSet, features: frozenset[str]
    ) -> list[DomainScore]:
        scores = [self.score_pattern(lowered, pattern, features) for pattern in patterns.values()]
        # sorted() is stable, so equal scores stay in registration order
        return sorted(scores, key=lambda s: s.score, reverse=True)

    def rank(self, prompt: str, patterns: PatternSet, intent: str | None = None) -> list[DomainScore]:
        """Score all patterns, highest first; ties keep pattern-set order"""
        text = f"{prompt} {intent}" if intent else prompt
        return self._rank(text.lower(), patterns, extract_features(text))

    def detect(self, prompt: str, patterns: PatternSet, intent: str | None = None) -> DetectionResult:
        """
        Pick the best domain for ``prompt``.

        Args:
            prompt: The raw user prompt
            patterns: Pattern set to score against, in registration order
            intent: Optional caller hint scored together with the prompt

        Returns:
            DetectionResult with the winning domain, its confidence and
            the next ranked candidates for diagnostics
        """
        text = f"{prompt} {intent}" if intent else prompt
        features = extract_features(text)
        ranked = self._rank(text.lower(), patterns, features)

        top = ranked[0] if ranked else None
        if top is None or top.score <= 0:
            alternatives = [s for s in ranked if s.domain != FALLBACK_DOMAIN]
            return DetectionResult(
                domain=FALLBACK_DOMAIN,
                confidence=0.0,
                score=0.0,
                alternatives=alternatives[: config.alternatives_count],
                features=features,
            )

        confidence = min(top.score / (top.score + self.k), self.max_confidence)
        logger.debug(
            f"Detected domain '{top.domain}' (score={top.score:.2f}, "
            f"keywords={top.matched_keywords}, features={sorted(features)})"
        )
        return DetectionResult(
            domain=top.domain,
            confidence=round(confidence, 4),
            score=top.score,
            alternatives=ranked[1 : 1 + config.alternatives_count],
            features=features,
        )
