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
Pattern model and built-in pattern library for PromptForge
A pattern holds the trigger keywords and ordered enhancement rules for one domain
"""

import logging
import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .errors import ValidationError

logger = logging.getLogger(__name__)

FALLBACK_DOMAIN = "general"

PatternSet = Mapping[str, "Pattern"]


class EnhancementKind(Enum):
    """How an enhancement changes the prompt buffer"""

    ROLE = "role_addition"
    CONTEXT = "context_injection"
    FORMAT = "format_suggestion"
    CONSTRAINT = "constraint_addition"
    APPEND = "append"

    @classmethod
    def from_type(cls, type_name: str) -> "EnhancementKind":
        if type_name == "structure":
            return cls.FORMAT
        try:
            return cls(type_name)
        except ValueError:
            return cls.APPEND


@dataclass(frozen=True)
class Enhancement:
    """One textual injection rule inside a pattern"""

    type: str
    value: str
    reason: str | None = None

    @property
    def kind(self) -> EnhancementKind:
        return EnhancementKind.from_type(self.type)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"type": self.type, "value": self.value}
        if self.reason:
            data["reason"] = self.reason
        return data


@dataclass(frozen=True)
class Pattern:
    """The full rule set for one domain"""

    domain: str
    display_name: str | None = None
    trigger_keywords: tuple[str, ...] = ()
    keyword_weights: Mapping[str, float] = field(default_factory=dict)
    features: frozenset[str] = frozenset()
    enhancements: tuple[Enhancement, ...] = ()
    examples: tuple[str, ...] = ()

    def weight_for(self, keyword: str) -> float:
        return float(self.keyword_weights.get(keyword, 1.0))

    def to_dict(self) -> dict[str, Any]:
        """Convert pattern to its wire (camelCase) representation"""
        return {
            "displayName": self.display_name,
            "triggerKeywords": list(self.trigger_keywords),
            "keywordWeights": dict(self.keyword_weights),
            "features": sorted(self.features),
            "enhancements": [enhancement.to_dict() for enhancement in self.enhancements],
            "examples": list(self.examples),
        }


def _string_list(value: Any, field_name: str, domain: str) -> tuple[str, ...]:
    if value is None:
        return ()
    if not isinstance(value, list | tuple) or not all(isinstance(v, str) for v in value):
        raise ValidationError(f"Pattern '{domain}': {field_name} must be a list of strings")
    return tuple(value)


def _parse_enhancement(raw: Any, domain: str) -> Enhancement:
    if not isinstance(raw, Mapping):
        raise ValidationError(f"Pattern '{domain}': each enhancement must be an object")
    type_name = raw.get("type")
    value = raw.get("value")
    if not isinstance(type_name, str) or not type_name:
        raise ValidationError(f"Pattern '{domain}': enhancement type must be a non-empty string")
    if not isinstance(value, str):
        raise ValidationError(f"Pattern '{domain}': enhancement '{type_name}' needs a string value")
    reason = raw.get("reason")
    if reason is not None and not isinstance(reason, str):
        raise ValidationError(f"Pattern '{domain}': enhancement reason must be a string")
    return Enhancement(type=type_name, value=value, reason=reason)


def pattern_from_dict(domain: str, data: Any) -> Pattern:
    """
    Build a Pattern from its wire representation.

    Accepts the legacy ``name`` key as an alias of ``displayName``.

    Raises:
        ValidationError: If the payload is not a well-formed pattern
    """
    if not isinstance(domain, str) or not domain.strip():
        raise ValidationError("Pattern domain must be a non-empty string")
    if not isinstance(data, Mapping):
        raise ValidationError(f"Pattern '{domain}' must be an object")

    display_name = data.get("displayName", data.get("name"))
    if display_name is not None and not isinstance(display_name, str):
        raise ValidationError(f"Pattern '{domain}': displayName must be a string")

    raw_weights = data.get("keywordWeights") or {}
    if not isinstance(raw_weights, Mapping):
        raise ValidationError(f"Pattern '{domain}': keywordWeights must be an object")
    weights: dict[str, float] = {}
    for keyword, weight in raw_weights.items():
        if (
            isinstance(weight, bool)
            or not isinstance(weight, int | float)
            or not math.isfinite(weight)
            or weight <= 0
        ):
            raise ValidationError(
                f"Pattern '{domain}': weight for '{keyword}' must be a positive finite number"
            )
        weights[keyword.lower()] = float(weight)

    raw_enhancements = data.get("enhancements") or []
    if not isinstance(raw_enhancements, list | tuple):
        raise ValidationError(f"Pattern '{domain}': enhancements must be a list")

    return Pattern(
        domain=domain,
        display_name=display_name,
        trigger_keywords=tuple(
            kw.lower() for kw in _string_list(data.get("triggerKeywords"), "triggerKeywords", domain)
        ),
        keyword_weights=MappingProxyType(weights),
        features=frozenset(_string_list(data.get("features"), "features", domain)),
        enhancements=tuple(_parse_enhancement(raw, domain) for raw in raw_enhancements),
        examples=_string_list(data.get("examples"), "examples", domain),
    )


def parse_pattern_set(raw: Any, strict: bool = False) -> dict[str, Pattern]:
    """
    Parse a stored domain -> pattern document.

    Malformed entries are skipped with a warning so one bad record
    does not take the whole library offline. With ``strict`` the first
    malformed entry raises instead; writers use this so a rewrite of the
    document never drops records it could not read.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("Pattern document must be an object keyed by domain")

    patterns: dict[str, Pattern] = {}
    for domain, data in raw.items():
        try:
            patterns[domain] = pattern_from_dict(domain, data)
        except ValidationError as e:
            if strict:
                raise
            logger.warning(f"Skipping malformed pattern '{domain}': {e}")
    return patterns


def serialize_pattern_set(patterns: PatternSet) -> dict[str, dict[str, Any]]:
    return {domain: pattern.to_dict() for domain, pattern in patterns.items()}


def ensure_fallback(patterns: Mapping[str, Pattern]) -> PatternSet:
    """Return a read-only copy of ``patterns`` that always contains the fallback domain"""
    snapshot = dict(patterns)
    if FALLBACK_DOMAIN not in snapshot:
        snapshot[FALLBACK_DOMAIN] = DEFAULT_PATTERNS[FALLBACK_DOMAIN]
    return MappingProxyType(snapshot)


# Built-in pattern library, in registration order
DEFAULT_PATTERN_DATA: dict[str, dict[str, Any]] = {
    "marketing_copy": {
        "displayName": "Marketing Copy",
        "triggerKeywords": [
            "write",
            "create",
            "generate",
            "copy",
            "content",
            "marketing",
            "email",
            "landing",
            "ad copy",
            "campaign",
        ],
        "keywordWeights": {"marketing": 2, "copy": 2, "campaign": 1.5, "landing": 1.5},
        "features": ["creative", "persuasive"],
        "enhancements": [
            {
                "type": "role_addition",
                "value": (
                    "You are an expert copywriter with 10+ years experience in "
                    "conversion optimization and brand messaging."
                ),
            },
            {
                "type": "context_injection",
                "value": "Tailor the copy to the business context provided.",
            },
            {
                "type": "format_suggestion",
                "value": (
                    "Structure your response with:\n"
                    "1. Attention-grabbing headline\n"
                    "2. Problem identification\n"
                    "3. Solution presentation\n"
                    "4. Social proof/benefits\n"
                    "5. Clear call-to-action\n\n"
                    "Use active voice, focus on benefits over features, and keep "
                    "sentences concise and scannable."
                ),
            },
        ],
        "examples": [
            "Write a launch email for our new analytics dashboard",
            "Create landing page copy for a meal-kit subscription",
        ],
    },
    "data_analysis": {
        "displayName": "Data Analysis",
        "triggerKeywords": [
            "analyze",
            "analyse",
            "data",
            "metrics",
            "insights",
            "report",
            "statistics",
            "performance",
            "trend",
        ],
        "keywordWeights": {"analyze": 2, "analyse": 2, "statistics": 1.5},
        "features": ["analytical", "structured"],
        "enhancements": [
            {
                "type": "role_addition",
                "value": (
                    "You are a data analyst expert skilled in extracting actionable "
                    "insights from complex data."
                ),
            },
            {"type": "context_injection", "value": "Relate findings to the stated goals."},
            {
                "type": "format_suggestion",
                "value": (
                    "Provide your analysis in this structure:\n"
                    "1. Executive Summary (key takeaways)\n"
                    "2. Data Overview\n"
                    "3. Key Findings (with supporting data)\n"
                    "4. Actionable Recommendations\n"
                    "5. Next Steps"
                ),
            },
            {
                "type": "constraint_addition",
                "value": "Support all claims with specific data points.",
                "reason": "Ground conclusions in evidence",
            },
        ],
    },
    "tax_accounting": {
        "displayName": "Tax & Accounting",
        "triggerKeywords": [
            "tax",
            "accounting",
            "cpa",
            "financial",
            "bookkeeping",
            "irs",
            "deduction",
            "audit",
        ],
        "keywordWeights": {"tax": 2, "deduction": 1.5, "bookkeeping": 1.5},
        "features": ["analytical", "question"],
        "enhancements": [
            {
                "type": "role_addition",
                "value": (
                    "You are a certified tax professional with expertise in mid-market "
                    "business taxation and comprehensive financial planning."
                ),
            },
            {
                "type": "context_injection",
                "value": (
                    "Consider current tax regulations and best practices for business "
                    "financial management."
                ),
            },
            {
                "type": "format_suggestion",
                "value": (
                    "Structure your response to address:\n"
                    "1. Current situation/challenge\n"
                    "2. Tax implications and compliance requirements\n"
                    "3. Optimization opportunities\n"
                    "4. Recommended approach\n"
                    "5. Potential savings/benefits\n"
                    "6. Next steps"
                ),
            },
            {
                "type": "constraint_addition",
                "value": "Ensure accuracy and highlight both risks and opportunities.",
            },
        ],
    },
    "code_generation": {
        "displayName": "Code Generation",
        "triggerKeywords": [
            "code",
            "function",
            "implement",
            "program",
            "script",
            "algorithm",
            "debug",
            "refactor",
            "python",
            "javascript",
            "sql",
            "bug",
        ],
        "keywordWeights": {"code": 2, "debug": 2, "algorithm": 1.5},
        "features": ["code", "debugging"],
        "enhancements": [
            {
                "type": "role_addition",
                "value": (
                    "You are an experienced software engineer focused on writing clean, "
                    "efficient, and maintainable code."
                ),
            },
            {
                "type": "format_suggestion",
                "value": (
                    "Provide:\n"
                    "1. Complete code implementation\n"
                    "2. Clear comments explaining the logic\n"
                    "3. Usage example\n"
                    "4. Key considerations/edge cases\n"
                    "5. Error handling approach"
                ),
            },
            {
                "type": "constraint_addition",
                "value": (
                    "Follow best practices for the language and include necessary imports."
                ),
            },
        ],
    },
    FALLBACK_DOMAIN: {
        "displayName": "General",
        "triggerKeywords": [],
        "enhancements": [
            {
                "type": "role_addition",
                "value": "You are a helpful AI assistant with broad knowledge across many domains.",
            },
            {
                "type": "format_suggestion",
                "value": "Please provide a clear, comprehensive, and well-structured response.",
            },
        ],
    },
}

DEFAULT_PATTERNS: PatternSet = MappingProxyType(parse_pattern_set(DEFAULT_PATTERN_DATA))


def default_pattern_set() -> PatternSet:
    return DEFAULT_PATTERNS
