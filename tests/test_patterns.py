"""
Tests for the pattern model and the built-in pattern library
"""

import json
from types import MappingProxyType

import pytest

from promptforge_mcp.core.errors import ValidationError
from promptforge_mcp.core.patterns import (
    DEFAULT_PATTERNS,
    FALLBACK_DOMAIN,
    Enhancement,
    EnhancementKind,
    Pattern,
    ensure_fallback,
    parse_pattern_set,
    pattern_from_dict,
    serialize_pattern_set,
)


class TestEnhancementKind:
    """Test enhancement type dispatch"""

    @pytest.mark.parametrize(
        "type_name,kind",
        [
            ("role_addition", EnhancementKind.ROLE),
            ("context_injection", EnhancementKind.CONTEXT),
            ("format_suggestion", EnhancementKind.FORMAT),
            ("structure", EnhancementKind.FORMAT),
            ("constraint_addition", EnhancementKind.CONSTRAINT),
        ],
    )
    def test_known_types(self, type_name, kind):
        assert EnhancementKind.from_type(type_name) is kind

    def test_unknown_type_defaults_to_append(self):
        """Unrecognized types fall through to the append arm"""
        assert EnhancementKind.from_type("tone_shift") is EnhancementKind.APPEND
        assert Enhancement("tone_shift", "Be friendly.").kind is EnhancementKind.APPEND


class TestPatternParsing:
    """Test building patterns from their wire representation"""

    def test_full_pattern(self):
        pattern = pattern_from_dict(
            "legal",
            {
                "displayName": "Legal",
                "triggerKeywords": ["Contract", "clause"],
                "keywordWeights": {"Contract": 2},
                "features": ["analytical"],
                "enhancements": [
                    {"type": "role_addition", "value": "You are a lawyer.", "reason": "Expertise"}
                ],
                "examples": ["Review this contract"],
            },
        )

        assert pattern.domain == "legal"
        assert pattern.display_name == "Legal"
        assert pattern.trigger_keywords == ("contract", "clause")
        assert pattern.weight_for("contract") == 2.0
        assert pattern.weight_for("clause") == 1.0
        assert pattern.features == frozenset({"analytical"})
        assert pattern.enhancements[0].reason == "Expertise"
        assert pattern.examples == ("Review this contract",)

    def test_legacy_name_alias(self):
        pattern = pattern_from_dict("legal", {"name": "Legal Docs", "triggerKeywords": ["law"]})
        assert pattern.display_name == "Legal Docs"

    def test_pattern_is_immutable(self):
        pattern = pattern_from_dict("legal", {"triggerKeywords": ["law"]})
        with pytest.raises(AttributeError):
            pattern.domain = "other"
        with pytest.raises(TypeError):
            pattern.keyword_weights["law"] = 3

    @pytest.mark.parametrize(
        "data",
        [
            "not a mapping",
            {"triggerKeywords": "law"},
            {"keywordWeights": {"law": 0}},
            {"keywordWeights": {"law": True}},
            {"keywordWeights": {"law": float("nan")}},
            {"keywordWeights": {"law": float("inf")}},
            {"enhancements": [{"type": "role_addition"}]},
            {"enhancements": [{"value": "x"}]},
            {"enhancements": "role"},
        ],
    )
    def test_malformed_patterns_rejected(self, data):
        with pytest.raises(ValidationError):
            pattern_from_dict("legal", data)

    def test_round_trip_keeps_order(self):
        original = DEFAULT_PATTERNS["data_analysis"]
        restored = pattern_from_dict("data_analysis", original.to_dict())
        assert restored == original

    def test_parse_pattern_set_skips_bad_entries(self):
        patterns = parse_pattern_set(
            {
                "good": {"triggerKeywords": ["ok"]},
                "bad": {"keywordWeights": {"ok": -1}},
            }
        )
        assert list(patterns) == ["good"]

    def test_parse_pattern_set_strict_refuses_bad_entries(self):
        with pytest.raises(ValidationError):
            parse_pattern_set(
                {
                    "good": {"triggerKeywords": ["ok"]},
                    "bad": {"triggerKeywords": "not-a-list"},
                },
                strict=True,
            )

    def test_non_finite_weight_from_json_rejected(self):
        data = json.loads('{"triggerKeywords": ["foo"], "keywordWeights": {"foo": NaN}}')
        with pytest.raises(ValidationError):
            pattern_from_dict("x", data)

    def test_parse_pattern_set_requires_mapping(self):
        with pytest.raises(ValidationError):
            parse_pattern_set(["not", "a", "mapping"])


class TestDefaults:
    """Test the built-in pattern library"""

    def test_default_domains_in_order(self):
        assert list(DEFAULT_PATTERNS) == [
            "marketing_copy",
            "data_analysis",
            "tax_accounting",
            "code_generation",
            FALLBACK_DOMAIN,
        ]

    def test_fallback_has_no_keywords(self):
        assert DEFAULT_PATTERNS[FALLBACK_DOMAIN].trigger_keywords == ()

    def test_non_fallback_domains_have_keywords(self):
        for domain, pattern in DEFAULT_PATTERNS.items():
            if domain != FALLBACK_DOMAIN:
                assert pattern.trigger_keywords

    def test_ensure_fallback_adds_general(self):
        only_custom = {"legal": Pattern("legal", trigger_keywords=("law",))}
        snapshot = ensure_fallback(only_custom)

        assert isinstance(snapshot, MappingProxyType)
        assert list(snapshot) == ["legal", FALLBACK_DOMAIN]
        assert "general" not in only_custom

    def test_serialize_pattern_set(self):
        document = serialize_pattern_set(DEFAULT_PATTERNS)
        assert document["marketing_copy"]["displayName"] == "Marketing Copy"
        assert document["marketing_copy"]["keywordWeights"]["copy"] == 2.0
