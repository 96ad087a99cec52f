"""
Tests for applying pattern enhancements to a prompt
"""

import pytest

from promptforge_mcp.core.enhancement import (
    COT_POSTAMBLE,
    COT_PREAMBLE,
    OUTPUT_FORMATS,
    EnhancementEngine,
)
from promptforge_mcp.core.patterns import DEFAULT_PATTERNS, pattern_from_dict


def make_pattern(*enhancements, domain="custom"):
    return pattern_from_dict(domain, {"triggerKeywords": [], "enhancements": list(enhancements)})


ROLE = {"type": "role_addition", "value": "You are an expert."}


class TestEnhancementEngine:
    """Test deterministic enhancement replay"""

    def setup_method(self):
        self.engine = EnhancementEngine()

    def test_no_enhancements_leaves_prompt_unchanged(self):
        outcome = self.engine.apply("Do X", make_pattern())
        assert outcome.optimized == "Do X"
        assert outcome.modifications == []

    def test_role_addition(self):
        outcome = self.engine.apply("Do X", make_pattern(ROLE))
        assert outcome.optimized == "You are an expert.\n\nDo X"
        assert [m.type for m in outcome.modifications] == ["role_addition"]

    def test_role_addition_is_idempotent(self):
        """Re-applying a role pattern to its own output changes nothing"""
        pattern = make_pattern(ROLE)
        first = self.engine.apply("Do X", pattern).optimized
        second = self.engine.apply(first, pattern)

        assert second.optimized == first
        assert second.modifications == []

    def test_role_skipped_when_prompt_already_sets_one(self):
        outcome = self.engine.apply("you are a pirate. Say hi", make_pattern(ROLE))
        assert outcome.optimized == "you are a pirate. Say hi"

    def test_role_skipped_for_any_you_are_phrase(self):
        prompt = "You aren't limited to one draft. Say hi"
        outcome = self.engine.apply(prompt, make_pattern(ROLE))
        assert outcome.optimized == prompt
        assert outcome.modifications == []

    def test_enhancements_applied_in_order(self):
        pattern = make_pattern(
            ROLE,
            {"type": "format_suggestion", "value": "FIRST"},
            {"type": "structure", "value": "SECOND"},
            {"type": "custom_note", "value": "THIRD"},
        )
        outcome = self.engine.apply("Do X", pattern)

        assert outcome.optimized == "You are an expert.\n\nRequest: Do X\n\nFIRST\n\nSECOND\n\nTHIRD"
        assert [m.type for m in outcome.modifications] == [
            "role_addition",
            "format_suggestion",
            "structure",
            "custom_note",
        ]

    def test_constraint_goes_last(self):
        pattern = make_pattern(
            {"type": "constraint_addition", "value": "Be precise."},
            {"type": "format_suggestion", "value": "Use bullets."},
        )
        outcome = self.engine.apply("Do X", pattern)
        assert outcome.optimized == "Request: Do X\n\nUse bullets.\n\nBe precise."

    def test_context_injection_renders_known_keys(self):
        pattern = make_pattern(ROLE, {"type": "context_injection", "value": "ignored"})
        outcome = self.engine.apply(
            "Write a tagline",
            pattern,
            request_context={"company": "Acme", "audience": "CFOs", "favorite_color": "red"},
        )

        assert outcome.optimized == (
            "You are an expert.\n\n"
            "Context:\nCompany: Acme\nTarget Audience: CFOs\n\n"
            "Request: Write a tagline"
        )
        assert len(outcome.modifications) == 2

    def test_context_injection_skipped_without_context(self):
        pattern = make_pattern({"type": "context_injection", "value": "ignored"})
        outcome = self.engine.apply("Do X", pattern, request_context={"unrelated": "value"})
        assert outcome.optimized == "Do X"
        assert outcome.modifications == []

    def test_reason_used_as_description(self):
        pattern = make_pattern(
            {"type": "constraint_addition", "value": "Cite sources.", "reason": "Traceability"}
        )
        outcome = self.engine.apply("Do X", pattern)
        assert outcome.modifications[0].description == "Traceability"

    def test_default_description(self):
        outcome = self.engine.apply("Do X", make_pattern(ROLE))
        assert outcome.modifications[0].description == "Added expert role context"

    def test_chain_of_thought(self):
        outcome = self.engine.apply("Do X", make_pattern(), chain_of_thought=True)
        assert outcome.optimized == f"{COT_PREAMBLE}\n\nDo X\n\n{COT_POSTAMBLE}"
        assert outcome.modifications[-1].type == "chain_of_thought"

    @pytest.mark.parametrize("fmt", sorted(OUTPUT_FORMATS))
    def test_output_formats(self, fmt):
        outcome = self.engine.apply("Do X", make_pattern(), desired_format=fmt.upper())
        assert outcome.optimized == f"Do X\n\n{OUTPUT_FORMATS[fmt]}"
        assert outcome.modifications[-1].type == "output_format"

    def test_unknown_output_format_is_ignored(self):
        outcome = self.engine.apply("Do X", make_pattern(), desired_format="yaml")
        assert outcome.optimized == "Do X"
        assert outcome.modifications == []

    def test_chain_of_thought_before_format(self):
        outcome = self.engine.apply(
            "Do X", make_pattern(), chain_of_thought=True, desired_format="json"
        )
        assert outcome.optimized.startswith(COT_PREAMBLE)
        assert outcome.optimized.endswith(OUTPUT_FORMATS["json"])
        assert [m.type for m in outcome.modifications] == ["chain_of_thought", "output_format"]

    def test_marketing_pattern(self):
        prompt = "Write marketing copy for a new SaaS product"
        outcome = self.engine.apply(prompt, DEFAULT_PATTERNS["marketing_copy"])

        role = DEFAULT_PATTERNS["marketing_copy"].enhancements[0].value
        assert outcome.optimized.startswith(f"{role}\n\nRequest: {prompt}\n\n")
        assert "1. Attention-grabbing headline" in outcome.optimized
        assert [m.type for m in outcome.modifications] == ["role_addition", "format_suggestion"]
