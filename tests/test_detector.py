"""
Tests for domain detection
"""

from types import MappingProxyType

import pytest

from promptforge_mcp.core.detector import DomainDetector, ScoringMode, extract_features
from promptforge_mcp.core.patterns import DEFAULT_PATTERNS, FALLBACK_DOMAIN, ensure_fallback, pattern_from_dict


def make_patterns(**definitions):
    return ensure_fallback(
        {domain: pattern_from_dict(domain, data) for domain, data in definitions.items()}
    )


class TestFeatureExtraction:
    """Test the fixed feature rule table"""

    def test_short_question_about_a_bug(self):
        features = extract_features("How do I fix this bug?")
        assert {"short", "question", "debugging", "instructional"} <= features
        assert "long" not in features

    def test_length_buckets(self):
        assert "medium" in extract_features(" ".join(["word"] * 20))
        assert "long" in extract_features(" ".join(["word"] * 60))

    def test_code_and_structure(self):
        features = extract_features("Refactor this:\n```\nx = 1\n```")
        assert "code" in features
        assert "structured" in features
        assert "code" in extract_features("Why does `len(x)` fail")

    def test_verbs_match_whole_words(self):
        assert "creative" not in extract_features("The rewritten report")
        assert "creative" in extract_features("Write a poem")


class TestWeightedDetection:
    """Test weighted keyword scoring"""

    def setup_method(self):
        self.detector = DomainDetector(mode=ScoringMode.WEIGHTED)

    def test_no_keywords_routes_to_general(self):
        """Prompts with no trigger keyword always fall back"""
        result = self.detector.detect("Tell me a joke about penguins", DEFAULT_PATTERNS)
        assert result.domain == FALLBACK_DOMAIN
        assert result.confidence == 0.0
        assert result.matched is False

    def test_marketing_prompt(self):
        result = self.detector.detect("Write marketing copy for a new SaaS product", DEFAULT_PATTERNS)

        # write(1) + copy(2) + marketing(2) + creative feature(0.5)
        assert result.domain == "marketing_copy"
        assert result.score == pytest.approx(5.5)
        assert result.confidence == pytest.approx(round(5.5 / 10.5, 4))
        assert result.matched is True

    def test_code_prompt(self):
        result = self.detector.detect("Debug this python function", DEFAULT_PATTERNS)
        assert result.domain == "code_generation"

    def test_keywords_are_case_insensitive_substrings(self):
        patterns = make_patterns(legal={"triggerKeywords": ["contract"]})
        result = self.detector.detect("Review these CONTRACTS please", patterns)
        assert result.domain == "legal"

    def test_weights_decide_between_domains(self):
        patterns = make_patterns(
            first={"triggerKeywords": ["alpha", "beta"]},
            second={"triggerKeywords": ["gamma"], "keywordWeights": {"gamma": 5}},
        )
        result = self.detector.detect("alpha beta gamma", patterns)
        assert result.domain == "second"

    def test_ties_keep_pattern_order(self):
        patterns = make_patterns(
            first={"triggerKeywords": ["alpha"]},
            second={"triggerKeywords": ["alpha"]},
        )
        result = self.detector.detect("alpha", patterns)
        assert result.domain == "first"
        assert result.alternatives[0].domain == "second"

    def test_feature_bonus_requires_a_keyword(self):
        patterns = make_patterns(quiz={"triggerKeywords": ["trivia"], "features": ["question"]})
        result = self.detector.detect("What time is it?", patterns)
        assert result.domain == FALLBACK_DOMAIN

    def test_feature_bonus_added(self):
        patterns = make_patterns(quiz={"triggerKeywords": ["trivia"], "features": ["question"]})
        result = self.detector.detect("Any trivia?", patterns)
        assert result.score == pytest.approx(1.5)

    def test_confidence_is_clamped(self):
        patterns = make_patterns(heavy={"triggerKeywords": ["x"], "keywordWeights": {"x": 1000}})
        result = self.detector.detect("x", patterns)
        assert result.confidence == 0.95

    def test_alternatives_limited_to_two(self):
        result = self.detector.detect(
            "Analyze tax data and write code for marketing", DEFAULT_PATTERNS
        )
        assert len(result.alternatives) == 2
        assert all(alt.domain != result.domain for alt in result.alternatives)

    def test_intent_contributes_to_detection(self):
        result = self.detector.detect("Help me with this", DEFAULT_PATTERNS, intent="tax deduction")
        assert result.domain == "tax_accounting"

    def test_rank_orders_all_patterns(self):
        ranked = self.detector.rank("Write marketing copy", DEFAULT_PATTERNS)
        assert len(ranked) == len(DEFAULT_PATTERNS)
        assert ranked[0].domain == "marketing_copy"
        scores = [entry.score for entry in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_empty_pattern_set(self):
        result = self.detector.detect("anything", MappingProxyType({}))
        assert result.domain == FALLBACK_DOMAIN


class TestRatioDetection:
    """Test matched/total keyword scoring"""

    def setup_method(self):
        self.detector = DomainDetector(mode="ratio")

    def test_ratio_above_threshold_qualifies(self):
        patterns = make_patterns(trio={"triggerKeywords": ["alpha", "beta", "gamma"]})
        result = self.detector.detect("alpha only", patterns)
        assert result.domain == "trio"
        assert result.score == pytest.approx(1 / 3)

    def test_ratio_below_threshold_ignored(self):
        patterns = make_patterns(quad={"triggerKeywords": ["alpha", "beta", "gamma", "delta"]})
        result = self.detector.detect("alpha only", patterns)
        assert result.domain == FALLBACK_DOMAIN

    def test_invalid_mode(self):
        with pytest.raises(ValueError):
            DomainDetector(mode="neural")
