"""
Tests for the confidence heuristic
"""

import pytest

from promptforge_mcp.core.confidence import ConfidenceEstimator


class TestConfidenceEstimator:
    """Test bounded confidence scoring"""

    def setup_method(self):
        self.estimator = ConfidenceEstimator()

    def test_no_modifications_no_match(self):
        assert self.estimator.estimate([], False) == 0.6

    def test_modifications_add_up_to_cap(self):
        assert self.estimator.estimate([object()], False) == 0.68
        assert self.estimator.estimate([object()] * 3, False) == 0.84
        assert self.estimator.estimate([object()] * 10, False) == 0.84

    def test_domain_match_bonus(self):
        assert self.estimator.estimate([object()] * 2, True) == 0.91

    def test_clamped_to_maximum(self):
        assert self.estimator.estimate([object()] * 5, True) == 0.99

    @pytest.mark.parametrize("count", range(21))
    @pytest.mark.parametrize("matched", [True, False])
    def test_always_in_range(self, count, matched):
        score = self.estimator.estimate([object()] * count, matched)
        assert 0.0 <= score <= 0.99

    def test_custom_constants(self):
        estimator = ConfidenceEstimator(base=-1.0, per_modification=0.1, maximum=0.5)
        assert estimator.estimate([], False) == 0.0
        estimator = ConfidenceEstimator(base=0.4, domain_bonus=0.5, maximum=0.5)
        assert estimator.estimate([], True) == 0.5
