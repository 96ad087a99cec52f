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
Confidence estimation for optimized prompts.

The score is a heuristic signal for the caller about how well the prompt
fit its domain and how much was changed. It is not a probability.
"""

from collections.abc import Sequence

from ..config import config


class ConfidenceEstimator:
    """Linear, bounded confidence heuristic"""

    def __init__(
        self,
        base: float | None = None,
        per_modification: float | None = None,
        modification_cap: float | None = None,
        domain_bonus: float | None = None,
        maximum: float | None = None,
    ):
        self.base = config.confidence_base if base is None else base
        self.per_modification = (
            config.per_modification_bonus if per_modification is None else per_modification
        )
        self.modification_cap = (
            config.max_modification_bonus if modification_cap is None else modification_cap
        )
        self.domain_bonus = config.domain_match_bonus if domain_bonus is None else domain_bonus
        self.maximum = config.max_confidence if maximum is None else maximum

    def estimate(self, modifications: Sequence[object], domain_matched: bool) -> float:
        """
        Score an optimization.

        Args:
            modifications: Modifications applied (only the count is used)
            domain_matched: Whether the prompt actually matched its domain

        Returns:
            Confidence in [0, maximum], rounded to 2 decimals
        """
        score = self.base + min(len(modifications) * self.per_modification, self.modification_cap)
        if domain_matched:
            score += self.domain_bonus
        return round(max(0.0, min(score, self.maximum)), 2)
