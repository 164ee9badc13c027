"""Tests for confidence grading."""

import math

import pytest

from campaign_uplift.attribution import (
    MetricSeries,
    coefficient_of_variation,
    estimate_baseline,
    score_confidence,
)
from campaign_uplift.config import ConfidencePolicy
from campaign_uplift.core.contracts import Confidence

from conftest import day, flat, make_metrics

POLICY = ConfidencePolicy()


def _baseline(values, window=14):
    series = MetricSeries.from_metrics(make_metrics(values))
    return estimate_baseline(series, day(15), window)


class TestCoefficientOfVariation:
    """Test CV edge cases."""

    def test_flat_series(self):
        assert coefficient_of_variation(100.0, 0.0) == 0.0

    def test_zero_mean_with_spread(self):
        assert math.isinf(coefficient_of_variation(0.0, 5.0))

    def test_regular(self):
        assert coefficient_of_variation(100.0, 40.0) == pytest.approx(0.4)


class TestScoreConfidence:
    """Test grade selection and explanations."""

    def test_full_stable_baseline_is_high(self):
        grade = score_confidence(_baseline(flat(1, 14)), "activations", POLICY)

        assert grade.level == Confidence.HIGH
        assert grade.explanation.startswith("HIGH:")
        assert "14/14 days" in grade.explanation

    def test_insufficient_days_is_low(self):
        grade = score_confidence(_baseline(flat(12, 14)), "activations", POLICY, activity_id="a1")

        assert grade.level == Confidence.LOW
        assert grade.explanation.startswith(
            "Insufficient baseline data: only 3 baseline day(s) with data, at least 7 required"
        )

    def test_noisy_baseline_is_medium_by_cv(self):
        values = {n: (60 if n % 2 else 140) for n in range(1, 15)}

        grade = score_confidence(_baseline(values), "activations", POLICY)

        assert grade.level == Confidence.MEDIUM
        assert "decided by baseline CV 0.40" in grade.explanation

    def test_very_noisy_baseline_is_low(self):
        values = {n: (10 if n % 2 else 190) for n in range(1, 15)}

        grade = score_confidence(_baseline(values), "activations", POLICY)

        assert grade.level == Confidence.LOW

    def test_partial_coverage_is_medium_by_coverage(self):
        values = flat(5, 14)

        grade = score_confidence(_baseline(values), "activations", POLICY)

        assert grade.level == Confidence.MEDIUM
        assert "decided by baseline coverage 71% (10/14 days)" in grade.explanation

    def test_overlap_caps_high_at_medium(self):
        grade = score_confidence(_baseline(flat(1, 14)), "activations", POLICY, overlapping=["b2"])

        assert grade.level == Confidence.MEDIUM
        assert grade.explanation.startswith(
            "MEDIUM: capped by post-window overlap with 1 other activity (b2)"
        )

    def test_overlap_does_not_raise_low(self):
        values = {n: (10 if n % 2 else 190) for n in range(1, 15)}

        grade = score_confidence(_baseline(values), "activations", POLICY, overlapping=["b2", "c3"])

        assert grade.level == Confidence.LOW
        assert grade.explanation.endswith("Post window also overlaps b2, c3.")

    def test_deterministic_explanation(self):
        baseline = _baseline(flat(3, 14))

        first = score_confidence(baseline, "activations", POLICY)
        second = score_confidence(baseline, "activations", POLICY)

        assert first == second

    def test_custom_policy_threshold(self):
        policy = ConfidencePolicy(min_baseline_days=2)

        grade = score_confidence(_baseline(flat(12, 14), window=3), "activations", policy)

        assert grade.level == Confidence.HIGH
