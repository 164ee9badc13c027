"""Tests for overlap resolution and proportional attribution."""

import pytest

from campaign_uplift.attribution import (
    apply_proportional_attribution,
    compute_all_reports,
    resolve_weight,
)
from campaign_uplift.config import AttributionConfig, PostWindowAttributionConfig
from campaign_uplift.core.contracts import ClicksSource

from conftest import day, flat, make_activity, make_metrics


def _by_id(reports):
    return {r.activity_id: r for r in reports}


class TestResolveWeight:
    """Test the click fallback chain."""

    config = PostWindowAttributionConfig()

    def test_actual_clicks_first(self):
        activity = make_activity("a", 1, actual_clicks=50, deterministic_clicks=80)

        weight = resolve_weight(activity, self.config)

        assert weight.weight == 50
        assert weight.source == ClicksSource.ACTUAL

    def test_zero_actual_falls_back_to_deterministic(self):
        activity = make_activity("a", 1, actual_clicks=0, deterministic_clicks=80)

        weight = resolve_weight(activity, self.config)

        assert weight.weight == 80
        assert weight.source == ClicksSource.DETERMINISTIC

    def test_metadata_estimate(self):
        activity = make_activity("a", 1, metadata={"estClicks": 25})

        weight = resolve_weight(activity, self.config)

        assert weight.weight == 25
        assert weight.source == ClicksSource.ESTIMATED
        assert weight.clicks_used == 25

    def test_default_weight(self):
        config = PostWindowAttributionConfig(default_weight=2.0)
        activity = make_activity("a", 1, metadata={"other": 9})

        weight = resolve_weight(activity, config)

        assert weight.weight == 2.0
        assert weight.source == ClicksSource.DEFAULT
        assert weight.clicks_used is None


class TestProportionalSplit:
    """Test splitting a contested day's lift."""

    def test_weighted_split(self, scenario_b):
        """Weights 3 and 1 on a day with 40 incremental give 30 and 10."""
        activities, metrics, config = scenario_b

        reports = _by_id(compute_all_reports(activities, metrics, config))

        assert reports["A"].attributed_incremental_activations == pytest.approx(30.0)
        assert reports["B"].attributed_incremental_activations == pytest.approx(10.0)
        assert reports["A"].incremental_activations == 40.0
        assert reports["B"].incremental_activations == 40.0

        shared = [s for s in reports["A"].post_window_attribution.daily_shares if s.date == day(16)][0]
        assert shared.share == pytest.approx(0.75)
        assert shared.total_weight == 4
        assert shared.overlapping_activities == ("A", "B")

    def test_zero_weights_split_equally(self, scenario_b):
        activities, metrics, config = scenario_b
        activities = [make_activity("A", 15), make_activity("B", 16)]

        reports = _by_id(compute_all_reports(activities, metrics, config))

        assert reports["A"].attributed_incremental_activations == pytest.approx(20.0)
        assert reports["B"].attributed_incremental_activations == pytest.approx(20.0)
        assert reports["A"].post_window_attribution.clicks_source == ClicksSource.DEFAULT

    def test_conservation(self, scenario_b):
        """Credits for a contested day sum to the day's pooled incremental."""
        activities, metrics, config = scenario_b
        activities = activities + [make_activity("C", 16, deterministic_clicks=7)]

        reports = compute_all_reports(activities, metrics, config)

        credited = sum(
            s.attributed_activations
            for r in reports
            for s in r.post_window_attribution.daily_shares
            if s.date == day(16)
        )
        assert credited == pytest.approx(40.0)

    def test_contenders_with_different_baselines(self):
        """A spike before a later launch raises its baseline; credit stays within raw lift."""
        values = flat(1, 14, 50)
        values.update({15: 200, 16: 200, 17: 150, 18: 50, 19: 50})
        activities = [
            make_activity("A", 15, actual_clicks=1),
            make_activity("B", 17, actual_clicks=9),
        ]
        config = AttributionConfig(baseline_window_days=14, post_window_days=3)

        reports = _by_id(compute_all_reports(activities, make_metrics(values), config))

        assert reports["A"].baseline_avg == 50.0
        assert reports["B"].baseline_avg == pytest.approx(1000 / 14)
        for report in reports.values():
            assert report.attributed_incremental_activations <= report.incremental_activations
            assert report.attributed_incremental <= report.incremental

        pooled = 150 - 1000 / 14
        credited = [
            s.attributed_activations
            for r in reports.values()
            for s in r.post_window_attribution.daily_shares
            if s.date == day(17)
        ]
        assert sum(credited) == pytest.approx(pooled)
        assert reports["B"].attributed_incremental_activations == pytest.approx(0.9 * pooled)
        assert reports["A"].attributed_incremental_activations == pytest.approx(300 + 0.1 * pooled)

    def test_single_activity_keeps_raw_lift(self, scenario_a):
        activities, metrics, config = scenario_a

        report = compute_all_reports(activities, metrics, config)[0]

        attribution = report.post_window_attribution
        assert attribution is not None
        assert attribution.attributed_incremental_activations == report.incremental_activations
        assert attribution.attributed_incremental_signups == report.incremental
        assert all(s.share == 1.0 for s in attribution.daily_shares)

    def test_channels_do_not_interact(self):
        """Same-day activities on different channels keep their raw lift."""
        values = flat(1, 14)
        values.update({15: 130, 16: 140})
        metrics = make_metrics(values) + make_metrics(values, channel="youtube")
        activities = [
            make_activity("n1", 15, actual_clicks=10),
            make_activity("y1", 15, channel="youtube", actual_clicks=1),
        ]
        config = AttributionConfig(baseline_window_days=14, post_window_days=2)

        reports = _by_id(compute_all_reports(activities, metrics, config))

        for report in reports.values():
            assert report.attributed_incremental_activations == report.incremental_activations
            assert report.overlapping_activities == ()


class TestApplyProportionalAttribution:
    """Test the resolver on raw reports."""

    def test_does_not_mutate_input(self, scenario_b):
        activities, metrics, config = scenario_b
        raw_config = config.model_copy(
            update={"post_window_attribution": PostWindowAttributionConfig(enabled=False)}
        )
        raw = compute_all_reports(activities, metrics, raw_config)

        attributed = apply_proportional_attribution(raw, metrics, config.post_window_attribution)

        assert all(r.post_window_attribution is None for r in raw)
        assert [r.activity_id for r in attributed] == [r.activity_id for r in raw]
        assert all(r.post_window_attribution is not None for r in attributed)

    def test_idempotent(self, scenario_b):
        activities, metrics, config = scenario_b
        raw_config = config.model_copy(
            update={"post_window_attribution": PostWindowAttributionConfig(enabled=False)}
        )
        raw = compute_all_reports(activities, metrics, raw_config)

        first = apply_proportional_attribution(raw, metrics, config.post_window_attribution)
        second = apply_proportional_attribution(raw, metrics, config.post_window_attribution)

        assert [r.post_window_attribution for r in first] == [r.post_window_attribution for r in second]

    def test_channel_filter(self, scenario_b):
        activities, metrics, config = scenario_b
        pwa = PostWindowAttributionConfig(channels=["youtube"])
        raw_config = config.model_copy(
            update={"post_window_attribution": PostWindowAttributionConfig(enabled=False)}
        )
        raw = compute_all_reports(activities, metrics, raw_config)

        result = apply_proportional_attribution(raw, metrics, pwa)

        assert all(r.post_window_attribution is None for r in result)
        assert all(r.attributed_incremental_activations == r.incremental_activations for r in result)
