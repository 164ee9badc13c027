"""Tests for raw post-window lift."""

from campaign_uplift.attribution import (
    MetricSeries,
    compute_lift,
    daily_incremental,
    estimate_baseline,
    post_window,
)

from conftest import day, flat, make_metrics


class TestDailyIncremental:
    """Test the per-day floor."""

    def test_above_baseline(self):
        assert daily_incremental(130, 100.0) == 30.0

    def test_below_baseline_floors_to_zero(self):
        """Observed below baseline never produces negative credit."""
        assert daily_incremental(80, 100.0) == 0.0

    def test_missing_day_is_zero(self):
        assert daily_incremental(None, 100.0) == 0.0


class TestComputeLift:
    """Test summed lift over the post window."""

    def test_flat_baseline_with_three_day_lift(self, scenario_a):
        """100/day baseline then 130/140/120 gives 90 incremental activations."""
        _, metrics, _ = scenario_a
        series = MetricSeries.from_metrics(metrics)
        baseline = estimate_baseline(series, day(15), 14)

        lift = compute_lift(series, day(15), baseline, 3)

        assert baseline.activations_avg == 100.0
        assert lift.incremental_activations == 90.0
        assert lift.observed_activations == 390
        assert (lift.window_start, lift.window_end) == (day(15), day(17))
        assert [d.incremental_activations for d in lift.days] == [30.0, 40.0, 20.0]

    def test_dip_below_baseline_is_not_subtracted(self):
        values = flat(1, 14)
        values.update({15: 80, 16: 150})
        series = MetricSeries.from_metrics(make_metrics(values))
        baseline = estimate_baseline(series, day(15), 14)

        lift = compute_lift(series, day(15), baseline, 2)

        assert lift.incremental_activations == 50.0
        assert all(d.incremental_activations >= 0 for d in lift.days)

    def test_post_window_past_data_end(self):
        """Days with no metric rows contribute nothing."""
        values = flat(1, 14)
        values[15] = 120
        series = MetricSeries.from_metrics(make_metrics(values))
        baseline = estimate_baseline(series, day(15), 14)

        lift = compute_lift(series, day(15), baseline, 7)

        assert lift.incremental_activations == 20.0
        assert lift.days[1].observed_activations is None

    def test_post_window_bounds(self):
        assert post_window(day(15), 1) == (day(15), day(15))
        assert post_window(day(15), 7) == (day(15), day(21))
