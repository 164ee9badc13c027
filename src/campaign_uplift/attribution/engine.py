"""
Report aggregator -- the entry point of the attribution engine.

For every activity:

  1. Baseline  -- organic level in the window before the activity
  2. Lift      -- floored observed-minus-baseline over the post window
  3. Confidence -- data sufficiency, baseline stability, overlap risk

Then, if post-window attribution is enabled, all reports of a channel are
resolved together so overlapping lift is split instead of double-counted.

The engine is a pure function of its inputs: no I/O, no global state.
Output order is stable: channels by name, then activity date, then id.
"""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from typing import Iterable

from loguru import logger

from campaign_uplift.attribution.baseline import baseline_window, estimate_baseline
from campaign_uplift.attribution.confidence import ConfidenceGrade, score_confidence
from campaign_uplift.attribution.lift import compute_lift, post_window
from campaign_uplift.attribution.overlap import apply_proportional_attribution
from campaign_uplift.attribution.reports import DayDataPoint, UpliftReport
from campaign_uplift.attribution.series import MetricSeries, split_by_channel
from campaign_uplift.config import AttributionConfig
from campaign_uplift.core.contracts import Activity, Confidence, DailyMetric
from campaign_uplift.core.dates import date_range, windows_overlap


def _daily_data(
    series: MetricSeries,
    days: list[dt.date],
    post_start: dt.date,
) -> tuple[DayDataPoint, ...]:
    points = []
    for day in days:
        observed = series.observed(day)
        signups, activations = observed if observed is not None else (None, None)
        points.append(
            DayDataPoint(
                date=day,
                signups=signups,
                activations=activations,
                is_baseline=day < post_start,
                is_post_window=day >= post_start,
            )
        )
    return tuple(points)


def build_report(
    activity: Activity,
    series: MetricSeries,
    config: AttributionConfig,
    peer_windows: dict[str, tuple[dt.date, dt.date]] | None = None,
) -> UpliftReport:
    """
    Build the raw (unattributed) report for one activity.

    Args:
        activity:     The activity to measure.
        series:       Metric series of the activity's channel.
        config:       Run configuration.
        peer_windows: Post windows of the counted activities on the same
                      channel, keyed by activity id.  Used for overlap
                      detection and the baseline exclusion policy.
    """
    peer_windows = peer_windows or {}
    counted = config.is_counted(activity.status)
    post_days = config.post_window_for(activity.channel)
    own_window = post_window(activity.date, post_days)

    others = {i: w for i, w in peer_windows.items() if i != activity.id}
    overlapping = (
        tuple(i for i, w in others.items() if windows_overlap(own_window, w))
        if counted else ()
    )

    exclude: set[dt.date] = set()
    if config.baseline_exclusion == "exclude":
        for start, end in others.values():
            exclude.update(date_range(start, end))

    baseline = estimate_baseline(series, activity.date, config.baseline_window_days, exclude)
    lift = compute_lift(series, activity.date, baseline, post_days)
    metric = config.primary_metric

    if counted:
        grade = score_confidence(
            baseline, metric, config.confidence, overlapping, activity_id=activity.id,
        )
        if baseline.days_with_data < config.confidence.min_baseline_days:
            logger.warning(
                f"Activity {activity.id}: {baseline.days_with_data} baseline day(s) "
                f"with data, confidence forced LOW"
            )
        incremental, incremental_activations = lift.incremental, lift.incremental_activations
    else:
        grade = ConfidenceGrade(
            Confidence.LOW,
            f"Activity status '{activity.status}' is not counted; no lift attributed.",
        )
        incremental, incremental_activations = 0.0, 0.0

    return UpliftReport(
        activity=activity,
        metric=metric,
        baseline_window_start=baseline.window_start,
        baseline_window_end=baseline.window_end,
        baseline_avg=baseline.avg(metric),
        baseline_signups_avg=baseline.signups_avg,
        baseline_activations_avg=baseline.activations_avg,
        baseline_std=baseline.std(metric),
        baseline_days=baseline.days_with_data,
        post_window_start=lift.window_start,
        post_window_end=lift.window_end,
        observed_signups=lift.observed_signups,
        observed_activations=lift.observed_activations,
        incremental=incremental,
        incremental_activations=incremental_activations,
        confidence=grade.level,
        confidence_explanation=grade.explanation,
        counted=counted,
        overlapping_activities=overlapping,
        daily_data=_daily_data(
            series, date_range(baseline.window_start, lift.window_end), lift.window_start,
        ),
    )


def _failed_report(activity: Activity, config: AttributionConfig, exc: Exception) -> UpliftReport:
    """Zero-lift LOW report for an activity whose computation raised."""
    b_start, b_end = baseline_window(activity.date, config.baseline_window_days)
    p_start, p_end = post_window(activity.date, config.post_window_for(activity.channel))
    return UpliftReport(
        activity=activity,
        metric=config.primary_metric,
        baseline_window_start=b_start,
        baseline_window_end=b_end,
        baseline_avg=0.0,
        baseline_signups_avg=0.0,
        baseline_activations_avg=0.0,
        baseline_std=0.0,
        baseline_days=0,
        post_window_start=p_start,
        post_window_end=p_end,
        observed_signups=0,
        observed_activations=0,
        incremental=0.0,
        incremental_activations=0.0,
        confidence=Confidence.LOW,
        confidence_explanation=f"Uplift computation failed: {type(exc).__name__}: {exc}",
        counted=False,
    )


def _channel_reports(
    activities: list[Activity],
    series: MetricSeries,
    config: AttributionConfig,
) -> list[UpliftReport]:
    peer_windows = {
        a.id: post_window(a.date, config.post_window_for(a.channel))
        for a in activities
        if config.is_counted(a.status)
    }

    # Failed activities leave the peer set, which can change the others'
    # overlap and exclusion days, so rebuild until the peer set is stable.
    failed: set[str] = set()
    while True:
        reports = []
        for activity in activities:
            try:
                reports.append(build_report(activity, series, config, peer_windows))
            except Exception as exc:
                if activity.id not in failed:
                    logger.exception(f"Uplift computation failed for activity {activity.id}")
                    failed.add(activity.id)
                reports.append(_failed_report(activity, config, exc))
        if not failed & peer_windows.keys():
            return reports
        peer_windows = {i: w for i, w in peer_windows.items() if i not in failed}


def compute_all_reports(
    activities: Iterable[Activity],
    metrics: Iterable[DailyMetric],
    config: AttributionConfig,
) -> list[UpliftReport]:
    """
    Compute uplift reports for every activity.

    Args:
        activities: All activities to measure (any channels, any order).
        metrics:    Daily ground-truth metrics (any channels, any order).
        config:     Run configuration.

    Returns:
        One report per activity, grouped by channel and ordered by date.
    """
    activities = list(activities)
    metrics = list(metrics)

    series_by_channel = split_by_channel(metrics)
    by_channel: dict[str, list[Activity]] = defaultdict(list)
    for activity in activities:
        by_channel[activity.channel].append(activity)

    logger.info(
        f"Computing uplift for {len(activities)} activities across "
        f"{len(by_channel)} channel(s) from {len(metrics)} metric rows"
    )

    reports: list[UpliftReport] = []
    for channel in sorted(by_channel):
        group = sorted(by_channel[channel], key=lambda a: (a.date, a.id))
        series = series_by_channel.get(channel)
        if series is None:
            logger.warning(f"No daily metrics for channel '{channel}'")
            series = MetricSeries.from_metrics([], channel=channel)
        reports.extend(_channel_reports(group, series, config))

    if config.post_window_attribution.enabled:
        reports = apply_proportional_attribution(reports, metrics, config.post_window_attribution)

    return reports
