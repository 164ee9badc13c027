"""
Overlap resolution and proportional attribution.

A channel-day's observed incremental volume can only be credited once.
When several activities' post windows cover the same day on the same
channel, the day's pooled incremental is split among them by weight:

    weight_i = actual clicks  > deterministic clicks  > metadata[weight_field]
               > default_weight
    share_i  = weight_i / sum(weights)          (equal split if the sum is 0)
    credit_i = pooled_incremental_day * share_i

The pooled incremental of a day is measured against the highest baseline
among the activities covering it, so no credit exceeds the activity's own
incremental for that day and attributed lift never exceeds raw lift.  On a
day covered by a single activity that is the activity's own baseline, so
its credit for the day equals its raw lift exactly.

Properties:
  - conservation : credits for a day sum to the pooled incremental
  - idempotence  : unchanged inputs reproduce identical shares
  - locality     : only activities of the same channel interact
"""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from dataclasses import dataclass, replace
from typing import Iterable, Sequence

from loguru import logger

from campaign_uplift.attribution.lift import daily_incremental
from campaign_uplift.attribution.reports import (
    DailyAttributionShare,
    PostWindowAttribution,
    UpliftReport,
)
from campaign_uplift.attribution.series import MetricSeries, split_by_channel
from campaign_uplift.config import PostWindowAttributionConfig
from campaign_uplift.core.contracts import Activity, ClicksSource, DailyMetric
from campaign_uplift.core.dates import date_range


@dataclass(frozen=True)
class AttributionWeight:
    """Weight used to split shared lift, and where it came from."""

    weight: float
    source: ClicksSource
    clicks_used: float | None


def resolve_weight(activity: Activity, config: PostWindowAttributionConfig) -> AttributionWeight:
    """Pick an activity's attribution weight using the click fallback chain."""
    if activity.actual_clicks is not None and activity.actual_clicks > 0:
        return AttributionWeight(activity.actual_clicks, ClicksSource.ACTUAL, activity.actual_clicks)
    if activity.deterministic_clicks is not None and activity.deterministic_clicks > 0:
        return AttributionWeight(
            activity.deterministic_clicks, ClicksSource.DETERMINISTIC, activity.deterministic_clicks
        )
    if config.weight_field and activity.metadata:
        estimated = activity.metadata.get(config.weight_field)
        if estimated is not None and estimated > 0:
            return AttributionWeight(estimated, ClicksSource.ESTIMATED, estimated)
    return AttributionWeight(config.default_weight, ClicksSource.DEFAULT, None)


def _shares(weights: Sequence[float]) -> list[float]:
    total = sum(weights)
    if total <= 0:
        return [1.0 / len(weights)] * len(weights)
    return [w / total for w in weights]


def _attribute_channel(
    members: list[UpliftReport],
    series: MetricSeries,
    config: PostWindowAttributionConfig,
) -> dict[str, UpliftReport]:
    ordered = sorted(members, key=lambda r: (r.activity.date, r.activity.id))
    weights = {r.activity_id: resolve_weight(r.activity, config) for r in ordered}

    covering: dict[dt.date, list[UpliftReport]] = defaultdict(list)
    for report in ordered:
        for day in date_range(report.post_window_start, report.post_window_end):
            covering[day].append(report)

    # day -> (pooled signups, pooled activations, {activity_id: share}, contender ids)
    day_split: dict[dt.date, tuple[float, float, dict[str, float], tuple[str, ...]]] = {}
    contested = 0
    for day, contenders in covering.items():
        observed = series.observed(day)
        signups, activations = observed if observed is not None else (None, None)
        pooled_signups = daily_incremental(
            signups, max(c.baseline_signups_avg for c in contenders)
        )
        pooled_activations = daily_incremental(
            activations, max(c.baseline_activations_avg for c in contenders)
        )

        ids = tuple(c.activity_id for c in contenders)
        shares = _shares([weights[i].weight for i in ids])
        day_split[day] = (pooled_signups, pooled_activations, dict(zip(ids, shares)), ids)
        if len(ids) > 1:
            contested += 1

    logger.debug(
        f"Attribution on '{series.channel}': {len(ordered)} activities, "
        f"{len(covering)} covered days, {contested} contested"
    )

    attributed: dict[str, UpliftReport] = {}
    for report in ordered:
        weight = weights[report.activity_id]
        daily: list[DailyAttributionShare] = []
        for day in date_range(report.post_window_start, report.post_window_end):
            pooled_signups, pooled_activations, shares, ids = day_split[day]
            share = shares[report.activity_id]
            daily.append(
                DailyAttributionShare(
                    date=day,
                    pooled_signups=pooled_signups,
                    pooled_activations=pooled_activations,
                    weight=weight.weight,
                    total_weight=sum(weights[i].weight for i in ids),
                    share=share,
                    attributed_signups=pooled_signups * share,
                    attributed_activations=pooled_activations * share,
                    overlapping_activities=ids,
                )
            )

        attributed[report.activity_id] = replace(
            report,
            post_window_attribution=PostWindowAttribution(
                raw_incremental_signups=report.incremental,
                raw_incremental_activations=report.incremental_activations,
                attributed_incremental_signups=sum(s.attributed_signups for s in daily),
                attributed_incremental_activations=sum(s.attributed_activations for s in daily),
                daily_shares=tuple(daily),
                clicks_used=weight.clicks_used,
                clicks_source=weight.source,
            ),
        )
    return attributed


def apply_proportional_attribution(
    reports: Iterable[UpliftReport],
    metrics: Iterable[DailyMetric],
    config: PostWindowAttributionConfig,
) -> list[UpliftReport]:
    """
    Split overlapping post-window lift among the activities of each channel.

    Non-mutating: returns new reports, in the input order, with
    ``post_window_attribution`` populated for every counted activity on an
    attributed channel.  Other reports are returned unchanged.

    Args:
        reports: Raw reports; every activity of a channel must be present.
        metrics: Daily ground-truth metrics (any channels).
        config:  Post-window attribution settings.
    """
    reports = list(reports)
    if not config.enabled:
        return reports

    by_channel: dict[str, list[UpliftReport]] = defaultdict(list)
    for report in reports:
        if report.counted and config.applies_to(report.channel):
            by_channel[report.channel].append(report)
    if not by_channel:
        return reports

    series_by_channel = split_by_channel(metrics)
    attributed: dict[tuple[str, str], UpliftReport] = {}
    for channel in sorted(by_channel):
        series = series_by_channel.get(channel)
        if series is None:
            series = MetricSeries.from_metrics([], channel=channel)
        for activity_id, report in _attribute_channel(by_channel[channel], series, config).items():
            attributed[(channel, activity_id)] = report

    return [attributed.get((r.channel, r.activity_id), r) for r in reports]
