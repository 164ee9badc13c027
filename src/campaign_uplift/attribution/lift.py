"""
Raw lift over the post window.

For each day of ``[activity_date, activity_date + post_window_days - 1]``:

    daily_incremental = max(0, observed - baseline_avg)

Negative deviations are floored: the heuristic never assigns negative
credit.  A day without a metric row contributes 0.  The summed values are
the activity's *raw* lift, which overstates credit whenever another
activity's post window covers the same channel-day; the overlap resolver
corrects for that.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass

from campaign_uplift.attribution.baseline import BaselineEstimate
from campaign_uplift.attribution.series import MetricSeries
from campaign_uplift.core.dates import add_days, date_range


@dataclass(frozen=True)
class DailyLift:
    """Observed and incremental volume on one post-window day."""

    date: dt.date
    observed_signups: int | None
    observed_activations: int | None
    incremental_signups: float
    incremental_activations: float


@dataclass(frozen=True)
class LiftResult:
    """Raw (unattributed) lift of one activity."""

    window_start: dt.date
    window_end: dt.date
    days: tuple[DailyLift, ...]
    observed_signups: int
    observed_activations: int
    incremental: float
    incremental_activations: float


def post_window(activity_date: dt.date, post_window_days: int) -> tuple[dt.date, dt.date]:
    """Inclusive ``(start, end)`` of the post window for *activity_date*."""
    return activity_date, add_days(activity_date, post_window_days - 1)


def daily_incremental(observed: int | None, baseline_avg: float) -> float:
    """Incremental volume for one day, floored at zero."""
    if observed is None:
        return 0.0
    return max(0.0, observed - baseline_avg)


def compute_lift(
    series: MetricSeries,
    activity_date: dt.date,
    baseline: BaselineEstimate,
    post_window_days: int,
) -> LiftResult:
    """Compare observed post-window values against *baseline*."""
    start, end = post_window(activity_date, post_window_days)

    days: list[DailyLift] = []
    for day in date_range(start, end):
        observed = series.observed(day)
        signups, activations = observed if observed is not None else (None, None)
        days.append(
            DailyLift(
                date=day,
                observed_signups=signups,
                observed_activations=activations,
                incremental_signups=daily_incremental(signups, baseline.signups_avg),
                incremental_activations=daily_incremental(activations, baseline.activations_avg),
            )
        )

    return LiftResult(
        window_start=start,
        window_end=end,
        days=tuple(days),
        observed_signups=sum(d.observed_signups or 0 for d in days),
        observed_activations=sum(d.observed_activations or 0 for d in days),
        incremental=sum(d.incremental_signups for d in days),
        incremental_activations=sum(d.incremental_activations for d in days),
    )
