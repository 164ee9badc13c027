"""
Baseline estimation.

The baseline is the expected organic daily level of a channel's metric
just before an activity goes out:

    baseline_window_end   = activity_date - 1
    baseline_window_start = baseline_window_end - baseline_window_days + 1
    baseline_avg          = mean(metric over days in the window that have data)

Days without a metric row are excluded rather than zero-filled.  A thin
window still yields a baseline (0.0 when empty); whether it is thin enough
to matter is decided by the confidence scorer through
``BaselineEstimate.require_sufficient``.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from campaign_uplift.attribution.series import MetricSeries
from campaign_uplift.core.dates import add_days
from campaign_uplift.core.exceptions import InsufficientBaselineData


@dataclass(frozen=True)
class BaselineEstimate:
    """Organic baseline for one activity, for both funnel metrics."""

    window_start: dt.date
    window_end: dt.date
    window_days: int
    days_with_data: int
    signups_avg: float
    activations_avg: float
    signups_std: float
    activations_std: float
    excluded_days: int = 0

    @property
    def coverage(self) -> float:
        """Fraction of window days that had a metric row."""
        if self.window_days <= 0:
            return 0.0
        return self.days_with_data / self.window_days

    def avg(self, metric: str) -> float:
        return self.signups_avg if metric == "signups" else self.activations_avg

    def std(self, metric: str) -> float:
        return self.signups_std if metric == "signups" else self.activations_std

    def require_sufficient(self, min_days: int, activity_id: str = "") -> None:
        """Raise ``InsufficientBaselineData`` if fewer than *min_days* had data."""
        if self.days_with_data < min_days:
            raise InsufficientBaselineData(activity_id, self.days_with_data, min_days)


def baseline_window(activity_date: dt.date, baseline_window_days: int) -> tuple[dt.date, dt.date]:
    """Inclusive ``(start, end)`` of the baseline window for *activity_date*."""
    end = add_days(activity_date, -1)
    start = add_days(end, -(baseline_window_days - 1))
    return start, end


def _mean(values: np.ndarray) -> float:
    return float(values.mean()) if values.size else 0.0


def _std(values: np.ndarray) -> float:
    # Population standard deviation; a single point has no spread.
    return float(values.std()) if values.size > 1 else 0.0


def estimate_baseline(
    series: MetricSeries,
    activity_date: dt.date,
    baseline_window_days: int,
    exclude_days: Iterable[dt.date] = (),
) -> BaselineEstimate:
    """
    Estimate the organic baseline preceding *activity_date*.

    Args:
        series:               The channel's metric series.
        activity_date:        Day the activity went out.
        baseline_window_days: Length of the look-back window.
        exclude_days:         Days to drop from the window (baseline
                              exclusion policy); only days inside the
                              window are counted as excluded.

    Returns:
        BaselineEstimate with per-metric mean, spread and day counts.
    """
    start, end = baseline_window(activity_date, baseline_window_days)
    in_window = {d for d in exclude_days if start <= d <= end}

    full = series.window(start, end)
    rows = series.window(start, end, exclude=in_window) if in_window else full

    signups = rows["signups"].to_numpy(dtype=float)
    activations = rows["activations"].to_numpy(dtype=float)

    return BaselineEstimate(
        window_start=start,
        window_end=end,
        window_days=baseline_window_days,
        days_with_data=len(rows),
        signups_avg=_mean(signups),
        activations_avg=_mean(activations),
        signups_std=_std(signups),
        activations_std=_std(activations),
        excluded_days=len(full) - len(rows),
    )
