"""
In-memory report records produced by the attribution engine.

``UpliftReport`` carries raw lift for one activity.  Proportional
attribution is an explicit optional sub-record (``PostWindowAttribution``):
when it is absent, attributed figures equal raw figures.
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from campaign_uplift.core.contracts import Activity, ClicksSource, Confidence


@dataclass(frozen=True)
class DayDataPoint:
    """One day of the detail chart: baseline window followed by post window."""

    date: dt.date
    signups: int | None
    activations: int | None
    is_baseline: bool
    is_post_window: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "signups": self.signups,
            "activations": self.activations,
            "is_baseline": self.is_baseline,
            "is_post_window": self.is_post_window,
        }


@dataclass(frozen=True)
class DailyAttributionShare:
    """Audit record of how one channel-day's pooled lift was split."""

    date: dt.date
    pooled_signups: float
    pooled_activations: float
    weight: float
    total_weight: float
    share: float
    attributed_signups: float
    attributed_activations: float
    overlapping_activities: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "pooled_signups": self.pooled_signups,
            "pooled_activations": self.pooled_activations,
            "weight": self.weight,
            "total_weight": self.total_weight,
            "share": self.share,
            "attributed_signups": self.attributed_signups,
            "attributed_activations": self.attributed_activations,
            "overlapping_activities": list(self.overlapping_activities),
        }


@dataclass(frozen=True)
class PostWindowAttribution:
    """Result of splitting overlapping post-window lift for one activity."""

    raw_incremental_signups: float
    raw_incremental_activations: float
    attributed_incremental_signups: float
    attributed_incremental_activations: float
    daily_shares: tuple[DailyAttributionShare, ...]
    clicks_used: float | None
    clicks_source: ClicksSource
    enabled: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "enabled": self.enabled,
            "raw_incremental_signups": self.raw_incremental_signups,
            "raw_incremental_activations": self.raw_incremental_activations,
            "attributed_incremental_signups": self.attributed_incremental_signups,
            "attributed_incremental_activations": self.attributed_incremental_activations,
            "daily_shares": [s.to_dict() for s in self.daily_shares],
            "clicks_used": self.clicks_used,
            "clicks_source": self.clicks_source.value,
        }


@dataclass(frozen=True)
class UpliftReport:
    """Uplift estimate for a single activity."""

    activity: Activity
    metric: str

    # Baseline
    baseline_window_start: dt.date
    baseline_window_end: dt.date
    baseline_avg: float
    baseline_signups_avg: float
    baseline_activations_avg: float
    baseline_std: float
    baseline_days: int

    # Post window (raw)
    post_window_start: dt.date
    post_window_end: dt.date
    observed_signups: int
    observed_activations: int
    incremental: float
    incremental_activations: float

    # Confidence
    confidence: Confidence
    confidence_explanation: str

    counted: bool = True
    overlapping_activities: tuple[str, ...] = ()
    daily_data: tuple[DayDataPoint, ...] = ()
    post_window_attribution: PostWindowAttribution | None = field(default=None)

    @property
    def activity_id(self) -> str:
        return self.activity.id

    @property
    def channel(self) -> str:
        return self.activity.channel

    @property
    def attributed_incremental(self) -> float:
        if self.post_window_attribution is None:
            return self.incremental
        return self.post_window_attribution.attributed_incremental_signups

    @property
    def attributed_incremental_activations(self) -> float:
        if self.post_window_attribution is None:
            return self.incremental_activations
        return self.post_window_attribution.attributed_incremental_activations

    def to_dict(self) -> dict[str, Any]:
        return {
            "activity_id": self.activity.id,
            "channel": self.activity.channel,
            "partner_name": self.activity.partner_name,
            "activity_date": self.activity.date.isoformat(),
            "status": self.activity.status,
            "metric": self.metric,
            "baseline_window_start": self.baseline_window_start.isoformat(),
            "baseline_window_end": self.baseline_window_end.isoformat(),
            "baseline_avg": self.baseline_avg,
            "baseline_days": self.baseline_days,
            "post_window_start": self.post_window_start.isoformat(),
            "post_window_end": self.post_window_end.isoformat(),
            "observed_signups": self.observed_signups,
            "observed_activations": self.observed_activations,
            "raw_incremental_signups": self.incremental,
            "raw_incremental_activations": self.incremental_activations,
            "attributed_incremental_signups": self.attributed_incremental,
            "attributed_incremental_activations": self.attributed_incremental_activations,
            "confidence": self.confidence.value,
            "confidence_explanation": self.confidence_explanation,
            "overlapping_activities": list(self.overlapping_activities),
        }


def reports_to_dataframe(reports: list[UpliftReport]) -> pd.DataFrame:
    """Flatten reports into one row per activity."""
    return pd.DataFrame([r.to_dict() for r in reports])
