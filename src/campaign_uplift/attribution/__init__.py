"""
Attribution engine for campaign-uplift.

Estimates each activity's incremental signups/activations against an
organic baseline, grades the estimate, and splits overlapping lift among
concurrently active campaigns of the same channel.
"""

from campaign_uplift.attribution.baseline import (
    BaselineEstimate,
    baseline_window,
    estimate_baseline,
)
from campaign_uplift.attribution.lift import (
    DailyLift,
    LiftResult,
    compute_lift,
    daily_incremental,
    post_window,
)
from campaign_uplift.attribution.confidence import (
    ConfidenceGrade,
    coefficient_of_variation,
    score_confidence,
)
from campaign_uplift.attribution.overlap import (
    AttributionWeight,
    apply_proportional_attribution,
    resolve_weight,
)
from campaign_uplift.attribution.engine import build_report, compute_all_reports
from campaign_uplift.attribution.reports import (
    DailyAttributionShare,
    DayDataPoint,
    PostWindowAttribution,
    UpliftReport,
    reports_to_dataframe,
)
from campaign_uplift.attribution.series import MetricSeries, split_by_channel

__all__ = [
    "BaselineEstimate",
    "baseline_window",
    "estimate_baseline",
    "DailyLift",
    "LiftResult",
    "compute_lift",
    "daily_incremental",
    "post_window",
    "ConfidenceGrade",
    "coefficient_of_variation",
    "score_confidence",
    "AttributionWeight",
    "apply_proportional_attribution",
    "resolve_weight",
    "build_report",
    "compute_all_reports",
    "DailyAttributionShare",
    "DayDataPoint",
    "PostWindowAttribution",
    "UpliftReport",
    "reports_to_dataframe",
    "MetricSeries",
    "split_by_channel",
]
