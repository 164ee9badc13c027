"""
Confidence grading for uplift estimates.

Grades are deterministic and computed from three criteria:

  1. Baseline sufficiency -- fewer than ``min_baseline_days`` days with
     data forces LOW.
  2. Coverage             -- fraction of baseline-window days with data.
  3. Stability            -- coefficient of variation of the baseline.

The lower of the coverage and stability grades wins.  An activity whose
post window overlaps another activity's on the same channel is capped at
MEDIUM because its credit is then estimated by proportional splitting
rather than observed directly.  The explanation always names the deciding
criterion and uses fixed formatting, so identical inputs produce identical
text.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from campaign_uplift.attribution.baseline import BaselineEstimate
from campaign_uplift.config import ConfidencePolicy
from campaign_uplift.core.contracts import Confidence
from campaign_uplift.core.exceptions import InsufficientBaselineData

_RANK = {Confidence.LOW: 0, Confidence.MEDIUM: 1, Confidence.HIGH: 2}


@dataclass(frozen=True)
class ConfidenceGrade:
    level: Confidence
    explanation: str


def coefficient_of_variation(mean: float, std: float) -> float:
    """``std / mean``; 0 for a flat series, infinite for spread around zero."""
    if std == 0:
        return 0.0
    if mean == 0:
        return float("inf")
    return std / abs(mean)


def _grade_coverage(coverage: float, policy: ConfidencePolicy) -> Confidence:
    if coverage >= policy.high_coverage:
        return Confidence.HIGH
    if coverage >= policy.medium_coverage:
        return Confidence.MEDIUM
    return Confidence.LOW


def _grade_cv(cv: float, policy: ConfidencePolicy) -> Confidence:
    if cv <= policy.high_max_cv:
        return Confidence.HIGH
    if cv <= policy.medium_max_cv:
        return Confidence.MEDIUM
    return Confidence.LOW


def score_confidence(
    baseline: BaselineEstimate,
    metric: str,
    policy: ConfidencePolicy,
    overlapping: Sequence[str] = (),
    activity_id: str = "",
) -> ConfidenceGrade:
    """
    Grade one activity's lift estimate.

    Args:
        baseline:    The activity's baseline estimate.
        metric:      Primary metric whose baseline spread is graded.
        policy:      Thresholds.
        overlapping: Ids of same-channel activities whose post windows
                     overlap this one.
        activity_id: Used in the insufficiency message.
    """
    try:
        baseline.require_sufficient(policy.min_baseline_days, activity_id)
    except InsufficientBaselineData as exc:
        return ConfidenceGrade(
            Confidence.LOW,
            f"Insufficient baseline data: {exc} "
            f"(window {baseline.window_start.isoformat()} to {baseline.window_end.isoformat()}).",
        )

    coverage = baseline.coverage
    cv = coefficient_of_variation(baseline.avg(metric), baseline.std(metric))
    by_coverage = _grade_coverage(coverage, policy)
    by_cv = _grade_cv(cv, policy)

    coverage_text = (
        f"baseline coverage {coverage:.0%} "
        f"({baseline.days_with_data}/{baseline.window_days} days)"
    )
    cv_text = "baseline CV undefined (zero mean)" if cv == float("inf") else f"baseline CV {cv:.2f}"

    if _RANK[by_coverage] < _RANK[by_cv]:
        level = by_coverage
        explanation = f"{level.value}: decided by {coverage_text}; {cv_text} ({metric})."
    elif _RANK[by_cv] < _RANK[by_coverage]:
        level = by_cv
        explanation = f"{level.value}: decided by {cv_text} ({metric}); {coverage_text}."
    else:
        level = by_cv
        explanation = f"{level.value}: {coverage_text} and {cv_text} ({metric})."

    if overlapping:
        ids = ", ".join(overlapping)
        if level is Confidence.HIGH:
            level = Confidence.MEDIUM
            explanation = (
                f"MEDIUM: capped by post-window overlap with {len(overlapping)} other "
                f"activit{'y' if len(overlapping) == 1 else 'ies'} ({ids}); "
                f"credit is estimated by proportional split. "
                f"Otherwise HIGH with {coverage_text} and {cv_text} ({metric})."
            )
        else:
            explanation += f" Post window also overlaps {ids}."

    return ConfidenceGrade(level, explanation)
