"""
Attribution recompute -- the run boundary around the engine.

Orchestrates:
  1. Read     -- bulk-load activities and daily metrics, sorted by date
  2. Compute  -- ``compute_all_reports`` (baseline, lift, confidence, attribution)
  3. Map      -- one ``ActivityUplift`` row per eligible (counted-status) activity
  4. Persist  -- atomic full-table replace

Nothing is written unless steps 1-3 succeed, so a failed run leaves the
previously persisted uplifts untouched.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any

from loguru import logger

from campaign_uplift.attribution.engine import compute_all_reports
from campaign_uplift.config import AttributionConfig
from campaign_uplift.persistence.store import UpliftStore, to_uplift_rows


@dataclass(frozen=True)
class RecomputeResult:
    """Outcome of one recompute run."""

    count: int
    duration_ms: int

    def to_dict(self) -> dict[str, Any]:
        return {"count": self.count, "durationMs": self.duration_ms}


def recompute_attribution(store: UpliftStore, config: AttributionConfig) -> RecomputeResult:
    """
    Recompute every activity's uplift and replace the persisted table.

    Only eligible activities get a row: those whose status is counted
    (``AttributionConfig.is_counted``).  Booked or canceled activities are
    still reported in memory with a LOW zero-lift grade, but they are not
    persisted, so they never appear next to measured activities.  An
    activity whose computation failed is still eligible and is persisted
    with its LOW report.

    Raises:
        PersistenceError: if reading inputs or replacing the table fails.
    """
    t0 = time.perf_counter()

    activities = store.load_activities()
    metrics = store.load_daily_metrics()
    logger.info(f"Recompute: {len(activities)} activities, {len(metrics)} metric rows")

    reports = compute_all_reports(activities, metrics, config)
    rows = to_uplift_rows(r for r in reports if config.is_counted(r.activity.status))
    count = store.replace_uplifts(rows)

    result = RecomputeResult(count=count, duration_ms=int((time.perf_counter() - t0) * 1000))
    logger.info(f"Recompute complete: {result.count} activities in {result.duration_ms}ms")
    return result
