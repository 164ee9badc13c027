"""Run boundary for campaign-uplift recomputes."""

from campaign_uplift.pipeline.recompute import RecomputeResult, recompute_attribution

__all__ = ["RecomputeResult", "recompute_attribution"]
