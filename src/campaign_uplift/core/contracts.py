"""
Canonical data contracts for campaign-uplift.

These Pydantic models define every data boundary of the engine:

  - ``Activity`` and ``DailyMetric`` are the read-only inputs supplied by
    the ingestion collaborators.
  - ``ActivityUplift`` is the persisted output row, one per eligible
    activity, written by a full-table replace.

Inputs accept the camelCase names used by the storage layer as aliases
(``activityType``, ``actualClicks`` ...) as well as the snake_case field
names.  All models are frozen: the engine never mutates its inputs.
"""

from __future__ import annotations

import datetime as dt
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class Confidence(str, Enum):
    HIGH = "HIGH"
    MEDIUM = "MEDIUM"
    LOW = "LOW"


class ClicksSource(str, Enum):
    ACTUAL = "actual"
    DETERMINISTIC = "deterministic"
    ESTIMATED = "estimated"
    DEFAULT = "default"


class Metric(str, Enum):
    SIGNUPS = "signups"
    ACTIVATIONS = "activations"


# ---------------------------------------------------------------------------
# Input contracts
# ---------------------------------------------------------------------------

class Activity(BaseModel):
    """A single campaign touchpoint (send, post, video) on one channel."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    id: str = Field(min_length=1)
    activity_type: str = ""
    channel: str = Field(min_length=1, max_length=120)
    partner_name: str = ""
    date: dt.date
    status: str = "live"
    cost_usd: float | None = Field(default=None, ge=0)
    deterministic_clicks: float | None = Field(default=None, ge=0)
    actual_clicks: float | None = Field(default=None, ge=0)
    deterministic_tracked_signups: int | None = Field(default=None, ge=0)
    metadata: dict[str, float] | None = None
    content_url: str | None = None
    channel_url: str | None = None
    notes: str | None = None


class DailyMetric(BaseModel):
    """Ground-truth organic funnel counts for one channel on one day."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    date: dt.date
    channel: str = Field(min_length=1, max_length=120)
    signups: int = Field(default=0, ge=0)
    activations: int = Field(default=0, ge=0)


# ---------------------------------------------------------------------------
# Output contract
# ---------------------------------------------------------------------------

class ActivityUplift(BaseModel):
    """
    Persisted uplift row for one activity.

    The table holding these rows is exclusively owned by the engine and is
    replaced wholesale on every recompute.
    """

    model_config = ConfigDict(frozen=True)

    activity_id: str
    baseline_window_start: dt.date
    baseline_window_end: dt.date
    baseline_avg: float
    raw_incremental_signups: float = Field(ge=0)
    raw_incremental_activations: float = Field(ge=0)
    attributed_incremental_signups: float = Field(ge=0)
    attributed_incremental_activations: float = Field(ge=0)
    clicks_used: float | None = None
    clicks_source: ClicksSource | None = None
    confidence: Confidence
    confidence_explanation: str = Field(min_length=1)
    daily_shares_json: str | None = None
    daily_data_json: str | None = None

    def to_record(self) -> dict:
        """Flat dict with ISO dates and plain enum values, ready for SQL."""
        return self.model_dump(mode="json")
