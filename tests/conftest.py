"""Shared builders for attribution tests."""

import datetime as dt

import pytest

from campaign_uplift.config import AttributionConfig
from campaign_uplift.core.contracts import Activity, DailyMetric

START = dt.date(2024, 3, 1)


def day(n: int) -> dt.date:
    """Day *n* of the test calendar; day 1 is 2024-03-01."""
    return START + dt.timedelta(days=n - 1)


def make_activity(activity_id: str, n: int, channel: str = "newsletter", **kwargs) -> Activity:
    return Activity(id=activity_id, channel=channel, date=day(n), **kwargs)


def make_metrics(values: dict[int, int], channel: str = "newsletter", signups=None) -> list[DailyMetric]:
    """
    Daily metrics from ``{day_number: activations}``.

    Signups default to half the activations.
    """
    return [
        DailyMetric(
            date=day(n),
            channel=channel,
            activations=v,
            signups=(signups if signups is not None else v // 2),
        )
        for n, v in sorted(values.items())
    ]


def flat(first: int, last: int, value: int = 100) -> dict[int, int]:
    return {n: value for n in range(first, last + 1)}


@pytest.fixture
def scenario_a():
    """Flat 100/day for 14 days, one activity on day 15, lift 30/40/20."""
    values = flat(1, 14)
    values.update({15: 130, 16: 140, 17: 120})
    activities = [make_activity("a1", 15)]
    config = AttributionConfig(baseline_window_days=14, post_window_days=3)
    return activities, make_metrics(values), config


@pytest.fixture
def scenario_b():
    """Two activities (weights 3 and 1) sharing day 16, where lift is 40."""
    values = flat(1, 15)
    values.update({16: 140, 17: 100})
    activities = [
        make_activity("A", 15, actual_clicks=3),
        make_activity("B", 16, actual_clicks=1),
    ]
    config = AttributionConfig(baseline_window_days=14, post_window_days=2)
    return activities, make_metrics(values), config
