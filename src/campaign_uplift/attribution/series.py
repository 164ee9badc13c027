"""
Per-channel daily metric series.

Wraps a pandas DataFrame indexed by a sorted, de-duplicated DatetimeIndex
with one ``signups`` and one ``activations`` column.  Missing days are
simply absent rows; nothing is zero-filled.
"""

from __future__ import annotations

import datetime as dt
from collections import defaultdict
from typing import Iterable

import pandas as pd

from campaign_uplift.core.contracts import DailyMetric

METRIC_COLUMNS = ["signups", "activations"]


class MetricSeries:
    """Date-sorted ground-truth metrics for a single channel."""

    def __init__(self, frame: pd.DataFrame, channel: str = ""):
        self.channel = channel
        self._frame = frame

    @classmethod
    def from_metrics(cls, metrics: Iterable[DailyMetric], channel: str = "") -> "MetricSeries":
        """Build a series from metric rows; the last row wins for a repeated date."""
        records = [
            {"date": m.date, "signups": m.signups, "activations": m.activations}
            for m in metrics
        ]
        frame = pd.DataFrame.from_records(records, columns=["date", *METRIC_COLUMNS])
        frame["date"] = pd.to_datetime(frame["date"])
        frame = (
            frame.drop_duplicates(subset="date", keep="last")
            .set_index("date")
            .sort_index()
        )
        return cls(frame, channel=channel)

    @property
    def frame(self) -> pd.DataFrame:
        return self._frame

    def __len__(self) -> int:
        return len(self._frame)

    def window(
        self,
        start: dt.date,
        end: dt.date,
        exclude: Iterable[dt.date] = (),
    ) -> pd.DataFrame:
        """Rows whose date falls in ``[start, end]``, minus any *exclude* days."""
        if end < start:
            return self._frame.iloc[0:0]
        rows = self._frame.loc[pd.Timestamp(start):pd.Timestamp(end)]
        excluded = [pd.Timestamp(d) for d in exclude]
        if excluded:
            rows = rows[~rows.index.isin(excluded)]
        return rows

    def observed(self, day: dt.date) -> tuple[int, int] | None:
        """``(signups, activations)`` on *day*, or None if the day has no row."""
        ts = pd.Timestamp(day)
        if ts not in self._frame.index:
            return None
        row = self._frame.loc[ts]
        return int(row["signups"]), int(row["activations"])


def split_by_channel(metrics: Iterable[DailyMetric]) -> dict[str, MetricSeries]:
    """Group metric rows into one ``MetricSeries`` per channel."""
    grouped: dict[str, list[DailyMetric]] = defaultdict(list)
    for metric in metrics:
        grouped[metric.channel].append(metric)
    return {
        channel: MetricSeries.from_metrics(rows, channel=channel)
        for channel, rows in grouped.items()
    }
