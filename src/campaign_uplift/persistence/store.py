"""
SQLite persistence for activities, daily metrics and activity uplifts.

The ``activity_uplifts`` table is owned by the engine and is only ever
replaced wholesale: ``replace_uplifts`` deletes every row and inserts the
new set inside one transaction, so a failure leaves the previous rows in
place.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Iterable

import pandas as pd
from loguru import logger

from campaign_uplift.attribution.reports import UpliftReport
from campaign_uplift.core.contracts import Activity, ActivityUplift, DailyMetric
from campaign_uplift.core.exceptions import DataValidationError, PersistenceError
from campaign_uplift.ingestion.mappers import to_activity, to_daily_metric

_SCHEMA = """
CREATE TABLE IF NOT EXISTS activities (
    id TEXT PRIMARY KEY,
    activity_type TEXT NOT NULL DEFAULT '',
    channel TEXT NOT NULL,
    partner_name TEXT NOT NULL DEFAULT '',
    date TEXT NOT NULL,
    status TEXT NOT NULL DEFAULT 'live',
    cost_usd REAL,
    deterministic_clicks REAL,
    actual_clicks REAL,
    deterministic_tracked_signups INTEGER,
    metadata TEXT,
    content_url TEXT,
    channel_url TEXT,
    notes TEXT
);
CREATE TABLE IF NOT EXISTS daily_metrics (
    date TEXT NOT NULL,
    channel TEXT NOT NULL,
    signups INTEGER NOT NULL DEFAULT 0,
    activations INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (date, channel)
);
CREATE TABLE IF NOT EXISTS activity_uplifts (
    activity_id TEXT PRIMARY KEY,
    baseline_window_start TEXT NOT NULL,
    baseline_window_end TEXT NOT NULL,
    baseline_avg REAL NOT NULL,
    raw_incremental_signups REAL NOT NULL,
    raw_incremental_activations REAL NOT NULL,
    attributed_incremental_signups REAL NOT NULL,
    attributed_incremental_activations REAL NOT NULL,
    clicks_used REAL,
    clicks_source TEXT,
    confidence TEXT NOT NULL,
    confidence_explanation TEXT NOT NULL,
    daily_shares_json TEXT,
    daily_data_json TEXT
);
"""

_ACTIVITY_COLUMNS = [
    "id", "activity_type", "channel", "partner_name", "date", "status", "cost_usd",
    "deterministic_clicks", "actual_clicks", "deterministic_tracked_signups",
    "metadata", "content_url", "channel_url", "notes",
]

_UPLIFT_COLUMNS = list(ActivityUplift.model_fields)


def to_uplift_rows(reports: Iterable[UpliftReport]) -> list[ActivityUplift]:
    """Map reports 1:1 onto persisted ``ActivityUplift`` rows."""
    rows = []
    for report in reports:
        attribution = report.post_window_attribution
        rows.append(
            ActivityUplift(
                activity_id=report.activity_id,
                baseline_window_start=report.baseline_window_start,
                baseline_window_end=report.baseline_window_end,
                baseline_avg=report.baseline_avg,
                raw_incremental_signups=report.incremental,
                raw_incremental_activations=report.incremental_activations,
                attributed_incremental_signups=report.attributed_incremental,
                attributed_incremental_activations=report.attributed_incremental_activations,
                clicks_used=attribution.clicks_used if attribution else None,
                clicks_source=attribution.clicks_source if attribution else None,
                confidence=report.confidence,
                confidence_explanation=report.confidence_explanation,
                daily_shares_json=(
                    json.dumps([s.to_dict() for s in attribution.daily_shares])
                    if attribution else None
                ),
                daily_data_json=json.dumps([d.to_dict() for d in report.daily_data]),
            )
        )
    return rows


class UpliftStore:
    """
    SQLite-backed store for the engine's inputs and its uplift table.

    Usage::

        store = UpliftStore("data/uplift.db")
        store.ensure_schema()
        activities = store.load_activities()
        metrics = store.load_daily_metrics()
        ...
        store.replace_uplifts(rows)
    """

    def __init__(self, database: str | Path):
        self.database = str(database)

    def connect(self) -> sqlite3.Connection:
        try:
            if self.database != ":memory:":
                Path(self.database).parent.mkdir(parents=True, exist_ok=True)
            return sqlite3.connect(self.database)
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Failed to connect to SQLite {self.database}: {exc}") from exc

    def ensure_schema(self) -> None:
        """Create the tables if they do not exist."""
        with closing(self.connect()) as conn:
            try:
                conn.executescript(_SCHEMA)
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to create schema: {exc}") from exc

    # ------------------------------------------------------------------
    # Inputs
    # ------------------------------------------------------------------

    def write_activities(self, activities: Iterable[Activity]) -> int:
        """Insert or update activity rows."""
        records = []
        for a in activities:
            record = a.model_dump(mode="json")
            record["metadata"] = json.dumps(a.metadata) if a.metadata is not None else None
            records.append(tuple(record[c] for c in _ACTIVITY_COLUMNS))
        sql = (
            f"INSERT OR REPLACE INTO activities ({', '.join(_ACTIVITY_COLUMNS)}) "
            f"VALUES ({', '.join('?' for _ in _ACTIVITY_COLUMNS)})"
        )
        self._execute_many(sql, records, table="activities")
        return len(records)

    def write_daily_metrics(self, metrics: Iterable[DailyMetric]) -> int:
        """Insert or update daily metric rows."""
        records = [(m.date.isoformat(), m.channel, m.signups, m.activations) for m in metrics]
        sql = (
            "INSERT OR REPLACE INTO daily_metrics (date, channel, signups, activations) "
            "VALUES (?, ?, ?, ?)"
        )
        self._execute_many(sql, records, table="daily_metrics")
        return len(records)

    def load_activities(self) -> list[Activity]:
        """All activities sorted by date ascending; invalid rows are skipped."""
        df = self._read("SELECT * FROM activities ORDER BY date ASC, id ASC", table="activities")
        activities = []
        for row in df.to_dict(orient="records"):
            try:
                activities.append(to_activity(row))
            except DataValidationError as exc:
                logger.warning(f"Skipping stored activity: {exc}")
        return activities

    def load_daily_metrics(self) -> list[DailyMetric]:
        """All daily metrics sorted by date ascending."""
        df = self._read(
            "SELECT date, channel, signups, activations FROM daily_metrics "
            "ORDER BY date ASC, channel ASC",
            table="daily_metrics",
        )
        try:
            return [to_daily_metric(row) for row in df.to_dict(orient="records")]
        except DataValidationError as exc:
            raise PersistenceError(f"Stored daily metrics are invalid: {exc}", table="daily_metrics") from exc

    # ------------------------------------------------------------------
    # Uplifts
    # ------------------------------------------------------------------

    def replace_uplifts(self, rows: Iterable[ActivityUplift]) -> int:
        """
        Atomically replace every uplift row with *rows*.

        Raises:
            PersistenceError: if the delete or any insert fails.  The
                transaction is rolled back and prior rows survive.
        """
        records = [tuple(r.to_record()[c] for c in _UPLIFT_COLUMNS) for r in rows]
        sql = (
            f"INSERT INTO activity_uplifts ({', '.join(_UPLIFT_COLUMNS)}) "
            f"VALUES ({', '.join('?' for _ in _UPLIFT_COLUMNS)})"
        )
        with closing(self.connect()) as conn:
            try:
                with conn:
                    conn.execute("DELETE FROM activity_uplifts")
                    conn.executemany(sql, records)
            except sqlite3.Error as exc:
                raise PersistenceError(
                    f"Failed to replace activity uplifts: {exc}", table="activity_uplifts"
                ) from exc
        logger.info(f"Replaced activity_uplifts with {len(records)} rows")
        return len(records)

    def load_uplifts(self) -> pd.DataFrame:
        """Current uplift rows as a DataFrame."""
        return self._read(
            "SELECT * FROM activity_uplifts ORDER BY activity_id ASC", table="activity_uplifts"
        )

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _read(self, query: str, table: str) -> pd.DataFrame:
        with closing(self.connect()) as conn:
            try:
                return pd.read_sql(query, conn)
            except (sqlite3.Error, pd.errors.DatabaseError) as exc:
                raise PersistenceError(f"Failed to read {table}: {exc}", table=table) from exc

    def _execute_many(self, sql: str, records: list[tuple], table: str) -> None:
        with closing(self.connect()) as conn:
            try:
                with conn:
                    conn.executemany(sql, records)
            except sqlite3.Error as exc:
                raise PersistenceError(f"Failed to write {table}: {exc}", table=table) from exc
