"""
File loaders for activities and daily metrics.

Supports CSV and Parquet.  Column names are normalised to snake_case so
exports from the storage layer (``activityType``, ``actualClicks`` ...)
load the same as hand-written files.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from pathlib import Path

import pandas as pd
from loguru import logger

from campaign_uplift.core.contracts import Activity, DailyMetric
from campaign_uplift.core.exceptions import DataValidationError
from campaign_uplift.ingestion.mappers import to_activity, to_daily_metric
from campaign_uplift.ingestion.schemas import validate_activities, validate_daily_metrics


class BaseLoader(ABC):
    """
    Abstract base class for data loaders.

    Extend this class to read activities or metrics from another format.
    """

    @abstractmethod
    def load(self, source: str | Path, **kwargs) -> pd.DataFrame:
        """Load data from source and return as pandas DataFrame."""

    def validate_source(self, source: str | Path) -> Path:
        """Validate that the source exists."""
        path = Path(source)
        if not path.exists():
            raise FileNotFoundError(f"Source not found: {source}")
        return path


class ParquetLoader(BaseLoader):
    """Loader for Parquet files."""

    def load(self, source: str | Path, **kwargs) -> pd.DataFrame:
        path = self.validate_source(source)
        logger.info(f"Loading Parquet from {path}")
        return pd.read_parquet(path, **kwargs)


class CSVLoader(BaseLoader):
    """
    Loader for CSV files.

    Supports single files and directories of CSVs.
    """

    def __init__(self, delimiter: str = ",", encoding: str = "utf-8"):
        self.delimiter = delimiter
        self.encoding = encoding

    def load(self, source: str | Path, **kwargs) -> pd.DataFrame:
        path = self.validate_source(source)
        logger.info(f"Loading CSV from {path}")

        if path.is_dir():
            frames = [
                pd.read_csv(f, delimiter=self.delimiter, encoding=self.encoding, **kwargs)
                for f in sorted(path.glob("*.csv"))
            ]
            if not frames:
                raise FileNotFoundError(f"No CSV files in {path}")
            return pd.concat(frames, ignore_index=True)

        return pd.read_csv(path, delimiter=self.delimiter, encoding=self.encoding, **kwargs)


def get_loader(source: str | Path) -> BaseLoader:
    """Pick a loader from the file extension."""
    suffix = Path(source).suffix.lower()
    if suffix in {".parquet", ".pq"}:
        return ParquetLoader()
    if suffix in {".csv", ""}:
        return CSVLoader()
    raise ValueError(f"Unsupported file type: {suffix}")


def snake_case_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Rename camelCase columns to snake_case."""
    return df.rename(columns=lambda c: re.sub(r"(?<!^)(?=[A-Z])", "_", str(c)).lower())


def daily_metrics_from_frame(df: pd.DataFrame) -> list[DailyMetric]:
    """Validate a metrics frame and map it to contracts, sorted by date."""
    df = validate_daily_metrics(snake_case_columns(df))

    n_before = len(df)
    df = df.drop_duplicates(subset=["date", "channel"], keep="last")
    if len(df) < n_before:
        logger.warning(f"Dropped {n_before - len(df)} duplicate (date, channel) metric rows")

    df = df.sort_values(["date", "channel"], kind="stable")
    return [to_daily_metric(row) for row in df.to_dict(orient="records")]


def activities_from_frame(df: pd.DataFrame) -> list[Activity]:
    """
    Validate an activity frame and map it to contracts, sorted by date.

    Rows that cannot be mapped are skipped with a warning.
    """
    df = validate_activities(snake_case_columns(df))

    activities: list[Activity] = []
    for row in df.to_dict(orient="records"):
        try:
            activities.append(to_activity(row))
        except DataValidationError as exc:
            logger.warning(f"Skipping activity row: {exc}")

    skipped = len(df) - len(activities)
    if skipped:
        logger.warning(f"Skipped {skipped} invalid activity row(s)")
    return sorted(activities, key=lambda a: (a.date, a.id))


def load_daily_metrics(source: str | Path) -> list[DailyMetric]:
    """Load daily metrics from a CSV or Parquet file."""
    metrics = daily_metrics_from_frame(get_loader(source).load(source))
    logger.info(f"Loaded {len(metrics)} daily metric rows from {source}")
    return metrics


def load_activities(source: str | Path) -> list[Activity]:
    """Load activities from a CSV or Parquet file."""
    activities = activities_from_frame(get_loader(source).load(source))
    logger.info(f"Loaded {len(activities)} activities from {source}")
    return activities
