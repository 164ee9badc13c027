"""
Ingestion boundary for campaign-uplift.

Turns storage rows, CSV and Parquet files into validated contracts.
"""

from campaign_uplift.ingestion.loaders import (
    BaseLoader,
    CSVLoader,
    ParquetLoader,
    activities_from_frame,
    daily_metrics_from_frame,
    get_loader,
    load_activities,
    load_daily_metrics,
)
from campaign_uplift.ingestion.mappers import parse_metadata, to_activity, to_daily_metric
from campaign_uplift.ingestion.schemas import (
    ActivitySchema,
    DailyMetricSchema,
    validate_activities,
    validate_daily_metrics,
)

__all__ = [
    "BaseLoader",
    "CSVLoader",
    "ParquetLoader",
    "activities_from_frame",
    "daily_metrics_from_frame",
    "get_loader",
    "load_activities",
    "load_daily_metrics",
    "parse_metadata",
    "to_activity",
    "to_daily_metric",
    "ActivitySchema",
    "DailyMetricSchema",
    "validate_activities",
    "validate_daily_metrics",
]
