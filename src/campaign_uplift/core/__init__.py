"""
Core module for campaign-uplift.

Provides the canonical data contracts, calendar helpers and exception
types shared by the attribution engine and its collaborators.
"""

from campaign_uplift.core.contracts import (
    Activity,
    ActivityUplift,
    ClicksSource,
    Confidence,
    DailyMetric,
    Metric,
)
from campaign_uplift.core.exceptions import (
    UpliftError,
    ConfigError,
    DataValidationError,
    InsufficientBaselineData,
    MalformedMetadata,
    PersistenceError,
)

__all__ = [
    "Activity",
    "ActivityUplift",
    "ClicksSource",
    "Confidence",
    "DailyMetric",
    "Metric",
    "UpliftError",
    "ConfigError",
    "DataValidationError",
    "InsufficientBaselineData",
    "MalformedMetadata",
    "PersistenceError",
]
