"""
Pandera schemas for the engine's tabular inputs.

Daily metrics are ground truth and validated strictly: a bad frame is
rejected as a whole.  The activity schema only checks the columns every
row needs; individual bad rows are dropped later, row by row, so one
anomalous activity cannot block the rest.
"""

import pandas as pd
import pandera as pa
from pandera import Check, Column, DataFrameSchema
from pandera.typing import Series

from campaign_uplift.core.exceptions import DataValidationError


class DailyMetricSchema(pa.DataFrameModel):
    """
    Schema for daily ground-truth metrics, one row per (date, channel).

    Example:
        date       | channel    | signups | activations
        2024-01-01 | newsletter | 120     | 95
        2024-01-01 | youtube    | 40      | 22
    """

    date: Series[pa.DateTime] = pa.Field(
        description="Calendar day of the counts",
        coerce=True,
    )
    channel: Series[str] = pa.Field(
        description="Marketing channel (e.g. newsletter, linkedin, youtube)",
        str_length={"min_value": 1, "max_value": 120},
    )
    signups: Series[int] = pa.Field(
        ge=0,
        description="Organic + campaign signups that day",
        coerce=True,
    )
    activations: Series[int] = pa.Field(
        ge=0,
        description="Activations that day",
        coerce=True,
    )

    class Config:
        strict = False  # Allow additional columns
        coerce = True


ActivitySchema = DataFrameSchema(
    {
        "id": Column(nullable=False),
        "channel": Column(str, Check.str_length(min_value=1), nullable=False),
        "date": Column(nullable=False),
        "status": Column(nullable=True, required=False),
        "actual_clicks": Column(float, Check.ge(0), nullable=True, required=False, coerce=True),
        "deterministic_clicks": Column(float, Check.ge(0), nullable=True, required=False, coerce=True),
        "cost_usd": Column(float, Check.ge(0), nullable=True, required=False, coerce=True),
    },
    strict=False,
    name="ActivitySchema",
)


def validate_daily_metrics(df: pd.DataFrame) -> pd.DataFrame:
    """Validate daily metrics against schema."""
    try:
        return DailyMetricSchema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as exc:
        raise DataValidationError(f"Daily metrics failed validation: {exc}") from exc


def validate_activities(df: pd.DataFrame) -> pd.DataFrame:
    """Validate the activity frame's required columns."""
    try:
        return ActivitySchema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as exc:
        raise DataValidationError(f"Activities failed validation: {exc}") from exc
