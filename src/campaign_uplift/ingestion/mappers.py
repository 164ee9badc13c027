"""
Storage row -> contract mappers.

This is the one place where loosely typed storage values become
contracts.  Activity metadata is parsed here exactly once: anything that
is not a string-keyed mapping of finite numbers is treated as absent, so
no partially parsed value ever reaches the lift arithmetic.
"""

from __future__ import annotations

import json
import math
from collections.abc import Mapping
from typing import Any

import numpy as np
import pandas as pd
from loguru import logger
from pydantic import ValidationError

from campaign_uplift.core.contracts import Activity, DailyMetric
from campaign_uplift.core.dates import to_date
from campaign_uplift.core.exceptions import DataValidationError, MalformedMetadata


def _plain(value: Any) -> Any:
    """Unbox numpy scalars and turn NaN/NaT into None."""
    if isinstance(value, (str, bytes, Mapping, list, tuple)):
        return value
    if isinstance(value, np.generic):
        value = value.item()
    if value is None or pd.isna(value):
        return None
    return value


def parse_metadata(raw: Any, activity_id: str = "") -> dict[str, float] | None:
    """
    Parse activity metadata into ``{str: float}``.

    Accepts a mapping or its JSON text.  Empty input means no metadata.

    Raises:
        MalformedMetadata: if the input cannot be read as a string-keyed
            mapping of finite numbers.
    """
    raw = _plain(raw)
    if raw is None:
        return None
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise MalformedMetadata(f"metadata is not valid JSON: {exc}", activity_id) from exc
        if raw is None:
            return None
    if not isinstance(raw, Mapping):
        raise MalformedMetadata(
            f"metadata must be an object, got {type(raw).__name__}", activity_id
        )

    parsed: dict[str, float] = {}
    for key, value in raw.items():
        if not isinstance(key, str):
            raise MalformedMetadata(f"metadata key {key!r} is not a string", activity_id)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise MalformedMetadata(f"metadata value for '{key}' is not a number", activity_id)
        if not math.isfinite(value):
            raise MalformedMetadata(f"metadata value for '{key}' is not finite", activity_id)
        parsed[key] = float(value)
    return parsed


def to_activity(row: Mapping[str, Any]) -> Activity:
    """
    Map a storage row (camelCase or snake_case keys) to an ``Activity``.

    Raises:
        DataValidationError: if required fields are missing or invalid.
    """
    clean = {key: _plain(value) for key, value in row.items()}
    if clean.get("id") is not None:
        clean["id"] = str(clean["id"])
    activity_id = clean.get("id") or ""

    try:
        clean["metadata"] = parse_metadata(clean.get("metadata"), activity_id)
    except MalformedMetadata as exc:
        logger.warning(f"Activity {activity_id}: {exc}; treating metadata as absent")
        clean["metadata"] = None

    if clean.get("date") is not None:
        try:
            clean["date"] = to_date(clean["date"])
        except ValueError as exc:
            raise DataValidationError(
                f"Activity {activity_id!r} has an invalid date: {clean['date']!r}", field="date"
            ) from exc

    try:
        return Activity.model_validate({k: v for k, v in clean.items() if v is not None})
    except ValidationError as exc:
        raise DataValidationError(f"Invalid activity row {activity_id!r}: {exc}") from exc


def to_daily_metric(row: Mapping[str, Any]) -> DailyMetric:
    """
    Map a storage row to a ``DailyMetric``.

    Raises:
        DataValidationError: if the row is invalid.
    """
    clean = {key: _plain(value) for key, value in row.items()}
    try:
        if clean.get("date") is not None:
            clean["date"] = to_date(clean["date"])
        return DailyMetric.model_validate({k: v for k, v in clean.items() if v is not None})
    except (ValueError, ValidationError) as exc:
        raise DataValidationError(f"Invalid daily metric row {dict(row)!r}: {exc}") from exc
