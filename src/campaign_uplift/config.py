"""
Configuration management for campaign-uplift.

Configuration with YAML loading, environment variable overrides, and
sensible defaults.  Unlike a process-wide singleton, the config is loaded
once per invocation and passed explicitly into every entry point of the
engine, so a recompute never observes settings changed mid-run.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from campaign_uplift.core.exceptions import ConfigError


# ---------------------------------------------------------------------------
# Section configs
# ---------------------------------------------------------------------------

class ConfidencePolicy(BaseModel):
    """Thresholds for grading an uplift estimate."""

    model_config = ConfigDict(frozen=True)

    min_baseline_days: int = Field(
        default=7, ge=1, description="Below this many baseline days with data, confidence is LOW"
    )
    high_coverage: float = Field(default=0.9, ge=0, le=1, description="Coverage needed for HIGH")
    medium_coverage: float = Field(default=0.5, ge=0, le=1, description="Coverage needed for MEDIUM")
    high_max_cv: float = Field(default=0.25, ge=0, description="Max baseline CV for HIGH")
    medium_max_cv: float = Field(default=0.5, ge=0, description="Max baseline CV for MEDIUM")

    @model_validator(mode="after")
    def _ordered_thresholds(self) -> "ConfidencePolicy":
        if self.medium_coverage > self.high_coverage:
            raise ValueError("medium_coverage must not exceed high_coverage")
        if self.high_max_cv > self.medium_max_cv:
            raise ValueError("high_max_cv must not exceed medium_max_cv")
        return self


class PostWindowAttributionConfig(BaseModel):
    """Proportional splitting of overlapping post-window lift."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=True)
    weight_field: str | None = Field(
        default="estClicks",
        description="Metadata key used as weight when no click counts are recorded",
    )
    default_weight: float = Field(
        default=0.0, ge=0, description="Weight for activities with no click data"
    )
    channels: list[str] | None = Field(
        default=None, description="Channels to attribute; None means every channel"
    )

    def applies_to(self, channel: str) -> bool:
        return self.channels is None or channel in self.channels


class AttributionConfig(BaseModel):
    """Immutable per-run configuration of the attribution engine."""

    model_config = ConfigDict(frozen=True)

    baseline_window_days: int = Field(default=14, ge=1)
    post_window_days: int = Field(default=7, ge=1)
    channel_post_window_days: dict[str, int] = Field(
        default_factory=dict, description="Per-channel post-window length overrides"
    )
    baseline_exclusion: Literal["include", "exclude"] = Field(
        default="include",
        description="Whether baseline days inside other activities' post windows are dropped",
    )
    primary_metric: Literal["signups", "activations"] = Field(default="activations")
    excluded_statuses: list[str] = Field(
        default_factory=lambda: ["booked", "canceled", "cancelled"],
        description="Activity statuses that receive no lift",
    )
    post_window_attribution: PostWindowAttributionConfig = Field(
        default_factory=PostWindowAttributionConfig
    )
    confidence: ConfidencePolicy = Field(default_factory=ConfidencePolicy)

    @model_validator(mode="after")
    def _consistent_windows(self) -> "AttributionConfig":
        for channel, days in self.channel_post_window_days.items():
            if days < 1:
                raise ValueError(f"post window for channel '{channel}' must be >= 1 day")
        if self.confidence.min_baseline_days > self.baseline_window_days:
            raise ValueError(
                f"confidence.min_baseline_days ({self.confidence.min_baseline_days}) "
                f"exceeds baseline_window_days ({self.baseline_window_days}); "
                f"every activity would be graded LOW"
            )
        return self

    def post_window_for(self, channel: str) -> int:
        return self.channel_post_window_days.get(channel, self.post_window_days)

    def is_counted(self, status: str) -> bool:
        excluded = {s.lower() for s in self.excluded_statuses}
        return status.lower() not in excluded


class StorageConfig(BaseModel):
    """Where the persistence collaborator keeps its tables."""

    database_path: Path = Field(default=Path("data/uplift.db"))


class ServerConfig(BaseModel):
    """API server settings."""

    api_host: str = Field(default="127.0.0.1")
    api_port: int = Field(default=8000)


# ---------------------------------------------------------------------------
# Root config
# ---------------------------------------------------------------------------

class UpliftSettings(BaseModel):
    """Root configuration for campaign-uplift."""

    project_name: str = Field(default="campaign-uplift")
    environment: str = Field(default="development")

    attribution: AttributionConfig = Field(default_factory=AttributionConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_yaml(cls, path: Path | str) -> "UpliftSettings":
        """Load settings from a YAML file."""
        path = Path(path)
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise ConfigError(f"Cannot read config file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {path} must contain a mapping")
        return _build(data)

    def to_yaml(self, path: Path | str) -> None:
        """Write settings to a YAML file."""
        with open(Path(path), "w") as f:
            yaml.dump(self.model_dump(mode="json"), f, default_flow_style=False, sort_keys=False)

    def to_flat_dict(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_DEFAULT_LOCATIONS = (Path("uplift.yaml"), Path("config/uplift.yaml"))

# env var -> (section, key, kind)
_ENV_OVERRIDES: dict[str, tuple[str, str, str]] = {
    "BASELINE_WINDOW_DAYS": ("attribution", "baseline_window_days", "int"),
    "POST_WINDOW_DAYS": ("attribution", "post_window_days", "int"),
    "POST_WINDOW_ATTRIBUTION_ENABLED": ("post_window_attribution", "enabled", "bool"),
    "UPLIFT_DATABASE_PATH": ("storage", "database_path", "str"),
    "UPLIFT_API_HOST": ("server", "api_host", "str"),
    "UPLIFT_API_PORT": ("server", "api_port", "int"),
}


def _build(data: dict[str, Any]) -> UpliftSettings:
    try:
        return UpliftSettings(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc


def _parse_env(key: str, raw: str, kind: str) -> Any:
    if kind == "int":
        try:
            return int(raw)
        except ValueError:
            raise ConfigError(f"{key} must be an integer, got {raw!r}", key=key) from None
    if kind == "bool":
        lowered = raw.strip().lower()
        if lowered in {"1", "true", "yes", "on"}:
            return True
        if lowered in {"0", "false", "no", "off"}:
            return False
        raise ConfigError(f"{key} must be a boolean, got {raw!r}", key=key)
    return raw


def apply_env_overrides(data: dict[str, Any], environ: dict[str, str] | None = None) -> dict[str, Any]:
    """Return a copy of *data* with recognised environment variables applied."""
    environ = dict(os.environ) if environ is None else environ
    data = {k: dict(v) if isinstance(v, dict) else v for k, v in data.items()}

    for key, (section, field, kind) in _ENV_OVERRIDES.items():
        raw = environ.get(key)
        if raw is None or raw == "":
            continue
        value = _parse_env(key, raw, kind)
        if section == "post_window_attribution":
            attribution = data.setdefault("attribution", {})
            pwa = dict(attribution.get("post_window_attribution") or {})
            pwa[field] = value
            attribution["post_window_attribution"] = pwa
        else:
            data.setdefault(section, {})[field] = value
    return data


def load_settings(
    path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> UpliftSettings:
    """
    Load settings from file (or standard locations), then apply env overrides.

    Raises:
        ConfigError: if the file or any override is invalid.
    """
    data: dict[str, Any] = {}
    if path is not None:
        data = UpliftSettings.from_yaml(path).model_dump()
    else:
        for candidate in _DEFAULT_LOCATIONS:
            if candidate.exists():
                data = UpliftSettings.from_yaml(candidate).model_dump()
                break

    return _build(apply_env_overrides(data, environ))


def get_config(
    path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> AttributionConfig:
    """Return the ``AttributionConfig`` for one invocation."""
    return load_settings(path, environ).attribution
