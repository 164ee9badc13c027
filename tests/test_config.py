"""Tests for configuration loading."""

from pathlib import Path

import pytest
import yaml

from campaign_uplift.config import (
    AttributionConfig,
    UpliftSettings,
    apply_env_overrides,
    get_config,
    load_settings,
)
from campaign_uplift.core.exceptions import ConfigError


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """Keep real config files in the working directory out of the tests."""
    monkeypatch.chdir(tmp_path)


class TestDefaults:
    """Test documented defaults."""

    def test_attribution_defaults(self):
        config = get_config(environ={})

        assert config.baseline_window_days == 14
        assert config.post_window_days == 7
        assert config.baseline_exclusion == "include"
        assert config.post_window_attribution.enabled is True
        assert config.confidence.min_baseline_days == 7

    def test_post_window_for_channel(self):
        config = AttributionConfig(channel_post_window_days={"podcast": 5})

        assert config.post_window_for("podcast") == 5
        assert config.post_window_for("newsletter") == 7

    def test_excluded_statuses_case_insensitive(self):
        config = AttributionConfig()

        assert config.is_counted("live")
        assert not config.is_counted("Canceled")


class TestEnvOverrides:
    """Test environment variable overrides."""

    def test_window_overrides(self):
        config = get_config(environ={"BASELINE_WINDOW_DAYS": "21", "POST_WINDOW_DAYS": "3"})

        assert config.baseline_window_days == 21
        assert config.post_window_days == 3

    def test_attribution_toggle(self):
        config = get_config(environ={"POST_WINDOW_ATTRIBUTION_ENABLED": "false"})

        assert config.post_window_attribution.enabled is False

    def test_invalid_integer_raises(self):
        with pytest.raises(ConfigError) as exc_info:
            get_config(environ={"BASELINE_WINDOW_DAYS": "two weeks"})

        assert exc_info.value.key == "BASELINE_WINDOW_DAYS"

    def test_invalid_boolean_raises(self):
        with pytest.raises(ConfigError):
            get_config(environ={"POST_WINDOW_ATTRIBUTION_ENABLED": "maybe"})

    def test_out_of_range_raises(self):
        with pytest.raises(ConfigError):
            get_config(environ={"POST_WINDOW_DAYS": "0"})

    def test_window_shorter_than_minimum_baseline_raises(self):
        """A window that can never hold min_baseline_days would grade everything LOW."""
        with pytest.raises(ConfigError) as exc_info:
            get_config(environ={"BASELINE_WINDOW_DAYS": "5"})

        assert "min_baseline_days" in str(exc_info.value)

    def test_short_window_with_matching_minimum(self, tmp_path):
        path = tmp_path / "short.yaml"
        path.write_text(yaml.dump({"attribution": {"confidence": {"min_baseline_days": 3}}}))

        settings = load_settings(path, environ={"BASELINE_WINDOW_DAYS": "5"})

        assert settings.attribution.baseline_window_days == 5

    def test_empty_value_ignored(self):
        assert apply_env_overrides({}, {"POST_WINDOW_DAYS": ""}) == {}

    def test_does_not_mutate_input(self):
        data = {"attribution": {"post_window_days": 4}}

        apply_env_overrides(data, {"POST_WINDOW_DAYS": "9"})

        assert data == {"attribution": {"post_window_days": 4}}


class TestYamlConfig:
    """Test YAML loading."""

    def test_load_from_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(yaml.dump({
            "attribution": {
                "baseline_window_days": 28,
                "baseline_exclusion": "exclude",
                "post_window_attribution": {"weight_field": None, "default_weight": 1.0},
            },
            "storage": {"database_path": "db/test.db"},
        }))

        settings = load_settings(path, environ={})

        assert settings.attribution.baseline_window_days == 28
        assert settings.attribution.baseline_exclusion == "exclude"
        assert settings.attribution.post_window_attribution.default_weight == 1.0
        assert settings.storage.database_path == Path("db/test.db")

    def test_env_beats_file(self, tmp_path):
        path = tmp_path / "custom.yaml"
        path.write_text(yaml.dump({"attribution": {"post_window_days": 10}}))

        settings = load_settings(path, environ={"POST_WINDOW_DAYS": "2"})

        assert settings.attribution.post_window_days == 2

    def test_standard_location(self, tmp_path):
        (tmp_path / "config").mkdir()
        (tmp_path / "config" / "uplift.yaml").write_text(
            yaml.dump({"attribution": {"post_window_days": 5}})
        )

        assert get_config(environ={}).post_window_days == 5

    def test_round_trip(self, tmp_path):
        path = tmp_path / "out.yaml"
        settings = UpliftSettings()
        settings.to_yaml(path)

        assert load_settings(path, environ={}) == settings

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(ConfigError):
            load_settings(tmp_path / "nope.yaml", environ={})

    def test_invalid_policy_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"attribution": {"confidence": {"medium_coverage": 0.95}}}))

        with pytest.raises(ConfigError):
            load_settings(path, environ={})

    def test_unknown_exclusion_policy_raises(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text(yaml.dump({"attribution": {"baseline_exclusion": "sometimes"}}))

        with pytest.raises(ConfigError):
            load_settings(path, environ={})
