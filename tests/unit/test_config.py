"""
Tests for settings and filter configuration.
"""

import re
from datetime import time
from pathlib import Path

import pydantic
import pytest

from alwayson.core.config import FilterConfig, Settings, load_filter_config
from alwayson.core.exceptions import ConfigurationError


class TestSettings:
    """Tests for environment-driven settings."""

    def test_defaults(self, tmp_path):
        settings = Settings(config_dir=tmp_path)

        assert settings.sleep_start == time(22, 0)
        assert settings.sleep_end == time(6, 0)
        assert settings.consistency_ratio == 1.3
        assert settings.period == "15min"
        assert settings.lookback_months == 1

    def test_environment_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("ALWAYSON_ACCESS_TOKEN", "secret")
        monkeypatch.setenv("ALWAYSON_CONSISTENCY_RATIO", "1.25")
        monkeypatch.setenv("ALWAYSON_SLEEP_START", "23:30")

        settings = Settings(config_dir=tmp_path)

        assert settings.access_token == "secret"
        assert settings.consistency_ratio == 1.25
        assert settings.sleep_start == time(23, 30)

    def test_log_level_is_uppercased(self, tmp_path):
        assert Settings(log_level="debug", config_dir=tmp_path).log_level == "DEBUG"

    def test_rejects_ratio_not_above_one(self, tmp_path):
        with pytest.raises(pydantic.ValidationError):
            Settings(consistency_ratio=1.0, config_dir=tmp_path)

    def test_rejects_zero_lookback(self, tmp_path):
        with pytest.raises(pydantic.ValidationError):
            Settings(lookback_months=0, config_dir=tmp_path)


class TestFilterConfig:
    """Tests for filters.yaml."""

    def write(self, tmp_path, text):
        path = tmp_path / "filters.yaml"
        path.write_text(text)
        return path

    def test_reads_all_options(self, tmp_path):
        path = self.write(
            tmp_path,
            'sleep_window:\n  start: "21:45"\n  end: "05:30"\nconsistency:\n  ratio: 1.2\n',
        )

        config = FilterConfig(path)

        assert config.overrides() == {
            "sleep_start": time(21, 45),
            "sleep_end": time(5, 30),
            "consistency_ratio": 1.2,
        }

    def test_unquoted_times(self, tmp_path):
        """YAML 1.1 turns unquoted 22:30 into minutes."""
        config = FilterConfig(self.write(tmp_path, "sleep_window:\n  start: 22:30\n"))

        assert config.sleep_start == time(22, 30)

    def test_missing_keys_are_not_overrides(self, tmp_path):
        config = FilterConfig(self.write(tmp_path, "consistency:\n  ratio: 1.4\n"))

        assert config.overrides() == {"consistency_ratio": 1.4}

    def test_empty_file(self, tmp_path):
        assert FilterConfig(self.write(tmp_path, "")).overrides() == {}

    def test_invalid_ratio(self, tmp_path):
        config = FilterConfig(self.write(tmp_path, "consistency:\n  ratio: 0.9\n"))

        with pytest.raises(ConfigurationError):
            config.overrides()

    def test_invalid_time(self, tmp_path):
        config = FilterConfig(self.write(tmp_path, 'sleep_window:\n  end: "dawn"\n'))

        with pytest.raises(ConfigurationError):
            config.overrides()

    def test_file_must_hold_a_mapping(self, tmp_path):
        with pytest.raises(ConfigurationError):
            FilterConfig(self.write(tmp_path, "- 1\n- 2\n"))

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigurationError):
            FilterConfig(tmp_path / "filters.yaml")

    def test_load_filter_config_without_file(self, tmp_path):
        assert load_filter_config(tmp_path) is None

    def test_load_filter_config(self, tmp_path):
        self.write(tmp_path, "consistency:\n  ratio: 1.5\n")

        assert load_filter_config(tmp_path).consistency_ratio == 1.5


class TestPackaging:
    """Tests for the project metadata."""

    def test_readme_is_project_readme(self):
        root = Path(__file__).resolve().parents[2]
        match = re.search(r'^readme = "(.+)"$', (root / "pyproject.toml").read_text(), re.MULTILINE)

        assert match is not None
        assert match.group(1) == "README.md"
        assert (root / match.group(1)).is_file()
