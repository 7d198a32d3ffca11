"""
Configuration management for the always-on baseline calculator.

Loads settings from environment variables and an optional YAML file
with filter tuning. Uses pydantic for validation.

Priority order:
1. Explicit constructor arguments
2. filters.yaml in the config directory (filter tuning only)
3. Environment variables (prefix ALWAYSON_)
4. .env file
"""

from datetime import time
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from alwayson.core.constants import (
    DEFAULT_API_BASE_URL,
    DEFAULT_CONSISTENCY_RATIO,
    DEFAULT_LOOKBACK_MONTHS,
    DEFAULT_MAX_RETRIES,
    DEFAULT_PERIOD,
    DEFAULT_RATE_LIMIT_RPM,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SLEEP_END,
    DEFAULT_SLEEP_START,
)
from alwayson.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    The access token is optional here because a caller may supply its own
    usage provider instead of the bundled HTTP client.
    """

    model_config = SettingsConfigDict(
        env_prefix="ALWAYSON_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Usage API
    access_token: str | None = Field(
        default=None,
        description="Bearer token for the usage API",
    )
    api_base_url: str = Field(
        default=DEFAULT_API_BASE_URL,
        description="Base URL of the usage API",
    )
    request_timeout: float = Field(
        default=DEFAULT_REQUEST_TIMEOUT,
        description="Request timeout in seconds",
    )
    max_retries: int = Field(
        default=DEFAULT_MAX_RETRIES,
        description="Maximum attempts per request",
    )
    rate_limit_rpm: int = Field(
        default=DEFAULT_RATE_LIMIT_RPM,
        description="Requests per minute allowed against the usage API",
    )

    # Filters
    sleep_start: time = Field(
        default=DEFAULT_SLEEP_START,
        description="Local time after which readings count as overnight",
    )
    sleep_end: time = Field(
        default=DEFAULT_SLEEP_END,
        description="Local time before which readings count as overnight",
    )
    consistency_ratio: float = Field(
        default=DEFAULT_CONSISTENCY_RATIO,
        description="Maximum max/min ratio inside a stable run",
    )
    period: str = Field(
        default=DEFAULT_PERIOD,
        description="Interval granularity requested from the usage API",
    )
    lookback_months: int = Field(
        default=DEFAULT_LOOKBACK_MONTHS,
        description="Calendar months of usage analysed before the base day",
    )

    # Paths
    config_dir: Path = Field(
        default=Path("config"),
        description="Directory containing YAML config files",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("config_dir", mode="before")
    @classmethod
    def resolve_path(cls, v: str | Path) -> Path:
        """Convert string to Path and resolve."""
        return Path(v).resolve()

    @field_validator("log_level", mode="before")
    @classmethod
    def uppercase_log_level(cls, v: str) -> str:
        """Ensure log level is uppercase."""
        return v.upper()

    @field_validator("consistency_ratio")
    @classmethod
    def ratio_above_one(cls, v: float) -> float:
        """A ratio of 1 or less would reject every run longer than one reading."""
        if v <= 1:
            raise ValueError("consistency_ratio must be greater than 1")
        return v

    @field_validator("lookback_months", "max_retries", "rate_limit_rpm")
    @classmethod
    def positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError("must be at least 1")
        return v


class FilterConfig:
    """Filter tuning loaded from filters.yaml."""

    def __init__(self, config_path: Path):
        self._config = self._load_yaml(config_path)

    @staticmethod
    def _load_yaml(path: Path) -> dict[str, Any]:
        """Load and parse YAML file."""
        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        with open(path) as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ConfigurationError(f"Config file must contain a mapping: {path}")
        return data

    @property
    def sleep_window(self) -> dict[str, Any]:
        """Sleep window section."""
        return self._config.get("sleep_window", {}) or {}

    @property
    def sleep_start(self) -> time | None:
        """Configured sleep window start, if any."""
        return _parse_time(self.sleep_window.get("start"), "sleep_window.start")

    @property
    def sleep_end(self) -> time | None:
        """Configured sleep window end, if any."""
        return _parse_time(self.sleep_window.get("end"), "sleep_window.end")

    @property
    def consistency_ratio(self) -> float | None:
        """Configured consistency ratio, if any."""
        value = (self._config.get("consistency", {}) or {}).get("ratio")
        if value is None:
            return None
        try:
            ratio = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"consistency.ratio is not a number: {value!r}") from e
        if ratio <= 1:
            raise ConfigurationError(f"consistency.ratio must be greater than 1, got {ratio}")
        return ratio

    def overrides(self) -> dict[str, Any]:
        """Return only the options this file actually sets."""
        values = {
            "sleep_start": self.sleep_start,
            "sleep_end": self.sleep_end,
            "consistency_ratio": self.consistency_ratio,
        }
        return {k: v for k, v in values.items() if v is not None}


def _parse_time(value: Any, name: str) -> time | None:
    """Parse HH:MM strings; YAML may also hand over minutes since midnight."""
    if value is None:
        return None
    if isinstance(value, time):
        return value
    if isinstance(value, int):
        # YAML 1.1 reads unquoted 22:00 as a sexagesimal integer
        hours, minutes = divmod(value, 60)
        if not 0 <= hours < 24:
            raise ConfigurationError(f"{name} is out of range: {value!r}")
        return time(hours, minutes)
    try:
        return time.fromisoformat(str(value))
    except ValueError as e:
        raise ConfigurationError(f"{name} is not a valid time: {value!r}") from e


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


def load_filter_config(config_dir: Path | None = None) -> FilterConfig | None:
    """
    Load filters.yaml from the config directory.

    Args:
        config_dir: Directory to look in (defaults to settings.config_dir)

    Returns:
        FilterConfig, or None when the directory has no filters.yaml
    """
    config_dir = config_dir or get_settings().config_dir
    path = Path(config_dir) / "filters.yaml"
    if not path.exists():
        return None
    return FilterConfig(path)
