"""Core module containing types, configuration, and shared utilities."""

from alwayson.core.types import (
    CalculationSettings,
    Reading,
    UsageProvider,
)
from alwayson.core.config import FilterConfig, Settings, get_settings, load_filter_config
from alwayson.core.exceptions import (
    AlwaysOnError,
    ConfigurationError,
    DataFetchError,
    FilterError,
    InsufficientDataError,
    RateLimitError,
    ValidationError,
)

__all__ = [
    # Types
    "CalculationSettings",
    "Reading",
    "UsageProvider",
    # Config
    "Settings",
    "FilterConfig",
    "get_settings",
    "load_filter_config",
    # Exceptions
    "AlwaysOnError",
    "ConfigurationError",
    "DataFetchError",
    "FilterError",
    "InsufficientDataError",
    "RateLimitError",
    "ValidationError",
]
