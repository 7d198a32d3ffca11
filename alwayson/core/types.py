"""
Core type definitions for the always-on baseline calculator.

Defines the reading record, per-calculation settings and the provider
interface used throughout the system.
"""

import math
from dataclasses import dataclass, field
from datetime import time
from typing import Any, Mapping, Protocol, runtime_checkable
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from alwayson.core.constants import (
    DEFAULT_CONSISTENCY_RATIO,
    DEFAULT_PERIOD,
    DEFAULT_SLEEP_END,
    DEFAULT_SLEEP_START,
)
from alwayson.core.exceptions import ConfigurationError, ValidationError


@dataclass(frozen=True)
class Reading:
    """
    One interval meter sample.

    timestamp is epoch milliseconds, usage is the energy used in the interval.
    Any other fields returned by the usage API are kept in `extra` so they
    survive the pipeline unchanged.
    """

    timestamp: int
    usage: float
    extra: Mapping[str, Any] = field(default_factory=dict, compare=False, repr=False)

    def __post_init__(self) -> None:
        if not math.isfinite(self.usage) or self.usage < 0:
            raise ValidationError(
                "Usage must be a finite non-negative number",
                field="usage",
                value=self.usage,
            )

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Reading":
        """Build a reading from one item of a usage API response."""
        try:
            timestamp = payload["timestamp"]
            usage = payload["usage"]
        except KeyError as e:
            raise ValidationError(
                "Usage item is missing a required field",
                field=e.args[0],
                value=dict(payload),
            ) from e
        except TypeError as e:
            raise ValidationError("Usage item is not a mapping", value=payload) from e

        try:
            timestamp, usage = int(timestamp), float(usage)
        except (TypeError, ValueError) as e:
            raise ValidationError(
                "Usage item has a non-numeric timestamp or usage",
                value=dict(payload),
            ) from e

        extra = {k: v for k, v in payload.items() if k not in ("timestamp", "usage")}
        return cls(timestamp=timestamp, usage=usage, extra=extra)

    def to_dict(self) -> dict[str, Any]:
        """Convert back to the usage API item shape."""
        return {**self.extra, "timestamp": self.timestamp, "usage": self.usage}


@dataclass(frozen=True)
class CalculationSettings:
    """
    Settings for a single calculation.

    The timezone is resolved from the usage API for every calculation;
    everything else has a default and can be overridden independently.
    """

    timezone: str
    sleep_start: time = DEFAULT_SLEEP_START
    sleep_end: time = DEFAULT_SLEEP_END
    consistency_ratio: float = DEFAULT_CONSISTENCY_RATIO
    period: str = DEFAULT_PERIOD

    def __post_init__(self) -> None:
        if not self.timezone:
            raise ConfigurationError("timezone must be a non-empty IANA zone name")
        try:
            ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError) as e:
            raise ConfigurationError(f"Unknown timezone: {self.timezone!r}") from e

        if not isinstance(self.consistency_ratio, (int, float)) or not self.consistency_ratio > 1:
            raise ConfigurationError(
                f"consistency_ratio must be greater than 1, got {self.consistency_ratio}"
            )
        if self.sleep_start == self.sleep_end:
            raise ConfigurationError(
                f"Sleep window is empty: start and end are both {self.sleep_start}"
            )


@runtime_checkable
class UsageProvider(Protocol):
    """
    Source of timezone and interval usage data for a site.

    UsageAPIClient implements this against the HTTP API; tests and callers
    may pass any object with the same two coroutines.
    """

    async def get_timezone(self, site_hash: str) -> str:
        ...

    async def get_usages(
        self,
        site_hash: str,
        *,
        start: int,
        end: int,
        period: str,
    ) -> Mapping[str, Any]:
        ...
