"""
Baseline result type.

The pipeline reduces a month of interval readings to one number; the
result keeps enough context to explain where that number came from.
"""

from dataclasses import dataclass, field
from typing import Any

import pandas as pd

from alwayson.core.types import Reading


@dataclass(frozen=True)
class BaselineResult:
    """Outcome of one always-on calculation for a site."""

    site_hash: str
    value: float  # Mean usage of the retained readings
    timezone: str
    start: int  # Window start, epoch ms (inclusive)
    end: int  # Window end, epoch ms
    picked_count: int  # Readings left after dropping zero-usage items
    readings: tuple[Reading, ...] = field(default=(), repr=False)

    @property
    def retained_count(self) -> int:
        """Number of readings that survived every filter stage."""
        return len(self.readings)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "site_hash": self.site_hash,
            "value": self.value,
            "timezone": self.timezone,
            "start": pd.Timestamp(self.start, unit="ms", tz="UTC").tz_convert(self.timezone).isoformat(),
            "end": pd.Timestamp(self.end, unit="ms", tz="UTC").tz_convert(self.timezone).isoformat(),
            "picked_count": self.picked_count,
            "retained_count": self.retained_count,
            "readings": [r.to_dict() for r in self.readings],
        }
