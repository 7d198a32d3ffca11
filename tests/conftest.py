"""
Pytest configuration and fixtures.
"""

from collections.abc import Mapping
from typing import Any

import pandas as pd
import pytest

from alwayson.core.config import Settings
from alwayson.core.types import CalculationSettings, Reading


SEOUL = "Asia/Seoul"


def local_ms(text: str, timezone: str = SEOUL) -> int:
    """Epoch milliseconds of a local wall-clock time."""
    return pd.Timestamp(text, tz=timezone).value // 1_000_000


def readings_from_usages(usages: list[float]) -> list[Reading]:
    """Readings with timestamps 1..n and the given usage values."""
    return [Reading(timestamp=i, usage=u) for i, u in enumerate(usages, start=1)]


class FakeProvider:
    """Usage provider that serves canned data and records its calls."""

    def __init__(self, timezone: str, items: list[dict[str, Any]]) -> None:
        self.timezone = timezone
        self.items = items
        self.timezone_calls: list[str] = []
        self.usage_calls: list[tuple[str, dict[str, Any]]] = []

    async def get_timezone(self, site_hash: str) -> str:
        self.timezone_calls.append(site_hash)
        return self.timezone

    async def get_usages(
        self,
        site_hash: str,
        *,
        start: int,
        end: int,
        period: str,
    ) -> Mapping[str, Any]:
        self.usage_calls.append(
            (site_hash, {"start": start, "end": end, "period": period})
        )
        return {"items": list(self.items)}


@pytest.fixture
def seoul_settings() -> CalculationSettings:
    """Default calculation settings in Seoul."""
    return CalculationSettings(timezone=SEOUL)


@pytest.fixture
def app_settings(tmp_path) -> Settings:
    """Application settings isolated from the repository config directory."""
    return Settings(access_token=None, config_dir=tmp_path)


@pytest.fixture
def month_of_readings() -> list[Reading]:
    """15-minute readings for October 2017 in Seoul, usage never zero."""
    index = pd.date_range(
        "2017-10-01", "2017-11-01", freq="15min", tz=SEOUL, inclusive="left"
    )
    return [
        Reading(timestamp=ts.value // 1_000_000, usage=100.0 + (i % 96))
        for i, ts in enumerate(index)
    ]


@pytest.fixture
def site_items() -> list[dict[str, Any]]:
    """
    Six days of usage for a Seoul site.

    Day 1 has its quietest interval in the afternoon, day 2 has a
    zero-usage gap, days 2-5 share a steady overnight level.
    """
    rows = [
        ("2017-10-01 03:00", 2600),
        ("2017-10-01 14:00", 400),   # daily minimum, outside the sleep window
        ("2017-10-02 03:00", 1000),
        ("2017-10-02 04:00", 0),     # meter gap
        ("2017-10-02 12:00", 9000),
        ("2017-10-03 03:00", 1050),
        ("2017-10-03 12:00", 9000),
        ("2017-10-04 03:00", 1100),
        ("2017-10-04 12:00", 9000),
        ("2017-10-05 03:00", 1020),
        ("2017-10-05 12:00", 9000),
        ("2017-10-06 03:00", 3000),
        ("2017-10-06 12:00", 9000),
    ]
    return [{"timestamp": local_ms(t), "usage": u} for t, u in rows]
