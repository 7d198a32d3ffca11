"""
Always-on baseline pipeline.

Coordinates the full calculation flow:
Timezone → Usages → Pick items → Filters → Average

The filter list is an ordered, replaceable sequence of stages folded
left to right. Each calculation takes a snapshot of the list, so
replacing it while a calculation is awaiting the usage API does not
affect that calculation.
"""

import logging
import operator
from collections.abc import Mapping, Sequence
from datetime import datetime, time
from typing import Any

import pandas as pd

from alwayson.baseline import BaselineResult, compute_average
from alwayson.core.config import FilterConfig, Settings, get_settings, load_filter_config
from alwayson.core.exceptions import ConfigurationError, ValidationError
from alwayson.core.timeutils import usage_window
from alwayson.core.types import CalculationSettings, Reading, UsageProvider
from alwayson.filters import (
    ConsistencyFilter,
    DailyMinimumFilter,
    SleepWindowFilter,
    WrappedFilter,
    pick_items,
    wrap_filters,
)
from alwayson.filters.base import BaseFilter, FilterFunc
from alwayson.ingest.base import BaseAPIClient
from alwayson.ingest.usage_api import UsageAPIClient


logger = logging.getLogger(__name__)

BaseTime = datetime | pd.Timestamp | int | float | None


def default_filters() -> list[BaseFilter]:
    """Stages used when no filter list is given: daily minimum, sleep window, consistency."""
    return [DailyMinimumFilter(), SleepWindowFilter(), ConsistencyFilter()]


def _as_time(value: time | str, name: str) -> time:
    if isinstance(value, time):
        return value
    try:
        return time.fromisoformat(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} is not a valid time: {value!r}") from e


def _as_ratio(value: float | str) -> float:
    try:
        ratio = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"consistency_ratio is not a number: {value!r}") from e
    if not ratio > 1:
        raise ConfigurationError(f"consistency_ratio must be greater than 1, got {value!r}")
    return ratio


def _as_months(value: int) -> int:
    try:
        months = operator.index(value)
    except TypeError as e:
        raise ConfigurationError(f"lookback_months must be an integer, got {value!r}") from e
    if months < 1:
        raise ConfigurationError(f"lookback_months must be at least 1, got {months}")
    return months


class AlwaysOnCalculator:
    """
    Estimates the always-on (background) load of a site.

    Flow:
    1. Resolve the site timezone from the provider
    2. Fetch one month of 15-minute usage ending at local midnight of the base day
    3. Drop zero-usage items
    4. Apply the filter stages in order
    5. Average what is left

    The bundled UsageAPIClient needs an open HTTP session; use the
    calculator as an async context manager when relying on it:

        async with AlwaysOnCalculator(access_token="...") as calculator:
            baseline = await calculator.calculate("site-hash")
    """

    def __init__(
        self,
        access_token: str | None = None,
        provider: UsageProvider | None = None,
        filters: Sequence[BaseFilter | FilterFunc] | None = None,
        sleep_start: time | str | None = None,
        sleep_end: time | str | None = None,
        consistency_ratio: float | None = None,
        period: str | None = None,
        lookback_months: int | None = None,
        settings: Settings | None = None,
        filter_config: FilterConfig | None = None,
    ) -> None:
        """
        Initialize the calculator.

        Args:
            access_token: Usage API token, required unless provider is given
            provider: Object implementing get_timezone/get_usages
            filters: Filter stages (defaults to default_filters())
            sleep_start: Local start of the sleep window
            sleep_end: Local end of the sleep window
            consistency_ratio: Max/min ratio allowed in a stable run
            period: Interval granularity requested from the provider
            lookback_months: Calendar months analysed before the base day
            settings: Application settings
            filter_config: Filter tuning (loaded from filters.yaml if not provided)

        Raises:
            ConfigurationError: On a missing token, an invalid provider,
                filter list or option value
        """
        self.settings = settings or get_settings()
        if filter_config is None:
            filter_config = load_filter_config(self.settings.config_dir)
        tuned = filter_config.overrides() if filter_config is not None else {}

        self.sleep_start = _as_time(
            sleep_start if sleep_start is not None else tuned.get("sleep_start", self.settings.sleep_start),
            "sleep_start",
        )
        self.sleep_end = _as_time(
            sleep_end if sleep_end is not None else tuned.get("sleep_end", self.settings.sleep_end),
            "sleep_end",
        )
        self.consistency_ratio = _as_ratio(
            consistency_ratio
            if consistency_ratio is not None
            else tuned.get("consistency_ratio", self.settings.consistency_ratio)
        )
        self.period = period if period is not None else self.settings.period
        self.lookback_months = _as_months(
            lookback_months if lookback_months is not None else self.settings.lookback_months
        )

        # Fail now rather than at the first calculation
        self.build_settings("UTC")

        self.provider = self._resolve_provider(access_token, provider)
        self._filters: tuple[WrappedFilter, ...] = wrap_filters(
            default_filters() if filters is None else filters
        )

    def _resolve_provider(
        self,
        access_token: str | None,
        provider: UsageProvider | None,
    ) -> UsageProvider:
        if provider is not None:
            if not isinstance(provider, UsageProvider):
                raise ConfigurationError(
                    f"provider must implement get_timezone and get_usages, got {type(provider).__name__}"
                )
            return provider

        token = access_token if access_token is not None else self.settings.access_token
        if not isinstance(token, str) or not token:
            raise ConfigurationError("An access token or a usage provider is required")
        return UsageAPIClient.from_settings(self.settings, access_token=token)

    async def __aenter__(self) -> "AlwaysOnCalculator":
        if isinstance(self.provider, BaseAPIClient):
            await self.provider.__aenter__()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if isinstance(self.provider, BaseAPIClient):
            await self.provider.__aexit__(exc_type, exc_val, exc_tb)

    @property
    def filters(self) -> tuple[WrappedFilter, ...]:
        """Current filter stages, in application order."""
        return self._filters

    def set_filters(self, filters: Sequence[BaseFilter | FilterFunc]) -> None:
        """
        Replace the whole filter list.

        Raises:
            ConfigurationError: If filters is not a sequence or holds a
                non-callable stage; the current list is kept in that case
        """
        self._filters = wrap_filters(filters)
        logger.debug(f"Filters set: {[f.name for f in self._filters]}")

    def build_settings(self, timezone: str) -> CalculationSettings:
        """Settings for a calculation in the given timezone."""
        return CalculationSettings(
            timezone=timezone,
            sleep_start=self.sleep_start,
            sleep_end=self.sleep_end,
            consistency_ratio=self.consistency_ratio,
            period=self.period,
        )

    async def get_timezone(self, site_hash: str) -> str:
        """Resolve the IANA timezone of a site."""
        return await self.provider.get_timezone(site_hash)

    async def get_usages(
        self,
        site_hash: str,
        *,
        start: int,
        end: int,
        period: str,
    ) -> Mapping[str, Any]:
        """Fetch the usage items of a site for a window."""
        return await self.provider.get_usages(site_hash, start=start, end=end, period=period)

    def apply_filters(
        self,
        readings: Sequence[Reading],
        settings: CalculationSettings,
        filters: Sequence[WrappedFilter] | None = None,
    ) -> list[Reading]:
        """Fold the filter stages over readings, left to right."""
        result = list(readings)
        for stage in self._filters if filters is None else filters:
            result = stage(result, settings)
        return result

    async def calculate_result(
        self,
        site_hash: str,
        base_time: BaseTime = None,
    ) -> BaselineResult:
        """
        Run the full calculation for a site.

        Args:
            site_hash: Site identifier
            base_time: Day the analysis window ends on (default: now)

        Returns:
            BaselineResult with the baseline value and its context

        Raises:
            ValidationError: If site_hash is empty (no provider call is made)
            InsufficientDataError: If no readings survive the filters
        """
        if not isinstance(site_hash, str) or not site_hash:
            raise ValidationError(
                "site_hash must be a non-empty string",
                field="site_hash",
                value=site_hash,
            )

        stages = self._filters

        timezone = await self.get_timezone(site_hash)
        settings = self.build_settings(timezone)
        start, end = usage_window(base_time, timezone, self.lookback_months)

        response = await self.get_usages(site_hash, start=start, end=end, period=self.period)
        readings = pick_items(response)
        picked_count = len(readings)

        retained = self.apply_filters(readings, settings, stages)
        value = compute_average(retained)

        logger.info(
            f"Always-on baseline for {site_hash}: {value:.2f} "
            f"({len(retained)} of {picked_count} readings, tz={timezone})"
        )
        return BaselineResult(
            site_hash=site_hash,
            value=value,
            timezone=timezone,
            start=start,
            end=end,
            picked_count=picked_count,
            readings=tuple(retained),
        )

    async def calculate(
        self,
        site_hash: str,
        base_time: BaseTime = None,
    ) -> float:
        """
        Estimate the always-on baseline of a site.

        Args:
            site_hash: Site identifier
            base_time: Day the analysis window ends on (default: now)

        Returns:
            Mean usage of the readings retained by the filters
        """
        result = await self.calculate_result(site_hash, base_time)
        return result.value
