"""
Sleep window filter.

Overnight readings are the ones least affected by occupants, so the
baseline is estimated from them only.
"""

from collections.abc import Sequence
from datetime import time

from alwayson.core.timeutils import local_index
from alwayson.core.types import CalculationSettings, Reading
from alwayson.filters.base import BaseFilter


def in_sleep_window(clock: time, start: time, end: time) -> bool:
    """
    Whether a local clock time lies strictly inside the sleep window.

    A window with start later than end wraps midnight (22:00 -> 06:00).
    Both boundaries are excluded.
    """
    if start > end:
        return clock > start or clock < end
    return start < clock < end


class SleepWindowFilter(BaseFilter):
    """Keep readings whose local time of day is inside the sleep window."""

    name = "sleep_window"

    def apply(
        self,
        readings: Sequence[Reading],
        settings: CalculationSettings,
    ) -> list[Reading]:
        if not readings:
            return []

        local = local_index(readings, settings.timezone)
        return [
            reading
            for reading, clock in zip(readings, local.time)
            if in_sleep_window(clock, settings.sleep_start, settings.sleep_end)
        ]
