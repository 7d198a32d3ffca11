"""
Daily minimum filter.

The quietest interval of each local day is a candidate baseline sample;
keeping only that one removes intra-day variability before the finer
filters run.
"""

from collections.abc import Sequence

import pandas as pd

from alwayson.core.timeutils import local_index
from alwayson.core.types import CalculationSettings, Reading
from alwayson.filters.base import BaseFilter


class DailyMinimumFilter(BaseFilter):
    """Keep the minimum-usage reading of every local calendar day."""

    name = "daily_minimum"

    def apply(
        self,
        readings: Sequence[Reading],
        settings: CalculationSettings,
    ) -> list[Reading]:
        if not readings:
            return []

        local = local_index(readings, settings.timezone)
        frame = pd.DataFrame(
            {
                "day": local.date,
                "usage": [r.usage for r in readings],
            }
        )

        # idxmin returns the first position on ties, i.e. the earliest reading
        positions = frame.groupby("day", sort=True)["usage"].idxmin()
        return [readings[i] for i in sorted(positions.tolist())]
