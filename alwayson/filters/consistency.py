"""
Consistency filter.

Finds the longest contiguous run of readings that plausibly sit on one
steady baseline level. A run is stable when its highest usage is at
most consistency_ratio times its lowest usage, so gradual drift is
tolerated while appliance cycling breaks the run.

The search is a two-pointer sweep. Two monotonic deques hold the
positions of the window maximum and minimum, which makes every step
amortised O(1).
"""

import logging
from collections import deque
from collections.abc import Iterable, Sequence
from typing import Deque

from alwayson.core.types import CalculationSettings, Reading
from alwayson.filters.base import BaseFilter


logger = logging.getLogger(__name__)


def _within_ratio(high: float, low: float, ratio: float) -> bool:
    # Multiplication keeps zero usage well defined
    return high <= low * ratio


def find_stable_run(usages: Iterable[float], ratio: float) -> tuple[int, int]:
    """
    Locate the longest stable run.

    A longer run always wins. A run of equal length wins only when it
    starts after the current best has ended, so the most recent of two
    separate periods is preferred while overlapping shifts of the same
    period keep the first position found.

    Args:
        usages: Usage values in reading order
        ratio: Maximum allowed max/min ratio inside the run

    Returns:
        (start, stop) slice bounds of the run; (0, 0) for empty input
    """
    values = list(usages)
    if len(values) == 0:
        return 0, 0

    max_q: Deque[int] = deque()
    min_q: Deque[int] = deque()
    left = 0
    best_start, best_stop = 0, 1

    for right, value in enumerate(values):
        while max_q and values[max_q[-1]] <= value:
            max_q.pop()
        max_q.append(right)
        while min_q and values[min_q[-1]] >= value:
            min_q.pop()
        min_q.append(right)

        # A single reading is always stable, so this stops at left == right
        while not _within_ratio(values[max_q[0]], values[min_q[0]], ratio):
            left += 1
            if max_q[0] < left:
                max_q.popleft()
            if min_q[0] < left:
                min_q.popleft()

        length = right - left + 1
        best_length = best_stop - best_start
        if length > best_length or (length == best_length and left >= best_stop):
            best_start, best_stop = left, right + 1

    return best_start, best_stop


class ConsistencyFilter(BaseFilter):
    """Keep the longest run of readings whose usage stays within the consistency ratio."""

    name = "consistency"

    def apply(
        self,
        readings: Sequence[Reading],
        settings: CalculationSettings,
    ) -> list[Reading]:
        if not readings:
            return []

        start, stop = find_stable_run([r.usage for r in readings], settings.consistency_ratio)
        logger.debug(
            f"Stable run covers readings {start}..{stop - 1} of {len(readings)}"
        )
        return list(readings[start:stop])
