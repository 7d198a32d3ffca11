"""
Filter stages for the always-on baseline pipeline.

Default order: daily minimum -> sleep window -> consistency.
"""

from alwayson.filters.base import BaseFilter, WrappedFilter, wrap_filter, wrap_filters
from alwayson.filters.consistency import ConsistencyFilter, find_stable_run
from alwayson.filters.daily_minimum import DailyMinimumFilter
from alwayson.filters.items import pick_items
from alwayson.filters.sleep_window import SleepWindowFilter, in_sleep_window

__all__ = [
    "BaseFilter",
    "WrappedFilter",
    "wrap_filter",
    "wrap_filters",
    "pick_items",
    "DailyMinimumFilter",
    "SleepWindowFilter",
    "in_sleep_window",
    "ConsistencyFilter",
    "find_stable_run",
]
