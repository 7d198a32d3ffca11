"""
Timezone helpers.

Readings carry UTC epoch milliseconds; the filters reason about the
site's local clock. pandas does the conversion so DST transitions are
handled by the tz database.
"""

from collections.abc import Sequence
from datetime import datetime

import pandas as pd

from alwayson.core.types import Reading


def local_index(readings: Sequence[Reading], timezone: str) -> pd.DatetimeIndex:
    """Local timestamps of readings, in input order."""
    epoch_ms = [r.timestamp for r in readings]
    return pd.to_datetime(epoch_ms, unit="ms", utc=True).tz_convert(timezone)


def to_epoch_ms(value: pd.Timestamp) -> int:
    """Epoch milliseconds of a timezone-aware timestamp."""
    return int(value.value // 1_000_000)


def localize(base_time: datetime | pd.Timestamp | int | float | None, timezone: str) -> pd.Timestamp:
    """
    Interpret a base time in the site timezone.

    Integers and floats are epoch milliseconds, naive datetimes are read
    as local wall time, aware datetimes are converted. None means now.
    """
    if base_time is None:
        return pd.Timestamp.now(tz=timezone)
    if isinstance(base_time, (int, float)):
        return pd.Timestamp(int(base_time), unit="ms", tz="UTC").tz_convert(timezone)

    ts = pd.Timestamp(base_time)
    if ts.tzinfo is None:
        return ts.tz_localize(timezone, ambiguous=True, nonexistent="shift_forward")
    return ts.tz_convert(timezone)


def usage_window(
    base_time: datetime | pd.Timestamp | int | float | None,
    timezone: str,
    lookback_months: int = 1,
) -> tuple[int, int]:
    """
    Start and end (epoch ms) of the usage window for a base time.

    The window ends at local midnight of the base day and starts
    lookback_months calendar months earlier, so it covers whole days only.
    """
    end = localize(base_time, timezone).normalize()
    start = end - pd.DateOffset(months=lookback_months)
    # normalize() keeps the offset of the base instant; re-anchor both ends
    # on local midnight in case a DST change falls inside the window.
    end = end.tz_localize(None).tz_localize(timezone, ambiguous=True, nonexistent="shift_forward")
    start = start.tz_localize(None).tz_localize(timezone, ambiguous=True, nonexistent="shift_forward")
    return to_epoch_ms(start), to_epoch_ms(end)
