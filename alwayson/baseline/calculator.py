"""
Baseline averaging.

Reduces the readings that survived the filter pipeline to the
estimated always-on load.
"""

import math
from collections.abc import Sequence

from alwayson.core.exceptions import InsufficientDataError
from alwayson.core.types import Reading


def compute_average(readings: Sequence[Reading]) -> float:
    """
    Arithmetic mean of usage over readings.

    Zero would be a misleading baseline, so an empty input is an error
    rather than a default.

    Raises:
        InsufficientDataError: If readings is empty
    """
    if not readings:
        raise InsufficientDataError(
            "No readings left to average",
            required=1,
            available=0,
            stage="average",
        )
    return math.fsum(r.usage for r in readings) / len(readings)
