"""
Baseline averaging and result types.

USAGE:
    from alwayson.baseline import compute_average

    value = compute_average(readings)
"""

from alwayson.baseline.calculator import compute_average
from alwayson.baseline.types import BaselineResult


__all__ = [
    "compute_average",
    "BaselineResult",
]
