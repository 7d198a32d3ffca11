"""
Always-On Baseline Calculator

Estimates the always-on (standby) electrical load of a site from
15-minute interval meter readings.

The estimate is the mean of the readings that survive three filters:
- Daily minimum: the quietest interval of each local day
- Sleep window: only overnight readings
- Consistency: the longest run whose max/min usage ratio stays bounded
"""

__version__ = "0.1.0"

from alwayson.baseline import BaselineResult
from alwayson.core.types import CalculationSettings, Reading
from alwayson.pipeline import AlwaysOnCalculator

__all__ = [
    "AlwaysOnCalculator",
    "BaselineResult",
    "CalculationSettings",
    "Reading",
]
