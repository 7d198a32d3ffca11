"""
Pipeline module.

Orchestrates the always-on baseline calculation.
"""

from alwayson.pipeline.always_on import AlwaysOnCalculator, default_filters

__all__ = ["AlwaysOnCalculator", "default_filters"]
