"""
Filter stage interface.

Every stage of the pipeline is called as stage(readings, settings) and
returns a new list that is a subsequence of its input. Concrete filters
subclass BaseFilter; plain functions with the same two-argument shape
are accepted and wrapped by wrap_filter.
"""

import inspect
import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from typing import Any, Callable

from alwayson.core.exceptions import ConfigurationError, FilterError
from alwayson.core.types import CalculationSettings, Reading


logger = logging.getLogger(__name__)

FilterFunc = Callable[[Sequence[Reading], CalculationSettings], Sequence[Reading]]


class BaseFilter(ABC):
    """Abstract base class for filter stages."""

    name: str = "filter"  # Override in subclasses

    @abstractmethod
    def apply(
        self,
        readings: Sequence[Reading],
        settings: CalculationSettings,
    ) -> list[Reading]:
        """Return the readings this stage keeps, in input order."""
        ...

    def __call__(
        self,
        readings: Sequence[Reading],
        settings: CalculationSettings,
    ) -> list[Reading]:
        return self.apply(readings, settings)

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


class WrappedFilter(BaseFilter):
    """
    Uniform calling convention around any filter stage.

    The wrapped stage only ever sees an immutable copy of its input, and
    its result must be a subsequence of that input made of Reading objects.
    """

    def __init__(self, stage: BaseFilter | FilterFunc) -> None:
        self.stage = stage
        self.name = getattr(stage, "name", None) or getattr(stage, "__name__", type(stage).__name__)

    def apply(
        self,
        readings: Sequence[Reading],
        settings: CalculationSettings,
    ) -> list[Reading]:
        snapshot = tuple(readings)
        result = self.stage(snapshot, settings)

        if isinstance(result, (str, bytes)) or not isinstance(result, Sequence):
            raise FilterError(
                f"Filter returned {type(result).__name__}, expected a sequence of readings",
                stage=self.name,
            )

        kept = list(result)
        for item in kept:
            if not isinstance(item, Reading):
                raise FilterError(
                    f"Filter returned a {type(item).__name__} item, expected Reading",
                    stage=self.name,
                )

        if not _is_subsequence(kept, snapshot):
            raise FilterError(
                "Filter result is not an ordered subsequence of its input",
                stage=self.name,
            )

        logger.debug(f"{self.name}: {len(snapshot)} -> {len(kept)} readings")
        return kept

    def __repr__(self) -> str:
        return f"WrappedFilter({self.stage!r})"


def _is_subsequence(kept: list[Reading], source: Sequence[Reading]) -> bool:
    """Check that every kept reading appears in source, in order, without reuse."""
    it = iter(source)
    return all(any(item == candidate for candidate in it) for item in kept)


def _accepts_two_arguments(stage: Callable[..., Any]) -> bool:
    """Whether stage can be called as stage(readings, settings)."""
    try:
        signature = inspect.signature(stage)
    except (TypeError, ValueError):
        # Builtins without introspectable signatures
        return False
    try:
        signature.bind((), None)
    except TypeError:
        return False
    return True


def wrap_filter(stage: BaseFilter | FilterFunc) -> WrappedFilter:
    """
    Wrap a filter stage, rejecting anything that cannot act as one.

    Raises:
        ConfigurationError: If stage is not callable with (readings, settings)
    """
    if isinstance(stage, WrappedFilter):
        return stage
    if isinstance(stage, BaseFilter):
        return WrappedFilter(stage)
    if not callable(stage) or isinstance(stage, type):
        raise ConfigurationError(f"Filter is not callable: {stage!r}")
    if not _accepts_two_arguments(stage):
        raise ConfigurationError(
            f"Filter must accept (readings, settings): {stage!r}"
        )
    return WrappedFilter(stage)


def wrap_filters(filters: Sequence[BaseFilter | FilterFunc]) -> tuple[WrappedFilter, ...]:
    """
    Validate and wrap a whole filter list.

    Either every element is accepted or nothing is returned.

    Raises:
        ConfigurationError: If filters is not a sequence or has an invalid element
    """
    if isinstance(filters, (str, bytes)) or not isinstance(filters, Sequence):
        raise ConfigurationError(
            f"Filters must be a sequence of filter stages, got {type(filters).__name__}"
        )
    return tuple(wrap_filter(stage) for stage in filters)
