# tracefuse/metrics/registry.py
from __future__ import annotations

import logging
from typing import Callable, Iterator

from tracefuse.core import Model, MetricOptions
from tracefuse.core.exceptions import DuplicateMetric, MetricNotFound, RegistryFrozen

from .values import ValueSet

logger = logging.getLogger(__name__)


MetricFunction = Callable[[ValueSet, Model, MetricOptions], None]


class MetricRegistry:
    """
    Name -> metric function mapping.

    Populate once at startup, then freeze(); afterwards the registry is only
    read. Re-registering a name is always an error.
    """

    def __init__(self) -> None:
        self._metrics: dict[str, MetricFunction] = {}
        self._frozen = False

    def register(self, fn: MetricFunction, name: str | None = None) -> MetricFunction:
        if self._frozen:
            raise RegistryFrozen("MetricRegistry is frozen; register metrics before freeze().")
        if not callable(fn):
            raise TypeError("register() expects a callable metric function.")
        name = name or fn.__name__
        if name in self._metrics:
            raise DuplicateMetric(f"Metric '{name}' is already registered.")
        self._metrics[name] = fn
        return fn

    def freeze(self) -> "MetricRegistry":
        self._frozen = True
        return self

    @property
    def is_frozen(self) -> bool:
        return self._frozen

    # ---- lookup ----
    def get(self, name: str) -> MetricFunction:
        try:
            return self._metrics[name]
        except KeyError as e:
            raise MetricNotFound(name) from e

    def names(self) -> list[str]:
        return list(self._metrics)

    def __contains__(self, name: object) -> bool:
        return name in self._metrics

    def __len__(self) -> int:
        return len(self._metrics)

    def __iter__(self) -> Iterator[str]:
        return iter(self._metrics)

    # ---- execution ----
    def run(
        self,
        name: str,
        model: Model,
        values: ValueSet | None = None,
        options: MetricOptions | None = None,
    ) -> ValueSet:
        fn = self.get(name)
        values = values if values is not None else ValueSet()
        fn(values, model, options or MetricOptions())
        return values

    def run_all(self, model: Model, options: MetricOptions | None = None) -> ValueSet:
        values = ValueSet()
        for name in self._metrics:
            logger.debug("Running metric %s", name)
            self.run(name, model, values, options)
        return values


def default_registry() -> MetricRegistry:
    """Frozen registry holding the built-in metrics."""
    from .long_tasks import long_tasks_metric
    from .power import power_metric

    registry = MetricRegistry()
    registry.register(long_tasks_metric)
    registry.register(power_metric)
    return registry.freeze()
