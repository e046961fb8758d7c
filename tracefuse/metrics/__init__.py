# tracefuse/metrics/__init__.py
"""
Histogram-based metrics computed over a finished Model.

- NumericBuilder / Numeric: fixed-bin histograms (linear or exponential)
- ValueSet / NumericValue: output sink handed to the presentation layer
- MetricRegistry: explicit name -> metric function registry
"""

from .histogram import Bin, Numeric, NumericBuilder, Unit
from .values import NumericValue, ValueSet
from .registry import MetricRegistry, default_registry
from .long_tasks import (
    LONG_TASK_MS,
    LONGEST_TASK_MS,
    iterate_long_top_level_tasks_on_thread_in_range,
    iterate_renderer_main_threads,
    long_tasks_metric,
)
from .power import power_metric


__all__ = [
    "Bin",
    "Numeric",
    "NumericBuilder",
    "Unit",
    "NumericValue",
    "ValueSet",
    "MetricRegistry",
    "default_registry",
    "LONG_TASK_MS",
    "LONGEST_TASK_MS",
    "iterate_long_top_level_tasks_on_thread_in_range",
    "iterate_renderer_main_threads",
    "long_tasks_metric",
    "power_metric",
]
