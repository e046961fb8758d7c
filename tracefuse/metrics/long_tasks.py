# tracefuse/metrics/long_tasks.py
from __future__ import annotations

from typing import Iterator

from tracefuse.core import MetricOptions, Model, Range, Slice, Thread, ThreadRole

from .histogram import NumericBuilder, Unit
from .values import NumericValue, ValueSet


LONG_TASK_MS = 50

# Anything longer than this is rare enough that its exact length is not actionable.
LONGEST_TASK_MS = 1000

LONG_TASK_NUMERIC_BUILDER = NumericBuilder.create_linear(
    Unit.TIME_DURATION_MS_SMALLER_IS_BETTER,
    Range.from_explicit_range(LONG_TASK_MS, LONGEST_TASK_MS),
    50,
)


def iterate_long_top_level_tasks_on_thread_in_range(
    thread: Thread, range_of_interest: Range | None = None
) -> Iterator[Slice]:
    """Top-level slices of `thread` lasting at least LONG_TASK_MS and intersecting the range."""
    for slc in thread.slice_group.top_level_slices:
        if range_of_interest is not None and not range_of_interest.intersects_explicit_range_exclusive(
            slc.start, slc.end
        ):
            continue
        if slc.duration < LONG_TASK_MS:
            continue
        yield slc


def iterate_renderer_main_threads(model: Model) -> Iterator[Thread]:
    yield from model.threads_with_role(ThreadRole.RENDERER_MAIN)


def long_tasks_metric(values: ValueSet, model: Model, options: MetricOptions | None = None) -> None:
    """Histogram of long top-level tasks on renderer main threads."""
    range_of_interest = options.range_of_interest if options is not None else None

    numeric = LONG_TASK_NUMERIC_BUILDER.build()
    for thread in iterate_renderer_main_threads(model):
        for task in iterate_long_top_level_tasks_on_thread_in_range(thread, range_of_interest):
            numeric.add(task.duration, task.stable_id)

    values.add_value(
        NumericValue(
            "long tasks",
            numeric,
            "Durations of top-level tasks of 50 ms or more on renderer main threads",
        )
    )
