# tracefuse/metrics/power.py
from __future__ import annotations

from tracefuse.core import MetricOptions, Model, Range

from .histogram import NumericBuilder, Unit
from .values import NumericValue, ValueSet


MAX_POWER_W = 10

POWER_NUMERIC_BUILDER = NumericBuilder.create_linear(
    Unit.POWER_W_SMALLER_IS_BETTER,
    Range.from_explicit_range(0, MAX_POWER_W),
    20,
)

ENERGY_NUMERIC_BUILDER = NumericBuilder.create_linear(
    Unit.ENERGY_J_SMALLER_IS_BETTER,
    Range.from_explicit_range(0, 1000),
    20,
)


def power_metric(values: ValueSet, model: Model, options: MetricOptions | None = None) -> None:
    """Instantaneous power distribution and energy over the range of interest."""
    series = model.device.power_series
    if series is None:
        return

    window = options.range_of_interest if options is not None else None
    t_min = window.min if window is not None else None
    t_max = window.max if window is not None else None

    power = POWER_NUMERIC_BUILDER.build()
    for sample in series.slice_time(t_min, t_max, closed="both"):
        power.add(sample.power, sample.ts)
    values.add_value(
        NumericValue("power", power, "Instantaneous power samples in the range of interest")
    )

    energy = ENERGY_NUMERIC_BUILDER.build()
    energy.add(series.energy_consumed_in_j(t_min, t_max))
    values.add_value(
        NumericValue("energy consumed", energy, "Energy consumed over the range of interest")
    )
