# tracefuse/metrics/histogram.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Hashable

import numpy as np

from tracefuse.core.exceptions import InvalidHistogram
from tracefuse.core.range import Range


DEFAULT_MAX_SAMPLE_IDS = 8


class Unit(str, Enum):
    TIME_DURATION_MS_SMALLER_IS_BETTER = "timeDurationInMs_smallerIsBetter"
    POWER_W_SMALLER_IS_BETTER = "powerInWatts_smallerIsBetter"
    ENERGY_J_SMALLER_IS_BETTER = "energyInJoules_smallerIsBetter"
    UNITLESS = "unitless"


@dataclass(slots=True)
class Bin:
    """One histogram bucket covering [min, max)."""
    min: float
    max: float
    count: int = 0
    sample_ids: list[Hashable] = field(default_factory=list, repr=False)
    dropped_sample_ids: int = 0

    @property
    def range(self) -> Range:
        return Range(min=self.min, max=self.max)


class Numeric:
    """
    One histogram instance: underflow bin, central bins, overflow bin.

    Bin edges are fixed at construction. add() only ever increments counts:
    values below the range go to the underflow bin, values at or above the
    upper bound to the overflow bin, so sum(counts) == number of add() calls.
    """

    def __init__(
        self,
        unit: Unit | str,
        edges: np.ndarray,
        *,
        max_sample_ids: int = DEFAULT_MAX_SAMPLE_IDS,
    ) -> None:
        self.unit = unit
        self._edges = np.asarray(edges, dtype=float)
        self._edges.setflags(write=False)
        self.max_sample_ids = max_sample_ids

        self.underflow_bin = Bin(min=-math.inf, max=float(self._edges[0]))
        self.central_bins = [
            Bin(min=float(lo), max=float(hi)) for lo, hi in zip(self._edges[:-1], self._edges[1:])
        ]
        self.overflow_bin = Bin(min=float(self._edges[-1]), max=math.inf)

        self.num_values = 0
        self.sum = 0.0
        self._min: float | None = None
        self._max: float | None = None

    # ---- geometry ----
    @property
    def edges(self) -> np.ndarray:
        return self._edges

    @property
    def range(self) -> Range:
        return Range(min=float(self._edges[0]), max=float(self._edges[-1]))

    @property
    def bins(self) -> list[Bin]:
        return [self.underflow_bin, *self.central_bins, self.overflow_bin]

    def bin_for(self, value: float) -> Bin:
        if value < self._edges[0]:
            return self.underflow_bin
        if value >= self._edges[-1]:
            return self.overflow_bin
        # edges[k] <= value < edges[k + 1]
        k = int(np.searchsorted(self._edges, value, side="right")) - 1
        return self.central_bins[k]

    # ---- accumulation ----
    def add(self, value: float, provenance_id: Hashable | None = None) -> None:
        value = float(value)
        if math.isnan(value):
            raise ValueError("Cannot add NaN to a histogram.")

        b = self.bin_for(value)
        b.count += 1
        if provenance_id is not None:
            if len(b.sample_ids) < self.max_sample_ids:
                b.sample_ids.append(provenance_id)
            else:
                b.dropped_sample_ids += 1

        self.num_values += 1
        self.sum += value
        self._min = value if self._min is None else min(self._min, value)
        self._max = value if self._max is None else max(self._max, value)

    # ---- statistics ----
    @property
    def counts(self) -> np.ndarray:
        return np.array([b.count for b in self.bins], dtype=np.int64)

    @property
    def min(self) -> float | None:
        return self._min

    @property
    def max(self) -> float | None:
        return self._max

    @property
    def mean(self) -> float | None:
        return None if self.num_values == 0 else self.sum / self.num_values

    def as_dict(self) -> dict[str, Any]:
        """Plain summary handed to the presentation layer."""
        return {
            "unit": self.unit.value if isinstance(self.unit, Enum) else self.unit,
            "num_values": self.num_values,
            "sum": self.sum,
            "min": self._min,
            "max": self._max,
            "mean": self.mean,
            "edges": self._edges.tolist(),
            "counts": self.counts.tolist(),
        }


@dataclass(frozen=True, slots=True)
class NumericBuilder:
    """
    Histogram template: a fixed unit, range and bin layout.

    build() returns a new, independent Numeric every call.
    """
    unit: Unit | str
    range: Range
    num_bins: int
    spacing: str = "linear"
    max_sample_ids: int = DEFAULT_MAX_SAMPLE_IDS

    def __post_init__(self) -> None:
        if not isinstance(self.range, Range):
            raise InvalidHistogram("NumericBuilder.range must be a Range.")
        if not math.isfinite(self.range.min) or not math.isfinite(self.range.max):
            raise InvalidHistogram("Histogram range must be finite.")
        if self.range.min >= self.range.max:
            raise InvalidHistogram(
                f"Histogram range min ({self.range.min}) must be < max ({self.range.max})."
            )
        if not isinstance(self.num_bins, int) or isinstance(self.num_bins, bool) or self.num_bins <= 0:
            raise InvalidHistogram(f"num_bins must be a positive int, got {self.num_bins!r}.")
        if self.spacing not in {"linear", "exponential"}:
            raise InvalidHistogram("spacing must be one of: linear, exponential")
        if self.spacing == "exponential" and self.range.min <= 0:
            raise InvalidHistogram("Exponential bins require range.min > 0.")
        if self.max_sample_ids < 0:
            raise InvalidHistogram("max_sample_ids must be >= 0.")

    @classmethod
    def create_linear(cls, unit: Unit | str, range: Range, num_bins: int) -> "NumericBuilder":
        return cls(unit=unit, range=range, num_bins=num_bins, spacing="linear")

    @classmethod
    def create_exponential(cls, unit: Unit | str, range: Range, num_bins: int) -> "NumericBuilder":
        return cls(unit=unit, range=range, num_bins=num_bins, spacing="exponential")

    @property
    def edges(self) -> np.ndarray:
        if self.spacing == "exponential":
            edges = np.geomspace(self.range.min, self.range.max, self.num_bins + 1)
        else:
            edges = np.linspace(self.range.min, self.range.max, self.num_bins + 1)
        # Pin the ends so range checks are exact.
        edges[0] = self.range.min
        edges[-1] = self.range.max
        return edges

    def build(self) -> Numeric:
        return Numeric(self.unit, self.edges, max_sample_ids=self.max_sample_ids)
