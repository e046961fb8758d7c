# tracefuse/core/range.py
from __future__ import annotations

import math
from dataclasses import dataclass

from .exceptions import InvalidRange


@dataclass(frozen=True, slots=True)
class Range:
    """Closed numeric interval [min, max] used for time windows and histogram domains."""

    min: float
    max: float

    def __post_init__(self) -> None:
        if math.isnan(self.min) or math.isnan(self.max):
            raise InvalidRange("Range bounds must not be NaN.")
        if self.min > self.max:
            raise InvalidRange(f"Range.min ({self.min}) must be <= Range.max ({self.max}).")
        object.__setattr__(self, "min", float(self.min))
        object.__setattr__(self, "max", float(self.max))

    @classmethod
    def from_explicit_range(cls, min_value: float, max_value: float) -> "Range":
        return cls(min=min_value, max=max_value)

    @property
    def duration(self) -> float:
        return self.max - self.min

    def contains(self, value: float) -> bool:
        return self.min <= value <= self.max

    def intersects_explicit_range_exclusive(self, start: float, end: float) -> bool:
        # Touching at a boundary is not an intersection.
        return self.min < end and start < self.max

    def union(self, other: "Range") -> "Range":
        return Range(min=min(self.min, other.min), max=max(self.max, other.max))
