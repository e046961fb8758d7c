# tracefuse/metrics/values.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

from tracefuse.core.exceptions import ValueNotFound

from .histogram import Numeric


@dataclass(frozen=True, slots=True)
class NumericValue:
    """A named, finished histogram written by a metric."""
    name: str
    numeric: Numeric = field(repr=False)
    description: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("NumericValue.name must be a non-empty string.")


class ValueSet:
    """Output sink for metric functions; keeps values in insertion order."""

    def __init__(self) -> None:
        self._values: list[NumericValue] = []

    def add_value(self, value: NumericValue) -> None:
        if not isinstance(value, NumericValue):
            raise TypeError("add_value() expects a NumericValue instance.")
        self._values.append(value)

    def __len__(self) -> int:
        return len(self._values)

    def __iter__(self) -> Iterator[NumericValue]:
        return iter(self._values)

    def __contains__(self, name: object) -> bool:
        return any(v.name == name for v in self._values)

    def __getitem__(self, name: str) -> NumericValue:
        for value in self._values:
            if value.name == name:
                return value
        raise ValueNotFound(name)

    def names(self) -> list[str]:
        return [v.name for v in self._values]
