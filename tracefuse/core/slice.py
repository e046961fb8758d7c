# tracefuse/core/slice.py
from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterator

from .exceptions import InvalidSlice


@dataclass(slots=True, eq=False)
class Slice:
    """
    A named, timed interval [start, start + duration) on one thread.

    Parent/child links are filled in by the owning SliceGroup when it builds
    its hierarchy; a slice with no parent is a top-level slice.
    """
    category: str
    title: str
    start: float
    duration: float = 0.0
    args: dict[str, Any] = field(default_factory=dict, repr=False)
    stable_id: str | None = None
    did_not_finish: bool = False

    parent: "Slice | None" = field(default=None, init=False, repr=False)
    sub_slices: list["Slice"] = field(default_factory=list, init=False, repr=False)

    def __post_init__(self) -> None:
        if not math.isfinite(self.start):
            raise InvalidSlice(f"Slice.start must be finite, got {self.start!r}.")
        if not math.isfinite(self.duration) or self.duration < 0:
            raise InvalidSlice(
                f"Slice '{self.title}' duration must be finite and >= 0, got {self.duration!r}."
            )
        if self.args is None:
            self.args = {}
        elif not isinstance(self.args, dict):
            raise InvalidSlice("Slice.args must be a dict.")

    @property
    def end(self) -> float:
        return self.start + self.duration

    @property
    def is_top_level(self) -> bool:
        return self.parent is None

    def contains(self, other: "Slice") -> bool:
        """Half-open: an instant at exactly this slice's end lies outside it."""
        if not (self.start <= other.start and other.end <= self.end):
            return False
        return other.start < self.end or other.start == self.start

    def iter_descendants(self) -> Iterator["Slice"]:
        for child in self.sub_slices:
            yield child
            yield from child.iter_descendants()
