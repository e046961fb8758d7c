# tracefuse/core/slice_group.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from .exceptions import SliceGroupError
from .range import Range
from .slice import Slice


@dataclass(slots=True)
class SliceGroup:
    """
    Per-thread container turning a stream of slices into a forest.

    Slices are pushed in input order (complete slices, or begin/end pairs).
    The parent/child hierarchy is built lazily on first access and cached;
    a push before finalize() invalidates the cache. Hierarchy rules:

    - a slice is attached to the nearest enclosing still-open ancestor
    - a slice with no enclosing ancestor is top-level
    - identical bounds: the slice pushed earlier is the ancestor
    """

    id_prefix: str | None = None

    _slices: list[Slice] = field(default_factory=list, init=False, repr=False)
    _open: list[Slice] = field(default_factory=list, init=False, repr=False)
    _top_level: tuple[Slice, ...] | None = field(default=None, init=False, repr=False)
    _improperly_nested: tuple[Slice, ...] = field(default=(), init=False, repr=False)
    _finalized: bool = field(default=False, init=False, repr=False)

    # ---- population ----
    def _next_stable_id(self) -> str:
        n = len(self._slices)
        return f"{self.id_prefix}.{n}" if self.id_prefix else str(n)

    def _push(self, slc: Slice) -> Slice:
        if self._finalized:
            raise SliceGroupError("SliceGroup is finalized; no more slices can be pushed.")
        if slc.stable_id is None:
            slc.stable_id = self._next_stable_id()
        self._slices.append(slc)
        self._top_level = None
        return slc

    def push_complete_slice(
        self,
        category: str,
        title: str,
        start: float,
        duration: float,
        args: dict[str, Any] | None = None,
    ) -> Slice:
        return self._push(Slice(category=category, title=title, start=start, duration=duration, args=args or {}))

    def begin_slice(
        self,
        category: str,
        title: str,
        ts: float,
        args: dict[str, Any] | None = None,
    ) -> Slice:
        slc = self._push(Slice(category=category, title=title, start=ts, args=args or {}))
        self._open.append(slc)
        return slc

    def end_slice(self, ts: float, args: dict[str, Any] | None = None) -> Slice:
        if not self._open:
            raise SliceGroupError(f"end_slice({ts}) without a matching begin_slice.")
        slc = self._open[-1]
        if ts < slc.start:
            raise SliceGroupError(
                f"Slice '{slc.title}' ends at {ts} before it starts at {slc.start}."
            )
        self._open.pop()
        slc.duration = ts - slc.start
        if args:
            slc.args.update(args)
        self._top_level = None
        return slc

    @property
    def open_slice_count(self) -> int:
        return len(self._open)

    def auto_close_open_slices(self, max_ts: float | None = None) -> list[Slice]:
        """Close every still-open slice at max_ts (default: latest known timestamp)."""
        if max_ts is None:
            bounds = self.bounds
            max_ts = bounds.max if bounds is not None else 0.0
        closed: list[Slice] = []
        while self._open:
            slc = self._open.pop()
            slc.duration = max(max_ts, slc.start) - slc.start
            slc.did_not_finish = True
            closed.append(slc)
        self._top_level = None
        return closed

    def finalize(self) -> None:
        if self._finalized:
            return
        self.auto_close_open_slices()
        self._ensure_built()
        self._finalized = True

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    # ---- hierarchy ----
    def _ensure_built(self) -> None:
        if self._top_level is not None:
            return

        for slc in self._slices:
            slc.parent = None
            slc.sub_slices = []

        # Stable sort: earlier input wins ties, so it becomes the ancestor.
        ordered = sorted(self._slices, key=lambda s: (s.start, -s.duration))

        stack: list[Slice] = []
        top_level: list[Slice] = []
        bad: list[Slice] = []
        for slc in ordered:
            overlaps = False
            while stack and not stack[-1].contains(slc):
                if slc.start < stack[-1].end:
                    overlaps = True
                stack.pop()
            if overlaps:
                bad.append(slc)

            if stack:
                slc.parent = stack[-1]
                stack[-1].sub_slices.append(slc)
            else:
                top_level.append(slc)
            stack.append(slc)

        self._top_level = tuple(top_level)
        self._improperly_nested = tuple(bad)

    @property
    def top_level_slices(self) -> tuple[Slice, ...]:
        self._ensure_built()
        return self._top_level  # type: ignore[return-value]

    @property
    def improperly_nested(self) -> tuple[Slice, ...]:
        """Slices that started inside another slice but outlived it."""
        self._ensure_built()
        return self._improperly_nested

    def iter_all_slices(self) -> Iterator[Slice]:
        """Depth-first, parents before children, top-level slices in time order."""
        for slc in self.top_level_slices:
            yield slc
            yield from slc.iter_descendants()

    # ---- accessors ----
    @property
    def slices(self) -> tuple[Slice, ...]:
        return tuple(self._slices)

    @property
    def length(self) -> int:
        return len(self._slices)

    def __len__(self) -> int:
        return len(self._slices)

    @property
    def bounds(self) -> Range | None:
        if not self._slices:
            return None
        return Range(
            min=min(s.start for s in self._slices),
            max=max(s.end for s in self._slices),
        )
