# tracefuse/core/power_series.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator

import numpy as np

from .exceptions import InvalidSeries
from .sample import PowerSample


@dataclass(slots=True)
class PowerSeries:
    """
    Append-only power series owned by one Device.

    Samples must arrive in non-decreasing model time; duplicate timestamps
    are kept. numpy views (time, power) are built on first access and cached
    until the next append.
    """

    name: str | None = "power"
    unit: str = "W"
    _samples: list[PowerSample] = field(default_factory=list, init=False, repr=False)
    _time: np.ndarray | None = field(default=None, init=False, repr=False)
    _power: np.ndarray | None = field(default=None, init=False, repr=False)

    # ---- population ----
    def add_sample(self, sample: PowerSample) -> None:
        if not isinstance(sample, PowerSample):
            raise InvalidSeries("add_sample() expects a PowerSample instance.")
        if self._samples and sample.ts < self._samples[-1].ts:
            raise InvalidSeries(
                f"Samples must be appended in time order: {sample.ts} < {self._samples[-1].ts}."
            )
        self._samples.append(sample)
        self._time = None
        self._power = None

    def add_power_sample(
        self, ts: float, voltage: float, current: float, sync_id: str | None = None
    ) -> PowerSample:
        sample = PowerSample(ts=ts, voltage=voltage, current=current, sync_id=sync_id)
        self.add_sample(sample)
        return sample

    def _ensure_arrays(self) -> None:
        if self._time is not None and self._power is not None:
            return
        self._time = np.fromiter((s.ts for s in self._samples), dtype=float, count=len(self._samples))
        self._power = np.fromiter(
            (s.power for s in self._samples), dtype=float, count=len(self._samples)
        )

    # ---- accessors ----
    def __len__(self) -> int:
        return len(self._samples)

    def __iter__(self) -> Iterator[PowerSample]:
        return iter(self._samples)

    @property
    def samples(self) -> tuple[PowerSample, ...]:
        return tuple(self._samples)

    @property
    def time(self) -> np.ndarray:
        self._ensure_arrays()
        return self._time  # type: ignore[return-value]

    @property
    def values(self) -> np.ndarray:
        self._ensure_arrays()
        return self._power  # type: ignore[return-value]

    @property
    def n(self) -> int:
        return len(self._samples)

    @property
    def t_start(self) -> float | None:
        return None if self.n == 0 else self._samples[0].ts

    @property
    def t_end(self) -> float | None:
        return None if self.n == 0 else self._samples[-1].ts

    # ---- queries ----
    def slice_time(
        self,
        t_min: float | None = None,
        t_max: float | None = None,
        *,
        closed: str = "both",
    ) -> list[PowerSample]:
        if closed not in {"both", "left", "right", "neither"}:
            raise ValueError("closed must be one of: both, left, right, neither")

        if self.n == 0:
            return []

        t = self.time
        mask = np.ones_like(t, dtype=bool)

        if t_min is not None:
            if closed in {"both", "left"}:
                mask &= (t >= t_min)
            else:
                mask &= (t > t_min)

        if t_max is not None:
            if closed in {"both", "right"}:
                mask &= (t <= t_max)
            else:
                mask &= (t < t_max)

        return [self._samples[i] for i in np.flatnonzero(mask)]

    def mean(self) -> float | None:
        if self.n == 0:
            return None
        return float(np.mean(self.values))

    def std(self, *, ddof: int = 0) -> float | None:
        if self.n == 0:
            return None
        return float(np.std(self.values, ddof=ddof))

    def energy_consumed_in_j(self, start: float | None = None, end: float | None = None) -> float:
        """
        Energy (J) over [start, end]: each sample's power is held until the
        next sample. Timestamps are milliseconds.
        """
        if self.n < 2:
            return 0.0

        t = self.time
        p = self.values
        lo = t[0] if start is None else max(start, t[0])
        hi = t[-1] if end is None else min(end, t[-1])
        if hi <= lo:
            return 0.0

        seg_start = np.clip(t[:-1], lo, hi)
        seg_end = np.clip(t[1:], lo, hi)
        return float(np.sum(p[:-1] * (seg_end - seg_start)) / 1000.0)

    def to_numpy(self, *, copy: bool = False) -> tuple[np.ndarray, np.ndarray]:
        if copy:
            return self.time.copy(), self.values.copy()
        return self.time, self.values
