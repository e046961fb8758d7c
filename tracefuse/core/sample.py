# tracefuse/core/sample.py
from __future__ import annotations

import math
from dataclasses import dataclass

from .exceptions import InvalidSample


@dataclass(frozen=True, slots=True)
class PowerSample:
    """
    One power reading.

    - ts: timestamp in milliseconds (model time once stored in a series)
    - voltage: volts
    - current: amps
    - sync_id: clock sync token recorded at this sample, if any
    """
    ts: float
    voltage: float
    current: float
    sync_id: str | None = None

    def __post_init__(self) -> None:
        if not math.isfinite(self.ts):
            raise InvalidSample(f"PowerSample.ts must be finite, got {self.ts!r}.")
        object.__setattr__(self, "ts", float(self.ts))
        object.__setattr__(self, "voltage", float(self.voltage))
        object.__setattr__(self, "current", float(self.current))

    @property
    def power(self) -> float:
        """Instantaneous power in watts."""
        return self.voltage * self.current
