# tracefuse/core/clock_sync.py
from __future__ import annotations

import logging
import math
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Callable

import numpy as np

from .warnings import ImportWarningKind

logger = logging.getLogger(__name__)


class ClockDomainId(str, Enum):
    HOST_TRACE = "HOST_TRACE"
    BATTOR = "BATTOR"
    DAQ = "DAQ"
    TELEMETRY = "TELEMETRY"


@dataclass(frozen=True, slots=True)
class ClockSyncMarker:
    domain: ClockDomainId
    sync_id: str
    ts: float


@dataclass(frozen=True, slots=True)
class ClockSyncTransform:
    """
    Affine map into model time:

        model_ts = ref_anchor + scale * (local_ts - local_anchor)

    Anchoring on a matched pair keeps that pair exact under floating point.
    """
    local_anchor: float = 0.0
    ref_anchor: float = 0.0
    scale: float = 1.0

    @classmethod
    def identity(cls) -> "ClockSyncTransform":
        return cls()

    @property
    def is_identity(self) -> bool:
        return self.scale == 1.0 and self.local_anchor == self.ref_anchor

    @property
    def offset(self) -> float:
        return self.ref_anchor - self.scale * self.local_anchor

    def __call__(self, local_ts: float) -> float:
        return self.ref_anchor + self.scale * (local_ts - self.local_anchor)


WarningSink = Callable[[ImportWarningKind, str], None]


class ClockSyncManager:
    """
    Registry of clock domains and their sync markers.

    Every domain is mapped onto the reference domain (HOST_TRACE by default)
    by matching sync ids. Transforms are computed once and cached.

    Fitting, with pairs ordered by local timestamp:
      - 1 pair: offset only
      - 2 pairs: exact two-point slope
      - 3+ pairs: least-squares slope (numpy.polyfit, degree 1)
    always anchored at the first pair.
    """

    def __init__(
        self,
        on_warning: WarningSink | None = None,
        reference_domain: ClockDomainId = ClockDomainId.HOST_TRACE,
    ) -> None:
        self._on_warning = on_warning
        self.reference_domain = ClockDomainId(reference_domain)
        self._markers: dict[ClockDomainId, list[ClockSyncMarker]] = defaultdict(list)
        self._transforms: dict[ClockDomainId, ClockSyncTransform] = {}

    # ---- markers ----
    def add_clock_sync_marker(self, domain: ClockDomainId | str, sync_id: str, ts: float) -> None:
        domain = ClockDomainId(domain)
        self._markers[domain].append(ClockSyncMarker(domain=domain, sync_id=str(sync_id), ts=float(ts)))
        if domain in self._transforms:
            logger.debug(
                "Marker %r added to %s after its transform was computed; transform unchanged.",
                sync_id,
                domain.value,
            )

    def markers(self, domain: ClockDomainId | str) -> tuple[ClockSyncMarker, ...]:
        return tuple(self._markers.get(ClockDomainId(domain), ()))

    @property
    def domains(self) -> tuple[ClockDomainId, ...]:
        return tuple(d for d, m in self._markers.items() if m)

    # ---- transforms ----
    def get_model_time_transformer(self, domain: ClockDomainId | str) -> ClockSyncTransform:
        domain = ClockDomainId(domain)
        cached = self._transforms.get(domain)
        if cached is not None:
            return cached

        transform = self._compute_transform(domain)
        self._transforms[domain] = transform
        logger.debug(
            "Clock transform for %s: scale=%r offset=%r",
            domain.value,
            transform.scale,
            transform.offset,
        )
        return transform

    def _warn(self, message: str) -> None:
        if self._on_warning is not None:
            self._on_warning(ImportWarningKind.MISSING_SYNC, message)
        else:
            logger.warning(message)

    def _matched_pairs(self, domain: ClockDomainId) -> list[tuple[float, float]]:
        ref_by_id: dict[str, float] = {}
        for m in self._markers.get(self.reference_domain, ()):
            ref_by_id.setdefault(m.sync_id, m.ts)

        pairs: list[tuple[float, float]] = []
        seen: set[str] = set()
        for m in self._markers.get(domain, ()):
            if m.sync_id in seen or m.sync_id not in ref_by_id:
                continue
            seen.add(m.sync_id)
            pairs.append((m.ts, ref_by_id[m.sync_id]))
        pairs.sort(key=lambda p: p[0])
        return pairs

    def _compute_transform(self, domain: ClockDomainId) -> ClockSyncTransform:
        if domain == self.reference_domain:
            return ClockSyncTransform.identity()

        if not self._markers.get(domain):
            self._warn(
                f"No clock sync markers found for domain {domain.value}; "
                f"its timestamps are used without alignment."
            )
            return ClockSyncTransform.identity()

        if not self._markers.get(self.reference_domain):
            # Nothing else recorded a clock: this domain is the only timeline.
            return ClockSyncTransform.identity()

        pairs = self._matched_pairs(domain)
        if not pairs:
            self._warn(
                f"Clock sync markers of domain {domain.value} match none of "
                f"{self.reference_domain.value}; its timestamps are used without alignment."
            )
            return ClockSyncTransform.identity()

        local_anchor, ref_anchor = pairs[0]
        scale = 1.0
        if len(pairs) == 2:
            (l1, r1), (l2, r2) = pairs
            if l2 != l1:
                scale = (r2 - r1) / (l2 - l1)
        elif len(pairs) > 2:
            local = np.array([p[0] for p in pairs])
            ref = np.array([p[1] for p in pairs])
            if np.ptp(local) > 0:
                scale = float(np.polyfit(local, ref, 1)[0])

        if not math.isfinite(scale) or scale <= 0:
            logger.info(
                "Degenerate clock fit for %s (scale=%r); falling back to offset only.",
                domain.value,
                scale,
            )
            scale = 1.0

        return ClockSyncTransform(local_anchor=local_anchor, ref_anchor=ref_anchor, scale=scale)
