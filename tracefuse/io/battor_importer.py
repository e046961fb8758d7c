from __future__ import annotations

from dataclasses import dataclass
import logging
import re

from tracefuse.core import ClockDomainId, ImportWarningKind, Model, PowerSeries
from tracefuse.io.importer import Importer

logger = logging.getLogger(__name__)


# <ts ms> <voltage mV> <current mA> [<sync id>]
_DATA_LINE_RE = re.compile(
    r"^(?P<ts>-?\d+\.\d+)\s+(?P<voltage>-?\d+\.\d+)\s+(?P<current>-?\d+\.\d+)"
    r"(?:\s+<(?P<sync_id>\S+)>)?$"
)
_HEADER_RE = re.compile(r"^# BattOr")

_MILLI = 1000.0


@dataclass(frozen=True)
class RawBattorSample:
    """One parsed data line, still in the BattOr clock domain."""

    ts: float            # ms, device clock
    voltage: float       # V
    current: float       # A
    sync_id: str | None


class BattorImporter(Importer):
    """Imports BattOr power monitor text traces.

    The text starts with a ``# BattOr`` header. Malformed lines and samples
    with a negative voltage or current are recorded as import warnings and
    skipped; the rest of the trace is still imported.
    """

    # Runs after the primary trace event importer.
    import_priority = 3

    def __init__(self, model: Model, events: str):
        super().__init__(model, events)
        self.samples = self._lines_to_samples(events.split("\n"))

    @classmethod
    def can_import(cls, events) -> bool:
        if not isinstance(events, str):
            return False
        return _HEADER_RE.match(events) is not None

    def import_clock_sync_markers(self) -> None:
        if not self.claim_power_source("BattOr power trace"):
            return
        manager = self.model.clock_sync_manager
        for sample in self.samples:
            if sample.sync_id:
                manager.add_clock_sync_marker(ClockDomainId.BATTOR, sample.sync_id, sample.ts)

    def import_events(self) -> None:
        if not self.claim_power_source("BattOr power trace"):
            return
        device = self.model.device

        to_model_time = self.model.clock_sync_manager.get_model_time_transformer(
            ClockDomainId.BATTOR
        )

        series = device.power_series = PowerSeries()
        for sample in self.samples:
            ts = to_model_time(sample.ts)
            if series.t_end is not None and ts < series.t_end:
                self.model.import_warning(
                    ImportWarningKind.PARSE_ERROR,
                    f"BattOr sample at {sample.ts} ms is out of order and was skipped.",
                )
                continue
            series.add_power_sample(ts, sample.voltage, sample.current, sample.sync_id)
        logger.debug("Imported %d BattOr samples", series.n)

    def _lines_to_samples(self, lines: list[str]) -> list[RawBattorSample]:
        samples: list[RawBattorSample] = []

        for line in lines:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            m = _DATA_LINE_RE.match(line)
            if not m:
                self.model.import_warning(
                    ImportWarningKind.PARSE_ERROR,
                    f"Unrecognized line in BattOr trace: {line}",
                )
                continue

            ts = float(m.group("ts"))
            voltage = float(m.group("voltage")) / _MILLI
            current = float(m.group("current")) / _MILLI

            if voltage < 0 or current < 0:
                self.model.import_warning(
                    ImportWarningKind.PARSE_ERROR,
                    f"The following line in the BattOr trace has a negative voltage or "
                    f"current, neither of which are allowed: {line}. A common cause of "
                    f"this is that the device is charging while the trace is being recorded.",
                )
                continue

            samples.append(RawBattorSample(ts, voltage, current, m.group("sync_id")))

        return samples
