from __future__ import annotations

import logging

from asammdf import MDF  # pivotal dependency for MDF power recordings
import numpy as np

from tracefuse.core import ClockDomainId, ImportWarningKind, Model, PowerSeries
from tracefuse.io.importer import Importer

logger = logging.getLogger(__name__)


_MILLI = 1000.0


class MdfPowerImporter(Importer):
    """Imports power recordings from an in-memory asammdf.MDF object.

    The recording holds a voltage (mV) and a current (mA) channel sampled
    in seconds, plus an optional string channel carrying sync ids. Channel
    names come from the model's ImportOptions. Samples live in the DAQ
    clock domain.
    """

    # Device data, same slot as the BattOr importer.
    import_priority = 3

    def __init__(self, model: Model, events: MDF):
        super().__init__(model, events)
        self._mdf = events
        self._options = model.options

    @classmethod
    def can_import(cls, events) -> bool:
        return isinstance(events, MDF)

    # ------------------------------------------------------------------
    # Channel access
    # ------------------------------------------------------------------
    def _read(self, name: str | None) -> tuple[np.ndarray, np.ndarray] | None:
        if not name or name not in self._mdf.channels_db:
            return None
        # channels_db: name -> ((group, index), ...); the first occurrence wins
        group, index = self._mdf.channels_db[name][0]
        sig = self._mdf.get(group=group, index=index)
        return np.asarray(sig.timestamps, dtype=float), np.asarray(sig.samples)

    def import_clock_sync_markers(self) -> None:
        if not self.claim_power_source("MDF power recording"):
            return
        data = self._read(self._options.mdf_sync_channel)
        if data is None:
            return

        manager = self.model.clock_sync_manager
        t, v = data
        for ts, raw in zip(t, v):
            sync_id = raw.decode("utf-8", "replace") if isinstance(raw, bytes) else str(raw)
            sync_id = sync_id.strip("\x00 ").strip()
            if sync_id:
                manager.add_clock_sync_marker(ClockDomainId.DAQ, sync_id, float(ts) * _MILLI)

    def import_events(self) -> None:
        if not self.claim_power_source("MDF power recording"):
            return
        device = self.model.device

        voltage = self._read(self._options.mdf_voltage_channel)
        current = self._read(self._options.mdf_current_channel)
        if voltage is None or current is None:
            missing = [
                name
                for name, data in (
                    (self._options.mdf_voltage_channel, voltage),
                    (self._options.mdf_current_channel, current),
                )
                if data is None
            ]
            self.model.import_warning(
                ImportWarningKind.IMPORT_ERROR,
                f"MDF recording lacks channel(s) {', '.join(missing)}; nothing imported.",
            )
            return

        t, v = voltage
        t_i, i = current
        v = v.astype(float) / _MILLI
        if t_i.shape != t.shape or not np.array_equal(t_i, t):
            # Bring current onto the voltage raster.
            i = np.interp(t, t_i, i.astype(float))
        i = np.asarray(i, dtype=float) / _MILLI

        to_model_time = self.model.clock_sync_manager.get_model_time_transformer(ClockDomainId.DAQ)

        series = PowerSeries()
        for ts, volts, amps in zip(t, v, i):
            if volts < 0 or amps < 0:
                self.model.import_warning(
                    ImportWarningKind.PARSE_ERROR,
                    f"MDF sample at {ts} s has a negative voltage ({volts} V) or "
                    f"current ({amps} A) and was skipped.",
                )
                continue
            model_ts = to_model_time(float(ts) * _MILLI)
            if series.t_end is not None and model_ts < series.t_end:
                self.model.import_warning(
                    ImportWarningKind.PARSE_ERROR,
                    f"MDF sample at {ts} s is out of order and was skipped.",
                )
                continue
            series.add_power_sample(model_ts, float(volts), float(amps))

        device.power_series = series
        logger.debug("Imported %d MDF power samples", series.n)
