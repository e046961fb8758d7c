# test/test_mdf_importer.py
import numpy as np
import pytest
from asammdf import MDF, Signal

from tracefuse.core import ClockDomainId, ImportOptions, ImportWarningKind, Model, PowerSeries
from tracefuse.io.mdf_importer import MdfPowerImporter


def _mdf(voltage_mv, current_ma, t_s, *, sync=None, names=("voltage", "current")):
    t = np.array(t_s, dtype=float)
    signals = [
        Signal(samples=np.array(voltage_mv, dtype=float), timestamps=t, name=names[0], unit="mV"),
        Signal(samples=np.array(current_ma, dtype=float), timestamps=t, name=names[1], unit="mA"),
    ]
    mdf = MDF()
    mdf.append(signals)
    if sync is not None:
        sync_t, sync_ids = sync
        mdf.append([
            Signal(
                samples=np.array(sync_ids, dtype="S16"),
                timestamps=np.array(sync_t, dtype=float),
                name="sync_id",
                encoding="utf-8",
            )
        ])
    return mdf


def _import(mdf, model=None):
    model = model if model is not None else Model()
    importer = MdfPowerImporter(model, mdf)
    importer.import_clock_sync_markers()
    importer.import_events()
    return model


def test_can_import_only_mdf_objects():
    assert MdfPowerImporter.can_import(_mdf([1000.0], [500.0], [0.0]))
    assert not MdfPowerImporter.can_import("# BattOr\n")
    assert not MdfPowerImporter.can_import(None)


def test_imports_power_with_unit_conversion():
    model = _import(_mdf([1000.0, 2000.0], [500.0, 250.0], [0.0, 0.001]))

    series = model.device.power_series
    assert series.n == 2
    assert [s.ts for s in series] == pytest.approx([0.0, 1.0])
    assert [s.power for s in series] == pytest.approx([0.5, 0.5])
    # no sync channel: one missing-sync warning, nothing else
    assert [w.kind for w in model.import_warnings] == [ImportWarningKind.MISSING_SYNC]


def test_negative_samples_are_skipped_with_warning():
    model = _import(_mdf([1000.0, -5.0, 1000.0], [500.0, 500.0, 500.0], [0.0, 0.001, 0.002]))

    assert model.device.power_series.n == 2
    kinds = [w.kind for w in model.import_warnings]
    assert kinds.count(ImportWarningKind.PARSE_ERROR) == 1


def test_sync_channel_aligns_to_host_clock():
    model = Model()
    model.clock_sync_manager.add_clock_sync_marker(ClockDomainId.HOST_TRACE, "s1", 500.0)
    mdf = _mdf([1000.0, 1000.0], [500.0, 500.0], [0.0, 0.01], sync=([0.01], [b"s1"]))

    model = _import(mdf, model)

    markers = model.clock_sync_manager.markers(ClockDomainId.DAQ)
    assert [m.sync_id for m in markers] == ["s1"]
    assert [s.ts for s in model.device.power_series] == pytest.approx([490.0, 500.0])
    assert model.import_warnings == ()


def test_missing_channels_is_import_error():
    mdf = _mdf([1000.0], [500.0], [0.0], names=("vbat", "ibat"))
    model = _import(mdf)

    assert model.device.power_series is None
    assert ImportWarningKind.IMPORT_ERROR in [w.kind for w in model.import_warnings]


def test_channel_names_come_from_options():
    mdf = _mdf([1000.0], [500.0], [0.0], names=("vbat", "ibat"))
    model = _import(mdf, Model(ImportOptions(mdf_voltage_channel="vbat", mdf_current_channel="ibat")))

    assert model.device.power_series.n == 1


def test_refuses_when_power_series_exists():
    model = Model()
    model.device.power_series = PowerSeries()
    model = _import(_mdf([1000.0], [500.0], [0.0]), model)

    assert model.device.power_series.n == 0
    assert ImportWarningKind.CONFLICTING_SOURCE in [w.kind for w in model.import_warnings]
