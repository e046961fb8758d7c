# test/test_sample.py
import dataclasses

import pytest

from tracefuse.core import PowerSample, InvalidSample


def test_power_is_voltage_times_current():
    s = PowerSample(ts=1.0, voltage=1.0, current=0.5)
    assert s.power == pytest.approx(0.5)
    assert s.sync_id is None


def test_sample_is_immutable():
    s = PowerSample(ts=0.0, voltage=1.0, current=1.0)
    with pytest.raises(dataclasses.FrozenInstanceError):
        s.voltage = 2.0  # type: ignore[misc]


def test_sample_rejects_non_finite_ts():
    with pytest.raises(InvalidSample):
        PowerSample(ts=float("inf"), voltage=1.0, current=1.0)
