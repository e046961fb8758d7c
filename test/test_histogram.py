# test/test_histogram.py
import math

import numpy as np
import pytest

from tracefuse.core import InvalidHistogram, Range
from tracefuse.metrics import NumericBuilder, Unit


def _builder(lo=0, hi=100, n=10):
    return NumericBuilder.create_linear(Unit.UNITLESS, Range.from_explicit_range(lo, hi), n)


def test_linear_edges_and_bins():
    numeric = _builder().build()

    assert np.allclose(numeric.edges, np.arange(0, 101, 10))
    assert len(numeric.bins) == 12
    assert numeric.underflow_bin.min == -math.inf
    assert numeric.overflow_bin.max == math.inf


def test_values_land_in_expected_bins():
    numeric = _builder().build()

    numeric.add(-1)     # underflow
    numeric.add(0)      # first central bin
    numeric.add(10)     # second central bin: [10, 20)
    numeric.add(99.9)   # last central bin
    numeric.add(100)    # overflow (max is exclusive)
    numeric.add(1e9)    # overflow

    assert numeric.underflow_bin.count == 1
    assert numeric.central_bins[0].count == 1
    assert numeric.central_bins[1].count == 1
    assert numeric.central_bins[-1].count == 1
    assert numeric.overflow_bin.count == 2


def test_no_value_is_dropped():
    numeric = _builder(5, 7, 3).build()
    values = [-math.inf, -3, 5, 5.5, 6.99, 7, 8, math.inf, 6]
    for v in values:
        numeric.add(v)

    assert int(numeric.counts.sum()) == len(values) == numeric.num_values


def test_nan_is_rejected():
    with pytest.raises(ValueError):
        _builder().build().add(float("nan"))


def test_statistics():
    numeric = _builder().build()
    for v in (10, 20, 60):
        numeric.add(v)

    assert numeric.sum == 90
    assert numeric.mean == 30
    assert (numeric.min, numeric.max) == (10, 60)
    assert _builder().build().mean is None


def test_provenance_ids_are_capped_per_bin():
    numeric = _builder().build()
    for n in range(12):
        numeric.add(15, provenance_id=f"slice-{n}")

    b = numeric.bin_for(15)
    assert b.count == 12
    assert b.sample_ids == [f"slice-{n}" for n in range(8)]
    assert b.dropped_sample_ids == 4


def test_build_returns_independent_histograms():
    builder = _builder()
    first = builder.build()
    second = builder.build()

    first.add(50)
    first.add(50)

    assert first.num_values == 2
    assert second.num_values == 0
    assert int(second.counts.sum()) == 0
    assert first.central_bins[5] is not second.central_bins[5]


def test_exponential_edges():
    builder = NumericBuilder.create_exponential(Unit.UNITLESS, Range(1, 1000), 3)
    numeric = builder.build()

    assert np.allclose(numeric.edges, [1, 10, 100, 1000])
    numeric.add(50)
    assert numeric.bin_for(50) is numeric.central_bins[1]
    assert numeric.central_bins[1].count == 1


@pytest.mark.parametrize(
    "kwargs",
    [
        {"range": Range(10, 10), "num_bins": 5},
        {"range": Range(0, 10), "num_bins": 0},
        {"range": Range(0, 10), "num_bins": -2},
        {"range": Range(0, math.inf), "num_bins": 5},
        {"range": Range(0, 10), "num_bins": 5, "spacing": "exponential"},
        {"range": Range(0, 10), "num_bins": 5, "spacing": "cubic"},
    ],
)
def test_invalid_builders_fail_fast(kwargs):
    with pytest.raises(InvalidHistogram):
        NumericBuilder(unit=Unit.UNITLESS, **kwargs)


def test_as_dict_summary():
    numeric = _builder(0, 10, 2).build()
    numeric.add(3)
    summary = numeric.as_dict()

    assert summary["unit"] == "unitless"
    assert summary["counts"] == [0, 1, 0, 0]
    assert summary["edges"] == [0.0, 5.0, 10.0]
