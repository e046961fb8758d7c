# test/test_model.py
import pytest

from tracefuse.core import (
    Device,
    ImportFailed,
    ImportOptions,
    ImportWarningKind,
    Model,
    PowerSeries,
    ThreadNotFound,
    ThreadRole,
)


def test_threads_created_on_demand_and_looked_up():
    model = Model()
    t = model.get_or_create_thread(1, 2)
    assert model.get_or_create_thread(1, 2) is t
    assert model.get_thread(1, 2) is t
    assert len(model) == 1
    assert list(model) == [t]

    with pytest.raises(ThreadNotFound):
        model.get_thread(9, 9)


def test_thread_role_from_name():
    model = Model()
    main = model.get_or_create_thread(1, 1)
    main.name = "CrRendererMain"
    other = model.get_or_create_thread(1, 2)
    other.name = "Compositor"

    assert main.role is ThreadRole.RENDERER_MAIN
    assert other.role is ThreadRole.OTHER
    assert list(model.threads_with_role("renderer_main")) == [main]


def test_import_warning_log_is_ordered():
    model = Model()
    model.import_warning(ImportWarningKind.PARSE_ERROR, "first")
    model.import_warning("import_error", "second")

    kinds = [w.kind for w in model.import_warnings]
    assert kinds == [ImportWarningKind.PARSE_ERROR, ImportWarningKind.IMPORT_ERROR]
    assert [w.message for w in model.import_warnings] == ["first", "second"]
    assert model.has_warnings


def test_fatal_warning_is_recorded_then_raised():
    model = Model()
    with pytest.raises(ImportFailed):
        model.import_warning(ImportWarningKind.IMPORT_ERROR, "boom", fatal=True)
    assert model.import_warnings[-1].fatal


def test_max_warnings_caps_log():
    model = Model(ImportOptions(max_warnings=2))
    for n in range(5):
        model.import_warning(ImportWarningKind.PARSE_ERROR, f"w{n}")

    messages = [w.message for w in model.import_warnings]
    assert messages[:2] == ["w0", "w1"]
    assert len(messages) == 3
    assert "Too many" in messages[2]
    assert model.suppressed_warnings == 3


def test_max_warnings_reached_exactly_adds_no_cap_entry():
    model = Model(ImportOptions(max_warnings=2))
    model.import_warning(ImportWarningKind.PARSE_ERROR, "w0")
    model.import_warning(ImportWarningKind.PARSE_ERROR, "w1")

    assert [w.message for w in model.import_warnings] == ["w0", "w1"]
    assert model.suppressed_warnings == 0

    model.import_warning(ImportWarningKind.PARSE_ERROR, "w2")
    assert len(model.import_warnings) == 3
    assert model.import_warnings[-1].kind is ImportWarningKind.IMPORT_ERROR
    assert model.suppressed_warnings == 1


def test_finalize_warns_about_unclosed_and_overlapping_slices():
    model = Model()
    group = model.get_or_create_thread(1, 1).slice_group
    group.push_complete_slice("c", "A", 0, 10)
    group.push_complete_slice("c", "B", 5, 10)
    group.begin_slice("c", "open", 20)

    model.finalize_import()
    assert model.is_finalized
    assert group.is_finalized
    assert len(model.import_warnings) == 2
    assert all(w.kind is ImportWarningKind.IMPORT_ERROR for w in model.import_warnings)


def test_bounds_cover_slices_and_power():
    model = Model()
    assert model.bounds is None

    model.get_or_create_thread(1, 1).slice_group.push_complete_slice("c", "A", 10, 10)
    series = model.device.power_series = PowerSeries()
    series.add_power_sample(0.0, 1.0, 1.0)
    series.add_power_sample(5.0, 1.0, 1.0)

    assert (model.bounds.min, model.bounds.max) == (0.0, 20.0)


def test_device_power_source_first_claim_wins():
    device = Device()
    first, second = object(), object()

    assert device.claim_power_source(first)
    assert device.claim_power_source(first)
    assert not device.claim_power_source(second)


def test_device_power_source_refused_once_series_exists():
    device = Device(power_series=PowerSeries())
    assert not device.claim_power_source(object())
