# test/test_slice_group.py
import pytest

from tracefuse.core import Slice, SliceGroup, InvalidSlice, SliceGroupError


def _titles(slices):
    return [s.title for s in slices]


def test_slice_accessors_and_validation():
    s = Slice(category="cat", title="A", start=10.0, duration=5.0)
    assert s.end == 15.0
    assert s.is_top_level

    with pytest.raises(InvalidSlice):
        Slice(category="cat", title="bad", start=0.0, duration=-1.0)
    with pytest.raises(InvalidSlice):
        Slice(category="cat", title="bad", start=float("nan"))


def test_top_level_and_nesting():
    g = SliceGroup()
    a = g.push_complete_slice("c", "A", 0, 100)
    b = g.push_complete_slice("c", "B", 10, 30)
    c = g.push_complete_slice("c", "C", 200, 60)

    assert _titles(g.top_level_slices) == ["A", "C"]
    assert b.parent is a
    assert a.sub_slices == [b]
    assert c.sub_slices == []


def test_nesting_independent_of_input_order():
    g = SliceGroup()
    g.push_complete_slice("c", "C", 200, 60)
    g.push_complete_slice("c", "B", 10, 30)
    g.push_complete_slice("c", "A", 0, 100)

    assert _titles(g.top_level_slices) == ["A", "C"]
    assert _titles(g.top_level_slices[0].sub_slices) == ["B"]


def test_deep_nesting_attaches_to_nearest_ancestor():
    g = SliceGroup()
    g.push_complete_slice("c", "A", 0, 100)
    g.push_complete_slice("c", "B", 10, 50)
    d = g.push_complete_slice("c", "D", 20, 5)
    e = g.push_complete_slice("c", "E", 70, 10)

    assert d.parent.title == "B"
    assert e.parent.title == "A"
    assert _titles(g.iter_all_slices()) == ["A", "B", "D", "E"]


def test_instant_at_parent_end_is_not_a_child():
    g = SliceGroup()
    a = g.push_complete_slice("c", "A", 0, 100)
    inside = g.push_complete_slice("c", "inside", 0, 0)
    at_end = g.push_complete_slice("c", "at_end", 100, 0)

    assert inside.parent is a
    assert at_end.parent is None
    assert g.top_level_slices == (a, at_end)
    assert g.improperly_nested == ()


def test_identical_instants_nest():
    g = SliceGroup()
    first = g.push_complete_slice("c", "first", 5, 0)
    second = g.push_complete_slice("c", "second", 5, 0)

    assert second.parent is first


def test_identical_bounds_earlier_is_ancestor():
    g = SliceGroup()
    first = g.push_complete_slice("c", "first", 0, 10)
    second = g.push_complete_slice("c", "second", 0, 10)

    assert g.top_level_slices == (first,)
    assert second.parent is first


def test_top_level_slices_is_restartable():
    g = SliceGroup()
    g.push_complete_slice("c", "A", 0, 10)
    g.push_complete_slice("c", "B", 20, 10)

    top = g.top_level_slices
    assert _titles(top) == _titles(top) == ["A", "B"]
    assert g.top_level_slices is top  # cached


def test_push_invalidates_cached_hierarchy():
    g = SliceGroup()
    g.push_complete_slice("c", "B", 10, 5)
    assert _titles(g.top_level_slices) == ["B"]

    g.push_complete_slice("c", "A", 0, 100)
    assert _titles(g.top_level_slices) == ["A"]


def test_begin_end_pairs():
    g = SliceGroup()
    g.begin_slice("c", "outer", 0)
    g.begin_slice("c", "inner", 5)
    inner = g.end_slice(8)
    outer = g.end_slice(20, args={"k": 1})

    assert inner.duration == 3
    assert outer.duration == 20
    assert outer.args == {"k": 1}
    assert inner.parent is outer


def test_end_without_begin_raises():
    g = SliceGroup()
    with pytest.raises(SliceGroupError):
        g.end_slice(1.0)


def test_end_before_begin_raises():
    g = SliceGroup()
    g.begin_slice("c", "x", 10)
    with pytest.raises(SliceGroupError):
        g.end_slice(5)


def test_finalize_closes_open_slices_and_freezes():
    g = SliceGroup()
    g.push_complete_slice("c", "done", 0, 50)
    open_slice = g.begin_slice("c", "open", 10)

    g.finalize()
    assert open_slice.did_not_finish
    assert open_slice.end == 50
    assert g.is_finalized

    with pytest.raises(SliceGroupError):
        g.push_complete_slice("c", "late", 60, 1)


def test_improperly_nested_reported():
    g = SliceGroup()
    g.push_complete_slice("c", "A", 0, 10)
    g.push_complete_slice("c", "B", 5, 10)

    assert _titles(g.top_level_slices) == ["A", "B"]
    assert _titles(g.improperly_nested) == ["B"]


def test_stable_ids_use_prefix():
    g = SliceGroup(id_prefix="1.2")
    a = g.push_complete_slice("c", "A", 0, 1)
    b = g.push_complete_slice("c", "B", 2, 1)
    assert (a.stable_id, b.stable_id) == ("1.2.0", "1.2.1")


def test_bounds():
    g = SliceGroup()
    assert g.bounds is None
    g.push_complete_slice("c", "A", 5, 10)
    g.push_complete_slice("c", "B", 0, 3)
    assert (g.bounds.min, g.bounds.max) == (0.0, 15.0)
