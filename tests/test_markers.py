import pytest

from routemap.markers import DEFAULT_MARKER_LABEL, MarkerStore


def test_add_appends_in_order():
    store = MarkerStore()
    h1 = store.add((1.0, 2.0))
    h2 = store.add((3.0, 4.0), draggable=False, label="現在地")
    assert store.handles() == [h1, h2]
    assert store.coordinates() == [(1.0, 2.0), (3.0, 4.0)]
    assert store.get(h1).label == DEFAULT_MARKER_LABEL
    assert store.get(h2).draggable is False


def test_handles_stable_across_removal():
    store = MarkerStore()
    h1, h2, h3 = (store.add((float(i), 0.0)) for i in range(3))
    store.remove(h2)
    assert h2 not in store
    assert store.get(h3).lat == 2.0
    h4 = store.add((9.0, 9.0))
    assert h4 not in (h1, h2, h3)
    assert store.handles() == [h1, h3, h4]


def test_move_keeps_position_and_flags():
    store = MarkerStore()
    h1 = store.add((1.0, 1.0))
    h2 = store.add((2.0, 2.0), draggable=False)
    store.move(h2, (5.0, 6.0))
    assert store.coordinates() == [(1.0, 1.0), (5.0, 6.0)]
    assert store.get(h2).draggable is False
    assert store.handles() == [h1, h2]


def test_remove_unknown_handle():
    store = MarkerStore()
    with pytest.raises(KeyError):
        store.remove(42)
