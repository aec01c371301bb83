"""
Unit tests for core/selection.py - SelectionModel
"""
from core.selection import SelectionModel


def test_empty_view_has_no_selection():
    sel = SelectionModel(())

    assert sel.index is None
    assert sel.current() is None
    assert sel.move_by(1) is None
    assert sel.set_index(3) is None


def test_move_clamps_at_both_ends():
    """
    Validate that movement holds at the first and last entry.

    Verifies:
    - Moving up from the first entry stays at 0
    - Moving down past the end stays at the last entry
    - Large jumps are clamped, not wrapped
    """
    sel = SelectionModel(("a", "b", "c"))

    assert sel.move_by(-1) == "a"
    assert sel.move_by(1) == "b"
    assert sel.move_by(10) == "c"
    assert sel.index == 2
    assert sel.move_by(-100) == "a"


def test_set_index_clamps():
    sel = SelectionModel(("a", "b", "c"))
    assert sel.set_index(99) == "c"
    assert sel.set_index(-5) == "a"


def test_rebind_keeps_selected_id_when_present():
    """
    Validate re-clamping on a view change.

    Verifies:
    - Selected id survives at its new position
    - Missing id falls back to the first entry
    - Empty view clears the selection
    """
    sel = SelectionModel(("a", "b", "c", "d"))
    sel.set_index(2)

    assert sel.rebind(("c", "d")) == "c"
    assert sel.index == 0

    assert sel.rebind(("x", "y")) == "x"
    assert sel.index == 0

    assert sel.rebind(()) is None
    assert sel.index is None

    assert sel.rebind(("p", "q")) == "p"


def test_index_always_in_range_under_random_walk():
    view = tuple("abcdef")
    sel = SelectionModel(view)
    for delta in (3, -7, 1, 12, -2, 0, 5, -1, -1, 9):
        sel.move_by(delta)
        assert 0 <= sel.index <= len(view) - 1
