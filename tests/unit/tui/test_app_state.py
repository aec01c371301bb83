"""
Unit tests for tui/state.py - the input/mode state machine

Tests every transition of the key table:
- Normal mode navigation, filter entry, panels, layout, quit
- Filter mode editing and exit
- Selection re-clamping when the filter changes
"""
import pytest

from core.ontology import DagView, Mode
from infrastructure.config import RiffConfig
from tui import keys
from tui.state import AppState


@pytest.fixture
def state(sample_result):
    return AppState(sample_result.store, warnings=sample_result.warnings)


def press(state: AppState, *names: str) -> bool:
    quit_requested = False
    for name in names:
        quit_requested = state.handle_key(name)
    return quit_requested


# =============================================================================
# NORMAL MODE
# =============================================================================

def test_initial_state(state):
    assert state.mode is Mode.NORMAL
    assert state.current_id() == "s1-p1"
    assert len(state.view) == 11
    assert state.dag_view is DagView.LAYERS
    assert not state.show_help
    assert not state.show_warnings


def test_navigation_keys(state):
    """
    Validate movement bindings.

    Verifies:
    - up/k and down/j move by one and clamp
    - page keys move by page_size
    - home/g and end/G jump to the ends
    """
    press(state, "k")
    assert state.current_id() == "s1-p1"

    press(state, keys.DOWN, "j")
    assert state.selection.index == 2

    press(state, keys.UP)
    assert state.selection.index == 1

    press(state, keys.PAGE_DOWN)
    assert state.selection.index == 10

    press(state, keys.PAGE_UP)
    assert state.selection.index == 0

    press(state, "G")
    assert state.current_id() == "s2-r2"
    press(state, "g")
    assert state.current_id() == "s1-p1"
    press(state, keys.END)
    assert state.selection.index == 10
    press(state, keys.HOME)
    assert state.selection.index == 0


def test_page_size_from_config(sample_result):
    state = AppState(sample_result.store, config=RiffConfig(page_size=3))
    press(state, keys.PAGE_DOWN)
    assert state.selection.index == 3


def test_quit_keys(state):
    assert state.handle_key("q") is True
    assert state.handle_key(keys.CTRL_C) is True
    assert state.handle_key("x") is False


def test_panels_and_layout_toggles(state):
    press(state, "?")
    assert state.show_help
    press(state, "w")
    assert state.show_warnings

    press(state, keys.ESC)
    assert not state.show_help
    assert not state.show_warnings

    press(state, keys.TAB)
    assert state.dag_view is DagView.COLUMNS
    press(state, keys.TAB)
    assert state.dag_view is DagView.LAYERS


def test_unbound_keys_are_ignored(state):
    before = (state.mode, state.current_id(), state.show_help)
    assert press(state, keys.RESIZE, "z", "ctrl-x") is False
    assert (state.mode, state.current_id(), state.show_help) == before


# =============================================================================
# FILTER MODE
# =============================================================================

def test_filter_mode_typing_and_exit(state):
    """
    Validate the filter mode transitions.

    Verifies:
    - "/" enters FILTER
    - Printable keys append and re-filter
    - Backspace pops and re-filters
    - Enter returns to NORMAL with the filter kept
    """
    press(state, "/")
    assert state.mode is Mode.FILTER

    press(state, "s", "2", "-", "t")
    assert state.filter_buffer == "s2-t"
    assert state.view == ("s2-t1",)

    press(state, keys.BACKSPACE)
    assert state.filter_buffer == "s2-"
    assert len(state.view) == 4

    press(state, keys.ENTER)
    assert state.mode is Mode.NORMAL
    assert state.engine.query == "s2-"


def test_quit_keys_are_text_in_filter_mode(state):
    press(state, "/")
    assert press(state, "q") is False
    assert state.filter_buffer == "q"
    assert state.mode is Mode.FILTER


def test_esc_leaves_filter_mode_and_keeps_filter(state):
    press(state, "/", "t", "o", "o", "l", keys.ESC)

    assert state.mode is Mode.NORMAL
    assert state.view == ("s1-t1", "s1-t2")


def test_filter_mode_ignores_control_keys(state):
    press(state, "/", "a", keys.UP, keys.TAB, "ctrl-w")
    assert state.filter_buffer == "a"
    assert state.mode is Mode.FILTER


def test_backspace_on_empty_buffer(state):
    press(state, "/", keys.BACKSPACE)
    assert state.filter_buffer == ""
    assert len(state.view) == 11


def test_reentering_filter_continues_from_active_text(state):
    press(state, "/", "t", "o", keys.ENTER, "/", "o", "l")
    assert state.filter_buffer == "tool"


def test_clear_filter_restores_full_view(state):
    press(state, "/", "s", "2", keys.ENTER, "c")

    assert state.filter_buffer == ""
    assert len(state.view) == 11


# =============================================================================
# SELECTION RE-CLAMPING
# =============================================================================

def test_selection_kept_when_still_matching(state):
    """
    Validate that the selected id survives filter changes.

    Verifies:
    - Narrowing the filter keeps the selection if it matches
    - A non-matching filter empties the selection
    - Clearing again falls back to the first node
    """
    press(state, "G")
    assert state.current_id() == "s2-r2"

    state.apply_filter("s2")
    assert state.current_id() == "s2-r2"
    assert state.selection.index == 3

    state.apply_filter("s2-r")
    assert state.current_id() == "s2-r2"

    state.apply_filter("nothing matches this")
    assert state.current_id() is None
    assert state.neighborhood() is None

    state.apply_filter("")
    assert state.current_id() == "s1-p1"


def test_initial_filter_and_depth_from_config(sample_result):
    config = RiffConfig(initial_filter="tool", depth=20, max_depth=4, dag_view=DagView.COLUMNS)
    state = AppState(sample_result.store, config=config)

    assert state.view == ("s1-t1", "s1-t2")
    assert state.filter_buffer == "tool"
    assert state.depth == 4
    assert state.dag_view is DagView.COLUMNS
    assert state.neighborhood().depth == 4


def test_depth_above_default_bound_with_raised_max_depth(sample_result):
    config = RiffConfig(depth=10, max_depth=12)
    state = AppState(sample_result.store, config=config)

    assert state.depth == 10
    assert state.max_depth == 12
    assert state.neighborhood().depth == 10
