"""
RIFF DAG APP STATE - The Input/Mode State Machine

States: NORMAL (initial) and FILTER. Help and warnings panels are display
toggles, not states. Quitting is only possible from NORMAL.

    NORMAL  up/k, down/j      Selection.move_by(-1 / +1)
            pageup/pagedown   Selection.move_by(-page / +page)
            home/g, end/G     Selection.set_index(first / last)
            /                 -> FILTER (continues from the active filter)
            c                 clear filter
            ?                 toggle help
            w                 toggle warnings panel
            tab               toggle DAG layout
            esc               close panels
            q, ctrl-c         quit
    FILTER  printable char    append, re-filter
            backspace         drop last char, re-filter
            enter, esc        -> NORMAL, filter stays active

Selection only changes through the re-clamping rule when the view changes:
the selected id is kept whenever it still matches.
"""
import logging
from typing import Callable, Dict, List, Optional

from core.filter_engine import FilterEngine, FilteredView
from core.graph_db import GraphStore
from core.neighborhood import Neighborhood, clamp_depth, compute_neighborhood
from core.ontology import DagView, Mode
from core.schemas import IngestWarning, NodeData
from core.selection import SelectionModel
from infrastructure.config import RiffConfig
from tui import keys

logger = logging.getLogger(__name__)


class AppState:
    """Everything one frame is rendered from, plus the key dispatcher."""

    def __init__(
        self,
        store: GraphStore,
        config: Optional[RiffConfig] = None,
        warnings: Optional[List[IngestWarning]] = None,
        source_name: str = "",
        size_warning: Optional[str] = None,
    ):
        config = config or RiffConfig()

        self.store = store
        self.warnings: List[IngestWarning] = list(warnings or [])
        self.source_name = source_name
        self.size_warning = size_warning

        self.engine = FilterEngine(store, match_fields=config.match_fields, fuzzy=config.fuzzy)
        self.selection = SelectionModel(self.engine.view)

        self.mode = Mode.NORMAL
        self.filter_buffer = ""
        self.show_help = False
        self.show_warnings = False
        self.dag_view = config.dag_view
        self.max_depth = config.max_depth
        self.depth = clamp_depth(config.depth, self.max_depth)
        self.page_size = config.page_size

        self._normal_bindings: Dict[str, Callable[[], None]] = {
            keys.UP: lambda: self.selection.move_by(-1),
            "k": lambda: self.selection.move_by(-1),
            keys.DOWN: lambda: self.selection.move_by(1),
            "j": lambda: self.selection.move_by(1),
            keys.PAGE_UP: lambda: self.selection.move_by(-self.page_size),
            keys.PAGE_DOWN: lambda: self.selection.move_by(self.page_size),
            keys.HOME: lambda: self.selection.set_index(0),
            "g": lambda: self.selection.set_index(0),
            keys.END: lambda: self.selection.set_index(len(self.view) - 1),
            "G": lambda: self.selection.set_index(len(self.view) - 1),
            "/": self.enter_filter,
            "c": self.clear_filter,
            "?": self.toggle_help,
            "w": self.toggle_warnings,
            keys.TAB: self.toggle_dag_view,
            keys.ESC: self.close_panels,
        }

        if config.initial_filter:
            self.apply_filter(config.initial_filter)

    # =========================================================================
    # DERIVED STATE
    # =========================================================================

    @property
    def view(self) -> FilteredView:
        return self.engine.view

    def current_id(self) -> Optional[str]:
        return self.selection.current()

    def current_node(self) -> Optional[NodeData]:
        node_id = self.selection.current()
        return None if node_id is None else self.store.find_node(node_id)

    def neighborhood(self) -> Optional[Neighborhood]:
        """Layers around the current selection, or None on an empty view."""
        node_id = self.selection.current()
        if node_id is None:
            return None
        return compute_neighborhood(self.store, node_id, self.depth, self.max_depth)

    # =========================================================================
    # ACTIONS
    # =========================================================================

    def apply_filter(self, text: str) -> None:
        """Set the filter text and re-clamp the selection onto the new view."""
        self.filter_buffer = text
        view = self.engine.set_filter(text)
        self.selection.rebind(view)
        logger.debug("filter %r -> %d match(es)", self.engine.query, len(view))

    def clear_filter(self) -> None:
        self.apply_filter("")

    def enter_filter(self) -> None:
        self.mode = Mode.FILTER

    def leave_filter(self) -> None:
        self.mode = Mode.NORMAL

    def toggle_help(self) -> None:
        self.show_help = not self.show_help

    def toggle_warnings(self) -> None:
        self.show_warnings = not self.show_warnings

    def close_panels(self) -> None:
        self.show_help = False
        self.show_warnings = False

    def toggle_dag_view(self) -> None:
        self.dag_view = DagView.COLUMNS if self.dag_view is DagView.LAYERS else DagView.LAYERS

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def handle_key(self, key: str) -> bool:
        """
        Apply one key press.

        Returns:
            True if the application should exit, False otherwise.
        """
        if self.mode is Mode.FILTER:
            self._handle_filter_key(key)
            return False

        if key in ("q", keys.CTRL_C):
            return True

        action = self._normal_bindings.get(key)
        if action is not None:
            action()
        return False

    def _handle_filter_key(self, key: str) -> None:
        if key in (keys.ENTER, keys.ESC):
            self.leave_filter()
        elif key == keys.BACKSPACE:
            if self.filter_buffer:
                self.apply_filter(self.filter_buffer[:-1])
        elif len(key) == 1 and key.isprintable():
            self.apply_filter(self.filter_buffer + key)
