"""
RIFF DAG PANES - The Three-Pane Frame

render_frame() is a pure function of the app state and the terminal size.
It performs no business logic and never mutates state.

  +-------------+-----------------------------+
  |  Nodes      |  Node Details               |
  |  (filtered  +-----------------------------+
  |   list)     |  DAG View / Help / Warnings |
  +-------------+-----------------------------+
  status line
"""
from typing import List, Tuple

from rich.console import Group, RenderableType
from rich.layout import Layout
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.graph_db import LabeledNeighbor
from core.ontology import Mode
from infrastructure.diagnostics import warnings_table
from tui.state import AppState
from viz.core import (
    EDGE_LABEL_STYLE,
    MUTED_STYLE,
    SELECTED_STYLE,
    kind_glyph,
    kind_style,
    node_text,
    single_line,
)
from viz.layered import render_neighborhood


LIST_RATIO = 32
RIGHT_RATIO = 68
DETAILS_RATIO = 45
DAG_RATIO = 55
SELECTED_MARKER = "▶ "

HELP_TEXT = """\
Normal mode
  ↑/k  ↓/j        move selection
  PgUp / PgDn     move by a page
  Home/g  End/G   first / last node
  /               filter (type, Enter/Esc to accept)
  c               clear filter
  Tab             toggle DAG layout (layers / columns)
  w               toggle ingestion warnings
  ?               toggle this help
  Esc             close panels
  q               quit

Filter mode
  type            narrow the list (case-insensitive)
  Backspace       delete last character
  Enter / Esc     back to normal mode, filter stays active"""


# =============================================================================
# LIST PANE
# =============================================================================

def list_window(total: int, selected: int, rows: int) -> Tuple[int, int]:
    """
    [start, end) slice of the list that keeps `selected` visible.

    The selection is kept near the middle once the list scrolls.
    """
    if rows <= 0 or total <= 0:
        return 0, 0
    if total <= rows:
        return 0, total
    start = max(0, min(selected - rows // 2, total - rows))
    return start, start + rows


def render_node_list(state: AppState, rows: int) -> RenderableType:
    view = state.view
    if not view:
        if state.store.is_empty:
            return Text("No nodes loaded.", style=MUTED_STYLE)
        return Text(f"No nodes match '{state.engine.query}'.", style=MUTED_STYLE)

    selected = state.selection.index or 0
    start, end = list_window(len(view), selected, rows)

    lines: List[Text] = []
    for i in range(start, end):
        node_id = view[i]
        node = state.store.get_node(node_id)
        parents, children = state.store.degree(node_id)

        line = Text(no_wrap=True, overflow="ellipsis")
        if i == selected:
            line.append(SELECTED_MARKER, style=SELECTED_STYLE)
            line.append(f"{kind_glyph(node.kind)} {single_line(node.display_label())}", style=SELECTED_STYLE)
        else:
            line.append("  ")
            line.append(f"{kind_glyph(node.kind)} {single_line(node.display_label())}", style=kind_style(node.kind))
        line.append(f"  (↑{parents} ↓{children})", style=MUTED_STYLE)
        lines.append(line)

    return Group(*lines)


# =============================================================================
# DETAILS PANE
# =============================================================================

def _or_none(value: str, placeholder: str = "(none)") -> Text:
    return Text(value) if value else Text(placeholder, style=MUTED_STYLE)


def _append_links(links: Text, state: AppState, edges: List[LabeledNeighbor], arrow: str) -> None:
    if not edges:
        links.append("  (none)\n", style=MUTED_STYLE)
        return
    for other_id, label in edges:
        links.append(f"  {arrow} ")
        links.append_text(node_text(state.store, other_id))
        if label:
            links.append(f"  [{single_line(label)}]", style=EDGE_LABEL_STYLE)
        links.append("\n")


def render_details(state: AppState) -> RenderableType:
    node = state.current_node()
    if node is None:
        return Text("No selection", style=MUTED_STYLE)

    parents = state.store.incoming_edges(node.id)
    children = state.store.outgoing_edges(node.id)

    grid = Table.grid(padding=(0, 1))
    grid.add_column(style="bold", no_wrap=True)
    grid.add_column(overflow="fold")
    grid.add_row("id", node.id)
    grid.add_row("label", _or_none(node.label))
    grid.add_row("span", _or_none(node.span))
    grid.add_row("kind", Text(f"{kind_glyph(node.kind)} {node.kind.value}", style=kind_style(node.kind)))
    grid.add_row("ts", _or_none(node.timestamp, "(n/a)"))
    grid.add_row("tags", _or_none(", ".join(node.tags)))
    grid.add_row("degree", f"{len(parents)} parent(s), {len(children)} child(ren)")

    links = Text()
    links.append("\nparents:\n", style="bold")
    _append_links(links, state, parents, "←")
    links.append("children:\n", style="bold")
    _append_links(links, state, children, "→")
    links.rstrip()

    return Group(grid, links)


# =============================================================================
# LOWER-RIGHT PANE
# =============================================================================

def render_lower_right(state: AppState) -> Panel:
    if state.show_help:
        return Panel(Text(HELP_TEXT), title=" Help ", border_style="cyan")

    if state.show_warnings:
        if state.warnings:
            body: RenderableType = warnings_table(state.warnings)
        else:
            body = Text("No ingestion warnings.", style=MUTED_STYLE)
        return Panel(body, title=f" Warnings ({len(state.warnings)}) ", border_style="yellow")

    hood = state.neighborhood()
    if hood is None:
        return Panel(Text("No selection", style=MUTED_STYLE), title=" DAG View ")

    title = f" DAG View ({state.dag_view.value}, depth {hood.depth}) "
    return Panel(render_neighborhood(state.store, hood, state.dag_view), title=title)


# =============================================================================
# STATUS LINE
# =============================================================================

def render_status(state: AppState) -> Text:
    status = Text(no_wrap=True, overflow="ellipsis")
    total = state.store.node_count

    if state.mode is Mode.FILTER:
        status.append(" FILTER ", style="black on yellow")
        status.append(f" /{state.filter_buffer}", style="bold")
        status.append("▏", style="blink")
        status.append(f"  {len(state.view)}/{total} match", style=MUTED_STYLE)
        status.append("  Enter/Esc accept · Backspace delete", style=MUTED_STYLE)
        return status

    status.append(" NORMAL ", style="black on cyan")
    if state.engine.query:
        status.append(f" filter: '{state.engine.query}'", style="bold")
    status.append(f"  {len(state.view)}/{total} nodes", style=MUTED_STYLE)
    if state.warnings:
        status.append(f"  {len(state.warnings)} warning(s) [w]", style="yellow")
    if state.size_warning:
        status.append("  large graph", style="yellow")
    status.append("  / filter · c clear · Tab layout · ? help · q quit", style=MUTED_STYLE)
    return status


# =============================================================================
# FRAME
# =============================================================================

def render_frame(state: AppState, height: int) -> Layout:
    """Compose the full frame for a terminal `height` rows tall."""
    root = Layout(name="root")
    root.split_column(Layout(name="body"), Layout(name="status", size=1))
    root["body"].split_row(
        Layout(name="nodes", ratio=LIST_RATIO),
        Layout(name="right", ratio=RIGHT_RATIO),
    )
    root["right"].split_column(
        Layout(name="details", ratio=DETAILS_RATIO),
        Layout(name="dag", ratio=DAG_RATIO),
    )

    # Panel borders take two rows
    list_rows = max(0, height - 1 - 2)
    title = f" Nodes ({len(state.view)}) " if state.engine.query else " Nodes "
    root["nodes"].update(Panel(render_node_list(state, list_rows), title=title))
    root["details"].update(Panel(render_details(state), title=" Node Details "))
    root["dag"].update(render_lower_right(state))
    root["status"].update(render_status(state))
    return root
