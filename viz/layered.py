"""
Textual rendering of a Neighborhood.

Two layouts:
- layers:  one block per depth, farthest ancestors first, the selected node
           in the middle, descendants nearest first
- columns: the same layers side by side, ancestors on the left
"""
from typing import List, Optional, Tuple

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from core.graph_db import GraphStore
from core.neighborhood import Layer, Neighborhood
from core.ontology import DagView
from viz.core import CENTER_STYLE, EDGE_LABEL_STYLE, HEADER_STYLE, MUTED_STYLE, node_text, single_line


TITLE = "Layered DAG (parents ← [selected] → children)"
COLUMN_WIDTH = 24


def ordered_layers(hood: Neighborhood) -> List[Tuple[int, Layer]]:
    """
    (signed depth, layer) in display order.

    Ancestors get negative depths and come first, farthest first; the
    center is depth 0; descendants follow, nearest first.
    """
    rows: List[Tuple[int, Layer]] = []
    for distance in range(len(hood.ancestors), 0, -1):
        rows.append((-distance, hood.ancestors[distance - 1]))
    rows.append((0, (hood.center,)))
    for distance, layer in enumerate(hood.descendants, start=1):
        rows.append((distance, layer))
    return rows


def depth_tag(depth: int) -> str:
    if depth == 0:
        return " 0"
    return f"{depth:+d}"


def adjacent_label(store: GraphStore, center: str, node_id: str, depth: int) -> Optional[str]:
    if depth == -1:
        return store.edge_label(node_id, center)
    if depth == 1:
        return store.edge_label(center, node_id)
    return None


def render_layers(store: GraphStore, hood: Neighborhood) -> Text:
    """
    Stacked layout, one node per line, prefixed by its signed depth.

    Direct parents and children are followed by the label of the edge
    that links them to the selected node, when it has one.
    """
    out = Text()
    out.append(TITLE + "\n", style=HEADER_STYLE)

    if not hood.ancestors:
        out.append("   (no ancestors)\n", style=MUTED_STYLE)

    for depth, layer in ordered_layers(hood):
        for node_id in layer:
            out.append(f"{depth_tag(depth)} ", style=MUTED_STYLE)
            label = node_text(store, node_id)
            if depth == 0:
                center = Text("[") + label + Text("]")
                center.stylize(CENTER_STYLE)
                out.append_text(center)
            else:
                out.append("  ↑ " if depth < 0 else "  ↓ ", style=MUTED_STYLE)
                out.append_text(label)
                edge = adjacent_label(store, hood.center, node_id, depth)
                if edge:
                    out.append(f"  [{single_line(edge)}]", style=EDGE_LABEL_STYLE)
            out.append("\n")

    if not hood.descendants:
        out.append("   (no descendants)\n", style=MUTED_STYLE)

    out.rstrip()
    return out


def render_columns(store: GraphStore, hood: Neighborhood, column_width: int = COLUMN_WIDTH) -> Table:
    """Grid layout: one column per layer, rows padded to the tallest layer."""
    layers = ordered_layers(hood)
    table = Table(
        title=TITLE,
        title_style=HEADER_STYLE,
        title_justify="left",
        show_edge=False,
        box=None,
        pad_edge=False,
        expand=False,
    )
    for depth, _ in layers:
        table.add_column(depth_tag(depth).strip(), justify="center", width=column_width, no_wrap=True)

    rows = max(len(layer) for _, layer in layers)
    for row in range(rows):
        cells = []
        for depth, layer in layers:
            if row >= len(layer):
                cells.append(Text(""))
                continue
            cell = node_text(store, layer[row], width=column_width - (2 if depth == 0 else 0))
            if depth == 0:
                cell = Text("[") + cell + Text("]")
                cell.stylize(CENTER_STYLE)
            cells.append(cell)
        table.add_row(*cells)
    return table


def render_neighborhood(
    store: GraphStore,
    hood: Neighborhood,
    view: DagView = DagView.LAYERS,
) -> RenderableType:
    """Render in the requested layout, with a footer line."""
    body = render_columns(store, hood) if view is DagView.COLUMNS else render_layers(store, hood)
    footer = Text(
        f"depth {hood.depth} · {hood.size() - 1} related node(s) · Tab toggles layout",
        style=MUTED_STYLE,
    )
    return Group(body, Text(""), footer)
