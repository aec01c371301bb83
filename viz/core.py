"""
RIFF DAG VISUALIZATION CORE - Styles and Labels

Shared vocabulary for every pane:
- KIND_STYLES / KIND_GLYPHS: total mapping NodeKind -> rich style / glyph
- node_text(): a node's one-line rich label
- truncate(): width-bounded labels for the column layout
"""
import re
from typing import Dict, Optional

from rich.style import Style
from rich.text import Text

from core.graph_db import GraphStore
from core.ontology import NodeKind


# =============================================================================
# PALETTES (Consistent across panes)
# =============================================================================

KIND_STYLES: Dict[NodeKind, Style] = {
    NodeKind.PROMPT: Style(color="cyan"),
    NodeKind.RESPONSE: Style(color="green"),
    NodeKind.TOOL: Style(color="yellow"),
    NodeKind.ERROR: Style(color="red", bold=True),
    NodeKind.EVENT: Style(color="magenta"),
    NodeKind.GENERIC: Style(color="white"),
}

# Shapes of the original canvas view, as single glyphs
KIND_GLYPHS: Dict[NodeKind, str] = {
    NodeKind.PROMPT: "■",
    NodeKind.RESPONSE: "●",
    NodeKind.TOOL: "◆",
    NodeKind.ERROR: "✖",
    NodeKind.EVENT: "•",
    NodeKind.GENERIC: "□",
}

SELECTED_STYLE = Style(color="yellow", bold=True)
CENTER_STYLE = Style(color="bright_white", bold=True, reverse=True)
HEADER_STYLE = Style(color="cyan", bold=True)
MUTED_STYLE = Style(color="bright_black")
MISSING_STYLE = Style(color="red", italic=True)
EDGE_LABEL_STYLE = Style(color="bright_black", italic=True)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]+")


def kind_style(kind: NodeKind) -> Style:
    return KIND_STYLES.get(kind, KIND_STYLES[NodeKind.GENERIC])


def kind_glyph(kind: NodeKind) -> str:
    return KIND_GLYPHS.get(kind, KIND_GLYPHS[NodeKind.GENERIC])


def single_line(text: str) -> str:
    """Collapse newlines, tabs and other control characters into single spaces."""
    return _CONTROL_CHARS.sub(" ", text)


def truncate(text: str, width: int) -> str:
    """Cut `text` to `width` cells, marking the cut with an ellipsis."""
    if width <= 0:
        return ""
    if len(text) <= width:
        return text
    if width == 1:
        return "…"
    return text[: width - 1] + "…"


def node_text(store: GraphStore, node_id: str, width: Optional[int] = None) -> Text:
    """
    `glyph id · label` styled by kind.

    Ids that are not in the store render as a visibly missing entry
    instead of raising.
    """
    node = store.find_node(node_id)
    if node is None:
        label = f"? {node_id}"
        return Text(truncate(label, width) if width else label, style=MISSING_STYLE)

    label = f"{kind_glyph(node.kind)} {single_line(node.display_label())}"
    if width:
        label = truncate(label, width)
    return Text(label, style=kind_style(node.kind))
