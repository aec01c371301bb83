"""
RIFF DAG ONTOLOGY - The Vocabulary of the Viewer

If schemas.py is the Grammar (how records are shaped),
ontology.py is the Dictionary (the words records may use).

This module defines:
- NodeKind: closed set of display categories for nodes
- Mode: input modes of the interactive state machine
- DagView: the two textual layouts of the neighborhood pane
- WarningKind: categories of non-fatal ingestion warnings
- classify_kind(): total mapping from raw record hints to a NodeKind
"""
from typing import Iterable, Optional
from enum import Enum


# =============================================================================
# ENUMS (The Vocabulary)
# =============================================================================

class NodeKind(str, Enum):
    """Display category of a node. Used for emphasis only, never for graph logic."""
    PROMPT = "prompt"
    RESPONSE = "response"
    TOOL = "tool"
    ERROR = "error"
    EVENT = "event"
    GENERIC = "generic"


class Mode(str, Enum):
    """Input modes of the interactive loop."""
    NORMAL = "normal"
    FILTER = "filter"


class DagView(str, Enum):
    """Layouts for the neighborhood pane."""
    LAYERS = "layers"      # stacked rows, ancestors above, descendants below
    COLUMNS = "columns"    # one column per layer, left to right


class WarningKind(str, Enum):
    """Categories of recoverable ingestion issues."""
    PARSE_ERROR = "parse_error"
    DUPLICATE_NODE = "duplicate_node"
    DANGLING_EDGE = "dangling_edge"


# Order matters: the first matching word wins when scanning tags.
_TAG_KEYWORDS = (
    ("prompt", NodeKind.PROMPT),
    ("response", NodeKind.RESPONSE),
    ("tool", NodeKind.TOOL),
    ("error", NodeKind.ERROR),
    ("event", NodeKind.EVENT),
)


def parse_kind(value: Optional[str]) -> Optional[NodeKind]:
    """Map a raw string onto a NodeKind, or None if it names no member."""
    if not value:
        return None
    try:
        return NodeKind(value.strip().lower())
    except ValueError:
        return None


def classify_kind(
    kind: Optional[str] = None,
    node_type: Optional[str] = None,
    tags: Iterable[str] = (),
) -> NodeKind:
    """
    Derive the display kind of a node.

    Precedence:
        1. explicit `kind` field, if it names a member
        2. `node_type` field, if it names a member
        3. first tag containing one of the kind keywords
        4. GENERIC

    Always returns a member; unknown hints fall through to GENERIC.
    """
    explicit = parse_kind(kind) or parse_kind(node_type)
    if explicit is not None:
        return explicit

    for tag in tags:
        lower = tag.lower()
        for word, node_kind in _TAG_KEYWORDS:
            if word in lower:
                return node_kind

    return NodeKind.GENERIC
