"""
RIFF DAG VISUALIZATION - The Terminal Cockpit

This package turns app state into rich renderables:
- core: kind styles, glyphs, node labels
- layered: the neighborhood pane (layers / columns)
- panes: the full three-pane frame
"""

from viz.core import KIND_GLYPHS, KIND_STYLES, node_text
from viz.layered import render_neighborhood

__all__ = [
    "KIND_GLYPHS",
    "KIND_STYLES",
    "node_text",
    "render_neighborhood",
]
