"""
RIFF DAG CORE - Central exports for the graph model.

This module provides access to:
- Record parsing (parse_line, RecordParseError)
- The graph store (GraphStore)
- Filtering, selection and neighborhood computation
"""

from core.ontology import DagView, Mode, NodeKind, WarningKind, classify_kind
from core.schemas import EdgeData, EdgeRecord, IngestWarning, NodeData, NodeRecord
from core.parser import RecordParseError, parse_line
from core.graph_db import GraphError, GraphStore, NodeNotFoundError
from core.filter_engine import FilterEngine, FilteredView
from core.selection import SelectionModel
from core.neighborhood import Neighborhood, compute_neighborhood

__all__ = [
    # Vocabulary
    "DagView",
    "Mode",
    "NodeKind",
    "WarningKind",
    "classify_kind",
    # Records
    "EdgeData",
    "EdgeRecord",
    "IngestWarning",
    "NodeData",
    "NodeRecord",
    "RecordParseError",
    "parse_line",
    # Graph
    "GraphError",
    "GraphStore",
    "NodeNotFoundError",
    # Interaction model
    "FilterEngine",
    "FilteredView",
    "SelectionModel",
    "Neighborhood",
    "compute_neighborhood",
]
