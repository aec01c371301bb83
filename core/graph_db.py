"""
RIFF DAG GRAPH STORE - The Rust-Accelerated Event Graph

This module bridges the stream's string ids with rustworkx's integer
indices, enabling:
- O(1) node lookup by business id
- Rust-native neighbor queries for the neighborhood renderer
- Append-only ingestion with retroactive edge resolution

Architecture (The Bridge Pattern):
  Python Layer
  - Uses string ids from the stream: "turn-1", "tool-call-7"
  - Calls: store.upsert_node(data), store.parents_of("turn-1")

  Bridge Layer (This File)
  - _node_map: Dict[str, int]  (id -> index)
  - _inv_map: Dict[int, str]   (index -> id)
  - _pending: edges waiting for one or both endpoints

  Rust Layer (rustworkx.PyDiGraph)
  - Holds every node and every RESOLVED edge
  - Dangling edges never enter it, so traversal cannot see them

Ordering:
  Nodes carry `seq`, the ordinal of their first arrival. Every neighbor
  list is returned in `seq` order, independent of the order edges arrived.

Thread Safety:
  NOT thread-safe. The store is populated once, then only read.
"""
import rustworkx as rx
from typing import Dict, Iterator, List, Optional, Tuple
import logging

from core.schemas import (
    EdgeData,
    NodeData,
    Record,
    edge_to_record,
    encode_record,
    node_to_record,
)

logger = logging.getLogger(__name__)

# (neighbor id, edge label or None)
LabeledNeighbor = Tuple[str, Optional[str]]


def join_edge_labels(edges: List[EdgeData]) -> Optional[str]:
    """Distinct non-empty labels in edge arrival order, comma-joined."""
    labels: List[str] = []
    for edge in sorted(edges, key=lambda e: e.seq):
        if edge.label and edge.label not in labels:
            labels.append(edge.label)
    return ", ".join(labels) if labels else None


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================

class GraphError(Exception):
    """Base exception for graph operations."""
    pass


class NodeNotFoundError(GraphError):
    """Raised when a node id is not in the graph."""
    def __init__(self, node_id: str):
        self.node_id = node_id
        super().__init__(f"Node not found: {node_id}")


# =============================================================================
# GRAPH STORE
# =============================================================================

class GraphStore:
    """
    In-memory event graph backed by rustworkx.

    All public methods accept/return string ids; translation to integer
    indices is handled internally.

    Usage:
        store = GraphStore()
        store.upsert_node(NodeData(id="a", label="root"))
        store.add_edge(EdgeData(source_id="a", target_id="b"))  # dangling
        store.upsert_node(NodeData(id="b", label="child"))      # resolves it

        store.children_of("a")   # ["b"]
        store.dangling_edges()   # []
    """

    def __init__(self):
        # Parallel edges are kept; neighbor queries de-duplicate.
        self._graph: rx.PyDiGraph = rx.PyDiGraph(multigraph=True)

        self._node_map: Dict[str, int] = {}
        self._inv_map: Dict[int, str] = {}

        # Every edge in arrival order, resolved or not
        self._edges: List[EdgeData] = []
        # Edges with at least one missing endpoint, keyed by edge seq
        self._pending: Dict[int, EdgeData] = {}
        # Missing node id -> seqs of pending edges waiting on it
        self._waiting: Dict[str, List[int]] = {}

        self._next_node_seq = 0

    # =========================================================================
    # PROPERTIES
    # =========================================================================

    @property
    def node_count(self) -> int:
        """Number of nodes in the graph."""
        return self._graph.num_nodes()

    @property
    def edge_count(self) -> int:
        """Number of edges ingested, including dangling ones."""
        return len(self._edges)

    @property
    def resolved_edge_count(self) -> int:
        """Number of edges with both endpoints present."""
        return self._graph.num_edges()

    @property
    def is_empty(self) -> bool:
        """True if graph has no nodes."""
        return self.node_count == 0

    # =========================================================================
    # NODE OPERATIONS
    # =========================================================================

    def upsert_node(self, data: NodeData) -> bool:
        """
        Insert a node, or overwrite the attributes of an existing one.

        Identity, `seq` and incident edges of an existing node are kept;
        only its attributes change (last writer wins).

        Args:
            data: Node payload. Its `seq` is assigned by the store.

        Returns:
            True if the node was new, False if it overwrote an existing node.
        """
        node_id = data.id

        if node_id in self._node_map:
            idx = self._node_map[node_id]
            data.seq = self._graph[idx].seq
            self._graph[idx] = data
            return False

        data.seq = self._next_node_seq
        self._next_node_seq += 1

        idx = self._graph.add_node(data)
        self._node_map[node_id] = idx
        self._inv_map[idx] = node_id

        self._resolve_pending(node_id)
        return True

    def get_node(self, node_id: str) -> NodeData:
        """
        Retrieve a node by its id.

        Raises:
            NodeNotFoundError: If node doesn't exist
        """
        if node_id not in self._node_map:
            raise NodeNotFoundError(node_id)
        return self._graph[self._node_map[node_id]]

    def find_node(self, node_id: str) -> Optional[NodeData]:
        """Retrieve a node by id, or None."""
        idx = self._node_map.get(node_id)
        if idx is None:
            return None
        return self._graph[idx]

    def has_node(self, node_id: str) -> bool:
        """Check if a node exists."""
        return node_id in self._node_map

    def get_all_nodes(self) -> List[NodeData]:
        """All nodes in ingestion order."""
        return sorted(self._graph.nodes(), key=lambda n: n.seq)

    def node_ids(self) -> List[str]:
        """All node ids in ingestion order."""
        return [n.id for n in self.get_all_nodes()]

    # =========================================================================
    # EDGE OPERATIONS
    # =========================================================================

    def add_edge(self, edge: EdgeData) -> bool:
        """
        Record a directed edge.

        Edges whose endpoints are not both known yet are kept as dangling
        and resolved automatically when the missing node arrives.

        Returns:
            True if the edge was resolved immediately, False if dangling.
        """
        edge.seq = len(self._edges)
        self._edges.append(edge)

        if self._link(edge):
            return True

        self._pending[edge.seq] = edge
        for endpoint in {edge.source_id, edge.target_id}:
            if endpoint not in self._node_map:
                self._waiting.setdefault(endpoint, []).append(edge.seq)
        return False

    def _link(self, edge: EdgeData) -> bool:
        src_idx = self._node_map.get(edge.source_id)
        tgt_idx = self._node_map.get(edge.target_id)
        if src_idx is None or tgt_idx is None:
            return False
        self._graph.add_edge(src_idx, tgt_idx, edge)
        return True

    def _resolve_pending(self, node_id: str) -> None:
        """Promote pending edges that the arrival of `node_id` completes."""
        resolved = 0
        for seq in self._waiting.pop(node_id, []):
            edge = self._pending.get(seq)
            if edge is not None and self._link(edge):
                del self._pending[seq]
                resolved += 1

        if resolved:
            logger.debug("Resolved %d pending edge(s) on arrival of %s", resolved, node_id)

    def dangling_edges(self) -> List[EdgeData]:
        """Edges still missing an endpoint, in arrival order."""
        return [self._pending[seq] for seq in sorted(self._pending)]

    def is_dangling(self, edge: EdgeData) -> bool:
        """True if the edge has not been resolved."""
        return edge.seq in self._pending

    # =========================================================================
    # ADJACENCY (Rust-Accelerated)
    # =========================================================================

    def _neighbor_edges(self, node_id: str, incoming: bool) -> List[LabeledNeighbor]:
        idx = self._node_map.get(node_id)
        if idx is None:
            return []

        if incoming:
            pairs = [(src, edge) for src, _, edge in self._graph.in_edges(idx)]
        else:
            pairs = [(tgt, edge) for _, tgt, edge in self._graph.out_edges(idx)]

        # Parallel edges collapse onto one neighbor
        grouped: Dict[int, List[EdgeData]] = {}
        for other, edge in pairs:
            grouped.setdefault(other, []).append(edge)

        ordered = sorted(grouped, key=lambda i: self._graph[i].seq)
        return [(self._inv_map[i], join_edge_labels(grouped[i])) for i in ordered]

    def incoming_edges(self, node_id: str) -> List[LabeledNeighbor]:
        """
        (parent id, edge label) pairs, parents in ingestion order.

        The label joins the distinct labels of all parallel edges, or is
        None when none of them carries one.
        """
        return self._neighbor_edges(node_id, incoming=True)

    def outgoing_edges(self, node_id: str) -> List[LabeledNeighbor]:
        """(child id, edge label) pairs, children in ingestion order."""
        return self._neighbor_edges(node_id, incoming=False)

    def edge_label(self, source_id: str, target_id: str) -> Optional[str]:
        """Label of the resolved edge(s) source -> target, or None."""
        src_idx = self._node_map.get(source_id)
        tgt_idx = self._node_map.get(target_id)
        if src_idx is None or tgt_idx is None:
            return None
        edges = [edge for _, tgt, edge in self._graph.out_edges(src_idx) if tgt == tgt_idx]
        return join_edge_labels(edges)

    def parents_of(self, node_id: str) -> List[str]:
        """
        Direct parents (sources of incoming edges), in ingestion order.

        Unknown ids yield an empty list rather than an error.
        """
        return [nid for nid, _ in self.incoming_edges(node_id)]

    def children_of(self, node_id: str) -> List[str]:
        """Direct children (targets of outgoing edges), in ingestion order."""
        return [nid for nid, _ in self.outgoing_edges(node_id)]

    def degree(self, node_id: str) -> Tuple[int, int]:
        """(distinct parents, distinct children) of a node."""
        return len(self.parents_of(node_id)), len(self.children_of(node_id))

    # =========================================================================
    # EXPORT
    # =========================================================================

    def iter_records(self) -> Iterator[Record]:
        """Nodes in ingestion order, then edges in arrival order."""
        for node in self.get_all_nodes():
            yield node_to_record(node)
        for edge in self._edges:
            yield edge_to_record(edge)

    def to_jsonl(self) -> str:
        """Normalized JSONL export that re-ingests to an identical store."""
        return "".join(encode_record(r).decode("utf-8") + "\n" for r in self.iter_records())

    # =========================================================================
    # INTERNAL UTILITIES
    # =========================================================================

    def __len__(self) -> int:
        """Return number of nodes."""
        return self.node_count

    def __contains__(self, node_id: str) -> bool:
        """Check if node exists."""
        return node_id in self._node_map

    def __repr__(self) -> str:
        return (
            f"GraphStore(nodes={self.node_count}, edges={self.edge_count}, "
            f"dangling={len(self._pending)})"
        )
