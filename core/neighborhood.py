"""
RIFF DAG NEIGHBORHOOD - Depth-Bounded Ancestor/Descendant Layers

Computes the local context of one node: who led to it, and what followed.

Algorithm:
- Two breadth-first traversals from the selected node, one backward along
  parents, one forward along children.
- Each traversal keeps its own visited set (seeded with the center), so a
  node is placed at most once per direction, at its shortest distance.
  This makes cyclic input safe and bounds the work by branching^depth,
  independent of total graph size.
- Layer members are ordered by ingestion `seq`, never by id or label.
- Traversal stops at `depth` or at the first empty layer.

Dangling edges are not part of the rustworkx graph, so they are invisible
here by construction.
"""
import msgspec
from typing import Callable, List, Set, Tuple

from core.graph_db import GraphStore


DEFAULT_DEPTH = 2
MAX_DEPTH = 8

Layer = Tuple[str, ...]


class Neighborhood(msgspec.Struct, frozen=True, kw_only=True):
    """Layers around a center node. Index 0 of each list is distance 1."""
    center: str
    depth: int
    ancestors: List[Layer] = msgspec.field(default_factory=list)
    descendants: List[Layer] = msgspec.field(default_factory=list)

    @property
    def is_isolated(self) -> bool:
        return not self.ancestors and not self.descendants

    def size(self) -> int:
        """Number of distinct positions shown, center included."""
        return 1 + sum(len(l) for l in self.ancestors) + sum(len(l) for l in self.descendants)


def clamp_depth(depth: int, max_depth: int = MAX_DEPTH) -> int:
    """Clamp a requested depth into [0, max_depth]."""
    return min(max(0, depth), max_depth)


def bfs_layers(
    store: GraphStore,
    start: str,
    step: Callable[[str], List[str]],
    depth: int,
) -> List[Layer]:
    """
    Breadth-first layers from `start` using `step` to expand a node.

    Returns:
        [layer_1, layer_2, ...] with at most `depth` entries, none empty.
    """
    visited: Set[str] = {start}
    frontier: List[str] = [start]
    layers: List[Layer] = []

    for _ in range(depth):
        found: List[str] = []
        for node_id in frontier:
            for neighbor in step(node_id):
                if neighbor not in visited:
                    visited.add(neighbor)
                    found.append(neighbor)
        if not found:
            break
        found.sort(key=lambda nid: store.get_node(nid).seq)
        layers.append(tuple(found))
        frontier = found

    return layers


def compute_neighborhood(
    store: GraphStore,
    node_id: str,
    depth: int = DEFAULT_DEPTH,
    max_depth: int = MAX_DEPTH,
) -> Neighborhood:
    """
    Ancestor and descendant layers of `node_id` up to `depth`.

    `depth` is clamped into [0, max_depth]. An id missing from the store
    yields an empty neighborhood.
    """
    depth = clamp_depth(depth, max_depth)
    if not store.has_node(node_id):
        return Neighborhood(center=node_id, depth=depth)

    return Neighborhood(
        center=node_id,
        depth=depth,
        ancestors=bfs_layers(store, node_id, store.parents_of, depth),
        descendants=bfs_layers(store, node_id, store.children_of, depth),
    )
