"""
Filter engine: the live, order-preserving subset of nodes matching a query.

Matching is case-insensitive substring by default. Fuzzy mode adds
ordered-subsequence matching, which accepts everything substring matching
accepts. Neither mode re-ranks: the view is always in ingestion order.
"""
from typing import Iterable, List, Sequence, Tuple

from core.graph_db import GraphStore
from core.schemas import NodeData


FilteredView = Tuple[str, ...]

MATCH_FIELDS = ("id", "label", "span", "tags")
DEFAULT_MATCH_FIELDS = MATCH_FIELDS


def normalize_query(query: str) -> str:
    return query.strip().lower()


def is_subsequence(needle: str, haystack: str) -> bool:
    """True if every char of `needle` appears in `haystack`, in order."""
    it = iter(haystack)
    return all(ch in it for ch in needle)


def field_values(node: NodeData, fields: Iterable[str]) -> List[str]:
    """Lowercased values of the selected fields; tags contribute one value each."""
    values = []
    for name in fields:
        if name == "tags":
            values.extend(tag.lower() for tag in node.tags)
        else:
            values.append(str(getattr(node, name)).lower())
    return values


class FilterEngine:
    """
    Maintains the Filtered View over a read-only GraphStore.

    Usage:
        engine = FilterEngine(store)
        view = engine.set_filter("tool")   # ("t3", "t9", ...)
        engine.set_filter("")              # every node, ingestion order
    """

    def __init__(
        self,
        store: GraphStore,
        match_fields: Sequence[str] = DEFAULT_MATCH_FIELDS,
        fuzzy: bool = False,
    ):
        unknown = [f for f in match_fields if f not in MATCH_FIELDS]
        if unknown or not match_fields:
            raise ValueError(f"Invalid match fields: {list(match_fields)}")

        self._store = store
        self._fields = tuple(match_fields)
        self._fuzzy = fuzzy

        # The store is read-only after ingestion; order it once.
        self._nodes: List[NodeData] = store.get_all_nodes()
        self._haystacks = [field_values(n, self._fields) for n in self._nodes]

        self._query = ""
        self._view: FilteredView = tuple(n.id for n in self._nodes)

    @property
    def query(self) -> str:
        """The active, normalized query."""
        return self._query

    @property
    def view(self) -> FilteredView:
        return self._view

    @property
    def fuzzy(self) -> bool:
        return self._fuzzy

    def matches(self, values: List[str], query: str) -> bool:
        if any(query in v for v in values):
            return True
        if self._fuzzy:
            return any(is_subsequence(query, v) for v in values)
        return False

    def set_filter(self, query: str) -> FilteredView:
        """
        Recompute the view from scratch for `query`.

        An empty (or whitespace-only) query yields every node.
        A query matching nothing yields an empty view, not an error.
        """
        q = normalize_query(query)
        self._query = q

        if not q:
            self._view = tuple(n.id for n in self._nodes)
        else:
            self._view = tuple(
                node.id
                for node, values in zip(self._nodes, self._haystacks)
                if self.matches(values, q)
            )
        return self._view
