"""
RIFF DAG SCHEMAS - The Grammar of the Input Stream

If ontology.py is the Dictionary (defining the words we can use),
schemas.py is the Grammar (defining how we structure sentences).

This module defines:
- NodeRecord / EdgeRecord: the two wire shapes of the JSONL stream,
  decoded as a msgspec tagged union on the `type` field
- NodeData / EdgeData: the payloads stored in the graph
- IngestWarning: a non-fatal issue found while loading

Design Principles:
1. STRICT TYPING: msgspec.Struct, no open dicts for records
2. TOLERANT SHAPES: unknown fields are ignored, optional fields default
3. KW_ONLY: enforce keyword arguments to prevent positional mix-ups
"""
import msgspec
from typing import Annotated, List, Optional, Union

from core.ontology import NodeKind, WarningKind, classify_kind


NonEmptyStr = Annotated[str, msgspec.Meta(min_length=1)]


# =============================================================================
# WIRE RECORDS (Tagged Union)
# =============================================================================

class NodeRecord(msgspec.Struct, kw_only=True, omit_defaults=True, tag_field="type", tag="node"):
    """
    One `{"type": "node", ...}` line.

    `ts` is exposed as `timestamp`. `kind` and `node_type` are optional
    superset fields used only to derive the display kind.
    """
    id: NonEmptyStr
    label: Optional[str] = None
    span: Optional[str] = None
    tags: Optional[List[str]] = None
    timestamp: Optional[str] = msgspec.field(default=None, name="ts")
    kind: Optional[str] = None
    node_type: Optional[str] = None

    def to_node_data(self, seq: int) -> "NodeData":
        """Normalize optional fields into a stored payload."""
        tags = list(self.tags or [])
        return NodeData(
            id=self.id,
            label=self.label or "",
            span=self.span or "",
            tags=tags,
            timestamp=self.timestamp or "",
            kind=classify_kind(self.kind, self.node_type, tags),
            seq=seq,
        )


class EdgeRecord(msgspec.Struct, kw_only=True, omit_defaults=True, tag_field="type", tag="edge"):
    """One `{"type": "edge", "from": ..., "to": ...}` line."""
    source_id: NonEmptyStr = msgspec.field(name="from")
    target_id: NonEmptyStr = msgspec.field(name="to")
    label: Optional[str] = None


Record = Union[NodeRecord, EdgeRecord]


# =============================================================================
# STORED PAYLOADS
# =============================================================================

class NodeData(msgspec.Struct, kw_only=True):
    """
    The payload attached to every node in the rustworkx graph.

    `seq` is the ingestion ordinal of the node's first arrival. It is the
    tie-breaker for every ordering the viewer shows, and it survives
    attribute overwrites by duplicate records.
    """
    id: str
    label: str = ""
    span: str = ""
    tags: List[str] = msgspec.field(default_factory=list)
    timestamp: str = ""
    kind: NodeKind = NodeKind.GENERIC
    seq: int = 0

    def display_label(self) -> str:
        """`id · label`, or just the id when the label is empty."""
        if not self.label:
            return self.id
        return f"{self.id} · {self.label}"


class EdgeData(msgspec.Struct, kw_only=True):
    """A directed edge as it arrived in the stream."""
    source_id: str
    target_id: str
    label: Optional[str] = None
    seq: int = 0
    line: Optional[int] = None


class IngestWarning(msgspec.Struct, kw_only=True, frozen=True):
    """A recoverable issue collected during ingestion."""
    kind: WarningKind
    message: str
    line: Optional[int] = None

    def __str__(self) -> str:
        where = f"line {self.line}: " if self.line is not None else ""
        return f"[{self.kind.value}] {where}{self.message}"


# =============================================================================
# SERIALIZATION HELPERS
# =============================================================================

_record_decoder = msgspec.json.Decoder(Record)
_encoder = msgspec.json.Encoder()


def decode_record(data: Union[str, bytes]) -> Record:
    """
    Decode one JSON object into a NodeRecord or EdgeRecord.

    Raises:
        msgspec.DecodeError: malformed JSON
        msgspec.ValidationError: missing/unknown `type` or invalid fields
    """
    return _record_decoder.decode(data)


def node_to_record(node: NodeData) -> NodeRecord:
    """
    Rebuild the wire record for a stored node.

    `kind` is always written: the derived kind can differ from what the
    tags alone would give (e.g. an explicit "generic" on a tool-tagged node).
    """
    return NodeRecord(
        id=node.id,
        label=node.label or None,
        span=node.span or None,
        tags=list(node.tags),
        timestamp=node.timestamp or None,
        kind=node.kind.value,
    )


def edge_to_record(edge: EdgeData) -> EdgeRecord:
    """Rebuild the wire record for a stored edge."""
    return EdgeRecord(source_id=edge.source_id, target_id=edge.target_id, label=edge.label)


def encode_record(record: Record) -> bytes:
    """Encode a record as one JSONL line (without the newline)."""
    return _encoder.encode(record)
