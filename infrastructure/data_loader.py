"""
RIFF DAG DATA LOADER - The Digestion System

Reads the node/edge JSONL stream once, start to finish, into a GraphStore.

Principles:
1. ONE PASS: every line is parsed and applied in arrival order
2. NEVER ABORT ON A LINE: bad lines become warnings, not exceptions
3. FAIL EARLY ON THE SOURCE: an unopenable input is fatal before the UI

Sources:
- a filesystem path
- "-" for standard input (an upstream tool piping its results)
- None for the embedded sample dataset

Warnings are collected and returned, never printed mid-stream. Dangling
edges are only known at end of stream, so they are reported last.
"""
import logging
from dataclasses import dataclass, field
import sys
from pathlib import Path
from typing import Iterable, List, Optional, TextIO

from core.graph_db import GraphStore
from core.ontology import WarningKind
from core.parser import RecordParseError, parse_line
from core.schemas import EdgeData, EdgeRecord, IngestWarning

logger = logging.getLogger(__name__)

SAMPLE_PATH = Path(__file__).parent / "sample.jsonl"
STDIN_SOURCE = "-"


# =============================================================================
# ERRORS
# =============================================================================

class DataLoadError(Exception):
    """Base exception for data loading errors."""
    pass


class IngestionError(DataLoadError):
    """Raised when the input source cannot be opened or read at all."""
    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = reason
        super().__init__(f"Cannot read input {source}: {reason}")


# =============================================================================
# RESULT
# =============================================================================

@dataclass
class IngestResult:
    """A populated store plus everything worth telling the operator."""
    store: GraphStore
    warnings: List[IngestWarning] = field(default_factory=list)
    source_name: str = "<sample>"
    lines_read: int = 0

    def warnings_of(self, kind: WarningKind) -> List[IngestWarning]:
        return [w for w in self.warnings if w.kind == kind]


# =============================================================================
# PIPELINE
# =============================================================================

def ingest_lines(
    lines: Iterable[str],
    store: Optional[GraphStore] = None,
    source_name: str = "<memory>",
) -> IngestResult:
    """
    Parse and apply every line, in order.

    Args:
        lines: Any iterable of text lines (a file object works)
        store: Store to populate; a fresh one is created if omitted
        source_name: Label used in reports

    Returns:
        IngestResult with the store and collected warnings
    """
    store = store if store is not None else GraphStore()
    warnings: List[IngestWarning] = []
    lines_read = 0

    for lineno, line in enumerate(lines, start=1):
        lines_read = lineno
        if not line.strip():
            continue

        try:
            record = parse_line(line, lineno)
        except RecordParseError as e:
            warnings.append(IngestWarning(
                kind=WarningKind.PARSE_ERROR, line=lineno, message=e.reason,
            ))
            continue

        if isinstance(record, EdgeRecord):
            store.add_edge(EdgeData(
                source_id=record.source_id,
                target_id=record.target_id,
                label=record.label,
                line=lineno,
            ))
        else:
            if not store.upsert_node(record.to_node_data(seq=0)):
                warnings.append(IngestWarning(
                    kind=WarningKind.DUPLICATE_NODE,
                    line=lineno,
                    message=f"node {record.id!r} redefined; attributes overwritten",
                ))

    for edge in store.dangling_edges():
        missing = [nid for nid in (edge.source_id, edge.target_id) if not store.has_node(nid)]
        warnings.append(IngestWarning(
            kind=WarningKind.DANGLING_EDGE,
            line=edge.line,
            message=f"edge {edge.source_id} -> {edge.target_id} references missing node(s): "
                    + ", ".join(missing),
        ))

    for warning in warnings:
        logger.debug("%s: %s", source_name, warning)
    if warnings:
        logger.warning("%s: %d ingestion warning(s)", source_name, len(warnings))

    logger.info(
        "Loaded %s: %d nodes, %d edges (%d dangling), %d warnings",
        source_name, store.node_count, store.edge_count,
        len(store.dangling_edges()), len(warnings),
    )

    return IngestResult(
        store=store,
        warnings=warnings,
        source_name=source_name,
        lines_read=lines_read,
    )


def _ingest_stream(stream: TextIO, source_name: str) -> IngestResult:
    try:
        return ingest_lines(stream, source_name=source_name)
    except OSError as e:
        raise IngestionError(source_name, e.strerror or str(e)) from e


def load_graph(source: Optional[str | Path] = None) -> IngestResult:
    """
    Load the graph from a path, stdin ("-"), or the embedded sample (None).

    Raises:
        IngestionError: If the source cannot be opened or read
    """
    if source is None:
        with open(SAMPLE_PATH, encoding="utf-8") as f:
            return ingest_lines(f, source_name="<sample>")

    if str(source) == STDIN_SOURCE:
        stream = sys.stdin
        if hasattr(stream, "reconfigure"):
            stream.reconfigure(errors="replace")
        return _ingest_stream(stream, "<stdin>")

    path = Path(source)
    try:
        f = open(path, encoding="utf-8", errors="replace")
    except OSError as e:
        raise IngestionError(str(path), e.strerror or str(e)) from e

    with f:
        return _ingest_stream(f, str(path))


def check_size(result: IngestResult, threshold: int) -> Optional[str]:
    """Soft warning text when the graph exceeds `threshold` nodes."""
    count = result.store.node_count
    if threshold > 0 and count > threshold:
        message = f"{count} nodes exceeds the soft limit of {threshold}; rendering may slow down"
        logger.warning(message)
        return message
    return None
