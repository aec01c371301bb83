"""
Unit tests for infrastructure/data_loader.py

Tests the one-pass ingestion pipeline:
- Bad lines become warnings, never abort the load
- Duplicate and dangling diagnostics
- Source handling (file, stdin, sample, missing file)
- Soft size warning
"""
import io

import pytest

from core.ontology import NodeKind, WarningKind
from infrastructure.data_loader import (
    IngestionError,
    check_size,
    ingest_lines,
    load_graph,
)


# =============================================================================
# PIPELINE
# =============================================================================

def test_scenario_loads_clean(scenario_lines):
    result = ingest_lines(scenario_lines)

    assert result.warnings == []
    assert result.store.node_count == 2
    assert result.store.edge_count == 1
    assert result.lines_read == 3


def test_bad_lines_are_skipped_with_warnings():
    """
    Validate that malformed lines do not abort ingestion.

    Verifies:
    - Valid lines on either side of a bad one are loaded
    - One PARSE_ERROR warning per bad line, with its line number
    - Blank lines are skipped silently
    """
    result = ingest_lines([
        '{"type":"node","id":"a"}',
        '{broken',
        '',
        '{"type":"mystery","id":"q"}',
        '{"type":"node","id":"b"}',
    ])

    assert result.store.node_ids() == ["a", "b"]
    parse_errors = result.warnings_of(WarningKind.PARSE_ERROR)
    assert [w.line for w in parse_errors] == [2, 4]
    assert len(result.warnings) == 2


def test_duplicate_node_warning_and_overwrite():
    result = ingest_lines([
        '{"type":"node","id":"a","label":"first"}',
        '{"type":"node","id":"a","label":"second"}',
    ])

    dups = result.warnings_of(WarningKind.DUPLICATE_NODE)
    assert len(dups) == 1
    assert dups[0].line == 2
    assert "'a'" in dups[0].message
    assert result.store.get_node("a").label == "second"


def test_unresolved_edge_gives_one_dangling_warning():
    """
    Validate the dangling-edge scenario.

    Verifies:
    - Exactly one DANGLING_EDGE warning
    - The warning names both missing nodes and the edge's line
    - The edge contributes to no traversal
    """
    result = ingest_lines(['{"type":"edge","from":"x","to":"y"}'])

    dangling = result.warnings_of(WarningKind.DANGLING_EDGE)
    assert len(dangling) == 1
    assert dangling[0].line == 1
    assert "x, y" in dangling[0].message
    assert result.store.children_of("x") == []


def test_edge_resolved_later_gives_no_warning():
    result = ingest_lines([
        '{"type":"edge","from":"a","to":"b"}',
        '{"type":"node","id":"a"}',
        '{"type":"node","id":"b"}',
    ])
    assert result.warnings == []
    assert result.store.children_of("a") == ["b"]


def test_warnings_are_logged(caplog):
    with caplog.at_level("WARNING", logger="infrastructure.data_loader"):
        ingest_lines(['{bad'], source_name="feed.jsonl")
    assert "feed.jsonl: 1 ingestion warning(s)" in caplog.text


# =============================================================================
# SOURCES
# =============================================================================

def test_load_sample_when_no_source(sample_result):
    """
    Validate the embedded sample dataset.

    Verifies:
    - Loads without warnings
    - The edge that precedes its nodes is resolved
    - Kinds are derived from tags and node_type
    """
    store = sample_result.store

    assert sample_result.source_name == "<sample>"
    assert sample_result.warnings == []
    assert store.node_count == 11
    assert store.children_of("s2-p1") == ["s2-r1"]
    assert store.get_node("s1-p1").kind is NodeKind.PROMPT
    assert store.get_node("s2-t1").kind is NodeKind.TOOL
    assert store.get_node("s1-m1").kind is NodeKind.EVENT


def test_load_from_file(jsonl_file, scenario_lines):
    path = jsonl_file(scenario_lines)
    result = load_graph(str(path))

    assert result.source_name == str(path)
    assert result.store.node_ids() == ["a", "b"]


def test_load_from_file_with_invalid_utf8(tmp_path):
    path = tmp_path / "mixed.jsonl"
    path.write_bytes(b'{"type":"node","id":"a"}\n\xff\xfe garbage\n{"type":"node","id":"b"}\n')

    result = load_graph(path)

    assert result.store.node_ids() == ["a", "b"]
    assert len(result.warnings_of(WarningKind.PARSE_ERROR)) == 1


def test_missing_file_raises_ingestion_error(tmp_path):
    with pytest.raises(IngestionError) as exc_info:
        load_graph(tmp_path / "nope.jsonl")
    assert "nope.jsonl" in str(exc_info.value)


def test_load_from_stdin(monkeypatch, scenario_lines):
    monkeypatch.setattr("sys.stdin", io.StringIO("\n".join(scenario_lines)))

    result = load_graph("-")

    assert result.source_name == "<stdin>"
    assert result.store.node_ids() == ["a", "b"]


# =============================================================================
# SIZE WARNING
# =============================================================================

def test_check_size(sample_result):
    assert check_size(sample_result, threshold=100) is None
    assert check_size(sample_result, threshold=0) is None

    message = check_size(sample_result, threshold=5)
    assert message.startswith("11 nodes exceeds the soft limit of 5")
