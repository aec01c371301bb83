"""
Pytest configuration and shared fixtures for the riff-dag test suite.
"""
import sys
from pathlib import Path

import pytest

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))


SCENARIO_LINES = [
    '{"type":"node","id":"a","label":"root"}',
    '{"type":"node","id":"b","label":"child"}',
    '{"type":"edge","from":"a","to":"b"}',
]


@pytest.fixture
def fresh_store():
    """Provide an empty GraphStore."""
    from core.graph_db import GraphStore
    return GraphStore()


@pytest.fixture
def scenario_lines():
    """The two-node root/child stream."""
    return list(SCENARIO_LINES)


@pytest.fixture
def diamond_lines():
    """
    A small layered graph:

        g -> a -> x
             b -> x -> c -> d
    """
    return [
        '{"type":"node","id":"g","label":"grandparent"}',
        '{"type":"node","id":"a","label":"first parent","tags":["prompt"]}',
        '{"type":"node","id":"b","label":"second parent","tags":["tool"]}',
        '{"type":"node","id":"x","label":"center","span":"s1"}',
        '{"type":"node","id":"c","label":"child","tags":["response"]}',
        '{"type":"node","id":"d","label":"grandchild"}',
        '{"type":"edge","from":"b","to":"x"}',
        '{"type":"edge","from":"a","to":"x"}',
        '{"type":"edge","from":"g","to":"a"}',
        '{"type":"edge","from":"x","to":"c"}',
        '{"type":"edge","from":"c","to":"d"}',
    ]


@pytest.fixture
def diamond_store(diamond_lines):
    """GraphStore loaded from diamond_lines."""
    from infrastructure.data_loader import ingest_lines
    return ingest_lines(diamond_lines).store


@pytest.fixture
def sample_result():
    """IngestResult for the embedded sample dataset."""
    from infrastructure.data_loader import load_graph
    return load_graph()


@pytest.fixture
def jsonl_file(tmp_path):
    """Write lines to a temporary .jsonl file and return its path."""
    def _write(lines, name="events.jsonl"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def restore_root_logger():
    """Undo setup_logging() after the test."""
    import logging
    from rich.logging import RichHandler
    from infrastructure import logger as riff_logger

    root = logging.getLogger()
    level = root.level
    yield root
    for handler in list(root.handlers):
        if isinstance(handler, (RichHandler, logging.FileHandler)):
            root.removeHandler(handler)
            handler.close()
    root.setLevel(level)
    riff_logger._console_handler = None
