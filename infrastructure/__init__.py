"""
RIFF DAG INFRASTRUCTURE - System-Level Modules

This package contains infrastructure components:
- config: layered configuration (defaults, TOML, environment, CLI)
- data_loader: one-pass JSONL ingestion into the graph store
- diagnostics: ingestion reports and warning tables
- logger: logging handlers that coexist with the full-screen UI
"""

from infrastructure.config import ConfigError, RiffConfig, load_config
from infrastructure.data_loader import (
    DataLoadError,
    IngestResult,
    IngestionError,
    ingest_lines,
    load_graph,
)

__all__ = [
    "ConfigError",
    "RiffConfig",
    "load_config",
    "DataLoadError",
    "IngestResult",
    "IngestionError",
    "ingest_lines",
    "load_graph",
]
