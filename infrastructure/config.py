"""
RIFF DAG CONFIG - Layered Viewer Configuration

Configuration is resolved once at startup, in increasing precedence:
    1. defaults (RiffConfig field defaults)
    2. TOML file (`--config`), either a `[riff]` table or top-level keys
    3. environment variables `RIFF_DAG_<FIELD>`
    4. command-line flags

Every layer is validated by msgspec.convert, so a bad value anywhere is
reported as a ConfigError before the terminal is touched.

Usage:
    from infrastructure.config import load_config

    config = load_config(path=args.config, overrides={"depth": 3})
"""
import msgspec
import os
import tomllib
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

from core.filter_engine import MATCH_FIELDS
from core.ontology import DagView


ENV_PREFIX = "RIFF_DAG_"
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when configuration cannot be loaded or validated."""
    pass


class RiffConfig(msgspec.Struct, kw_only=True, frozen=True, forbid_unknown_fields=True):
    """Resolved viewer configuration."""
    depth: int = 2                                  # neighborhood depth
    max_depth: int = 8                              # upper clamp for depth
    node_warn_threshold: int = 20_000               # soft size warning
    match_fields: Tuple[str, ...] = ("id", "label", "span", "tags")
    fuzzy: bool = False
    dag_view: DagView = DagView.LAYERS
    initial_filter: str = ""
    page_size: int = 10                             # rows moved by PageUp/PageDown
    log_level: str = "WARNING"
    log_file: Optional[str] = None

    def __post_init__(self):
        if self.depth < 0:
            raise ValueError("depth must be >= 0")
        if self.max_depth < 0:
            raise ValueError("max_depth must be >= 0")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")
        if not self.match_fields:
            raise ValueError("match_fields must not be empty")
        unknown = [f for f in self.match_fields if f not in MATCH_FIELDS]
        if unknown:
            raise ValueError(f"unknown match_fields: {unknown}")
        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"unknown log_level: {self.log_level}")


# =============================================================================
# LAYER LOADERS
# =============================================================================

def load_toml_config(path: Path) -> Dict[str, Any]:
    """
    Load raw settings from a TOML file.

    Raises:
        ConfigError: If the file is missing or not valid TOML
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Cannot read config file {path}: {e.strerror or e}") from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in {path}: {e}") from e

    section = data.get("riff", data)
    if not isinstance(section, dict):
        raise ConfigError(f"[riff] in {path} must be a table")
    return section


def env_overrides(environ: Mapping[str, str]) -> Dict[str, Any]:
    """Collect `RIFF_DAG_*` variables for known fields."""
    out: Dict[str, Any] = {}
    for name in RiffConfig.__struct_fields__:
        raw = environ.get(ENV_PREFIX + name.upper())
        if raw is None:
            continue
        if name == "match_fields":
            out[name] = [f.strip() for f in raw.split(",") if f.strip()]
        else:
            out[name] = raw
    return out


def load_config(
    path: Optional[str | Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> RiffConfig:
    """
    Resolve the effective configuration.

    Args:
        path: Optional TOML file
        overrides: Values from the command line; None entries are ignored
        environ: Environment mapping (defaults to os.environ)

    Raises:
        ConfigError: On unreadable files or invalid values
    """
    environ = os.environ if environ is None else environ

    merged: Dict[str, Any] = {}
    if path is not None:
        merged.update(load_toml_config(Path(path)))

    # Environment values are strings; convert them on their own so that
    # "3" becomes 3 without loosening validation of the TOML layer.
    env = env_overrides(environ)
    if env:
        try:
            env = msgspec.to_builtins(msgspec.convert(env, RiffConfig, strict=False))
        except (msgspec.ValidationError, ValueError) as e:
            raise ConfigError(f"Invalid {ENV_PREFIX}* environment value: {e}") from e
        merged.update({k: env[k] for k in env_overrides(environ)})

    if overrides:
        merged.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return msgspec.convert(merged, RiffConfig)
    except (msgspec.ValidationError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
