"""
Unit tests for infrastructure/config.py

Tests layered configuration:
- Defaults
- TOML file ([riff] table or top-level keys)
- RIFF_DAG_* environment variables
- Command-line overrides
- Validation errors
"""
import pytest

from core.ontology import DagView
from infrastructure.config import ConfigError, RiffConfig, env_overrides, load_config


def test_defaults():
    config = load_config(environ={})

    assert config == RiffConfig()
    assert config.depth == 2
    assert config.match_fields == ("id", "label", "span", "tags")
    assert config.dag_view is DagView.LAYERS
    assert config.fuzzy is False


def test_toml_riff_table(tmp_path):
    path = tmp_path / "riff.toml"
    path.write_text('[riff]\ndepth = 4\ndag_view = "columns"\nmatch_fields = ["label"]\n')

    config = load_config(path, environ={})

    assert config.depth == 4
    assert config.dag_view is DagView.COLUMNS
    assert config.match_fields == ("label",)


def test_toml_top_level_keys(tmp_path):
    path = tmp_path / "riff.toml"
    path.write_text("fuzzy = true\npage_size = 5\n")

    config = load_config(path, environ={})

    assert config.fuzzy is True
    assert config.page_size == 5


def test_precedence_defaults_toml_env_cli(tmp_path):
    """
    Validate layer precedence.

    Verifies:
    - TOML overrides defaults
    - Environment overrides TOML
    - CLI overrides environment
    - None CLI values do not mask lower layers
    """
    path = tmp_path / "riff.toml"
    path.write_text("depth = 3\npage_size = 7\ninitial_filter = \"tool\"\n")
    environ = {"RIFF_DAG_DEPTH": "5", "RIFF_DAG_FUZZY": "true"}

    config = load_config(path, overrides={"depth": 6, "initial_filter": None}, environ=environ)

    assert config.depth == 6
    assert config.fuzzy is True
    assert config.page_size == 7
    assert config.initial_filter == "tool"

    config = load_config(path, overrides={}, environ=environ)
    assert config.depth == 5


def test_env_match_fields_comma_separated():
    assert env_overrides({"RIFF_DAG_MATCH_FIELDS": "label, tags,"}) == {"match_fields": ["label", "tags"]}

    config = load_config(environ={"RIFF_DAG_MATCH_FIELDS": "label,tags"})
    assert config.match_fields == ("label", "tags")


def test_unrelated_env_ignored():
    assert env_overrides({"HOME": "/root", "RIFF_DAG_UNKNOWN": "1"}) == {}


@pytest.mark.parametrize("overrides", [
    {"depth": -1},
    {"max_depth": -1},
    {"page_size": 0},
    {"match_fields": ["body"]},
    {"match_fields": []},
    {"log_level": "LOUD"},
    {"dag_view": "canvas"},
])
def test_invalid_values_raise_config_error(overrides):
    with pytest.raises(ConfigError):
        load_config(overrides=overrides, environ={})


def test_invalid_env_value_raises_config_error():
    with pytest.raises(ConfigError) as exc_info:
        load_config(environ={"RIFF_DAG_DEPTH": "deep"})
    assert "RIFF_DAG_" in str(exc_info.value)


def test_unknown_toml_key_rejected(tmp_path):
    path = tmp_path / "riff.toml"
    path.write_text("colour = \"blue\"\n")

    with pytest.raises(ConfigError):
        load_config(path, environ={})


def test_missing_and_malformed_toml(tmp_path):
    with pytest.raises(ConfigError):
        load_config(tmp_path / "absent.toml", environ={})

    bad = tmp_path / "bad.toml"
    bad.write_text("depth = = 3\n")
    with pytest.raises(ConfigError):
        load_config(bad, environ={})
