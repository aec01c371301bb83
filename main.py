"""
RIFF DAG TUI - Entry Point and CLI

Three-pane terminal inspector for node/edge JSONL streams (conversation
turns, session events, memory spans).

Usage:
    # Browse the embedded sample dataset
    python main.py

    # Browse a file
    python main.py events.jsonl
    python main.py --input events.jsonl --depth 3 --filter tool

    # Read the stream from an upstream tool
    search-tool --as-jsonl | python main.py -

    # Headless: ingestion report, one neighborhood, normalized export
    python main.py events.jsonl --check
    python main.py events.jsonl --show s1-r1
    python main.py events.jsonl --dump

Keys (normal mode):
    ↑/k ↓/j move · / filter · c clear · Tab layout · w warnings · ? help · q quit

Exit codes:
    0  clean quit or headless success
    1  unreadable input, invalid configuration, unknown --show id, no terminal
    2  invalid command-line arguments
"""
import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console

from core.neighborhood import compute_neighborhood
from core.ontology import DagView
from infrastructure.config import ConfigError, RiffConfig, load_config
from infrastructure.data_loader import IngestResult, IngestionError, check_size, load_graph
from infrastructure.diagnostics import build_report, print_report
from infrastructure.logger import setup_logging
from viz.layered import render_neighborhood

logger = logging.getLogger(__name__)

err_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="riff-dag-tui",
        description="Three-pane DAG inspector for riff/memory spans",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument("path", nargs="?", help="JSONL file with node/edge events ('-' for stdin)")
    parser.add_argument("-i", "--input", dest="input_path", help="Same as the positional path")

    parser.add_argument("--depth", type=int, help="Neighborhood depth (default 2)")
    parser.add_argument("--filter", dest="initial_filter", help="Initial filter query")
    parser.add_argument("--fuzzy", action="store_true", default=None,
                        help="Also match characters in order, not only substrings")
    parser.add_argument("--match", dest="match_fields",
                        help="Comma-separated fields to filter on (id,label,span,tags)")
    parser.add_argument("--view", dest="dag_view", choices=[v.value for v in DagView],
                        help="Initial DAG layout")
    parser.add_argument("--warn-threshold", dest="node_warn_threshold", type=int,
                        help="Node count above which a size warning is shown")

    parser.add_argument("--config", help="TOML configuration file")
    parser.add_argument("--log-file", help="Append logs to this file")
    parser.add_argument("--log-level", help="DEBUG, INFO, WARNING, ERROR")

    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--check", action="store_true", help="Print an ingestion report and exit")
    mode.add_argument("--show", metavar="NODE_ID", help="Print the neighborhood of one node and exit")
    mode.add_argument("--dump", action="store_true", help="Print the normalized JSONL and exit")

    return parser


def resolve_source(args: argparse.Namespace, parser: argparse.ArgumentParser) -> Optional[str]:
    if args.path and args.input_path and args.path != args.input_path:
        parser.error("give the input either positionally or with --input, not both")
    return args.input_path or args.path


def config_overrides(args: argparse.Namespace) -> dict:
    match_fields = None
    if args.match_fields:
        match_fields = [f.strip() for f in args.match_fields.split(",") if f.strip()]
    return {
        "depth": args.depth,
        "initial_filter": args.initial_filter,
        "fuzzy": args.fuzzy,
        "match_fields": match_fields,
        "dag_view": args.dag_view,
        "node_warn_threshold": args.node_warn_threshold,
        "log_file": args.log_file,
        "log_level": args.log_level,
    }


def fail(message: str) -> None:
    """Report a fatal error and exit with status 1."""
    err_console.print(f"[bold red]error:[/bold red] {message}", highlight=False)
    sys.exit(1)


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_check(result: IngestResult, size_warning: Optional[str], console: Console) -> None:
    """Print the ingestion report."""
    print_report(build_report(result, size_warning), console)


def cmd_show(result: IngestResult, config: RiffConfig, node_id: str, console: Console) -> None:
    """Print one node's neighborhood without entering the UI."""
    if not result.store.has_node(node_id):
        fail(f"node not found: {node_id}")
    hood = compute_neighborhood(result.store, node_id, config.depth, config.max_depth)
    console.print(render_neighborhood(result.store, hood, config.dag_view))


def cmd_dump(result: IngestResult) -> None:
    """Write the normalized JSONL to stdout."""
    sys.stdout.write(result.store.to_jsonl())


def cmd_tui(result: IngestResult, config: RiffConfig, size_warning: Optional[str]) -> None:
    """Run the interactive three-pane UI."""
    from tui.loop import run_app
    from tui.state import AppState

    state = AppState(
        result.store,
        config=config,
        warnings=result.warnings,
        source_name=result.source_name,
        size_warning=size_warning,
    )
    try:
        run_app(state)
    except OSError as e:
        fail(f"cannot use the terminal: {e.strerror or e}")


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    source = resolve_source(args, parser)

    try:
        config = load_config(args.config, overrides=config_overrides(args))
    except ConfigError as e:
        fail(str(e))

    try:
        setup_logging(config.log_level, config.log_file)
    except OSError as e:
        fail(f"cannot open log file {config.log_file}: {e.strerror or e}")

    try:
        result = load_graph(source)
    except IngestionError as e:
        fail(str(e))

    size_warning = check_size(result, config.node_warn_threshold)
    console = Console()

    if args.check:
        cmd_check(result, size_warning, console)
    elif args.show:
        cmd_show(result, config, args.show, console)
    elif args.dump:
        cmd_dump(result)
    else:
        cmd_tui(result, config, size_warning)


if __name__ == "__main__":
    main()
