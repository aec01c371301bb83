"""
RIFF DAG DIAGNOSTICS - Ingestion Report

Summarizes what the loader found, for `--check` and for the in-app
warnings panel. Outputs clear [CLEAN] / [WARN] markers for rapid
troubleshooting of upstream producers.

Usage:
    from infrastructure.diagnostics import build_report, print_report

    report = build_report(result)
    print_report(report, console)
"""
from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from rich.console import Console, Group
from rich.table import Table
from rich.text import Text

from core.ontology import NodeKind, WarningKind
from core.schemas import IngestWarning
from infrastructure.data_loader import IngestResult


# =============================================================================
# STATE MARKERS
# =============================================================================

class StateMarker:
    """Markers for diagnostic output (rich markup and plain)."""
    CLEAN = "[bold green]\\[CLEAN][/bold green]"
    WARN = "[bold red]\\[WARN][/bold red]"

    CLEAN_PLAIN = "[CLEAN]"
    WARN_PLAIN = "[WARN]"


# =============================================================================
# REPORT
# =============================================================================

@dataclass
class IngestReport:
    """Aggregated counts for one ingestion run."""
    source_name: str
    lines_read: int
    node_count: int
    edge_count: int
    dangling_count: int
    span_count: int
    kinds: Dict[str, int] = field(default_factory=dict)
    warning_counts: Dict[str, int] = field(default_factory=dict)
    warnings: List[IngestWarning] = field(default_factory=list)
    size_warning: Optional[str] = None

    @property
    def is_clean(self) -> bool:
        return not self.warnings and self.size_warning is None

    @property
    def marker(self) -> str:
        return StateMarker.CLEAN_PLAIN if self.is_clean else StateMarker.WARN_PLAIN


def build_report(result: IngestResult, size_warning: Optional[str] = None) -> IngestReport:
    """Collect the numbers shown by `--check`."""
    store = result.store
    nodes = store.get_all_nodes()

    kinds = Counter(n.kind.value for n in nodes)
    warning_counts = Counter(w.kind.value for w in result.warnings)

    return IngestReport(
        source_name=result.source_name,
        lines_read=result.lines_read,
        node_count=store.node_count,
        edge_count=store.edge_count,
        dangling_count=len(store.dangling_edges()),
        span_count=len({n.span for n in nodes if n.span}),
        kinds={k.value: kinds.get(k.value, 0) for k in NodeKind},
        warning_counts={k.value: warning_counts.get(k.value, 0) for k in WarningKind},
        warnings=list(result.warnings),
        size_warning=size_warning,
    )


def warnings_table(warnings: List[IngestWarning], limit: Optional[int] = None) -> Table:
    """One row per warning: kind, line, message."""
    table = Table(expand=True, show_edge=False, pad_edge=False)
    table.add_column("kind", style="yellow", no_wrap=True)
    table.add_column("line", justify="right", style="dim", no_wrap=True)
    table.add_column("message", overflow="fold")

    shown = warnings if limit is None else warnings[:limit]
    for w in shown:
        table.add_row(w.kind.value, "" if w.line is None else str(w.line), w.message)

    if limit is not None and len(warnings) > limit:
        table.add_row("", "", Text(f"... and {len(warnings) - limit} more", style="dim"))
    return table


def render_report(report: IngestReport, warning_limit: Optional[int] = 50) -> Group:
    """Rich renderable for a report."""
    marker = StateMarker.CLEAN if report.is_clean else StateMarker.WARN

    summary = Table.grid(padding=(0, 2))
    summary.add_column(style="bold")
    summary.add_column()
    summary.add_row("source", report.source_name)
    summary.add_row("lines", str(report.lines_read))
    summary.add_row("nodes", str(report.node_count))
    summary.add_row("edges", f"{report.edge_count} ({report.dangling_count} dangling)")
    summary.add_row("spans", str(report.span_count))
    summary.add_row("kinds", ", ".join(f"{k}={v}" for k, v in report.kinds.items() if v))
    summary.add_row("warnings", ", ".join(f"{k}={v}" for k, v in report.warning_counts.items()))

    parts = [Text.from_markup(f"{marker} riff-dag ingestion report"), summary]
    if report.size_warning:
        parts.append(Text(report.size_warning, style="yellow"))
    if report.warnings:
        parts.append(warnings_table(report.warnings, limit=warning_limit))
    return Group(*parts)


def print_report(report: IngestReport, console: Optional[Console] = None) -> None:
    """Print a report to the console."""
    (console or Console()).print(render_report(report))
