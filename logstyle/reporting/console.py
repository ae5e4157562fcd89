# Diagnostic output: plain grep-style lines on stdout, plus a Rich summary for --verbose.

from __future__ import annotations

from pathlib import Path
from typing import Mapping, Sequence, TextIO

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from logstyle.findings.models import Diagnostic


# Remediation hints per rule (shown with --verbose)
RULE_REMEDIATIONS: dict[str, str] = {
    "zap-logger-message": (
        "Pass a fixed message and move the variable parts into fields: "
        'logger.Info(fmt.Sprintf("user %s", id)) -> logger.Info("user", zap.String("id", id)).'
    ),
}


def format_diagnostic(diagnostic: Diagnostic) -> str:
    """
    Render a diagnostic as "<path>:<line>:<column>: <message>".

    Examples:
        >>> from logstyle.findings.models import Location
        >>> d = Diagnostic(rule_id="r", message="m", location=Location(path=Path("a.go"), line=3, column=2))
        >>> format_diagnostic(d)
        'a.go:3:2: m'
    """
    loc = diagnostic.location
    return f"{loc.path}:{loc.line}:{loc.column}: {diagnostic.message}"


def write_diagnostic(out: TextIO, diagnostic: Diagnostic) -> None:
    """Write one diagnostic line to out, newline terminated."""
    out.write(format_diagnostic(diagnostic) + "\n")


def print_summary(
    analyzed_files: Sequence[Path],
    counts: Mapping[str, int],
    rule_ids: Sequence[str],
    console: Console | None = None,
) -> None:
    """
    Print a per-file table and a totals panel for one run.

    counts maps a file path (as reported) to the number of diagnostics in
    it. Output goes to stderr by default so stdout stays line oriented.
    """
    if console is None:
        console = Console(stderr=True)

    total = sum(counts.values())
    if analyzed_files:
        _print_file_summary_table(analyzed_files, counts, console)

    if total:
        for rule_id in rule_ids:
            rem = RULE_REMEDIATIONS.get(rule_id)
            if rem:
                console.print(f"  [dim][Fix][/dim] [{rule_id}] {rem}")

    parts = [
        f"[bold]{len(analyzed_files)} file{'s' if len(analyzed_files) != 1 else ''}[/bold]",
        f"[bold]{total} diagnostic{'s' if total != 1 else ''}[/bold]",
    ]
    console.print()
    console.print(
        Panel(
            " | ".join(parts),
            title="logstyle",
            border_style="yellow" if total > 0 else "green",
            box=box.ROUNDED,
        )
    )


def _print_file_summary_table(
    analyzed_files: Sequence[Path],
    counts: Mapping[str, int],
    console: Console,
) -> None:
    """Print a table of clean vs flagged files."""
    table = Table(
        title="Files Summary",
        show_header=True,
        header_style="bold cyan",
        box=box.ROUNDED,
        padding=(0, 1),
    )
    table.add_column("File", style="white")
    table.add_column("Status", width=10)
    table.add_column("Diagnostics", justify="right", width=11)

    flagged = [p for p in analyzed_files if counts.get(str(p))]
    clean = [p for p in analyzed_files if not counts.get(str(p))]
    for p in sorted(flagged, key=str):
        table.add_row(str(p), Text("FLAGGED", style="bold yellow"), str(counts[str(p)]))
    for p in sorted(clean, key=str):
        table.add_row(str(p), Text("OK", style="bold green"), "0")

    console.print()
    console.print(Panel(table, border_style="cyan", box=box.ROUNDED))
