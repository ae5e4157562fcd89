from __future__ import annotations

"""
Typer CLI entry point for the zap logging-message analyzer.

    logstyle [-v] DIR

Analyzes the Go package in DIR and prints one line per non-constant zap
log message:

    main.go:11:2: call must use a string literal or a constant

The exit status is 0 whenever the analysis completes, with or without
diagnostics. If the package cannot be loaded or type-checked, a single
"Error: <message>." line goes to stderr and the exit status is 1.
"""

import logging
import sys

import typer
from rich.console import Console
from rich.logging import RichHandler

from logstyle.analyzer import analyze as run_analysis
from logstyle.config import Config, get_default_config
from logstyle.errors import AnalysisError
from logstyle.reporting.console import print_summary

logger = logging.getLogger(__name__)

app = typer.Typer(help="logstyle - require constant messages in zap Logger calls.")


def _setup_logging(verbose: bool) -> None:
    """Route log records to stderr through Rich when verbose; otherwise stay silent."""
    package_logger = logging.getLogger("logstyle")
    if not verbose:
        if not package_logger.handlers:
            package_logger.addHandler(logging.NullHandler())
        return
    package_logger.setLevel(logging.DEBUG)
    if not any(isinstance(h, RichHandler) for h in package_logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
        package_logger.addHandler(handler)


@app.command()
def analyze(
    directory: str = typer.Argument(
        ...,
        help="Directory holding the Go package to analyze.",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Log progress to stderr and print a summary after the run.",
    ),
) -> None:
    """
    Report zap Debug/Info/Warn/Error calls whose message is not a literal or constant.

    Uses the rules registered in config.get_default_config().
    """
    _setup_logging(verbose)
    config: Config = get_default_config()

    try:
        summary = run_analysis(sys.stdout, directory, config)
    except AnalysisError as exc:
        logger.debug("Analysis of %s failed", directory, exc_info=True)
        typer.echo(f"Error: {exc}.", err=True)
        raise typer.Exit(code=1)

    if verbose:
        print_summary(summary.files, summary.counts, summary.rule_ids)


def main() -> None:
    """Entry point for `python -m logstyle.main` and the logstyle script."""
    app()


if __name__ == "__main__":
    main()
