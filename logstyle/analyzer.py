# Analysis pipeline: load and type-check one package, then walk its files in order.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, TextIO

from logstyle.checker import Checker, TypeInfo
from logstyle.config import Config, get_default_config, get_enabled_rules
from logstyle.context import FileContext
from logstyle.findings.models import Diagnostic
from logstyle.gotypes import Package
from logstyle.importer import Importer
from logstyle.loader import find_module, import_path_of, parse_package
from logstyle.parser import create_parser
from logstyle.reporting.console import write_diagnostic
from logstyle.traversal import BuildContext
from logstyle.walker import Walker

logger = logging.getLogger(__name__)


@dataclass
class Program:
    """One parsed and fully type-checked package, ready to be walked."""

    package: Package
    files: List[FileContext]
    info: TypeInfo


@dataclass
class RunSummary:
    """What a run looked at and how many diagnostics each file produced."""

    files: List[Path] = field(default_factory=list)
    counts: Dict[str, int] = field(default_factory=dict)
    rule_ids: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(self.counts.values())


def load_program(directory: str | Path, build_context: Optional[BuildContext] = None) -> Program:
    """
    Parse and type-check the package in directory.

    Raises:
        LoadError: if the package cannot be read or parsed.
        TypeCheckError: if the package does not type-check.
    """
    parser = create_parser()
    parsed = parse_package(directory, parser, build_context)
    pkg_dir = Path(directory).resolve()
    path = import_path_of(pkg_dir, find_module(pkg_dir))
    package = Package(path, parsed.name, complete=True)
    logger.info("Type-checking package %s (%s)", parsed.name, path)

    importer = Importer(pkg_dir, parser, build_context)
    info = Checker(package, importer).check(parsed.files)
    return Program(package=package, files=parsed.files, info=info)


def iter_diagnostics(program: Program, config: Optional[Config] = None) -> Iterator[Diagnostic]:
    """Yield the diagnostics of every file, file order then document order."""
    walker = Walker(get_enabled_rules(config))
    for ctx in program.files:
        yield from walker.walk(ctx, program.info.for_file(ctx.path))


def analyze(
    out: TextIO,
    directory: str | Path,
    config: Optional[Config] = None,
    build_context: Optional[BuildContext] = None,
) -> RunSummary:
    """
    Analyze the package in directory, writing one line per diagnostic to out.

    Lines are written as they are found. The whole package is type-checked
    before the first file is walked, so a load or type error means nothing
    is written.
    """
    if config is None:
        config = get_default_config()
    program = load_program(directory, build_context)

    summary = RunSummary(
        files=[ctx.path for ctx in program.files],
        rule_ids=[rule.id for rule in get_enabled_rules(config)],
    )
    for diagnostic in iter_diagnostics(program, config):
        write_diagnostic(out, diagnostic)
        key = str(diagnostic.location.path)
        summary.counts[key] = summary.counts.get(key, 0) + 1

    logger.info(
        "Analyzed %d file(s) in %s: %d diagnostic(s)",
        len(summary.files),
        directory,
        summary.total,
    )
    return summary
