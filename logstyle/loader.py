# Package loading: turn one directory into parsed FileContexts plus its import path.
# Counterpart of `go/build.ImportDir` + `go/parser.ParseDir`; any failure here is fatal.

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

from tree_sitter import Parser

from logstyle.context import FileContext, create_context, get_line_col
from logstyle.errors import LoadError
from logstyle.parser import create_parser, find_syntax_error
from logstyle.traversal import BuildContext, find_go_files

logger = logging.getLogger(__name__)

_MODULE_RE = re.compile(r"^\s*module\s+\"?([^\s\"]+)\"?", re.MULTILINE)


@dataclass(frozen=True)
class Module:
    """The Go module enclosing a directory: where go.mod lives and what it declares."""

    root: Path
    path: str


@dataclass
class ParsedPackage:
    name: str
    directory: Path
    files: List[FileContext]


def find_module(directory: Path) -> Optional[Module]:
    """Return the nearest enclosing module (a directory holding go.mod), or None."""
    directory = directory.resolve()
    for candidate in (directory, *directory.parents):
        gomod = candidate / "go.mod"
        if not gomod.is_file():
            continue
        try:
            text = gomod.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Cannot read %s: %s", gomod, e)
            return None
        m = _MODULE_RE.search(text)
        if m is None:
            logger.warning("No module directive in %s", gomod)
            return None
        return Module(root=candidate, path=m.group(1))
    return None


def import_path_of(directory: Path, module: Optional[Module] = None) -> str:
    """
    Compute the import path of the package in directory.

    Inside a module this is the module path plus the relative directory;
    otherwise it is Go's local form "_" + absolute path.
    """
    directory = directory.resolve()
    if module is not None:
        try:
            rel = directory.relative_to(module.root)
        except ValueError:
            rel = None
        if rel is not None:
            if rel == Path("."):
                return module.path
            return f"{module.path}/{rel.as_posix()}"
    return "_" + directory.as_posix()


def display_path(directory: str, name: str) -> Path:
    """Join and lexically clean a directory argument and file name, like filepath.Join."""
    return Path(os.path.normpath(os.path.join(directory, name)))


def _syntax_error(ctx: FileContext) -> LoadError:
    node = find_syntax_error(ctx.root_node)
    if node is None:
        return LoadError(f"{ctx.path}: syntax error")
    line, col = get_line_col(node)
    return LoadError(f"{ctx.path}:{line}:{col}: syntax error")


def _check_package_names(files: List[FileContext], directory: Path) -> str:
    names: List[Tuple[str, FileContext]] = []
    for ctx in files:
        name = ctx.package_name
        if name is None:
            raise LoadError(f"{ctx.path}: expected 'package', found 'EOF'")
        names.append((name, ctx))
    first_name, first_ctx = names[0]
    for name, ctx in names[1:]:
        if name != first_name:
            raise LoadError(
                f"found packages {first_name} ({first_ctx.path.name}) and "
                f"{name} ({ctx.path.name}) in {directory}"
            )
    return first_name


def parse_package(
    directory: str | Path,
    parser: Optional[Parser] = None,
    build_context: Optional[BuildContext] = None,
) -> ParsedPackage:
    """
    Select and parse the buildable Go files of the package in directory.

    File paths are reported as directory joined with the file name, so
    diagnostics echo the directory the way it was given.

    Raises:
        LoadError: if the directory is missing, holds no buildable Go files,
            mixes package names, or any file fails to read or parse.
    """
    dir_arg = str(directory)
    dir_path = Path(dir_arg)
    try:
        paths = find_go_files(dir_path, build_context)
    except (FileNotFoundError, NotADirectoryError) as e:
        raise LoadError(str(e)) from e
    if not paths:
        raise LoadError(f"no buildable Go source files in {dir_path.resolve()}")

    if parser is None:
        parser = create_parser()

    files: List[FileContext] = []
    for path in paths:
        try:
            source = path.read_bytes()
        except OSError as e:
            raise LoadError(f"cannot read {path}: {e}") from e
        ctx = create_context(display_path(dir_arg, path.name), parser, source=source)
        if ctx is None:
            raise LoadError(f"cannot parse {path}")
        if ctx.has_parse_errors:
            raise _syntax_error(ctx)
        files.append(ctx)

    name = _check_package_names(files, dir_path)
    logger.debug("Parsed package %s from %d file(s) in %s", name, len(files), dir_arg)
    return ParsedPackage(name=name, directory=dir_path, files=files)
