"""
File system traversal: collect the buildable Go source files of one package.

A Go package is a single directory, so unlike a recursive source scan this
only lists the directory's own entries. The selection follows what
`go build` compiles for a package on the target platform:

- only regular files ending in .go
- not test files (*_test.go)
- not files whose name starts with "_" or "." (ignored by the go tool)
- not files whose _GOOS / _GOARCH name suffix names another platform
- not files whose `//go:build` (or legacy `// +build`) constraint is unsatisfied

The target platform defaults to the host, overridable with the GOOS and
GOARCH environment variables like the go tool itself.

Typical usage:
    from pathlib import Path
    from logstyle.traversal import BuildContext, find_go_files

    files = find_go_files(Path("./cmd/server"))
    windows = find_go_files(Path("./cmd/server"), BuildContext(goos="windows", goarch="amd64"))
"""

import logging
import os
import platform
import re
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, FrozenSet, Optional

logger = logging.getLogger(__name__)

KNOWN_OS: FrozenSet[str] = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
        "js", "linux", "nacl", "netbsd", "openbsd", "plan9", "solaris", "wasip1",
        "windows", "zos",
    }
)

KNOWN_ARCH: FrozenSet[str] = frozenset(
    {
        "386", "amd64", "arm", "arm64", "loong64", "mips", "mips64", "mips64le",
        "mipsle", "ppc64", "ppc64le", "riscv64", "s390x", "wasm",
    }
)

UNIX_OS: FrozenSet[str] = frozenset(
    {
        "aix", "android", "darwin", "dragonfly", "freebsd", "hurd", "illumos", "ios",
        "linux", "netbsd", "openbsd", "solaris",
    }
)

# android builds linux files, illumos builds solaris, ios builds darwin.
_OS_ALIASES = {"android": "linux", "illumos": "solaris", "ios": "darwin"}

_GO_BUILD_RE = re.compile(r"^//go:build\s+(.*)$")
_PLUS_BUILD_RE = re.compile(r"^//\s*\+build\s+(.*)$")
_TOKEN_RE = re.compile(r"\s*(\(|\)|!|&&|\|\||[\w.]+)")


def _host_os() -> str:
    if sys.platform.startswith("linux"):
        return "linux"
    if sys.platform == "darwin":
        return "darwin"
    if sys.platform in ("win32", "cygwin"):
        return "windows"
    return sys.platform


def _host_arch() -> str:
    machine = platform.machine().lower()
    return {"x86_64": "amd64", "aarch64": "arm64", "i386": "386", "i686": "386"}.get(machine, machine)


@dataclass(frozen=True)
class BuildContext:
    """Target platform and extra tags used to evaluate build constraints."""

    goos: str = field(default_factory=lambda: os.environ.get("GOOS") or _host_os())
    goarch: str = field(default_factory=lambda: os.environ.get("GOARCH") or _host_arch())
    tags: FrozenSet[str] = frozenset()

    def satisfies(self, tag: str) -> bool:
        if tag in (self.goos, self.goarch, "gc") or tag in self.tags:
            return True
        if tag == _OS_ALIASES.get(self.goos):
            return True
        if tag == "unix":
            return self.goos in UNIX_OS
        # Release tags: every go1.N is satisfied by a current toolchain.
        return re.fullmatch(r"go1(\.\d+)?", tag) is not None


def is_go_file(path: Path) -> bool:
    """
    Check if a file is a Go source file (.go extension).

    Examples:
        >>> is_go_file(Path("main.go"))
        True
        >>> is_go_file(Path("main.c"))
        False
    """
    return path.suffix == ".go"


def is_test_file(path: Path) -> bool:
    """
    Check if a file is a Go test file (name ends in _test.go).

    Examples:
        >>> is_test_file(Path("main_test.go"))
        True
        >>> is_test_file(Path("main.go"))
        False
    """
    return path.name.endswith("_test.go")


def is_ignored_name(path: Path) -> bool:
    """Files starting with "_" or "." are ignored by the go tool."""
    return path.name.startswith(("_", "."))


def _os_matches(name: str, context: BuildContext) -> bool:
    return name == context.goos or name == _OS_ALIASES.get(context.goos)


def matches_file_name(path: Path, context: BuildContext) -> bool:
    """
    Apply the implicit name constraints: *_GOOS.go, *_GOARCH.go, *_GOOS_GOARCH.go.

    Examples:
        >>> ctx = BuildContext(goos="linux", goarch="amd64")
        >>> matches_file_name(Path("poll_windows.go"), ctx)
        False
        >>> matches_file_name(Path("poll_linux_amd64.go"), ctx)
        True
    """
    parts = path.stem.split("_")
    # The first element is never a constraint, even for "linux.go".
    if len(parts) < 2:
        return True
    last = parts[-1]
    if len(parts) >= 3 and parts[-2] in KNOWN_OS and last in KNOWN_ARCH:
        return _os_matches(parts[-2], context) and last == context.goarch
    if last in KNOWN_OS:
        return _os_matches(last, context)
    if last in KNOWN_ARCH:
        return last == context.goarch
    return True


class _ExprParser:
    """Recursive-descent evaluator for //go:build expressions."""

    def __init__(self, text: str, context: BuildContext) -> None:
        self.tokens = [m.group(1) for m in _TOKEN_RE.finditer(text)]
        self.pos = 0
        self.context = context

    def _peek(self) -> Optional[str]:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> Optional[str]:
        tok = self._peek()
        self.pos += 1
        return tok

    def parse(self) -> bool:
        return self._or()

    def _or(self) -> bool:
        value = self._and()
        while self._peek() == "||":
            self._next()
            value = self._and() or value
        return value

    def _and(self) -> bool:
        value = self._not()
        while self._peek() == "&&":
            self._next()
            value = self._not() and value
        return value

    def _not(self) -> bool:
        if self._peek() == "!":
            self._next()
            return not self._not()
        return self._atom()

    def _atom(self) -> bool:
        tok = self._next()
        if tok == "(":
            value = self._or()
            self._next()
            return value
        if tok is None:
            return True
        return self.context.satisfies(tok)


def _plus_build_satisfied(line: str, context: BuildContext) -> bool:
    """Legacy syntax: space-separated options are ORed, comma-separated terms ANDed."""
    for option in line.split():
        terms = option.split(",")
        if all(
            (not context.satisfies(t[1:])) if t.startswith("!") else context.satisfies(t)
            for t in terms
        ):
            return True
    return False


def constraint_satisfied(source: str, context: BuildContext) -> bool:
    """
    Evaluate the build constraints in the file header against context.

    Only the comment block before the package clause is considered. A
    //go:build line takes precedence over // +build lines.
    """
    plus_lines: list[str] = []
    for raw in source.splitlines():
        line = raw.strip()
        if not line:
            continue
        if not line.startswith("//"):
            break
        m = _GO_BUILD_RE.match(line)
        if m:
            return _ExprParser(m.group(1), context).parse()
        m = _PLUS_BUILD_RE.match(line)
        if m:
            plus_lines.append(m.group(1))
    return all(_plus_build_satisfied(line, context) for line in plus_lines)


def find_go_files(
    directory: Path,
    context: Optional[BuildContext] = None,
    filter_fn: Optional[Callable[[Path], bool]] = None,
) -> list[Path]:
    """
    List the buildable Go files of the package in directory.

    Args:
        directory: The package directory.
        context: Target platform; if None, the host (or $GOOS/$GOARCH).
        filter_fn: Optional additional filter function. If provided, only files
                   for which filter_fn(path) returns True are included.

    Returns:
        Paths of the selected files, sorted by name for deterministic ordering.

    Raises:
        FileNotFoundError: If the directory does not exist.
        NotADirectoryError: If the path is not a directory.
    """
    if context is None:
        context = BuildContext()

    if not directory.exists():
        logger.error("Package directory does not exist: %s", directory)
        raise FileNotFoundError(f"cannot find package directory {directory}")

    if not directory.is_dir():
        logger.error("Package path is not a directory: %s", directory)
        raise NotADirectoryError(f"{directory} is not a directory")

    collected: list[Path] = []
    for entry in sorted(directory.iterdir()):
        if not entry.is_file() or not is_go_file(entry):
            continue
        if is_test_file(entry) or is_ignored_name(entry):
            logger.debug("Skipping non-build file: %s", entry)
            continue
        if not matches_file_name(entry, context):
            logger.debug("Excluded by file name for %s/%s: %s", context.goos, context.goarch, entry)
            continue
        try:
            text = entry.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Error reading %s: %s", entry, e)
            continue
        if not constraint_satisfied(text, context):
            logger.debug("Excluded by build constraint: %s", entry)
            continue
        if filter_fn is not None and not filter_fn(entry):
            logger.debug("Filtered out by custom filter: %s", entry)
            continue
        logger.debug("Found source file: %s", entry)
        collected.append(entry)

    logger.info("Found %d Go file(s) in %s", len(collected), directory)
    return collected
