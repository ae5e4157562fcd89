# Import resolution: map an import path to a Package the checker can read members from.
# Lookup order: module directory, vendored source copy, built-in declaration stub,
# opaque placeholder.

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Dict, List, Optional

from tree_sitter import Parser

from logstyle.checker import Checker, TypeInfo
from logstyle.context import FileContext, create_context
from logstyle.errors import LoadError, TypeCheckError
from logstyle.gotypes import Package
from logstyle.loader import Module, find_module, import_path_of, parse_package
from logstyle.parser import create_parser
from logstyle.stubs import STUB_SOURCES
from logstyle.traversal import BuildContext

logger = logging.getLogger(__name__)

_VERSION_SUFFIX_RE = re.compile(r"^v[0-9]+$")


def default_package_name(path: str) -> str:
    """
    Guess a package's name from its import path, the way goimports does.

    Examples:
        >>> default_package_name("go.uber.org/zap")
        'zap'
        >>> default_package_name("github.com/go-chi/chi/v5")
        'chi'
        >>> default_package_name("gopkg.in/yaml.v3")
        'yaml'
    """
    parts = [p for p in path.split("/") if p]
    if not parts:
        return path
    last = parts[-1]
    if _VERSION_SUFFIX_RE.match(last) and len(parts) > 1:
        last = parts[-2]
    last = re.sub(r"\.v[0-9]+$", "", last)
    if last.startswith("go-"):
        last = last[3:]
    return re.sub(r"[^A-Za-z0-9_]", "_", last.split(".")[0])


class Importer:
    """
    Resolve imports for the package in package_dir.

    Resolved packages are cached by import path. A package being loaded is
    cached before its own imports are resolved, so import cycles terminate.
    """

    def __init__(
        self,
        package_dir: Path,
        parser: Optional[Parser] = None,
        build_context: Optional[BuildContext] = None,
        info: Optional[TypeInfo] = None,
    ) -> None:
        self._dir = package_dir.resolve()
        self._parser = parser or create_parser()
        self._build_context = build_context
        # Declarations of imported packages land in their own table.
        self._info = info if info is not None else TypeInfo()
        self._module: Optional[Module] = find_module(self._dir)
        self._cache: Dict[str, Package] = {}

    def import_package(self, path: str) -> Package:
        cached = self._cache.get(path)
        if cached is not None:
            return cached

        local_dir = self._module_local_dir(path)
        if local_dir is not None:
            return self._load_local(path, local_dir)

        vendor_dir, vendor_base = self._find_vendored(path)
        if vendor_dir is not None:
            pkg = self._load_vendored(path, vendor_dir, vendor_base)
        elif path in STUB_SOURCES:
            pkg = self._load_stub(path)
        else:
            logger.debug("No declarations for import %s; treating it as opaque", path)
            pkg = Package(path, default_package_name(path), opaque=True)
            self._cache[path] = pkg
        return pkg

    def _module_local_dir(self, path: str) -> Optional[Path]:
        """Directory of path when it lies inside the enclosing module, else None."""
        if self._module is None:
            return None
        if path == self._module.path:
            return self._module.root
        prefix = self._module.path + "/"
        if path.startswith(prefix):
            return self._module.root / path[len(prefix) :]
        return None

    def _load_local(self, path: str, directory: Path) -> Package:
        if not directory.is_dir():
            raise TypeCheckError(f"could not import {path} (cannot find package directory {directory})")
        logger.debug("Importing %s from module directory %s", path, directory)
        try:
            parsed = parse_package(directory, self._parser, self._build_context)
        except LoadError as e:
            raise LoadError(f"could not import {path} ({e})") from e
        pkg = Package(path, parsed.name)
        self._cache[path] = pkg
        self._check_declarations(pkg, parsed.files)
        return pkg

    def _vendor_roots(self) -> List[Path]:
        """Directories whose vendor/ subdirectory is searched, innermost first."""
        roots: List[Path] = []
        for candidate in (self._dir, *self._dir.parents):
            roots.append(candidate)
            if self._module is not None and candidate == self._module.root:
                break
        return roots

    def _find_vendored(self, path: str) -> tuple[Optional[Path], Optional[Path]]:
        for root in self._vendor_roots():
            candidate = root / "vendor" / path
            if candidate.is_dir() and any(candidate.glob("*.go")):
                return candidate, root
        return None, None

    def _load_vendored(self, path: str, directory: Path, base: Path) -> Package:
        pkg_path = f"{import_path_of(base, self._module)}/vendor/{path}"
        logger.debug("Importing %s from vendored copy %s", path, directory)
        try:
            parsed = parse_package(directory, self._parser, self._build_context)
        except LoadError as e:
            raise LoadError(f"could not import {path} ({e})") from e
        pkg = Package(pkg_path, parsed.name)
        self._cache[path] = pkg
        self._check_declarations(pkg, parsed.files)
        return pkg

    def _load_stub(self, path: str) -> Package:
        source = STUB_SOURCES[path].encode("utf-8")
        ctx = create_context(Path(f"$STUBS/{path}/stub.go"), self._parser, source=source)
        if ctx is None or ctx.package_name is None:
            raise LoadError(f"could not import {path} (invalid declaration stub)")
        pkg = Package(path, ctx.package_name)
        self._cache[path] = pkg
        self._check_declarations(pkg, [ctx])
        return pkg

    def _check_declarations(self, pkg: Package, files: List[FileContext]) -> None:
        checker = Checker(pkg, self, self._info, check_bodies=False, strict=False)
        checker.check(files)
