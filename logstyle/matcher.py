# Type identity matching: is a resolved function a given method of a given named type?

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Optional

from logstyle.gotypes import Func, Named, Pointer, Type


@dataclass(frozen=True)
class LoggerTarget:
    """The logging type whose methods are checked, and which of its methods count."""

    package_path: str
    type_name: str
    method_names: FrozenSet[str]

    def matches(self, fn: Func) -> bool:
        return is_target_method(fn, self.package_path, self.type_name, self.method_names)


ZAP_LOGGER = LoggerTarget(
    package_path="go.uber.org/zap",
    type_name="Logger",
    method_names=frozenset({"Debug", "Info", "Warn", "Error"}),
)


def strip_vendor(pkgpath: str) -> str:
    """
    Return the logical import path of a possibly vendored package path.

    Everything up to and including the last "vendor" segment is dropped.

    Examples:
        >>> strip_vendor("example.com/app/vendor/go.uber.org/zap")
        'go.uber.org/zap'
        >>> strip_vendor("go.uber.org/zap")
        'go.uber.org/zap'
    """
    parts = pkgpath.split("/")
    for i in range(len(parts) - 1, -1, -1):
        if parts[i] == "vendor":
            return "/".join(parts[i + 1 :])
    return pkgpath


def unwrap_pointers(typ: Optional[Type]) -> Optional[Type]:
    """Strip every level of pointer indirection from typ."""
    while isinstance(typ, Pointer):
        typ = typ.elem
    return typ


def is_target_method(
    fn: Func,
    package_path: str,
    type_name: str,
    method_names: FrozenSet[str],
) -> bool:
    """
    Report whether fn is one of method_names declared on package_path.type_name.

    Free functions never match. The receiver type is compared after
    unwrapping pointers and normalizing vendored package paths, so
    *zap.Logger and a vendored copy's Logger both match.
    """
    sig = fn.signature
    if sig is None or sig.recv is None:
        return False

    typ = unwrap_pointers(sig.recv.type)
    if not isinstance(typ, Named):
        return False

    obj = typ.obj
    if obj.pkg is None:
        return False

    return (
        strip_vendor(obj.pkg.path) == package_path
        and obj.name == type_name
        and fn.name in method_names
    )
