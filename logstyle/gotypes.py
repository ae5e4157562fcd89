# Go type and object model: the symbol objects a type-check pass binds to identifiers.
# Mirrors the shape of go/types closely enough for receiver and constant resolution.

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


# --- packages and scopes -----------------------------------------------------


class Scope:
    """A lexical block mapping names to objects, chained to its parent."""

    def __init__(self, parent: Optional[Scope] = None, kind: str = "block") -> None:
        self.parent = parent
        self.kind = kind
        self.names: Dict[str, Object] = {}
        # Dot-imported packages whose members we cannot enumerate.
        self.opaque_dot_imports = False

    def lookup_local(self, name: str) -> Optional[Object]:
        return self.names.get(name)

    def lookup(self, name: str) -> Optional[Object]:
        scope: Optional[Scope] = self
        while scope is not None:
            obj = scope.names.get(name)
            if obj is not None:
                return obj
            scope = scope.parent
        return None

    def insert(self, obj: Object) -> Optional[Object]:
        """Insert obj; return the existing object if the name is already taken."""
        existing = self.names.get(obj.name)
        if existing is not None:
            return existing
        self.names[obj.name] = obj
        return None

    def has_opaque_names(self) -> bool:
        scope: Optional[Scope] = self
        while scope is not None:
            if scope.opaque_dot_imports:
                return True
            scope = scope.parent
        return False

    def child(self, kind: str = "block") -> Scope:
        return Scope(self, kind)


@dataclass(eq=False)
class Package:
    """
    An imported or checked package.

    opaque packages come from imports we have no declarations for; their
    members never resolve. complete is True only for the package whose
    source was fully checked, so missing members there are real errors.
    """

    path: str
    name: str
    scope: Optional[Scope] = None
    opaque: bool = False
    complete: bool = False

    def __repr__(self) -> str:
        return f"Package({self.path!r})"


# --- types ---------------------------------------------------------------------


class Type:
    """Base class for Go types."""


@dataclass(eq=False)
class Basic(Type):
    name: str

    @property
    def untyped(self) -> bool:
        return self.name.startswith("untyped ")

    def __str__(self) -> str:
        return self.name


@dataclass(eq=False)
class Pointer(Type):
    elem: Optional[Type]

    def __str__(self) -> str:
        return f"*{self.elem}"


@dataclass(eq=False)
class Slice(Type):
    elem: Optional[Type]

    def __str__(self) -> str:
        return f"[]{self.elem}"


@dataclass(eq=False)
class Array(Type):
    elem: Optional[Type]

    def __str__(self) -> str:
        return f"[...]{self.elem}"


@dataclass(eq=False)
class Map(Type):
    key: Optional[Type]
    elem: Optional[Type]

    def __str__(self) -> str:
        return f"map[{self.key}]{self.elem}"


@dataclass(eq=False)
class Chan(Type):
    elem: Optional[Type]

    def __str__(self) -> str:
        return f"chan {self.elem}"


@dataclass(eq=False)
class Struct(Type):
    fields: List[Var] = field(default_factory=list)

    def __str__(self) -> str:
        return "struct{...}"


@dataclass(eq=False)
class Interface(Type):
    methods: List[Func] = field(default_factory=list)
    embedded: List[Optional[Type]] = field(default_factory=list)

    def __str__(self) -> str:
        return "interface{...}"


@dataclass(eq=False)
class Signature(Type):
    recv: Optional[Var] = None
    params: List[Var] = field(default_factory=list)
    results: List[Var] = field(default_factory=list)
    variadic: bool = False

    def __str__(self) -> str:
        return "func(...)"


@dataclass(eq=False)
class Tuple(Type):
    vars: List[Optional[Type]] = field(default_factory=list)

    def __str__(self) -> str:
        return "(" + ", ".join(str(t) for t in self.vars) + ")"


@dataclass(eq=False)
class Named(Type):
    """A defined type: type T U. underlying is filled in after declaration."""

    obj: TypeName
    underlying: Optional[Type] = None
    methods: List[Func] = field(default_factory=list)

    def method(self, name: str) -> Optional[Func]:
        for m in self.methods:
            if m.name == name:
                return m
        return None

    def __str__(self) -> str:
        if self.obj.pkg is None:
            return self.obj.name
        return f"{self.obj.pkg.path}.{self.obj.name}"


# --- objects -------------------------------------------------------------------


@dataclass(eq=False)
class Object:
    name: str
    pkg: Optional[Package] = None
    type: Optional[Type] = None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


@dataclass(eq=False, repr=False)
class Var(Object):
    is_field: bool = False
    embedded: bool = False


@dataclass(eq=False, repr=False)
class Const(Object):
    pass


@dataclass(eq=False, repr=False)
class TypeName(Object):
    pass


@dataclass(eq=False, repr=False)
class Func(Object):
    @property
    def signature(self) -> Optional[Signature]:
        return self.type if isinstance(self.type, Signature) else None


@dataclass(eq=False, repr=False)
class PkgName(Object):
    imported: Optional[Package] = None


@dataclass(eq=False, repr=False)
class Builtin(Object):
    pass


@dataclass(eq=False, repr=False)
class Nil(Object):
    pass


# --- helpers -------------------------------------------------------------------


def underlying(typ: Optional[Type]) -> Optional[Type]:
    """Follow Named types to their underlying type."""
    seen = set()
    while isinstance(typ, Named):
        if id(typ) in seen:
            return None
        seen.add(id(typ))
        typ = typ.underlying
    return typ


def default_type(typ: Optional[Type]) -> Optional[Type]:
    """Return the default type for an untyped constant type."""
    if isinstance(typ, Basic) and typ.untyped:
        return UNIVERSE_DEFAULTS.get(typ.name, typ)
    return typ


def lookup_field_or_method(typ: Optional[Type], name: str) -> tuple[Optional[Object], bool]:
    """
    Find a field or method named name on typ, following embedded fields.

    Returns (object, exhaustive). exhaustive is False when some part of the
    searched type was unknown or came from a package we only partially know,
    so a miss cannot be reported as an error.
    """
    if isinstance(typ, Pointer):
        typ = typ.elem
    if typ is None:
        return None, False

    exhaustive = True
    current: List[Type] = [typ]
    seen: set[int] = set()
    while current:
        found: Optional[Object] = None
        following: List[Type] = []
        for t in current:
            if id(t) in seen:
                continue
            seen.add(id(t))
            if isinstance(t, Named):
                if t.obj.pkg is None or not t.obj.pkg.complete:
                    exhaustive = False
                m = t.method(name)
                if m is not None:
                    found = found or m
                    continue
            under = underlying(t)
            if under is None:
                exhaustive = False
                continue
            if isinstance(under, Struct):
                for f in under.fields:
                    if f.name == name:
                        found = found or f
                    if f.embedded:
                        embedded = f.type.elem if isinstance(f.type, Pointer) else f.type
                        if embedded is None:
                            exhaustive = False
                        else:
                            following.append(embedded)
            elif isinstance(under, Interface):
                m = _interface_method(under, name, set())
                if m is not None:
                    found = found or m
                if any(e is None for e in under.embedded):
                    exhaustive = False
        if found is not None:
            return found, exhaustive
        current = following
    return None, exhaustive


def _interface_method(iface: Interface, name: str, seen: set[int]) -> Optional[Func]:
    if id(iface) in seen:
        return None
    seen.add(id(iface))
    for m in iface.methods:
        if m.name == name:
            return m
    for e in iface.embedded:
        under = underlying(e)
        if isinstance(under, Interface):
            m = _interface_method(under, name, seen)
            if m is not None:
                return m
    return None


# --- universe ------------------------------------------------------------------

_BASIC_NAMES = (
    "bool", "string", "int", "int8", "int16", "int32", "int64",
    "uint", "uint8", "uint16", "uint32", "uint64", "uintptr",
    "float32", "float64", "complex64", "complex128",
)

_BUILTINS = (
    "append", "cap", "clear", "close", "complex", "copy", "delete", "imag",
    "len", "make", "max", "min", "new", "panic", "print", "println", "real", "recover",
)

UNIVERSE = Scope(kind="universe")
BASIC: Dict[str, Basic] = {}

for _name in _BASIC_NAMES:
    BASIC[_name] = Basic(_name)
    UNIVERSE.insert(TypeName(_name, type=BASIC[_name]))

# byte and rune are aliases.
UNIVERSE.insert(TypeName("byte", type=BASIC["uint8"]))
UNIVERSE.insert(TypeName("rune", type=BASIC["int32"]))

ANY = Interface()
UNIVERSE.insert(TypeName("any", type=ANY))

_error_obj = TypeName("error")
ERROR = Named(_error_obj)
_error_obj.type = ERROR
_error_method = Func("Error", type=Signature(results=[Var("", type=BASIC["string"])]))
ERROR.underlying = Interface(methods=[_error_method])
_error_method.type.recv = Var("", type=ERROR)
UNIVERSE.insert(_error_obj)

_comparable_obj = TypeName("comparable")
_comparable_obj.type = Named(_comparable_obj, underlying=Interface())
UNIVERSE.insert(_comparable_obj)

UNTYPED_BOOL = Basic("untyped bool")
UNTYPED_INT = Basic("untyped int")
UNTYPED_RUNE = Basic("untyped rune")
UNTYPED_FLOAT = Basic("untyped float")
UNTYPED_COMPLEX = Basic("untyped complex")
UNTYPED_STRING = Basic("untyped string")

UNIVERSE_DEFAULTS: Dict[str, Type] = {
    UNTYPED_BOOL.name: BASIC["bool"],
    UNTYPED_INT.name: BASIC["int"],
    UNTYPED_RUNE.name: BASIC["int32"],
    UNTYPED_FLOAT.name: BASIC["float64"],
    UNTYPED_COMPLEX.name: BASIC["complex128"],
    UNTYPED_STRING.name: BASIC["string"],
}

UNIVERSE.insert(Const("true", type=UNTYPED_BOOL))
UNIVERSE.insert(Const("false", type=UNTYPED_BOOL))
UNIVERSE.insert(Const("iota", type=UNTYPED_INT))
UNIVERSE.insert(Nil("nil"))

for _name in _BUILTINS:
    UNIVERSE.insert(Builtin(_name))
