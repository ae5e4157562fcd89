"""
Type checking of one Go package: builds the symbol table the analysis reads.

The checker walks the package's syntax trees with the usual Go scope chain
(universe -> package -> file -> function -> block) and records, for every
identifier it resolves, the object it denotes. Expression types are
recorded alongside so that selector receivers can be followed through struct
fields, pointers and embedded fields.

Package-level declarations may appear in any order, so they are declared
first and their types resolved on demand. Imported packages are checked with
check_bodies=False: only their declarations are needed.

The checker covers what receiver and constant resolution need. Anything it
cannot type is left as None, and None never produces an error.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from tree_sitter import Node as TSNode

from logstyle.context import FileContext, get_line_col, get_source_span
from logstyle.errors import TypeCheckError
from logstyle.gotypes import (
    ANY,
    BASIC,
    UNIVERSE,
    UNTYPED_BOOL,
    UNTYPED_COMPLEX,
    UNTYPED_FLOAT,
    UNTYPED_INT,
    UNTYPED_RUNE,
    UNTYPED_STRING,
    Array,
    Basic,
    Builtin,
    Chan,
    Const,
    Func,
    Interface,
    Map,
    Named,
    Nil,
    Object,
    Package,
    PkgName,
    Pointer,
    Scope,
    Signature,
    Slice,
    Struct,
    Tuple as TupleType,
    Type,
    TypeName,
    Var,
    default_type,
    lookup_field_or_method,
    underlying,
)

logger = logging.getLogger(__name__)

NodeKey = Tuple[str, int, int]

EXPRESSION_TYPES = frozenset(
    {
        "identifier",
        "selector_expression",
        "call_expression",
        "index_expression",
        "slice_expression",
        "type_assertion_expression",
        "type_conversion_expression",
        "type_instantiation_expression",
        "unary_expression",
        "binary_expression",
        "parenthesized_expression",
        "composite_literal",
        "func_literal",
        "interpreted_string_literal",
        "raw_string_literal",
        "int_literal",
        "float_literal",
        "imaginary_literal",
        "rune_literal",
        "true",
        "false",
        "nil",
        "iota",
    }
)

TYPE_TYPES = frozenset(
    {
        "type_identifier",
        "qualified_type",
        "pointer_type",
        "slice_type",
        "array_type",
        "implicit_length_array_type",
        "map_type",
        "channel_type",
        "function_type",
        "struct_type",
        "interface_type",
        "parenthesized_type",
        "generic_type",
    }
)

_LITERAL_TYPES = {
    "interpreted_string_literal": UNTYPED_STRING,
    "raw_string_literal": UNTYPED_STRING,
    "int_literal": UNTYPED_INT,
    "float_literal": UNTYPED_FLOAT,
    "imaginary_literal": UNTYPED_COMPLEX,
    "rune_literal": UNTYPED_RUNE,
    "true": UNTYPED_BOOL,
    "false": UNTYPED_BOOL,
    "iota": UNTYPED_INT,
}

_COMPARISON_OPERATORS = frozenset({"==", "!=", "<", "<=", ">", ">=", "&&", "||"})


def node_key(path: Path | str, node: TSNode) -> NodeKey:
    return (str(path), node.start_byte, node.end_byte)


def _named(node: Optional[TSNode]) -> List[TSNode]:
    """Named children without comments."""
    if node is None:
        return []
    return [c for c in node.named_children if c.type != "comment"]


def _spans(nodes: Sequence[TSNode]) -> set[Tuple[int, int]]:
    return {(n.start_byte, n.end_byte) for n in nodes}


def _has_token(node: TSNode, token: str) -> bool:
    return any(c.type == token for c in node.children)


def is_exported(name: str) -> bool:
    return name[:1].isupper()


class TypeInfo:
    """
    The program symbol table: identifier nodes to objects, expressions to types.

    Keys are (file path, start byte, end byte), so one TypeInfo covers every
    file of a package. Read-only once the checker has finished.
    """

    def __init__(self) -> None:
        self.defs: Dict[NodeKey, Object] = {}
        self.uses: Dict[NodeKey, Object] = {}
        self.types: Dict[NodeKey, Type] = {}

    def object_of(self, path: Path | str, node: TSNode) -> Optional[Object]:
        key = node_key(path, node)
        obj = self.defs.get(key)
        if obj is not None:
            return obj
        return self.uses.get(key)

    def type_of(self, path: Path | str, node: TSNode) -> Optional[Type]:
        return self.types.get(node_key(path, node))

    def for_file(self, path: Path | str) -> FileInfo:
        return FileInfo(self, str(path))


@dataclass(frozen=True)
class FileInfo:
    """A TypeInfo view bound to one file, so callers can pass bare nodes."""

    info: TypeInfo
    path: str

    def object_of(self, node: TSNode) -> Optional[Object]:
        return self.info.object_of(self.path, node)

    def type_of(self, node: TSNode) -> Optional[Type]:
        return self.info.type_of(self.path, node)


@dataclass(eq=False)
class _Pending:
    """A package-level declaration whose type is resolved on first use."""

    kind: str
    ctx: FileContext
    scope: Scope
    node: TSNode
    objs: List[Object] = field(default_factory=list)
    type_node: Optional[TSNode] = None
    values: List[TSNode] = field(default_factory=list)


class Checker:
    """
    Type-check the files of one package into a TypeInfo.

    importer is any object with import_package(path) -> Package.
    """

    def __init__(
        self,
        package: Package,
        importer,
        info: Optional[TypeInfo] = None,
        *,
        check_bodies: bool = True,
        strict: bool = True,
    ) -> None:
        self.package = package
        self.importer = importer
        self.info = info if info is not None else TypeInfo()
        self.check_bodies = check_bodies
        self.strict = strict
        if package.scope is None:
            package.scope = Scope(UNIVERSE, kind="package")
        self._pkg_scope = package.scope
        self._pending: Dict[int, _Pending] = {}
        self._ctx: Optional[FileContext] = None

    # --- entry point --------------------------------------------------------

    def check(self, files: Sequence[FileContext]) -> TypeInfo:
        file_scopes: List[Tuple[FileContext, Scope]] = []
        for ctx in files:
            scope = self._pkg_scope.child("file")
            file_scopes.append((ctx, scope))
            with self._in_file(ctx):
                self._collect_imports(ctx.root_node, scope)

        named_specs: List[Tuple[FileContext, Scope, TSNode, Named]] = []
        funcs: List[Tuple[FileContext, Scope, TSNode, Optional[Func]]] = []
        for ctx, scope in file_scopes:
            with self._in_file(ctx):
                for decl in _named(ctx.root_node):
                    if decl.type == "const_declaration":
                        self._declare_consts(decl, scope, self._pkg_scope, lazy=True)
                    elif decl.type == "var_declaration":
                        self._declare_vars(decl, scope, self._pkg_scope, lazy=True)
                    elif decl.type == "type_declaration":
                        named_specs.extend(
                            (ctx, scope, spec, named)
                            for spec, named in self._declare_types(decl, scope, self._pkg_scope, lazy=True)
                        )
                    elif decl.type == "function_declaration":
                        funcs.append((ctx, scope, decl, self._predeclare_func(decl)))
                    elif decl.type == "method_declaration":
                        funcs.append((ctx, scope, decl, None))

        for ctx, scope, spec, named in named_specs:
            with self._in_file(ctx):
                self._resolve_named(spec, named, scope)

        for ctx, scope, decl, fn in funcs:
            with self._in_file(ctx):
                self._complete_func(decl, scope, fn)

        for pending in list(self._pending.values()):
            if pending.objs and id(pending.objs[0]) in self._pending:
                self._resolve_pending(pending)

        if self.check_bodies:
            for ctx, scope, decl, _ in funcs:
                with self._in_file(ctx):
                    self._check_func_body(decl, scope)

        logger.debug(
            "Checked package %s: %d def(s), %d use(s)",
            self.package.path,
            len(self.info.defs),
            len(self.info.uses),
        )
        return self.info

    # --- bookkeeping --------------------------------------------------------

    @contextmanager
    def _in_file(self, ctx: FileContext) -> Iterator[None]:
        saved = self._ctx
        self._ctx = ctx
        try:
            yield
        finally:
            self._ctx = saved

    def _text(self, node: TSNode) -> str:
        assert self._ctx is not None
        return get_source_span(self._ctx, node)

    def _report(self, node: TSNode, message: str) -> None:
        """Raise a type-check error, or only log it when checking leniently."""
        assert self._ctx is not None
        line, col = get_line_col(node)
        error = TypeCheckError(message, self._ctx.path, line, col)
        if self.strict:
            raise error
        logger.debug("Ignoring error in %s: %s", self.package.path, error)

    def _record_def(self, node: TSNode, obj: Object) -> None:
        self.info.defs[node_key(self._ctx.path, node)] = obj

    def _record_use(self, node: TSNode, obj: Object) -> None:
        self.info.uses[node_key(self._ctx.path, node)] = obj

    def _record_type(self, node: TSNode, typ: Optional[Type]) -> None:
        if typ is not None:
            self.info.types[node_key(self._ctx.path, node)] = typ

    def _declare(self, scope: Scope, node: TSNode, obj: Object) -> None:
        if obj.name == "_":
            self._record_def(node, obj)
            return
        if scope.insert(obj) is not None:
            self._report(node, f"{obj.name} redeclared in this block")
            return
        self._record_def(node, obj)

    def _object_type(self, obj: Optional[Object]) -> Optional[Type]:
        if obj is None:
            return None
        pending = self._pending.get(id(obj))
        if pending is not None:
            self._resolve_pending(pending)
        return obj.type

    def _resolve_pending(self, pending: _Pending) -> None:
        for obj in pending.objs:
            self._pending.pop(id(obj), None)
        with self._in_file(pending.ctx):
            if pending.kind == "const":
                self._assign_const_types(pending.objs, pending.type_node, pending.values, pending.scope)
            elif pending.kind == "var":
                self._assign_var_types(pending.objs, pending.type_node, pending.values, pending.scope)
            elif pending.kind == "alias":
                pending.objs[0].type = self._resolve_type(pending.type_node, pending.scope)

    def _lookup(self, node: TSNode, scope: Scope) -> Optional[Object]:
        name = self._text(node)
        if name == "_":
            return None
        obj = scope.lookup(name)
        if obj is None:
            if not scope.has_opaque_names():
                self._report(node, f"undefined: {name}")
            return None
        self._record_use(node, obj)
        return obj

    # --- imports ------------------------------------------------------------

    def _collect_imports(self, root: TSNode, scope: Scope) -> None:
        for decl in _named(root):
            if decl.type != "import_declaration":
                continue
            specs: List[TSNode] = []
            for child in _named(decl):
                if child.type == "import_spec":
                    specs.append(child)
                elif child.type == "import_spec_list":
                    specs.extend(c for c in _named(child) if c.type == "import_spec")
            for spec in specs:
                self._import_spec(spec, scope)

    def _import_spec(self, spec: TSNode, scope: Scope) -> None:
        path_node = spec.child_by_field_name("path")
        if path_node is None:
            return
        path = self._text(path_node)[1:-1]
        try:
            imported = self.importer.import_package(path)
        except TypeCheckError as e:
            self._report(path_node, e.message)
            imported = Package(path, path.rsplit("/", 1)[-1], opaque=True)
        name_node = spec.child_by_field_name("name")

        if name_node is not None and name_node.type == "dot":
            if imported.opaque or imported.scope is None:
                scope.opaque_dot_imports = True
                return
            for name, obj in imported.scope.names.items():
                if is_exported(name):
                    scope.insert(obj)
            return
        if name_node is not None and name_node.type == "blank_identifier":
            return

        local = self._text(name_node) if name_node is not None else imported.name
        obj = PkgName(local, pkg=self.package, imported=imported)
        if name_node is not None:
            self._declare(scope, name_node, obj)
        elif scope.insert(obj) is not None:
            self._report(spec, f"{local} redeclared in this block")

    # --- declarations -------------------------------------------------------

    def _const_specs(self, decl: TSNode) -> Iterator[Tuple[TSNode, Optional[TSNode], List[TSNode]]]:
        """Yield (spec, type node, value nodes) with iota group repetition applied."""
        last_type: Optional[TSNode] = None
        last_values: List[TSNode] = []
        for spec in _named(decl):
            if spec.type != "const_spec":
                continue
            value_list = spec.child_by_field_name("value")
            if value_list is not None:
                last_type = spec.child_by_field_name("type")
                last_values = _named(value_list)
            yield spec, last_type, last_values

    def _declare_consts(self, decl: TSNode, file_scope: Scope, target: Scope, *, lazy: bool) -> None:
        for spec, type_node, values in self._const_specs(decl):
            names = spec.children_by_field_name("name")
            objs = [Const(self._text(n), pkg=self.package) for n in names]
            if lazy:
                pending = _Pending("const", self._ctx, file_scope, spec, objs, type_node, values)
                for obj in objs:
                    self._pending[id(obj)] = pending
            else:
                self._assign_const_types(objs, type_node, values, file_scope)
            for n, obj in zip(names, objs):
                self._declare(target, n, obj)

    def _assign_const_types(
        self,
        objs: List[Object],
        type_node: Optional[TSNode],
        values: List[TSNode],
        scope: Scope,
    ) -> None:
        typ = self._resolve_type(type_node, scope) if type_node is not None else None
        for i, value in enumerate(values):
            value_type = self._expr(value, scope)
            if i < len(objs):
                objs[i].type = typ or value_type

    def _var_specs(self, decl: TSNode) -> Iterator[TSNode]:
        for child in _named(decl):
            if child.type == "var_spec":
                yield child
            elif child.type == "var_spec_list":
                yield from (c for c in _named(child) if c.type == "var_spec")

    def _declare_vars(self, decl: TSNode, file_scope: Scope, target: Scope, *, lazy: bool) -> None:
        for spec in self._var_specs(decl):
            names = spec.children_by_field_name("name")
            objs = [Var(self._text(n), pkg=self.package) for n in names]
            type_node = spec.child_by_field_name("type")
            values = _named(spec.child_by_field_name("value"))
            if lazy:
                pending = _Pending("var", self._ctx, file_scope, spec, objs, type_node, values)
                for obj in objs:
                    self._pending[id(obj)] = pending
            else:
                self._assign_var_types(objs, type_node, values, file_scope)
            for n, obj in zip(names, objs):
                self._declare(target, n, obj)

    def _assign_var_types(
        self,
        objs: List[Object],
        type_node: Optional[TSNode],
        values: List[TSNode],
        scope: Scope,
    ) -> None:
        typ = self._resolve_type(type_node, scope) if type_node is not None else None
        value_types = self._expr_list_types(values, len(objs), scope) if values else []
        for i, obj in enumerate(objs):
            if typ is not None:
                obj.type = typ
            elif i < len(value_types):
                obj.type = default_type(value_types[i])

    def _type_specs(self, decl: TSNode) -> Iterator[TSNode]:
        for child in _named(decl):
            if child.type in ("type_spec", "type_alias"):
                yield child

    def _declare_types(
        self,
        decl: TSNode,
        file_scope: Scope,
        target: Scope,
        *,
        lazy: bool,
    ) -> List[Tuple[TSNode, Named]]:
        """Declare the type names of decl; return the defined (non-alias) ones."""
        named_specs: List[Tuple[TSNode, Named]] = []
        for spec in self._type_specs(decl):
            name_node = spec.child_by_field_name("name")
            if name_node is None:
                continue
            obj = TypeName(self._text(name_node), pkg=self.package)
            self._declare(target, name_node, obj)
            if spec.type == "type_alias":
                if lazy:
                    pending = _Pending("alias", self._ctx, file_scope, spec, [obj], spec.child_by_field_name("type"))
                    self._pending[id(obj)] = pending
                else:
                    obj.type = self._resolve_type(spec.child_by_field_name("type"), file_scope)
                continue
            named = Named(obj)
            obj.type = named
            named_specs.append((spec, named))
        return named_specs

    def _resolve_named(self, spec: TSNode, named: Named, scope: Scope) -> None:
        type_params = spec.child_by_field_name("type_parameters")
        if type_params is not None:
            scope = scope.child("type")
            self._declare_type_params(type_params, scope)
        under = self._resolve_type(spec.child_by_field_name("type"), scope)
        named.underlying = under
        if isinstance(under, Interface):
            for m in under.methods:
                if isinstance(m.type, Signature) and m.type.recv is None:
                    m.type.recv = Var("", pkg=self.package, type=named)

    def _declare_type_params(self, type_params: TSNode, scope: Scope) -> None:
        for decl in _named(type_params):
            if decl.type != "type_parameter_declaration":
                continue
            for n in decl.children_by_field_name("name"):
                self._declare(scope, n, TypeName(self._text(n), pkg=self.package))

    def _predeclare_func(self, decl: TSNode) -> Optional[Func]:
        """Declare a package-level function name; its signature comes later."""
        name_node = decl.child_by_field_name("name")
        if name_node is None:
            return None
        fn = Func(self._text(name_node), pkg=self.package)
        if fn.name in ("init", "_"):
            self._record_def(name_node, fn)
        else:
            self._declare(self._pkg_scope, name_node, fn)
        return fn

    def _complete_func(self, decl: TSNode, file_scope: Scope, fn: Optional[Func]) -> None:
        """Resolve a function's signature, or declare a method on its receiver type."""
        scope = file_scope.child("func")
        if decl.type == "function_declaration":
            if fn is None:
                return
            type_params = decl.child_by_field_name("type_parameters")
            if type_params is not None:
                self._declare_type_params(type_params, scope)
            fn.type = self._signature(decl, scope)
            return

        name_node = decl.child_by_field_name("name")
        if name_node is None:
            return
        recv_var, base = self._receiver(decl.child_by_field_name("receiver"), scope)
        sig = self._signature(decl, scope)
        sig.recv = recv_var
        method = Func(self._text(name_node), pkg=self.package, type=sig)
        self._record_def(name_node, method)
        if isinstance(base, Named):
            base.methods.append(method)

    def _receiver(self, recv_list: Optional[TSNode], scope: Scope) -> Tuple[Optional[Var], Optional[Type]]:
        """Resolve a method receiver; returns (receiver var, base named type)."""
        for param in _named(recv_list):
            if param.type != "parameter_declaration":
                continue
            type_node = param.child_by_field_name("type")
            pointer = False
            while type_node is not None and type_node.type in ("pointer_type", "parenthesized_type"):
                if type_node.type == "pointer_type":
                    pointer = True
                inner = _named(type_node)
                type_node = inner[0] if inner else None
            if type_node is None:
                return None, None
            if type_node.type == "generic_type":
                args = type_node.child_by_field_name("type_arguments")
                for arg in _named(args):
                    ident = _named(arg)[0] if arg.type == "type_elem" and _named(arg) else arg
                    if ident.type in ("type_identifier", "identifier"):
                        self._declare(scope, ident, TypeName(self._text(ident), pkg=self.package))
                type_node = type_node.child_by_field_name("type")
            base = self._resolve_type(type_node, scope)
            recv_type: Optional[Type] = Pointer(base) if pointer else base
            names = param.children_by_field_name("name")
            recv = Var(self._text(names[0]) if names else "", pkg=self.package, type=recv_type)
            return recv, base
        return None, None

    # --- types --------------------------------------------------------------

    def _resolve_type(self, node: Optional[TSNode], scope: Scope) -> Optional[Type]:
        if node is None:
            return None
        kind = node.type
        if kind in ("type_identifier", "identifier"):
            obj = self._lookup(node, scope)
            if isinstance(obj, TypeName):
                return self._object_type(obj)
            return None
        if kind in ("qualified_type", "selector_expression"):
            if kind == "qualified_type":
                pkg_node = node.child_by_field_name("package")
                name_node = node.child_by_field_name("name")
            else:
                pkg_node = node.child_by_field_name("operand")
                name_node = node.child_by_field_name("field")
            if pkg_node is None or name_node is None or pkg_node.type not in ("package_identifier", "identifier"):
                return None
            obj = self._lookup(pkg_node, scope)
            if not isinstance(obj, PkgName):
                return None
            member = self._package_member(obj, name_node)
            if isinstance(member, TypeName):
                return member.type
            return None
        if kind == "pointer_type":
            inner = _named(node)
            return Pointer(self._resolve_type(inner[0], scope) if inner else None)
        if kind == "slice_type":
            return Slice(self._resolve_type(node.child_by_field_name("element"), scope))
        if kind == "array_type":
            self._expr(node.child_by_field_name("length"), scope)
            return Array(self._resolve_type(node.child_by_field_name("element"), scope))
        if kind == "implicit_length_array_type":
            return Array(self._resolve_type(node.child_by_field_name("element"), scope))
        if kind == "map_type":
            return Map(
                self._resolve_type(node.child_by_field_name("key"), scope),
                self._resolve_type(node.child_by_field_name("value"), scope),
            )
        if kind == "channel_type":
            return Chan(self._resolve_type(node.child_by_field_name("value"), scope))
        if kind == "function_type":
            return self._signature(node, scope)
        if kind == "struct_type":
            return self._struct(node, scope)
        if kind == "interface_type":
            return self._interface(node, scope)
        if kind in ("parenthesized_type", "type_elem"):
            inner = _named(node)
            return self._resolve_type(inner[0], scope) if len(inner) == 1 else None
        if kind == "generic_type":
            for arg in _named(node.child_by_field_name("type_arguments")):
                self._resolve_type(arg, scope)
            return self._resolve_type(node.child_by_field_name("type"), scope)
        return None

    def _struct(self, node: TSNode, scope: Scope) -> Struct:
        fields: List[Var] = []
        for body in _named(node):
            if body.type != "field_declaration_list":
                continue
            for decl in _named(body):
                if decl.type != "field_declaration":
                    continue
                type_node = decl.child_by_field_name("type")
                names = decl.children_by_field_name("name")
                typ = self._resolve_type(type_node, scope)
                if names:
                    for n in names:
                        f = Var(self._text(n), pkg=self.package, type=typ, is_field=True)
                        fields.append(f)
                        self._record_def(n, f)
                    continue
                # Embedded field: named after its base type.
                base_node = type_node
                if base_node is not None and base_node.type == "pointer_type":
                    inner = _named(base_node)
                    base_node = inner[0] if inner else None
                if base_node is not None and base_node.type == "generic_type":
                    base_node = base_node.child_by_field_name("type")
                if base_node is not None and base_node.type == "qualified_type":
                    base_node = base_node.child_by_field_name("name")
                if base_node is None:
                    continue
                if _has_token(decl, "*"):
                    typ = Pointer(typ)
                fields.append(Var(self._text(base_node), pkg=self.package, type=typ, is_field=True, embedded=True))
        return Struct(fields)

    def _interface(self, node: TSNode, scope: Scope) -> Interface:
        iface = Interface()
        for elem in _named(node):
            if elem.type in ("method_elem", "method_spec"):
                name_node = elem.child_by_field_name("name")
                if name_node is None:
                    continue
                m = Func(self._text(name_node), pkg=self.package, type=self._signature(elem, scope))
                self._record_def(name_node, m)
                iface.methods.append(m)
            elif elem.type in ("type_elem", "constraint_elem") or elem.type in TYPE_TYPES:
                iface.embedded.append(self._resolve_type(elem, scope))
        return iface

    def _params(self, plist: Optional[TSNode], scope: Scope, declare_in: Optional[Scope]) -> Tuple[List[Var], bool]:
        params: List[Var] = []
        variadic = False
        for decl in _named(plist):
            if decl.type not in ("parameter_declaration", "variadic_parameter_declaration"):
                continue
            typ = self._resolve_type(decl.child_by_field_name("type"), scope)
            if decl.type == "variadic_parameter_declaration":
                typ = Slice(typ)
                variadic = True
            names = decl.children_by_field_name("name")
            if not names:
                params.append(Var("", pkg=self.package, type=typ))
                continue
            for n in names:
                v = Var(self._text(n), pkg=self.package, type=typ)
                params.append(v)
                if declare_in is not None:
                    self._declare(declare_in, n, v)
        return params, variadic

    def _signature(self, node: TSNode, scope: Scope, declare_in: Optional[Scope] = None) -> Signature:
        params, variadic = self._params(node.child_by_field_name("parameters"), scope, declare_in)
        result = node.child_by_field_name("result")
        results: List[Var] = []
        if result is not None:
            if result.type == "parameter_list":
                results, _ = self._params(result, scope, declare_in)
            else:
                results = [Var("", pkg=self.package, type=self._resolve_type(result, scope))]
        return Signature(params=params, results=results, variadic=variadic)

    # --- function bodies ------------------------------------------------------

    def _check_func_body(self, decl: TSNode, file_scope: Scope) -> None:
        body = decl.child_by_field_name("body")
        if body is None:
            return
        scope = file_scope.child("func")
        type_params = decl.child_by_field_name("type_parameters")
        if type_params is not None:
            self._declare_type_params(type_params, scope)
        if decl.type == "method_declaration":
            recv_list = decl.child_by_field_name("receiver")
            recv, _ = self._receiver(recv_list, scope)
            for param in _named(recv_list):
                for n in param.children_by_field_name("name"):
                    if recv is not None:
                        self._declare(scope, n, recv)
        self._signature(decl, scope, declare_in=scope)
        self._statements(body, scope)

    def _statements(self, block: TSNode, scope: Scope) -> None:
        """Check the statements of block directly in scope."""
        for stmt in _named(block):
            if stmt.type == "statement_list":
                self._statements(stmt, scope)
            else:
                self._stmt(stmt, scope)

    def _stmt(self, node: TSNode, scope: Scope) -> None:
        kind = node.type
        if kind in EXPRESSION_TYPES:
            self._expr(node, scope)
        elif kind == "block":
            self._statements(node, scope.child())
        elif kind == "statement_list":
            self._statements(node, scope)
        elif kind == "short_var_declaration":
            self._short_var_decl(node.child_by_field_name("left"), node.child_by_field_name("right"), scope)
        elif kind == "var_declaration":
            self._declare_vars(node, scope, scope, lazy=False)
        elif kind == "const_declaration":
            self._declare_consts(node, scope, scope, lazy=False)
        elif kind == "type_declaration":
            for spec, named in self._declare_types(node, scope, scope, lazy=False):
                self._resolve_named(spec, named, scope)
        elif kind == "if_statement":
            self._if(node, scope.child())
        elif kind == "for_statement":
            self._for(node, scope.child())
        elif kind == "expression_switch_statement":
            self._switch(node, scope.child())
        elif kind == "type_switch_statement":
            self._type_switch(node, scope.child())
        elif kind == "select_statement":
            for case in _named(node):
                self._comm_case(case, scope.child())
        elif kind == "labeled_statement":
            for child in _named(node):
                if child.type != "label_name":
                    self._stmt(child, scope)
        elif kind in ("break_statement", "continue_statement", "goto_statement", "fallthrough_statement", "empty_statement"):
            return
        elif kind in TYPE_TYPES:
            self._resolve_type(node, scope)
        else:
            for child in _named(node):
                self._stmt(child, scope)

    def _short_var_decl(self, left: Optional[TSNode], right: Optional[TSNode], scope: Scope) -> None:
        targets = _named(left)
        types = self._expr_list_types(_named(right), len(targets), scope)
        for i, target in enumerate(targets):
            typ = default_type(types[i]) if i < len(types) else None
            if target.type != "identifier":
                self._expr(target, scope)
                continue
            name = self._text(target)
            existing = scope.lookup_local(name)
            if existing is not None and name != "_":
                self._record_use(target, existing)
                continue
            self._declare(scope, target, Var(name, pkg=self.package, type=typ))

    def _if(self, node: TSNode, scope: Scope) -> None:
        init = node.child_by_field_name("initializer")
        if init is not None:
            self._stmt(init, scope)
        self._expr(node.child_by_field_name("condition"), scope)
        consequence = node.child_by_field_name("consequence")
        if consequence is not None:
            self._stmt(consequence, scope)
        alternative = node.child_by_field_name("alternative")
        if alternative is not None:
            self._stmt(alternative, scope)

    def _for(self, node: TSNode, scope: Scope) -> None:
        body = node.child_by_field_name("body")
        for child in _named(node):
            if body is not None and child.start_byte == body.start_byte:
                continue
            if child.type == "for_clause":
                init = child.child_by_field_name("initializer")
                if init is not None:
                    self._stmt(init, scope)
                self._expr(child.child_by_field_name("condition"), scope)
                update = child.child_by_field_name("update")
                if update is not None:
                    self._stmt(update, scope)
            elif child.type == "range_clause":
                self._range(child, scope)
            else:
                self._expr(child, scope)
        if body is not None:
            self._statements(body, scope.child())

    def _range(self, clause: TSNode, scope: Scope) -> None:
        container = self._expr(clause.child_by_field_name("right"), scope)
        left = clause.child_by_field_name("left")
        if left is None:
            return
        if not _has_token(clause, ":="):
            for target in _named(left):
                self._expr(target, scope)
            return
        under = underlying(container.elem if isinstance(container, Pointer) else container)
        key: Optional[Type] = None
        value: Optional[Type] = None
        if isinstance(under, (Slice, Array)):
            key, value = BASIC["int"], under.elem
        elif isinstance(under, Map):
            key, value = under.key, under.elem
        elif isinstance(under, Chan):
            key = under.elem
        elif isinstance(under, Basic):
            if under.name in ("string", UNTYPED_STRING.name):
                key, value = BASIC["int"], BASIC["int32"]
            else:
                key = default_type(under)
        for target, typ in zip(_named(left), (key, value)):
            if target.type == "identifier":
                self._declare(scope, target, Var(self._text(target), pkg=self.package, type=typ))

    def _case_body(self, case: TSNode, skip: set[Tuple[int, int]], scope: Scope) -> None:
        for child in _named(case):
            if (child.start_byte, child.end_byte) in skip:
                continue
            self._stmt(child, scope)

    def _switch(self, node: TSNode, scope: Scope) -> None:
        init = node.child_by_field_name("initializer")
        if init is not None:
            self._stmt(init, scope)
        value = node.child_by_field_name("value")
        if value is not None:
            self._expr(value, scope)
        skip = _spans([n for n in (init, value) if n is not None])
        for case in _named(node):
            if (case.start_byte, case.end_byte) in skip:
                continue
            if case.type == "expression_case":
                values = case.children_by_field_name("value")
                for v in values:
                    for expr in (_named(v) if v.type == "expression_list" else [v]):
                        self._expr(expr, scope)
                self._case_body(case, _spans(values), scope.child())
            elif case.type == "default_case":
                self._case_body(case, set(), scope.child())

    def _type_switch(self, node: TSNode, scope: Scope) -> None:
        init = node.child_by_field_name("initializer")
        if init is not None:
            self._stmt(init, scope)
        value = node.child_by_field_name("value")
        value_type = self._expr(value, scope)
        alias = node.child_by_field_name("alias")
        alias_ident = None
        if alias is not None:
            idents = _named(alias) if alias.type == "expression_list" else [alias]
            alias_ident = idents[0] if idents else None
        skip = _spans([n for n in (init, value, alias) if n is not None])
        for case in _named(node):
            if (case.start_byte, case.end_byte) in skip:
                continue
            if case.type not in ("type_case", "default_case"):
                continue
            case_scope = scope.child()
            types = case.children_by_field_name("type") if case.type == "type_case" else []
            resolved = [self._resolve_case_type(t, scope) for t in types]
            if alias_ident is not None:
                typ = resolved[0] if len(resolved) == 1 else value_type
                self._declare(case_scope, alias_ident, Var(self._text(alias_ident), pkg=self.package, type=typ))
            self._case_body(case, _spans(types), case_scope)

    def _resolve_case_type(self, node: TSNode, scope: Scope) -> Optional[Type]:
        if node.type == "nil":
            return None
        return self._resolve_type(node, scope)

    def _comm_case(self, case: TSNode, scope: Scope) -> None:
        comm = case.child_by_field_name("communication")
        if comm is not None:
            if comm.type == "receive_statement" and _has_token(comm, ":="):
                self._short_var_decl(comm.child_by_field_name("left"), comm.child_by_field_name("right"), scope)
            else:
                self._stmt(comm, scope)
        self._case_body(case, _spans([comm] if comm is not None else []), scope)

    # --- expressions --------------------------------------------------------

    def _expr_list_types(self, exprs: List[TSNode], want: int, scope: Scope) -> List[Optional[Type]]:
        """Types of an assignment's right-hand side, spreading multi-value results."""
        if len(exprs) == 1 and want > 1:
            expr = exprs[0]
            typ = self._expr(expr, scope)
            if isinstance(typ, TupleType):
                return list(typ.vars)
            inner = self._unparen(expr)
            if inner.type in ("index_expression", "type_assertion_expression") or (
                inner.type == "unary_expression" and self._operator(inner) == "<-"
            ):
                return [typ, BASIC["bool"]]
            return [typ]
        return [self._expr(e, scope) for e in exprs]

    def _unparen(self, node: TSNode) -> TSNode:
        while node.type == "parenthesized_expression":
            inner = _named(node)
            if not inner:
                break
            node = inner[0]
        return node

    def _operator(self, node: TSNode) -> str:
        op = node.child_by_field_name("operator")
        return op.type if op is not None else ""

    def _expr(self, node: Optional[TSNode], scope: Scope) -> Optional[Type]:
        if node is None:
            return None
        typ = self._expr_type(node, scope)
        self._record_type(node, typ)
        return typ

    def _expr_type(self, node: TSNode, scope: Scope) -> Optional[Type]:
        kind = node.type
        if kind in _LITERAL_TYPES:
            return _LITERAL_TYPES[kind]
        if kind in ("identifier", "selector_expression", "parenthesized_expression"):
            _, typ = self._operand(node, scope)
            return typ
        if kind == "call_expression":
            return self._call(node, scope)
        if kind == "composite_literal":
            typ = self._resolve_type(node.child_by_field_name("type"), scope)
            self._literal_value(node.child_by_field_name("body"), typ, scope)
            return typ
        if kind == "func_literal":
            inner = scope.child("func")
            sig = self._signature(node, scope, declare_in=inner)
            body = node.child_by_field_name("body")
            if body is not None:
                self._statements(body, inner)
            return sig
        if kind == "unary_expression":
            operand = self._expr(node.child_by_field_name("operand"), scope)
            op = self._operator(node)
            if op == "&":
                return Pointer(operand)
            if op == "*":
                under = underlying(operand)
                return under.elem if isinstance(under, Pointer) else None
            if op == "<-":
                under = underlying(operand)
                return under.elem if isinstance(under, Chan) else None
            if op == "!":
                return UNTYPED_BOOL
            return operand
        if kind == "binary_expression":
            left = self._expr(node.child_by_field_name("left"), scope)
            right = self._expr(node.child_by_field_name("right"), scope)
            op = self._operator(node)
            if op in _COMPARISON_OPERATORS:
                return UNTYPED_BOOL
            if op in ("<<", ">>"):
                return left
            if isinstance(left, Basic) and left.untyped:
                return right or left
            return left or right
        if kind == "index_expression":
            operand = self._expr(node.child_by_field_name("operand"), scope)
            for index in node.children_by_field_name("index"):
                self._expr(index, scope)
            under = underlying(operand.elem if isinstance(operand, Pointer) else operand)
            if isinstance(under, (Slice, Array, Map)):
                return under.elem
            if isinstance(under, Basic) and under.name in ("string", UNTYPED_STRING.name):
                return BASIC["uint8"]
            if isinstance(under, Signature):
                return under
            return None
        if kind == "slice_expression":
            operand = self._expr(node.child_by_field_name("operand"), scope)
            for field_name in ("start", "end", "capacity"):
                self._expr(node.child_by_field_name(field_name), scope)
            under = underlying(operand)
            if isinstance(under, Array):
                return Slice(under.elem)
            if isinstance(under, Pointer) and isinstance(underlying(under.elem), Array):
                return Slice(underlying(under.elem).elem)
            return operand
        if kind == "type_assertion_expression":
            self._expr(node.child_by_field_name("operand"), scope)
            return self._resolve_type(node.child_by_field_name("type"), scope)
        if kind == "type_conversion_expression":
            self._expr(node.child_by_field_name("operand"), scope)
            return self._resolve_type(node.child_by_field_name("type"), scope)
        if kind == "type_instantiation_expression":
            typ = self._resolve_type(node.child_by_field_name("type"), scope)
            for arg in _named(node)[1:]:
                self._resolve_type(arg, scope)
            return typ
        if kind == "nil":
            return None
        if kind in TYPE_TYPES:
            return self._resolve_type(node, scope)
        for child in _named(node):
            self._expr(child, scope)
        return None

    def _operand(self, node: TSNode, scope: Scope) -> Tuple[Optional[Object], Optional[Type]]:
        """Resolve a name-like expression to (object, type)."""
        kind = node.type
        if kind == "identifier":
            obj = self._lookup(node, scope)
            if isinstance(obj, (PkgName, Builtin, Nil)):
                return obj, None
            return obj, self._object_type(obj)
        if kind == "parenthesized_expression":
            inner = _named(node)
            if len(inner) != 1:
                return None, None
            if inner[0].type in ("identifier", "selector_expression", "parenthesized_expression"):
                obj, typ = self._operand(inner[0], scope)
                self._record_type(inner[0], typ)
                return obj, typ
            return None, self._expr(inner[0], scope)
        if kind == "selector_expression":
            return self._selector(node, scope)
        return None, self._expr(node, scope)

    def _selector(self, node: TSNode, scope: Scope) -> Tuple[Optional[Object], Optional[Type]]:
        operand = node.child_by_field_name("operand")
        field_node = node.child_by_field_name("field")
        if operand is None or field_node is None:
            return None, None
        name = self._text(field_node)

        if operand.type == "identifier":
            obj = self._lookup(operand, scope)
            if isinstance(obj, PkgName):
                member = self._package_member(obj, field_node)
                if isinstance(member, (PkgName, Builtin, Nil)):
                    return member, None
                return member, self._object_type(member)
            base = self._object_type(obj)
            self._record_type(operand, base)
            if isinstance(obj, TypeName):
                # Method expression: T.Method or (*T).Method.
                method, _ = lookup_field_or_method(base, name)
                if isinstance(method, Func):
                    self._record_use(field_node, method)
                    return method, method.type
                return None, None
        else:
            base = self._expr(operand, scope)

        found, exhaustive = lookup_field_or_method(base, name)
        if found is None:
            target = base.elem if isinstance(base, Pointer) else base
            if (
                exhaustive
                and isinstance(target, Named)
                and target.obj.pkg is self.package
                and self.package.complete
            ):
                self._report(
                    field_node,
                    f"{self._text(operand)}.{name} undefined "
                    f"(type {self._type_string(base)} has no field or method {name})",
                )
            return None, None
        self._record_use(field_node, found)
        return found, self._object_type(found)

    def _package_member(self, pkg_name: PkgName, name_node: TSNode) -> Optional[Object]:
        imported = pkg_name.imported
        if imported is None or imported.opaque or imported.scope is None:
            return None
        name = self._text(name_node)
        if not is_exported(name):
            return None
        member = imported.scope.lookup_local(name)
        if member is not None:
            self._record_use(name_node, member)
        return member

    def _type_string(self, typ: Optional[Type]) -> str:
        if isinstance(typ, Pointer):
            return "*" + self._type_string(typ.elem)
        if isinstance(typ, Named) and typ.obj.pkg is self.package:
            return typ.obj.name
        return str(typ)

    def _call(self, node: TSNode, scope: Scope) -> Optional[Type]:
        fn_node = node.child_by_field_name("function")
        args = _named(node.child_by_field_name("arguments"))
        for targ in _named(node.child_by_field_name("type_arguments")):
            self._resolve_type(targ, scope)
        if fn_node is None:
            return None

        if fn_node.type in ("identifier", "selector_expression", "parenthesized_expression"):
            obj, fn_type = self._operand(fn_node, scope)
            self._record_type(fn_node, fn_type)
        else:
            obj, fn_type = None, self._expr(fn_node, scope)

        if isinstance(obj, TypeName):
            for arg in args:
                self._expr(arg, scope)
            return fn_type
        if isinstance(obj, Builtin):
            return self._builtin(obj.name, args, scope)

        for arg in args:
            self._expr(arg, scope)
        sig = underlying(fn_type)
        if not isinstance(sig, Signature):
            return None
        if not sig.results:
            return None
        if len(sig.results) == 1:
            return sig.results[0].type
        return TupleType([r.type for r in sig.results])

    def _builtin(self, name: str, args: List[TSNode], scope: Scope) -> Optional[Type]:
        if name in ("new", "make") and args:
            typ = self._resolve_type(args[0], scope)
            for arg in args[1:]:
                self._expr(arg, scope)
            return Pointer(typ) if name == "new" else typ
        types = [self._expr(arg, scope) for arg in args]
        if name in ("len", "cap", "copy"):
            return BASIC["int"]
        if name == "append":
            return types[0] if types else None
        if name == "recover":
            return ANY
        if name in ("min", "max"):
            return types[0] if types else None
        return None

    def _literal_value(self, body: Optional[TSNode], typ: Optional[Type], scope: Scope) -> None:
        if body is None:
            return
        under = underlying(typ.elem if isinstance(typ, Pointer) else typ)
        position = 0
        for element in _named(body):
            if element.type == "keyed_element":
                parts = _named(element)
                if len(parts) < 2:
                    continue
                key, value = parts[0], parts[-1]
                value_type = self._keyed(key, under, scope)
                self._element(value, value_type, scope)
                continue
            elem_type: Optional[Type] = None
            if isinstance(under, Struct) and position < len(under.fields):
                elem_type = under.fields[position].type
            elif isinstance(under, (Slice, Array, Map)):
                elem_type = under.elem
            self._element(element, elem_type, scope)
            position += 1

    def _keyed(self, key: TSNode, under: Optional[Type], scope: Scope) -> Optional[Type]:
        """Check a composite literal key; return the type expected for its value."""
        inner = self._unwrap_element(key)
        if isinstance(under, Struct) or under is None:
            if inner.type in ("identifier", "field_identifier"):
                if isinstance(under, Struct):
                    name = self._text(inner)
                    for f in under.fields:
                        if f.name == name:
                            self._record_use(inner, f)
                            return f.type
                return None
            self._element(key, None, scope)
            return None
        if isinstance(under, Map):
            self._element(key, under.key, scope)
            return under.elem
        self._element(key, None, scope)
        return under.elem if isinstance(under, (Slice, Array)) else None

    def _unwrap_element(self, node: TSNode) -> TSNode:
        if node.type == "literal_element":
            inner = _named(node)
            if inner:
                return inner[0]
        return node

    def _element(self, node: TSNode, typ: Optional[Type], scope: Scope) -> None:
        inner = self._unwrap_element(node)
        if inner.type == "literal_value":
            self._literal_value(inner, typ, scope)
        else:
            self._expr(inner, scope)
