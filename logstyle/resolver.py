# Symbol resolution: look up what the type checker bound an identifier node to.

from typing import Optional

from tree_sitter import Node as TSNode

from logstyle.checker import FileInfo
from logstyle.gotypes import Const, Func, Object


def resolve(info: FileInfo, node: TSNode) -> Optional[Object]:
    """
    Return the object bound to an identifier node, or None if it has no binding.

    Works for plain identifiers and for the field_identifier of a selector.
    A missing binding is a normal outcome (package qualifiers, unknown
    imports) and callers skip the node.
    """
    return info.object_of(node)


def resolve_function(info: FileInfo, node: TSNode) -> Optional[Func]:
    """Like resolve(), but only functions and methods; anything else is None."""
    obj = resolve(info, node)
    return obj if isinstance(obj, Func) else None


def is_constant(info: FileInfo, node: TSNode) -> bool:
    """True if node is an identifier bound to a declared constant."""
    return isinstance(resolve(info, node), Const)
