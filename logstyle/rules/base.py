# Rule interface (abstract base class): defines the contract all rules must implement.
# Concrete rules (zap_logger, ...) subclass Rule and implement inspect().

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

from tree_sitter import Node as TSNode

from logstyle.checker import FileInfo
from logstyle.gotypes import Func


def call_arguments(call: TSNode) -> List[TSNode]:
    """Argument expressions of a call_expression, in order, without comments."""
    args = call.child_by_field_name("arguments")
    if args is None:
        return []
    return [c for c in args.named_children if c.type != "comment"]


class Rule(ABC):
    """
    Abstract base class for all call-inspection rules.

    Subclasses must define:
    - id: str: unique rule identifier (e.g. "zap-logger-message")
    - name: str: human-readable rule name
    - inspect(info, call, fn) -> Optional[str]: decide on one call

    The walker calls inspect() once per resolved call site, for every
    registered rule. Rules hold no mutable state and never see each
    other's results, so their order does not matter.
    """

    id: str
    name: str

    @abstractmethod
    def inspect(self, info: FileInfo, call: TSNode, fn: Func) -> Optional[str]:
        """
        Inspect one call and return a violation message, or None if compliant.

        Args:
            info: Symbol table view for the file the call is in. Use it to
                  resolve identifiers among the call's arguments.
            call: The call_expression node.
            fn: The function or method the callee resolved to.

        Returns:
            The diagnostic message, or None when the call is fine or the rule
            does not apply to fn.
        """
        ...
