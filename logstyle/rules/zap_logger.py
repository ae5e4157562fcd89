# Logging-call message check: zap Logger severity methods must get a constant message.

from __future__ import annotations

from typing import Optional

from tree_sitter import Node as TSNode

from logstyle.checker import FileInfo
from logstyle.gotypes import Func
from logstyle.matcher import ZAP_LOGGER, LoggerTarget
from logstyle.resolver import is_constant
from logstyle.rules.base import Rule, call_arguments

MESSAGE = "call must use a string literal or a constant"

# Go basic literal tokens; any of them is accepted as-is, contents unchecked.
BASIC_LITERALS = frozenset(
    {
        "interpreted_string_literal",
        "raw_string_literal",
        "int_literal",
        "float_literal",
        "imaginary_literal",
        "rune_literal",
    }
)


class ZapLoggerRule(Rule):
    """
    Flags Debug/Info/Warn/Error calls on *zap.Logger whose message is built at run time.

    Compliant first arguments are a literal or an identifier bound to a
    declared constant. Everything else (Sprintf calls, concatenation,
    variables, struct fields, pkg.Const selectors) is reported.
    """

    id = "zap-logger-message"
    name = "Non-constant zap log message"

    def __init__(self, target: LoggerTarget = ZAP_LOGGER) -> None:
        self.target = target

    def inspect(self, info: FileInfo, call: TSNode, fn: Func) -> Optional[str]:
        if not self.target.matches(fn):
            return None

        args = call_arguments(call)
        if not args:
            return None

        first = args[0]
        if first.type in BASIC_LITERALS:
            return None
        if first.type == "identifier" and is_constant(info, first):
            return None
        return MESSAGE
