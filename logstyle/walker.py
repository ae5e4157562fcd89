"""
Tree walker: find the call sites of one file and dispatch them to the rules.

The walk is a depth-first, pre-order visit of the syntax tree. A
call_expression is visited but never descended into, whatever happens to
it: calls nested in another call's arguments (including inside a func
literal passed as an argument) are not inspected. Diagnostics are yielded
in document order as they are found.

Typical usage:
    walker = Walker(get_enabled_rules(config))
    for diagnostic in walker.walk(ctx, info.for_file(ctx.path)):
        write_diagnostic(sys.stdout, diagnostic)
"""

from __future__ import annotations

import logging
from typing import Iterator, Optional, Sequence

from tree_sitter import Node as TSNode

from logstyle.checker import FileInfo
from logstyle.context import FileContext, get_line_col, get_source_span
from logstyle.findings.models import Diagnostic, Location
from logstyle.resolver import resolve_function
from logstyle.rules.base import Rule

logger = logging.getLogger(__name__)


def callee_identifier(call: TSNode) -> Optional[TSNode]:
    """
    Return the name node a call's callee is bound through, or None.

    f(...) gives f, x.y.M(...) gives M. Other callee shapes (f()(...),
    fns[i](...), generic instantiations) have no such name.
    """
    fn = call.child_by_field_name("function")
    if fn is None:
        return None
    if fn.type == "identifier":
        return fn
    if fn.type == "selector_expression":
        return fn.child_by_field_name("field")
    return None


def _snippet(ctx: FileContext, node: TSNode) -> str:
    return get_source_span(ctx, node).splitlines()[0].strip()


class Walker:
    """Dispatches every inspectable call site of a file to an ordered list of rules."""

    def __init__(self, rules: Sequence[Rule]) -> None:
        self.rules = list(rules)

    def walk(self, ctx: FileContext, info: FileInfo) -> Iterator[Diagnostic]:
        logger.debug("Walking %s with %d rule(s)", ctx.path, len(self.rules))
        yield from self._visit(ctx, info, ctx.root_node)

    def _visit(self, ctx: FileContext, info: FileInfo, node: TSNode) -> Iterator[Diagnostic]:
        if node.type == "call_expression":
            yield from self._inspect_call(ctx, info, node)
            return
        for child in node.children:
            yield from self._visit(ctx, info, child)

    def _inspect_call(self, ctx: FileContext, info: FileInfo, call: TSNode) -> Iterator[Diagnostic]:
        name = callee_identifier(call)
        if name is None:
            return
        fn = resolve_function(info, name)
        if fn is None:
            return

        for rule in self.rules:
            message = rule.inspect(info, call, fn)
            if message is None:
                continue
            line, col = get_line_col(call)
            end_row, end_col = call.end_point
            yield Diagnostic(
                rule_id=rule.id,
                message=message,
                location=Location(
                    path=ctx.path,
                    line=line,
                    column=col,
                    end_line=end_row + 1,
                    end_column=end_col + 1,
                    snippet=_snippet(ctx, call),
                ),
            )
