"""Tests for logstyle.context: FileContext, create_context, node/function counts."""

from pathlib import Path

from logstyle.context import (
    FileContext,
    count_tree_stats,
    create_context,
    get_line_col,
    get_source_span,
)
from logstyle.parser import create_parser, parse_bytes


def test_count_tree_stats():
    parser = create_parser()
    source = b"package p\n\ntype T struct{}\n\nfunc f() {}\n\nfunc (T) m() {}\n"
    tree = parse_bytes(source, parser=parser)
    nodes, funcs = count_tree_stats(tree.root_node)
    assert nodes > 1
    assert funcs == 2


def test_create_context_from_file(tmp_path):
    go_file = tmp_path / "main.go"
    go_file.write_bytes(b"package main\n\nfunc main() {}\n")
    ctx = create_context(go_file)
    assert ctx is not None
    assert ctx.path == go_file
    assert ctx.source == b"package main\n\nfunc main() {}\n"
    assert ctx.tree.root_node is not None
    assert ctx.has_parse_errors is False
    assert ctx.package_name == "main"


def test_create_context_nonexistent():
    ctx = create_context(Path("/nonexistent/file.go"))
    assert ctx is None


def test_create_context_with_source_does_not_read_disk():
    ctx = create_context(Path("/nowhere/stub.go"), source=b"package zap\n")
    assert ctx is not None
    assert ctx.package_name == "zap"


def test_create_context_malformed_still_returns_context(tmp_path):
    go_file = tmp_path / "bad.go"
    go_file.write_bytes(b"package main\n\nfunc main( {\n")
    ctx = create_context(go_file)
    assert ctx is not None
    assert ctx.has_parse_errors is True


def test_package_name_missing():
    tree = parse_bytes(b"func f() {}\n")
    ctx = FileContext(path=Path("x.go"), source=b"func f() {}\n", tree=tree)
    assert ctx.package_name is None


def test_get_source_span():
    source = b"package p\n\nvar x = 42\n"
    tree = parse_bytes(source)
    ctx = FileContext(path=Path("x.go"), source=source, tree=tree)
    var_decl = [c for c in ctx.root_node.named_children if c.type == "var_declaration"][0]
    assert get_source_span(ctx, var_decl) == "var x = 42"


def test_get_line_col_one_based():
    source = b"package p\n\nvar x = 1\n"
    tree = parse_bytes(source)
    var_decl = [c for c in tree.root_node.named_children if c.type == "var_declaration"][0]
    assert get_line_col(var_decl) == (3, 1)
    assert get_line_col(var_decl, one_based=False) == (2, 0)


def test_get_line_col_counts_bytes():
    source = 'package p\n\nvar s, t = "é", 1\n'.encode("utf-8")
    tree = parse_bytes(source)
    ctx = FileContext(path=Path("x.go"), source=source, tree=tree)

    def find(node, text):
        if node.type == "int_literal" and get_source_span(ctx, node) == text:
            return node
        for child in node.children:
            hit = find(child, text)
            if hit is not None:
                return hit
        return None

    one = find(ctx.root_node, "1")
    # "é" is two bytes, so the column is one past its rune count.
    assert get_line_col(one) == (3, 18)
