"""Tests for tree-sitter Go parser wrapper."""

import logging
from pathlib import Path


from logstyle.parser import (
    create_parser,
    find_syntax_error,
    get_go_language,
    parse_bytes,
    parse_file,
)


def test_get_go_language_returns_language():
    """get_go_language() returns a tree-sitter Language object."""
    lang = get_go_language()
    assert lang is not None
    assert lang


def test_create_parser_returns_parser():
    """create_parser() returns a configured Parser."""
    parser = create_parser()
    assert parser is not None
    assert parser.language is not None


def test_parse_bytes_success(caplog):
    """Parsing valid Go source succeeds and logs."""
    source = b"package main\n\nfunc main() {}\n"
    parser = create_parser()
    with caplog.at_level(logging.DEBUG):
        tree = parse_bytes(source, parser=parser)
    assert tree is not None
    assert not tree.root_node.has_error
    assert tree.root_node.type == "source_file"
    assert "Parse succeeded" in caplog.text


def test_parse_bytes_invalid_go_logs_failure(caplog):
    """Parsing invalid Go produces a tree with errors and logs it."""
    source = b"package main\n\nfunc main( {\n"
    with caplog.at_level(logging.DEBUG):
        tree = parse_bytes(source)
    assert tree.root_node.has_error
    assert "Parse completed with errors" in caplog.text


def test_find_syntax_error_none_for_valid_source():
    tree = parse_bytes(b"package main\n\nvar x = 1\n")
    assert find_syntax_error(tree.root_node) is None


def test_find_syntax_error_points_at_bad_line():
    source = b"package main\n\nfunc main() {\n\tx := \n}\n"
    tree = parse_bytes(source)
    node = find_syntax_error(tree.root_node)
    assert node is not None
    assert node.start_point[0] >= 2


def test_parse_file_sample_go():
    """Parser parses the small Go sample file successfully."""
    sample_path = Path(__file__).parent / "sample.go"
    assert sample_path.exists(), "tests/sample.go must exist"
    tree = parse_file(sample_path)
    assert tree is not None
    assert not tree.root_node.has_error
    assert tree.root_node.type == "source_file"


def test_parse_file_nonexistent(caplog):
    """parse_file() on nonexistent path returns None and logs error."""
    with caplog.at_level(logging.ERROR):
        tree = parse_file(Path("/nonexistent/sample.go"))
    assert tree is None
    assert "Failed to read" in caplog.text
