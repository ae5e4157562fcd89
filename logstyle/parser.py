# Tree-sitter setup and AST parsing: parse Go source code into AST trees.

import logging
from pathlib import Path
from typing import Optional

import tree_sitter
from tree_sitter import Language
from tree_sitter import Node as TSNode
from tree_sitter_go import language as _go_language_capsule

logger = logging.getLogger(__name__)

# Go language grammar: wrap tree-sitter-go capsule for use with tree_sitter.Parser
_GO_LANGUAGE = Language(_go_language_capsule())


def get_go_language() -> Language:
    """Return the Tree-sitter Language object for Go."""
    return _GO_LANGUAGE


def create_parser() -> tree_sitter.Parser:
    """Create and return a Tree-sitter Parser configured for Go."""
    parser = tree_sitter.Parser(_GO_LANGUAGE)
    return parser


def parse_bytes(
    source: bytes,
    parser: Optional[tree_sitter.Parser] = None,
) -> tree_sitter.Tree:
    """
    Parse Go source bytes into an AST.

    Args:
        source: UTF-8 encoded Go source code.
        parser: Optional parser instance; if None, a new one is created.

    Returns:
        The parse tree. Check tree.root_node.has_error for malformed input,
        and find_syntax_error() for the first offending node.
    """
    if parser is None:
        parser = create_parser()
    tree = parser.parse(source)
    if tree.root_node.has_error:
        logger.debug("Parse completed with errors: root=%s", tree.root_node.type)
    else:
        logger.debug("Parse succeeded: root=%s", tree.root_node.type)
    return tree


def find_syntax_error(node: TSNode) -> Optional[TSNode]:
    """Return the first ERROR or MISSING node in document order, or None."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = find_syntax_error(child)
        if found is not None:
            return found
    return None


def parse_file(path: Path, parser: Optional[tree_sitter.Parser] = None) -> Optional[tree_sitter.Tree]:
    """
    Parse a Go source file into an AST.

    Args:
        path: Path to the .go file.
        parser: Optional parser instance; if None, a new one is created.

    Returns:
        The parse tree, or None if the file could not be read.
    """
    try:
        source = path.read_bytes()
    except OSError as e:
        logger.error("Failed to read file %s: %s", path, e)
        return None
    tree = parse_bytes(source, parser=parser)
    logger.info("Parsed file %s: success=%s", path, not tree.root_node.has_error)
    return tree
