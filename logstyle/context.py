# One parsed Go source file as the checker and walker see it.
# Node text and positions are always read back through this context, so every
# symbol table key and every diagnostic agrees on which file a node came from.

import logging
from pathlib import Path
from typing import Optional

from logstyle.parser import create_parser, parse_bytes
from tree_sitter import Parser, Tree
from tree_sitter import Node as TSNode

logger = logging.getLogger(__name__)

_DECLARATION_TYPES = frozenset({"function_declaration", "method_declaration"})


def _count_nodes(node: TSNode) -> int:
    count = 1
    for child in node.children:
        count += _count_nodes(child)
    return count


def count_tree_stats(root: TSNode) -> tuple[int, int]:
    """Return (node count, number of top-level funcs and methods) for a source_file."""
    funcs = sum(1 for child in root.children if child.type in _DECLARATION_TYPES)
    return _count_nodes(root), funcs


class FileContext:
    """
    A Go file of the package under analysis, or of a package it imports.

    path is the name reported in diagnostics and type errors, and the first
    part of every symbol table key for nodes of this file. Declaration stubs
    use a "$STUBS/..." path that never exists on disk.
    """

    def __init__(
        self,
        path: Path,
        source: bytes,
        tree: Tree,
        *,
        has_parse_errors: bool = False,
    ) -> None:
        self.path = path
        self.source = source
        self.tree = tree
        self.has_parse_errors = has_parse_errors

    @property
    def root_node(self) -> TSNode:
        return self.tree.root_node

    @property
    def package_name(self) -> Optional[str]:
        """Name from the file's package clause, or None if it has none."""
        for child in self.root_node.children:
            if child.type == "package_clause":
                for sub in child.named_children:
                    if sub.type in ("package_identifier", "identifier"):
                        return get_source_span(self, sub)
        return None


def get_source_span(context: FileContext, node: TSNode) -> str:
    """Go source text of node: identifier names, literal spellings, snippets."""
    raw = context.source[node.start_byte : node.end_byte]
    return raw.decode("utf-8", errors="replace")


def get_line_col(node: TSNode, one_based: bool = True) -> tuple[int, int]:
    """
    Position of node as Go's token.Position reports it.

    The column counts bytes, not runes, so a call after a multi-byte string
    literal on the same line lands where `go vet` would put it.
    """
    line, byte_col = node.start_point
    if not one_based:
        return line, byte_col
    return line + 1, byte_col + 1


def create_context(
    path: Path,
    parser: Optional[Parser] = None,
    *,
    source: Optional[bytes] = None,
) -> Optional[FileContext]:
    """
    Read and parse one Go file.

    Returns None if the file cannot be read.
    Syntax errors do not fail here: the tree is kept with has_parse_errors
    set, and the loader turns the first syntax error into a LoadError.
    Pass source to parse in-memory text such as a declaration stub.
    """
    if parser is None:
        parser = create_parser()

    if source is None:
        try:
            source = path.read_bytes()
        except OSError as e:
            logger.error("Failed to read file %s: %s", path, e)
            return None

    tree = parse_bytes(source, parser=parser)
    has_errors = tree.root_node.has_error

    node_count, func_count = count_tree_stats(tree.root_node)
    logger.debug(
        "Parsed %s: %d nodes, %d func/method declaration(s)%s",
        path,
        node_count,
        func_count,
        " (with syntax errors)" if has_errors else "",
    )

    return FileContext(
        path=path,
        source=source,
        tree=tree,
        has_parse_errors=has_errors,
    )
