"""Syntax tree adapter — tree-sitter based parse / edit / print.

Public API:
    parse_source(source, file_path, dialect) → SyntaxTree
    parse_file(path) → SyntaxTree
    detect_dialects(file_path) → list[str]
"""

from ..errors import ParseError
from .base import SyntaxTree
from .models import Edit, ImportDecl, ImportSpecifier
from .utils import detect_dialects, get_dialect, should_skip_directory

__all__ = [
    "parse_file",
    "parse_source",
    "detect_dialects",
    "should_skip_directory",
    "Edit",
    "ImportDecl",
    "ImportSpecifier",
    "ParseError",
    "SyntaxTree",
]


def parse_source(source_text: str, file_path: str, dialect: str | None = None) -> SyntaxTree:
    """Parse source code into a SyntaxTree.

    Tries each candidate dialect for the file's extension and keeps the
    first error-free parse.

    Args:
        source_text: Source code as string
        file_path: File path (selects dialects; carried into errors)
        dialect: Force a single dialect instead of detecting one

    Returns:
        SyntaxTree ready for edits

    Raises:
        ParseError: If no dialect parses the file cleanly
    """
    dialects = [dialect] if dialect else detect_dialects(file_path)
    if not dialects:
        raise ParseError(file_path, message="unsupported file type")

    source = source_text.encode("utf-8")
    rejected = None
    for name in dialects:
        tree = get_dialect(name).parse(source)
        candidate = SyntaxTree(source, tree, name, file_path)
        if not tree.root_node.has_error:
            return candidate
        rejected = rejected or candidate

    line, column = rejected.first_error_location()
    raise ParseError(file_path, line, column)


def parse_file(file_path: str) -> SyntaxTree:
    """Read and parse a file (UTF-8)."""
    with open(file_path, "r", encoding="utf-8") as f:
        source_text = f.read()
    return parse_source(source_text, file_path)
