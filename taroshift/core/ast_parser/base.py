"""Syntax tree adapter.

Wraps a tree-sitter parse behind a parse → edit → print contract. Edits
are recorded as byte ranges against the original source and spliced in
on ``print()``, so every byte outside an edit survives untouched.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Union

import tree_sitter

from ..errors import OverlappingEditError
from .models import Edit

logger = logging.getLogger(__name__)


class BaseDialect(ABC):
    """Abstract base for one tree-sitter grammar.

    Subclasses implement:
    - get_dialect(): returns the dialect name
    - get_tree_sitter_language(): returns the tree-sitter Language object
    """

    @abstractmethod
    def get_dialect(self) -> str:
        """Return the dialect identifier (e.g., 'javascript', 'tsx')."""
        ...

    @abstractmethod
    def get_tree_sitter_language(self) -> tree_sitter.Language:
        """Return the tree-sitter Language object for this dialect."""
        ...

    def parse(self, source: bytes) -> tree_sitter.Tree:
        # Parsers are cheap and not thread-safe; one per call.
        parser = tree_sitter.Parser(self.get_tree_sitter_language())
        return parser.parse(source)


class SyntaxTree:
    """A parsed source file plus the edits recorded against it.

    The tree itself is never mutated; passes read nodes from ``root`` and
    call ``replace``/``insert``/``remove``. ``print()`` renders the source
    with all edits applied.
    """

    def __init__(
        self,
        source: bytes,
        tree: tree_sitter.Tree,
        dialect: str,
        file_path: str = "",
    ):
        self.source = source
        self.tree = tree
        self.dialect = dialect
        self.file_path = file_path
        self._edits: List[Edit] = []

    @property
    def root(self) -> tree_sitter.Node:
        return self.tree.root_node

    @property
    def edited(self) -> bool:
        return bool(self._edits)

    @property
    def is_typescript(self) -> bool:
        return self.dialect in ("typescript", "tsx")

    def text(self, node: Optional[tree_sitter.Node]) -> str:
        """Source text of a node ('' for None)."""
        if node is None:
            return ""
        return self.source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")

    # ── Edits ────────────────────────────────────────────────────────

    def replace(self, target: Union[tree_sitter.Node, tuple], text: str) -> None:
        """Replace a node (or a ``(start, end)`` byte range) with text."""
        if isinstance(target, tuple):
            start, end = target
        else:
            start, end = target.start_byte, target.end_byte
        self._edits.append(Edit(start, end, text))

    def insert(self, offset: int, text: str) -> None:
        self._edits.append(Edit(offset, offset, text))

    def remove(self, start: int, end: int) -> None:
        self._edits.append(Edit(start, end, ""))

    def print(self) -> str:
        """Render the source with every recorded edit applied.

        Raises:
            OverlappingEditError: If two edits touch the same bytes
        """
        if not self._edits:
            return self.source.decode("utf-8")

        # Stable sort keeps insertion order for edits at the same offset.
        ordered = sorted(
            enumerate(self._edits), key=lambda item: (item[1].start, item[1].end, item[0])
        )
        out: List[bytes] = []
        cursor = 0
        for _, edit in ordered:
            if edit.start < cursor:
                raise OverlappingEditError(
                    f"{self.file_path}: edit at bytes {edit.start}-{edit.end} overlaps a previous edit"
                )
            out.append(self.source[cursor:edit.start])
            out.append(edit.text.encode("utf-8"))
            cursor = edit.end
        out.append(self.source[cursor:])
        return b"".join(out).decode("utf-8")

    def first_error_location(self) -> tuple:
        """1-based (line, column) of the first ERROR or MISSING node."""
        stack = [self.root]
        while stack:
            node = stack.pop()
            if node.is_error or node.is_missing:
                return node.start_point.row + 1, node.start_point.column + 1
            if node.has_error:
                stack.extend(reversed(node.children))
        return 0, 0
