"""Syntax tree adapter data models.

Pure data containers shared by the adapter, the query helpers and the
rewrite passes. No parsing logic.
"""

from dataclasses import dataclass, field
from typing import List, Optional

import tree_sitter


@dataclass(frozen=True)
class Edit:
    """A byte-range replacement against the original source.

    ``start == end`` is a pure insertion.
    """

    start: int
    end: int
    text: str


@dataclass
class ImportSpecifier:
    """One ``name [as alias]`` entry of a named import."""

    imported: str
    local: str
    node: tree_sitter.Node
    text: str  # Raw specifier text, e.g. "Component as Base"


@dataclass
class ImportDecl:
    """Structured view of one ``import ... from '...'`` statement."""

    node: tree_sitter.Node
    module: str
    quote: str = "'"
    default: Optional[str] = None
    default_node: Optional[tree_sitter.Node] = None
    namespace: Optional[str] = None
    named: List[ImportSpecifier] = field(default_factory=list)
    named_node: Optional[tree_sitter.Node] = None  # The `{ ... }` clause
    type_only: bool = False
    semicolon: bool = True

    def local_names(self) -> List[str]:
        names = [s.local for s in self.named]
        if self.default:
            names.append(self.default)
        if self.namespace:
            names.append(self.namespace)
        return names
