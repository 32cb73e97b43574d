"""Transform pass base class and supporting dataclasses.

A pass is one self-contained match-and-rewrite transformation applied
across the project's file set. Passes are stateless: everything they
need per file arrives in ``PassContext`` and everything they produce
leaves in ``PassResult``; the orchestrator owns all file I/O.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional

from ..ast_parser import SyntaxTree


# ── Dataclasses ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class SiblingFile:
    """A new artifact written next to the transformed file."""

    path: str
    content: str


@dataclass(frozen=True)
class PassContext:
    """Per-file inputs shared by every pass."""

    file_path: str
    """Absolute path of the file being transformed."""

    module_path: str
    """Project-relative path without extension, e.g. ``src/pages/index/index``."""

    pages: FrozenSet[str] = frozenset()
    """Page module paths declared by the entry module."""

    entry_module: Optional[str] = None
    """Module path of the entry (``<sourceRoot>/app``)."""

    @property
    def is_page(self) -> bool:
        return self.module_path in self.pages

    @property
    def is_entry(self) -> bool:
        return self.entry_module is not None and self.module_path == self.entry_module


@dataclass
class PassResult:
    """Outcome of ``TransformPass.rewrite`` for one file."""

    text: str
    """Source text after the rewrite (unchanged text means no-op)."""

    sibling_files: List[SiblingFile] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def unchanged(cls, tree: SyntaxTree, warning: Optional[str] = None) -> "PassResult":
        return cls(
            text=tree.source.decode("utf-8"),
            warnings=[warning] if warning else [],
        )


# ── Abstract Base Class ──────────────────────────────────────────────


class TransformPass(ABC):
    """Abstract base for rewrite passes.

    Identity is ``name``. ``match`` is a cheap read-only check; ``rewrite``
    is only called when it returns ``True`` and records its edits on the
    tree it receives.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Pass identifier, e.g. ``"router"``."""
        ...

    def applies_to(self, context: PassContext) -> bool:
        """Scope filter evaluated before parsing. Default: every file."""
        return True

    @abstractmethod
    def match(self, tree: SyntaxTree) -> bool:
        """True if the file contains the pattern this pass rewrites."""
        ...

    @abstractmethod
    def rewrite(self, tree: SyntaxTree, context: PassContext) -> PassResult:
        """Rewrite a matched tree. Must be idempotent."""
        ...

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name}>"
