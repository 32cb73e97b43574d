"""Dependency marker — structural features observed during a run.

Some language features need extra build tooling in Taro 3 (legacy
decorators need the decorators babel plugin, ``const enum`` needs
babel-plugin-const-enum). Every file a pass processes is scanned and
the features it contains are recorded against its path, so a file seen
by several passes still counts once.

The set is an explicit accumulator: each worker fills its own and the
orchestrator merges them sequentially after the pass.
"""

from enum import Enum
from typing import Callable, Dict, Iterable, List, Set

import tree_sitter

from ..ast_parser import SyntaxTree
from ..ast_parser.queries import DECORATOR, has_token, walk


class DependencyFeature(str, Enum):
    """Closed vocabulary of features the marker can record."""

    LEGACY_DECORATORS = "legacy-decorators"
    """``@decorator`` syntax anywhere in the file."""

    CONST_ENUM = "const-enum"
    """A TypeScript ``const enum`` declaration."""


# Build-tool packages each feature requires in a Taro 3 project
FEATURE_PACKAGES: Dict[DependencyFeature, str] = {
    DependencyFeature.LEGACY_DECORATORS: "@babel/plugin-proposal-decorators",
    DependencyFeature.CONST_ENUM: "babel-plugin-const-enum",
}


def _is_const_enum(node: tree_sitter.Node, tree: SyntaxTree) -> bool:
    return node.type == "enum_declaration" and (
        has_token(node, "const") or tree.text(node).startswith("const")
    )


FEATURE_PREDICATES: Dict[DependencyFeature, Callable[[tree_sitter.Node, SyntaxTree], bool]] = {
    DependencyFeature.LEGACY_DECORATORS: DECORATOR.matches,
    DependencyFeature.CONST_ENUM: _is_const_enum,
}


class DependencyMarkerSet:
    """Feature → files in which it was observed. Additive only."""

    def __init__(self):
        self._observed: Dict[DependencyFeature, Set[str]] = {}

    def record(self, feature: DependencyFeature, file_path: str) -> None:
        self._observed.setdefault(DependencyFeature(feature), set()).add(file_path)

    def merge(self, other: "DependencyMarkerSet") -> None:
        """Fold another set's observations into this one."""
        for feature, paths in other._observed.items():
            self._observed.setdefault(feature, set()).update(paths)

    def count(self, feature: DependencyFeature) -> int:
        return len(self._observed.get(DependencyFeature(feature), ()))

    def counts(self) -> Dict[str, int]:
        """Occurrence count for every feature in the vocabulary (zeros included)."""
        return {feature.value: self.count(feature) for feature in DependencyFeature}

    def features(self) -> List[DependencyFeature]:
        return [feature for feature in DependencyFeature if self.count(feature) > 0]

    def packages(self) -> List[str]:
        """Build-tool packages required by the observed features."""
        return [FEATURE_PACKAGES[feature] for feature in self.features()]

    def __contains__(self, feature) -> bool:
        return self.count(feature) > 0

    def __bool__(self) -> bool:
        return any(self._observed.values())

    def __repr__(self) -> str:
        return f"DependencyMarkerSet({self.counts()})"


def observe(tree: SyntaxTree, file_path: str = "") -> DependencyMarkerSet:
    """Scan a tree (read-only) and return the features it contains."""
    markers = DependencyMarkerSet()
    path = file_path or tree.file_path
    pending: Iterable[DependencyFeature] = list(DependencyFeature)
    for node in walk(tree.root):
        found = [f for f in pending if FEATURE_PREDICATES[f](node, tree)]
        for feature in found:
            markers.record(feature, path)
        if found:
            pending = [f for f in pending if f not in found]
            if not pending:
                break
    return markers
