"""``taro-imports`` pass: split UI base classes out of ``@tarojs/taro``.

Taro 2:
    import Taro, { Component } from '@tarojs/taro'

Taro 3:
    import React, { Component } from 'react'
    import Taro from '@tarojs/taro'

Runs in two phases so the keep/drop decision for the legacy default
binding sees every reference in the file before anything is rewritten:

1. Collect: classify each reference to the default binding as a UI
   member (``Taro.Component``) or anything else (``Taro.request``).
2. Rewrite: UI members become bare symbols imported from ``react``; the
   legacy import keeps its default binding only if non-UI references
   remain, and keeps its non-UI named specifiers unconditionally.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import tree_sitter

from ..ast_parser import ImportDecl, SyntaxTree
from ..ast_parser.queries import (
    collect_imports,
    extend_import,
    identifier_references,
    is_imported,
    member_parts,
    removal_span,
    render_import,
)
from ..constants import REACT_DEFAULT_BINDING, REACT_PACKAGE, TARO_PACKAGE, UI_SYMBOLS
from .base import PassContext, PassResult, TransformPass

logger = logging.getLogger(__name__)


@dataclass
class _ImportPlan:
    """Phase-one findings for one legacy import statement."""

    decl: ImportDecl
    ui_specifiers: List[str] = field(default_factory=list)
    kept_specifiers: List[str] = field(default_factory=list)
    ui_members: List[tree_sitter.Node] = field(default_factory=list)
    other_refs: int = 0

    @property
    def keep_default(self) -> bool:
        return self.decl.default is not None and self.other_refs > 0

    def render_legacy(self) -> Optional[str]:
        default = self.decl.default if self.keep_default else None
        if default is None and not self.kept_specifiers:
            return None
        return render_import(
            default, self.kept_specifiers, self.decl.module, self.decl.quote, self.decl.semicolon
        )


def _ui_member(tree: SyntaxTree, ref: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """The ``<default>.<UISymbol>`` node around ``ref``, if that is what it is."""
    parent = ref.parent
    if parent is None or parent.type not in ("member_expression", "nested_type_identifier"):
        return None
    obj, prop = member_parts(parent)
    if obj is None or obj.start_byte != ref.start_byte or prop is None:
        return None
    return parent if tree.text(prop) in UI_SYMBOLS else None


def _legacy_imports(tree: SyntaxTree) -> List[ImportDecl]:
    return [
        decl for decl in collect_imports(tree)
        if decl.module == TARO_PACKAGE and not decl.type_only and not decl.namespace
    ]


class TaroImportsPass(TransformPass):

    @property
    def name(self) -> str:
        return "taro-imports"

    def match(self, tree: SyntaxTree) -> bool:
        for decl in _legacy_imports(tree):
            if any(spec.imported in UI_SYMBOLS for spec in decl.named):
                return True
            if decl.default and any(
                _ui_member(tree, ref) is not None
                for ref in identifier_references(tree, decl.default)
            ):
                return True
        return False

    # ── Phase 1 ─────────────────────────────────────────────────────

    def _collect(self, tree: SyntaxTree, decl: ImportDecl) -> _ImportPlan:
        plan = _ImportPlan(decl)
        for spec in decl.named:
            if spec.imported in UI_SYMBOLS:
                plan.ui_specifiers.append(spec.text)
            else:
                plan.kept_specifiers.append(spec.text)
        if decl.default:
            for ref in identifier_references(tree, decl.default):
                member = _ui_member(tree, ref)
                if member is not None:
                    plan.ui_members.append(member)
                else:
                    plan.other_refs += 1
        return plan

    # ── Phase 2 ─────────────────────────────────────────────────────

    def rewrite(self, tree: SyntaxTree, context: PassContext) -> PassResult:
        plans = [self._collect(tree, decl) for decl in _legacy_imports(tree)]
        plans = [p for p in plans if p.ui_specifiers or p.ui_members]
        if not plans:
            return PassResult.unchanged(tree)

        needed: List[str] = []
        bound_locals = set()

        def need(specifier: str) -> None:
            local = specifier.split(" as ")[-1].strip()
            if local not in bound_locals:
                bound_locals.add(local)
                needed.append(specifier)

        for plan in plans:
            for specifier in plan.ui_specifiers:
                need(specifier)
            for member in plan.ui_members:
                symbol = tree.text(member_parts(member)[1])
                tree.replace(member, symbol)
                need(symbol)

        react_decl = next(
            (d for d in collect_imports(tree)
             if d.module == REACT_PACKAGE and not d.type_only and not d.namespace
             and (d.default_node is not None or d.named_node is not None)),
            None,
        )
        if react_decl is not None:
            already = set(react_decl.local_names())
            extend_import(tree, react_decl, [s for s in needed if s.split(" as ")[-1].strip() not in already])
            react_line = None
        else:
            react_bound = is_imported(tree, REACT_DEFAULT_BINDING)
            first = plans[0].decl
            react_line = render_import(
                None if react_bound else REACT_DEFAULT_BINDING,
                needed,
                REACT_PACKAGE,
                first.quote,
                first.semicolon,
            )

        for index, plan in enumerate(plans):
            lines = [react_line] if index == 0 and react_line else []
            legacy = plan.render_legacy()
            if legacy:
                lines.append(legacy)
            if lines:
                tree.replace(plan.decl.node, "\n".join(lines))
            else:
                tree.remove(*removal_span(tree.source, plan.decl.node.start_byte, plan.decl.node.end_byte))

        logger.debug(
            "%s: moved %s to %s", context.file_path, ", ".join(needed), REACT_PACKAGE
        )
        return PassResult(text=tree.print())
