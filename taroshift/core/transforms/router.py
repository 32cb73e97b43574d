"""``router`` pass: ``this.$router`` → ``this.$instance.router``.

Taro 3 components no longer carry ``$router``; the router hangs off the
instance returned by ``getCurrentInstance()``. Each class that reads
``this.$router`` gets one ``$instance = getCurrentInstance();`` field.

Not migrated (left for manual follow-up, reported as warnings):
``this.$scope`` and payloads of router-change events.
"""

import logging
from typing import Dict, List, Tuple

import tree_sitter

from ..ast_parser import SyntaxTree
from ..ast_parser.queries import (
    CLASS_TYPES,
    THIS_ROUTER,
    THIS_SCOPE,
    add_named_import,
    class_fields,
    enclosing,
    find_all,
    line_indent,
)
from ..constants import CURRENT_INSTANCE_FACTORY, TARO_PACKAGE
from .base import PassContext, PassResult, TransformPass

logger = logging.getLogger(__name__)

INSTANCE_FIELD = "$instance"
INSTANCE_ROUTER = "this.$instance.router"


class RouterPass(TransformPass):

    @property
    def name(self) -> str:
        return "router"

    def match(self, tree: SyntaxTree) -> bool:
        return bool(find_all(tree, THIS_ROUTER) or find_all(tree, THIS_SCOPE))

    def rewrite(self, tree: SyntaxTree, context: PassContext) -> PassResult:
        warnings: List[str] = []
        if find_all(tree, THIS_SCOPE):
            warnings.append(f"{context.file_path}: this.$scope is not migrated, fix it manually")

        by_class: Dict[Tuple[int, int], Tuple[tree_sitter.Node, List[tree_sitter.Node]]] = {}
        for usage in find_all(tree, THIS_ROUTER):
            owner = enclosing(usage, CLASS_TYPES)
            if owner is None:
                warnings.append(
                    f"{context.file_path}:{usage.start_point.row + 1}: this.$router outside a class left unchanged"
                )
                continue
            key = (owner.start_byte, owner.end_byte)
            by_class.setdefault(key, (owner, []))[1].append(usage)

        if not by_class:
            result = PassResult.unchanged(tree)
            result.warnings.extend(warnings)
            return result

        for owner, usages in by_class.values():
            for usage in usages:
                tree.replace(usage, INSTANCE_ROUTER)
            if not class_fields(tree, owner, INSTANCE_FIELD):
                self._inject_instance_field(tree, owner)

        add_named_import(tree, TARO_PACKAGE, CURRENT_INSTANCE_FACTORY)
        logger.debug("%s: rewrote $router in %d class(es)", context.file_path, len(by_class))
        return PassResult(text=tree.print(), warnings=warnings)

    @staticmethod
    def _inject_instance_field(tree: SyntaxTree, owner: tree_sitter.Node) -> None:
        """Insert ``$instance = getCurrentInstance();`` as the first class member."""
        body = owner.child_by_field_name("body")
        declaration = f"{INSTANCE_FIELD} = {CURRENT_INSTANCE_FACTORY}();"
        first = body.named_children[0] if body.named_children else None
        if first is None:
            tree.insert(body.start_byte + 1, f" {declaration} ")
        elif first.start_point.row == body.start_point.row:
            tree.insert(first.start_byte, f"{declaration} ")
        else:
            tree.insert(first.start_byte, f"{declaration}\n{line_indent(tree.source, first.start_byte)}")
