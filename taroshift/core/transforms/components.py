"""Component resolution and inline config extraction.

Taro pages are authored either as class components (config as a class
field) or function components (config attached afterwards as
``Page.config = {...}``). Both resolve to a ``ComponentKind`` variant and
share one extraction routine that moves the config object literal into a
sibling ``*.config.<ext>`` module.
"""

import os
from dataclasses import dataclass
from typing import List, Optional, Union

import tree_sitter

from ..ast_parser import SyntaxTree
from ..ast_parser.queries import (
    CLASS_TYPES,
    FUNCTION_TYPES,
    class_fields,
    default_export,
    dedent,
    line_indent,
    member_end,
    pattern,
    removal_span,
    top_level_declaration,
)
from ..constants import CONFIG_SUFFIX
from ..errors import AmbiguousComponentError
from .base import SiblingFile

CONFIG_NAME = "config"


# ── Component kinds ──────────────────────────────────────────────────


@dataclass(frozen=True)
class ClassComponent:
    name: Optional[str]
    node: tree_sitter.Node


@dataclass(frozen=True)
class FunctionComponent:
    name: Optional[str]
    node: tree_sitter.Node


ComponentKind = Union[ClassComponent, FunctionComponent]


@dataclass(frozen=True)
class ConfigSite:
    """Where a component's config lives.

    Attributes:
        owner: The class field or ``X.config = ...`` statement to remove.
        value: The assigned value (an object literal when extractable).
        end: End byte of the owner including a trailing separator.
    """

    owner: tree_sitter.Node
    value: Optional[tree_sitter.Node]
    end: int

    @property
    def is_literal(self) -> bool:
        return self.value is not None and self.value.type == "object"


def _kind_for(node: tree_sitter.Node, name: Optional[str]) -> Optional[ComponentKind]:
    if node.type in CLASS_TYPES:
        return ClassComponent(name, node)
    if node.type in FUNCTION_TYPES:
        return FunctionComponent(name, node)
    return None


def _resolve_identifier(tree: SyntaxTree, name: str) -> Optional[ComponentKind]:
    node = top_level_declaration(tree, name)
    if node is None:
        return None
    return _kind_for(node, name)


def _wrapped_candidates(tree: SyntaxTree, call: tree_sitter.Node) -> List[ComponentKind]:
    """Components passed through HOC calls, e.g. ``connect(mapState)(Index)``."""
    found: List[ComponentKind] = []
    args = call.child_by_field_name("arguments")
    for arg in (args.named_children if args else []):
        if arg.type == "identifier":
            kind = _resolve_identifier(tree, tree.text(arg))
            if kind is not None:
                found.append(kind)
        elif arg.type == "call_expression":
            found.extend(_wrapped_candidates(tree, arg))
    return found


def resolve_default_component(tree: SyntaxTree) -> ComponentKind:
    """Resolve the module's default-exported component.

    Raises:
        AmbiguousComponentError: No default export, a non-component default
            export, or more than one candidate behind a wrapper call
    """
    export = default_export(tree)
    if export is None:
        raise AmbiguousComponentError(tree.file_path, "no default export")

    declaration = export.child_by_field_name("declaration")
    if declaration is not None:
        name_node = declaration.child_by_field_name("name")
        kind = _kind_for(declaration, tree.text(name_node) if name_node else None)
        if kind is not None:
            return kind

    value = export.child_by_field_name("value")
    if value is not None:
        if value.type == "identifier":
            kind = _resolve_identifier(tree, tree.text(value))
            if kind is not None:
                return kind
        elif value.type == "call_expression":
            candidates = _wrapped_candidates(tree, value)
            if len(candidates) == 1:
                return candidates[0]
            if len(candidates) > 1:
                raise AmbiguousComponentError(
                    tree.file_path, f"{len(candidates)} components behind the default export"
                )
        else:
            name_node = value.child_by_field_name("name")
            kind = _kind_for(value, tree.text(name_node) if name_node else None)
            if kind is not None:
                return kind

    raise AmbiguousComponentError(tree.file_path, "default export is not a resolvable component")


# ── Config sites ─────────────────────────────────────────────────────


def _config_assignment(name: Optional[str]):
    obj = pattern("identifier", text=name) if name else pattern("identifier")
    return pattern(
        "assignment_expression",
        left=pattern("member_expression", object=obj, property=pattern("property_identifier", text=CONFIG_NAME)),
    )


def _assignment_sites(tree: SyntaxTree, name: Optional[str]) -> List[ConfigSite]:
    matcher = _config_assignment(name)
    sites = []
    for statement in tree.root.children:
        if statement.type != "expression_statement":
            continue
        expr = statement.named_children[0] if statement.named_children else None
        if matcher.matches(expr, tree):
            sites.append(ConfigSite(statement, expr.child_by_field_name("right"), statement.end_byte))
    return sites


def config_sites(tree: SyntaxTree, component: ComponentKind) -> List[ConfigSite]:
    """Every place the component's ``config`` is declared."""
    sites: List[ConfigSite] = []
    if isinstance(component, ClassComponent):
        for member in class_fields(tree, component.node, CONFIG_NAME):
            sites.append(ConfigSite(member, member.child_by_field_name("value"), member_end(member)))
    if component.name:
        sites.extend(_assignment_sites(tree, component.name))
    return sites


def has_config_candidates(tree: SyntaxTree) -> bool:
    """Cheap file-wide check: any ``config`` class field or ``X.config =`` statement."""
    if _assignment_sites(tree, None):
        return True
    stack = [tree.root]
    while stack:
        node = stack.pop()
        if node.type in CLASS_TYPES and class_fields(tree, node, CONFIG_NAME):
            return True
        stack.extend(node.named_children)
    return False


def single_config_site(tree: SyntaxTree, component: ComponentKind) -> Optional[ConfigSite]:
    """The component's one extractable config site (None if it has none).

    Raises:
        AmbiguousComponentError: Several sites, or a non-literal config
    """
    sites = config_sites(tree, component)
    if not sites:
        return None
    if len(sites) > 1:
        raise AmbiguousComponentError(tree.file_path, f"{len(sites)} config declarations")
    site = sites[0]
    if not site.is_literal:
        raise AmbiguousComponentError(tree.file_path, "config is not an object literal")
    return site


# ── Extraction ───────────────────────────────────────────────────────


def config_artifact_path(file_path: str) -> str:
    """``pages/index/index.tsx`` → ``pages/index/index.config.ts``."""
    stem, ext = os.path.splitext(file_path)
    family = ".ts" if ext.lower() in (".ts", ".tsx") else ".js"
    return f"{stem}{CONFIG_SUFFIX}{family}"


def render_config_module(tree: SyntaxTree, site: ConfigSite) -> str:
    literal = dedent(tree.text(site.value), line_indent(tree.source, site.owner.start_byte))
    return f"export default {literal};\n"


def extract_config(tree: SyntaxTree, site: ConfigSite) -> SiblingFile:
    """Remove the config site from the tree and return the sibling module."""
    content = render_config_module(tree, site)
    tree.remove(*removal_span(tree.source, site.owner.start_byte, site.end))
    return SiblingFile(path=config_artifact_path(tree.file_path), content=content)