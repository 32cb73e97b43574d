"""Structural predicates over tree-sitter nodes.

Pattern checks are expressed as ``NodePattern`` data (node type plus
constraints on named fields and text) instead of ad hoc probing, and
the lookups the rewrite passes share live here: import collection,
object-literal properties, class members and line-aware removal spans.
"""

from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple, Union

import tree_sitter

from .base import SyntaxTree
from .models import ImportDecl, ImportSpecifier


@dataclass(frozen=True)
class NodePattern:
    """Declarative node matcher.

    Attributes:
        types: Accepted node types.
        text: Exact source text the node must have, if set.
        fields: ``(field_name, NodePattern)`` constraints on named children.
    """

    types: Tuple[str, ...]
    text: Optional[str] = None
    fields: Tuple[Tuple[str, "NodePattern"], ...] = ()

    def matches(self, node: Optional[tree_sitter.Node], tree: SyntaxTree) -> bool:
        if node is None or node.type not in self.types:
            return False
        if self.text is not None and tree.text(node) != self.text:
            return False
        return all(
            sub.matches(node.child_by_field_name(name), tree)
            for name, sub in self.fields
        )


def pattern(types: Union[str, Tuple[str, ...]], text: Optional[str] = None, **fields: NodePattern) -> NodePattern:
    if isinstance(types, str):
        types = (types,)
    return NodePattern(types, text, tuple(fields.items()))


# ── Node kinds ───────────────────────────────────────────────────────

CLASS_TYPES = ("class_declaration", "abstract_class_declaration", "class")
FIELD_TYPES = ("field_definition", "public_field_definition")
REFERENCE_TYPES = ("identifier", "shorthand_property_identifier")
FUNCTION_TYPES = (
    "function_declaration",
    "function_expression",
    "function",
    "arrow_function",
    "generator_function_declaration",
)

# ── Patterns ─────────────────────────────────────────────────────────

THIS_ROUTER = pattern(
    "member_expression",
    object=pattern("this"),
    property=pattern("property_identifier", text="$router"),
)

THIS_SCOPE = pattern(
    "member_expression",
    object=pattern("this"),
    property=pattern("property_identifier", text="$scope"),
)

DECORATOR = pattern("decorator")


def member_parts(node: tree_sitter.Node) -> Tuple[Optional[tree_sitter.Node], Optional[tree_sitter.Node]]:
    """(object, property) of a member expression or nested type identifier."""
    if node.type == "nested_type_identifier":
        return node.child_by_field_name("module"), node.child_by_field_name("name")
    return node.child_by_field_name("object"), node.child_by_field_name("property")


# ── Traversal ────────────────────────────────────────────────────────


def walk(node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Pre-order traversal in source order."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def find_all(tree: SyntaxTree, matcher: Union[NodePattern, str, Tuple[str, ...]], node: Optional[tree_sitter.Node] = None) -> List[tree_sitter.Node]:
    """All nodes under ``node`` (default: root) matching a pattern or node type(s)."""
    if not isinstance(matcher, NodePattern):
        matcher = pattern(matcher)
    return [n for n in walk(node or tree.root) if matcher.matches(n, tree)]


def enclosing(node: tree_sitter.Node, types: Tuple[str, ...]) -> Optional[tree_sitter.Node]:
    """Nearest strict ancestor whose type is in ``types``."""
    parent = node.parent
    while parent is not None:
        if parent.type in types:
            return parent
        parent = parent.parent
    return None


def has_token(node: tree_sitter.Node, token: str) -> bool:
    """True if an anonymous child token (e.g. 'static', 'default') is present."""
    return any(child.type == token for child in node.children)


# ── Literals ─────────────────────────────────────────────────────────


def string_value(tree: SyntaxTree, node: Optional[tree_sitter.Node]) -> Optional[str]:
    """Contents of a string literal (or substitution-free template), else None."""
    if node is None:
        return None
    if node.type == "string":
        return tree.text(node)[1:-1]
    if node.type == "template_string":
        if any(c.type == "template_substitution" for c in node.children):
            return None
        return tree.text(node)[1:-1]
    return None


def property_key(tree: SyntaxTree, node: tree_sitter.Node) -> Optional[str]:
    """Key name of an object pair or class member."""
    key = (
        node.child_by_field_name("key")
        or node.child_by_field_name("property")
        or node.child_by_field_name("name")
    )
    if key is None:
        return None
    if key.type == "string":
        return string_value(tree, key)
    return tree.text(key)


def object_pairs(tree: SyntaxTree, obj: tree_sitter.Node) -> List[Tuple[str, tree_sitter.Node]]:
    """``(key, pair_node)`` for each ``key: value`` entry of an object literal."""
    pairs = []
    for child in obj.named_children:
        if child.type == "pair":
            key = property_key(tree, child)
            if key is not None:
                pairs.append((key, child))
    return pairs


def find_pair(tree: SyntaxTree, obj: tree_sitter.Node, key: str) -> Optional[tree_sitter.Node]:
    for name, pair in object_pairs(tree, obj):
        if name == key:
            return pair
    return None


def find_object_with_key(tree: SyntaxTree, key: str) -> Optional[Tuple[tree_sitter.Node, tree_sitter.Node]]:
    """First object literal (pre-order) holding ``key``; returns (object, pair)."""
    for node in walk(tree.root):
        if node.type == "object":
            pair = find_pair(tree, node, key)
            if pair is not None:
                return node, pair
    return None


# ── Classes ──────────────────────────────────────────────────────────


def class_members(class_node: tree_sitter.Node) -> List[tree_sitter.Node]:
    body = class_node.child_by_field_name("body")
    if body is None:
        return []
    return [c for c in body.named_children if c.type != "comment"]


def class_fields(tree: SyntaxTree, class_node: tree_sitter.Node, name: str) -> List[tree_sitter.Node]:
    """Field definitions (static or instance) named ``name``."""
    return [
        member for member in class_members(class_node)
        if member.type in FIELD_TYPES and property_key(tree, member) == name
    ]


def class_methods(tree: SyntaxTree, class_node: tree_sitter.Node, name: str) -> List[tree_sitter.Node]:
    return [
        member for member in class_members(class_node)
        if member.type == "method_definition" and property_key(tree, member) == name
    ]


def member_end(node: tree_sitter.Node) -> int:
    """End byte of a class member including a trailing ``;``/``,`` token."""
    nxt = node.next_sibling
    if nxt is not None and nxt.type in (";", ",") and nxt.start_byte == node.end_byte:
        return nxt.end_byte
    return node.end_byte


# ── Imports ──────────────────────────────────────────────────────────


def collect_imports(tree: SyntaxTree) -> List[ImportDecl]:
    """Structured view of every top-level import statement."""
    imports = []
    for child in tree.root.children:
        if child.type != "import_statement":
            continue
        source_node = child.child_by_field_name("source")
        module = string_value(tree, source_node)
        if module is None:
            continue
        raw = tree.text(child)
        decl = ImportDecl(
            node=child,
            module=module,
            quote=tree.text(source_node)[0],
            type_only=has_token(child, "type"),
            semicolon=raw.rstrip().endswith(";"),
        )
        clause = next((c for c in child.children if c.type == "import_clause"), None)
        if clause is not None:
            for part in clause.named_children:
                if part.type == "identifier":
                    decl.default = tree.text(part)
                    decl.default_node = part
                elif part.type == "namespace_import":
                    ident = next((c for c in part.named_children if c.type == "identifier"), None)
                    decl.namespace = tree.text(ident) if ident else None
                elif part.type == "named_imports":
                    decl.named_node = part
                    for spec in part.named_children:
                        if spec.type != "import_specifier":
                            continue
                        name = spec.child_by_field_name("name")
                        alias = spec.child_by_field_name("alias")
                        decl.named.append(ImportSpecifier(
                            imported=tree.text(name),
                            local=tree.text(alias or name),
                            node=spec,
                            text=tree.text(spec),
                        ))
        imports.append(decl)
    return imports


def is_imported(tree: SyntaxTree, local_name: str) -> bool:
    """True if any import statement binds ``local_name``."""
    return any(local_name in decl.local_names() for decl in collect_imports(tree))


def render_import(default: Optional[str], named: List[str], module: str, quote: str = "'", semicolon: bool = True) -> str:
    """Render ``import Default, { a, b } from 'module';``."""
    parts = []
    if default:
        parts.append(default)
    if named:
        parts.append("{ " + ", ".join(named) + " }")
    end = ";" if semicolon else ""
    if not parts:
        return f"import {quote}{module}{quote}{end}"
    return f"import {', '.join(parts)} from {quote}{module}{quote}{end}"


def add_named_import(tree: SyntaxTree, module: str, symbol: str) -> None:
    """Record the edits needed so ``symbol`` is imported from ``module``.

    Extends an existing import from the module when possible; otherwise
    inserts a new import statement after the last import (or at the top).
    No-op if ``symbol`` is already bound by an import.
    """
    if is_imported(tree, symbol):
        return
    decls = collect_imports(tree)
    for decl in decls:
        if decl.module != module or decl.type_only or decl.namespace:
            continue
        if decl.named_node is not None or decl.default_node is not None:
            extend_import(tree, decl, [symbol])
            return

    quote = decls[0].quote if decls else "'"
    semicolon = decls[-1].semicolon if decls else True
    statement = render_import(None, [symbol], module, quote, semicolon)
    if decls:
        tree.insert(decls[-1].node.end_byte, "\n" + statement)
    else:
        tree.insert(0, statement + "\n")


# ── Exports ──────────────────────────────────────────────────────────


def default_export(tree: SyntaxTree) -> Optional[tree_sitter.Node]:
    """The ``export default ...`` statement, if any."""
    for child in tree.root.children:
        if child.type == "export_statement" and has_token(child, "default"):
            return child
    return None


def top_level_declaration(tree: SyntaxTree, name: str) -> Optional[tree_sitter.Node]:
    """Top-level class/function/variable value bound to ``name``.

    Returns the class or function node itself (for ``const X = () => ...``
    the arrow function, for ``const X = class ...`` the class expression).
    """
    for child in tree.root.children:
        node = child
        if child.type == "export_statement":
            node = child.child_by_field_name("declaration")
            if node is None:
                continue
        if node.type in CLASS_TYPES + FUNCTION_TYPES:
            if tree.text(node.child_by_field_name("name")) == name:
                return node
        elif node.type in ("lexical_declaration", "variable_declaration"):
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                if tree.text(declarator.child_by_field_name("name")) == name:
                    value = declarator.child_by_field_name("value")
                    return value
    return None


# ── Layout ───────────────────────────────────────────────────────────


def line_indent(source: bytes, offset: int) -> str:
    """Leading whitespace of the line containing ``offset``."""
    begin = source.rfind(b"\n", 0, offset) + 1
    end = begin
    while end < len(source) and source[end:end + 1] in (b" ", b"\t"):
        end += 1
    return source[begin:end].decode("utf-8")


def removal_span(source: bytes, start: int, end: int) -> Tuple[int, int]:
    """Byte span to delete so that removing ``[start, end)`` leaves clean text.

    If the range sits alone on its lines the whole lines go, plus one blank
    line that would otherwise follow an opening brace or another blank
    line. Inline ranges also take trailing spaces with them.
    """
    line_begin = source.rfind(b"\n", 0, start) + 1
    line_end = source.find(b"\n", end)
    if line_end == -1:
        line_end = len(source)

    if source[line_begin:start].strip() or source[end:line_end].strip():
        while end < len(source) and source[end:end + 1] in (b" ", b"\t"):
            end += 1
        return start, end

    span_end = min(line_end + 1, len(source))
    next_end = source.find(b"\n", span_end)
    if next_end != -1 and not source[span_end:next_end].strip():
        prev_begin = source.rfind(b"\n", 0, max(line_begin - 1, 0)) + 1
        prev_line = source[prev_begin:max(line_begin - 1, 0)].strip()
        if line_begin == 0 or not prev_line or prev_line.endswith(b"{"):
            span_end = next_end + 1
    return line_begin, span_end


def dedent(text: str, indent: str) -> str:
    """Strip the ``indent`` prefix from every line after the first."""
    if not indent:
        return text
    lines = text.split("\n")
    out = [lines[0]]
    for line in lines[1:]:
        out.append(line[len(indent):] if line.startswith(indent) else line)
    return "\n".join(out)


def identifier_references(tree: SyntaxTree, name: str) -> List[tree_sitter.Node]:
    """Every identifier named ``name`` outside import statements.

    Shorthand properties (``{ Taro }``) read the binding too, so they count.
    """
    refs = []
    stack = [tree.root]
    while stack:
        node = stack.pop()
        if node.type == "import_statement":
            continue
        if node.type in REFERENCE_TYPES and tree.text(node) == name:
            refs.append(node)
        stack.extend(reversed(node.children))
    return refs


def extend_import(tree: SyntaxTree, decl: ImportDecl, specifiers: List[str]) -> None:
    """Record edits appending named ``specifiers`` to an existing import."""
    if not specifiers:
        return
    joined = ", ".join(specifiers)
    if decl.named_node is not None:
        if decl.named:
            tree.insert(decl.named[-1].node.end_byte, f", {joined}")
        else:
            tree.replace(decl.named_node, f"{{ {joined} }}")
    elif decl.default_node is not None:
        tree.insert(decl.default_node.end_byte, f", {{ {joined} }}")
    else:
        raise ValueError(f"cannot extend import of {decl.module!r} with named specifiers")
