"""Project Model — build config and entry module of a Taro project.

Runs once, before any pass, and in two stages:

1. ``ProjectModel.load()`` reads everything and raises the fatal errors
   (no build config, no ``sourceRoot``, no entry) before a single byte
   is written.
2. ``transform_and_overwrite_config()`` and ``transform_entry()`` rewrite
   the two files in place. Both are idempotent.
"""

import logging
import os
import posixpath
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import tree_sitter

from ..ast_parser import ParseError, SyntaxTree, parse_file
from ..ast_parser.queries import (
    CLASS_TYPES,
    THIS_ROUTER,
    add_named_import,
    class_methods,
    collect_imports,
    default_export,
    find_all,
    find_object_with_key,
    find_pair,
    line_indent,
    object_pairs,
    pattern,
    string_value,
)
from ..constants import (
    BUILD_CONFIG_CANDIDATES,
    CURRENT_INSTANCE_FACTORY,
    DEFINE_CONSTANTS_FIELD,
    ENTRY_BASENAME,
    FRAMEWORK_FIELD,
    FRAMEWORK_VALUE,
    LAUNCH_HOOK,
    LEGACY_MOUNT_HOOK,
    SOURCE_EXTENSIONS,
    TARO_PACKAGE,
)
from ..errors import AmbiguousComponentError, ConfigNotFound, EntryNotFound, SourceRootMissing
from ..pipeline import atomic_write
from ..transforms import SiblingFile
from ..transforms.components import (
    ClassComponent,
    ConfigSite,
    config_artifact_path,
    config_sites,
    extract_config,
    resolve_default_component,
)

logger = logging.getLogger(__name__)

SOURCE_ROOT_FIELD = "sourceRoot"
PAGES_FIELD = "pages"
SUBPACKAGES_FIELD = "subPackages"
LAUNCH_ROUTER = f"{CURRENT_INSTANCE_FACTORY}().router"


@dataclass
class Project:
    """Structure of a Taro project, as read from its build config and entry."""

    root_dir: str
    build_config_path: str
    source_root: str
    entry_file_path: str
    pages: List[str] = field(default_factory=list)

    @property
    def source_dir(self) -> str:
        return os.path.join(self.root_dir, self.source_root)

    @property
    def entry_module(self) -> str:
        """Module path of the entry, e.g. ``src/app``."""
        return posixpath.join(self.source_root, ENTRY_BASENAME)


# ── Build config ─────────────────────────────────────────────────────


def locate_build_config(root_dir: str) -> str:
    """Path of the build configuration module.

    Raises:
        ConfigNotFound: None of the conventional locations exist
    """
    for candidate in BUILD_CONFIG_CANDIDATES:
        path = os.path.join(root_dir, candidate)
        if os.path.isfile(path):
            return path
    raise ConfigNotFound(root_dir, BUILD_CONFIG_CANDIDATES)


def extract_source_root(tree: SyntaxTree) -> str:
    """Value of the ``sourceRoot`` field of the config object literal.

    Raises:
        SourceRootMissing: No such field, or not a non-empty string literal
    """
    found = find_object_with_key(tree, SOURCE_ROOT_FIELD)
    if found is None:
        raise SourceRootMissing(tree.file_path)
    _, pair = found
    value = string_value(tree, pair.child_by_field_name("value"))
    if not value:
        raise SourceRootMissing(tree.file_path, "sourceRoot is not a non-empty string literal")
    return posixpath.normpath(value.strip("/"))


def _quote_key(key: str) -> str:
    return key if key.isidentifier() else f"'{key}'"


def _insert_entries(tree: SyntaxTree, obj: tree_sitter.Node, entries: List[str]) -> None:
    """Insert ``key: value`` entries at the top of an object literal."""
    pairs = [node for node in obj.named_children if node.type != "comment"]
    if not pairs:
        outer = line_indent(tree.source, obj.start_byte)
        inner = outer + "  "
        body = ",\n".join(inner + entry for entry in entries)
        tree.replace(obj, "{\n" + body + "\n" + outer + "}")
        return

    first = pairs[0]
    if first.start_point.row == obj.start_point.row:
        tree.insert(first.start_byte, "".join(f"{entry}, " for entry in entries))
    else:
        indent = line_indent(tree.source, first.start_byte)
        tree.insert(first.start_byte, "".join(f"{entry},\n{indent}" for entry in entries))


def rewrite_build_config(tree: SyntaxTree, define_constants: Optional[Dict[str, str]] = None) -> bool:
    """Ensure ``framework: 'react'`` and the ``defineConstants`` entries exist.

    Existing entries are never modified. Returns True if edits were recorded.

    Raises:
        SourceRootMissing: The config object literal cannot be found
    """
    found = find_object_with_key(tree, SOURCE_ROOT_FIELD)
    if found is None:
        raise SourceRootMissing(tree.file_path)
    config, _ = found
    define_constants = define_constants or {}

    top_level: List[str] = []
    if find_pair(tree, config, FRAMEWORK_FIELD) is None:
        top_level.append(f"{FRAMEWORK_FIELD}: '{FRAMEWORK_VALUE}'")

    constants_pair = find_pair(tree, config, DEFINE_CONSTANTS_FIELD)
    if constants_pair is None:
        if define_constants:
            indent = line_indent(tree.source, config.named_children[0].start_byte) if config.named_children else ""
            lines = ",\n".join(f"{indent}  {_quote_key(k)}: {v}" for k, v in define_constants.items())
            top_level.append(f"{DEFINE_CONSTANTS_FIELD}: {{\n{lines}\n{indent}}}")
    else:
        value = constants_pair.child_by_field_name("value")
        if value is None or value.type != "object":
            logger.warning(
                "%s: %s is not an object literal, left unchanged", tree.file_path, DEFINE_CONSTANTS_FIELD
            )
        else:
            present = {key for key, _ in object_pairs(tree, value)}
            missing = [f"{_quote_key(k)}: {v}" for k, v in define_constants.items() if k not in present]
            if missing:
                _insert_entries(tree, value, missing)

    if top_level:
        _insert_entries(tree, config, top_level)
    return tree.edited


# ── Entry ────────────────────────────────────────────────────────────


def locate_entry(source_dir: str) -> str:
    """Path of ``app.<ext>`` inside the source directory.

    Raises:
        EntryNotFound: No entry module with a supported extension
    """
    for ext in SOURCE_EXTENSIONS:
        path = os.path.join(source_dir, ENTRY_BASENAME + ext)
        if os.path.isfile(path):
            return path
    raise EntryNotFound(source_dir)


def _config_sites_anywhere(tree: SyntaxTree) -> List[ConfigSite]:
    """Config sites of the default export first, then of any top-level class."""
    sites: List[ConfigSite] = []
    try:
        sites.extend(config_sites(tree, resolve_default_component(tree)))
    except AmbiguousComponentError as e:
        logger.debug("Entry default export not resolved: %s", e)
    for child in tree.root.children:
        if child.type in CLASS_TYPES:
            name = child.child_by_field_name("name")
            sites.extend(config_sites(tree, ClassComponent(tree.text(name) if name else None, child)))
    return sites


def find_app_site(tree: SyntaxTree) -> Optional[ConfigSite]:
    """The entry's config site: a ``config`` object literal declaring ``pages``."""
    for site in _config_sites_anywhere(tree):
        if site.is_literal and find_pair(tree, site.value, PAGES_FIELD) is not None:
            return site
    return None


def find_app_config(tree: SyntaxTree) -> Optional[tree_sitter.Node]:
    """The object literal holding the route list.

    Either a ``config`` on the app component (Taro 2 shape) or the module's
    default-exported object (``app.config.<ext>`` shape).
    """
    export = default_export(tree)
    if export is not None:
        value = export.child_by_field_name("value")
        if value is not None and value.type == "call_expression":
            # export default defineAppConfig({...})
            args = value.child_by_field_name("arguments")
            value = args.named_children[0] if args and args.named_children else None
        if value is not None and value.type == "object" and find_pair(tree, value, PAGES_FIELD) is not None:
            return value
    site = find_app_site(tree)
    return site.value if site is not None else None


def _string_list(tree: SyntaxTree, node: Optional[tree_sitter.Node]) -> List[str]:
    if node is None or node.type != "array":
        return []
    values = []
    for element in node.named_children:
        value = string_value(tree, element)
        if value is None:
            if element.type != "comment":
                logger.warning(
                    "%s:%d: non-literal page entry ignored", tree.file_path, element.start_point.row + 1
                )
            continue
        values.append(value)
    return values


def pages_from_config(tree: SyntaxTree, config: tree_sitter.Node, source_root: str = "") -> List[str]:
    """Ordered, de-duplicated page module paths declared by a config object."""
    declared: List[str] = []
    pages_pair = find_pair(tree, config, PAGES_FIELD)
    if pages_pair is not None:
        declared.extend(_string_list(tree, pages_pair.child_by_field_name("value")))

    packages_pair = find_pair(tree, config, SUBPACKAGES_FIELD)
    packages = packages_pair.child_by_field_name("value") if packages_pair is not None else None
    if packages is not None and packages.type == "array":
        for package in packages.named_children:
            if package.type != "object":
                continue
            root_pair = find_pair(tree, package, "root")
            root = string_value(tree, root_pair.child_by_field_name("value")) if root_pair else None
            sub_pages = find_pair(tree, package, PAGES_FIELD)
            if not root or sub_pages is None:
                continue
            declared.extend(
                posixpath.join(root, page) for page in _string_list(tree, sub_pages.child_by_field_name("value"))
            )

    pages: List[str] = []
    seen = set()
    for page in declared:
        path = posixpath.normpath(posixpath.join(source_root, page.strip().lstrip("/")))
        if path not in seen:
            seen.add(path)
            pages.append(path)
    return pages


def extract_pages(tree: SyntaxTree, source_root: str = "") -> List[str]:
    """Page module paths from the entry module ([] if it declares none)."""
    config = find_app_config(tree)
    if config is None:
        return []
    return pages_from_config(tree, config, source_root)


def _taro_render_call(tree: SyntaxTree) -> Optional[tuple]:
    """``Taro.render(<App />, ...)`` statement and the rendered component name."""
    taro_names = {d.default for d in collect_imports(tree) if d.module == TARO_PACKAGE and d.default}
    for name in taro_names:
        render = pattern(
            "call_expression",
            function=pattern(
                "member_expression",
                object=pattern("identifier", text=name),
                property=pattern("property_identifier", text="render"),
            ),
        )
        for statement in tree.root.children:
            if statement.type != "expression_statement" or not statement.named_children:
                continue
            call = statement.named_children[0]
            if not render.matches(call, tree):
                continue
            args = call.child_by_field_name("arguments")
            element = args.named_children[0] if args and args.named_children else None
            if element is not None and element.type == "jsx_self_closing_element":
                component = element.child_by_field_name("name")
                if component is not None:
                    return statement, tree.text(component)
    return None


def rewrite_entry(tree: SyntaxTree, extract: bool = True) -> List[SiblingFile]:
    """Rewrite the entry module to the Taro 3 shape (edits recorded on ``tree``).

    - ``componentWillMount`` → ``onLaunch`` on the app class (unless
      ``onLaunch`` already exists)
    - ``this.$router`` → ``getCurrentInstance().router``
    - ``Taro.render(<App />, ...)`` → ``export default App``
    - the app ``config`` moves to ``app.config.<ext>`` when ``extract``

    Returns:
        Sibling files to create (the extracted app config, if any)
    """
    app_site = find_app_site(tree)
    app_class = None
    try:
        component = resolve_default_component(tree)
        if isinstance(component, ClassComponent):
            app_class = component.node
    except AmbiguousComponentError as e:
        logger.debug("Entry default export not resolved: %s", e)
    if app_class is None and app_site is not None and app_site.owner.type != "expression_statement":
        app_class = app_site.owner.parent.parent

    if app_class is not None and not class_methods(tree, app_class, LAUNCH_HOOK):
        for method in class_methods(tree, app_class, LEGACY_MOUNT_HOOK):
            tree.replace(method.child_by_field_name("name"), LAUNCH_HOOK)

    usages = find_all(tree, THIS_ROUTER)
    for usage in usages:
        tree.replace(usage, LAUNCH_ROUTER)
    if usages:
        add_named_import(tree, TARO_PACKAGE, CURRENT_INSTANCE_FACTORY)

    if default_export(tree) is None:
        render = _taro_render_call(tree)
        if render is not None:
            statement, component_name = render
            semicolon = ";" if tree.text(statement).rstrip().endswith(";") else ""
            tree.replace(statement, f"export default {component_name}{semicolon}")

    siblings: List[SiblingFile] = []
    if extract and app_site is not None:
        siblings.append(extract_config(tree, app_site))
    return siblings


# ── Model ────────────────────────────────────────────────────────────


class ProjectModel:
    """Reads the project structure and rewrites the build config and entry.

    Args:
        root_dir: Project root (where ``config/`` lives)
        define_constants: ``defineConstants`` entries to ensure in the build config
    """

    def __init__(self, root_dir: str, define_constants: Optional[Dict[str, str]] = None):
        self.root_dir = os.path.abspath(root_dir)
        self.define_constants = dict(define_constants or {})
        self.project: Optional[Project] = None
        self._config_tree: Optional[SyntaxTree] = None
        self._entry_tree: Optional[SyntaxTree] = None

    def load(self) -> Project:
        """Read the build config and entry. Writes nothing.

        Raises:
            ConfigNotFound, SourceRootMissing, EntryNotFound
        """
        config_path = locate_build_config(self.root_dir)
        try:
            self._config_tree = parse_file(config_path)
        except ParseError as e:
            raise SourceRootMissing(config_path, f"cannot parse build config ({e})") from e
        source_root = extract_source_root(self._config_tree)

        source_dir = os.path.join(self.root_dir, source_root)
        if not os.path.isdir(source_dir):
            raise SourceRootMissing(config_path, f"sourceRoot '{source_root}' is not a directory")

        entry_path = locate_entry(source_dir)
        try:
            self._entry_tree = parse_file(entry_path)
        except ParseError as e:
            raise EntryNotFound(source_dir, f"cannot parse entry module ({e})") from e

        pages = extract_pages(self._entry_tree, source_root)
        if not pages:
            pages = self._pages_from_extracted_config(entry_path, source_root)
        if not pages:
            logger.warning("%s declares no pages; page-config will not run", entry_path)

        self.project = Project(
            root_dir=self.root_dir,
            build_config_path=config_path,
            source_root=source_root,
            entry_file_path=entry_path,
            pages=pages,
        )
        logger.info("Project: sourceRoot=%s, %d page(s)", source_root, len(pages))
        return self.project

    @staticmethod
    def _pages_from_extracted_config(entry_path: str, source_root: str) -> List[str]:
        artifact = config_artifact_path(entry_path)
        if not os.path.isfile(artifact):
            return []
        try:
            tree = parse_file(artifact)
        except ParseError as e:
            logger.warning("Cannot read pages from %s: %s", artifact, e)
            return []
        return extract_pages(tree, source_root)

    def _require_loaded(self) -> Project:
        if self.project is None:
            self.load()
        return self.project

    def transform_and_overwrite_config(self) -> bool:
        """Rewrite the build config in place. Returns True if it changed."""
        project = self._require_loaded()
        tree = self._config_tree
        if not rewrite_build_config(tree, self.define_constants):
            return False
        atomic_write(project.build_config_path, tree.print())
        logger.info("Updated build config %s", project.build_config_path)
        return True

    def transform_entry(self) -> bool:
        """Rewrite the entry module in place. Returns True if anything changed."""
        project = self._require_loaded()
        tree = self._entry_tree
        artifact = config_artifact_path(project.entry_file_path)
        extract = not os.path.exists(artifact)
        if not extract and find_app_site(tree) is not None:
            logger.warning("%s already exists; app config left in %s", artifact, project.entry_file_path)

        siblings = rewrite_entry(tree, extract=extract)
        if not tree.edited:
            return False
        for sibling in siblings:
            atomic_write(sibling.path, sibling.content)
            logger.info("Created %s", sibling.path)
        atomic_write(project.entry_file_path, tree.print())
        logger.info("Updated entry %s", project.entry_file_path)
        return True
