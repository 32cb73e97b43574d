"""JavaScript dialect (JSX and decorators included) using tree-sitter."""

import tree_sitter
import tree_sitter_javascript

from .base import BaseDialect

_JS_LANGUAGE = tree_sitter.Language(tree_sitter_javascript.language())


class JavaScriptDialect(BaseDialect):
    """tree-sitter-javascript grammar: ES2022+, JSX, legacy decorators."""

    def get_dialect(self) -> str:
        return "javascript"

    def get_tree_sitter_language(self) -> tree_sitter.Language:
        return _JS_LANGUAGE
