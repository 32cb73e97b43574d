"""TypeScript dialects using tree-sitter.

The TypeScript grammar ships two languages: plain ``typescript`` (where
``<T>expr`` is a type assertion) and ``tsx`` (where ``<...>`` opens JSX).
"""

import tree_sitter
import tree_sitter_typescript

from .base import BaseDialect

_TS_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_typescript())
_TSX_LANGUAGE = tree_sitter.Language(tree_sitter_typescript.language_tsx())


class TypeScriptDialect(BaseDialect):
    def get_dialect(self) -> str:
        return "typescript"

    def get_tree_sitter_language(self) -> tree_sitter.Language:
        return _TS_LANGUAGE


class TsxDialect(BaseDialect):
    """TypeScript + JSX. Also the fallback for JSX files carrying type syntax."""

    def get_dialect(self) -> str:
        return "tsx"

    def get_tree_sitter_language(self) -> tree_sitter.Language:
        return _TSX_LANGUAGE
