"""Syntax tree adapter utilities.

Dialect detection, dialect registry, and file-walking helpers.
"""

import os
from typing import Dict, List, TYPE_CHECKING

if TYPE_CHECKING:
    from .base import BaseDialect

# Extension → dialects to try, in order. The first one that parses the
# file without error nodes wins.
SUPPORTED_EXTENSIONS: Dict[str, List[str]] = {
    ".js": ["javascript", "tsx"],
    ".jsx": ["javascript", "tsx"],
    ".ts": ["typescript", "tsx"],
    ".tsx": ["tsx"],
}

# Directories to skip during file walking
SKIP_DIRECTORIES = frozenset({
    ".git",
    "node_modules",
    "dist",
    ".temp",
    ".rn_temp",
    "__pycache__",
})

# Dialect registry, lazy-loaded so grammars load on first use
_dialect_registry: Dict[str, "BaseDialect"] = {}


def detect_dialects(file_path: str) -> List[str]:
    """Dialects to try for a file, by extension ([] if unsupported)."""
    _, ext = os.path.splitext(file_path)
    return list(SUPPORTED_EXTENSIONS.get(ext.lower(), []))


def get_dialect(name: str) -> "BaseDialect":
    """Get a dialect instance by name.

    Raises:
        ValueError: If the dialect is not supported
    """
    if name not in _dialect_registry:
        if name == "javascript":
            from .javascript_parser import JavaScriptDialect
            _dialect_registry["javascript"] = JavaScriptDialect()
        elif name == "typescript":
            from .typescript_parser import TypeScriptDialect
            _dialect_registry["typescript"] = TypeScriptDialect()
        elif name == "tsx":
            from .typescript_parser import TsxDialect
            _dialect_registry["tsx"] = TsxDialect()
        else:
            raise ValueError(
                f"Unsupported dialect: {name}. Supported: javascript, typescript, tsx"
            )

    return _dialect_registry[name]


def should_skip_directory(dir_name: str) -> bool:
    """Check if a directory should be skipped during file walking."""
    return dir_name in SKIP_DIRECTORIES or dir_name.startswith(".")
