# Project tooling: git working tree check and babel config

from .babel_config import BABEL_CONFIG_NAME, render_babel_config, write_babel_config
from .git import DirtyWorkingTree, ensure_git_clean, is_git_clean

__all__ = [
    "BABEL_CONFIG_NAME",
    "DirtyWorkingTree",
    "ensure_git_clean",
    "is_git_clean",
    "render_babel_config",
    "write_babel_config",
]
