"""Project Model — build config, sourceRoot, page list and entry rewriting."""

from .project_model import (
    Project,
    ProjectModel,
    extract_pages,
    extract_source_root,
    locate_build_config,
    locate_entry,
    rewrite_build_config,
    rewrite_entry,
)

__all__ = [
    "Project",
    "ProjectModel",
    "extract_pages",
    "extract_source_root",
    "locate_build_config",
    "locate_entry",
    "rewrite_build_config",
    "rewrite_entry",
]
