# Dependency upgrade planning and installation

from .installer import PACKAGE_MANAGERS, apply_plan, install_commands
from .planner import (
    DEPENDENCY_PROPERTIES,
    DependencyAction,
    DependencyRegistry,
    InstallSpec,
    PlannedDependency,
    UpgradeDependencyPlan,
    base_version,
    build_plan,
    declared_dependencies,
    find_manifest,
    format_plan,
    plan_dependencies,
    read_manifest,
)

__all__ = [
    "DEPENDENCY_PROPERTIES",
    "PACKAGE_MANAGERS",
    "DependencyAction",
    "DependencyRegistry",
    "InstallSpec",
    "PlannedDependency",
    "UpgradeDependencyPlan",
    "apply_plan",
    "base_version",
    "build_plan",
    "declared_dependencies",
    "find_manifest",
    "format_plan",
    "install_commands",
    "plan_dependencies",
    "read_manifest",
]
