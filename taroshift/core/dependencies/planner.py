"""Dependency upgrade planning.

Compares the project's ``package.json`` against the dependency registry
and decides, per package, whether to install, upgrade, uninstall or
leave it alone. Pure data: nothing here touches the package manager.
"""

import json
import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import yaml
from nodesemver import lt, satisfies

from ..errors import ManifestNotFound

logger = logging.getLogger(__name__)

MANIFEST_NAME = "package.json"

# Manifest sections that declare dependencies
DEPENDENCY_PROPERTIES = (
    "dependencies",
    "devDependencies",
    "clientDependencies",
    "isomorphicDependencies",
    "buildDependencies",
)

DEFAULT_REGISTRY_PATH = Path(__file__).parent.parent.parent / "config" / "dependencies.yaml"


class DependencyAction(str, Enum):
    INSTALL = "install"
    UPGRADE = "upgrade"
    UNINSTALL = "uninstall"
    NOOP = "noop"


@dataclass
class InstallSpec:
    name: str
    version: str
    dev: bool = False


@dataclass
class DependencyRegistry:
    """Known packages and what the upgrade expects of them."""

    expected_version: str
    install: List[InstallSpec] = field(default_factory=list)
    upgrade: List[str] = field(default_factory=list)
    deprecated: List[str] = field(default_factory=list)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "DependencyRegistry":
        """Load the registry from YAML (the bundled one by default)."""
        registry_path = Path(path) if path else DEFAULT_REGISTRY_PATH
        with open(registry_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        return cls(
            expected_version=str(data.get("expected_version", "")),
            install=[
                InstallSpec(name=item["name"], version=str(item["version"]), dev=bool(item.get("dev", False)))
                for item in data.get("install", [])
            ],
            upgrade=list(data.get("upgrade", [])),
            deprecated=list(data.get("deprecated", [])),
        )


@dataclass
class PlannedDependency:
    name: str
    action: DependencyAction
    current_range: Optional[str] = None
    target_version: Optional[str] = None
    dev: bool = False


@dataclass
class UpgradeDependencyPlan:
    """Per-package decisions, recomputed on every run."""

    manifest_path: str
    entries: Dict[str, PlannedDependency] = field(default_factory=dict)

    def by_action(self, action: DependencyAction) -> List[PlannedDependency]:
        return [entry for entry in self.entries.values() if entry.action == action]

    @property
    def has_changes(self) -> bool:
        return any(entry.action != DependencyAction.NOOP for entry in self.entries.values())


def base_version(version_range: str) -> str:
    """``^3.1.1`` → ``3.1.1``."""
    return re.sub(r"^[\s^~>=<v]+", "", version_range).strip()


def find_manifest(start_dir: str) -> str:
    """Nearest ``package.json`` from ``start_dir`` upwards.

    Raises:
        ManifestNotFound: None up to the filesystem root
    """
    current = os.path.abspath(start_dir)
    while True:
        candidate = os.path.join(current, MANIFEST_NAME)
        if os.path.isfile(candidate):
            return candidate
        parent = os.path.dirname(current)
        if parent == current:
            raise ManifestNotFound(start_dir)
        current = parent


def read_manifest(path: str) -> dict:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def declared_dependencies(manifest: dict) -> Dict[str, str]:
    """Name → declared range across every dependency section (first wins)."""
    declared: Dict[str, str] = {}
    for prop in DEPENDENCY_PROPERTIES:
        for name, version_range in (manifest.get(prop) or {}).items():
            declared.setdefault(name, str(version_range))
    return declared


def _needs_upgrade(version: str, version_range: str) -> bool:
    """True when ``version_range`` only admits releases older than ``version``."""
    try:
        if satisfies(version, version_range, loose=True):
            return False
        return lt(base_version(version_range), version, loose=True)
    except (ValueError, TypeError):
        logger.debug("Unrecognised version range %r left as is", version_range)
        return False


def plan_dependencies(
    manifest: dict,
    registry: DependencyRegistry,
    manifest_path: str = "",
    extra_dev: Iterable[str] = (),
) -> UpgradeDependencyPlan:
    """Decide the action for every package the registry knows about.

    Args:
        manifest: Parsed ``package.json``
        registry: Known packages and expectations
        manifest_path: Where the manifest was read from (for reporting)
        extra_dev: Extra dev packages to install (e.g. marker plugins)
    """
    declared = declared_dependencies(manifest)
    dev_declared = set(manifest.get("devDependencies") or {})
    plan = UpgradeDependencyPlan(manifest_path=manifest_path)
    expected = base_version(registry.expected_version)

    for name in registry.deprecated:
        if name in declared:
            plan.entries[name] = PlannedDependency(
                name=name, action=DependencyAction.UNINSTALL, current_range=declared[name]
            )

    for name in registry.upgrade:
        current = declared.get(name)
        if current is None or name in plan.entries:
            continue
        action = DependencyAction.UPGRADE if _needs_upgrade(expected, current) else DependencyAction.NOOP
        plan.entries[name] = PlannedDependency(
            name=name,
            action=action,
            current_range=current,
            target_version=registry.expected_version,
            dev=name in dev_declared,
        )

    installs = list(registry.install) + [InstallSpec(name=name, version="latest", dev=True) for name in extra_dev]
    for spec in installs:
        if spec.name in plan.entries:
            continue
        current = declared.get(spec.name)
        if current is None:
            action = DependencyAction.INSTALL
        elif spec.version != "latest" and _needs_upgrade(base_version(spec.version), current):
            action = DependencyAction.UPGRADE
        else:
            action = DependencyAction.NOOP
        plan.entries[spec.name] = PlannedDependency(
            name=spec.name, action=action, current_range=current, target_version=spec.version, dev=spec.dev
        )

    logger.debug(
        "Dependency plan: %s",
        {action.value: len(plan.by_action(action)) for action in DependencyAction},
    )
    return plan


def build_plan(
    start_dir: str,
    registry: Optional[DependencyRegistry] = None,
    extra_dev: Iterable[str] = (),
) -> UpgradeDependencyPlan:
    """Locate and read the manifest, then plan.

    Raises:
        ManifestNotFound: No ``package.json`` found
    """
    manifest_path = find_manifest(start_dir)
    return plan_dependencies(
        read_manifest(manifest_path),
        registry or DependencyRegistry.load(),
        manifest_path=manifest_path,
        extra_dev=extra_dev,
    )


def format_plan(plan: UpgradeDependencyPlan) -> str:
    """Plain-text report of the plan, grouped by action."""
    lines: List[str] = []

    installs = plan.by_action(DependencyAction.INSTALL)
    width = max((len(e.name) for e in plan.entries.values()), default=0)
    lines.append("* Install")
    for entry in installs:
        suffix = " (dev)" if entry.dev else ""
        lines.append(f"  {entry.name.ljust(width)}  {entry.target_version}{suffix}")

    lines.append("* Upgrade")
    for entry in plan.by_action(DependencyAction.UPGRADE):
        lines.append(f"  {entry.name.ljust(width)}  {entry.current_range} → {entry.target_version}")

    lines.append("* Uninstall")
    for entry in plan.by_action(DependencyAction.UNINSTALL):
        lines.append(f"  {entry.name}")
    return "\n".join(lines)
