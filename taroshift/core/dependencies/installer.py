"""Apply an upgrade plan through npm or yarn."""

import logging
import subprocess
from typing import Dict, List, Optional

from .planner import DependencyAction, UpgradeDependencyPlan

logger = logging.getLogger(__name__)

PACKAGE_MANAGERS: Dict[str, Dict[str, str]] = {
    "npm": {"install": "install", "uninstall": "uninstall", "dev": "--save-dev"},
    "yarn": {"install": "add", "uninstall": "remove", "dev": "--dev"},
}


def _spec(name: str, version: Optional[str]) -> str:
    return f"{name}@{version}" if version else name


def install_commands(
    plan: UpgradeDependencyPlan,
    manager: str = "npm",
    registry_url: Optional[str] = None,
) -> List[List[str]]:
    """Package manager invocations for the plan, uninstall first.

    Raises:
        ValueError: Unknown package manager
    """
    if manager not in PACKAGE_MANAGERS:
        raise ValueError(f"Unsupported package manager: {manager}")
    verbs = PACKAGE_MANAGERS[manager]
    registry_args = ["--registry", registry_url] if registry_url else []

    commands: List[List[str]] = []
    uninstall = [entry.name for entry in plan.by_action(DependencyAction.UNINSTALL)]
    if uninstall:
        commands.append([manager, verbs["uninstall"], *uninstall])

    wanted = plan.by_action(DependencyAction.INSTALL) + plan.by_action(DependencyAction.UPGRADE)
    runtime = [_spec(e.name, e.target_version) for e in wanted if not e.dev]
    dev = [_spec(e.name, e.target_version) for e in wanted if e.dev]
    if runtime:
        commands.append([manager, verbs["install"], *runtime, *registry_args])
    if dev:
        commands.append([manager, verbs["install"], verbs["dev"], *dev, *registry_args])
    return commands


def apply_plan(
    plan: UpgradeDependencyPlan,
    cwd: str,
    manager: str = "npm",
    registry_url: Optional[str] = None,
) -> None:
    """Run the package manager in ``cwd``.

    Raises:
        subprocess.CalledProcessError: A command exited non-zero
    """
    for command in install_commands(plan, manager, registry_url):
        logger.info("Running: %s", " ".join(command))
        subprocess.run(command, cwd=cwd, check=True)
