import argparse
import logging
import os
import subprocess
import sys
from typing import List, Optional

import yaml

from .core.dependencies import DependencyRegistry, apply_plan, build_plan, format_plan
from .core.errors import FatalMigrationError, ManifestNotFound
from .core.pipeline import TransformOrchestrator
from .core.project import ProjectModel
from .core.tooling import ensure_git_clean, write_babel_config
from .core.transforms import PassRegistry
from .setting import load_settings

FORCE_WARNING = "WARNING: You are trying to skip git status checking, please be careful"


def setup_logging(log_level: str = "INFO") -> None:
    """Configure application logging."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )


logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taroshift",
        description="taroshift - migrate a Taro 2 project to Taro 3 (React)",
    )
    parser.add_argument(
        "project_dir",
        nargs="?",
        default=".",
        help="Project root containing config/index.(js|ts)"
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Skip the git working tree check (dangerous)"
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker threads per pass (default: max(2, ceil(cpus / 3)))"
    )
    parser.add_argument(
        "--package-manager",
        choices=["npm", "yarn"],
        default=None,
        help="Apply the dependency plan with this package manager"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Settings file (default: <project_dir>/taroshift.yaml)"
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for taroshift."""
    args = build_parser().parse_args(argv)
    project_dir = os.path.abspath(args.project_dir)

    try:
        settings = load_settings(project_dir, args.config)
    except (OSError, ValueError, yaml.YAMLError) as e:
        setup_logging(args.log_level or "INFO")
        logger.error("Could not load settings: %s", e)
        return 1
    setup_logging(args.log_level or settings.log_level)

    try:
        if args.force:
            for _ in range(3):
                logger.warning(FORCE_WARNING)
        else:
            ensure_git_clean(project_dir)

        model = ProjectModel(project_dir, settings.transform.define_constants)
        project = model.load()
    except FatalMigrationError as e:
        logger.error(str(e))
        return 1

    try:
        passes = PassRegistry.ordered(settings.transform.passes)
    except KeyError as e:
        logger.error("Invalid transform.passes setting: %s", e)
        return 1

    model.transform_and_overwrite_config()
    model.transform_entry()

    # ── Transform passes ─────────────────────────────────────────────
    orchestrator = TransformOrchestrator.for_project(
        project, workers=args.workers or settings.transform.workers
    )
    result = orchestrator.run(project.source_dir, passes)
    logger.info("Dependency markers: %s", result.markers.counts())
    if result.files_failed:
        logger.warning("%d file(s) could not be transformed:", len(result.files_failed))
        for path in result.files_failed:
            logger.warning("  %s", path)

    # ── Babel config ─────────────────────────────────────────────────
    typescript = project.entry_file_path.endswith((".ts", ".tsx"))
    write_babel_config(project.root_dir, result.markers, typescript=typescript)

    # ── Dependencies ─────────────────────────────────────────────────
    deps = settings.dependencies
    try:
        plan = build_plan(
            project.source_dir,
            DependencyRegistry.load(deps.registry_file),
            extra_dev=result.markers.packages(),
        )
    except ManifestNotFound as e:
        logger.warning("%s; skipping dependency check", e)
    else:
        print(format_plan(plan))
        manager = args.package_manager or deps.package_manager
        if manager and plan.has_changes:
            try:
                apply_plan(plan, os.path.dirname(plan.manifest_path), manager, deps.npm_registry)
            except (OSError, subprocess.CalledProcessError) as e:
                logger.error("%s failed: %s", manager, e)

    print("Thanks for using taroshift")
    return 0


if __name__ == "__main__":
    sys.exit(main())
