"""Working tree check before files are rewritten in place."""

import logging
import subprocess

from ..errors import FatalMigrationError

logger = logging.getLogger(__name__)


class DirtyWorkingTree(FatalMigrationError):
    def __init__(self, repo_dir: str):
        self.repo_dir = repo_dir
        super().__init__(
            f"Uncommitted git changes in {repo_dir}; commit or stash them first (or pass --force)"
        )


def is_git_clean(repo_dir: str) -> bool:
    """True when ``git status`` reports nothing, or ``repo_dir`` is not a repository."""
    try:
        result = subprocess.run(
            ["git", "status", "--porcelain"],
            cwd=repo_dir,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError:
        logger.warning("git executable not found; skipping working tree check")
        return True

    if result.returncode != 0:
        if "not a git repository" in (result.stderr or "").lower():
            return True
        logger.error("git status failed: %s", result.stderr.strip())
        return False
    return not result.stdout.strip()


def ensure_git_clean(repo_dir: str) -> None:
    """
    Raises:
        DirtyWorkingTree: There are uncommitted changes
    """
    if not is_git_clean(repo_dir):
        raise DirtyWorkingTree(repo_dir)
