"""Transform Orchestrator — runs the rewrite passes across a project tree.

Per pass: PENDING → RUNNING → MERGED.

- Files are split round-robin into disjoint subsets, one per worker, on
  a bounded thread pool. A file is owned by exactly one worker.
- Per file: read → parse → match → rewrite → marker scan → atomic write
  (only when the text changed).
- A failure in one file is logged with its path and never aborts the
  pass.
- Marker deltas are merged sequentially once every worker has returned.

Passes run strictly one after another, so a later pass sees the output
of an earlier one. Writes are atomic per file, not per project.
"""

import logging
import math
import os
import shutil
import tempfile
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, List, Optional

from ..ast_parser import SyntaxTree, parse_source, should_skip_directory
from ..constants import SOURCE_EXTENSIONS
from ..errors import FileTransformError
from ..marker import DependencyMarkerSet, observe
from ..transforms import DEFAULT_PASS_ORDER, PassContext, PassRegistry, SiblingFile, TransformPass

logger = logging.getLogger(__name__)


def default_worker_count() -> int:
    """A third of the available CPUs, never fewer than two."""
    return max(2, math.ceil((os.cpu_count() or 1) / 3))


class PassState(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    MERGED = "merged"


@dataclass
class FileTask:
    """One file owned by one worker for the duration of a pass."""

    path: str
    original_text: str
    tree: SyntaxTree


@dataclass
class FileOutcome:
    path: str
    changed: bool = False
    skipped: bool = False
    error: Optional[str] = None
    siblings: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


@dataclass
class WorkerReport:
    """Everything one worker hands back: outcomes plus its marker delta."""

    markers: DependencyMarkerSet = field(default_factory=DependencyMarkerSet)
    outcomes: List[FileOutcome] = field(default_factory=list)


@dataclass
class PassReport:
    """Summary of one pass over the file set."""

    name: str
    state: PassState = PassState.PENDING
    files_processed: int = 0
    files_changed: List[str] = field(default_factory=list)
    files_failed: List[str] = field(default_factory=list)
    sibling_files: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    elapsed_seconds: float = 0.0


@dataclass
class PipelineResult:
    passes: List[PassReport] = field(default_factory=list)
    markers: DependencyMarkerSet = field(default_factory=DependencyMarkerSet)

    @property
    def files_failed(self) -> List[str]:
        return sorted({path for report in self.passes for path in report.files_failed})

    @property
    def files_changed(self) -> List[str]:
        return sorted({path for report in self.passes for path in report.files_changed})


# ── File helpers ─────────────────────────────────────────────────────


def collect_files(source_dir: str, extensions: Iterable[str] = SOURCE_EXTENSIONS) -> List[str]:
    """All source files under ``source_dir`` (sorted, skip dirs pruned)."""
    wanted = tuple(ext.lower() for ext in extensions)
    found = []
    for dirpath, dirnames, filenames in os.walk(source_dir):
        dirnames[:] = sorted(d for d in dirnames if not should_skip_directory(d))
        for name in filenames:
            if name.lower().endswith(wanted):
                found.append(os.path.join(dirpath, name))
    return sorted(found)


def atomic_write(path: str, text: str) -> None:
    """Write via a temporary file in the same directory, then rename over ``path``."""
    directory = os.path.dirname(path) or "."
    fd, tmp_path = tempfile.mkstemp(prefix=".taroshift-", suffix=".tmp", dir=directory)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(text)
        if os.path.exists(path):
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def partition(files: List[str], workers: int) -> List[List[str]]:
    """Round-robin split into at most ``workers`` non-empty disjoint subsets."""
    workers = max(1, workers)
    return [subset for subset in (files[i::workers] for i in range(workers)) if subset]


# ── Orchestrator ─────────────────────────────────────────────────────


class TransformOrchestrator:
    """Runs an ordered list of passes over a source tree.

    Args:
        project_root: Root that module paths are computed against
        pages: Page module paths (project-relative, no extension)
        entry_module: Module path of the entry (``<sourceRoot>/app``)
        workers: Pool size; defaults to ``default_worker_count()``
    """

    def __init__(
        self,
        project_root: str,
        pages: Iterable[str] = (),
        entry_module: Optional[str] = None,
        workers: Optional[int] = None,
        extensions: Iterable[str] = SOURCE_EXTENSIONS,
    ):
        self.project_root = os.path.abspath(project_root)
        self.pages = frozenset(pages)
        self.entry_module = entry_module
        self.workers = workers or default_worker_count()
        self.extensions = tuple(extensions)

    @classmethod
    def for_project(cls, project, workers: Optional[int] = None) -> "TransformOrchestrator":
        return cls(
            project_root=project.root_dir,
            pages=project.pages,
            entry_module=project.entry_module,
            workers=workers,
        )

    def run(
        self,
        source_dir: str,
        passes: Optional[List[TransformPass]] = None,
    ) -> PipelineResult:
        """Run every pass, in order, over the files under ``source_dir``."""
        if passes is None:
            passes = PassRegistry.ordered(DEFAULT_PASS_ORDER)

        result = PipelineResult()
        for transform in passes:
            # Re-collect: an earlier pass may have created sibling files.
            files = collect_files(source_dir, self.extensions)
            result.passes.append(self.run_pass(transform, files, result.markers))
        return result

    def run_pass(
        self,
        transform: TransformPass,
        files: List[str],
        markers: DependencyMarkerSet,
    ) -> PassReport:
        """Run one pass over ``files`` and merge marker deltas into ``markers``."""
        report = PassReport(name=transform.name)
        start = time.time()
        logger.info("Transform %s: %d file(s), %d worker(s)", transform.name, len(files), self.workers)

        report.state = PassState.RUNNING
        subsets = partition(files, self.workers)
        worker_reports: List[WorkerReport] = []
        if subsets:
            with ThreadPoolExecutor(max_workers=len(subsets), thread_name_prefix=f"taroshift-{transform.name}") as pool:
                futures = [pool.submit(self._run_worker, transform, subset) for subset in subsets]
                worker_reports = [future.result() for future in futures]

        # Sequential merge after every worker has finished.
        for worker_report in worker_reports:
            markers.merge(worker_report.markers)
            for outcome in worker_report.outcomes:
                if outcome.skipped:
                    continue
                report.files_processed += 1
                report.warnings.extend(outcome.warnings)
                if outcome.error is not None:
                    report.files_failed.append(outcome.path)
                elif outcome.changed:
                    report.files_changed.append(outcome.path)
                    report.sibling_files.extend(outcome.siblings)
        report.files_changed.sort()
        report.files_failed.sort()
        report.state = PassState.MERGED
        report.elapsed_seconds = time.time() - start

        logger.info(
            "Transform %s done: %d changed, %d failed, %d config file(s) created (%.2fs)",
            transform.name,
            len(report.files_changed),
            len(report.files_failed),
            len(report.sibling_files),
            report.elapsed_seconds,
        )
        return report

    # ── Worker side ─────────────────────────────────────────────────

    def _run_worker(self, transform: TransformPass, subset: List[str]) -> WorkerReport:
        report = WorkerReport()
        for path in subset:
            report.outcomes.append(self._process_file(transform, path, report.markers))
        return report

    def _context_for(self, path: str) -> PassContext:
        rel = os.path.relpath(path, self.project_root)
        module_path = os.path.splitext(rel)[0].replace(os.sep, "/")
        return PassContext(
            file_path=path,
            module_path=module_path,
            pages=self.pages,
            entry_module=self.entry_module,
        )

    def _process_file(
        self,
        transform: TransformPass,
        path: str,
        markers: DependencyMarkerSet,
    ) -> FileOutcome:
        context = self._context_for(path)
        outcome = FileOutcome(path=path)
        if not transform.applies_to(context):
            outcome.skipped = True
            return outcome

        try:
            with open(path, "r", encoding="utf-8", newline="") as f:
                original_text = f.read()
            task = FileTask(path, original_text, parse_source(original_text, path))

            result = None
            if transform.match(task.tree):
                result = transform.rewrite(task.tree, context)
            markers.merge(observe(task.tree, path))

            if result is None:
                return outcome
            for warning in result.warnings:
                logger.warning(warning)
            outcome.warnings.extend(result.warnings)
            if result.text == task.original_text:
                return outcome
            self._commit(task, result.text, result.sibling_files, outcome)
        except FileTransformError as e:
            logger.warning("[%s] skipped %s", transform.name, e)
            outcome.error = str(e)
        except Exception as e:
            logger.error("[%s] failed on %s: %s", transform.name, path, e, exc_info=True)
            outcome.error = f"{path}: {e}"
        return outcome

    @staticmethod
    def _commit(task: FileTask, text: str, siblings: List[SiblingFile], outcome: FileOutcome) -> None:
        existing = [s.path for s in siblings if os.path.exists(s.path)]
        if existing:
            message = f"{task.path}: left unchanged, {', '.join(existing)} already exists"
            logger.warning(message)
            outcome.warnings.append(message)
            return
        for sibling in siblings:
            atomic_write(sibling.path, sibling.content)
            outcome.siblings.append(sibling.path)
        atomic_write(task.path, text)
        outcome.changed = True
