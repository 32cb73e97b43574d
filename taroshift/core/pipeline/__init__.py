"""Transform pipeline — bounded-parallel execution of the rewrite passes."""

from .orchestrator import (
    FileOutcome,
    FileTask,
    PassReport,
    PassState,
    PipelineResult,
    TransformOrchestrator,
    atomic_write,
    collect_files,
    default_worker_count,
    partition,
)

__all__ = [
    "FileOutcome",
    "FileTask",
    "PassReport",
    "PassState",
    "PipelineResult",
    "TransformOrchestrator",
    "atomic_write",
    "collect_files",
    "default_worker_count",
    "partition",
]
