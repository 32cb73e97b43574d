"""Exception hierarchy for the migration pipeline.

Three families:

- ``FatalMigrationError``: aborts the run before any file is touched.
- ``FileTransformError``: scoped to one file; logged and skipped.
- ``ManifestNotFound``: scoped to the run's dependency report only.
"""

from typing import Optional


class TaroShiftError(Exception):
    """Base class for all taroshift errors."""


# ── Fatal ────────────────────────────────────────────────────────────


class FatalMigrationError(TaroShiftError):
    """No partial transform is safe; the run must stop."""


class ConfigNotFound(FatalMigrationError):
    def __init__(self, root_dir: str, candidates):
        self.root_dir = root_dir
        self.candidates = tuple(candidates)
        super().__init__(
            f"Build config not found in {root_dir} (looked for: {', '.join(self.candidates)})"
        )


class SourceRootMissing(FatalMigrationError):
    def __init__(self, config_path: str, detail: str = "sourceRoot field is missing"):
        self.config_path = config_path
        super().__init__(f"{config_path}: {detail}")


class EntryNotFound(FatalMigrationError):
    def __init__(self, source_dir: str, detail: Optional[str] = None):
        self.source_dir = source_dir
        super().__init__(detail or f"Entry module app.(js|jsx|ts|tsx) not found in {source_dir}")


# ── Per-file ─────────────────────────────────────────────────────────


class FileTransformError(TaroShiftError):
    """A failure confined to a single source file."""

    def __init__(self, file_path: str, message: str):
        self.file_path = file_path
        super().__init__(f"{file_path}: {message}")


class ParseError(FileTransformError):
    """No configured dialect accepted the file."""

    def __init__(self, file_path: str, line: int = 0, column: int = 0, message: Optional[str] = None):
        self.line = line
        self.column = column
        super().__init__(
            file_path,
            message or f"syntax error at line {line}, column {column}",
        )


class AmbiguousComponentError(FileTransformError):
    """The default-exported component could not be resolved unambiguously."""


class OverlappingEditError(TaroShiftError):
    """Two edits recorded against the same tree overlap."""


# ── Per-run ──────────────────────────────────────────────────────────


class ManifestNotFound(TaroShiftError):
    def __init__(self, start_dir: str):
        self.start_dir = start_dir
        super().__init__(f"No package.json found from {start_dir} upwards")
