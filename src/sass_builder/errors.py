from __future__ import annotations

from pathlib import Path


class SassBuilderError(Exception):
    """Base class for errors raised by a build"""


class BuildFailedError(SassBuilderError):
    """Raised at the end of a build when units failed and fail_on_error is set"""

    def __init__(self, failed_count: int):
        self.failed_count = failed_count
        super().__init__(f"Failed with {failed_count} errors")


class ArtifactWriteError(SassBuilderError):
    """Raised when an artifact or source copy cannot be persisted"""

    def __init__(self, path: Path, cause: OSError):
        self.path = path
        self.cause = cause
        super().__init__(f"Could not write {path}: {cause}")
