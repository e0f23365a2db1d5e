from __future__ import annotations

import logging
import shutil
from pathlib import Path

from .errors import ArtifactWriteError

logger = logging.getLogger(__name__)


def write_artifact(path: Path, content: str) -> None:
    """Write content as UTF-8, creating parent directories and replacing any existing file"""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError as exc:
        raise ArtifactWriteError(path, exc) from exc
    logger.debug(f"Written to: {path}")


def copy_source(source: Path, target: Path) -> Path:
    """Copy a source file into place, replacing any existing file. Returns the target."""
    target = Path(target)
    try:
        if target.exists() and Path(source).samefile(target):
            return target
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(source, target)
    except OSError as exc:
        raise ArtifactWriteError(target, exc) from exc
    logger.debug(f"Copied {source} to {target}")
    return target
