from __future__ import annotations

import fnmatch
import logging
from pathlib import Path
from typing import Iterator, List, Optional, Set

from .config import PARTIAL_PREFIX

logger = logging.getLogger(__name__)


def is_partial(path: Path) -> bool:
    return path.name.startswith(PARTIAL_PREFIX)


def is_compilable(path: Path, extension: str) -> bool:
    return fnmatch.fnmatchcase(path.name, f"*.{extension}") and not is_partial(path)


def walk_sources(root: Path, extension: str, follow_symlinks: bool = False) -> Iterator[Path]:
    """
    Lazily yield every compilable source file under root, depth first.

    Entries are visited in name order so two walks of the same tree agree.
    Partials (names starting with an underscore) are never yielded. A
    directory that cannot be listed is treated as empty.
    """
    root = Path(root).absolute()
    logger.debug(f"Glob = *.{extension} under {root}")
    visited: Set[Path] = set()
    yield from _walk_directory(root, extension, follow_symlinks, visited)


def _walk_directory(path: Path, extension: str, follow_symlinks: bool, visited: Set[Path]) -> Iterator[Path]:
    real = path.resolve()
    if real in visited:
        return
    visited.add(real)

    entries = _list_directory(path)
    if entries is None:
        return

    for entry in entries:
        try:
            if entry.is_dir():
                if entry.is_symlink() and not follow_symlinks:
                    continue
                yield from _walk_directory(entry, extension, follow_symlinks, visited)
            elif entry.is_file() and is_compilable(entry, extension):
                yield entry
        except OSError as exc:
            logger.debug(f"Skipping {entry}: {exc}")


def _list_directory(path: Path) -> Optional[List[Path]]:
    try:
        return sorted(path.iterdir(), key=lambda p: p.name)
    except OSError as exc:
        logger.debug(f"Could not read directory {path}: {exc}")
        return None
