from __future__ import annotations

import re
from pathlib import Path

from .config import CSS_EXTENSION, SOURCE_MAP_EXTENSION, SOURCE_MAP_SOURCE_EXTENSION
from .schema import ArtifactPaths


def relativize(source_root: Path, input_path: Path) -> Path:
    """Path of input_path below source_root; raises ValueError when it is outside"""
    return Path(input_path).relative_to(source_root)


def rewrite_extension(path: Path, old_extension: str, new_suffix: str) -> Path:
    # Only a trailing ".<old_extension>" is replaced; anything else is kept verbatim.
    return Path(re.sub(rf"\.{re.escape(old_extension)}$", new_suffix, str(path)))


def map_input_to_output(source_root: Path, output_root: Path, input_path: Path, source_ext: str) -> Path:
    relative = relativize(source_root, input_path)
    return rewrite_extension(Path(output_root) / relative, source_ext, CSS_EXTENSION)


def map_input_to_source_map(source_root: Path, source_map_root: Path, input_path: Path) -> Path:
    relative = relativize(source_root, input_path)
    return rewrite_extension(Path(source_map_root) / relative, SOURCE_MAP_SOURCE_EXTENSION, SOURCE_MAP_EXTENSION)


def map_artifact_paths(
    source_root: Path,
    output_root: Path,
    source_map_root: Path,
    input_path: Path,
    source_ext: str,
) -> ArtifactPaths:
    return ArtifactPaths(
        output_path=map_input_to_output(source_root, output_root, input_path, source_ext),
        source_map_path=map_input_to_source_map(source_root, source_map_root, input_path),
    )
