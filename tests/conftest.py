"""Shared test fixtures for sass-builder tests.

Provides a source tree builder and a recording fake compiler so the build
orchestration can be tested without a real Sass engine.
"""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Tuple

import pytest

from sass_builder.compiler import BaseCompiler
from sass_builder.config import BuildSettings
from sass_builder.schema import (
    CompilationFailure,
    CompilationOutcome,
    CompilationSuccess,
    CompilerConfiguration,
    OutputStyle,
)

SIMPLE_SCSS = "a { b { color: red; } }\n"


class RecordingCompiler(BaseCompiler):
    """Fake compiler that records every call and fails for chosen file names.

    When always_emit_map is set, a source map is returned even if the
    configuration disables source maps.
    """

    name = "recording"

    def __init__(
        self,
        failing: Iterable[str] = (),
        always_emit_map: bool = False,
        supported_output_styles: Iterable[OutputStyle] = tuple(OutputStyle),
    ):
        self.failing = set(failing)
        self.always_emit_map = always_emit_map
        self.supported_output_styles = tuple(supported_output_styles)
        self.calls: List[Tuple[Path, Path, Path, CompilerConfiguration]] = []
        self._lock = threading.Lock()

    @property
    def inputs(self) -> List[Path]:
        return [call[0] for call in self.calls]

    def compile(
        self,
        input_path: Path,
        output_path: Path,
        source_map_path: Path,
        config: CompilerConfiguration,
    ) -> CompilationOutcome:
        with self._lock:
            self.calls.append((input_path, output_path, source_map_path, config))
        if input_path.name in self.failing:
            return CompilationFailure(message=f"{input_path}:1:1: invalid property name")
        source_map = None
        if config.generate_source_map or self.always_emit_map:
            source_map = f'{{"version": 3, "file": "{output_path.name}"}}'
        return CompilationSuccess(css=f"/* {input_path.name} */\n", source_map=source_map)


@pytest.fixture
def make_tree() -> Callable[[Path, Dict[str, str]], Path]:
    """Return a helper writing {relative path: content} files below a root."""

    def _make_tree(root: Path, files: Dict[str, str]) -> Path:
        for relative, content in files.items():
            path = root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        return root

    return _make_tree


@pytest.fixture
def source_tree(tmp_path: Path, make_tree: Callable[[Path, Dict[str, str]], Path]) -> Path:
    """Project directory with the default src/main/sass layout."""
    make_tree(
        tmp_path / "project" / "src" / "main" / "sass",
        {
            "a.scss": SIMPLE_SCSS,
            "_partial.scss": "$color: red;\n",
            "b/c.scss": SIMPLE_SCSS,
        },
    )
    return tmp_path / "project"


@pytest.fixture
def settings(source_tree: Path, tmp_path: Path) -> BuildSettings:
    return BuildSettings(output_path=tmp_path / "out", base_dir=source_tree)


@pytest.fixture
def compiler() -> RecordingCompiler:
    return RecordingCompiler()
