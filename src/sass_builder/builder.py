from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from functools import reduce
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple

from .compiler import BaseCompiler, safe_compile
from .config import BuildSettings, validate_settings
from .errors import BuildFailedError
from .paths import map_artifact_paths, relativize
from .schema import (
    BuildReport,
    CompilationFailure,
    CompilationOutcome,
    CompilerConfiguration,
    SourceUnit,
)
from .traversal import walk_sources
from .writer import copy_source, write_artifact

logger = logging.getLogger(__name__)


class SassBuilder:
    """
    Compile every source unit below the input root into the output tree.

    Each unit is mapped to its artifact paths, handed to the compiler and, on
    success, written out. A failing unit is logged and counted but never stops
    the walk; whether failures fail the build is decided once, at the end.
    Errors writing artifacts are not recovered and propagate out of build().
    """

    def __init__(self, settings: BuildSettings, compiler: BaseCompiler):
        self.settings = settings
        self.compiler = compiler
        self.configuration: Optional[CompilerConfiguration] = None

    def build(self) -> BuildReport:
        self.configuration, _ = validate_settings(self.settings, self.compiler.supported_output_styles)

        units = self.discover()
        outcomes = self._run(units)
        report = reduce(lambda acc, result: acc.record(*result), outcomes, BuildReport())

        logger.info(f"Compiled {report.total} files")
        if report.failed > 0:
            if self.settings.fail_on_error:
                logger.error(f"Failed with {report.failed} errors")
                raise BuildFailedError(report.failed)
            logger.error(f"Failed with {report.failed} errors. Continuing due to fail_on_error=False.")
        return report

    def discover(self) -> Iterator[SourceUnit]:
        root = self.settings.input_root
        for path in walk_sources(root, self.settings.file_extension, self.settings.follow_symlinks):
            yield SourceUnit(path=path, relative_path=relativize(root, path))

    def _run(self, units: Iterable[SourceUnit]) -> Iterator[Tuple[SourceUnit, CompilationOutcome]]:
        if not self.settings.allow_parallel:
            for unit in units:
                yield unit, self.process_unit(unit)
            return

        with ThreadPoolExecutor(max_workers=self.settings.max_workers) as executor:
            units = list(units)
            for unit, outcome in zip(units, executor.map(self.process_unit, units)):
                yield unit, outcome

    def process_unit(self, unit: SourceUnit) -> CompilationOutcome:
        if self.configuration is None:
            raise RuntimeError("build() must validate the configuration before units are processed")
        settings = self.settings
        logger.debug(f"Processing file {unit.path}")

        artifacts = map_artifact_paths(
            settings.input_root,
            settings.output_root,
            settings.source_map_root,
            unit.path,
            settings.file_extension,
        )

        input_path: Path = unit.path
        if settings.copy_source_to_output:
            input_path = copy_source(unit.path, settings.output_root / unit.relative_path)

        outcome = safe_compile(
            self.compiler,
            input_path,
            artifacts.output_path,
            artifacts.source_map_path,
            self.configuration,
        )
        if isinstance(outcome, CompilationFailure):
            logger.error(outcome.message)
            return outcome

        logger.debug("Compilation finished.")
        write_artifact(artifacts.output_path, outcome.css)
        if self.configuration.generate_source_map and outcome.source_map is not None:
            write_artifact(artifacts.source_map_path, outcome.source_map)
        return outcome
