from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class InputSyntax(str, Enum):
    SCSS = "scss"
    SASS = "sass"


class OutputStyle(str, Enum):
    NESTED = "nested"
    EXPANDED = "expanded"
    COMPACT = "compact"
    COMPRESSED = "compressed"


class CompilerConfiguration(BaseModel):
    """Options shared read-only by every compile call of a build"""
    model_config = ConfigDict(frozen=True)

    output_style: OutputStyle = OutputStyle.NESTED
    precision: int = Field(default=5, ge=0)
    include_paths: Tuple[str, ...] = ()
    input_syntax: InputSyntax = InputSyntax.SCSS
    generate_source_comments: bool = False
    generate_source_map: bool = True
    omit_source_map_url: bool = False
    embed_source_map_in_css: bool = False
    embed_source_contents_in_source_map: bool = False


class SourceUnit(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path
    relative_path: Path


class ArtifactPaths(BaseModel):
    model_config = ConfigDict(frozen=True)

    output_path: Path
    source_map_path: Path


class CompilationSuccess(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["success"] = "success"
    css: str
    source_map: Optional[str] = None


class CompilationFailure(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["failure"] = "failure"
    message: str


CompilationOutcome = Union[CompilationSuccess, CompilationFailure]


class FailedUnit(BaseModel):
    model_config = ConfigDict(frozen=True)

    path: Path
    message: str


class BuildReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    total: int = 0
    failed: int = 0
    failures: Tuple[FailedUnit, ...] = ()

    @property
    def succeeded(self) -> int:
        return self.total - self.failed

    @property
    def ok(self) -> bool:
        return self.failed == 0

    def record(self, unit: SourceUnit, outcome: CompilationOutcome) -> "BuildReport":
        """Return a new report with one more processed unit folded in"""
        if isinstance(outcome, CompilationFailure):
            return BuildReport(
                total=self.total + 1,
                failed=self.failed + 1,
                failures=self.failures + (FailedUnit(path=unit.path, message=outcome.message),),
            )
        return BuildReport(total=self.total + 1, failed=self.failed, failures=self.failures)
