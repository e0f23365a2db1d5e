from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

from .schema import CompilerConfiguration, InputSyntax, OutputStyle

logger = logging.getLogger(__name__)

DEFAULT_INPUT_PATH = "src/main/sass"
DEFAULT_OUTPUT_STYLE = OutputStyle.NESTED.value
DEFAULT_INPUT_SYNTAX = InputSyntax.SCSS.value
DEFAULT_PRECISION = 5

PARTIAL_PREFIX = "_"
CSS_EXTENSION = ".css"
SOURCE_MAP_EXTENSION = ".css.map"
# Source maps are always derived from the scss suffix, whatever the input syntax.
SOURCE_MAP_SOURCE_EXTENSION = "scss"
INCLUDE_PATH_SEPARATOR = ";"

# Preference order when a backend cannot honor the requested style.
STYLE_FALLBACKS: Dict[OutputStyle, Tuple[OutputStyle, ...]] = {
    OutputStyle.NESTED: (OutputStyle.EXPANDED, OutputStyle.COMPACT, OutputStyle.COMPRESSED),
    OutputStyle.EXPANDED: (OutputStyle.NESTED, OutputStyle.COMPACT, OutputStyle.COMPRESSED),
    OutputStyle.COMPACT: (OutputStyle.NESTED, OutputStyle.EXPANDED, OutputStyle.COMPRESSED),
    OutputStyle.COMPRESSED: (OutputStyle.COMPACT, OutputStyle.NESTED, OutputStyle.EXPANDED),
}


def split_include_path(include_path: Optional[str]) -> Tuple[str, ...]:
    if not include_path:
        return ()
    return tuple(part.strip() for part in include_path.split(INCLUDE_PATH_SEPARATOR) if part.strip())


def nearest_output_style(requested: OutputStyle, supported: Iterable[OutputStyle]) -> OutputStyle:
    supported = tuple(supported)
    if requested in supported:
        return requested
    for candidate in STYLE_FALLBACKS[requested]:
        if candidate in supported:
            return candidate
    raise ValueError(f"No usable output style among {[s.value for s in supported]}")


@dataclass
class BuildSettings:
    output_path: Path
    input_path: str = DEFAULT_INPUT_PATH
    base_dir: Path = field(default_factory=Path.cwd)
    include_path: Optional[str] = None
    output_style: str = DEFAULT_OUTPUT_STYLE
    generate_source_comments: bool = False
    generate_source_map: bool = True
    source_map_output_path: Optional[Path] = None
    omit_source_map_url: bool = False
    embed_source_map_in_css: bool = False
    embed_source_contents_in_source_map: bool = False
    input_syntax: str = DEFAULT_INPUT_SYNTAX
    precision: int = DEFAULT_PRECISION
    fail_on_error: bool = True
    copy_source_to_output: bool = False
    allow_parallel: bool = False
    max_workers: Optional[int] = None
    follow_symlinks: bool = False

    @property
    def file_extension(self) -> str:
        return InputSyntax(self.input_syntax).value

    @property
    def input_root(self) -> Path:
        return (Path(self.base_dir) / self.input_path).absolute()

    @property
    def output_root(self) -> Path:
        return Path(self.output_path).absolute()

    @property
    def source_map_root(self) -> Path:
        if self.source_map_output_path is None:
            return self.output_root
        return Path(self.source_map_output_path).absolute()


def validate_settings(
    settings: BuildSettings,
    supported_output_styles: Iterable[OutputStyle] = tuple(OutputStyle),
) -> Tuple[CompilerConfiguration, List[str]]:
    """
    Check settings for contradictions and build the run's CompilerConfiguration.

    Contradictory options never abort the run: each one is logged as a warning
    and replaced by the behavior the compiler will actually apply. Invalid
    values still raise: ValueError for an unknown style or syntax, a pydantic
    ValidationError for a negative precision.
    """
    supported_output_styles = tuple(supported_output_styles)
    warnings: List[str] = []
    output_style = OutputStyle(settings.output_style)
    input_syntax = InputSyntax(settings.input_syntax)

    embed_map = settings.embed_source_map_in_css
    embed_contents = settings.embed_source_contents_in_source_map
    omit_url = settings.omit_source_map_url
    if not settings.generate_source_map:
        if embed_map:
            warnings.append("embed_source_map_in_css=True is ignored. Cause: generate_source_map=False")
            embed_map = False
        if embed_contents:
            warnings.append(
                "embed_source_contents_in_source_map=True is ignored. Cause: generate_source_map=False"
            )
            embed_contents = False
        if omit_url:
            warnings.append("omit_source_map_url=True is ignored. Cause: generate_source_map=False")
            omit_url = False
    elif input_syntax is InputSyntax.SASS:
        warnings.append(
            "input_syntax=sass: source map paths are still derived by rewriting a .scss suffix, "
            "so .sass sources get source maps named after the source file"
        )
        if settings.copy_source_to_output and settings.source_map_root == settings.output_root:
            warnings.append(
                "input_syntax=sass with copy_source_to_output=True and source maps in the output "
                "directory: each source map is written over the copied .sass source"
            )

    effective_style = nearest_output_style(output_style, supported_output_styles)
    if effective_style is not output_style:
        warnings.append(
            f"output_style={output_style.value} is replaced by {effective_style.value}. "
            f"Cause: the compiler only supports {', '.join(s.value for s in supported_output_styles)}"
        )

    for message in warnings:
        logger.warning(message)

    configuration = CompilerConfiguration(
        output_style=effective_style,
        precision=settings.precision,
        include_paths=split_include_path(settings.include_path),
        input_syntax=input_syntax,
        generate_source_comments=settings.generate_source_comments,
        generate_source_map=settings.generate_source_map,
        omit_source_map_url=omit_url,
        embed_source_map_in_css=embed_map,
        embed_source_contents_in_source_map=embed_contents,
    )
    return configuration, warnings
