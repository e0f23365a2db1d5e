from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from .compiler import DEFAULT_TIMEOUT
from .config import DEFAULT_INPUT_PATH, DEFAULT_INPUT_SYNTAX, DEFAULT_OUTPUT_STYLE, DEFAULT_PRECISION, BuildSettings

DEFAULT_CONFIG_FILE = "sass_builder.yaml"


@dataclass
class CompilerBackendConfig:
    """Configuration for the compiler backend"""
    backend: str = "libsass"
    endpoint: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class SourceMapConfig:
    """Configuration for source map generation"""
    generate: bool = True
    output_path: Optional[str] = None
    omit_source_mapping_url: bool = False
    embed_in_css: bool = False
    embed_sources: bool = False


@dataclass
class ProcessingConfig:
    """Configuration for processing options"""
    fail_on_error: bool = True
    copy_source_to_output: bool = False
    allow_parallel: bool = False
    max_workers: Optional[int] = None
    follow_symlinks: bool = False


@dataclass
class SassBuilderConfig:
    """Complete sass-builder configuration"""
    output_path: str
    input_path: str = DEFAULT_INPUT_PATH
    base_dir: Optional[str] = None
    include_path: Optional[str] = None
    output_style: str = DEFAULT_OUTPUT_STYLE
    input_syntax: str = DEFAULT_INPUT_SYNTAX
    precision: int = DEFAULT_PRECISION
    source_comments: bool = False
    compiler: CompilerBackendConfig = field(default_factory=CompilerBackendConfig)
    source_map: SourceMapConfig = field(default_factory=SourceMapConfig)
    processing: ProcessingConfig = field(default_factory=ProcessingConfig)

    def to_settings(self, config_dir: Path = Path(".")) -> BuildSettings:
        """Build settings, resolving relative directories against the config file's directory"""
        base_dir = config_dir / self.base_dir if self.base_dir else config_dir
        source_map_path = self.source_map.output_path
        return BuildSettings(
            output_path=config_dir / self.output_path,
            input_path=self.input_path,
            base_dir=base_dir,
            include_path=self.include_path,
            output_style=self.output_style,
            generate_source_comments=self.source_comments,
            generate_source_map=self.source_map.generate,
            source_map_output_path=config_dir / source_map_path if source_map_path else None,
            omit_source_map_url=self.source_map.omit_source_mapping_url,
            embed_source_map_in_css=self.source_map.embed_in_css,
            embed_source_contents_in_source_map=self.source_map.embed_sources,
            input_syntax=self.input_syntax,
            precision=self.precision,
            fail_on_error=self.processing.fail_on_error,
            copy_source_to_output=self.processing.copy_source_to_output,
            allow_parallel=self.processing.allow_parallel,
            max_workers=self.processing.max_workers,
            follow_symlinks=self.processing.follow_symlinks,
        )


def load_config(config_path: Path) -> SassBuilderConfig:
    """Load configuration from YAML file"""
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"{config_path}: invalid YAML: {exc}") from exc

    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: expected a mapping at the top level")
    if "output_path" not in data:
        raise ValueError(f"{config_path}: output_path is required")

    # Parse compiler config
    compiler_data = data.get("compiler", {})
    compiler_config = CompilerBackendConfig(
        backend=compiler_data.get("backend", "libsass"),
        endpoint=compiler_data.get("endpoint") or os.getenv(compiler_data.get("endpoint_env", "")),
        timeout=float(compiler_data.get("timeout", DEFAULT_TIMEOUT)),
    )

    # Parse source map config
    map_data = data.get("source_map", {})
    source_map_config = SourceMapConfig(
        generate=map_data.get("generate", True),
        output_path=map_data.get("output_path"),
        omit_source_mapping_url=map_data.get("omit_source_mapping_url", False),
        embed_in_css=map_data.get("embed_in_css", False),
        embed_sources=map_data.get("embed_sources", False),
    )

    # Parse processing config
    proc_data = data.get("processing", {})
    processing_config = ProcessingConfig(
        fail_on_error=proc_data.get("fail_on_error", True),
        copy_source_to_output=proc_data.get("copy_source_to_output", False),
        allow_parallel=proc_data.get("allow_parallel", False),
        max_workers=proc_data.get("max_workers"),
        follow_symlinks=proc_data.get("follow_symlinks", False),
    )

    return SassBuilderConfig(
        output_path=str(data["output_path"]),
        input_path=str(data.get("input_path", DEFAULT_INPUT_PATH)),
        base_dir=data.get("base_dir"),
        include_path=data.get("include_path"),
        output_style=data.get("output_style", DEFAULT_OUTPUT_STYLE),
        input_syntax=data.get("input_syntax", DEFAULT_INPUT_SYNTAX),
        precision=int(data.get("precision", DEFAULT_PRECISION)),
        source_comments=data.get("source_comments", False),
        compiler=compiler_config,
        source_map=source_map_config,
        processing=processing_config,
    )


def create_default_config(output_path: Path) -> None:
    """Create a default sass_builder.yaml file"""
    with open(output_path, "w", encoding="utf-8") as f:
        f.write("# sass-builder configuration file\n")
        f.write("# Generated default configuration\n\n")
        f.write("# Directory scanned recursively for sources, relative to base_dir\n")
        f.write(f"input_path: {DEFAULT_INPUT_PATH}\n")
        f.write("# Directory receiving the compiled .css files\n")
        f.write("output_path: target/css\n\n")
        f.write("# Extra @import resolution roots, ';'-separated\n")
        f.write("# include_path: node_modules;vendor/styles\n\n")
        f.write("# One of: nested, expanded, compact, compressed\n")
        f.write(f"output_style: {DEFAULT_OUTPUT_STYLE}\n")
        f.write("# One of: scss, sass\n")
        f.write(f"input_syntax: {DEFAULT_INPUT_SYNTAX}\n")
        f.write(f"precision: {DEFAULT_PRECISION}\n")
        f.write("source_comments: false\n\n")
        f.write("# Compiler backend\n")
        f.write("compiler:\n")
        f.write("  # Options: libsass, http\n")
        f.write("  backend: libsass\n\n")
        f.write("  # For a remote compile service (uncomment and configure):\n")
        f.write("  # endpoint_env: SASS_COMPILE_ENDPOINT  # reads from environment variable\n")
        f.write("  # endpoint: http://localhost:8080\n")
        f.write(f"  # timeout: {DEFAULT_TIMEOUT}\n\n")
        f.write("# Source maps\n")
        f.write("source_map:\n")
        f.write("  generate: true\n")
        f.write("  # output_path: target/maps  # defaults to output_path\n")
        f.write("  omit_source_mapping_url: false\n")
        f.write("  embed_in_css: false\n")
        f.write("  embed_sources: false\n\n")
        f.write("# Processing Options\n")
        f.write("processing:\n")
        f.write("  fail_on_error: true\n")
        f.write("  copy_source_to_output: false\n")
        f.write("  allow_parallel: false\n")
        f.write("  follow_symlinks: false\n")
