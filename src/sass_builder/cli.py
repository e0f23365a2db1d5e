from __future__ import annotations

import argparse
import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .builder import SassBuilder
from .compiler import DEFAULT_TIMEOUT, build_compiler
from .config import BuildSettings
from .config_loader import DEFAULT_CONFIG_FILE, SassBuilderConfig, load_config
from .errors import ArtifactWriteError, BuildFailedError
from .schema import InputSyntax, OutputStyle


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Compile a tree of Sass/SCSS sources into CSS")
    parser.add_argument(
        "input",
        nargs="?",
        help="Directory scanned for sources, relative to --base-dir (default: src/main/sass)",
    )
    parser.add_argument("--output", "-o", type=Path, help="Directory receiving compiled .css files")
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help=f"Path to config file (default: ./{DEFAULT_CONFIG_FILE} when present)",
    )
    parser.add_argument(
        "--generate-config",
        action="store_true",
        help="Generate a default config file and exit",
    )
    parser.add_argument("--base-dir", type=Path, help="Project directory the input path is resolved against")
    parser.add_argument(
        "--compiler",
        choices=["libsass", "http"],
        help="Compiler backend to use (overrides config file)",
    )
    parser.add_argument("--endpoint", help="Compile service URL for the http backend")
    parser.add_argument("--include-path", help="Additional @import roots, ';'-separated")
    parser.add_argument("--style", choices=[s.value for s in OutputStyle], help="Output style")
    parser.add_argument("--syntax", choices=[s.value for s in InputSyntax], help="Input syntax")
    parser.add_argument("--precision", type=int, help="Precision for fractional numbers")
    parser.add_argument("--source-comments", action="store_true", help="Emit source line comments")
    parser.add_argument("--no-source-map", action="store_true", help="Do not generate source maps")
    parser.add_argument("--source-map-output", type=Path, help="Directory receiving .css.map files")
    parser.add_argument(
        "--omit-source-map-url",
        action="store_true",
        help="Leave out the sourceMappingURL comment",
    )
    parser.add_argument(
        "--embed-source-map",
        action="store_true",
        help="Embed the source map in the css as a data URI",
    )
    parser.add_argument(
        "--embed-sources",
        action="store_true",
        help="Embed source contents in the source map",
    )
    parser.add_argument(
        "--copy-source",
        action="store_true",
        help="Copy sources into the output tree and compile the copies",
    )
    parser.add_argument(
        "--no-fail-on-error",
        action="store_true",
        help="Exit successfully even when some files fail to compile",
    )
    parser.add_argument("--parallel", action="store_true", help="Compile files on a thread pool")
    parser.add_argument("--workers", type=int, help="Thread pool size for --parallel")
    parser.add_argument("--follow-symlinks", action="store_true", help="Descend into symlinked directories")
    parser.add_argument("--json", action="store_true", help="Print the build report as JSON")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def generate_config_file(output_path: Path) -> None:
    """Generate a default config file"""
    if output_path.exists():
        response = input(f"{output_path} already exists. Overwrite? (y/N): ")
        if response.lower() != "y":
            print("Aborted.")
            return

    from .config_loader import create_default_config

    create_default_config(output_path)
    print(f"Default config file created at: {output_path}")
    print(f"Edit this file with your settings and run: sass-builder --config {output_path}")


def resolve_settings(args: argparse.Namespace, config: Optional[SassBuilderConfig], config_dir: Path) -> BuildSettings:
    """Merge config file values with command line overrides"""
    if config:
        settings = config.to_settings(config_dir)
    else:
        if not args.output:
            raise ValueError("--output is required when not using a config file")
        settings = BuildSettings(output_path=args.output)

    overrides = {}
    if args.output:
        overrides["output_path"] = args.output
    if args.input:
        overrides["input_path"] = args.input
    if args.base_dir:
        overrides["base_dir"] = args.base_dir
    if args.include_path:
        overrides["include_path"] = args.include_path
    if args.style:
        overrides["output_style"] = args.style
    if args.syntax:
        overrides["input_syntax"] = args.syntax
    if args.precision is not None:
        overrides["precision"] = args.precision
    if args.source_map_output:
        overrides["source_map_output_path"] = args.source_map_output
    if args.workers is not None:
        overrides["max_workers"] = args.workers

    return replace(
        settings,
        generate_source_comments=args.source_comments or settings.generate_source_comments,
        generate_source_map=settings.generate_source_map and not args.no_source_map,
        omit_source_map_url=args.omit_source_map_url or settings.omit_source_map_url,
        embed_source_map_in_css=args.embed_source_map or settings.embed_source_map_in_css,
        embed_source_contents_in_source_map=args.embed_sources or settings.embed_source_contents_in_source_map,
        copy_source_to_output=args.copy_source or settings.copy_source_to_output,
        fail_on_error=settings.fail_on_error and not args.no_fail_on_error,
        allow_parallel=args.parallel or settings.allow_parallel,
        follow_symlinks=args.follow_symlinks or settings.follow_symlinks,
        **overrides,
    )


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(message)s",
    )

    # Handle config generation
    if args.generate_config:
        output_path = args.config or Path(DEFAULT_CONFIG_FILE)
        generate_config_file(output_path)
        return

    # Load config from file if specified
    config: SassBuilderConfig | None = None
    config_dir = Path(".")
    try:
        if args.config:
            config = load_config(args.config)
            config_dir = args.config.parent
        elif Path(DEFAULT_CONFIG_FILE).exists():
            print(f"Using {DEFAULT_CONFIG_FILE} from current directory")
            config = load_config(Path(DEFAULT_CONFIG_FILE))
        settings = resolve_settings(args, config, config_dir)
    except (OSError, ValueError) as exc:
        parser.error(str(exc))

    backend = args.compiler or (config.compiler.backend if config else "libsass")
    endpoint = args.endpoint or (config.compiler.endpoint if config else None)
    timeout = config.compiler.timeout if config else DEFAULT_TIMEOUT

    try:
        compiler = build_compiler(backend, endpoint=endpoint, timeout=timeout)
        builder = SassBuilder(settings=settings, compiler=compiler)
        print(f"Compiling: {settings.input_root} -> {settings.output_root}")
        report = builder.build()
    except BuildFailedError as exc:
        print(f"Build failed: {exc}")
        raise SystemExit(1) from None
    except (ArtifactWriteError, ValueError) as exc:
        print(f"Error: {exc}")
        raise SystemExit(2) from None

    if args.json:
        print(report.model_dump_json(indent=2))


if __name__ == "__main__":  # pragma: no cover
    main()
