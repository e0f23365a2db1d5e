from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Tuple

import httpx
import sass
from pydantic import BaseModel, ValidationError

from .schema import (
    CompilationFailure,
    CompilationOutcome,
    CompilationSuccess,
    CompilerConfiguration,
    OutputStyle,
)

ENDPOINT_ENV = "SASS_COMPILE_ENDPOINT"
DEFAULT_ENDPOINT = "http://localhost:8080"
DEFAULT_TIMEOUT = 30.0


class BaseCompiler:
    """
    The style-sheet engine seen from the build: one file in, text out.

    Implementations never write files. Output and source map paths are only
    hints for the linkage metadata embedded in the generated text.
    """

    name = "base"
    supported_output_styles: Tuple[OutputStyle, ...] = tuple(OutputStyle)

    def compile(
        self,
        input_path: Path,
        output_path: Path,
        source_map_path: Path,
        config: CompilerConfiguration,
    ) -> CompilationOutcome:  # pragma: no cover - interface
        raise NotImplementedError


class LibSassCompiler(BaseCompiler):
    """In-process compilation through the libsass bindings"""

    name = "libsass"

    def compile(
        self,
        input_path: Path,
        output_path: Path,
        source_map_path: Path,
        config: CompilerConfiguration,
    ) -> CompilationOutcome:
        kwargs: Dict[str, Any] = {
            "filename": str(input_path),
            "output_style": config.output_style.value,
            "source_comments": config.generate_source_comments,
            "include_paths": list(config.include_paths),
            "precision": config.precision,
        }
        if config.generate_source_map:
            kwargs.update(
                source_map_filename=str(source_map_path),
                output_filename_hint=str(output_path),
                source_map_contents=config.embed_source_contents_in_source_map,
                source_map_embed=config.embed_source_map_in_css,
                omit_source_map_url=config.omit_source_map_url,
            )

        try:
            result = sass.compile(**kwargs)
        except sass.CompileError as exc:
            return CompilationFailure(message=str(exc).strip())
        except OSError as exc:
            return CompilationFailure(message=f"{input_path}: {exc}")

        if config.generate_source_map:
            css, source_map = result
            return CompilationSuccess(css=css, source_map=source_map)
        return CompilationSuccess(css=result)


class CompileResponse(BaseModel):
    """Schema for the compile service reply"""
    css: Optional[str] = None
    source_map: Optional[str] = None
    error: Optional[str] = None


class HttpCompiler(BaseCompiler):
    """Delegates compilation to a remote compile service speaking JSON over HTTP"""

    name = "http"

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        supported_output_styles: Iterable[OutputStyle] = (OutputStyle.EXPANDED, OutputStyle.COMPRESSED),
        client: Optional[httpx.Client] = None,
    ):
        self.endpoint = (endpoint or os.getenv(ENDPOINT_ENV, DEFAULT_ENDPOINT)).rstrip("/")
        self.timeout = timeout
        self.supported_output_styles = tuple(supported_output_styles)
        self.client = client

    def compile(
        self,
        input_path: Path,
        output_path: Path,
        source_map_path: Path,
        config: CompilerConfiguration,
    ) -> CompilationOutcome:
        try:
            source = Path(input_path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            return CompilationFailure(message=f"{input_path}: {exc}")

        payload = {
            "filename": str(input_path),
            "source": source,
            "output_path": str(output_path),
            "source_map_path": str(source_map_path),
            "options": config.model_dump(mode="json"),
        }
        try:
            response = self._post(payload)
            response.raise_for_status()
            reply = CompileResponse.model_validate(response.json())
        except httpx.HTTPError as exc:
            return CompilationFailure(message=f"{input_path}: compile service error: {exc}")
        except (ValueError, ValidationError) as exc:
            return CompilationFailure(message=f"{input_path}: invalid compile service reply: {exc}")

        if reply.error:
            return CompilationFailure(message=reply.error)
        if reply.css is None:
            return CompilationFailure(message=f"{input_path}: compile service returned no css")
        source_map = reply.source_map if config.generate_source_map else None
        return CompilationSuccess(css=reply.css, source_map=source_map)

    def _post(self, payload: Dict[str, Any]) -> httpx.Response:
        url = f"{self.endpoint}/compile"
        headers = {"Content-Type": "application/json"}
        if self.client is not None:
            return self.client.post(url, headers=headers, json=payload, timeout=self.timeout)
        return httpx.post(url, headers=headers, json=payload, timeout=self.timeout)


def build_compiler(backend: str, endpoint: Optional[str] = None, timeout: float = DEFAULT_TIMEOUT) -> BaseCompiler:
    if backend == "libsass":
        return LibSassCompiler()
    if backend == "http":
        return HttpCompiler(endpoint=endpoint, timeout=timeout)
    raise ValueError(f"Unknown compiler backend: {backend}")


def safe_compile(
    compiler: BaseCompiler,
    input_path: Path,
    output_path: Path,
    source_map_path: Path,
    config: CompilerConfiguration,
) -> CompilationOutcome:
    try:
        return compiler.compile(input_path, output_path, source_map_path, config)
    except Exception as exc:  # pylint: disable=broad-except
        return CompilationFailure(message=f"{input_path}: unexpected {compiler.name} error: {exc}")
