"""Batch Sass/SCSS build orchestrator (sass-builder)."""

from .builder import SassBuilder
from .compiler import build_compiler
from .config import BuildSettings

__all__ = ["BuildSettings", "build_compiler", "SassBuilder"]
