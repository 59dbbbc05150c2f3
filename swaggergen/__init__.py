"""Swagger 2.0 to Python client/server code generator."""

from .codegen import generate, generate_sources, render
from .config import GeneratorConfig
from .errors import DocumentError, GenerationError, UnresolvedReferenceError

__all__ = [
    "DocumentError",
    "GenerationError",
    "GeneratorConfig",
    "UnresolvedReferenceError",
    "generate",
    "generate_sources",
    "render",
]
