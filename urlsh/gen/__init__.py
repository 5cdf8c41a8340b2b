"""
Short code generation.

The generator is the leaf of the service: it depends on nothing else in
the package except the exception types.
"""

from urlsh.gen.shortener import (
    BASE62_CHARS,
    CodeGenerator,
    Method,
    ShortenerResult,
    format_short_url,
    generate,
)

__all__ = [
    "BASE62_CHARS",
    "CodeGenerator",
    "Method",
    "ShortenerResult",
    "format_short_url",
    "generate",
]
