"""Compact binary serialization with archives, reference tracking, bit packing and polymorphic registries."""

__version__ = "0.1.0"

__all__ = [
    "streams",
    "scalars",
    "registry",
    "archive",
    "builtins",
    "bitpack",
    "span",
]