"""Test utilities package."""

from .record_factory import Plain, Tag, User, make_registry, write_envelope

__all__ = [
    "Plain",
    "Tag",
    "User",
    "make_registry",
    "write_envelope",
]
