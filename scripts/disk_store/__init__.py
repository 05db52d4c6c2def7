"""Disk-backed record persistence for a reactive cache."""

from .disk import Disk
from .encrypt import AesGcmFileEncryptor, FileEncryptor
from .errors import (
    DecodeError,
    DiskStoreError,
    EncodeError,
    EncryptionError,
    PersistenceError,
    UnknownTypeError,
    UnresolvableShapeError,
)
from .json_converter import JsonConverter, PydanticJsonConverter
from .persistence import Persistence
from .record import Record, Source
from .shape import ResolvedShape, ShapeKind, ShapeResolver, TypeNames, classify_container
from .type_registry import WILDCARD, TypeRegistry, registry as type_registry

__all__ = [
    "AesGcmFileEncryptor",
    "DecodeError",
    "Disk",
    "DiskStoreError",
    "EncodeError",
    "EncryptionError",
    "FileEncryptor",
    "JsonConverter",
    "Persistence",
    "PersistenceError",
    "PydanticJsonConverter",
    "Record",
    "ResolvedShape",
    "ShapeKind",
    "ShapeResolver",
    "Source",
    "TypeNames",
    "TypeRegistry",
    "UnknownTypeError",
    "UnresolvableShapeError",
    "WILDCARD",
    "classify_container",
    "type_registry",
]
