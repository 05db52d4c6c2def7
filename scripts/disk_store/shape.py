"""Shape classification for persisted records.

A record file carries three type names (element, container, map key). The
resolver turns them into a ``ResolvedShape``: one of four tagged variants
plus the resolved Python types, from which the fully parameterized decode
target is built. ``describe`` is the inverse: it derives the three names
from a live value when a record is created.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from .errors import UnknownTypeError, UnresolvableShapeError
from .type_registry import WILDCARD, TypeRegistry, registry as default_registry


class ShapeKind(StrEnum):
    SCALAR = "scalar"
    ARRAY = "array"
    COLLECTION = "collection"
    MAP = "map"


def classify_container(tp: Any) -> ShapeKind | None:
    """Classify a container type by capability. None when it is not a container."""
    if not isinstance(tp, type):
        return None
    if issubclass(tp, Mapping):
        return ShapeKind.MAP
    if issubclass(tp, tuple):
        return ShapeKind.ARRAY
    if issubclass(tp, (str, bytes, bytearray)):
        return None
    if issubclass(tp, Collection):
        return ShapeKind.COLLECTION
    return None


@dataclass(frozen=True)
class TypeNames:
    """The three type-name fields of a record envelope."""

    data_type_name: str | None
    data_container_type_name: str | None = None
    data_key_type_name: str | None = None

    @classmethod
    def from_record(cls, record: Any) -> TypeNames:
        return cls(
            data_type_name=record.data_type_name,
            data_container_type_name=record.data_container_type_name,
            data_key_type_name=record.data_key_type_name,
        )


@dataclass(frozen=True)
class ResolvedShape:
    kind: ShapeKind
    element_type: Any
    container_type: Any = None
    key_type: Any = None

    def target_type(self) -> Any:
        """Build the parameterized type the payload decodes into."""
        try:
            if self.kind is ShapeKind.SCALAR:
                return self.element_type
            if self.kind is ShapeKind.ARRAY:
                return tuple[self.element_type, ...]
            if self.kind is ShapeKind.COLLECTION:
                return self.container_type[self.element_type]
            return self.container_type[self.key_type, self.element_type]
        except TypeError as exc:
            raise UnresolvableShapeError(
                f"Cannot parameterize {self.container_type!r} as {self.kind}: {exc}"
            ) from exc


class ShapeResolver:
    def __init__(self, registry: TypeRegistry | None = None) -> None:
        self._registry = default_registry if registry is None else registry

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    def resolve(self, names: TypeNames) -> ResolvedShape:
        """Classify envelope type names into a ResolvedShape.

        Raises UnknownTypeError for unregistered names and
        UnresolvableShapeError for inconsistent ones.
        """
        element_type = self._registry.resolve(names.data_type_name)

        if names.data_container_type_name is None:
            if names.data_key_type_name is not None:
                raise UnresolvableShapeError("Scalar record must not carry a key type name")
            return ResolvedShape(ShapeKind.SCALAR, element_type)

        container_type = self._registry.resolve(names.data_container_type_name)
        kind = classify_container(container_type)
        if kind is None:
            raise UnresolvableShapeError(
                f"{names.data_container_type_name!r} is neither a collection, an array nor a map"
            )

        if kind is ShapeKind.MAP:
            if not names.data_key_type_name:
                raise UnresolvableShapeError(
                    f"Map container {names.data_container_type_name!r} has no key type name"
                )
            key_type = self._registry.resolve(names.data_key_type_name)
            return ResolvedShape(kind, element_type, container_type, key_type)

        if names.data_key_type_name is not None:
            raise UnresolvableShapeError(f"Key type name given for {kind} container")
        return ResolvedShape(kind, element_type, container_type)

    def describe(self, value: Any) -> TypeNames:
        """Derive the envelope type names for a live value."""
        value_type = type(value)
        kind = classify_container(value_type)

        if kind is None:
            return TypeNames(data_type_name=self._name_of(value_type))

        container_name = self._name_of(value_type)
        if kind is ShapeKind.MAP:
            first = next(iter(value.items()), None)
            if first is None:
                return TypeNames(WILDCARD, container_name, WILDCARD)
            first_key, first_value = first
            return TypeNames(
                self._name_of(type(first_value)),
                container_name,
                self._name_of(type(first_key)),
            )

        first = next(iter(value), None)
        if first is None:
            return TypeNames(WILDCARD, container_name)
        return TypeNames(self._name_of(type(first)), container_name)

    def _name_of(self, tp: type) -> str:
        name = self._registry.name_of(tp)
        if name is None:
            raise UnknownTypeError(tp.__qualname__)
        return name
