"""Type registry mapping persisted type names to Python types."""

from __future__ import annotations

from collections import OrderedDict, deque
from typing import Any, Callable, TypeVar

from .errors import UnknownTypeError

T = TypeVar("T")

# Name stored for the elements of an empty container
WILDCARD = "object"

_BUILTIN_TYPES: dict[str, Any] = {
    WILDCARD: Any,
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
    "list": list,
    "set": set,
    "frozenset": frozenset,
    "tuple": tuple,
    "deque": deque,
    "dict": dict,
    "OrderedDict": OrderedDict,
}


class TypeRegistry:
    """Closed name -> type mapping.

    Only registered names can be decoded. The owner of the cached types
    registers them once at startup, either with ``register`` or with the
    ``register_type`` decorator.
    """

    def __init__(self) -> None:
        self._types: dict[str, Any] = {}

    @classmethod
    def with_builtins(cls) -> TypeRegistry:
        reg = cls()
        for name, tp in _BUILTIN_TYPES.items():
            reg.register(name, tp)
        return reg

    def register(self, type_name: str, tp: Any) -> None:
        if not type_name:
            raise ValueError("type_name must be a non-empty string")
        existing = self._types.get(type_name)
        if existing is not None and existing is not tp:
            raise ValueError(f"Type name {type_name!r} already registered for {existing!r}")
        self._types[type_name] = tp

    def register_type(self, type_name: str | None = None) -> Callable[[type[T]], type[T]]:
        """Class decorator registering the class under ``type_name`` (default: class name)."""
        def decorator(cls: type[T]) -> type[T]:
            self.register(type_name or cls.__name__, cls)
            return cls
        return decorator

    def unregister(self, type_name: str) -> None:
        self._types.pop(type_name, None)

    def get(self, type_name: str | None) -> Any | None:
        if not type_name:
            return None
        return self._types.get(type_name)

    def resolve(self, type_name: str | None) -> Any:
        """Return the type registered under ``type_name`` or raise UnknownTypeError."""
        tp = self.get(type_name)
        if tp is None:
            raise UnknownTypeError(type_name)
        return tp

    def name_of(self, tp: Any) -> str | None:
        """Reverse lookup: the name a type was registered under."""
        for name, registered in self._types.items():
            if registered is tp:
                return name
        return None

    def items(self) -> dict[str, Any]:
        return dict(self._types)

    def __contains__(self, type_name: str) -> bool:
        return type_name in self._types

    def __len__(self) -> int:
        return len(self._types)


# Global registry
registry = TypeRegistry.with_builtins()
