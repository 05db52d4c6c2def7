"""JSON conversion between Python values and record file content."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from pydantic import PydanticUserError, TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError, to_json

from .errors import DecodeError, EncodeError


class JsonConverter(ABC):
    """Encodes values to JSON text and decodes text into a target type."""

    @abstractmethod
    def to_json(self, value: Any) -> str:
        """Serialize ``value``. Raises EncodeError."""

    @abstractmethod
    def from_json(self, text: str | bytes, target_type: Any) -> Any:
        """Decode ``text`` into ``target_type``. Raises DecodeError."""


class PydanticJsonConverter(JsonConverter):
    """JsonConverter backed by pydantic.

    ``target_type`` can be any type pydantic validates, including
    parameterized generics such as ``Record[dict[int, User]]``.
    Adapters are built once per target type.
    """

    def __init__(self, indent: int | None = None) -> None:
        self._indent = indent
        self._adapters: dict[Any, TypeAdapter] = {}

    def adapter(self, target_type: Any) -> TypeAdapter:
        try:
            return self._adapters[target_type]
        except KeyError:
            pass
        except TypeError:
            # unhashable target type, build without caching
            return self._build_adapter(target_type)
        adapter = self._build_adapter(target_type)
        self._adapters[target_type] = adapter
        return adapter

    def _build_adapter(self, target_type: Any) -> TypeAdapter:
        try:
            return TypeAdapter(target_type)
        except (PydanticUserError, TypeError) as exc:
            raise DecodeError(f"Unsupported target type {target_type!r}: {exc}") from exc

    def to_json(self, value: Any) -> str:
        try:
            return to_json(
                value, indent=self._indent, by_alias=True, inf_nan_mode="constants"
            ).decode("utf-8")
        except PydanticSerializationError as exc:
            raise EncodeError(str(exc)) from exc

    def from_json(self, text: str | bytes, target_type: Any) -> Any:
        adapter = self.adapter(target_type)
        try:
            return adapter.validate_json(text)
        except ValidationError as exc:
            raise DecodeError(str(exc)) from exc
