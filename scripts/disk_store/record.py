"""Record envelope persisted by the disk store."""

from __future__ import annotations

from enum import StrEnum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .shape import ShapeResolver, TypeNames
from .type_registry import TypeRegistry

DataT = TypeVar("DataT")


class Source(StrEnum):
    MEMORY = "memory"
    PERSISTENCE = "persistence"
    CLOUD = "cloud"


class Record(BaseModel, Generic[DataT]):
    """A cached value plus the type names needed to rebuild its shape.

    Persisted with camelCase aliases. ``size_on_mb`` is informational only:
    the store overwrites it with the measured file length on every read.
    The remaining cache-policy fields pass through untouched.
    """

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        arbitrary_types_allowed=True,
        ser_json_inf_nan="constants",
    )

    data: DataT
    data_type_name: str = Field(alias="dataTypeName")
    data_container_type_name: str | None = Field(default=None, alias="dataContainerTypeName")
    data_key_type_name: str | None = Field(default=None, alias="dataKeyTypeName")
    size_on_mb: float = Field(default=0.0, alias="sizeOnMb")

    # Cache policy metadata
    source: Source = Field(default=Source.MEMORY)
    time_at_which_was_persisted: int = Field(default=0, alias="timeAtWhichWasPersisted")
    life_time: int | None = Field(default=None, alias="lifeTime")
    expirable: bool = Field(default=True)

    @model_validator(mode="after")
    def _key_type_needs_container(self) -> Record:
        if self.data_key_type_name is not None and self.data_container_type_name is None:
            raise ValueError("dataKeyTypeName requires dataContainerTypeName")
        return self

    @classmethod
    def of(cls, data: Any, registry: TypeRegistry | None = None, **metadata: Any) -> Record:
        """Wrap ``data``, deriving the type names from the value itself.

        Raises UnknownTypeError when the value (or its container) is not registered.
        """
        names = ShapeResolver(registry).describe(data)
        return cls(
            data=data,
            data_type_name=names.data_type_name,
            data_container_type_name=names.data_container_type_name,
            data_key_type_name=names.data_key_type_name,
            **metadata,
        )

    @property
    def type_names(self) -> TypeNames:
        return TypeNames.from_record(self)

    def with_size(self, size_on_mb: float) -> Record:
        return self.model_copy(update={"size_on_mb": size_on_mb})
