"""Disk-backed Persistence: one JSON file per key inside a single directory."""

from __future__ import annotations

import math
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, TypeVar

from .conf import get_records_dir
from .encrypt import AesGcmFileEncryptor, FileEncryptor
from .errors import DecodeError, EncodeError, EncryptionError, PersistenceError
from .json_converter import JsonConverter, PydanticJsonConverter
from .log import store_log
from .persistence import Persistence
from .record import Record
from .shape import ResolvedShape, ShapeKind, ShapeResolver
from .type_registry import TypeRegistry

T = TypeVar("T")

_BYTES_PER_MB = 1024 * 1024

# Failures that turn a retrieval into a cache miss
_MISS_ERRORS = (OSError, UnicodeDecodeError, DecodeError, EncryptionError)


class Disk(Persistence):
    """Save records on disk and evict them too.

    Writes go through the ``JsonConverter``; reads of a ``Record`` rebuild
    its parameterized type from the type names stored next to the payload,
    resolved against the ``TypeRegistry``. Encrypted records are decrypted
    into a working file that is removed before the call returns.

    Save failures raise ``PersistenceError``. Every retrieval failure
    (missing file, malformed content, unknown type, wrong key) returns None.
    """

    def __init__(
        self,
        cache_directory: str | Path,
        file_encryptor: FileEncryptor | None = None,
        json_converter: JsonConverter | None = None,
        registry: TypeRegistry | None = None,
    ) -> None:
        self.cache_directory = Path(cache_directory)
        self.cache_directory.mkdir(parents=True, exist_ok=True)
        self._file_encryptor = file_encryptor or AesGcmFileEncryptor()
        self._json_converter = json_converter or PydanticJsonConverter()
        self._shape_resolver = ShapeResolver(registry)
        store_log(f"Disk: opened {self.cache_directory}")

    @classmethod
    def at(cls, name: str, **kwargs: Any) -> Disk:
        """Open the named store under the configured records path."""
        return cls(get_records_dir(name), **kwargs)

    @property
    def shape_resolver(self) -> ShapeResolver:
        return self._shape_resolver

    def _file(self, key: str) -> Path:
        return self.cache_directory / key

    def _files(self) -> list[Path]:
        try:
            return [entry for entry in self.cache_directory.iterdir() if entry.is_file()]
        except OSError:
            return []

    # -- Write --

    def save_record(self, key: str, record: Record, encrypted: bool = False,
                    encrypt_key: str | None = None) -> None:
        """Persist ``record`` once its content decodes back into its own shape.

        A record that ``retrieve_record`` could never rebuild (inconsistent
        type names, a container pydantic cannot parameterize) is refused
        with PersistenceError and nothing is written.
        """
        try:
            serialized = self._json_converter.to_json(record)
            shape = self._shape_resolver.resolve(record.type_names)
            self._json_converter.from_json(serialized, Record[shape.target_type()])
        except (EncodeError, DecodeError) as exc:
            raise PersistenceError(f"Cannot save {key!r}: {exc}") from exc
        self._write(key, serialized, encrypted, encrypt_key)

    def save(self, key: str, data: Any, encrypted: bool = False,
             encrypt_key: str | None = None) -> None:
        """Serialize ``data`` into the file named ``key``, replacing it."""
        try:
            serialized = self._json_converter.to_json(data)
        except EncodeError as exc:
            raise PersistenceError(f"Cannot save {key!r}: {exc}") from exc
        self._write(key, serialized, encrypted, encrypt_key)

    def _write(self, key: str, serialized: str, encrypted: bool,
               encrypt_key: str | None) -> None:
        if encrypted and not encrypt_key:
            raise PersistenceError(f"Cannot save {key!r} encrypted without an encryption key")

        file = self._file(key)
        try:
            with open(file, "w", encoding="utf-8") as f:
                f.write(serialized)
        except OSError as exc:
            raise PersistenceError(f"Cannot save {key!r}: {exc}") from exc

        if encrypted:
            try:
                self._file_encryptor.encrypt(encrypt_key, file)
            except EncryptionError as exc:
                # never leave plaintext behind for a record meant to be encrypted
                file.unlink(missing_ok=True)
                raise PersistenceError(f"Cannot encrypt {key!r}: {exc}") from exc

        store_log(f"Disk: saved {key!r} (encrypted={encrypted})")

    # -- Read --

    @contextmanager
    def _readable_file(self, key: str, encrypted: bool,
                       encrypt_key: str | None) -> Iterator[Path]:
        """Yield a plaintext file for ``key``; a decrypted working file is always removed."""
        file = self._file(key)
        if not encrypted:
            yield file
            return
        working_file = self._file_encryptor.decrypt(encrypt_key, file)
        try:
            yield working_file
        finally:
            working_file.unlink(missing_ok=True)

    @staticmethod
    def _read_text(file: Path) -> str:
        with open(file, "r", encoding="utf-8") as f:
            return f.read()

    def _miss(self, operation: str, key: str, exc: Exception) -> None:
        store_log(f"Disk: {operation} miss for {key!r}: {type(exc).__name__}: {exc}")

    def retrieve(self, key: str, target_type: type[T] | Any, encrypted: bool = False,
                 encrypt_key: str | None = None) -> T | None:
        """Decode the file named ``key`` straight into ``target_type``.

        No envelope is involved: the stored content must already match
        ``target_type``.
        """
        try:
            with self._readable_file(key, encrypted, encrypt_key) as file:
                return self._json_converter.from_json(self._read_text(file), target_type)
        except _MISS_ERRORS as exc:
            self._miss("retrieve", key, exc)
            return None

    def retrieve_record(self, key: str, encrypted: bool = False,
                        encrypt_key: str | None = None) -> Record | None:
        """Load a Record, rebuilding the exact shape of its data.

        The content is decoded twice: first as ``Record[Any]`` to read the
        type names, then as ``Record[<resolved type>]``. ``size_on_mb`` is
        replaced by the length of the file that was read.
        """
        try:
            with self._readable_file(key, encrypted, encrypt_key) as file:
                content = self._read_text(file)
                size_on_mb = file.stat().st_size / _BYTES_PER_MB

                envelope = self._json_converter.from_json(content, Record[Any])
                shape = self._shape_resolver.resolve(envelope.type_names)
                record = self._json_converter.from_json(content, Record[shape.target_type()])
        except _MISS_ERRORS as exc:
            self._miss("retrieve_record", key, exc)
            return None
        return record.with_size(size_on_mb)

    def _retrieve_shape(self, key: str, shape: ResolvedShape, encrypted: bool,
                        encrypt_key: str | None) -> Any | None:
        try:
            target_type = shape.target_type()
        except DecodeError as exc:
            self._miss(f"retrieve {shape.kind}", key, exc)
            return None
        return self.retrieve(key, target_type, encrypted, encrypt_key)

    def retrieve_collection(self, key: str, collection_type: type, element_type: Any,
                            encrypted: bool = False, encrypt_key: str | None = None) -> Any | None:
        """Decode a bare collection, e.g. ``retrieve_collection("k", list, User)``."""
        shape = ResolvedShape(ShapeKind.COLLECTION, element_type, collection_type)
        return self._retrieve_shape(key, shape, encrypted, encrypt_key)

    def retrieve_map(self, key: str, map_type: type, key_type: Any, value_type: Any,
                     encrypted: bool = False, encrypt_key: str | None = None) -> Any | None:
        """Decode a bare mapping, e.g. ``retrieve_map("k", dict, int, User)``."""
        shape = ResolvedShape(ShapeKind.MAP, value_type, map_type, key_type)
        return self._retrieve_shape(key, shape, encrypted, encrypt_key)

    def retrieve_array(self, key: str, element_type: Any, encrypted: bool = False,
                       encrypt_key: str | None = None) -> tuple | None:
        """Decode a bare array into a tuple of ``element_type``."""
        shape = ResolvedShape(ShapeKind.ARRAY, element_type, tuple)
        return self._retrieve_shape(key, shape, encrypted, encrypt_key)

    # -- Evict / enumerate --

    def evict(self, key: str) -> None:
        file = self._file(key)
        if file.is_file():
            file.unlink(missing_ok=True)
            store_log(f"Disk: evicted {key!r}")

    def evict_all(self) -> None:
        files = self._files()
        for file in files:
            file.unlink(missing_ok=True)
        store_log(f"Disk: evicted all ({len(files)} files)")

    def all_keys(self) -> list[str]:
        return [file.name for file in self._files()]

    def stored_mb(self) -> int:
        total = 0
        for file in self._files():
            try:
                total += file.stat().st_size
            except OSError:
                continue
        return math.ceil(total / _BYTES_PER_MB)
