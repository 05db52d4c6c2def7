"""Exception types raised by the disk_store layer."""


class DiskStoreError(Exception):
    """Base class for every disk_store failure."""


class PersistenceError(DiskStoreError):
    """A record could not be written. The store is not usable."""


class EncryptionError(DiskStoreError):
    """A file could not be encrypted or decrypted."""


class DecodeError(DiskStoreError):
    """Stored content does not decode into the requested type."""


class UnknownTypeError(DecodeError):
    """A type name is not present in the type registry."""

    def __init__(self, type_name: str | None):
        super().__init__(f"Unknown type name: {type_name!r}")
        self.type_name = type_name


class UnresolvableShapeError(DecodeError):
    """A container type is neither a collection, an array nor a map."""


class EncodeError(DiskStoreError):
    """A value could not be serialized."""
