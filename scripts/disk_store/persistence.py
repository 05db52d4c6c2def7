"""Persistence contract consumed by the cache orchestrator."""

from __future__ import annotations

from abc import ABC, abstractmethod

from .record import Record


class Persistence(ABC):
    """Where records live between processes."""

    @abstractmethod
    def save_record(self, key: str, record: Record, encrypted: bool = False,
                    encrypt_key: str | None = None) -> None:
        """Persist ``record`` under ``key``, replacing any previous content."""

    @abstractmethod
    def evict(self, key: str) -> None:
        """Delete the record under ``key``. Missing keys are ignored."""

    @abstractmethod
    def evict_all(self) -> None:
        """Delete every record."""

    @abstractmethod
    def all_keys(self) -> list[str]:
        """Keys of all persisted records, in no particular order."""

    @abstractmethod
    def stored_mb(self) -> int:
        """Total persisted size in megabytes, rounded up."""

    @abstractmethod
    def retrieve_record(self, key: str, encrypted: bool = False,
                        encrypt_key: str | None = None) -> Record | None:
        """Load the record under ``key``; None on any failure."""
