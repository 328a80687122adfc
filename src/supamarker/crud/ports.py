"""Backend access ports: the blob store and row store the engine reconciles"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

Row = dict[str, Any]
Eq = tuple[str, Any]


@dataclass(frozen=True)
class StoredObject:
    name: str


class BlobStore(ABC):
    """Object storage bucket. Every method raises BackendError on failure."""

    @abstractmethod
    def list(self, search: str | None = None) -> list[StoredObject]:
        """Return objects in the bucket, optionally filtered by a name prefix."""
        raise NotImplementedError

    @abstractmethod
    def upload(self, key: str, content: str, *, upsert: bool, content_type: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def remove(self, keys: list[str]) -> None:
        raise NotImplementedError


class RowStore(ABC):
    """Metadata table. Every method raises BackendError on failure."""

    @abstractmethod
    def select(self, columns: str = "*", eq: Eq | None = None) -> list[Row]:
        """Return rows projected to columns, optionally filtered by column == value."""
        raise NotImplementedError

    @abstractmethod
    def upsert(self, row: Row, *, on_conflict: str) -> None:
        raise NotImplementedError

    @abstractmethod
    def delete(self, eq: Eq) -> None:
        raise NotImplementedError


@dataclass
class Backend:
    """The pair of stores every engine operation is handed explicitly."""
    blobs: BlobStore
    rows: RowStore
