"""In-process Backend used by tests and offline runs"""

from __future__ import annotations
from dataclasses import dataclass, field

from supamarker.crud.ports import Backend, BlobStore, Eq, Row, RowStore, StoredObject
from supamarker.errors import BackendError


@dataclass
class _Failures:
    """Operation names ('blobs.upload', 'rows.delete', ...) that should fail."""
    names: set[str] = field(default_factory=set)

    def check(self, operation: str) -> None:
        if operation in self.names:
            raise BackendError(operation, "injected failure")


@dataclass
class MemoryBlobStore(BlobStore):
    _objects: dict[str, tuple[str, str]] = field(default_factory=dict)
    _failures: _Failures = field(default_factory=_Failures)

    def list(self, search: str | None = None) -> list[StoredObject]:
        self._failures.check("blobs.list")
        names = sorted(self._objects)
        if search:
            names = [n for n in names if n.lower().startswith(search.lower())]
        return [StoredObject(name=n) for n in names]

    def upload(self, key: str, content: str, *, upsert: bool, content_type: str) -> None:
        self._failures.check("blobs.upload")
        if key in self._objects and not upsert:
            raise BackendError("blobs.upload", f"The resource already exists: {key}")
        self._objects[key] = (content, content_type)

    def remove(self, keys: list[str]) -> None:
        self._failures.check("blobs.remove")
        for key in keys:
            self._objects.pop(key, None)

    def get(self, key: str) -> tuple[str, str] | None:
        """Return (content, content_type) for key, or None."""
        return self._objects.get(key)


@dataclass
class MemoryRowStore(RowStore):
    _rows: list[Row] = field(default_factory=list)
    _failures: _Failures = field(default_factory=_Failures)

    def select(self, columns: str = "*", eq: Eq | None = None) -> list[Row]:
        self._failures.check("rows.select")
        rows = [r for r in self._rows if eq is None or r.get(eq[0]) == eq[1]]
        if columns.strip() == "*":
            return [dict(r) for r in rows]
        wanted = [c.strip() for c in columns.split(",")]
        return [{c: r.get(c) for c in wanted} for r in rows]

    def upsert(self, row: Row, *, on_conflict: str) -> None:
        self._failures.check("rows.upsert")
        for existing in self._rows:
            if existing.get(on_conflict) == row[on_conflict]:
                existing.update(row)
                return
        self._rows.append(dict(row))

    def delete(self, eq: Eq) -> None:
        self._failures.check("rows.delete")
        column, value = eq
        self._rows = [r for r in self._rows if r.get(column) != value]


class MemoryBackend(Backend):
    """Backend over dicts; fail_on names operations that raise BackendError."""

    def __init__(self, fail_on: set[str] | None = None):
        self.failures = _Failures(set(fail_on or ()))
        super().__init__(
            blobs=MemoryBlobStore(_failures=self.failures),
            rows=MemoryRowStore(_failures=self.failures),
        )
