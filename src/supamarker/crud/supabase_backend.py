"""Supabase-backed stores: storage bucket for markdown, PostgREST table for metadata"""

from __future__ import annotations
from contextlib import contextmanager
from typing import Any, Iterator

import httpx
from loguru import logger
from postgrest.exceptions import APIError
from storage3.exceptions import StorageException
from supabase import Client, ClientOptions, SupabaseException, create_client

from supamarker.config import Settings
from supamarker.crud.ports import Backend, BlobStore, Eq, Row, RowStore, StoredObject
from supamarker.errors import BackendError, ConfigError


LIST_PAGE_SIZE = 100
SELECT_PAGE_SIZE = 1000
PLACEHOLDER = ".emptyFolderPlaceholder"


@contextmanager
def _guard(operation: str) -> Iterator[None]:
    """Re-raise storage, PostgREST and transport errors as BackendError."""
    try:
        yield
    except (APIError, StorageException, httpx.HTTPError) as e:
        logger.debug("{} raised {}: {}", operation, type(e).__name__, e)
        raise BackendError(operation, e) from e


class SupabaseBlobStore(BlobStore):
    def __init__(self, client: Client, bucket: str):
        self.client = client
        self.bucket = bucket

    def _bucket(self) -> Any:
        return self.client.storage.from_(self.bucket)

    def list(self, search: str | None = None) -> list[StoredObject]:
        objects: list[StoredObject] = []
        offset = 0
        while True:
            options: dict[str, Any] = {"limit": LIST_PAGE_SIZE, "offset": offset}
            if search:
                options["search"] = search
            with _guard(f"list bucket '{self.bucket}'"):
                page = self._bucket().list("", options) or []
            # folders come back without an id
            objects.extend(
                StoredObject(name=item["name"]) for item in page
                if item.get("id") is not None and item.get("name") != PLACEHOLDER
            )
            if len(page) < LIST_PAGE_SIZE:
                return objects
            offset += LIST_PAGE_SIZE

    def upload(self, key: str, content: str, *, upsert: bool, content_type: str) -> None:
        file_options = {"content-type": content_type, "upsert": "true" if upsert else "false"}
        with _guard(f"upload {self.bucket}/{key}"):
            self._bucket().upload(key, content.encode("utf-8"), file_options)

    def remove(self, keys: list[str]) -> None:
        with _guard(f"remove {', '.join(keys)} from bucket '{self.bucket}'"):
            self._bucket().remove(keys)


class SupabaseRowStore(RowStore):
    def __init__(self, client: Client, table: str):
        self.client = client
        self.table = table

    def select(self, columns: str = "*", eq: Eq | None = None) -> list[Row]:
        rows: list[Row] = []
        start = 0
        while True:
            query = self.client.table(self.table).select(columns)
            if eq is not None:
                query = query.eq(eq[0], eq[1])
            with _guard(f"select from '{self.table}'"):
                page = query.range(start, start + SELECT_PAGE_SIZE - 1).execute().data or []
            rows.extend(page)
            if len(page) < SELECT_PAGE_SIZE:
                return rows
            start += SELECT_PAGE_SIZE

    def upsert(self, row: Row, *, on_conflict: str) -> None:
        with _guard(f"upsert into '{self.table}'"):
            self.client.table(self.table).upsert(row, on_conflict=on_conflict).execute()

    def delete(self, eq: Eq) -> None:
        with _guard(f"delete from '{self.table}'"):
            self.client.table(self.table).delete().eq(eq[0], eq[1]).execute()


def make_client(settings: Settings) -> Client:
    """Service-role client; no session persistence for a one-shot CLI."""
    options = ClientOptions(persist_session=False, auto_refresh_token=False)
    try:
        return create_client(settings.supabase_url, settings.supabase_service_key, options=options)
    except SupabaseException as e:
        raise ConfigError(f"Cannot create Supabase client for {settings.supabase_url!r}: {e}") from e


def make_backend(settings: Settings, client: Client | None = None) -> Backend:
    client = client or make_client(settings)
    logger.debug("Using bucket '{}' and table '{}'", settings.bucket, settings.table)
    return Backend(
        blobs=SupabaseBlobStore(client, settings.bucket),
        rows=SupabaseRowStore(client, settings.table),
    )
