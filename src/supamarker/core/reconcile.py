"""Publish, delete and list across the bucket and the metadata table.

The two stores are written one after the other with no shared transaction.
A failure between the writes leaves the slug in partial presence ('bucket'
or 'table'); publishing again repairs it and list_posts reports it.
"""

from pathlib import Path

from loguru import logger

from supamarker.core.frontmatter import parse_frontmatter
from supamarker.core.models import (
    DeleteResult,
    FrontMatter,
    ListingEntry,
    PresenceState,
    PublishResult,
)
from supamarker.core.utils.slug import normalize_slug, slugify
from supamarker.crud.ports import Backend
from supamarker.errors import BackendError, MissingFrontMatterError, NotFoundError, ParseError


CONTENT_TYPE = "text/markdown"
SLUG_COLUMN = "slug"


def blob_key(slug: str) -> str:
    return f"{slug}.md"


def resolve_slug(frontmatter: FrontMatter, path_hint: str | Path) -> str:
    """Front matter slug override if non-blank, else the slugified file stem."""
    if frontmatter.slug and frontmatter.slug.strip():
        slug = normalize_slug(frontmatter.slug)
    else:
        slug = slugify(Path(path_hint).stem)
    if not slug:
        raise ParseError(f"Cannot derive a slug from '{path_hint}'", key="slug")
    return slug


def _blob_names(backend: Backend, slug: str) -> list[str]:
    """Bucket object names that normalize to slug, whatever markdown extension they carry."""
    objects = backend.blobs.list(search=slug)
    return [o.name for o in objects if normalize_slug(o.name) == slug]


def _has_row(backend: Backend, slug: str) -> bool:
    return bool(backend.rows.select(SLUG_COLUMN, eq=(SLUG_COLUMN, slug)))


def _lookup(backend: Backend, slug: str) -> tuple[list[str], bool, PresenceState]:
    """Check each store independently: (matching object names, row exists, presence)."""
    names = _blob_names(backend, slug)
    in_table = _has_row(backend, slug)
    return names, in_table, PresenceState.classify(bool(names), in_table)


def presence_of(backend: Backend, slug: str) -> PresenceState:
    return _lookup(backend, slug)[2]


def publish_document(backend: Backend, text: str, path_hint: str | Path) -> PublishResult:
    """Upload text as {slug}.md, then upsert its metadata row.

    Both writes are upserts, so publishing the same slug again overwrites
    in place and repairs a previous partial publish.
    """
    frontmatter = parse_frontmatter(text).frontmatter
    if frontmatter is None:
        raise MissingFrontMatterError(f"Missing front matter in {path_hint}")

    slug = resolve_slug(frontmatter, path_hint)
    key = blob_key(slug)

    logger.debug("Uploading {} ({} bytes)", key, len(text.encode("utf-8")))
    backend.blobs.upload(key, text, upsert=True, content_type=CONTENT_TYPE)

    logger.debug("Upserting metadata row for {}", slug)
    try:
        backend.rows.upsert(frontmatter.to_row(slug), on_conflict=SLUG_COLUMN)
    except BackendError:
        logger.warning("{} uploaded but its metadata row was not written; '{}' is now bucket-only", key, slug)
        raise

    logger.info("Published {} as {}", slug, key)
    return PublishResult(slug=slug, key=key, title=frontmatter.title or slug)


def publish_file(backend: Backend, path: str | Path) -> PublishResult:
    """Read a markdown file and publish it, deriving the slug from its name."""
    text = Path(path).read_text(encoding="utf-8")
    return publish_document(backend, text, path)


def delete_post(backend: Backend, slug_input: str, soft: bool = False) -> DeleteResult:
    """Remove slug from the bucket (unless soft) and from the table.

    Soft delete keeps the markdown object and only drops the metadata row.
    """
    slug = normalize_slug(slug_input)
    if not slug:
        raise NotFoundError(slug_input)

    names, in_table, presence = _lookup(backend, slug)
    logger.debug("Presence of {}: {}", slug, presence.value)

    if presence is PresenceState.absent:
        raise NotFoundError(slug)

    removed_blob = False
    if not soft and names:
        backend.blobs.remove(names)
        removed_blob = True
        logger.info("Removed {} from bucket", ", ".join(names))

    removed_row = False
    if in_table:
        try:
            backend.rows.delete((SLUG_COLUMN, slug))
        except BackendError:
            if removed_blob:
                logger.warning("Blob for '{}' removed but its metadata row remains; '{}' is now table-only", slug, slug)
            raise
        removed_row = True
        logger.info("Removed metadata row for {}", slug)

    return DeleteResult(
        slug=slug, presence=presence, blob_names=tuple(names),
        removed_blob=removed_blob, removed_row=removed_row,
    )


def list_posts(backend: Backend) -> list[ListingEntry]:
    """Union of bucket and table slugs, sorted, each with its presence."""
    bucket_slugs = {normalize_slug(o.name) for o in backend.blobs.list()}
    table_slugs = {normalize_slug(str(r.get(SLUG_COLUMN) or "")) for r in backend.rows.select(SLUG_COLUMN)}
    bucket_slugs.discard("")
    table_slugs.discard("")
    logger.debug("Bucket holds {} slug(s), table holds {}", len(bucket_slugs), len(table_slugs))

    return [
        ListingEntry(slug=s, presence=PresenceState.classify(s in bucket_slugs, s in table_slugs))
        for s in sorted(bucket_slugs | table_slugs)
    ]
