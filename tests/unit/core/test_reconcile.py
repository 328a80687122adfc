"""Unit tests for core/reconcile.py against the in-memory backend"""

import pytest

from supamarker.core.models import FrontMatter, ListingEntry, PresenceState
from supamarker.core.reconcile import (
    delete_post,
    list_posts,
    presence_of,
    publish_document,
    publish_file,
    resolve_slug,
)
from supamarker.crud.memory_backend import MemoryBackend
from supamarker.errors import BackendError, MissingFrontMatterError, NotFoundError, ParseError


def _listing(backend):
    return {e.slug: e.presence for e in list_posts(backend)}


# --- resolve_slug ---

def test_resolve_slug_prefers_frontmatter_override():
    """A non-blank slug field wins over the filename."""
    assert resolve_slug(FrontMatter(slug="Custom-Slug"), "whatever.md") == "custom-slug"


def test_resolve_slug_blank_override_falls_back_to_filename():
    """A blank slug field is treated as absent."""
    assert resolve_slug(FrontMatter(slug="  "), "docs/Hello World.md") == "hello-world"


def test_resolve_slug_empty_is_an_error():
    """A filename with nothing sluggable raises ParseError for the slug key."""
    with pytest.raises(ParseError) as exc_info:
        resolve_slug(FrontMatter(title="T"), "!!!.md")
    assert exc_info.value.key == "slug"


# --- publish ---

def test_publish_scenario_derives_slug_from_filename(backend, sample_md):
    """'My Post.md' without a slug field publishes under 'my-post'."""
    result = publish_document(backend, sample_md, "My Post.md")
    assert result.slug == "my-post"
    assert result.key == "my-post.md"
    assert result.title == "Hi"
    assert backend.blobs.get("my-post.md") == (sample_md, "text/markdown")
    assert backend.rows.select() == [{
        "slug": "my-post", "title": "Hi", "tag": "x", "time_to_read": "1m", "summary": "s",
    }]


def test_publish_is_idempotent_and_keeps_latest_metadata(backend, make_post):
    """Publishing the same slug twice leaves one blob and one row with the newest front matter."""
    publish_document(backend, make_post("First"), "post.md")
    second = make_post("Second", tag="updated")
    publish_document(backend, second, "post.md")

    assert [o.name for o in backend.blobs.list()] == ["post.md"]
    assert backend.blobs.get("post.md")[0] == second
    rows = backend.rows.select()
    assert len(rows) == 1
    assert rows[0]["title"] == "Second"
    assert rows[0]["tag"] == "updated"


def test_publish_without_frontmatter_fails_before_any_write(backend):
    """A document with no metadata block raises and mutates nothing."""
    with pytest.raises(MissingFrontMatterError):
        publish_document(backend, "# Plain\n", "plain.md")
    assert list_posts(backend) == []


def test_publish_invalid_frontmatter_propagates_parse_error(backend):
    """An empty block surfaces as ParseError, not as missing front matter."""
    with pytest.raises(ParseError):
        publish_document(backend, "---\n---\nBody", "post.md")
    assert list_posts(backend) == []


def test_publish_title_falls_back_to_slug(backend):
    """The reported title is the slug when the document has none."""
    result = publish_document(backend, "---\ntag: x\n---\n", "untitled.md")
    assert result.title == "untitled"


def test_publish_row_failure_leaves_bucket_only():
    """A blob upload followed by a failed row upsert is not rolled back."""
    backend = MemoryBackend(fail_on={"rows.upsert"})
    with pytest.raises(BackendError, match="rows.upsert"):
        publish_document(backend, "---\ntitle: T\n---\n", "partial.md")
    assert _listing(backend) == {"partial": PresenceState.bucket}


def test_publish_again_repairs_partial_state(make_post):
    """A later successful publish turns bucket-only into both."""
    backend = MemoryBackend(fail_on={"rows.upsert"})
    with pytest.raises(BackendError):
        publish_document(backend, make_post("T"), "partial.md")
    backend.failures.names.clear()
    publish_document(backend, make_post("T"), "partial.md")
    assert _listing(backend) == {"partial": PresenceState.both}


def test_publish_upload_failure_skips_row():
    """A failed upload aborts before the row upsert."""
    backend = MemoryBackend(fail_on={"blobs.upload"})
    with pytest.raises(BackendError, match="blobs.upload"):
        publish_document(backend, "---\ntitle: T\n---\n", "post.md")
    assert backend.rows.select() == []


def test_publish_file_reads_from_disk(tmp_path, backend, sample_md):
    """publish_file uses the file name as slug hint."""
    f = tmp_path / "From Disk.md"
    f.write_text(sample_md, encoding="utf-8")
    assert publish_file(backend, f).slug == "from-disk"


# --- delete ---

def test_delete_hard_removes_both(backend, make_post):
    """soft=False removes the blob and the row."""
    publish_document(backend, make_post("A"), "a.md")
    result = delete_post(backend, "a")
    assert result.removed_blob and result.removed_row
    assert result.presence is PresenceState.both
    assert list_posts(backend) == []


def test_delete_soft_keeps_blob(backend, make_post):
    """soft=True removes only the row; the blob stays retrievable."""
    publish_document(backend, make_post("A"), "a.md")
    result = delete_post(backend, "a", soft=True)
    assert not result.removed_blob
    assert result.removed_row
    assert backend.blobs.get("a.md") is not None
    assert backend.rows.select() == []


def test_delete_normalizes_input(backend, make_post):
    """Paths, extensions and case in the requested slug are ignored."""
    publish_document(backend, make_post("A"), "my-post.md")
    assert delete_post(backend, "drafts/My-Post.md").slug == "my-post"
    assert list_posts(backend) == []


def test_delete_absent_slug_raises_and_mutates_nothing(backend, make_post):
    """Deleting a slug found in neither store is an error."""
    publish_document(backend, make_post("Keep"), "keep.md")
    with pytest.raises(NotFoundError, match="'ghost' not found"):
        delete_post(backend, "ghost")
    assert _listing(backend) == {"keep": PresenceState.both}


def test_delete_empty_slug_is_not_found(backend):
    """Input that normalizes to nothing never reaches the stores."""
    backend.failures.names.update({"blobs.list", "rows.select"})
    with pytest.raises(NotFoundError):
        delete_post(backend, ".md")


def test_delete_table_only_slug(backend):
    """A row without a blob is still deletable."""
    backend.rows.upsert({"slug": "orphan", "title": "O"}, on_conflict="slug")
    result = delete_post(backend, "orphan")
    assert result.presence is PresenceState.table
    assert not result.removed_blob
    assert result.removed_row


def test_delete_row_failure_after_blob_removal_leaves_table_only(make_post):
    """Partial deletion is a terminal outcome, visible through list_posts."""
    backend = MemoryBackend()
    publish_document(backend, make_post("A"), "a.md")
    backend.failures.names.add("rows.delete")
    with pytest.raises(BackendError):
        delete_post(backend, "a")
    assert _listing(backend) == {"a": PresenceState.table}


def test_delete_blob_failure_aborts_before_row(make_post):
    """A failed blob removal leaves the row in place."""
    backend = MemoryBackend()
    publish_document(backend, make_post("A"), "a.md")
    backend.failures.names.add("blobs.remove")
    with pytest.raises(BackendError):
        delete_post(backend, "a")
    assert _listing(backend) == {"a": PresenceState.both}


# --- list ---

def test_list_empty_backend(backend):
    """No blobs and no rows yields no entries."""
    assert list_posts(backend) == []


def test_list_after_publish_and_soft_delete(backend, make_post):
    """Soft-deleting 'a' leaves it bucket-only while 'b' stays in both."""
    publish_document(backend, make_post("A"), "a.md")
    publish_document(backend, make_post("B"), "b.md")
    delete_post(backend, "a", soft=True)
    assert list_posts(backend) == [
        ListingEntry(slug="a", presence=PresenceState.bucket),
        ListingEntry(slug="b", presence=PresenceState.both),
    ]


def test_list_is_sorted_and_classifies_each_side(backend):
    """Entries come back sorted with bucket/table/both locations."""
    backend.blobs.upload("zeta.md", "z", upsert=True, content_type="text/markdown")
    backend.blobs.upload("Mixed.md", "m", upsert=True, content_type="text/markdown")
    backend.rows.upsert({"slug": "alpha"}, on_conflict="slug")
    backend.rows.upsert({"slug": "mixed"}, on_conflict="slug")
    assert [(e.slug, e.presence.value) for e in list_posts(backend)] == [
        ("alpha", "table"), ("mixed", "both"), ("zeta", "bucket"),
    ]


def test_list_surfaces_backend_errors():
    """A failing store call is raised, not treated as an empty store."""
    with pytest.raises(BackendError):
        list_posts(MemoryBackend(fail_on={"rows.select"}))


def test_presence_of(backend, make_post):
    """presence_of reports absent for unknown slugs and both after publish."""
    assert presence_of(backend, "a") is PresenceState.absent
    publish_document(backend, make_post("A"), "a.md")
    assert presence_of(backend, "a") is PresenceState.both


def test_delete_finds_blobs_with_any_markdown_extension(backend):
    """A slug listed from 'foo.markdown' is deletable under 'foo'."""
    backend.blobs.upload("foo.markdown", "x", upsert=True, content_type="text/markdown")
    backend.blobs.upload("foo-bar.md", "y", upsert=True, content_type="text/markdown")
    assert _listing(backend)["foo"] is PresenceState.bucket

    result = delete_post(backend, "foo")
    assert result.blob_names == ("foo.markdown",)
    assert result.removed_blob
    assert _listing(backend) == {"foo-bar": PresenceState.bucket}


def test_delete_reports_matched_blob_names_on_soft_delete(backend, make_post):
    """Soft delete returns the object names it kept."""
    publish_document(backend, make_post("A"), "a.md")
    result = delete_post(backend, "a", soft=True)
    assert result.blob_names == ("a.md",)
    assert not result.removed_blob


def test_presence_of_matches_delete_lookup(backend):
    """presence_of sees the same objects delete_post would remove."""
    backend.blobs.upload("Notes.MDX", "n", upsert=True, content_type="text/markdown")
    assert presence_of(backend, "notes") is PresenceState.bucket
