"""Shared fixtures for core unit tests"""

import pytest

from supamarker.crud.memory_backend import MemoryBackend


SAMPLE_MD = "---\ntitle: Hi\ntag: x\nttr: 1m\nsummary: s\n---\nBody"


@pytest.fixture(name="make_post")
def make_post_fixture():
    """Build a small markdown document with front matter."""
    def _make(title: str, slug: str = None, tag: str = "misc") -> str:
        lines = ["---", f"title: {title}", f"tag: {tag}", "ttr: 3 min", "summary: short"]
        if slug:
            lines.append(f"slug: {slug}")
        lines += ["---", f"# {title}", ""]
        return "\n".join(lines)
    return _make


@pytest.fixture(name="sample_md")
def sample_md_fixture():
    return SAMPLE_MD


@pytest.fixture(name="backend")
def backend_fixture():
    return MemoryBackend()
