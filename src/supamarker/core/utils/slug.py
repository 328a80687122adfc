"""Slug generation and normalization for post identifiers"""

import re
import unicodedata


MD_EXTENSIONS = {'.md', '.mdx', '.markdown'}

_NON_ALNUM_RE = re.compile(r'[^a-z0-9]+')


def slugify(text: str) -> str:
    """Convert text to a lowercase, hyphen-separated URL-safe slug."""
    text = unicodedata.normalize('NFKD', text).encode('ascii', 'ignore').decode('ascii')
    return _NON_ALNUM_RE.sub('-', text.lower()).strip('-')


def normalize_slug(value: str) -> str:
    """Reduce a path, object name or slug to its canonical lowercase slug.

    Drops directory components and a trailing markdown extension, so
    'posts/My-Post.md', 'my-post.md' and 'MY-POST' all map to 'my-post'.
    Degenerate input ('', '/', '.md') yields ''.
    """
    name = re.split(r'[\\/]', value.strip().rstrip('/\\'))[-1]
    stem, dot, ext = name.rpartition('.')
    if dot and f'.{ext.lower()}' in MD_EXTENSIONS:
        name = stem
    return name.strip().lower()
