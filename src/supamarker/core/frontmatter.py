"""Front matter extraction: split a markdown document into FrontMatter and body"""

from typing import Any

import yaml
from pydantic import ValidationError

from supamarker.core.models import FrontMatter, ParsedDocument
from supamarker.errors import ParseError


MARKER = '---'


def _is_marker(line: str) -> bool:
    return line.rstrip() == MARKER


def _load_block(block: str) -> dict[str, Any]:
    """Parse the YAML between the markers into a mapping.

    An empty block is invalid metadata, not absent metadata.
    """
    if not block.strip():
        raise ParseError("Invalid front matter: empty block between '---' markers")
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as e:
        raise ParseError(f"Invalid YAML front matter: {e}") from e
    if not isinstance(data, dict):
        raise ParseError(f"Invalid YAML front matter: expected a mapping, got {type(data).__name__}")
    return data


def _validate(data: dict[str, Any]) -> FrontMatter:
    try:
        return FrontMatter.model_validate(data)
    except ValidationError as e:
        err = e.errors()[0]
        key = ".".join(str(part) for part in err["loc"])
        raise ParseError(f"Invalid front matter: {err['msg']}", key=key) from e


def parse_frontmatter(document: str) -> ParsedDocument:
    """Return ParsedDocument(frontmatter, body).

    Documents whose first non-blank line is not '---' carry no front matter
    and come back untouched as the body.
    """
    text = document.lstrip()
    lines = text.splitlines(keepends=True)
    if not lines or not _is_marker(lines[0]):
        return ParsedDocument(frontmatter=None, body=document)

    end = next((i for i in range(1, len(lines)) if _is_marker(lines[i])), None)
    if end is None:
        raise ParseError("Invalid front matter: missing closing '---' marker")

    block = "".join(lines[1:end])
    body = "".join(lines[end + 1:]).lstrip("\r\n")
    return ParsedDocument(frontmatter=_validate(_load_block(block)), body=body)


def render_frontmatter(frontmatter: FrontMatter, body: str = "") -> str:
    """Serialize FrontMatter back into a '---' delimited document."""
    data = frontmatter.model_dump(by_alias=True, exclude_none=True)
    block = yaml.safe_dump(data, sort_keys=False, allow_unicode=True) if data else ""
    return f"{MARKER}\n{block}{MARKER}\n{body}"
