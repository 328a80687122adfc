"""Front matter, presence and operation result models"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FrontMatter(BaseModel):
    """Typed view of the YAML block; unrecognized keys are dropped."""
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    title:        Optional[str] = None
    tag:          Optional[str] = None
    time_to_read: Optional[str] = Field(default=None, alias="ttr")
    slug:         Optional[str] = None
    summary:      Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _scalar_to_str(cls, value: Any) -> Any:
        # YAML turns `ttr: 5` into an int and `title: 2024-01-01` into a date
        if value is None or isinstance(value, (str, list, dict)):
            return value
        return str(value)

    def to_row(self, slug: str) -> dict[str, Any]:
        """Metadata row for the posts table, keyed by slug."""
        return {
            "slug": slug,
            "title": self.title,
            "tag": self.tag,
            "time_to_read": self.time_to_read,
            "summary": self.summary,
        }


@dataclass(frozen=True)
class ParsedDocument:
    frontmatter: Optional[FrontMatter]
    body: str


class PresenceState(str, Enum):
    """Where a slug currently exists across the bucket and the table."""
    both = "both"
    bucket = "bucket"
    table = "table"
    absent = "absent"

    @classmethod
    def classify(cls, in_bucket: bool, in_table: bool) -> "PresenceState":
        if in_bucket and in_table:
            return cls.both
        if in_bucket:
            return cls.bucket
        if in_table:
            return cls.table
        return cls.absent


@dataclass(frozen=True)
class PublishResult:
    slug: str
    key: str
    title: str


@dataclass(frozen=True)
class DeleteResult:
    slug: str
    presence: PresenceState
    removed_blob: bool
    removed_row: bool
    blob_names: tuple[str, ...] = ()


@dataclass(frozen=True)
class ListingEntry:
    slug: str
    presence: PresenceState
