"""Domain models describing a blog post moving through the publish pipeline."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Mapping


def _default_datetime() -> datetime:
    """Return a timezone-aware UTC timestamp."""
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> datetime | None:
    """Coerce a string/date/datetime value into a timezone-aware datetime.

    A supplied UTC offset is kept so the calendar date stays the one the author
    gave; naive values are treated as UTC.
    """

    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            dt = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt


def split_tags(value: str | None) -> list[str]:
    """Split comma-separated tags, trimming whitespace and dropping empty entries."""

    if not value:
        return []
    return [tag.strip() for tag in value.split(",") if tag.strip()]


@dataclass(slots=True)
class PostForm:
    """Post submitted by an author."""

    title: str = ""
    slug: str = ""
    author: str = ""
    tags: str = ""
    body: str = ""
    date_published: datetime = field(default_factory=_default_datetime)

    @property
    def tag_list(self) -> list[str]:
        return split_tags(self.tags)

    def to_payload(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "slug": self.slug,
            "author": self.author,
            "tags": self.tags,
            "body": self.body,
            "date_published": self.date_published.isoformat(),
        }


@dataclass(slots=True, frozen=True)
class PublishedMetadata:
    """Publication details resolved before a post is written out."""

    date_published: datetime
    slug: str
    theme: str


@dataclass(slots=True)
class PublishedPostPath:
    """Locations of the Markdown and HTML artifacts produced for a post."""

    markdown: str
    html: str


class ArtifactKind(str, Enum):
    """Kind of artifact written by the pipeline, valued by file extension."""

    MARKDOWN = "md"
    HTML = "html"

    @property
    def extension(self) -> str:
        return self.value

    @classmethod
    def from_extension(cls, extension: str) -> "ArtifactKind":
        normalised = (extension or "").strip().lstrip(".").lower()
        for kind in cls:
            if kind.value == normalised:
                return kind
        raise ValueError(f"Unsupported artifact extension '{extension}'")


class PublishMode(str, Enum):
    """Purpose of a call made to the rendering endpoint."""

    PREVIEW = "preview"
    PARSE = "parse"
    PUBLISH = "publish"


@dataclass(slots=True, frozen=True)
class RequestContext:
    """Connection details of the inbound request, used to reach the renderer."""

    base_url: str
    headers: Mapping[str, str] = field(default_factory=dict)


__all__ = [
    "ArtifactKind",
    "PostForm",
    "PublishMode",
    "PublishedMetadata",
    "PublishedPostPath",
    "RequestContext",
    "parse_datetime",
    "split_tags",
]
