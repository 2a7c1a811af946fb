"""Compose Markdown documents with a front-matter header for published posts."""

from __future__ import annotations

from app.models.post import PostForm, PublishedMetadata
from app.services.exceptions import InvalidArgument

FRONT_MATTER_DELIMITER = "---"


def apply_metadata(form: PostForm | None, metadata: PublishedMetadata | None) -> str:
    """Return the post body prefixed with a ``---`` delimited metadata block.

    The output always starts with the delimiter and always ends with the body
    followed by a single newline.
    """

    if form is None:
        raise InvalidArgument("form")
    if metadata is None:
        raise InvalidArgument("metadata")

    lines = [
        FRONT_MATTER_DELIMITER,
        f"* Title: {form.title}",
        f"* Slug: {form.slug}",
        f"* Author: {form.author}",
        f"* Tags: {', '.join(form.tag_list)}",
        f"* Date Published: {metadata.date_published.isoformat()}",
        FRONT_MATTER_DELIMITER,
        form.body,
    ]
    return "\n".join(lines) + "\n"


__all__ = ["FRONT_MATTER_DELIMITER", "apply_metadata"]
