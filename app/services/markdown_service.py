"""Markdown to HTML conversion used by the themed rendering endpoint."""

from __future__ import annotations

from dataclasses import dataclass, field
import html
import re
from typing import Any

import markdown as md


_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RE = re.compile(r"\s+")


@dataclass(slots=True)
class MarkdownService:
    """Convert post bodies into HTML fragments and plain-text excerpts."""

    extensions: tuple[str, ...] = ("tables", "fenced_code")
    extension_configs: dict[str, dict[str, Any]] = field(default_factory=dict)

    def parse(self, markdown_text: str | None) -> str:
        """Return the HTML fragment for ``markdown_text``; ``None`` yields an empty string."""

        if not markdown_text:
            return ""
        return md.markdown(
            markdown_text,
            extensions=list(self.extensions),
            extension_configs=self.extension_configs,
        )

    def excerpt(self, markdown_text: Any, limit: int = 160) -> str:
        """Return a plain-text summary of ``markdown_text`` truncated on a word boundary."""

        if not isinstance(markdown_text, str):
            return ""

        text = html.unescape(_TAG_RE.sub(" ", self.parse(markdown_text)))
        text = _WHITESPACE_RE.sub(" ", text).strip()
        if len(text) <= limit:
            return text

        clipped = text[:limit].rsplit(" ", 1)[0].rstrip(",.;:")
        return f"{clipped}…"


__all__ = ["MarkdownService"]
