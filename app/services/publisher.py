"""Publisher that turns submitted posts into Markdown and rendered HTML artifacts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Protocol

from app.models.post import ArtifactKind, PostForm, PublishedMetadata, PublishedPostPath, RequestContext
from app.services.exceptions import InvalidArgument
from app.services.front_matter import apply_metadata
from app.services.renderer import HttpRenderEndpointResolver, RenderClient
from app.services.storage import LocalFileSystem
from app.services.writer import ArtifactWriter
from app.settings import PublishSettings, SupportsSiteMetadata


logger = logging.getLogger(__name__)


class SupportsArtifactWriting(Protocol):
    """Subset of :class:`ArtifactWriter` relied upon by the publisher."""

    async def publish_text(
        self, root_dir: str, date: datetime, slug: str, extension: str, text: str | None
    ) -> str:
        """Persist ``text`` and return the archive path."""


class SupportsRendering(Protocol):
    """Subset of :class:`RenderClient` relied upon by the publisher."""

    async def render_to_html(self, form: PostForm | None, context: RequestContext | None) -> str:
        """Return the themed HTML for ``form``."""


@dataclass(slots=True)
class PostPublisher:
    """Publish posts as a Markdown source file and a rendered HTML page.

    Every stage runs sequentially within one call; a failing stage aborts the
    remaining ones and artifacts already written stay on disk.
    """

    settings: PublishSettings
    site_metadata: SupportsSiteMetadata
    writer: SupportsArtifactWriting
    renderer: SupportsRendering

    def __post_init__(self) -> None:
        for name in ("settings", "site_metadata", "writer", "renderer"):
            if getattr(self, name) is None:
                raise InvalidArgument(name)

    def apply_metadata(self, form: PostForm | None, metadata: PublishedMetadata | None) -> str:
        """Return the Markdown document for ``form`` including its front matter."""

        return apply_metadata(form, metadata)

    async def publish_markdown(self, markdown: str | None, metadata: PublishedMetadata | None) -> str:
        """Write the Markdown document and return its archive path."""

        if markdown is None:
            raise InvalidArgument("markdown")
        if metadata is None:
            raise InvalidArgument("metadata")

        path = await self.writer.publish_text(
            self.settings.markdown_root,
            metadata.date_published,
            metadata.slug,
            ArtifactKind.MARKDOWN.extension,
            markdown,
        )
        logger.info("Markdown published", extra={"event": "publish.markdown", "slug": metadata.slug, "path": path})
        return path

    async def publish_html(self, html: str | None, metadata: PublishedMetadata | None) -> str:
        """Write the rendered HTML page and return its archive path."""

        if html is None:
            raise InvalidArgument("html")
        if metadata is None:
            raise InvalidArgument("metadata")

        path = await self.writer.publish_text(
            self.settings.html_root,
            metadata.date_published,
            metadata.slug,
            ArtifactKind.HTML.extension,
            html,
        )
        logger.info("HTML published", extra={"event": "publish.html", "slug": metadata.slug, "path": path})
        return path

    async def get_published_html(self, form: PostForm | None, context: RequestContext | None) -> str:
        """Return the HTML produced by the rendering endpoint for ``form``."""

        if form is None:
            raise InvalidArgument("form")
        if context is None:
            raise InvalidArgument("context")

        html = await self.renderer.render_to_html(form, context)
        logger.info("Post rendered", extra={"event": "publish.render", "slug": form.slug, "length": len(html)})
        return html

    async def publish_post(self, form: PostForm | None, context: RequestContext | None) -> PublishedPostPath:
        """Compose, persist, render, and persist a post, returning both artifact paths."""

        if form is None:
            raise InvalidArgument("form")
        if context is None:
            raise InvalidArgument("context")

        metadata = PublishedMetadata(
            date_published=form.date_published,
            slug=form.slug,
            theme=self.site_metadata.theme,
        )

        markdown = self.apply_metadata(form, metadata)
        markdown_path = await self.publish_markdown(markdown, metadata)

        html = await self.get_published_html(form, context)
        html_path = await self.publish_html(html, metadata)

        logger.info(
            "Post published",
            extra={"event": "publish.post", "slug": metadata.slug, "theme": metadata.theme},
        )
        return PublishedPostPath(markdown=markdown_path, html=html_path)


def create_publisher(settings: PublishSettings, site_metadata: SupportsSiteMetadata) -> PostPublisher:
    """Wire a publisher that writes to the local disk and renders through the site's HTTP endpoint."""

    writer = ArtifactWriter(file_system=LocalFileSystem(base_dir=settings.content_dir))
    resolver = HttpRenderEndpointResolver(timeout=settings.render_timeout, headers=settings.render_headers)
    renderer = RenderClient(site_metadata=site_metadata, resolver=resolver)
    return PostPublisher(settings=settings, site_metadata=site_metadata, writer=writer, renderer=renderer)


__all__ = ["PostPublisher", "SupportsArtifactWriting", "SupportsRendering", "create_publisher"]
