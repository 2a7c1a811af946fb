"""Publish a Markdown post from the command line.

The body is read from a file (or ``-`` for stdin) and sent through the same
pipeline the web application uses: the Markdown source is written under the
configured Markdown root, rendered by the site's themed HTML endpoint, and the
result is written under the HTML root.

Configuration:
- ``INKWELL_MARKDOWN_ROOT`` / ``INKWELL_HTML_ROOT`` select the archive roots.
- ``INKWELL_CONTENT_DIR`` anchors relative roots (defaults to the working directory).
- ``--base-url`` or the site configuration's ``base_url`` locate the renderer.
"""
from __future__ import annotations

import argparse
import asyncio
import logging
import os
from pathlib import Path
import sys

from app.models.post import PostForm, RequestContext, parse_datetime
from app.services.exceptions import InvalidArgument, PublishFailed, RenderTransportError
from app.services.publisher import PostPublisher, create_publisher
from app.settings import PublishSettings, SiteMetadata

LOGGER = logging.getLogger("inkwell.publish")

DEFAULT_BASE_URL = "http://127.0.0.1:8000"


def _configure_logging() -> None:
    level_name = os.getenv("INKWELL_LOG_LEVEL", "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Publish a blog post as Markdown and rendered HTML.")
    parser.add_argument("body", help="Path to the Markdown body, or '-' to read from stdin.")
    parser.add_argument("--title", required=True, help="Post title.")
    parser.add_argument("--slug", required=True, help="URL-safe identifier used in file names.")
    parser.add_argument("--author", default="", help="Author display name.")
    parser.add_argument("--tags", default="", help="Comma-separated tags.")
    parser.add_argument("--date", default=None, help="ISO-8601 publication date (default: now).")
    parser.add_argument(
        "--base-url",
        default=None,
        help="Base URL of the rendering site (default from site configuration or %s)." % DEFAULT_BASE_URL,
    )
    parser.add_argument("--theme", default=None, help="Override the theme from the site configuration.")
    return parser.parse_args(argv)


def _read_body(source: str) -> str:
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _build_form(args: argparse.Namespace, body: str) -> PostForm:
    form = PostForm(title=args.title, slug=args.slug, author=args.author, tags=args.tags, body=body)
    if args.date:
        published = parse_datetime(args.date)
        if published is None:
            raise SystemExit(f"--date must be an ISO-8601 date, got '{args.date}'")
        form.date_published = published
    return form


def _build_publisher(settings: PublishSettings, site_metadata: SiteMetadata) -> PostPublisher:
    return create_publisher(settings, site_metadata)


def run(argv: list[str] | None = None) -> int:
    _configure_logging()
    args = _parse_args(argv)

    settings = PublishSettings.from_env()
    site_metadata = SiteMetadata.from_env()
    if args.theme:
        site_metadata.theme = args.theme

    try:
        body = _read_body(args.body)
    except OSError as exc:
        LOGGER.error("Could not read post body from %s: %s", args.body, exc)
        return 1

    form = _build_form(args, body)
    base_url = args.base_url or site_metadata.base_url or DEFAULT_BASE_URL
    context = RequestContext(base_url=base_url.rstrip("/"))
    publisher = _build_publisher(settings, site_metadata)

    try:
        published = asyncio.run(publisher.publish_post(form, context))
    except InvalidArgument as exc:
        LOGGER.error("Invalid post: %s", exc)
        return 1
    except PublishFailed as exc:
        LOGGER.error("Publishing failed for %s artifact at %s", exc.kind.name.lower(), exc.path)
        return 1
    except RenderTransportError as exc:
        LOGGER.error("Rendering failed: %s", exc)
        return 1

    LOGGER.info("Published post '%s' (theme %s)", form.slug, site_metadata.theme)
    LOGGER.info("Markdown path: %s", published.markdown)
    LOGGER.info("HTML path: %s", published.html)
    return 0


if __name__ == "__main__":  # pragma: no cover - script entry point
    raise SystemExit(run())
