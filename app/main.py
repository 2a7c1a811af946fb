"""FastAPI web application exposing the post preview, render, and publish endpoints"""

from __future__ import annotations

from datetime import datetime, timezone
from functools import lru_cache
import logging
from pathlib import Path
import re

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import HTMLResponse, JSONResponse
from fastapi.templating import Jinja2Templates
from pydantic import BaseModel, Field, field_validator

from app.models.post import PostForm, PublishedPostPath, PublishMode, RequestContext, parse_datetime
from app.services.exceptions import InvalidArgument, PublishFailed, RenderTransportError
from app.services.markdown_service import MarkdownService
from app.services.publisher import PostPublisher, create_publisher
from app.services.renderer import PUBLISH_MODE_HEADER
from app.settings import PublishSettings, SiteMetadata

app = FastAPI(title="Inkwell Publisher")

TEMPLATE_DIR = Path(__file__).parent / "templates"
THEME_DIR = TEMPLATE_DIR / "themes"
_THEME_NAME_RE = re.compile(r"^[A-Za-z0-9_-]+$")

markdown_service = MarkdownService()

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.globals.update(now=lambda: datetime.now(timezone.utc))
templates.env.filters["excerpt"] = markdown_service.excerpt

logger = logging.getLogger(__name__)


def _build_debug_detail(exc: Exception) -> dict[str, str]:
    """Return a serialisable mapping describing ``exc`` for debugging."""

    message = str(exc).strip()
    return {
        "type": type(exc).__name__,
        "message": message or "No exception message provided.",
    }


@app.exception_handler(RequestValidationError)
async def _handle_invalid_submission(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {"field": ".".join(str(part) for part in error.get("loc", ())), "message": error.get("msg", "")}
        for error in exc.errors()
    ]
    logger.info(
        "Rejected invalid post submission",
        extra={"event": "publish.invalid", "route": request.url.path, "errors": len(errors)},
    )
    return JSONResponse(
        status_code=400,
        content={
            "detail": {
                "message": "Invalid post submission",
                "debug": {"type": type(exc).__name__, "errors": errors},
            }
        },
    )


class PostFormRequest(BaseModel):
    """Post payload submitted by the author or forwarded by the publish pipeline."""

    title: str = Field(..., description="Title of the post.")
    slug: str = Field(..., description="URL-safe identifier used in published file names.")
    author: str = Field("", description="Display name of the author.")
    tags: str = Field("", description="Comma-separated list of tags.")
    body: str = Field("", description="Raw Markdown body of the post.")
    date_published: datetime | None = Field(None, description="Publication date; defaults to now.")

    @field_validator("title", "slug")
    @classmethod
    def _ensure_not_empty(cls, value: str) -> str:
        cleaned = value.strip()
        if not cleaned:
            raise ValueError("Value must not be empty.")
        return cleaned

    def to_form(self) -> PostForm:
        form = PostForm(
            title=self.title,
            slug=self.slug,
            author=self.author.strip(),
            tags=self.tags,
            body=self.body,
        )
        published = parse_datetime(self.date_published)
        if published is not None:
            form.date_published = published
        return form


class PublishedPostResponse(BaseModel):
    """Paths of the artifacts written for a published post."""

    markdown: str = Field(..., description="Archive path of the Markdown source.")
    html: str = Field(..., description="Archive path of the rendered HTML page.")

    @classmethod
    def from_published_path(cls, path: PublishedPostPath) -> "PublishedPostResponse":
        return cls(markdown=path.markdown, html=path.html)


@lru_cache(maxsize=1)
def get_settings() -> PublishSettings:
    """Return publish settings loaded from the environment."""

    return PublishSettings.from_env()


@lru_cache(maxsize=1)
def get_site_metadata() -> SiteMetadata:
    """Return site metadata loaded from the configured YAML file."""

    return SiteMetadata.from_env()


def get_publisher(
    settings: PublishSettings = Depends(get_settings),
    site_metadata: SiteMetadata = Depends(get_site_metadata),
) -> PostPublisher:
    """FastAPI dependency wiring the publisher to the local disk and this site's renderer."""

    return create_publisher(settings, site_metadata)


def get_request_context(
    request: Request,
    site_metadata: SiteMetadata = Depends(get_site_metadata),
) -> RequestContext:
    """Describe how the renderer can be reached from the inbound request."""

    base_url = site_metadata.base_url or str(request.base_url)
    return RequestContext(base_url=base_url.rstrip("/"))


def available_themes() -> list[str]:
    """Return the names of the themes that ship a post template."""

    if not THEME_DIR.is_dir():
        return []
    return sorted(path.parent.name for path in THEME_DIR.glob("*/post.html"))


def _render_post(
    request: Request,
    form: PostForm,
    *,
    theme: str,
    site_metadata: SiteMetadata,
    preview: bool,
) -> HTMLResponse:
    if not _THEME_NAME_RE.match(theme) or theme not in available_themes():
        raise HTTPException(status_code=404, detail=f"Theme '{theme}' not found")

    return templates.TemplateResponse(
        request,
        f"themes/{theme}/post.html",
        {
            "post": form,
            "body_html": markdown_service.parse(form.body),
            "site": site_metadata,
            "theme": theme,
            "preview": preview,
        },
    )


@app.get("/healthz")
def healthz():
    return {"ok": True}


@app.post("/admin/post/preview", response_class=HTMLResponse)
async def preview_post(
    request: Request,
    payload: PostFormRequest,
    site_metadata: SiteMetadata = Depends(get_site_metadata),
) -> HTMLResponse:
    """Render an unpublished post with the active theme."""

    return _render_post(request, payload.to_form(), theme=site_metadata.theme, site_metadata=site_metadata, preview=True)


@app.post("/admin/post/publish/html/{theme}", response_class=HTMLResponse)
async def render_post_html(
    request: Request,
    theme: str,
    payload: PostFormRequest,
    site_metadata: SiteMetadata = Depends(get_site_metadata),
) -> HTMLResponse:
    """Render the complete HTML page for a post using ``theme``."""

    mode = (request.headers.get(PUBLISH_MODE_HEADER) or PublishMode.PUBLISH.value).lower()
    logger.info(
        "Render request received",
        extra={"event": "render.request", "theme": theme, "mode": mode, "slug": payload.slug},
    )
    return _render_post(
        request,
        payload.to_form(),
        theme=theme,
        site_metadata=site_metadata,
        preview=mode == PublishMode.PREVIEW.value,
    )


@app.post("/admin/post/publish", response_model=PublishedPostResponse)
async def publish_post_endpoint(
    payload: PostFormRequest,
    context: RequestContext = Depends(get_request_context),
    publisher: PostPublisher = Depends(get_publisher),
) -> PublishedPostResponse:
    """Publish a post as Markdown and rendered HTML, returning both archive paths."""

    form = payload.to_form()
    logger.info("Publish request received", extra={"event": "publish.request", "slug": form.slug})

    try:
        published = await publisher.publish_post(form, context)
    except InvalidArgument as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except PublishFailed as exc:
        logger.exception("Writing post artifact failed", extra={"event": "publish.error", "reason": "write"})
        raise HTTPException(
            status_code=500,
            detail={
                "message": f"Could not write the {exc.kind.name.lower()} artifact",
                "debug": _build_debug_detail(exc),
            },
        ) from exc
    except RenderTransportError as exc:
        logger.exception("Rendering endpoint unavailable", extra={"event": "publish.error", "reason": "render"})
        raise HTTPException(
            status_code=502,
            detail={
                "message": "Rendering endpoint unavailable",
                "debug": _build_debug_detail(exc),
            },
        ) from exc

    return PublishedPostResponse.from_published_path(published)
