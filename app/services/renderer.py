"""Client for the themed rendering endpoint that turns posts into HTML."""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
import logging
from typing import Any, Protocol

import httpx

from app.models.post import PostForm, PublishMode, RequestContext
from app.services.exceptions import InvalidArgument, RenderTransportError
from app.settings import DEFAULT_RENDER_TIMEOUT, SupportsSiteMetadata


LOGGER = logging.getLogger(__name__)

RENDER_PATH_TEMPLATE = "/admin/post/publish/html/{theme}"
PUBLISH_MODE_HEADER = "X-Publish-Mode"

RenderFunction = Callable[[PostForm], Awaitable[str]]


class RenderEndpointResolver(Protocol):
    """Resolve a render function bound to a theme and the caller's request context."""

    def resolve(self, theme: str, context: RequestContext) -> RenderFunction:
        """Return a coroutine function that renders a post into HTML."""


def create_content_payload(form: PostForm) -> dict[str, Any]:
    """Serialise a post form into the JSON body sent to the renderer."""

    return form.to_payload()


@dataclass(slots=True)
class HttpRenderEndpointResolver:
    """Render posts by POSTing them to the site's themed HTML endpoint."""

    timeout: float = DEFAULT_RENDER_TIMEOUT
    mode: PublishMode = PublishMode.PARSE
    path_template: str = RENDER_PATH_TEMPLATE
    headers: Mapping[str, str] = field(default_factory=dict)
    transport: httpx.AsyncBaseTransport | None = None

    def resolve(self, theme: str, context: RequestContext) -> RenderFunction:
        path = self.path_template.format(theme=theme)

        async def render(form: PostForm) -> str:
            async with self.create_client(context) as client:
                try:
                    response = await client.post(path, json=create_content_payload(form))
                    response.raise_for_status()
                except httpx.HTTPStatusError as exc:
                    raise RenderTransportError(
                        f"Renderer responded with HTTP {exc.response.status_code}",
                        url=str(exc.request.url),
                        status_code=exc.response.status_code,
                    ) from exc
                except httpx.HTTPError as exc:
                    raise RenderTransportError(
                        f"Renderer request failed: {exc}",
                        url=f"{context.base_url.rstrip('/')}{path}",
                    ) from exc
                return response.text

        return render

    def create_client(self, context: RequestContext) -> httpx.AsyncClient:
        """Return an HTTP client scoped to the request context and publish mode."""

        headers: dict[str, str] = dict(context.headers)
        headers.update(self.headers)
        headers[PUBLISH_MODE_HEADER] = self.mode.value
        return httpx.AsyncClient(
            base_url=context.base_url,
            headers=headers,
            timeout=self.timeout,
            transport=self.transport,
        )


@dataclass(slots=True)
class RenderClient:
    """Render a post to HTML through the endpoint configured for the active theme."""

    site_metadata: SupportsSiteMetadata
    resolver: RenderEndpointResolver

    async def render_to_html(self, form: PostForm | None, context: RequestContext | None) -> str:
        if form is None:
            raise InvalidArgument("form")
        if context is None:
            raise InvalidArgument("context")

        theme = self.site_metadata.theme
        render = self.resolver.resolve(theme, context)
        LOGGER.debug("Rendering post '%s' with theme '%s'", form.slug, theme)
        return await render(form)


__all__ = [
    "HttpRenderEndpointResolver",
    "PUBLISH_MODE_HEADER",
    "RENDER_PATH_TEMPLATE",
    "RenderClient",
    "RenderEndpointResolver",
    "RenderFunction",
    "create_content_payload",
]
