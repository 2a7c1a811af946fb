"""Runtime configuration for the publish pipeline and the site it serves.

Settings are read from ``INKWELL_*`` environment variables. Site metadata
(title, author, active theme) lives in an optional YAML file referenced by
``INKWELL_SITE_CONFIG``; ``INKWELL_THEME`` overrides the theme from that file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import json
import logging
import os
from pathlib import Path
from typing import Any, Final, Mapping, Protocol

import yaml


LOGGER = logging.getLogger(__name__)

DEFAULT_MARKDOWN_ROOT: Final[str] = "posts/markdown"
DEFAULT_HTML_ROOT: Final[str] = "posts/html"
DEFAULT_RENDER_TIMEOUT: Final[float] = 10.0
DEFAULT_THEME: Final[str] = "default"
DEFAULT_SITE_TITLE: Final[str] = "Inkwell"

_MARKDOWN_ROOT_ENV = "INKWELL_MARKDOWN_ROOT"
_HTML_ROOT_ENV = "INKWELL_HTML_ROOT"
_CONTENT_DIR_ENV = "INKWELL_CONTENT_DIR"
_RENDER_TIMEOUT_ENV = "INKWELL_RENDER_TIMEOUT"
_RENDER_HEADERS_ENV = "INKWELL_RENDER_HEADERS"
_SITE_CONFIG_ENV = "INKWELL_SITE_CONFIG"
_THEME_ENV = "INKWELL_THEME"


class SupportsSiteMetadata(Protocol):
    """Read-only view of the site settings consulted while rendering."""

    @property
    def theme(self) -> str:
        """Return the name of the active rendering theme."""


@dataclass(slots=True)
class PublishSettings:
    """Locations and limits used when publishing posts."""

    markdown_root: str = DEFAULT_MARKDOWN_ROOT
    html_root: str = DEFAULT_HTML_ROOT
    content_dir: Path = field(default_factory=Path.cwd)
    render_timeout: float = DEFAULT_RENDER_TIMEOUT
    render_headers: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "PublishSettings":
        env = os.environ if environ is None else environ
        content_dir = (env.get(_CONTENT_DIR_ENV) or "").strip()
        return cls(
            markdown_root=(env.get(_MARKDOWN_ROOT_ENV) or "").strip() or DEFAULT_MARKDOWN_ROOT,
            html_root=(env.get(_HTML_ROOT_ENV) or "").strip() or DEFAULT_HTML_ROOT,
            content_dir=Path(content_dir).expanduser() if content_dir else Path.cwd(),
            render_timeout=_load_timeout(env.get(_RENDER_TIMEOUT_ENV), DEFAULT_RENDER_TIMEOUT),
            render_headers=_load_headers(env.get(_RENDER_HEADERS_ENV)),
        )


@dataclass(slots=True)
class SiteMetadata:
    """Site-wide metadata, including the theme used to render posts."""

    title: str = DEFAULT_SITE_TITLE
    theme: str = DEFAULT_THEME
    author: str | None = None
    base_url: str | None = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "SiteMetadata":
        title = str(data.get("title") or "").strip() or DEFAULT_SITE_TITLE
        theme = str(data.get("theme") or "").strip() or DEFAULT_THEME
        author = str(data.get("author") or "").strip() or None
        base_url = str(data.get("base_url") or "").strip() or None
        return cls(title=title, theme=theme, author=author, base_url=base_url)

    @classmethod
    def from_file(cls, path: Path) -> "SiteMetadata":
        """Load site metadata from a YAML document."""

        with path.open(encoding="utf-8") as handle:
            payload = yaml.safe_load(handle) or {}
        if not isinstance(payload, dict):
            raise ValueError(f"Site configuration '{path}' must contain a mapping")
        site = payload.get("site", payload)
        if not isinstance(site, dict):
            raise ValueError(f"Site configuration '{path}' has an invalid 'site' section")
        return cls.from_mapping(site)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SiteMetadata":
        env = os.environ if environ is None else environ
        raw_path = (env.get(_SITE_CONFIG_ENV) or "").strip()

        metadata = cls()
        if raw_path:
            path = Path(raw_path).expanduser()
            if path.exists():
                metadata = cls.from_file(path)
            else:
                LOGGER.warning("Site configuration %s not found; using defaults", path)

        theme_override = (env.get(_THEME_ENV) or "").strip()
        if theme_override:
            metadata.theme = theme_override
        return metadata


def _load_timeout(raw_value: str | None, default: float) -> float:
    """Return the configured timeout, falling back to ``default`` on invalid input."""

    if not raw_value:
        return default

    try:
        timeout = float(raw_value)
    except ValueError:
        LOGGER.warning("Ignoring invalid timeout value in %s", _RENDER_TIMEOUT_ENV)
        return default

    if timeout <= 0:
        LOGGER.warning("Ignoring non-positive timeout value in %s", _RENDER_TIMEOUT_ENV)
        return default

    return timeout


def _load_headers(raw_value: str | None) -> dict[str, str]:
    """Parse extra renderer headers from a JSON object."""

    if not raw_value:
        return {}

    try:
        parsed = json.loads(raw_value)
    except json.JSONDecodeError:
        LOGGER.warning("Ignoring invalid JSON in %s", _RENDER_HEADERS_ENV)
        return {}

    if not isinstance(parsed, dict):
        LOGGER.warning("Ignoring non-object value in %s", _RENDER_HEADERS_ENV)
        return {}

    return {str(key): str(value) for key, value in parsed.items() if value is not None}


__all__ = [
    "DEFAULT_HTML_ROOT",
    "DEFAULT_MARKDOWN_ROOT",
    "DEFAULT_RENDER_TIMEOUT",
    "DEFAULT_THEME",
    "PublishSettings",
    "SiteMetadata",
    "SupportsSiteMetadata",
]
