"""Shared fixtures and helpers for the test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.models.post import PostForm, PublishedMetadata, RequestContext
from app.tests.stubs import DEFAULT_THEME, RecordingFileSystem, StubResolver, StubSiteMetadata


@pytest.fixture()
def publish_date() -> datetime:
    return datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)


@pytest.fixture()
def published_metadata(publish_date: datetime) -> PublishedMetadata:
    """Return metadata for the canonical ``hello-world`` post."""

    return PublishedMetadata(date_published=publish_date, slug="hello-world", theme=DEFAULT_THEME)


@pytest.fixture()
def hello_world_form(publish_date: datetime) -> PostForm:
    return PostForm(
        title="Hello World",
        slug="hello-world",
        author="Joe Bloggs",
        tags="hello,world",
        body="**Hello World**",
        date_published=publish_date,
    )


@pytest.fixture()
def request_context() -> RequestContext:
    return RequestContext(base_url="http://localhost:5080")


@pytest.fixture()
def file_system() -> RecordingFileSystem:
    return RecordingFileSystem()


@pytest.fixture()
def failing_file_system() -> RecordingFileSystem:
    return RecordingFileSystem(succeed=False)


@pytest.fixture()
def site_metadata() -> StubSiteMetadata:
    return StubSiteMetadata()


@pytest.fixture()
def resolver() -> StubResolver:
    return StubResolver()
