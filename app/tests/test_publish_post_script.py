from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
import logging
from pathlib import Path
from typing import Iterator

import pytest

from app.models.post import ArtifactKind, PostForm, PublishedPostPath, RequestContext
from app.scripts import publish_post
from app.services.exceptions import PublishFailed, RenderTransportError


class _StubPublisher:
    def __init__(self, error: Exception | None = None) -> None:
        self.error = error
        self.calls: list[tuple[PostForm, RequestContext]] = []

    async def publish_post(self, form: PostForm, context: RequestContext) -> PublishedPostPath:
        self.calls.append((form, context))
        if self.error is not None:
            raise self.error
        return PublishedPostPath(
            markdown=f"posts/markdown/2024/01/02/{form.slug}.md",
            html=f"posts/html/2024/01/02/{form.slug}.html",
        )


class _ListHandler(logging.Handler):
    def __init__(self) -> None:
        super().__init__(level=logging.NOTSET)
        self.messages: list[str] = []

    def emit(self, record: logging.LogRecord) -> None:
        self.messages.append(record.getMessage())


@contextmanager
def _capture_publish_logs() -> Iterator[list[str]]:
    logger = logging.getLogger("inkwell.publish")
    handler = _ListHandler()
    previous_level = logger.level
    logger.addHandler(handler)
    logger.setLevel(logging.INFO)
    try:
        yield handler.messages
    finally:
        logger.removeHandler(handler)
        logger.setLevel(previous_level)


@pytest.fixture()
def body_file(tmp_path: Path) -> Path:
    path = tmp_path / "hello-world.md"
    path.write_text("**Hello World**", encoding="utf-8")
    return path


def _patch_publisher(monkeypatch: pytest.MonkeyPatch, publisher: _StubPublisher) -> None:
    monkeypatch.setattr(publish_post, "_configure_logging", lambda: None)
    monkeypatch.setattr(publish_post, "_build_publisher", lambda settings, site_metadata: publisher)
    monkeypatch.delenv("INKWELL_SITE_CONFIG", raising=False)
    monkeypatch.delenv("INKWELL_THEME", raising=False)


def test_publish_post_cli_success(monkeypatch: pytest.MonkeyPatch, body_file: Path) -> None:
    publisher = _StubPublisher()
    _patch_publisher(monkeypatch, publisher)

    with _capture_publish_logs() as log_messages:
        exit_code = publish_post.run(
            [
                str(body_file),
                "--title",
                "Hello World",
                "--slug",
                "hello-world",
                "--author",
                "Joe Bloggs",
                "--tags",
                "hello,world",
                "--date",
                "2024-01-02T09:30:00Z",
                "--base-url",
                "http://localhost:5080/",
            ]
        )

    assert exit_code == 0
    form, context = publisher.calls[0]
    assert form.body == "**Hello World**"
    assert form.tag_list == ["hello", "world"]
    assert form.date_published == datetime(2024, 1, 2, 9, 30, tzinfo=timezone.utc)
    assert context.base_url == "http://localhost:5080"
    assert "Markdown path: posts/markdown/2024/01/02/hello-world.md" in log_messages
    assert "HTML path: posts/html/2024/01/02/hello-world.html" in log_messages


def test_publish_post_cli_defaults_base_url(monkeypatch: pytest.MonkeyPatch, body_file: Path) -> None:
    publisher = _StubPublisher()
    _patch_publisher(monkeypatch, publisher)

    exit_code = publish_post.run([str(body_file), "--title", "Hello", "--slug", "hello"])

    assert exit_code == 0
    assert publisher.calls[0][1].base_url == publish_post.DEFAULT_BASE_URL


@pytest.mark.parametrize(
    "error, expected",
    [
        (
            PublishFailed("posts/markdown/2024/01/02/hello-world.md", ArtifactKind.MARKDOWN),
            "Publishing failed for markdown artifact at posts/markdown/2024/01/02/hello-world.md",
        ),
        (RenderTransportError("Renderer responded with HTTP 503"), "Rendering failed: Renderer responded with HTTP 503"),
    ],
)
def test_publish_post_cli_failure(
    monkeypatch: pytest.MonkeyPatch, body_file: Path, error: Exception, expected: str
) -> None:
    _patch_publisher(monkeypatch, _StubPublisher(error=error))

    with _capture_publish_logs() as log_messages:
        exit_code = publish_post.run([str(body_file), "--title", "Hello World", "--slug", "hello-world"])

    assert exit_code == 1
    assert expected in log_messages


def test_publish_post_cli_missing_body(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    publisher = _StubPublisher()
    _patch_publisher(monkeypatch, publisher)

    exit_code = publish_post.run([str(tmp_path / "missing.md"), "--title", "Hello", "--slug", "hello"])

    assert exit_code == 1
    assert publisher.calls == []


def test_publish_post_cli_rejects_bad_date(monkeypatch: pytest.MonkeyPatch, body_file: Path) -> None:
    _patch_publisher(monkeypatch, _StubPublisher())

    with pytest.raises(SystemExit):
        publish_post.run([str(body_file), "--title", "Hello", "--slug", "hello", "--date", "yesterday"])


def test_publish_post_cli_keeps_date_offset(monkeypatch: pytest.MonkeyPatch, body_file: Path) -> None:
    publisher = _StubPublisher()
    _patch_publisher(monkeypatch, publisher)

    exit_code = publish_post.run(
        [str(body_file), "--title", "Hello", "--slug", "hello", "--date", "2024-01-02T08:00:00+09:00"]
    )

    assert exit_code == 0
    published = publisher.calls[0][0].date_published
    assert published.date().isoformat() == "2024-01-02"
    assert published.utcoffset() == timedelta(hours=9)
