from __future__ import annotations

from datetime import datetime, timezone

import pytest

from app.services.exceptions import InvalidArgument
from app.services.paths import derive_path


PUBLISHED = datetime(2024, 1, 2, 23, 59, tzinfo=timezone.utc)


def test_derive_path_uses_dated_layout() -> None:
    assert derive_path("posts/markdown", PUBLISHED, "hello-world", "md") == "posts/markdown/2024/01/02/hello-world.md"


def test_derive_path_accepts_dotted_extension_and_trailing_separator() -> None:
    assert derive_path("/var/www/html/", PUBLISHED, "hello-world", ".html") == "/var/www/html/2024/01/02/hello-world.html"


def test_derive_path_pads_year_month_and_day() -> None:
    early = datetime(987, 3, 4, tzinfo=timezone.utc)

    assert derive_path("root", early, "old", "md") == "root/0987/03/04/old.md"


def test_derive_path_is_deterministic() -> None:
    first = derive_path("root", PUBLISHED, "slug", "md")
    second = derive_path("root", PUBLISHED, "slug", "md")

    assert first == second


@pytest.mark.parametrize(
    "root, date, slug, extension",
    [
        ("other", PUBLISHED, "slug", "md"),
        ("root", datetime(2024, 1, 3, tzinfo=timezone.utc), "slug", "md"),
        ("root", PUBLISHED, "other-slug", "md"),
        ("root", PUBLISHED, "slug", "html"),
    ],
)
def test_derive_path_changes_with_each_input(root: str, date: datetime, slug: str, extension: str) -> None:
    assert derive_path(root, date, slug, extension) != derive_path("root", PUBLISHED, "slug", "md")


def test_derive_path_without_root_is_relative() -> None:
    assert derive_path("", PUBLISHED, "slug", "md") == "2024/01/02/slug.md"


def test_derive_path_rejects_empty_slug_or_extension() -> None:
    with pytest.raises(InvalidArgument):
        derive_path("root", PUBLISHED, "", "md")

    with pytest.raises(InvalidArgument):
        derive_path("root", PUBLISHED, "slug", "")
