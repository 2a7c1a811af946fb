"""Derive archive paths for published artifacts."""

from __future__ import annotations

from datetime import datetime

from app.services.exceptions import InvalidArgument


def derive_path(root_dir: str, date: datetime, slug: str, extension: str) -> str:
    """Return ``root_dir/yyyy/MM/dd/slug.extension`` for the publication date."""

    if not slug:
        raise InvalidArgument("slug")
    suffix = (extension or "").lstrip(".")
    if not suffix:
        raise InvalidArgument("extension")

    raw_root = str(root_dir or "")
    root = raw_root.rstrip("/\\")
    dated = f"{date.year:04d}/{date.month:02d}/{date.day:02d}/{slug}.{suffix}"
    if root:
        return f"{root}/{dated}"
    # Filesystem root such as "/" collapses to an empty string once stripped.
    return f"/{dated}" if raw_root else dated


__all__ = ["derive_path"]
