"""Exceptions raised by the publish pipeline."""

from __future__ import annotations

from app.models.post import ArtifactKind


class InvalidArgument(ValueError):
    """Raised when a required input is missing, before any I/O takes place."""

    def __init__(self, name: str, message: str | None = None) -> None:
        self.name = name
        super().__init__(message or f"'{name}' must be provided")


class PublishFailed(RuntimeError):
    """Raised when an artifact could not be written to its target path."""

    def __init__(self, path: str, kind: ArtifactKind) -> None:
        self.path = path
        self.kind = kind
        super().__init__(f"Failed to publish {kind.name.lower()} artifact to '{path}'")


class RenderTransportError(RuntimeError):
    """Raised when the round trip to the rendering endpoint fails."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None) -> None:
        self.url = url
        self.status_code = status_code
        super().__init__(message)


__all__ = ["InvalidArgument", "PublishFailed", "RenderTransportError"]
