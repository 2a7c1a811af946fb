"""Persist text artifacts into the dated publish archive."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import logging

from app.models.post import ArtifactKind
from app.services.exceptions import InvalidArgument, PublishFailed
from app.services.paths import derive_path
from app.services.storage import FileSystem


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class ArtifactWriter:
    """Write Markdown or HTML artifacts through the injected file system."""

    file_system: FileSystem

    def __post_init__(self) -> None:
        if self.file_system is None:
            raise InvalidArgument("file_system")

    async def publish_text(
        self,
        root_dir: str,
        date: datetime,
        slug: str,
        extension: str,
        text: str | None,
    ) -> str:
        """Write ``text`` below ``root_dir`` and return its archive path.

        The returned path is expressed against the configured ``root_dir``; the
        physical location comes from the file system's directory resolution.
        A single write is attempted; a failed write raises :class:`PublishFailed`.
        """

        if text is None:
            raise InvalidArgument("text")

        try:
            kind = ArtifactKind.from_extension(extension)
        except ValueError as exc:
            raise InvalidArgument("extension", str(exc)) from exc
        published_path = derive_path(root_dir, date, slug, kind.extension)

        directory = await self.file_system.ensure_directory(root_dir)
        physical_path = derive_path(directory, date, slug, kind.extension)

        written = await self.file_system.write(physical_path, text)
        if not written:
            logger.error(
                "Artifact write reported failure",
                extra={"event": "publish.write_failed", "path": published_path, "kind": kind.name},
            )
            raise PublishFailed(published_path, kind)

        logger.debug("Artifact written to %s", physical_path)
        return published_path


__all__ = ["ArtifactWriter"]
