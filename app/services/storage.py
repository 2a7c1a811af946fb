"""File-system capability used by the artifact writer."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path
from typing import Protocol


logger = logging.getLogger(__name__)


class FileSystem(Protocol):
    """Directory resolution and text writes relied upon by :class:`ArtifactWriter`."""

    async def ensure_directory(self, path: str) -> str:
        """Return the physical location of ``path``, creating it when absent."""

    async def write(self, path: str, text: str) -> bool:
        """Persist ``text`` at ``path`` and report whether the write succeeded."""


@dataclass(slots=True)
class LocalFileSystem:
    """Write artifacts to the local disk, resolving relative roots against ``base_dir``."""

    base_dir: Path = field(default_factory=Path.cwd)
    encoding: str = "utf-8"

    def resolve(self, path: str) -> Path:
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self.base_dir / candidate

    async def ensure_directory(self, path: str) -> str:
        directory = self.resolve(path)
        await asyncio.to_thread(directory.mkdir, parents=True, exist_ok=True)
        return str(directory)

    async def write(self, path: str, text: str) -> bool:
        target = self.resolve(path)
        try:
            await asyncio.to_thread(self._write_sync, target, text)
        except OSError:
            logger.exception("Writing artifact failed", extra={"event": "storage.write", "path": str(target)})
            return False
        return True

    def _write_sync(self, target: Path, text: str) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)
        # newline="" keeps the composed line endings untouched on every platform.
        with target.open("w", encoding=self.encoding, newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())


__all__ = ["FileSystem", "LocalFileSystem"]
