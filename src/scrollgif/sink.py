"""
Artifact Sink
=============

Destination for finished artifacts.

The pipeline hands each artifact to an ArtifactSink together with a
content-type tag and keeps whatever locator the sink returns. It never
interprets the locator.

Sinks:
    - ArtifactSink: Protocol
    - DirectorySink: Writes files into a local directory
"""

import asyncio
import logging
from pathlib import Path
from typing import Protocol, Union

from scrollgif.errors import SaveError


logger = logging.getLogger(__name__)


GIF_CONTENT_TYPE = "image/gif"


class ArtifactSink(Protocol):
    """Protocol for artifact storage."""

    async def save(self, name: str, data: bytes, content_type: str = GIF_CONTENT_TYPE) -> str:
        """Store `data` under `name` and return a retrievable locator."""
        ...


class DirectorySink:
    """
    Stores artifacts as files in a local directory.

    Attributes:
        root: Directory the files are written to (created on demand)
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    async def save(self, name: str, data: bytes, content_type: str = GIF_CONTENT_TYPE) -> str:
        if not name or Path(name).name != name:
            raise SaveError(f"Invalid artifact name: {name!r}")

        path = self.root / name
        logger.info(f"Saving {name} ({content_type}, {len(data)} bytes) to {self.root}")
        try:
            await asyncio.to_thread(self._write, path, data)
        except OSError as e:
            raise SaveError(f"Failed to save {name}: {e}") from e
        return path.resolve().as_uri()

    def _write(self, path: Path, data: bytes) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)
