"""
Buffer Assembler
================

Ordered accumulator for the chunks emitted by an encoder session.

This module provides the BufferAssembler class, which sits between the
GIF stream encoder and whoever needs the finished artifact.

Design Rules:
    - Chunks are kept in strict emission order (no reordering, no drops)
    - Completion is signalled exactly once via an explicit flag
    - No chunk may be pushed after completion
    - The artifact is only readable after completion
"""

import asyncio
import logging
from typing import List, Optional

from scrollgif.errors import EncoderStateError


logger = logging.getLogger(__name__)


class BufferAssembler:
    """
    Append-only chunk accumulator with a completion signal.

    Attributes:
        chunk_count: Number of chunks pushed so far
        byte_count: Total bytes pushed so far
        completed: Whether finish() has been called

    Example:
        assembler = BufferAssembler()

        # Producer (encoder)
        assembler.push(b"GIF89a...")
        assembler.finish()

        # Consumer
        artifact = await assembler.assemble()
    """

    def __init__(self) -> None:
        self._chunks: List[bytes] = []
        self._byte_count: int = 0
        self._done = asyncio.Event()

    @property
    def chunk_count(self) -> int:
        """Number of chunks pushed."""
        return len(self._chunks)

    @property
    def byte_count(self) -> int:
        """Total number of bytes pushed."""
        return self._byte_count

    @property
    def completed(self) -> bool:
        """Whether the producer has signalled completion."""
        return self._done.is_set()

    def push(self, chunk: bytes) -> None:
        """
        Append one emitted chunk.

        Raises:
            EncoderStateError: If completion was already signalled
        """
        if self._done.is_set():
            raise EncoderStateError("Cannot push chunk after the session completed")
        if not chunk:
            return
        self._chunks.append(bytes(chunk))
        self._byte_count += len(chunk)

    def finish(self) -> None:
        """
        Signal that no more chunks will arrive.

        Raises:
            EncoderStateError: If called more than once
        """
        if self._done.is_set():
            raise EncoderStateError("Session completion already signalled")
        self._done.set()
        logger.debug(
            f"Assembler completed: {len(self._chunks)} chunks, {self._byte_count} bytes"
        )

    async def assemble(self, timeout: Optional[float] = None) -> bytes:
        """
        Wait for completion, then return all chunks concatenated in order.

        Args:
            timeout: Maximum seconds to wait. None = wait forever.

        Raises:
            asyncio.TimeoutError: If completion is not signalled in time
        """
        if timeout is not None:
            await asyncio.wait_for(self._done.wait(), timeout=timeout)
        else:
            await self._done.wait()
        return b"".join(self._chunks)

    def metrics(self) -> dict:
        """
        Get assembler metrics for observability.

        Returns:
            Dict with chunk_count, byte_count, completed
        """
        return {
            "chunk_count": self.chunk_count,
            "byte_count": self._byte_count,
            "completed": self.completed,
        }
