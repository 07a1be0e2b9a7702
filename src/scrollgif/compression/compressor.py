"""
Post Compressor
===============

Derives re-encoded artifacts from a finished GIF.

Design Rules:
    - The source artifact is never mutated; backends receive a copy
    - An empty result is a failure, not a valid degenerate output
    - Failures are retried with exponential backoff (1s, 2s, 4s, ...)
    - Exhausted retries raise CompressionError; there is no silent
      fallback to the uncompressed artifact
"""

import asyncio
import logging
from typing import Awaitable, Callable

from scrollgif.compression.backends import CompressionBackend, CompressionBackendError
from scrollgif.compression.retry import RetryExhausted, retry_with_backoff
from scrollgif.errors import CompressionError
from scrollgif.models.profile import CompressionProfile


logger = logging.getLogger(__name__)


class PostCompressor:
    """
    Re-encodes artifacts under a CompressionProfile with bounded retry.

    Attributes:
        backend: Transcoder (GifsicleBackend in production)
        max_attempts: Attempts per compress call
        backoff_base: First retry delay in seconds

    Example:
        compressor = PostCompressor(GifsicleBackend())
        lossy_gif = await compressor.compress(gif_bytes, LOSSY)
    """

    def __init__(
        self,
        backend: CompressionBackend,
        max_attempts: int = 3,
        backoff_base: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        self.backend = backend
        self.max_attempts = max_attempts
        self.backoff_base = backoff_base
        self.sleep = sleep

    async def compress(self, artifact: bytes, profile: CompressionProfile) -> bytes:
        """
        Return `artifact` re-encoded under `profile`.

        Raises:
            CompressionError: When every attempt failed or came back empty
        """
        source = bytes(artifact)

        async def attempt() -> bytes:
            result = await self.backend.transcode(bytes(source), profile)
            if not result:
                raise CompressionBackendError(f"{profile.name} compression produced no data")
            return bytes(result)

        logger.info(f"Compressing gif ({profile.name}, {len(source)} bytes)")
        try:
            compressed = await retry_with_backoff(
                attempt,
                attempts=self.max_attempts,
                base_delay=self.backoff_base,
                sleep=self.sleep,
                description=f"{profile.name} compression",
            )
        except RetryExhausted as e:
            raise CompressionError(
                f"{profile.name} compression failed after {e.attempts} attempts: {e.last_error}",
                profile=profile.name,
            ) from e.last_error

        ratio = len(compressed) / len(source) if source else 0.0
        logger.info(
            f"{profile.name} compression finished: {len(source)} -> {len(compressed)} bytes "
            f"({ratio:.0%})"
        )
        return compressed
