"""
Compression Backends
====================

Transcoders used by the PostCompressor.

Backends:
    - CompressionBackend: Protocol (bytes + profile -> bytes)
    - GifsicleBackend: Runs the gifsicle binary over stdin/stdout

gifsicle options applied:
    * ``-O<level>``     -- cross-frame optimisation (all profiles)
    * ``--lossy=<N>``   -- lossy LZW quantisation (lossy profiles only)
"""

import asyncio
import logging
import shutil
from typing import List, Protocol

from scrollgif.models.profile import CompressionProfile


logger = logging.getLogger(__name__)


class CompressionBackendError(Exception):
    """Raised when a backend fails to transcode an artifact."""
    pass


class CompressionBackend(Protocol):
    """Protocol for artifact transcoders."""

    async def transcode(self, artifact: bytes, profile: CompressionProfile) -> bytes:
        """Return `artifact` re-encoded under `profile`."""
        ...


class GifsicleBackend:
    """
    gifsicle-based transcoder.

    Attributes:
        binary: gifsicle executable name or path
        timeout: Seconds allowed per invocation
    """

    def __init__(self, binary: str = "gifsicle", timeout: float = 120.0) -> None:
        self.binary = binary
        self.timeout = timeout

    def build_command(self, profile: CompressionProfile) -> List[str]:
        cmd = [
            self.binary,
            f"-O{profile.optimization_level}",
            "--no-warnings",
        ]
        if profile.is_lossy:
            cmd.append(f"--lossy={profile.loss_level}")
        return cmd

    async def transcode(self, artifact: bytes, profile: CompressionProfile) -> bytes:
        if shutil.which(self.binary) is None:
            raise CompressionBackendError(f"{self.binary} is not installed or not on PATH")

        cmd = self.build_command(profile)
        logger.debug(f"Running {' '.join(cmd)} on {len(artifact)} bytes")

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.PIPE,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                proc.communicate(input=artifact),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            proc.kill()
            await proc.wait()
            raise CompressionBackendError(
                f"{self.binary} timed out after {self.timeout:.0f}s"
            ) from e

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise CompressionBackendError(
                f"{self.binary} exited with {proc.returncode}: {message}"
            )
        return stdout
