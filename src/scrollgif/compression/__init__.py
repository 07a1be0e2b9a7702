"""
Compression Module
==================

Post-compression of finished GIF artifacts.

Components:
    - PostCompressor: Profile-driven re-encoding with retry/backoff
    - GifsicleBackend: gifsicle transcoder (lossless and lossy)
    - retry_with_backoff: Generic retry combinator
"""

from scrollgif.compression.backends import (
    CompressionBackend,
    CompressionBackendError,
    GifsicleBackend,
)
from scrollgif.compression.compressor import PostCompressor
from scrollgif.compression.retry import RetryExhausted, backoff_schedule, retry_with_backoff

__all__ = [
    "CompressionBackend",
    "CompressionBackendError",
    "GifsicleBackend",
    "PostCompressor",
    "RetryExhausted",
    "backoff_schedule",
    "retry_with_backoff",
]
