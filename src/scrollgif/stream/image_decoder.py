"""
Image Decoder
=============

Dedicated module for decoding screenshot bytes into raw RGBA frames.

Design Rules:
    - This is the ONLY place in the codebase that decodes screenshots
    - Accepts any format OpenCV can read (PNG from the view in practice)
    - Normalises grayscale, BGR and BGRA input to RGBA
    - Fails fast on corrupt data; a failed decode is never skipped
    - Decoding is bounded by a time budget (30s by default)
"""

import asyncio
import logging

import cv2
import numpy as np

from scrollgif.errors import DecodeError
from scrollgif.stream.frame import BYTES_PER_PIXEL, Frame


logger = logging.getLogger(__name__)


DEFAULT_DECODE_TIMEOUT_SECONDS = 30.0


def _to_rgba(image: np.ndarray, index: int) -> np.ndarray:
    if image.ndim == 2:
        return cv2.cvtColor(image, cv2.COLOR_GRAY2RGBA)
    if image.ndim == 3 and image.shape[2] == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGBA)
    if image.ndim == 3 and image.shape[2] == 4:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    raise DecodeError(f"Invalid image shape for frame {index}: {image.shape}")


def decode_frame(data: bytes, index: int = 0) -> Frame:
    """
    Decode compressed screenshot bytes to an RGBA Frame.

    Args:
        data: Encoded raster image (PNG, JPEG, ...)
        index: Ordinal of the frame in the recording

    Returns:
        Frame whose pixel buffer is exactly width * height * 4 bytes

    Raises:
        DecodeError: If the buffer is empty, malformed or not 8-bit
    """
    if not data:
        raise DecodeError(f"Empty screenshot buffer for frame {index}")

    try:
        nparr = np.frombuffer(data, np.uint8)
        image = cv2.imdecode(nparr, cv2.IMREAD_UNCHANGED)
    except cv2.error as e:
        raise DecodeError(f"OpenCV failed to decode frame {index}: {e}") from e

    if image is None:
        raise DecodeError(
            f"Failed to decode frame {index}: cv2.imdecode returned None"
        )

    if image.dtype != np.uint8:
        raise DecodeError(f"Invalid dtype for frame {index}: {image.dtype}")

    rgba = _to_rgba(image, index)
    height, width = rgba.shape[:2]
    pixels = np.ascontiguousarray(rgba).tobytes()

    if len(pixels) != width * height * BYTES_PER_PIXEL:
        raise DecodeError(
            f"Decoded buffer for frame {index} has {len(pixels)} bytes, "
            f"expected {width * height * BYTES_PER_PIXEL}"
        )

    return Frame(index=index, width=width, height=height, pixels=pixels)


async def decode_frame_async(
    data: bytes,
    index: int = 0,
    timeout: float = DEFAULT_DECODE_TIMEOUT_SECONDS,
) -> Frame:
    """
    Decode a screenshot in a worker thread, bounded by `timeout` seconds.

    Raises:
        DecodeError: On malformed data or when the time budget is exceeded
    """
    try:
        return await asyncio.wait_for(
            asyncio.to_thread(decode_frame, data, index),
            timeout=timeout,
        )
    except asyncio.TimeoutError as e:
        raise DecodeError(
            f"Decoding frame {index} exceeded {timeout:.1f}s budget"
        ) from e
