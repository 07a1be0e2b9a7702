"""
Frame Data Model
=================

Internal frame representation for the recording pipeline.

This module defines the typed Frame class that is passed from the pixel
decoder into the encoder session.

Design Rules:
    - This is the ONLY frame format accepted by the encoder
    - Pixels are raw RGBA, row-major, width * height * 4 bytes
    - Frames are immutable and consumed exactly once by the encoder
"""

from dataclasses import dataclass


BYTES_PER_PIXEL = 4


@dataclass(frozen=True, slots=True)
class Frame:
    """
    Decoded screenshot ready for encoding.

    Attributes:
        index: Ordinal position of the frame in the recording
        width: Width in pixels
        height: Height in pixels
        pixels: Raw RGBA bytes, row-major
    """

    index: int
    width: int
    height: int
    pixels: bytes

    def __post_init__(self) -> None:
        """Validate invariants."""
        if self.width <= 0 or self.height <= 0:
            raise ValueError("frame dimensions must be positive")
        expected = self.width * self.height * BYTES_PER_PIXEL
        if len(self.pixels) != expected:
            raise ValueError(
                f"frame {self.index} has {len(self.pixels)} bytes, expected {expected}"
            )

    def __repr__(self) -> str:
        """Compact repr that doesn't dump the pixels."""
        return f"Frame(index={self.index}, size={self.width}x{self.height})"
