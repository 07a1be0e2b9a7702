"""
GIF Stream Encoder
==================

Stateful, incremental GIF89a encoder session.

The session writes the container structure itself (header, logical screen
descriptor, NETSCAPE2.0 loop extension, trailer) and delegates per-frame
palette quantisation and LZW compression to Pillow. Every emitted chunk is
pushed into a BufferAssembler in emission order, so the artifact can be
assembled as soon as the session is closed.

Lifecycle:
    open() -> add_frame() * N -> close() -> assemble()

Design Rules:
    - Exactly one writer; concurrent add_frame calls are rejected
    - Frames are appended in capture order and never after close()
    - Each frame carries its own local colour table (<= 256 colours)
    - close() signals completion exactly once
"""

import asyncio
import logging
import struct
from typing import Optional

from PIL import GifImagePlugin, Image

from scrollgif.errors import EncoderStateError
from scrollgif.stream.assembler import BufferAssembler
from scrollgif.stream.frame import BYTES_PER_PIXEL, Frame


logger = logging.getLogger(__name__)


GIF_SIGNATURE = b"GIF89a"
GIF_TRAILER = b";"

# No global colour table, 8 bits of colour resolution
_SCREEN_FLAGS = 0x70

# Viewers stretch delays below 2 centiseconds to roughly 10
MIN_FRAME_DELAY_CS = 2


def frame_delay_centiseconds(frame_rate: float) -> int:
    """GIF frame delay for `frame_rate`, rounded to whole centiseconds."""
    if frame_rate <= 0:
        raise ValueError("frame_rate must be positive")
    return max(MIN_FRAME_DELAY_CS, round(100 / frame_rate))


def build_header(width: int, height: int, loop_forever: bool = True) -> bytes:
    """
    Build the GIF header, logical screen descriptor and loop extension.

    Args:
        width: Logical screen width
        height: Logical screen height
        loop_forever: Emit NETSCAPE2.0 extension with an infinite loop count
    """
    header = GIF_SIGNATURE + struct.pack("<HHBBB", width, height, _SCREEN_FLAGS, 0, 0)
    if loop_forever:
        header += (
            b"!\xff\x0bNETSCAPE2.0"
            + b"\x03\x01"
            + struct.pack("<H", 0)
            + b"\x00"
        )
    return header


def encode_frame(frame: Frame, delay_ms: int, colors: int = 256) -> bytes:
    """
    Quantise one RGBA frame and encode it as a GIF image block.

    The returned bytes hold the graphic control extension (frame delay),
    the image descriptor with a local colour table, and the LZW data.
    `delay_ms` should be a multiple of 10; GIF stores centiseconds.
    """
    image = Image.frombytes("RGBA", (frame.width, frame.height), frame.pixels)
    paletted = image.convert("RGB").quantize(colors=colors)
    blocks = GifImagePlugin.getdata(
        paletted,
        duration=delay_ms,
        include_color_table=True,
    )
    return b"".join(blocks)


class GifStreamEncoder:
    """
    One open GIF encoding session.

    Attributes:
        width: Frame width accepted by the session
        height: Frame height accepted by the session
        frame_rate: Frames per second (sets the per-frame delay)
        loop_forever: Whether the GIF loops indefinitely
        frame_count: Frames appended so far
        assembler: Accumulator receiving emitted chunks

    Example:
        encoder = GifStreamEncoder(1366, 768, frame_rate=10)
        encoder.open()
        await encoder.add_frame(frame)
        encoder.close()
        gif_bytes = await encoder.assemble()
    """

    def __init__(
        self,
        width: int,
        height: int,
        frame_rate: float,
        loop_forever: bool = True,
        assembler: Optional[BufferAssembler] = None,
    ) -> None:
        if width <= 0 or height <= 0:
            raise ValueError("width and height must be positive")
        if frame_rate <= 0:
            raise ValueError("frame_rate must be positive")

        self.width = width
        self.height = height
        self.frame_rate = frame_rate
        self.loop_forever = loop_forever
        self.assembler = assembler if assembler is not None else BufferAssembler()

        self._opened: bool = False
        self._closed: bool = False
        self._writing: bool = False
        self._frame_count: int = 0
        self._last_index: int = -1

    @property
    def frame_count(self) -> int:
        """Frames appended so far."""
        return self._frame_count

    @property
    def frame_delay_ms(self) -> int:
        """Per-frame delay written to the GIF, a whole number of centiseconds."""
        return frame_delay_centiseconds(self.frame_rate) * 10

    @property
    def is_open(self) -> bool:
        return self._opened and not self._closed

    @property
    def closed(self) -> bool:
        return self._closed

    def open(self) -> None:
        """Begin the session by emitting the GIF header."""
        if self._opened:
            raise EncoderStateError("Encoder session already opened")
        self._opened = True
        self.assembler.push(build_header(self.width, self.height, self.loop_forever))
        logger.info(
            f"Encoder session opened: {self.width}x{self.height} "
            f"@ {self.frame_rate} fps, loop={'forever' if self.loop_forever else 'once'}"
        )

    async def add_frame(self, frame: Frame) -> None:
        """
        Encode one frame and emit its image block.

        Raises:
            EncoderStateError: If the session is not open, a write is
                already in flight, the frame is out of order, or the
                pixel buffer has the wrong size
        """
        if not self._opened:
            raise EncoderStateError("add_frame called before open()")
        if self._closed:
            raise EncoderStateError("add_frame called after close()")
        if self._writing:
            raise EncoderStateError("Concurrent add_frame calls are not allowed")

        expected = self.width * self.height * BYTES_PER_PIXEL
        if (frame.width, frame.height) != (self.width, self.height) or len(frame.pixels) != expected:
            raise EncoderStateError(
                f"Frame {frame.index} is {frame.width}x{frame.height} "
                f"({len(frame.pixels)} bytes), session expects "
                f"{self.width}x{self.height} ({expected} bytes)"
            )
        if frame.index < self._last_index:
            raise EncoderStateError(
                f"Frame {frame.index} arrived after frame {self._last_index}"
            )

        self._writing = True
        try:
            chunk = await asyncio.to_thread(encode_frame, frame, self.frame_delay_ms)
            self.assembler.push(chunk)
        finally:
            self._writing = False

        self._frame_count += 1
        self._last_index = frame.index
        logger.debug(f"Added frame {frame.index} ({len(chunk)} bytes)")

    def close(self) -> None:
        """Emit the trailer and signal completion exactly once."""
        if not self._opened:
            raise EncoderStateError("close called before open()")
        if self._closed:
            raise EncoderStateError("Encoder session already closed")
        if self._writing:
            raise EncoderStateError("close called while a frame is being written")
        self._closed = True
        self.assembler.push(GIF_TRAILER)
        self.assembler.finish()
        logger.info(f"Encoder session closed after {self._frame_count} frames")

    async def assemble(self, timeout: Optional[float] = None) -> bytes:
        """
        Return the finished artifact.

        Raises:
            EncoderStateError: If the session was never closed
        """
        if not self._closed:
            raise EncoderStateError("assemble called before the session was closed")
        return await self.assembler.assemble(timeout=timeout)

