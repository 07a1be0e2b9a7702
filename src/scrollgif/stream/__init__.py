"""
Stream Module
=============

Pixel decoding and streaming GIF encoding components.

This module provides the encode side of the recording pipeline:
    - Frame: Decoded RGBA frame (internal representation)
    - decode_frame / decode_frame_async: Screenshot bytes -> Frame
    - GifStreamEncoder: Open, stateful GIF encoding session
    - BufferAssembler: Ordered chunk accumulator with completion flag

Example:
    from scrollgif.stream import GifStreamEncoder, decode_frame_async

    encoder = GifStreamEncoder(1366, 768, frame_rate=10)
    encoder.open()

    frame = await decode_frame_async(png_bytes, index=0)
    await encoder.add_frame(frame)

    encoder.close()
    gif_bytes = await encoder.assemble()
"""

from scrollgif.stream.frame import Frame
from scrollgif.stream.assembler import BufferAssembler
from scrollgif.stream.encoder import GifStreamEncoder
from scrollgif.stream.image_decoder import decode_frame, decode_frame_async


__all__ = [
    "Frame",
    "BufferAssembler",
    "GifStreamEncoder",
    "decode_frame",
    "decode_frame_async",
]
