"""
Frame Recorder
==============

Motionless "hold" capture at a fixed cadence.

A hold is used at the start of a recording (so the GIF pauses before
motion begins) and after a click action. Every frame goes through the
same serialised step used by the scroll choreographer:

    capture screenshot -> decode to RGBA -> append to encoder session

Frame i+1 is only captured after frame i has been fully appended.
"""

import logging
import math

from scrollgif.capture.view import (
    DEFAULT_CAPTURE_TIMEOUT_SECONDS,
    ExternalView,
    capture_screenshot,
)
from scrollgif.stream.encoder import GifStreamEncoder
from scrollgif.stream.image_decoder import (
    DEFAULT_DECODE_TIMEOUT_SECONDS,
    decode_frame_async,
)


logger = logging.getLogger(__name__)


def frames_for_duration(duration_ms: float, frame_rate: float) -> int:
    """
    Number of frames in a hold of `duration_ms` at `frame_rate` fps.

    Raises:
        ValueError: If frame_rate is not positive or duration is negative
    """
    if frame_rate <= 0:
        raise ValueError("frame_rate must be positive")
    if duration_ms < 0:
        raise ValueError("duration_ms must be non-negative")
    # Round away float noise (e.g. 0.7 * 10 = 6.999...) before flooring
    return math.floor(round(duration_ms / 1000 * frame_rate, 9))


async def capture_into(
    view: ExternalView,
    encoder: GifStreamEncoder,
    capture_timeout: float = DEFAULT_CAPTURE_TIMEOUT_SECONDS,
    decode_timeout: float = DEFAULT_DECODE_TIMEOUT_SECONDS,
) -> int:
    """
    Capture one frame from the view and append it to the session.

    Returns:
        Index of the appended frame

    Raises:
        CaptureError, DecodeError, EncoderStateError: Propagated unchanged
    """
    index = encoder.frame_count
    screenshot = await capture_screenshot(view, timeout=capture_timeout)
    frame = await decode_frame_async(screenshot, index=index, timeout=decode_timeout)
    await encoder.add_frame(frame)
    return index


class FrameRecorder:
    """
    Captures a fixed number of frames with no viewport motion.

    Attributes:
        view: View to capture from
        encoder: Open encoder session frames are appended to
        capture_timeout: Per-screenshot budget (seconds)
        decode_timeout: Per-decode budget (seconds)

    Example:
        recorder = FrameRecorder(view, encoder)
        appended = await recorder.record(duration_ms=1000, frame_rate=10)
        assert appended == 10
    """

    def __init__(
        self,
        view: ExternalView,
        encoder: GifStreamEncoder,
        capture_timeout: float = DEFAULT_CAPTURE_TIMEOUT_SECONDS,
        decode_timeout: float = DEFAULT_DECODE_TIMEOUT_SECONDS,
    ) -> None:
        self.view = view
        self.encoder = encoder
        self.capture_timeout = capture_timeout
        self.decode_timeout = decode_timeout

    async def record(self, duration_ms: float, frame_rate: float) -> int:
        """
        Capture floor(duration_ms / 1000 * frame_rate) frames.

        Any capture or decode failure aborts the hold.

        Returns:
            Number of frames appended
        """
        frames = frames_for_duration(duration_ms, frame_rate)
        if frames == 0:
            logger.debug(f"Hold of {duration_ms}ms at {frame_rate} fps has no frames")
            return 0

        logger.info(f"Recording {frames} held frames ({duration_ms}ms @ {frame_rate} fps)")
        for _ in range(frames):
            await capture_into(
                self.view,
                self.encoder,
                capture_timeout=self.capture_timeout,
                decode_timeout=self.decode_timeout,
            )
        return frames
