"""
Test Configuration
==================

Pytest fixtures and test doubles for scrollgif.
"""

import asyncio
from typing import List, Optional, Tuple

import cv2
import numpy as np
import pytest

from scrollgif.config import Settings
from scrollgif.models.profile import CompressionProfile


def make_png(width: int, height: int, shade: int = 128) -> bytes:
    """Encode a solid BGR image of the given size as PNG."""
    image = np.full((height, width, 3), shade % 256, dtype=np.uint8)
    # Mark the top-left pixel so frames are not fully uniform
    image[0, 0] = (255 - shade % 256, 0, shade % 256)
    ok, encoded = cv2.imencode(".png", image)
    assert ok
    return encoded.tobytes()


class FakeView:
    """
    In-memory ExternalView.

    Screenshots encode the current scroll offset in their shade, and every
    call is appended to `events` so tests can assert on ordering.
    """

    def __init__(
        self,
        width: int = 32,
        height: int = 24,
        document_height: float = 3000,
        scroll_top: float = 0,
        growth_per_scroll: float = 0,
        fail_capture_at: Optional[int] = None,
        fail_scroll_at: Optional[int] = None,
        fail_click: bool = False,
        screenshot: Optional[bytes] = None,
        capture_delay: float = 0,
    ) -> None:
        self.width = width
        self.height = height
        self.document_height = document_height
        self.scroll_top = scroll_top
        self.growth_per_scroll = growth_per_scroll
        self.fail_capture_at = fail_capture_at
        self.fail_scroll_at = fail_scroll_at
        self.fail_click = fail_click
        self.screenshot = screenshot
        self.capture_delay = capture_delay

        self.events: List[Tuple] = []
        self.captures: int = 0
        self.scrolls: List[int] = []
        self.clicks: List[str] = []

    async def capture_frame(self) -> bytes:
        if self.capture_delay:
            await asyncio.sleep(self.capture_delay)
        if self.fail_capture_at is not None and self.captures == self.fail_capture_at:
            raise RuntimeError("screenshot target closed")
        self.captures += 1
        self.events.append(("capture", self.scroll_top))
        if self.screenshot is not None:
            return self.screenshot
        return make_png(self.width, self.height, shade=int(self.scroll_top))

    async def scroll_by(self, delta_pixels: int) -> None:
        if self.fail_scroll_at is not None and len(self.scrolls) == self.fail_scroll_at:
            raise RuntimeError("execution context was destroyed")
        self.scrolls.append(delta_pixels)
        self.scroll_top += delta_pixels
        self.document_height += self.growth_per_scroll
        self.events.append(("scroll", delta_pixels))

    async def current_scroll_extent(self) -> Tuple[float, float]:
        return self.document_height, self.scroll_top

    async def click(self, selector: str) -> None:
        if self.fail_click:
            raise RuntimeError(f"waiting for selector {selector} failed")
        self.clicks.append(selector)
        self.events.append(("click", selector))


class RecordingSleep:
    """Awaitable sleep that records delays instead of waiting."""

    def __init__(self) -> None:
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


class FakeBackend:
    """Compression backend that fails a set number of times first."""

    def __init__(self, failures: int = 0, empty_failures: int = 0, payload: bytes = b"GIF89a-small") -> None:
        self.failures = failures
        self.empty_failures = empty_failures
        self.payload = payload
        self.calls: List[CompressionProfile] = []

    async def transcode(self, artifact: bytes, profile: CompressionProfile) -> bytes:
        self.calls.append(profile)
        if self.failures > 0:
            self.failures -= 1
            raise RuntimeError("gifsicle exited with 1")
        if self.empty_failures > 0:
            self.empty_failures -= 1
            return b""
        return self.payload + profile.name.encode()


@pytest.fixture
def fake_view() -> FakeView:
    """A small view over a 3000px document."""
    return FakeView()


@pytest.fixture
def view_factory():
    """Build FakeView instances with custom behaviour."""
    return FakeView


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def backend_factory():
    """Build FakeBackend instances with custom failure counts."""
    return FakeBackend


@pytest.fixture
def png_factory():
    """Encode solid PNG screenshots."""
    return make_png


@pytest.fixture
def small_settings() -> Settings:
    """Settings for a 100x100 viewport at 10 fps."""
    return Settings.model_validate({
        "recording": {
            "viewport_width": 100,
            "viewport_height": 100,
            "frame_rate": 10,
            "recording_time_before_action": 300,
            "gif_time": 2000,
        },
        "scroll": {"seed": 7},
        "compression": {"backoff_base_seconds": 0},
    })
