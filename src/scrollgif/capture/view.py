"""
External View
=============

Capability interface for the rendered page being recorded.

The recorder never launches or configures a browser. It drives an
ExternalView that somebody else owns, and only asks it to take a
screenshot, scroll, report its scroll extent, and click.

Components:
    - ExternalView: Protocol every view adapter implements
    - PlaywrightPageView: Adapter over an already-open Playwright Page
    - capture_screenshot / read_scroll_extent / apply_scroll: Wrappers
      that translate view failures into pipeline errors

Design Rules:
    - capture_frame must reflect the state after any prior scroll settled
    - Every view failure surfaces as CaptureError or ScrollError
"""

import asyncio
import logging
from typing import Any, Protocol, Tuple

from scrollgif.errors import CaptureError, ScrollError


logger = logging.getLogger(__name__)


DEFAULT_CAPTURE_TIMEOUT_SECONDS = 30.0


class ExternalView(Protocol):
    """
    Protocol for the view being recorded.

    Implemented by:
        - PlaywrightPageView (production)
        - FakeView (tests)
    """

    async def capture_frame(self) -> bytes:
        """Return a PNG screenshot of the current viewport."""
        ...

    async def scroll_by(self, delta_pixels: int) -> None:
        """Scroll the document down by `delta_pixels` and wait for it."""
        ...

    async def current_scroll_extent(self) -> Tuple[float, float]:
        """Return (document_height, scroll_offset) in pixels."""
        ...

    async def click(self, selector: str) -> None:
        """Wait for `selector` and click it."""
        ...


class PlaywrightPageView:
    """
    ExternalView over a Playwright async Page.

    The page must already be navigated and sized to the recording
    viewport; launching, proxies and request filtering are handled by
    the caller.

    Attributes:
        page: Playwright `Page` (async API)
        click_timeout_ms: Timeout for waiting on a click selector
    """

    def __init__(self, page: Any, click_timeout_ms: float = 30000) -> None:
        self.page = page
        self.click_timeout_ms = click_timeout_ms

    async def capture_frame(self) -> bytes:
        logger.debug("Taking screenshot")
        return await self.page.screenshot(type="png")

    async def scroll_by(self, delta_pixels: int) -> None:
        # Resolve only after the next animation frame so the capture that
        # follows sees the scrolled content.
        await self.page.evaluate(
            """(delta) => new Promise((resolve) => {
                window.scrollBy(0, delta);
                window.requestAnimationFrame(() => resolve());
            })""",
            delta_pixels,
        )

    async def current_scroll_extent(self) -> Tuple[float, float]:
        extent = await self.page.evaluate(
            """() => [
                document.documentElement.scrollHeight,
                document.documentElement.scrollTop,
            ]"""
        )
        return float(extent[0]), float(extent[1])

    async def click(self, selector: str) -> None:
        await self.page.wait_for_selector(selector, timeout=self.click_timeout_ms)
        logger.info(f"Clicking element with selector {selector}")
        await self.page.click(selector)


# =============================================================================
# Error-translating wrappers
# =============================================================================

async def capture_screenshot(
    view: ExternalView,
    timeout: float = DEFAULT_CAPTURE_TIMEOUT_SECONDS,
) -> bytes:
    """
    Take one screenshot, bounded by `timeout` seconds.

    Raises:
        CaptureError: If the view fails, times out or returns nothing
    """
    try:
        data = await asyncio.wait_for(view.capture_frame(), timeout=timeout)
    except asyncio.TimeoutError as e:
        raise CaptureError(f"Screenshot exceeded {timeout:.1f}s budget") from e
    except CaptureError:
        raise
    except Exception as e:
        raise CaptureError(f"Screenshot failed: {e}") from e

    if not data:
        raise CaptureError("View returned an empty screenshot")
    return data


async def read_scroll_extent(view: ExternalView) -> Tuple[float, float]:
    """
    Read (document_height, scroll_offset) from the view.

    Raises:
        ScrollError: If the view cannot report its extent
    """
    try:
        document_height, scroll_offset = await view.current_scroll_extent()
    except ScrollError:
        raise
    except Exception as e:
        raise ScrollError(f"Failed to read scroll extent: {e}") from e
    return float(document_height), float(scroll_offset)


async def apply_scroll(view: ExternalView, delta: int) -> None:
    """
    Scroll the view by `delta` pixels and wait for completion.

    Raises:
        ScrollError: If the view fails to apply the scroll
    """
    try:
        await view.scroll_by(delta)
    except ScrollError:
        raise
    except Exception as e:
        raise ScrollError(f"Failed to scroll by {delta}px: {e}") from e
