"""
scrollgif Recording Pipeline
============================

Entry point that turns a live page into an animated GIF.

Phase 1: Hold - motionless frames before any action
Phase 2: Scroll - capture/scroll choreography within the GIF time budget
Phase 3: Action - optional click followed by another hold
Phase 4: Assemble - close the encoder session and join its chunks
Phase 5: Deliver - save the original, then each requested compressed variant

Capture, decode, scroll and action failures abort the run without saving
anything. A failed compression profile is logged and reported in the
result while the original and sibling variants are still delivered.

Example:
    from scrollgif.capture import PlaywrightPageView
    from scrollgif.main import RecordingPipeline
    from scrollgif.sink import DirectorySink

    pipeline = RecordingPipeline(PlaywrightPageView(page), DirectorySink("./output"))
    result = await pipeline.run("https://example.com")
    print(result.original_url)
"""

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable, List, Optional, Tuple
from urllib.parse import urlparse

from scrollgif.capture import (
    ExternalView,
    FrameRecorder,
    PlaywrightPageView,
    ScrollChoreographer,
    ScrollRhythm,
    StepRange,
    read_scroll_extent,
)
from scrollgif.compression import GifsicleBackend, PostCompressor
from scrollgif.config import CompressionConfig, Settings, settings as default_settings
from scrollgif.errors import ActionError, CompressionError, RecordingError
from scrollgif.models.output import RecordingResult, ScrollSummary
from scrollgif.models.profile import CompressionProfile, ProfileKind
from scrollgif.models.state import ScrollState
from scrollgif.sink import GIF_CONTENT_TYPE, ArtifactSink, DirectorySink
from scrollgif.stream import GifStreamEncoder


logger = logging.getLogger(__name__)


# Artifact file suffix and RecordingResult field per profile kind
_PROFILE_OUTPUTS = {
    ProfileKind.LOSSY: ("lossy-comp", "lossy_url"),
    ProfileKind.LOSSLESS: ("lossless-comp", "lossless_url"),
    ProfileKind.ULTRA_LOSSY: ("ultralossy-comp", "ultra_lossy_url"),
}


# =============================================================================
# Helpers
# =============================================================================

def normalize_url(url: str) -> str:
    """Prefix scheme-less URLs with https://."""
    return url if url.startswith(("http://", "https://")) else f"https://{url}"


def artifact_base_name(url: str) -> str:
    """Base file name for a recording of `url`, e.g. 'example.com-scroll'."""
    hostname = urlparse(normalize_url(url)).hostname or "page"
    return f"{hostname}-scroll"


def requested_profiles(config: CompressionConfig) -> List[CompressionProfile]:
    """Compression profiles enabled in `config`, in delivery order."""
    profiles = []
    if config.lossy:
        profiles.append(
            CompressionProfile.lossy(config.lossy_level, config.optimization_level)
        )
    if config.lossless:
        profiles.append(CompressionProfile.lossless(config.optimization_level))
    if config.ultra_lossy:
        profiles.append(
            CompressionProfile.ultra_lossy(config.ultra_lossy_level, config.optimization_level)
        )
    return profiles


def create_compressor(settings: Settings) -> PostCompressor:
    """Create the gifsicle-backed compressor described by `settings`."""
    compression = settings.compression
    logger.info(
        f"Using GifsicleBackend: binary={compression.gifsicle_binary}, "
        f"max_attempts={compression.max_attempts}"
    )
    return PostCompressor(
        GifsicleBackend(
            binary=compression.gifsicle_binary,
            timeout=compression.timeout_seconds,
        ),
        max_attempts=compression.max_attempts,
        backoff_base=compression.backoff_base_seconds,
    )


# =============================================================================
# Pipeline
# =============================================================================

class RecordingPipeline:
    """
    One recording run against one view and one encoder session.

    Attributes:
        view: Page being recorded
        sink: Destination for the produced artifacts
        settings: Recording configuration
        compressor: Post-compressor for derived artifacts
        rng: Random source for scroll steps and settle delays
        sleep: Awaitable sleep (page-load wait and settle delays)
        stop_event: Optional signal that ends the scroll phase early
    """

    def __init__(
        self,
        view: ExternalView,
        sink: ArtifactSink,
        settings: Optional[Settings] = None,
        compressor: Optional[PostCompressor] = None,
        rng: Optional[random.Random] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        stop_event: Optional[asyncio.Event] = None,
    ) -> None:
        self.view = view
        self.sink = sink
        self.settings = settings or default_settings
        self.compressor = compressor or create_compressor(self.settings)
        self.rng = rng or random.Random(self.settings.scroll.seed)
        self.sleep = sleep
        self.stop_event = stop_event

    async def run(self, url: str) -> RecordingResult:
        """
        Record `url` (already loaded in the view) and deliver the artifacts.

        Raises:
            RecordingError: If capture, decode, scroll or action failed
        """
        try:
            gif_bytes, frame_count, scroll_state = await self._record()
        except RecordingError as e:
            logger.error(f"Recording failed during {e.phase.value}: {e}")
            raise

        return await self._deliver(url, gif_bytes, frame_count, scroll_state)

    async def _record(self) -> Tuple[bytes, int, Optional[ScrollState]]:
        recording = self.settings.recording
        decoder = self.settings.decoder
        fps = recording.frame_rate

        if recording.wait_to_load_page:
            logger.info(f"Waiting {recording.wait_to_load_page}ms for the page to load")
            await self.sleep(recording.wait_to_load_page / 1000)

        encoder = GifStreamEncoder(
            recording.viewport_width,
            recording.viewport_height,
            frame_rate=fps,
            loop_forever=True,
        )
        encoder.open()

        recorder = FrameRecorder(
            self.view,
            encoder,
            capture_timeout=decoder.capture_timeout_seconds,
            decode_timeout=decoder.decode_timeout_seconds,
        )

        # Phase 1: Hold
        elapsed_ms = 0.0
        await recorder.record(recording.recording_time_before_action, fps)
        elapsed_ms += recording.recording_time_before_action

        # Phase 2: Scroll
        scroll_state: Optional[ScrollState] = None
        if recording.scroll_down:
            scroll_state = await self._scroll(encoder, elapsed_ms)

        # Phase 3: Action
        if recording.click_selector:
            await self._click(recording.click_selector)
            if recording.recording_time_after_click:
                await recorder.record(recording.recording_time_after_click, fps)

        # Phase 4: Assemble
        encoder.close()
        gif_bytes = await encoder.assemble()
        logger.info(f"GIF assembled: {encoder.frame_count} frames, {len(gif_bytes)} bytes")
        return gif_bytes, encoder.frame_count, scroll_state

    async def _scroll(self, encoder: GifStreamEncoder, elapsed_ms: float) -> ScrollState:
        recording = self.settings.recording
        scroll = self.settings.scroll
        decoder = self.settings.decoder

        page_height, scroll_top = await read_scroll_extent(self.view)
        step_range = StepRange(scroll.min_step, scroll.max_step).advisory(
            recording.viewport_height,
            recording.scroll_percentage,
        )

        choreographer = ScrollChoreographer(
            self.view,
            encoder,
            rhythm=ScrollRhythm(scroll.active_scrolls, scroll.paused_scrolls),
            step_range=step_range,
            rng=self.rng,
            sleep=self.sleep,
            settle_min_ms=scroll.settle_min_ms,
            settle_max_ms=scroll.settle_max_ms,
            ease_strength=scroll.ease_strength,
            track_page_growth=scroll.track_page_growth,
            capture_timeout=decoder.capture_timeout_seconds,
            decode_timeout=decoder.decode_timeout_seconds,
        )
        return await choreographer.run(
            initial_position=recording.viewport_height + scroll_top,
            page_height=page_height,
            elapsed_time_so_far=elapsed_ms,
            time_budget_ms=recording.gif_time,
            frame_rate=recording.frame_rate,
            stop_event=self.stop_event,
        )

    async def _click(self, selector: str) -> None:
        try:
            await self.view.click(selector)
        except Exception as e:
            raise ActionError(f"Click on {selector!r} failed: {e}") from e

    async def _deliver(
        self,
        url: str,
        gif_bytes: bytes,
        frame_count: int,
        scroll_state: Optional[ScrollState],
    ) -> RecordingResult:
        base_name = artifact_base_name(url)

        original_url = await self.sink.save(
            f"{base_name}_original.gif", gif_bytes, GIF_CONTENT_TYPE
        )
        result = RecordingResult(
            original_url=original_url,
            frame_count=frame_count,
            artifact_size=len(gif_bytes),
            scroll_state=(
                ScrollSummary(**scroll_state.to_dict()) if scroll_state is not None else None
            ),
        )

        for profile in requested_profiles(self.settings.compression):
            suffix, field_name = _PROFILE_OUTPUTS[profile.kind]
            try:
                compressed = await self.compressor.compress(gif_bytes, profile)
            except CompressionError as e:
                logger.error(f"Profile {profile.name} failed, keeping original only: {e}")
                result.failed_profiles[profile.name] = str(e)
                continue
            locator = await self.sink.save(
                f"{base_name}_{suffix}.gif", compressed, GIF_CONTENT_TYPE
            )
            setattr(result, field_name, locator)

        logger.info(f"Recording delivered: {result.model_dump_json(exclude_none=True)}")
        return result


async def record_page(
    page: Any,
    url: str,
    settings: Optional[Settings] = None,
    sink: Optional[ArtifactSink] = None,
) -> RecordingResult:
    """
    Record an already-navigated Playwright page with default wiring.

    Args:
        page: Playwright async Page sized to the recording viewport
        url: URL the page shows (used for artifact names)
        settings: Configuration (defaults to the global settings)
        sink: Artifact sink (defaults to a DirectorySink on output.directory)
    """
    settings = settings or default_settings
    sink = sink or DirectorySink(settings.output.directory)
    pipeline = RecordingPipeline(PlaywrightPageView(page), sink, settings=settings)
    return await pipeline.run(url)
