"""
Scroll Choreography
===================

Time- and distance-bounded loop that alternates capturing a frame and
scrolling the view.

The scroll rhythm is cyclic: out of every (active + paused) iterations,
the first `active` scroll by a random step and the remaining `paused`
hold still. This gives a "read, then scroll" feel instead of a
constant-velocity crawl.

Decision logic is kept pure (ScrollRhythm, StepRange, compute_delta) and
only ScrollChoreographer.run touches the view, so the rhythm can be
tested without a browser.

Easing:
    The distance fraction scrolled is passed through an ease-out curve.
    The eased value shrinks the upper bound of the active step range, so
    scrolling slows down as the page bottom approaches. Steps never leave
    [min_step, max_step] and the pause cadence is unaffected.

Termination:
    The loop stops when scrolled_position >= page_height, when
    elapsed_time_ms >= time budget, or when the optional stop event is
    set (checked at the top of each iteration).
"""

import asyncio
import logging
import math
import random
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

from scrollgif.capture.recorder import capture_into
from scrollgif.capture.view import (
    DEFAULT_CAPTURE_TIMEOUT_SECONDS,
    ExternalView,
    apply_scroll,
    read_scroll_extent,
)
from scrollgif.models.state import ScrollState
from scrollgif.stream.encoder import GifStreamEncoder
from scrollgif.stream.image_decoder import DEFAULT_DECODE_TIMEOUT_SECONDS


logger = logging.getLogger(__name__)


SleepFn = Callable[[float], Awaitable[None]]


# =============================================================================
# Pure decision logic
# =============================================================================

@dataclass(frozen=True)
class ScrollRhythm:
    """
    Cyclic scroll/pause pattern.

    Attributes:
        active_scrolls: Iterations per cycle that scroll
        paused_scrolls: Iterations per cycle that hold still
    """

    active_scrolls: int = 10
    paused_scrolls: int = 7

    def __post_init__(self) -> None:
        if self.active_scrolls < 1:
            raise ValueError("active_scrolls must be >= 1")
        if self.paused_scrolls < 0:
            raise ValueError("paused_scrolls must be >= 0")

    @property
    def cycle_length(self) -> int:
        return self.active_scrolls + self.paused_scrolls

    def is_paused(self, index: int) -> bool:
        """Whether iteration `index` falls in the paused part of its cycle."""
        return index % self.cycle_length >= self.active_scrolls


@dataclass(frozen=True)
class StepRange:
    """
    Inclusive pixel range for active scroll steps.

    Attributes:
        min_step: Smallest active step (px)
        max_step: Largest active step (px)
    """

    min_step: int = 27
    max_step: int = 44

    def __post_init__(self) -> None:
        if self.min_step < 1:
            raise ValueError("min_step must be >= 1")
        if self.min_step > self.max_step:
            raise ValueError("min_step must be <= max_step")

    def clamp(self, value: float) -> int:
        return int(min(self.max_step, max(self.min_step, round(value))))

    def advisory(self, viewport_height: int, scroll_percentage: Optional[float]) -> "StepRange":
        """
        Narrow this range around a step derived from `scroll_percentage`.

        The percentage is advisory: the target step
        viewport_height * pct / 100 selects a +/-20% window that is clamped
        into this range, so the result never exceeds the configured bounds.
        """
        if scroll_percentage is None:
            return self
        target = viewport_height * scroll_percentage / 100
        if not self.min_step <= target <= self.max_step:
            logger.warning(
                f"scroll_percentage={scroll_percentage} gives a {target:.0f}px step, "
                f"outside [{self.min_step}, {self.max_step}]; clamping"
            )
        low = self.clamp(target * 0.8)
        high = self.clamp(target * 1.2)
        return StepRange(min_step=low, max_step=max(low, high))


def eased_progress(progress: float) -> float:
    """Ease-out quad of a [0, 1] progress fraction."""
    p = min(1.0, max(0.0, progress))
    return 1.0 - (1.0 - p) ** 2


def compute_delta(
    state: ScrollState,
    rhythm: ScrollRhythm,
    step_range: StepRange,
    rng: random.Random,
    ease_strength: float = 0.0,
) -> int:
    """
    Scroll delta for the iteration described by `state`.

    Returns 0 on paused cycle positions. Otherwise returns a uniform
    integer in [min_step, upper], where upper shrinks from max_step
    towards min_step as the eased progress grows.
    """
    if rhythm.is_paused(state.cycle_count):
        return 0
    span = step_range.max_step - step_range.min_step
    shrink = round(span * ease_strength * eased_progress(state.progress))
    upper = max(step_range.min_step, step_range.max_step - shrink)
    return rng.randint(step_range.min_step, upper)


def settle_delay_seconds(rng: random.Random, min_ms: int = 50, max_ms: int = 150) -> float:
    """Randomised settle delay after a scroll, in seconds."""
    return rng.uniform(min_ms, max_ms) / 1000


# =============================================================================
# Choreographer
# =============================================================================

class ScrollChoreographer:
    """
    Runs the capture/scroll loop against one view and one encoder session.

    Attributes:
        view: View being scrolled and captured
        encoder: Open encoder session
        rhythm: Scroll/pause cycle
        step_range: Active step bounds
        rng: Seedable random source for steps and settle delays
        sleep: Awaitable sleep used for settle delays
        ease_strength: How strongly steps shrink near the bottom (0 = off)
        track_page_growth: Re-read document height after every scroll

    Example:
        choreographer = ScrollChoreographer(view, encoder, rng=random.Random(7))
        state = await choreographer.run(
            initial_position=768,
            page_height=3000,
            elapsed_time_so_far=1000,
            time_budget_ms=5000,
            frame_rate=10,
        )
    """

    def __init__(
        self,
        view: ExternalView,
        encoder: GifStreamEncoder,
        rhythm: Optional[ScrollRhythm] = None,
        step_range: Optional[StepRange] = None,
        rng: Optional[random.Random] = None,
        sleep: SleepFn = asyncio.sleep,
        settle_min_ms: int = 50,
        settle_max_ms: int = 150,
        ease_strength: float = 0.5,
        track_page_growth: bool = True,
        capture_timeout: float = DEFAULT_CAPTURE_TIMEOUT_SECONDS,
        decode_timeout: float = DEFAULT_DECODE_TIMEOUT_SECONDS,
    ) -> None:
        if not 0 <= ease_strength <= 1:
            raise ValueError("ease_strength must be in [0, 1]")
        if settle_min_ms > settle_max_ms:
            raise ValueError("settle_min_ms must be <= settle_max_ms")

        self.view = view
        self.encoder = encoder
        self.rhythm = rhythm or ScrollRhythm()
        self.step_range = step_range or StepRange()
        self.rng = rng or random.Random()
        self.sleep = sleep
        self.settle_min_ms = settle_min_ms
        self.settle_max_ms = settle_max_ms
        self.ease_strength = ease_strength
        self.track_page_growth = track_page_growth
        self.capture_timeout = capture_timeout
        self.decode_timeout = decode_timeout

    async def run(
        self,
        initial_position: float,
        page_height: float,
        elapsed_time_so_far: float,
        time_budget_ms: float,
        frame_rate: float,
        stop_event: Optional[asyncio.Event] = None,
    ) -> ScrollState:
        """
        Scroll until the page bottom, the time budget or a stop request.

        Args:
            initial_position: Viewport bottom at the start (height + offset)
            page_height: Document height at the start
            elapsed_time_so_far: GIF time already used by earlier holds (ms)
            time_budget_ms: Total GIF time budget (ms)
            frame_rate: Frames per second
            stop_event: Optional cancellation signal

        Returns:
            Final ScrollState

        Raises:
            CaptureError, DecodeError, ScrollError: Abort the run
        """
        if frame_rate <= 0:
            raise ValueError("frame_rate must be positive")
        if not math.isfinite(time_budget_ms):
            raise ValueError("time_budget_ms must be finite")

        state = ScrollState(
            scrolled_position=initial_position,
            page_height=page_height,
            start_elapsed_ms=elapsed_time_so_far,
            frame_interval_ms=1000 / frame_rate,
        )

        logger.info(
            f"Scrolling from {initial_position:.0f}px to {page_height:.0f}px, "
            f"time {elapsed_time_so_far:.0f}/{time_budget_ms:.0f}ms"
        )

        while not state.reached_bottom() and not state.out_of_time(time_budget_ms):
            if stop_event is not None and stop_event.is_set():
                logger.info(f"Scroll stopped on request after {state.cycle_count} iterations")
                break

            await capture_into(
                self.view,
                self.encoder,
                capture_timeout=self.capture_timeout,
                decode_timeout=self.decode_timeout,
            )

            delta = compute_delta(
                state,
                self.rhythm,
                self.step_range,
                self.rng,
                ease_strength=self.ease_strength,
            )

            if delta > 0:
                logger.debug(f"Scrolling down by {delta} pixels")
                await apply_scroll(self.view, delta)
                if self.track_page_growth:
                    document_height, _ = await read_scroll_extent(self.view)
                    state = state.with_page_height(document_height)

            await self.sleep(
                settle_delay_seconds(self.rng, self.settle_min_ms, self.settle_max_ms)
            )
            state = state.advance(delta)

        logger.info(
            f"Scroll finished: position={state.scrolled_position:.0f}px, "
            f"height={state.page_height:.0f}px, "
            f"elapsed={state.elapsed_time_ms:.0f}ms, iterations={state.cycle_count}"
        )
        return state
