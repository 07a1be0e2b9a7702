"""
Capture Module
==============

Frame capture and scroll choreography against an external view.

Components:
    - ExternalView: Protocol for the page being recorded
    - PlaywrightPageView: Adapter over a Playwright async Page
    - FrameRecorder: Motionless hold capture
    - ScrollChoreographer: Bounded capture/scroll loop
    - ScrollRhythm, StepRange, compute_delta: Pure choreography decisions
"""

from scrollgif.capture.view import (
    ExternalView,
    PlaywrightPageView,
    apply_scroll,
    capture_screenshot,
    read_scroll_extent,
)
from scrollgif.capture.recorder import FrameRecorder, capture_into, frames_for_duration
from scrollgif.capture.choreography import (
    ScrollChoreographer,
    ScrollRhythm,
    StepRange,
    compute_delta,
    eased_progress,
    settle_delay_seconds,
)

__all__ = [
    "ExternalView",
    "PlaywrightPageView",
    "apply_scroll",
    "capture_screenshot",
    "read_scroll_extent",
    "FrameRecorder",
    "capture_into",
    "frames_for_duration",
    "ScrollChoreographer",
    "ScrollRhythm",
    "StepRange",
    "compute_delta",
    "eased_progress",
    "settle_delay_seconds",
]
