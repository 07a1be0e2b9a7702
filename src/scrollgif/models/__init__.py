"""
Data Models
===========

Typed models for the scroll recorder.

Models:
    State:
        - ScrollState: Choreography loop state value

    Profiles:
        - ProfileKind: LOSSLESS / LOSSY / ULTRA_LOSSY
        - CompressionProfile: Immutable compression request

    Output:
        - ScrollSummary: Serialised final scroll state
        - RecordingResult: Artifact locators and per-profile failures

    Reason codes:
        - FailurePhase: Pipeline phase attached to every error
"""

from scrollgif.models.state import ScrollState
from scrollgif.models.profile import (
    CompressionProfile,
    ProfileKind,
    LOSSLESS,
    LOSSY,
    ULTRA_LOSSY,
)
from scrollgif.models.output import RecordingResult, ScrollSummary
from scrollgif.models.reason_codes import FailurePhase

__all__ = [
    # State
    "ScrollState",
    # Profiles
    "ProfileKind",
    "CompressionProfile",
    "LOSSLESS",
    "LOSSY",
    "ULTRA_LOSSY",
    # Output
    "ScrollSummary",
    "RecordingResult",
    # Reason codes
    "FailurePhase",
]
