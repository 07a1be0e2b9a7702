"""
Recording Errors
================

Exception hierarchy shared by every pipeline stage.

All errors derive from RecordingError and carry the FailurePhase they
belong to. Capture, decode, scroll, action and encoder errors abort the
run; CompressionError is isolated per profile by the pipeline.
"""

from typing import Optional

from scrollgif.models.reason_codes import FailurePhase


class RecordingError(Exception):
    """Base class for all pipeline failures."""

    phase: FailurePhase = FailurePhase.CAPTURE

    def __init__(self, message: str, phase: Optional[FailurePhase] = None) -> None:
        super().__init__(message)
        if phase is not None:
            self.phase = phase

    def __str__(self) -> str:
        return f"[{self.phase.value}] {super().__str__()}"


class CaptureError(RecordingError):
    """Raised when a screenshot fails or times out."""

    phase = FailurePhase.CAPTURE


class DecodeError(RecordingError):
    """Raised when screenshot bytes are malformed or decoding times out."""

    phase = FailurePhase.DECODE


class ScrollError(RecordingError):
    """Raised when the view fails to report its extent or apply a scroll."""

    phase = FailurePhase.SCROLL


class ActionError(RecordingError):
    """Raised when the post-scroll click action fails."""

    phase = FailurePhase.ACTION


class EncoderStateError(RecordingError):
    """Raised on encoder session misuse (programming error)."""

    phase = FailurePhase.ENCODE


class CompressionError(RecordingError):
    """Raised when a compression profile exhausts its retries."""

    phase = FailurePhase.COMPRESS

    def __init__(self, message: str, profile: Optional[str] = None) -> None:
        super().__init__(message)
        self.profile = profile


class SaveError(RecordingError):
    """Raised when an artifact sink cannot store an artifact."""

    phase = FailurePhase.SAVE
