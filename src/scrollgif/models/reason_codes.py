"""
Failure Phases
==============

Fixed set of machine-readable phase codes attached to recording errors.

Each failure maps to exactly ONE phase so that a failed run can report
which stage of the pipeline broke.
"""

from enum import Enum


class FailurePhase(str, Enum):
    """
    Pipeline phase in which a failure occurred.

    Attributes:
        CAPTURE: Screenshot could not be obtained from the view
        DECODE: Screenshot bytes could not be decoded to pixels
        SCROLL: View failed to report its extent or apply a scroll
        ACTION: Configured click action failed
        ENCODE: Encoder session lifecycle was misused
        COMPRESS: Post-compression exhausted its retries
        SAVE: Artifact sink rejected an artifact
    """

    CAPTURE = "CAPTURE"
    DECODE = "DECODE"
    SCROLL = "SCROLL"
    ACTION = "ACTION"
    ENCODE = "ENCODE"
    COMPRESS = "COMPRESS"
    SAVE = "SAVE"
