"""
Recording Output Models
=======================

This module defines the result contract of one recording run.

Output Contract:
    {
        "original_url": "file:///out/example.com-scroll_original.gif",
        "lossy_url": "file:///out/example.com-scroll_lossy-comp.gif",
        "lossless_url": null,
        "ultra_lossy_url": null,
        "frame_count": 87,
        "artifact_size": 1843211,
        "scroll_state": {
            "scrolled_position": 3012.0,
            "page_height": 3000.0,
            "elapsed_time_ms": 8600.0,
            "cycle_count": 76
        },
        "failed_profiles": {"lossless": "[COMPRESS] ..."}
    }

Design Rules:
    - original_url is always present on a successful run
    - Derived URLs are None when not requested or when the profile failed
    - Every failed profile is listed in failed_profiles with its error text
"""

from typing import Dict, Optional

from pydantic import BaseModel, Field


class ScrollSummary(BaseModel):
    """Final ScrollState of the choreography run."""

    scrolled_position: float = Field(..., ge=0.0, description="Final viewport bottom (px)")
    page_height: float = Field(..., description="Final tracked document height (px)")
    elapsed_time_ms: float = Field(..., ge=0.0, description="GIF time consumed (ms)")
    cycle_count: int = Field(..., ge=0, description="Choreography iterations run")


class RecordingResult(BaseModel):
    """
    Result of a recording run.

    Attributes:
        original_url: Locator of the uncompressed GIF
        lossy_url: Locator of the lossy variant, if produced
        lossless_url: Locator of the lossless variant, if produced
        ultra_lossy_url: Locator of the ultra-lossy variant, if produced
        frame_count: Frames appended to the encoder session
        artifact_size: Size of the original GIF in bytes
        scroll_state: Final choreography state (None if scrolling disabled)
        failed_profiles: Profile name -> error text for failed compressions
    """

    original_url: str = Field(..., description="Locator of the original GIF")
    lossy_url: Optional[str] = Field(default=None, description="Lossy variant locator")
    lossless_url: Optional[str] = Field(default=None, description="Lossless variant locator")
    ultra_lossy_url: Optional[str] = Field(default=None, description="Ultra-lossy variant locator")
    frame_count: int = Field(..., ge=0, description="Frames in the original GIF")
    artifact_size: int = Field(..., ge=0, description="Original GIF size in bytes")
    scroll_state: Optional[ScrollSummary] = Field(default=None, description="Final scroll state")
    failed_profiles: Dict[str, str] = Field(
        default_factory=dict,
        description="Compression profiles that failed, with their error",
    )
