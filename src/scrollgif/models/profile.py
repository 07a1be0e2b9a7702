"""
Compression Profiles
====================

Named size/quality trade-offs applied by the PostCompressor.

Profiles:
    - LOSSLESS: palette and frame-step optimisation only
    - LOSSY: lossy LZW quantisation (loss level 80) plus optimisation
    - ULTRA_LOSSY: aggressive lossy quantisation (loss level 130)

Example:
    from scrollgif.models.profile import CompressionProfile, ProfileKind

    profile = CompressionProfile.lossy(loss_level=60)
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


class ProfileKind(str, Enum):
    """Compression profile variants."""

    LOSSLESS = "lossless"
    LOSSY = "lossy"
    ULTRA_LOSSY = "ultralossy"


class CompressionProfile(BaseModel):
    """
    Immutable compression request.

    Attributes:
        kind: Which variant of compression to run
        loss_level: Lossy quantisation strength (0 for lossless)
        optimization_level: Optimiser effort (1-3)
    """

    model_config = ConfigDict(frozen=True)

    kind: ProfileKind = Field(..., description="Profile variant")
    loss_level: int = Field(default=0, ge=0, le=200, description="Lossy strength")
    optimization_level: int = Field(default=3, ge=1, le=3, description="Optimiser effort")

    @model_validator(mode="after")
    def _check_loss(self) -> "CompressionProfile":
        if self.kind is ProfileKind.LOSSLESS and self.loss_level != 0:
            raise ValueError("lossless profile cannot have a loss level")
        if self.kind is not ProfileKind.LOSSLESS and self.loss_level == 0:
            raise ValueError(f"{self.kind.value} profile requires a loss level")
        return self

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def is_lossy(self) -> bool:
        return self.kind is not ProfileKind.LOSSLESS

    @classmethod
    def lossless(cls, optimization_level: int = 3) -> "CompressionProfile":
        return cls(kind=ProfileKind.LOSSLESS, optimization_level=optimization_level)

    @classmethod
    def lossy(cls, loss_level: int = 80, optimization_level: int = 3) -> "CompressionProfile":
        return cls(
            kind=ProfileKind.LOSSY,
            loss_level=loss_level,
            optimization_level=optimization_level,
        )

    @classmethod
    def ultra_lossy(cls, loss_level: int = 130, optimization_level: int = 3) -> "CompressionProfile":
        return cls(
            kind=ProfileKind.ULTRA_LOSSY,
            loss_level=loss_level,
            optimization_level=optimization_level,
        )


LOSSLESS = CompressionProfile.lossless()
LOSSY = CompressionProfile.lossy()
ULTRA_LOSSY = CompressionProfile.ultra_lossy()
