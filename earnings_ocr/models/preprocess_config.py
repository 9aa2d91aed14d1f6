from __future__ import annotations

from enum import Enum
from typing import Any, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field


class BinarizeMode(str, Enum):
    GLOBAL = "global"
    ADAPTIVE = "adaptive"
    NONE = "none"


class PreprocessConfig(BaseModel):
    """Options for one preprocessing run. Immutable once built."""

    model_config = ConfigDict(frozen=True)

    scale_factor: float = Field(default=2.5, gt=0)
    contrast_clip_percent: float = Field(default=5, ge=0, le=50)
    auto_invert: bool = True
    force_invert: bool = Field(default=False, description="Only honoured when auto_invert is off.")
    invert_cutoff: int = Field(default=128, ge=0, le=255, description="Median below this means dark mode.")
    binarize_mode: BinarizeMode = BinarizeMode.GLOBAL
    binary_threshold: int = Field(default=160, ge=0, le=255)
    adaptive_radius: int = Field(default=25, gt=0)
    adaptive_bias: float = -10
    denoise_radius: int = Field(default=1, ge=0)
    sharpen: bool = True
    sharpen_strength: float = 5.0
    padding_px: int = Field(default=12, ge=0)

    def merged(self, overrides: Optional[Mapping[str, Any]] = None) -> "PreprocessConfig":
        if not overrides:
            return self
        return PreprocessConfig(**{**self.model_dump(), **overrides})
