"""Configuration model for the plate detection pipeline."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

from platedetector.core.constants import (
    DEFAULT_BOX_COLOR,
    DEFAULT_BOX_THICKNESS,
    DEFAULT_FONT_SCALE,
    DEFAULT_LABEL_OFFSET,
    DEFAULT_LABEL_TEXT,
    DEFAULT_MIN_NEIGHBORS,
    DEFAULT_SCALE_FACTOR,
    DEFAULT_TEXT_THICKNESS,
    INTERPOLATION_MODES,
)

logger = logging.getLogger(__name__)


class DetectionConfig(BaseModel):
    """Tuning knobs for resizing, cascade search and annotation.

    ``resize_factor`` and ``search_scale_factor`` used to be one value. They
    default to the same number so results match the historical behaviour.
    """

    resize_factor: float = Field(
        DEFAULT_SCALE_FACTOR,
        ge=1.0,
        description="Uniform upscale applied before detection (1.0 = no resize)",
    )
    search_scale_factor: float = Field(
        DEFAULT_SCALE_FACTOR,
        gt=1.0,
        description="Per-step window scale increment of the cascade search",
    )
    min_neighbors: int = Field(
        DEFAULT_MIN_NEIGHBORS,
        ge=0,
        description="Overlapping raw hits required to report a region",
    )
    min_size: tuple[int, int] | None = Field(
        None, description="Smallest (width, height) searched; classifier default"
    )
    max_size: tuple[int, int] | None = Field(
        None, description="Largest (width, height) searched; classifier default"
    )
    interpolation: str = Field("INTER_LINEAR", description="OpenCV resize mode")

    label_text: str = Field(DEFAULT_LABEL_TEXT, min_length=1)
    label_offset: tuple[int, int] = DEFAULT_LABEL_OFFSET
    box_color: tuple[int, int, int] = DEFAULT_BOX_COLOR
    box_thickness: int = Field(DEFAULT_BOX_THICKNESS, ge=1)
    font_scale: float = Field(DEFAULT_FONT_SCALE, gt=0)
    text_thickness: int = Field(DEFAULT_TEXT_THICKNESS, ge=1)

    model_config = {"frozen": True}

    @field_validator("min_size", "max_size")
    @classmethod
    def validate_size(cls, v: tuple[int, int] | None) -> tuple[int, int] | None:
        """Search size bounds must be positive when given."""
        if v is not None and (v[0] <= 0 or v[1] <= 0):
            msg = f"Search size bounds must be positive, got {v}"
            raise ValueError(msg)
        return v

    @field_validator("interpolation")
    @classmethod
    def validate_interpolation(cls, v: str) -> str:
        """Validate interpolation mode."""
        if v not in INTERPOLATION_MODES:
            msg = f"Invalid interpolation: {v}. Must be one of {INTERPOLATION_MODES}"
            raise ValueError(msg)
        return v

    @field_validator("box_color")
    @classmethod
    def validate_color(cls, v: tuple[int, int, int]) -> tuple[int, int, int]:
        """Each BGR channel must fit in a byte."""
        if not all(0 <= channel <= 255 for channel in v):
            msg = f"Color channels must be in [0, 255], got {v}"
            raise ValueError(msg)
        return v

    @classmethod
    def with_scale_factor(cls, scale_factor: float) -> DetectionConfig:
        """Use one value for both resize and search scale."""
        return cls(resize_factor=scale_factor, search_scale_factor=scale_factor)

    @classmethod
    def from_json_file(cls, path: Path) -> DetectionConfig:
        """Load a configuration saved with ``to_json_file``."""
        if not path.exists():
            msg = f"Config file not found: {path}"
            raise FileNotFoundError(msg)

        config = cls.model_validate_json(path.read_text(encoding="utf-8"))
        msg = f"Loaded detection config from {path}"
        logger.debug(msg)
        return config

    def to_json_file(self, path: Path) -> None:
        """Write the configuration as JSON."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("w", encoding="utf-8") as f:
            json.dump(self.model_dump(mode="json"), f, indent=2)
