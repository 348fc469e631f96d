"""Core module - Fundamental data structures and models."""

from platedetector.core.constants import (
    DEFAULT_MIN_NEIGHBORS,
    DEFAULT_SCALE_FACTOR,
    FRAME_FORMATS,
    INTERPOLATION_MODES,
)
from platedetector.core.exceptions import (
    ConversionError,
    DetectionError,
    InputError,
    ResourceError,
)
from platedetector.core.frame import (
    FORMAT_BGR,
    FORMAT_GRAY,
    FORMAT_YUV420_PLANAR,
    Frame,
)
from platedetector.core.models import (
    BoundingBox,
    DetectionResult,
    ValidationResult,
)

__all__ = [
    # Models
    "BoundingBox",
    "DetectionResult",
    "Frame",
    "ValidationResult",
    # Errors
    "ConversionError",
    "DetectionError",
    "InputError",
    "ResourceError",
    # Constants
    "DEFAULT_MIN_NEIGHBORS",
    "DEFAULT_SCALE_FACTOR",
    "FORMAT_BGR",
    "FORMAT_GRAY",
    "FORMAT_YUV420_PLANAR",
    "FRAME_FORMATS",
    "INTERPOLATION_MODES",
]
