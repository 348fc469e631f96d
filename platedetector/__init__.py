"""License plate detection over camera frames and photographs."""

from platedetector.core import (
    BoundingBox,
    ConversionError,
    DetectionError,
    DetectionResult,
    Frame,
    InputError,
    ResourceError,
)
from platedetector.detection import (
    DetectionConfig,
    PipelineOutput,
    PlateClassifier,
    PlateDetectionPipeline,
    detect,
)

__version__ = "0.1.0"

__all__ = [
    "BoundingBox",
    "ConversionError",
    "DetectionConfig",
    "DetectionError",
    "DetectionResult",
    "Frame",
    "InputError",
    "PipelineOutput",
    "PlateClassifier",
    "PlateDetectionPipeline",
    "ResourceError",
    "detect",
]
