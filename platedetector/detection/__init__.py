"""Detection module - Cascade classifier and plate detection pipeline."""

from platedetector.detection.classifier import (
    PlateClassifier,
    bundled_cascade_dir,
    resolve_classifier_path,
    stage_classifier,
)
from platedetector.detection.config import DetectionConfig
from platedetector.detection.pipeline import (
    PipelineOutput,
    PlateDetectionPipeline,
    detect,
)

__all__ = [
    "DetectionConfig",
    "PipelineOutput",
    "PlateClassifier",
    "PlateDetectionPipeline",
    "bundled_cascade_dir",
    "detect",
    "resolve_classifier_path",
    "stage_classifier",
]
