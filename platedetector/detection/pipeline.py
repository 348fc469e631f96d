"""Plate detection pipeline: normalize, resize, grayscale, search, annotate."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from types import TracebackType
from typing import Any, NamedTuple

from platedetector.core.constants import DEFAULT_SCALE_FACTOR
from platedetector.core.exceptions import DetectionError, InputError
from platedetector.core.frame import FORMAT_BGR, FORMAT_YUV420_PLANAR, Frame
from platedetector.core.models import BoundingBox, DetectionResult, ValidationResult
from platedetector.detection.classifier import PlateClassifier
from platedetector.detection.config import DetectionConfig
from platedetector.utils.image import ImageUtils
from platedetector.utils.system import SystemUtils
from platedetector.utils.validation import ValidationUtils

logger = logging.getLogger(__name__)

DETECTOR_TYPE = "haar_cascade"
INPUT_FORMATS = {FORMAT_BGR, FORMAT_YUV420_PLANAR}


class PipelineOutput(NamedTuple):
    """Annotated frame and detected regions for one invocation.

    ``annotated_frame`` is None when nothing was detected: there is nothing
    to display in that case, not even the unannotated input.
    """

    annotated_frame: Frame | None
    detections: DetectionResult

    @property
    def should_display(self) -> bool:
        return self.annotated_frame is not None


class PlateDetectionPipeline:
    """Runs the cascade plate detector over color frames.

    The pipeline reuses one loaded classifier for every call. It owns the
    classifier only when built with ``from_path``; otherwise the caller
    closes it.
    """

    def __init__(
        self,
        classifier: PlateClassifier,
        config: DetectionConfig | None = None,
        *,
        owns_classifier: bool = False,
    ) -> None:
        SystemUtils.initialize_opencv()

        self.classifier = classifier
        self.config = config or DetectionConfig()
        self._owns_classifier = owns_classifier
        self.detection_stats = {
            "total_frames_processed": 0,
            "total_detections": 0,
            "failed_frames": 0,
            "average_detection_time": 0.0,
        }

    @classmethod
    def from_path(
        cls, classifier_path: str | Path, config: DetectionConfig | None = None
    ) -> PlateDetectionPipeline:
        """Load a classifier and build a pipeline that releases it on close."""
        return cls(PlateClassifier.load(classifier_path), config, owns_classifier=True)

    def detect(self, frame: Frame) -> PipelineOutput:
        """Detect plates in a YUV 4:2:0 camera frame or a decoded BGR image."""
        start_time = time.time()

        try:
            output = self._run(frame, start_time)
        except DetectionError as e:
            self.detection_stats["failed_frames"] += 1
            msg = f"Plate detection failed for {frame}: {e}"
            logger.error(msg)
            raise

        self._update_stats(output.detections)
        msg = f"{output.detections} from {frame}"
        logger.info(msg)
        return output

    def _run(self, frame: Frame, start_time: float) -> PipelineOutput:
        validation = ValidationUtils.validate_frame(frame, required_formats=INPUT_FORMATS)
        if frame.format not in INPUT_FORMATS:
            validation.raise_if_invalid(InputError)
        for warning in validation.warnings:
            logger.warning(warning)

        config = self.config

        # Stage 1: format normalization
        color = ImageUtils.yuv420_to_bgr(frame)

        # Stage 2: uniform resize
        resized = ImageUtils.resize_by_factor(
            color, config.resize_factor, config.interpolation
        )

        # Stage 3: grayscale for the classifier, color kept for annotation
        gray = ImageUtils.to_grayscale(resized)

        # Stage 4: multi-scale cascade search
        regions = self.classifier.detect_regions(
            gray,
            scale_factor=config.search_scale_factor,
            min_neighbors=config.min_neighbors,
            min_size=config.min_size,
            max_size=config.max_size,
        )
        self._check_regions(regions, resized.size)

        result = DetectionResult(
            detections=regions,
            frame_size=resized.size,
            resize_factor=config.resize_factor,
            detection_time=time.time() - start_time,
            detector_type=DETECTOR_TYPE,
            frame_metadata={
                "source_format": frame.format,
                "source_size": frame.size,
                "classifier": self.classifier.path.name,
            },
        )

        if not result.has_detections:
            logger.debug("No plates detected; nothing to display")
            return PipelineOutput(annotated_frame=None, detections=result)

        # Stage 5: annotation on the resized color frame
        annotated = ImageUtils.draw_detections(
            resized,
            result.regions,
            label_text=config.label_text,
            label_offset=config.label_offset,
            color=config.box_color,
            box_thickness=config.box_thickness,
            font_scale=config.font_scale,
            text_thickness=config.text_thickness,
        )
        return PipelineOutput(annotated_frame=annotated, detections=result)

    def _check_regions(
        self, regions: list[BoundingBox], frame_size: tuple[int, int]
    ) -> ValidationResult:
        """Report regions that fall outside the frame or are not plate-shaped."""
        checks = ValidationResult(is_valid=True)
        for region in regions:
            checks = checks.merge(
                ValidationUtils.validate_bounding_box(region, frame_size)
            )

        for error in checks.errors:
            logger.warning(error)
        for warning in checks.warnings:
            logger.debug(warning)
        return checks

    def _update_stats(self, detection_result: DetectionResult) -> None:
        """Update internal performance statistics."""
        self.detection_stats["total_frames_processed"] += 1
        self.detection_stats["total_detections"] += detection_result.detection_count

        current_avg = self.detection_stats["average_detection_time"]
        frame_count = self.detection_stats["total_frames_processed"]
        self.detection_stats["average_detection_time"] = (
            current_avg * (frame_count - 1) + detection_result.detection_time
        ) / frame_count

    def get_detection_stats(self) -> dict[str, Any]:
        """Get pipeline performance statistics."""
        return self.detection_stats.copy()

    def close(self) -> None:
        """Release the classifier if this pipeline loaded it."""
        if self._owns_classifier:
            self.classifier.close()

    def __enter__(self) -> PlateDetectionPipeline:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()


def detect(
    input_frame: Frame,
    classifier_path: str | Path,
    scale_factor: float = DEFAULT_SCALE_FACTOR,
) -> PipelineOutput:
    """Run one detection with a freshly loaded classifier.

    ``scale_factor`` drives both the resize and the cascade search scale.
    Prefer ``PlateDetectionPipeline`` when processing many frames.
    """
    ValidationUtils.validate_scale_factor(scale_factor).raise_if_invalid(InputError)

    config = DetectionConfig.with_scale_factor(scale_factor)
    with PlateDetectionPipeline.from_path(classifier_path, config) as pipeline:
        return pipeline.detect(input_frame)
