"""Validation utilities shared by the pipeline and its callers."""

from __future__ import annotations

import math
from pathlib import Path

from platedetector.core.frame import FORMAT_YUV420_PLANAR, Frame
from platedetector.core.models import BoundingBox, ValidationResult

CASCADE_EXTENSIONS = {".xml"}
CASCADE_ROOT_TAG = b"<opencv_storage>"
HEADER_PROBE_BYTES = 512
LARGE_FRAME_DIMENSION = 8192


class ValidationUtils:
    """Non-raising checks that report errors and warnings."""

    @staticmethod
    def validate_frame(
        frame: Frame, required_formats: set[str] | None = None
    ) -> ValidationResult:
        """Check a frame is usable by the detection pipeline."""
        result = ValidationResult(is_valid=True)
        width, height = frame.size
        result.context["width"] = width
        result.context["height"] = height
        result.context["format"] = frame.format

        if required_formats is not None and frame.format not in required_formats:
            result.add_error(
                f"Unsupported frame format: {frame.format}. "
                f"Expected one of {sorted(required_formats)}"
            )

        if frame.format == FORMAT_YUV420_PLANAR:
            if width % 2 or height % 2:
                result.add_error(
                    f"YUV 4:2:0 frames need even dimensions, got {width}x{height}"
                )
            elif frame.data.size != frame.expected_yuv420_length:
                result.add_error(
                    f"YUV 4:2:0 buffer length {frame.data.size} does not match "
                    f"{frame.expected_yuv420_length} for {width}x{height}"
                )

        if width > LARGE_FRAME_DIMENSION or height > LARGE_FRAME_DIMENSION:
            result.add_warning(f"Very large frame: {width}x{height}")

        return result

    @staticmethod
    def validate_scale_factor(
        factor: float, *, allow_identity: bool = False
    ) -> ValidationResult:
        """Scale factors must upscale; 1.0 is accepted only as "no resize"."""
        result = ValidationResult(is_valid=True)

        if not math.isfinite(factor):
            result.add_error(f"Scale factor must be finite, got {factor}")
            return result

        if allow_identity:
            if factor < 1.0:
                result.add_error(f"Scale factor must be >= 1.0, got {factor}")
        elif factor <= 1.0:
            result.add_error(f"Scale factor must be > 1.0, got {factor}")

        if factor > 2.0:
            result.add_warning(
                f"Large scale factor {factor} will slow detection considerably"
            )

        return result

    @staticmethod
    def validate_classifier_file(classifier_path: Path) -> ValidationResult:
        """Check a cascade model file exists and looks like OpenCV storage."""
        result = ValidationResult(is_valid=True)

        if not classifier_path.exists():
            result.add_error(f"Classifier file not found: {classifier_path}")
            return result

        if not classifier_path.is_file():
            result.add_error(f"Classifier path is not a file: {classifier_path}")
            return result

        if classifier_path.suffix.lower() not in CASCADE_EXTENSIONS:
            result.add_warning(f"Unusual classifier extension: {classifier_path.suffix}")

        try:
            with classifier_path.open("rb") as f:
                header = f.read(HEADER_PROBE_BYTES)
        except OSError as e:
            result.add_error(f"Cannot read classifier file: {e}")
            return result

        if not header:
            result.add_error("Classifier file is empty")
        elif CASCADE_ROOT_TAG not in header:
            result.add_warning("Classifier file has no <opencv_storage> header")

        result.context["file_size"] = classifier_path.stat().st_size
        return result

    @staticmethod
    def validate_bounding_box(
        bbox: BoundingBox, frame_size: tuple[int, int] | None = None
    ) -> ValidationResult:
        """Check a detected region against the frame it was found in."""
        result = ValidationResult(is_valid=True)

        if frame_size is not None:
            frame_width, frame_height = frame_size

            if bbox.x2 > frame_width:
                result.add_error(
                    f"Bounding box extends beyond frame width: "
                    f"{bbox.x2} > {frame_width}"
                )
            if bbox.y2 > frame_height:
                result.add_error(
                    f"Bounding box extends beyond frame height: "
                    f"{bbox.y2} > {frame_height}"
                )

        aspect_ratio = bbox.width / bbox.height
        if aspect_ratio < 1.0:
            result.add_warning(f"Taller than wide for a plate: {aspect_ratio:.2f}:1")

        return result
