"""Image utilities for loading, color conversion, resizing and annotation."""

from __future__ import annotations

import logging
import math
from pathlib import Path

import cv2
import numpy as np

from platedetector.core.constants import (
    DEFAULT_BOX_COLOR,
    DEFAULT_BOX_THICKNESS,
    DEFAULT_FONT_SCALE,
    DEFAULT_LABEL_OFFSET,
    DEFAULT_LABEL_TEXT,
    DEFAULT_TEXT_THICKNESS,
    INTERPOLATION_MODES,
)
from platedetector.core.exceptions import ConversionError, InputError
from platedetector.core.frame import (
    FORMAT_BGR,
    FORMAT_GRAY,
    FORMAT_YUV420_PLANAR,
    Frame,
)
from platedetector.core.models import BoundingBox, ValidationResult

logger = logging.getLogger(__name__)

SUPPORTED_IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".bmp", ".webp", ".tiff", ".tif"}


class ImageUtils:
    """Utilities for image loading, format normalization and drawing."""

    @staticmethod
    def load_image(image_path: Path) -> Frame:
        """Decode an image file into a BGR frame."""
        if not image_path.exists():
            msg = f"Image file not found: {image_path}"
            logger.error(msg)
            raise FileNotFoundError(msg)

        image = cv2.imread(str(image_path), cv2.IMREAD_COLOR)
        if image is None:
            msg = f"Failed to decode image: {image_path}"
            logger.error(msg)
            raise ConversionError(msg, error_code="decode_failed")

        msg = f"Loaded image: {image_path}, shape: {image.shape}"
        logger.debug(msg)
        return Frame.from_bgr(image)

    @staticmethod
    def save_image(frame: Frame, output_path: Path, quality: int = 95) -> None:
        """Encode a BGR or grayscale frame to disk."""
        if frame.format == FORMAT_YUV420_PLANAR:
            msg = "Planar YUV frames must be converted before saving"
            raise InputError(msg, error_code="unsupported_format")

        output_path.parent.mkdir(parents=True, exist_ok=True)

        ext = output_path.suffix.lower()
        encode_params = []

        if ext in [".jpg", ".jpeg"]:
            encode_params = [cv2.IMWRITE_JPEG_QUALITY, max(0, min(100, quality))]
        elif ext == ".png":
            # PNG compression level (0-9, where 9 is maximum compression)
            compression = max(0, min(9, (100 - quality) // 11))
            encode_params = [cv2.IMWRITE_PNG_COMPRESSION, compression]
        elif ext == ".webp":
            encode_params = [cv2.IMWRITE_WEBP_QUALITY, max(0, min(100, quality))]

        try:
            success = cv2.imwrite(str(output_path), frame.data, encode_params)
        except cv2.error as e:
            msg = f"Error saving image to {output_path}: {e}"
            logger.exception(msg)
            raise RuntimeError(msg) from e

        if not success:
            msg = f"Failed to save image to: {output_path}"
            logger.error(msg)
            raise RuntimeError(msg)

        msg = f"Saved image to: {output_path}"
        logger.debug(msg)

    @staticmethod
    def yuv420_to_bgr(frame: Frame) -> Frame:
        """Convert a planar Y, U, V frame into an interleaved BGR frame.

        The chroma planes arrive in U, V order. They are interleaved V first to
        form the NV21 layout that OpenCV's conversion expects.
        """
        if frame.format == FORMAT_BGR:
            return frame

        if frame.format != FORMAT_YUV420_PLANAR:
            msg = f"Expected a yuv420_planar frame, got {frame.format}"
            raise InputError(msg, error_code="unsupported_format")

        width, height = frame.size
        if width % 2 or height % 2:
            msg = f"YUV 4:2:0 frames need even dimensions, got {width}x{height}"
            raise ConversionError(msg, error_code="odd_dimensions")

        expected_length = frame.expected_yuv420_length
        if frame.data.size != expected_length:
            msg = (
                f"YUV 4:2:0 buffer for {width}x{height} must hold "
                f"{expected_length} bytes, got {frame.data.size}"
            )
            raise ConversionError(msg, error_code="buffer_length")

        luma_length = width * height
        chroma_length = luma_length // 4
        y_plane = frame.data[:luma_length]
        u_plane = frame.data[luma_length : luma_length + chroma_length]
        v_plane = frame.data[luma_length + chroma_length :]

        interleaved = np.empty(2 * chroma_length, dtype=np.uint8)
        interleaved[0::2] = v_plane
        interleaved[1::2] = u_plane
        nv21 = np.concatenate([y_plane, interleaved]).reshape(height * 3 // 2, width)

        try:
            bgr = cv2.cvtColor(nv21, cv2.COLOR_YUV2BGR_NV21)
        except cv2.error as e:
            msg = f"Error converting YUV frame to BGR: {e}"
            logger.exception(msg)
            raise ConversionError(msg, error_code="color_conversion") from e

        msg = f"Converted {width}x{height} YUV 4:2:0 frame to BGR"
        logger.debug(msg)
        return Frame.from_bgr(bgr)

    @staticmethod
    def to_grayscale(frame: Frame) -> Frame:
        """Convert a frame to single-channel intensity."""
        if frame.format == FORMAT_GRAY:
            return frame

        color = ImageUtils.yuv420_to_bgr(frame)
        try:
            gray = cv2.cvtColor(color.data, cv2.COLOR_BGR2GRAY)
        except cv2.error as e:
            msg = f"Error converting frame to grayscale: {e}"
            logger.exception(msg)
            raise ConversionError(msg, error_code="color_conversion") from e
        return Frame.from_gray(gray)

    @staticmethod
    def scaled_size(width: int, height: int, factor: float) -> tuple[int, int]:
        """Target (width, height) for a uniform scale, never below 1 pixel."""
        return (max(1, round(width * factor)), max(1, round(height * factor)))

    @staticmethod
    def resize_by_factor(
        frame: Frame, factor: float, interpolation: str = "INTER_LINEAR"
    ) -> Frame:
        """Scale both dimensions of a BGR or grayscale frame by ``factor``."""
        if not math.isfinite(factor) or factor <= 0:
            msg = f"Resize factor must be positive and finite, got {factor}"
            raise InputError(msg, error_code="invalid_scale")

        if interpolation not in INTERPOLATION_MODES:
            msg = (
                f"Invalid interpolation: {interpolation}. Must be one of "
                f"{INTERPOLATION_MODES}"
            )
            raise InputError(msg, error_code="invalid_interpolation")

        if frame.format == FORMAT_YUV420_PLANAR:
            msg = "Planar YUV frames must be converted before resizing"
            raise InputError(msg, error_code="unsupported_format")

        if factor == 1.0:
            return frame

        original_width, original_height = frame.size
        target_width, target_height = ImageUtils.scaled_size(
            original_width, original_height, factor
        )

        try:
            resized = cv2.resize(
                frame.data,
                (target_width, target_height),
                interpolation=getattr(cv2, interpolation),
            )
        except cv2.error as e:
            msg = f"Error resizing image: {e}"
            logger.exception(msg)
            raise ConversionError(msg, error_code="resize") from e

        msg = (
            f"Resized image from {original_width}x{original_height} to "
            f"{target_width}x{target_height}"
        )
        logger.debug(msg)

        if frame.format == FORMAT_GRAY:
            return Frame.from_gray(resized)
        return Frame.from_bgr(resized)

    @staticmethod
    def draw_detections(
        frame: Frame,
        regions: list[BoundingBox],
        label_text: str = DEFAULT_LABEL_TEXT,
        label_offset: tuple[int, int] = DEFAULT_LABEL_OFFSET,
        color: tuple[int, int, int] = DEFAULT_BOX_COLOR,
        box_thickness: int = DEFAULT_BOX_THICKNESS,
        font_scale: float = DEFAULT_FONT_SCALE,
        text_thickness: int = DEFAULT_TEXT_THICKNESS,
    ) -> Frame:
        """Burn rectangles and a label into a copy of a BGR frame.

        The label origin is the box's top-left corner shifted by
        ``label_offset`` and is not clamped to the frame.
        """
        if frame.format != FORMAT_BGR:
            msg = f"Annotations are drawn on BGR frames, got {frame.format}"
            raise InputError(msg, error_code="unsupported_format")

        canvas = frame.data.copy()
        offset_x, offset_y = label_offset

        for region in regions:
            cv2.rectangle(
                canvas,
                region.top_left,
                (region.x2 - 1, region.y2 - 1),
                color,
                box_thickness,
            )
            cv2.putText(
                canvas,
                label_text,
                (region.x + offset_x, region.y + offset_y),
                cv2.FONT_HERSHEY_COMPLEX,
                font_scale,
                color,
                text_thickness,
            )

        msg = f"Drew {len(regions)} annotations on {frame}"
        logger.debug(msg)
        return Frame.from_bgr(canvas)

    @staticmethod
    def validate_image_file(image_path: Path) -> ValidationResult:
        """Validate an image file before handing it to the pipeline."""
        result = ValidationResult(is_valid=True)

        if not image_path.exists():
            result.add_error(f"Image file not found: {image_path}")
            return result

        if not image_path.is_file():
            result.add_error(f"Path is not a file: {image_path}")
            return result

        if image_path.suffix.lower() not in SUPPORTED_IMAGE_EXTENSIONS:
            result.add_warning(f"Unusual image extension: {image_path.suffix}")

        try:
            file_size = image_path.stat().st_size
        except OSError as e:
            result.add_error(f"Cannot access file: {e}")
            return result

        if file_size == 0:
            result.add_error("Image file is empty")
            return result

        try:
            frame = ImageUtils.load_image(image_path)
        except (FileNotFoundError, ConversionError, InputError) as e:
            result.add_error(f"Invalid image file: {e}")
            return result

        width, height = frame.size
        result.context["width"] = width
        result.context["height"] = height
        result.context["megapixels"] = round((width * height) / 1_000_000, 2)

        if width < 16 or height < 16:
            result.add_warning(f"Very small image dimensions: {width}x{height}")

        return result
