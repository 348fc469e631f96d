"""Core data models for the plate detector."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field, field_validator


class BoundingBox(BaseModel):
    """Represents a rectangular region in pixel coordinates."""

    x: int = Field(..., ge=0, description="Left coordinate (0-based)")
    y: int = Field(..., ge=0, description="Top coordinate (0-based)")
    width: int = Field(..., gt=0, description="Box width (must be > 0)")
    height: int = Field(..., gt=0, description="Box height (must be > 0)")

    model_config = {
        "frozen": True,  # Make immutable
    }

    @property
    def area(self) -> int:
        """Calculate the area of the bounding box."""
        return self.width * self.height

    @property
    def x2(self) -> int:
        """Get the right coordinate."""
        return self.x + self.width

    @property
    def y2(self) -> int:
        """Get the bottom coordinate."""
        return self.y + self.height

    @property
    def top_left(self) -> tuple[int, int]:
        return (self.x, self.y)

    def overlaps(self, other: BoundingBox) -> bool:
        """Check if this bounding box overlaps with another."""
        return not (
            self.x2 <= other.x
            or other.x2 <= self.x
            or self.y2 <= other.y
            or other.y2 <= self.y
        )

    def intersection(self, other: BoundingBox) -> BoundingBox | None:
        """Calculate the intersection with another bounding box."""
        if not self.overlaps(other):
            return None

        x1 = max(self.x, other.x)
        y1 = max(self.y, other.y)
        x2 = min(self.x2, other.x2)
        y2 = min(self.y2, other.y2)

        return BoundingBox(x=x1, y=y1, width=x2 - x1, height=y2 - y1)

    def iou(self, other: BoundingBox) -> float:
        """Calculate Intersection over Union with another bounding box."""
        intersection_box = self.intersection(other)
        if intersection_box is None:
            return 0.0

        intersection_area = intersection_box.area
        union_area = self.area + other.area - intersection_area

        return intersection_area / union_area if union_area > 0 else 0.0

    def rescale(self, factor: float) -> BoundingBox:
        """Multiply position and size by ``factor`` (origin-anchored).

        Used to move a box between the resized detection frame and the
        source frame, e.g. ``box.rescale(1 / resize_factor)``.
        """
        if factor <= 0:
            msg = f"Rescale factor must be positive, got {factor}"
            raise ValueError(msg)

        return BoundingBox(
            x=max(0, round(self.x * factor)),
            y=max(0, round(self.y * factor)),
            width=max(1, round(self.width * factor)),
            height=max(1, round(self.height * factor)),
        )

    def clip(self, frame_width: int, frame_height: int) -> BoundingBox:
        """Clip the bounding box to fit within frame dimensions."""
        x = max(0, min(self.x, frame_width - 1))
        y = max(0, min(self.y, frame_height - 1))
        x2 = max(x + 1, min(self.x2, frame_width))
        y2 = max(y + 1, min(self.y2, frame_height))

        return BoundingBox(x=x, y=y, width=x2 - x, height=y2 - y)

    @classmethod
    def from_rect(cls, rect: Any) -> BoundingBox:
        """Create from an OpenCV ``(x, y, w, h)`` rectangle."""
        x, y, w, h = (int(v) for v in rect)
        return cls(x=x, y=y, width=w, height=h)

    def __str__(self) -> str:
        """Return string representation."""
        return f"BoundingBox(x={self.x}, y={self.y}, w={self.width}, h={self.height})"

    def __repr__(self) -> str:
        """Return detailed representation."""
        return (
            f"BoundingBox(x={self.x}, y={self.y}, width={self.width}, "
            f"height={self.height}, area={self.area})"
        )


class ValidationResult(BaseModel):
    """Result of validation operations with errors and warnings."""

    is_valid: bool = Field(..., description="Whether validation passed")
    errors: list[str] = Field(
        default_factory=list, description="List of validation errors"
    )
    warnings: list[str] = Field(
        default_factory=list, description="List of validation warnings"
    )
    context: dict[str, str | int | float | bool] = Field(
        default_factory=dict,
        description="Additional context about validation",
    )

    def add_error(self, error: str) -> None:
        """Add an error message and mark as invalid."""
        self.errors.append(error)
        self.is_valid = False

    def add_warning(self, warning: str) -> None:
        """Add a warning message without affecting validity."""
        self.warnings.append(warning)

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Merge with another validation result."""
        return ValidationResult(
            is_valid=self.is_valid and other.is_valid,
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
            context={**self.context, **other.context},
        )

    @field_validator("errors", "warnings")
    @classmethod
    def validate_messages(cls, v: list[str]) -> list[str]:
        """Ensure all messages are non-empty strings."""
        return [msg for msg in v if msg and isinstance(msg, str)]

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    def raise_if_invalid(self, exception_class: type[Exception] = ValueError) -> None:
        """Raise an exception if validation failed."""
        if not self.is_valid:
            error_msg = f"Validation failed: {'; '.join(self.errors)}"
            raise exception_class(error_msg)

    def __str__(self) -> str:
        """Return string representation."""
        status = "valid" if self.is_valid else "invalid"
        return (
            f"ValidationResult({status}, {len(self.errors)} errors, "
            f"{len(self.warnings)} warnings)"
        )


class DetectionResult(BaseModel):
    """Plate regions found in a single frame.

    Regions are expressed in the coordinate space of the frame that was handed
    to the classifier (the resized frame), in the order the classifier
    returned them. Overlapping regions are not merged.
    """

    detections: list[BoundingBox] = Field(
        default_factory=list,
        description="Detected plate regions, classifier order",
    )
    frame_size: tuple[int, int] = Field(
        ..., description="(width, height) of the frame the regions refer to"
    )
    resize_factor: float = Field(
        default=1.0, ge=1.0, description="Factor applied to the source frame"
    )
    detection_time: float = Field(..., ge=0, description="Processing time in seconds")
    detector_type: str = Field(..., description="Which detector produced this")
    frame_metadata: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional frame information",
    )

    @field_validator("frame_size")
    @classmethod
    def validate_frame_size(cls, v: tuple[int, int]) -> tuple[int, int]:
        """Frame dimensions must be positive."""
        width, height = v
        if width <= 0 or height <= 0:
            msg = f"Frame size must be positive, got {width}x{height}"
            raise ValueError(msg)
        return v

    @property
    def regions(self) -> list[BoundingBox]:
        """Get all detected regions."""
        return list(self.detections)

    @property
    def detection_count(self) -> int:
        """Get the number of detections."""
        return len(self.detections)

    @property
    def has_detections(self) -> bool:
        """Check if there are any detections."""
        return len(self.detections) > 0

    @property
    def source_frame_size(self) -> tuple[int, int]:
        """Approximate (width, height) of the frame before resizing."""
        width, height = self.frame_size
        return (
            max(1, round(width / self.resize_factor)),
            max(1, round(height / self.resize_factor)),
        )

    def to_source_coordinates(self) -> list[BoundingBox]:
        """Map regions back to the source frame, clipped to its bounds."""
        source_width, source_height = self.source_frame_size
        factor = 1.0 / self.resize_factor
        return [
            region.rescale(factor).clip(source_width, source_height)
            for region in self.detections
        ]

    def best_overlap(self, target: BoundingBox) -> float:
        """Highest IoU between ``target`` and any region, in source coordinates."""
        return max(
            (region.iou(target) for region in self.to_source_coordinates()),
            default=0.0,
        )

    def __str__(self) -> str:
        """Return string representation."""
        width, height = self.frame_size
        return (
            f"DetectionResult({self.detection_count} plates in {width}x{height}, "
            f"time={self.detection_time:.3f}s)"
        )

    def __repr__(self) -> str:
        """Return detailed representation."""
        return (
            f"DetectionResult(detections={self.detection_count}, "
            f"detector={self.detector_type}, frame_size={self.frame_size}, "
            f"time={self.detection_time:.3f}s)"
        )
