"""Cascade classifier resource used by the plate detection pipeline."""

from __future__ import annotations

import logging
import shutil
import time
from pathlib import Path
from types import TracebackType
from typing import Any

import cv2

from platedetector.core.constants import DEFAULT_CLASSIFIER_NAME
from platedetector.core.exceptions import ConversionError, InputError, ResourceError
from platedetector.core.frame import FORMAT_GRAY, Frame
from platedetector.core.models import BoundingBox
from platedetector.utils.validation import ValidationUtils

logger = logging.getLogger(__name__)


def bundled_cascade_dir() -> Path | None:
    """Directory of the cascade models shipped with opencv-python, if any."""
    data = getattr(cv2, "data", None)
    haarcascades = getattr(data, "haarcascades", None)
    return Path(haarcascades) if haarcascades else None


def resolve_classifier_path(name_or_path: str | Path = DEFAULT_CLASSIFIER_NAME) -> Path:
    """Find a cascade model by path, or by file name in OpenCV's bundled models."""
    candidate = Path(name_or_path)
    if candidate.exists():
        return candidate

    cascade_dir = bundled_cascade_dir()
    if cascade_dir is not None and candidate.name == str(name_or_path):
        bundled = cascade_dir / candidate.name
        if bundled.exists():
            return bundled

    msg = f"Classifier file not found: {name_or_path}"
    logger.error(msg)
    raise ResourceError(msg, error_code="classifier_missing")


def stage_classifier(source: str | Path, target_dir: Path) -> Path:
    """Copy a cascade model into ``target_dir`` and return the copy's path.

    Overwrites an existing copy so a stale model never shadows the source.
    """
    source_path = resolve_classifier_path(source)
    target_dir.mkdir(parents=True, exist_ok=True)
    target_path = target_dir / source_path.name

    try:
        shutil.copyfile(source_path, target_path)
    except OSError as e:
        msg = f"Error staging classifier {source_path} to {target_dir}: {e}"
        logger.exception(msg)
        raise ResourceError(msg, error_code="classifier_staging") from e

    msg = f"Staged classifier {source_path.name} to {target_path}"
    logger.debug(msg)
    return target_path


class PlateClassifier:
    """A loaded Haar cascade, reusable across any number of detections.

    Use it as a context manager or call ``close()`` when done. Instances are
    not shared between threads; give each worker its own classifier.
    """

    def __init__(self, classifier_path: str | Path) -> None:
        self.path = Path(classifier_path)

        validation = ValidationUtils.validate_classifier_file(self.path)
        if not validation.is_valid:
            msg = f"Cannot load classifier {self.path}: {'; '.join(validation.errors)}"
            logger.error(msg)
            raise ResourceError(msg, error_code="classifier_missing")
        for warning in validation.warnings:
            logger.warning(warning)

        cascade_type = getattr(cv2, "CascadeClassifier", None)
        if cascade_type is None:
            msg = f"OpenCV {cv2.__version__} has no cascade classifier support"
            logger.error(msg)
            raise ResourceError(msg, error_code="classifier_unsupported")

        start_time = time.time()
        try:
            cascade = cascade_type(str(self.path))
        except cv2.error as e:
            msg = f"Malformed classifier file {self.path}: {e}"
            logger.exception(msg)
            raise ResourceError(msg, error_code="classifier_malformed") from e

        if cascade.empty():
            msg = f"Malformed classifier file {self.path}: cascade is empty"
            logger.error(msg)
            raise ResourceError(msg, error_code="classifier_malformed")

        self._cascade: Any = cascade
        msg = f"Loaded classifier {self.path.name} in {time.time() - start_time:.3f}s"
        logger.info(msg)

    @classmethod
    def load(cls, name_or_path: str | Path = DEFAULT_CLASSIFIER_NAME) -> PlateClassifier:
        """Resolve a model by path or bundled name and load it."""
        return cls(resolve_classifier_path(name_or_path))

    @property
    def closed(self) -> bool:
        return self._cascade is None

    def detect_regions(
        self,
        gray: Frame,
        scale_factor: float,
        min_neighbors: int,
        min_size: tuple[int, int] | None = None,
        max_size: tuple[int, int] | None = None,
    ) -> list[BoundingBox]:
        """Run the multi-scale cascade search over a grayscale frame.

        Regions come back in classifier order and may overlap.
        """
        if self._cascade is None:
            msg = f"Classifier {self.path.name} has been closed"
            raise ResourceError(msg, error_code="classifier_closed")

        if gray.format != FORMAT_GRAY:
            msg = f"Cascade search needs a grayscale frame, got {gray.format}"
            raise InputError(msg, error_code="unsupported_format")

        if scale_factor <= 1.0:
            msg = f"Search scale factor must be > 1.0, got {scale_factor}"
            raise InputError(msg, error_code="invalid_scale")

        options: dict[str, Any] = {
            "scaleFactor": scale_factor,
            "minNeighbors": min_neighbors,
        }
        if min_size is not None:
            options["minSize"] = min_size
        if max_size is not None:
            options["maxSize"] = max_size

        try:
            rects = self._cascade.detectMultiScale(gray.data, **options)
        except cv2.error as e:
            msg = f"Cascade search rejected {gray}: {e}"
            logger.exception(msg)
            raise ConversionError(msg, error_code="cascade_search") from e

        return [BoundingBox.from_rect(rect) for rect in rects]

    def close(self) -> None:
        """Release the loaded cascade. Safe to call more than once."""
        if self._cascade is not None:
            self._cascade = None
            msg = f"Released classifier {self.path.name}"
            logger.debug(msg)

    def __enter__(self) -> PlateClassifier:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "loaded"
        return f"PlateClassifier(path={str(self.path)!r}, {state})"
