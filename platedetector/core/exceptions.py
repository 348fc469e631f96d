"""Exceptions raised by the detection pipeline."""

from __future__ import annotations


class DetectionError(Exception):
    """Base exception for detection-related errors."""

    def __init__(self, message: str, error_code: str | None = None) -> None:
        super().__init__(message)
        self.error_code = error_code


class ResourceError(DetectionError):
    """Classifier model missing, unreadable, malformed or already released."""


class InputError(DetectionError):
    """Frame or parameter rejected before any conversion was attempted."""


class ConversionError(DetectionError):
    """Color conversion or resize rejected the input layout."""
