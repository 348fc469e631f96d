"""Utils module - Common utilities and helper functions."""

from .image import ImageUtils
from .system import SystemUtils
from .validation import ValidationUtils

__all__ = [
    "ImageUtils",
    "SystemUtils",
    "ValidationUtils",
]
