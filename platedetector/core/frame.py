"""Frame value type shared by every pipeline stage."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from platedetector.core.constants import FRAME_FORMATS
from platedetector.core.exceptions import InputError

FORMAT_YUV420_PLANAR = "yuv420_planar"
FORMAT_BGR = "bgr"
FORMAT_GRAY = "gray"

BGR_CHANNELS = 3
COLOR_NDIM = 3
GRAY_NDIM = 2


@dataclass(frozen=True)
class Frame:
    """Width x height grid of 8-bit pixel samples in a single format.

    ``yuv420_planar`` frames hold one flat buffer laid out as the Y plane
    followed by the U plane and then the V plane. ``bgr`` frames hold a
    ``(height, width, 3)`` array and ``gray`` frames a ``(height, width)``
    array. The buffer is made read-only on construction; transforms build a
    new frame instead of mutating this one.
    """

    data: np.ndarray
    width: int
    height: int
    format: str

    def __post_init__(self) -> None:
        if self.format not in FRAME_FORMATS:
            msg = (
                f"Unsupported frame format: {self.format}. Must be one of "
                f"{list(FRAME_FORMATS.keys())}"
            )
            raise InputError(msg, error_code="unsupported_format")

        if self.width <= 0 or self.height <= 0:
            msg = f"Frame dimensions must be positive, got {self.width}x{self.height}"
            raise InputError(msg, error_code="invalid_dimensions")

        if not isinstance(self.data, np.ndarray):
            msg = f"Frame data must be a numpy array, got {type(self.data).__name__}"
            raise InputError(msg, error_code="invalid_buffer")

        if self.data.dtype != np.uint8:
            msg = f"Frame data must be uint8, got {self.data.dtype}"
            raise InputError(msg, error_code="invalid_buffer")

        self._validate_shape()

        # Own a read-only buffer so the frame cannot change after construction,
        # not even through a writable base array
        owns_buffer = self.data.base is None and self.data.flags.owndata
        data = (
            self.data
            if owns_buffer and not self.data.flags.writeable
            else self.data.copy()
        )
        data.flags.writeable = False
        object.__setattr__(self, "data", data)

    def _validate_shape(self) -> None:
        """Check the array shape against the declared format."""
        if self.format == FORMAT_BGR:
            expected = (self.height, self.width, BGR_CHANNELS)
            if self.data.shape != expected:
                msg = f"BGR frame must have shape {expected}, got {self.data.shape}"
                raise InputError(msg, error_code="invalid_shape")
        elif self.format == FORMAT_GRAY:
            expected = (self.height, self.width)
            if self.data.shape != expected:
                msg = (
                    f"Grayscale frame must have shape {expected}, "
                    f"got {self.data.shape}"
                )
                raise InputError(msg, error_code="invalid_shape")
        elif self.data.ndim != 1:
            # Planar buffer length is checked by the conversion step
            msg = f"YUV420 frame must be a flat buffer, got {self.data.ndim}D"
            raise InputError(msg, error_code="invalid_shape")

    @property
    def size(self) -> tuple[int, int]:
        """Get frame size as (width, height) tuple."""
        return (int(self.width), int(self.height))

    @property
    def area(self) -> int:
        return int(self.width) * int(self.height)

    @property
    def is_color(self) -> bool:
        """True for formats that carry chroma information."""
        return self.format != FORMAT_GRAY

    @property
    def expected_yuv420_length(self) -> int:
        """Byte count a planar 4:2:0 buffer of this size must have."""
        return self.area + 2 * ((self.width // 2) * (self.height // 2))

    @classmethod
    def from_bgr(cls, image: np.ndarray) -> Frame:
        """Wrap an interleaved BGR image, e.g. the output of ``cv2.imread``."""
        if not isinstance(image, np.ndarray) or image.ndim != COLOR_NDIM:
            msg = "BGR image must be a 3D numpy array"
            raise InputError(msg, error_code="invalid_shape")
        height, width = image.shape[:2]
        return cls(data=image, width=width, height=height, format=FORMAT_BGR)

    @classmethod
    def from_gray(cls, image: np.ndarray) -> Frame:
        """Wrap a single-channel intensity image."""
        if not isinstance(image, np.ndarray) or image.ndim != GRAY_NDIM:
            msg = "Grayscale image must be a 2D numpy array"
            raise InputError(msg, error_code="invalid_shape")
        height, width = image.shape
        return cls(data=image, width=width, height=height, format=FORMAT_GRAY)

    @classmethod
    def from_yuv420(
        cls, buffer: bytes | bytearray | np.ndarray, width: int, height: int
    ) -> Frame:
        """Wrap a flat planar Y, U, V buffer as delivered by a capture stream."""
        if isinstance(buffer, np.ndarray):
            data = buffer.reshape(-1)
        else:
            data = np.frombuffer(bytes(buffer), dtype=np.uint8)
        return cls(data=data, width=width, height=height, format=FORMAT_YUV420_PLANAR)

    @classmethod
    def from_yuv420_planes(
        cls, y_plane: np.ndarray, u_plane: np.ndarray, v_plane: np.ndarray
    ) -> Frame:
        """Assemble a planar frame from separate Y, U and V planes.

        The frame size is taken from the Y plane; each chroma plane must hold
        ``(width // 2) * (height // 2)`` samples.
        """
        if y_plane.ndim != GRAY_NDIM:
            msg = f"Y plane must be 2D, got {y_plane.ndim}D"
            raise InputError(msg, error_code="invalid_shape")

        height, width = y_plane.shape
        chroma_length = (width // 2) * (height // 2)
        for name, plane in (("U", u_plane), ("V", v_plane)):
            if plane.size != chroma_length:
                msg = (
                    f"{name} plane must hold {chroma_length} samples for a "
                    f"{width}x{height} frame, got {plane.size}"
                )
                raise InputError(msg, error_code="invalid_shape")

        buffer = np.concatenate(
            [y_plane.reshape(-1), u_plane.reshape(-1), v_plane.reshape(-1)]
        ).astype(np.uint8, copy=False)
        return cls(
            data=buffer, width=width, height=height, format=FORMAT_YUV420_PLANAR
        )

    def __str__(self) -> str:
        """Return string representation."""
        return f"Frame({self.width}x{self.height}, {self.format})"
