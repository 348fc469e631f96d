"""Tests for core constants."""

from platedetector.core.constants import (
    DEFAULT_BOX_COLOR,
    DEFAULT_CLASSIFIER_NAME,
    DEFAULT_LABEL_OFFSET,
    DEFAULT_MIN_NEIGHBORS,
    DEFAULT_SCALE_FACTOR,
    FRAME_FORMATS,
    INTERPOLATION_MODES,
)


class TestFrameFormats:
    """Test supported frame format constants."""

    def test_frame_formats_exist(self) -> None:
        """Test that all expected formats are defined."""
        assert set(FRAME_FORMATS.keys()) == {"yuv420_planar", "bgr", "gray"}

    def test_formats_have_descriptions(self) -> None:
        """Test that all formats have descriptions."""
        for frame_format, description in FRAME_FORMATS.items():
            assert isinstance(frame_format, str)
            assert len(description) > 0


class TestDetectionDefaults:
    """Test detection default values."""

    def test_scale_factor_upscales(self) -> None:
        """Test the default scale factor is the historical 1.05."""
        assert DEFAULT_SCALE_FACTOR == 1.05

    def test_min_neighbors(self) -> None:
        """Test the neighbor threshold."""
        assert DEFAULT_MIN_NEIGHBORS == 7

    def test_classifier_is_xml(self) -> None:
        """Test the default cascade model name."""
        assert DEFAULT_CLASSIFIER_NAME.endswith(".xml")

    def test_annotation_defaults(self) -> None:
        """Test annotation color and label offset."""
        assert DEFAULT_BOX_COLOR == (0, 255, 255)
        assert DEFAULT_LABEL_OFFSET == (-20, -10)

    def test_linear_interpolation_available(self) -> None:
        """Test the default interpolation mode is listed."""
        assert "INTER_LINEAR" in INTERPOLATION_MODES
