"""Tests for the cascade classifier resource."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import cv2
import numpy as np
import pytest

from platedetector.core.constants import DEFAULT_CLASSIFIER_NAME
from platedetector.core.exceptions import ConversionError, InputError, ResourceError
from platedetector.core.frame import Frame
from platedetector.core.models import BoundingBox
from platedetector.detection.classifier import (
    PlateClassifier,
    bundled_cascade_dir,
    resolve_classifier_path,
    stage_classifier,
)

EMPTY_STORAGE = '<?xml version="1.0"?>\n<opencv_storage>\n</opencv_storage>\n'


@pytest.fixture
def gray_frame() -> Frame:
    return Frame.from_gray(np.zeros((120, 240), dtype=np.uint8))


class TestResolveClassifierPath:
    """Test locating cascade models."""

    def test_bundled_name(self) -> None:
        """Test a bare name resolves into OpenCV's data directory."""
        path = resolve_classifier_path(DEFAULT_CLASSIFIER_NAME)
        assert path.parent == bundled_cascade_dir()
        assert path.is_file()

    def test_explicit_path(self, tmp_path: Path) -> None:
        """Test an existing path is returned as-is."""
        model = tmp_path / "plates.xml"
        model.write_text(EMPTY_STORAGE)
        assert resolve_classifier_path(model) == model

    def test_missing(self, tmp_path: Path) -> None:
        """Test unknown models raise ResourceError."""
        with pytest.raises(ResourceError, match="Classifier file not found") as exc_info:
            resolve_classifier_path(tmp_path / "missing.xml")
        assert exc_info.value.error_code == "classifier_missing"


class TestStageClassifier:
    """Test copying models next to the runner."""

    def test_copies_bundled_model(self, tmp_path: Path) -> None:
        """Test the staged copy matches the source."""
        target = stage_classifier(DEFAULT_CLASSIFIER_NAME, tmp_path / "models")

        assert target == tmp_path / "models" / DEFAULT_CLASSIFIER_NAME
        source = resolve_classifier_path(DEFAULT_CLASSIFIER_NAME)
        assert target.read_bytes() == source.read_bytes()

    def test_overwrites_stale_copy(self, tmp_path: Path) -> None:
        """Test an existing copy is replaced."""
        source = tmp_path / "plates.xml"
        source.write_text(EMPTY_STORAGE)
        stale = tmp_path / "models" / "plates.xml"
        stale.parent.mkdir()
        stale.write_text("stale")

        stage_classifier(source, tmp_path / "models")

        assert stale.read_text() == EMPTY_STORAGE


class TestPlateClassifier:
    """Test loading and using a cascade."""

    def test_load_bundled(self) -> None:
        """Test the bundled plate cascade loads."""
        with PlateClassifier.load() as classifier:
            assert classifier.closed is False
            assert "loaded" in repr(classifier)
        assert classifier.closed is True

    def test_missing_file(self, tmp_path: Path) -> None:
        """Test a missing model file."""
        with pytest.raises(ResourceError) as exc_info:
            PlateClassifier(tmp_path / "missing.xml")
        assert exc_info.value.error_code == "classifier_missing"

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test an empty model file."""
        model = tmp_path / "empty.xml"
        model.touch()
        with pytest.raises(ResourceError, match="Classifier file is empty"):
            PlateClassifier(model)

    def test_malformed_file(self, tmp_path: Path) -> None:
        """Test storage without a cascade is rejected."""
        model = tmp_path / "plates.xml"
        model.write_text(EMPTY_STORAGE)
        with pytest.raises(ResourceError, match="Malformed classifier") as exc_info:
            PlateClassifier(model)
        assert exc_info.value.error_code == "classifier_malformed"

    def test_opencv_without_cascade_support(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        """Test an OpenCV build lacking cascades raises ResourceError."""
        path = resolve_classifier_path(DEFAULT_CLASSIFIER_NAME)
        monkeypatch.delattr(cv2, "CascadeClassifier")

        with pytest.raises(ResourceError, match="no cascade classifier support") as exc_info:
            PlateClassifier(path)
        assert exc_info.value.error_code == "classifier_unsupported"

    def test_blank_frame_has_no_regions(self, gray_frame: Frame) -> None:
        """Test a uniform frame yields nothing."""
        with PlateClassifier.load() as classifier:
            assert classifier.detect_regions(gray_frame, 1.05, 7) == []

    def test_detect_regions_options(self, gray_frame: Frame) -> None:
        """Test search options are forwarded and rects converted."""
        with PlateClassifier.load() as classifier:
            cascade = MagicMock()
            cascade.detectMultiScale.return_value = np.array(
                [[10, 20, 60, 20], [5, 5, 30, 10]], dtype=np.int32
            )
            classifier._cascade = cascade

            regions = classifier.detect_regions(
                gray_frame, 1.1, 3, min_size=(30, 10), max_size=(200, 80)
            )

        assert regions == [
            BoundingBox(x=10, y=20, width=60, height=20),
            BoundingBox(x=5, y=5, width=30, height=10),
        ]
        _, kwargs = cascade.detectMultiScale.call_args
        assert kwargs == {
            "scaleFactor": 1.1,
            "minNeighbors": 3,
            "minSize": (30, 10),
            "maxSize": (200, 80),
        }

    def test_size_bounds_omitted_by_default(self, gray_frame: Frame) -> None:
        """Test the classifier's own size defaults apply when unset."""
        with PlateClassifier.load() as classifier:
            cascade = MagicMock()
            cascade.detectMultiScale.return_value = ()
            classifier._cascade = cascade

            assert classifier.detect_regions(gray_frame, 1.05, 7) == []

        _, kwargs = cascade.detectMultiScale.call_args
        assert "minSize" not in kwargs
        assert "maxSize" not in kwargs

    def test_requires_grayscale(self) -> None:
        """Test color frames are rejected."""
        frame = Frame.from_bgr(np.zeros((10, 10, 3), dtype=np.uint8))
        with PlateClassifier.load() as classifier:
            with pytest.raises(InputError, match="needs a grayscale frame"):
                classifier.detect_regions(frame, 1.05, 7)

    @pytest.mark.parametrize("scale", [1.0, 0.5])
    def test_invalid_scale(self, gray_frame: Frame, scale: float) -> None:
        """Test the search scale must grow the window."""
        with PlateClassifier.load() as classifier:
            with pytest.raises(InputError) as exc_info:
                classifier.detect_regions(gray_frame, scale, 7)
        assert exc_info.value.error_code == "invalid_scale"

    def test_opencv_failure_is_wrapped(self, gray_frame: Frame) -> None:
        """Test cascade search errors become ConversionError."""
        with PlateClassifier.load() as classifier:
            cascade = MagicMock()
            cascade.detectMultiScale.side_effect = cv2.error("bad")
            classifier._cascade = cascade

            with pytest.raises(ConversionError, match="Cascade search rejected"):
                classifier.detect_regions(gray_frame, 1.05, 7)

    def test_closed_classifier(self, gray_frame: Frame) -> None:
        """Test a released classifier cannot search."""
        classifier = PlateClassifier.load()
        classifier.close()
        classifier.close()

        with pytest.raises(ResourceError) as exc_info:
            classifier.detect_regions(gray_frame, 1.05, 7)
        assert exc_info.value.error_code == "classifier_closed"
        assert "closed" in repr(classifier)
