"""Tests for edgemap.pipeline module."""

from pathlib import Path
from unittest.mock import patch

import cv2
import numpy as np
import pytest

from edgemap.config import EdgeConfig
from edgemap.image_io import DecodeError, ImageWriteError
from edgemap.methods import EdgeMethod
from edgemap.pipeline import EdgePipeline, detect_edges


@pytest.fixture
def square_image() -> np.ndarray:
    """40x30 gray image with a bright square in the middle."""
    img = np.full((30, 40), 20, dtype=np.uint8)
    img[10:20, 12:28] = 220
    return img


class TestDetectEdges:
    """Tests for detect_edges dispatch."""

    def test_sobel_branch_is_normalized(self, square_image: np.ndarray) -> None:
        result = detect_edges(square_image, EdgeMethod.GRADIENT_MAGNITUDE)

        assert result.shape == square_image.shape
        assert result.data.dtype == np.uint8
        assert result.data.min() == 0
        assert result.data.max() == 255
        assert result.degenerate is False

    def test_sobel_accepts_string_method(self, square_image: np.ndarray) -> None:
        result = detect_edges(square_image, "sobel")
        assert result.data.max() == 255

    def test_sobel_blank_image_is_degenerate(self) -> None:
        result = detect_edges(np.full((3, 3), 42, dtype=np.uint8), EdgeMethod.GRADIENT_MAGNITUDE)
        assert result.degenerate is True
        assert not result.data.any()
        assert result.shape == (3, 3)

    def test_sobel_parallel_matches_sequential(self, square_image: np.ndarray) -> None:
        sequential = detect_edges(square_image, "sobel")
        parallel = detect_edges(square_image, "sobel", workers=4)
        np.testing.assert_array_equal(parallel.data, sequential.data)

    def test_canny_branch_shape_and_values(self, square_image: np.ndarray) -> None:
        result = detect_edges(square_image, EdgeMethod.THRESHOLDED_MASK, low=50.0, high=100.0)

        assert result.shape == square_image.shape
        assert set(np.unique(result.data).tolist()) <= {0, 255}
        assert result.degenerate is False

    def test_canny_mask_passes_through_unchanged(self, square_image: np.ndarray) -> None:
        """The mask is returned as produced by the detector, without rescaling."""
        mask = np.zeros(square_image.shape, dtype=np.uint8)
        mask[5, 5] = 255

        with (
            patch("edgemap.pipeline.canny_edges", return_value=mask) as canny,
            patch("edgemap.pipeline.normalize") as normalize,
            patch("edgemap.pipeline.scan_range") as scan,
        ):
            result = detect_edges(square_image, "canny", low=50.0, high=100.0)

        canny.assert_called_once_with(square_image, low=50.0, high=100.0, sigma=1.4)
        normalize.assert_not_called()
        scan.assert_not_called()
        assert result.data is mask

    def test_canny_matches_direct_detector_output(self, square_image: np.ndarray) -> None:
        from edgemap.methods import canny_edges

        expected = canny_edges(square_image, low=50.0, high=100.0)
        result = detect_edges(square_image, "canny", low=50.0, high=100.0)
        np.testing.assert_array_equal(result.data, expected)

    def test_no_fallback_on_failure(self, square_image: np.ndarray) -> None:
        """A failing detector is not replaced by the other branch."""
        with (
            patch("edgemap.pipeline.canny_edges", side_effect=RuntimeError("boom")),
            patch("edgemap.pipeline.sobel_gradients") as sobel,
        ):
            with pytest.raises(RuntimeError, match="boom"):
                detect_edges(square_image, "canny")
        sobel.assert_not_called()

    def test_unknown_method_raises(self, square_image: np.ndarray) -> None:
        with pytest.raises(ValueError, match="Unknown edge method"):
            detect_edges(square_image, "prewitt")


class TestEdgePipeline:
    """Tests for EdgePipeline file processing."""

    def test_process_image_writes_output(self, tmp_path: Path, square_image: np.ndarray) -> None:
        input_path = tmp_path / "in.png"
        output_path = tmp_path / "out" / "edges.png"
        cv2.imwrite(str(input_path), square_image)

        result = EdgePipeline().process_image(input_path, output_path)

        assert output_path.exists()
        saved = cv2.imread(str(output_path), cv2.IMREAD_UNCHANGED)
        np.testing.assert_array_equal(saved, result.data)

    def test_process_image_canny(self, tmp_path: Path, square_image: np.ndarray) -> None:
        input_path = tmp_path / "in.png"
        output_path = tmp_path / "edges.png"
        cv2.imwrite(str(input_path), square_image)

        config = EdgeConfig(method=EdgeMethod.THRESHOLDED_MASK)
        result = EdgePipeline(config).process_image(input_path, output_path)

        assert (result.data == 255).any()
        assert output_path.exists()

    def test_decode_failure_writes_nothing(self, tmp_path: Path) -> None:
        bad_input = tmp_path / "bad.png"
        bad_input.write_bytes(b"\x00\x01\x02")
        output_path = tmp_path / "edges.png"

        with pytest.raises(DecodeError):
            EdgePipeline().process_image(bad_input, output_path)
        assert not output_path.exists()

    def test_save_failure_propagates(self, tmp_path: Path, square_image: np.ndarray) -> None:
        input_path = tmp_path / "in.png"
        cv2.imwrite(str(input_path), square_image)

        with pytest.raises(ImageWriteError):
            EdgePipeline().process_image(input_path, tmp_path / "edges.unknownext")

    def test_invalid_config_rejected(self) -> None:
        config = EdgeConfig()
        config.low_threshold = 200.0
        with pytest.raises(ValueError, match="below"):
            EdgePipeline(config)
