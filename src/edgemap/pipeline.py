"""Edge map pipeline: detect, normalize and save.

The detection method is chosen once per run:

- ``sobel`` computes gradient magnitudes, which are wider than 8 bits and are
  rescaled into 0-255 by the normalizer.
- ``canny`` produces a binary 0/255 mask, which is already displayable and
  is returned unchanged.

There is no fallback between the two branches. Any failure propagates to the
caller, and the output file is only written once the full image exists.
"""

from __future__ import annotations

import logging
from pathlib import Path

import numpy as np

from .buffers import NormalizedImage
from .config import EdgeConfig
from .image_io import load_grayscale, save_image
from .methods import (
    DEFAULT_HIGH_THRESHOLD,
    DEFAULT_LOW_THRESHOLD,
    DEFAULT_SIGMA,
    EdgeMethod,
    canny_edges,
    sobel_gradients,
)
from .normalize import normalize, scan_range

logger = logging.getLogger(__name__)


def detect_edges(
    gray: np.ndarray,
    method: EdgeMethod | str = EdgeMethod.GRADIENT_MAGNITUDE,
    low: float = DEFAULT_LOW_THRESHOLD,
    high: float = DEFAULT_HIGH_THRESHOLD,
    sigma: float = DEFAULT_SIGMA,
    workers: int | None = None,
) -> NormalizedImage:
    """Produce an 8-bit edge map from a grayscale image.

    Args:
        gray: 2D uint8 grayscale image.
        method: Detection strategy.
        low: Lower Canny threshold (canny only).
        high: Upper Canny threshold (canny only).
        sigma: Canny pre-smoothing sigma (canny only).
        workers: Threads used to scan and rescale gradients (sobel only).

    Returns:
        NormalizedImage with the same width and height as ``gray``.
    """
    method = EdgeMethod.parse(method)
    logger.debug("Detecting edges with %s on image of shape %s", method.value, gray.shape)

    if method is EdgeMethod.GRADIENT_MAGNITUDE:
        buffer = sobel_gradients(gray)
        value_range = scan_range(buffer, workers=workers)
        logger.debug("Gradient range: min=%d max=%d", value_range.min, value_range.max)
        return normalize(buffer, value_range, workers=workers)

    mask = canny_edges(gray, low=low, high=high, sigma=sigma)
    return NormalizedImage(mask)


class EdgePipeline:
    """Runs edge detection for one configuration.

    Example usage:
        pipeline = EdgePipeline(EdgeConfig(method=EdgeMethod.THRESHOLDED_MASK))
        result = pipeline.process_image("photo.jpg", "edges.png")
        if result.degenerate:
            print("No edges found")
    """

    def __init__(self, config: EdgeConfig | None = None) -> None:
        """Initialize pipeline.

        Args:
            config: Detection settings. Defaults to Sobel with default thresholds.
        """
        self.config = config or EdgeConfig()
        self.config.validate()

    def detect(self, gray: np.ndarray) -> NormalizedImage:
        """Detect edges in an already decoded grayscale image."""
        return detect_edges(
            gray,
            method=self.config.method,
            low=self.config.low_threshold,
            high=self.config.high_threshold,
            sigma=self.config.sigma,
            workers=self.config.workers,
        )

    def process_image(self, input_path: Path | str, output_path: Path | str) -> NormalizedImage:
        """Read an image, detect edges and save the edge map.

        Raises:
            DecodeError: If the input cannot be read.
            ImageWriteError: If the output cannot be written.
        """
        gray = load_grayscale(input_path)
        result = self.detect(gray)
        save_image(result.data, output_path)
        logger.info("Saved %s edge map to %s", self.config.method.value, output_path)
        return result
