"""Edge detection strategies and the OpenCV operators behind them."""

from __future__ import annotations

from enum import Enum

import cv2
import numpy as np

from .buffers import GradientBuffer

# Canny defaults
DEFAULT_LOW_THRESHOLD = 50.0
DEFAULT_HIGH_THRESHOLD = 100.0
DEFAULT_SIGMA = 1.4

_U16_MAX = float(np.iinfo(np.uint16).max)


class EdgeMethod(Enum):
    """Which detector produces the edge data."""

    GRADIENT_MAGNITUDE = "sobel"  # Continuous magnitudes, needs normalization
    THRESHOLDED_MASK = "canny"  # Binary 0/255 mask, used as-is

    @classmethod
    def choices(cls) -> list[str]:
        return [member.value for member in cls]

    @classmethod
    def parse(cls, value: EdgeMethod | str) -> EdgeMethod:
        """Resolve a method from a member or its name on the command line.

        Args:
            value: EdgeMethod member or a string such as "sobel" or "canny".

        Returns:
            The matching EdgeMethod.

        Raises:
            ValueError: If the value names no known method.
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            key = value.strip().lower()
            for member in cls:
                if member.value == key:
                    return member
        raise ValueError(f"Unknown edge method: {value!r}. Expected one of {cls.choices()}")


def _check_grayscale(gray: np.ndarray) -> None:
    if gray.ndim != 2:
        raise ValueError(f"Expected grayscale image with shape (H, W), got {gray.shape}")
    if gray.dtype != np.uint8:
        raise ValueError(f"Expected uint8 grayscale image, got {gray.dtype}")


def sobel_gradients(gray: np.ndarray) -> GradientBuffer:
    """Compute the Sobel gradient magnitude of a grayscale image.

    Uses 3x3 kernels with replicated borders. The magnitude is truncated to
    an integer and stored as uint16, which holds the largest possible value
    for an 8-bit input (about 1443) without clipping.

    Args:
        gray: 2D uint8 image.

    Returns:
        GradientBuffer with the same shape as the input.
    """
    _check_grayscale(gray)

    gx = cv2.Sobel(gray, cv2.CV_32F, 1, 0, ksize=3, borderType=cv2.BORDER_REPLICATE)
    gy = cv2.Sobel(gray, cv2.CV_32F, 0, 1, ksize=3, borderType=cv2.BORDER_REPLICATE)
    magnitude = cv2.magnitude(gx, gy)

    return GradientBuffer(np.clip(magnitude, 0.0, _U16_MAX).astype(np.uint16))


def canny_edges(
    gray: np.ndarray,
    low: float = DEFAULT_LOW_THRESHOLD,
    high: float = DEFAULT_HIGH_THRESHOLD,
    sigma: float = DEFAULT_SIGMA,
) -> np.ndarray:
    """Run Gaussian smoothing followed by Canny edge detection.

    Args:
        gray: 2D uint8 image.
        low: Lower hysteresis threshold.
        high: Upper hysteresis threshold, must be greater than ``low``.
        sigma: Standard deviation of the pre-smoothing blur. 0 disables it.

    Returns:
        uint8 mask of the same shape with values 0 and 255.
    """
    _check_grayscale(gray)
    if low < 0:
        raise ValueError(f"Canny thresholds must be non-negative, got low={low}")
    if low >= high:
        raise ValueError(f"Canny low threshold ({low}) must be below high threshold ({high})")

    if sigma > 0:
        gray = cv2.GaussianBlur(gray, (0, 0), sigmaX=sigma, borderType=cv2.BORDER_REPLICATE)

    return cv2.Canny(gray, float(low), float(high), L2gradient=True)
