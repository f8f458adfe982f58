"""Pixel containers passed between the edge detectors and the normalizer."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field

import numpy as np

# Unsigned sample types wide enough to hold unclipped gradient magnitudes
WIDE_DTYPES = (np.uint16, np.uint32, np.uint64)


@dataclass(frozen=True)
class Range:
    """Minimum and maximum sample value of a buffer.

    Attributes:
        min: Smallest sample value.
        max: Largest sample value.
    """

    min: int
    max: int

    def __post_init__(self) -> None:
        if self.min > self.max:
            raise ValueError(f"Range min ({self.min}) must not exceed max ({self.max})")

    @property
    def is_degenerate(self) -> bool:
        """True when every sample has the same value."""
        return self.min == self.max

    @property
    def span(self) -> int:
        return self.max - self.min

    def combine(self, other: Range) -> Range:
        """Merge with a range scanned from another part of the same buffer."""
        return Range(min(self.min, other.min), max(self.max, other.max))


class GradientBuffer:
    """Read-only 2D view over wide unsigned gradient magnitudes.

    The wrapped array must be two-dimensional, non-empty and of an unsigned
    integer type wider than 8 bits. It is marked non-writeable on
    construction so the buffer cannot change after the detector produced it.
    """

    def __init__(self, data: np.ndarray) -> None:
        """Wrap a gradient magnitude array.

        Args:
            data: Array of shape (height, width) with a uint16/uint32/uint64 dtype.

        Raises:
            ValueError: If the array is not 2D, empty or not a wide unsigned type.
        """
        if data.ndim != 2:
            raise ValueError(f"Expected a 2D gradient buffer, got shape {data.shape}")
        if data.size == 0:
            raise ValueError("Gradient buffer must contain at least one pixel")
        if data.dtype.type not in WIDE_DTYPES:
            raise ValueError(
                f"Gradient buffer must be uint16, uint32 or uint64, got {data.dtype}"
            )

        view = data.view()
        view.setflags(write=False)
        self._data = view

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def height(self) -> int:
        return int(self._data.shape[0])

    @property
    def width(self) -> int:
        return int(self._data.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height, self.width)

    @property
    def dtype(self) -> np.dtype:
        return self._data.dtype

    @property
    def v_max(self) -> int:
        """Largest value representable by the sample type."""
        return int(np.iinfo(self._data.dtype).max)

    def rows(self) -> Iterator[np.ndarray]:
        """Iterate over row views, top to bottom."""
        yield from self._data

    def __repr__(self) -> str:
        return f"GradientBuffer(width={self.width}, height={self.height}, dtype={self.dtype})"


@dataclass
class NormalizedImage:
    """8-bit single-channel edge map ready to be encoded.

    Attributes:
        data: Array of shape (height, width) with dtype uint8.
        degenerate: True if the source buffer had a single distinct value and
            the image is therefore entirely black.
    """

    data: np.ndarray
    degenerate: bool = field(default=False)

    def __post_init__(self) -> None:
        if self.data.ndim != 2:
            raise ValueError(f"Expected a 2D image, got shape {self.data.shape}")
        if self.data.dtype != np.uint8:
            raise ValueError(f"Normalized image must be uint8, got {self.data.dtype}")

    @property
    def height(self) -> int:
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        return int(self.data.shape[1])

    @property
    def shape(self) -> tuple[int, int]:
        return (self.height, self.width)
