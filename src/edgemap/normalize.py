"""Range scanning and 8-bit rescaling of gradient magnitude buffers.

A gradient buffer holds magnitudes wider than 8 bits. Before it can be
displayed or saved it is rescaled linearly so that the smallest sample maps
to 0 and the largest to 255:

    out = trunc((in - min) / (max - min) * 255)

The division and multiplication are done in single precision and the result
is truncated, not rounded, so 127.5 becomes 127. A buffer whose samples are
all equal has no usable range and produces an all-black image.

Both the scan and the rescale work on independent row bands, so they can be
spread over a thread pool with ``workers``. numpy releases the GIL for the
per-band reductions, and the merged result is identical to a sequential pass.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from functools import reduce

import numpy as np

from .buffers import GradientBuffer, NormalizedImage, Range

logger = logging.getLogger(__name__)

OUTPUT_MAX = 255.0


def _row_bands(data: np.ndarray, workers: int) -> list[np.ndarray]:
    """Split an array into at most ``workers`` non-empty horizontal bands."""
    bands = np.array_split(data, min(workers, data.shape[0]), axis=0)
    return [band for band in bands if band.size]


def _fold_range(seed: tuple[int, int], rows: Iterable[np.ndarray]) -> tuple[int, int]:
    """Fold rows into a running (min, max) pair."""
    lo, hi = seed
    for row in rows:
        lo = min(lo, int(row.min()))
        hi = max(hi, int(row.max()))
    return lo, hi


def scan_range(buffer: GradientBuffer, workers: int | None = None) -> Range:
    """Find the smallest and largest sample in a buffer.

    The fold starts from ``(V_MAX, 0)`` so the first sample always replaces
    the seed. A single-pixel buffer yields a degenerate range.

    Args:
        buffer: Gradient buffer to scan.
        workers: Number of threads to scan row bands with. None or 1 scans
            sequentially.

    Returns:
        Range covering every sample of the buffer.
    """
    seed = (buffer.v_max, 0)

    if not workers or workers <= 1:
        lo, hi = _fold_range(seed, buffer.rows())
        return Range(lo, hi)

    bands = _row_bands(buffer.data, workers)
    with ThreadPoolExecutor(max_workers=len(bands)) as pool:
        partials = [Range(*pair) for pair in pool.map(lambda b: _fold_range(seed, b), bands)]

    return reduce(Range.combine, partials)


def _rescale_band(band: np.ndarray, value_range: Range) -> np.ndarray:
    shifted = (band - band.dtype.type(value_range.min)).astype(np.float32)
    scaled = shifted / np.float32(value_range.span) * np.float32(OUTPUT_MAX)
    # astype truncates toward zero; the clip only guards float32 rounding
    return np.clip(scaled, 0.0, OUTPUT_MAX).astype(np.uint8)


def normalize(
    buffer: GradientBuffer, value_range: Range, workers: int | None = None
) -> NormalizedImage:
    """Rescale a gradient buffer into an 8-bit image.

    ``value_range`` must be the range scanned from this same buffer.

    Args:
        buffer: Gradient buffer to rescale.
        value_range: Range previously computed by :func:`scan_range`.
        workers: Number of threads to rescale row bands with.

    Returns:
        NormalizedImage of the same shape. If the range is degenerate every
        sample is 0 and ``degenerate`` is set.
    """
    if value_range.is_degenerate:
        logger.warning(
            "No edge detected (min == max == %d). The output image will be blank.",
            value_range.min,
        )
        return NormalizedImage(np.zeros(buffer.shape, dtype=np.uint8), degenerate=True)

    if not workers or workers <= 1:
        return NormalizedImage(_rescale_band(buffer.data, value_range))

    bands = _row_bands(buffer.data, workers)
    with ThreadPoolExecutor(max_workers=len(bands)) as pool:
        parts = list(pool.map(lambda b: _rescale_band(b, value_range), bands))

    return NormalizedImage(np.vstack(parts))


def normalize_to_u8(buffer: GradientBuffer, workers: int | None = None) -> NormalizedImage:
    """Scan a buffer's range and rescale it in one call."""
    value_range = scan_range(buffer, workers=workers)
    logger.debug("Gradient range: min=%d max=%d", value_range.min, value_range.max)
    return normalize(buffer, value_range, workers=workers)
