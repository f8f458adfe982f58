"""Image decoding and encoding with OpenCV."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import cv2
import numpy as np


class DecodeError(ValueError):
    """Input file could not be read as an image."""


class ImageWriteError(OSError):
    """Output image could not be encoded or written."""


def _default_file_mode() -> int:
    """Permission bits a newly created file gets under the current umask."""
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def to_grayscale(image: np.ndarray) -> np.ndarray:
    """Convert a decoded image to a 2D uint8 grayscale array.

    Accepts gray, BGR and BGRA images with 8-bit or 16-bit samples. 16-bit
    samples are scaled down to the 8-bit range.

    Raises:
        DecodeError: If the pixel format is not supported.
    """
    if image.dtype == np.uint16:
        image = np.round(image / 257.0).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise DecodeError(f"Unsupported pixel format: {image.dtype}")

    if image.ndim == 2:
        return image
    if image.ndim == 3:
        channels = image.shape[2]
        if channels == 1:
            return image[:, :, 0]
        if channels == 3:
            return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
        if channels == 4:
            return cv2.cvtColor(image, cv2.COLOR_BGRA2GRAY)

    raise DecodeError(f"Unsupported image shape: {image.shape}")


def load_grayscale(path: Path | str) -> np.ndarray:
    """Read an image file and convert it to grayscale.

    Args:
        path: Path to the input image.

    Returns:
        2D uint8 array with at least one pixel.

    Raises:
        DecodeError: If the file is missing, cannot be decoded or is empty.
    """
    path = Path(path)
    if not path.is_file():
        raise DecodeError(f"Input image not found: {path}")

    img = cv2.imread(str(path), cv2.IMREAD_UNCHANGED)
    if img is None:
        raise DecodeError(f"Could not read image: {path}")

    gray = to_grayscale(img)
    if gray.size == 0:
        raise DecodeError(f"Image has no pixels: {path}")
    return gray


def save_image(image: np.ndarray, path: Path | str) -> Path:
    """Encode an image and write it to disk.

    The format is chosen from the file extension. The encoded bytes are
    written to a temporary file next to the destination and moved into
    place, so a failed save never leaves a truncated output behind.

    Args:
        image: Image array to save.
        path: Destination path.

    Returns:
        The destination path.

    Raises:
        ImageWriteError: If the extension is unsupported or writing fails.
    """
    path = Path(path)
    if not path.suffix:
        raise ImageWriteError(f"Cannot infer image format without a file extension: {path}")

    try:
        ok, encoded = cv2.imencode(path.suffix, image)
    except cv2.error as e:
        raise ImageWriteError(f"Could not encode image as {path.suffix}: {path}") from e
    if not ok:
        raise ImageWriteError(f"Could not encode image as {path.suffix}: {path}")

    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.stem}-", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(encoded.tobytes())
            # mkstemp creates the file as 0600
            os.chmod(tmp_name, _default_file_mode())
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
    except OSError as e:
        raise ImageWriteError(f"Could not write image to {path}: {e}") from e

    return path
