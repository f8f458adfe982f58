"""Edge map generation with Sobel or Canny detection."""

from .buffers import GradientBuffer, NormalizedImage, Range
from .cli import main
from .config import EdgeConfig, parse_key_value_args
from .image_io import DecodeError, ImageWriteError, load_grayscale, save_image, to_grayscale
from .methods import EdgeMethod, canny_edges, sobel_gradients
from .normalize import normalize, normalize_to_u8, scan_range
from .pipeline import EdgePipeline, detect_edges

__all__ = [
    "GradientBuffer",
    "NormalizedImage",
    "Range",
    "EdgeMethod",
    "sobel_gradients",
    "canny_edges",
    "scan_range",
    "normalize",
    "normalize_to_u8",
    "detect_edges",
    "EdgePipeline",
    "EdgeConfig",
    "parse_key_value_args",
    "DecodeError",
    "ImageWriteError",
    "load_grayscale",
    "save_image",
    "to_grayscale",
    "main",
]
