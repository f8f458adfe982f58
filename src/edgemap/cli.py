#!/usr/bin/env python3
"""Edge detection CLI."""

import argparse
import logging
import sys
from pathlib import Path

from .config import EdgeConfig, parse_key_value_args
from .image_io import DecodeError, ImageWriteError
from .methods import EdgeMethod
from .pipeline import EdgePipeline


def main() -> int:
    """Run edge detection on one image."""
    parser = argparse.ArgumentParser(
        description="Applies edge detection to an image",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s photo.jpg edges.png                     # Sobel gradient magnitude
  %(prog)s photo.jpg edges.png --method canny      # Canny edge mask
  %(prog)s photo.jpg edges.png --method canny --low 30 --high 90
  %(prog)s photo.jpg edges.png --config edges.yml  # Settings from YAML
  %(prog)s photo.jpg edges.png --set sigma=2.0 workers=4
        """,
    )

    parser.add_argument("input", type=Path, help="Path to the input image")
    parser.add_argument("output", type=Path, help="Path to save the output image")

    parser.add_argument(
        "--method",
        choices=EdgeMethod.choices(),
        help="Edge detection method (default: sobel)",
    )

    # Canny settings
    parser.add_argument("--low", type=float, help="Lower Canny threshold (default: 50)")
    parser.add_argument("--high", type=float, help="Upper Canny threshold (default: 100)")
    parser.add_argument("--sigma", type=float, help="Canny pre-smoothing sigma (default: 1.4)")

    # Overrides
    parser.add_argument("--config", type=Path, help="Path to YAML settings file")
    parser.add_argument(
        "--set",
        nargs="+",
        metavar="KEY=VALUE",
        help="Override settings (e.g., --set method=canny low=30)",
    )

    # Execution
    parser.add_argument(
        "--workers",
        type=int,
        metavar="N",
        help="Threads used to normalize gradients (default: 1)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        config = _build_config(args)
    except FileNotFoundError as e:
        print(f"Error: Config file not found: {e.filename}", file=sys.stderr)
        return 1
    except (ValueError, KeyError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    pipeline = EdgePipeline(config)
    try:
        pipeline.process_image(args.input, args.output)
    except DecodeError as e:
        print(f"Error: Failed to load input: {e}", file=sys.stderr)
        return 1
    except ImageWriteError as e:
        print(f"Error: Failed to save output: {e}", file=sys.stderr)
        return 1

    print(f"Edge detection ({config.method.value}): {args.input} -> {args.output}")
    print(f"Edge detection complete! Saved to {args.output}")
    return 0


def _build_config(args: argparse.Namespace) -> EdgeConfig:
    """Merge defaults, config file, --set overrides and explicit flags.

    Args:
        args: Parsed command line arguments.

    Returns:
        Validated configuration.
    """
    if args.config is not None:
        if not args.config.exists():
            raise FileNotFoundError(2, "No such file", str(args.config))
        config = EdgeConfig.from_yaml(args.config)
    else:
        config = EdgeConfig()

    if args.set:
        config.override_parameters(parse_key_value_args(args.set))

    flags = {
        "method": args.method,
        "low": args.low,
        "high": args.high,
        "sigma": args.sigma,
        "workers": args.workers,
    }
    explicit = {key: value for key, value in flags.items() if value is not None}
    if explicit:
        config.override_parameters(explicit)

    config.validate()
    return config


if __name__ == "__main__":
    sys.exit(main())
