#!/usr/bin/env python3
"""Compute an 8-bit edge map of an image.

Uses Sobel gradient magnitude (rescaled to 0-255) or a Canny edge mask.

---
inputs:
  image:
    type: image
    description: Input image (converted to grayscale)
outputs:
  -o:
    type: image
    description: Output edge map
args:
  --method:
    type: str
    default: sobel
    description: Edge detection method (sobel or canny)
  --low:
    type: float
    default: 50.0
    description: Lower threshold for Canny hysteresis
  --high:
    type: float
    default: 100.0
    description: Upper threshold for Canny hysteresis
---
"""

import argparse

from edgemap import EdgeConfig, EdgeMethod, EdgePipeline


def main() -> None:
    parser = argparse.ArgumentParser(description="Compute an edge map")
    parser.add_argument("image", help="Input image path")
    parser.add_argument("-o", "--output", required=True, help="Output image path")
    parser.add_argument("--method", choices=EdgeMethod.choices(), default="sobel")
    parser.add_argument("--low", type=float, default=50.0, help="Lower threshold")
    parser.add_argument("--high", type=float, default=100.0, help="Upper threshold")
    args = parser.parse_args()

    config = EdgeConfig(method=args.method, low_threshold=args.low, high_threshold=args.high)
    result = EdgePipeline(config).process_image(args.image, args.output)

    if result.degenerate:
        print(f"No edges found in {args.image}")
    print(f"Edge map ({args.method}): {args.image} -> {args.output}")


if __name__ == "__main__":
    main()
