#!/usr/bin/env python3
"""
Command-line front end: apply one filter to (a region of) an image.

The selected region is cropped out, filtered, and pasted back onto the
original before the result is saved.

    filter-image -i place.png -o blurred.png gaussian_blur_1d --sigma 3
    filter-image -i place.png -x 100 -y 50 --width 200 sobel_2d -s 1
"""
import argparse
import cProfile
import io
import pstats
import sys
import time
from pathlib import Path

import numpy as np
from PIL import Image as PILImage

from filters import BACKENDS, FILTERS, get_backend
from pixel_buffer import Image

DEFAULT_RADIUS = 1
DEFAULT_SIGMA = 0.84089642
DEFAULT_OUTPUT = "output.jpg"


def crop_image(img, x=0, y=0, width=None, height=None):
    """Crop ``img`` to the given region; width/height default to the rest of the image."""
    img_w, img_h = img.size

    if x < 0 or y < 0:
        raise ValueError("Crop origin must not be negative")
    if x > img_w:
        raise ValueError("Crop -x exceeds image bounds")
    if y > img_h:
        raise ValueError("Crop -y exceeds image bounds")

    # If no crop width or height was specified,
    # default to the full width and height of the image
    if width is None:
        width = img_w - x
    if height is None:
        height = img_h - y

    if width <= 0 or height <= 0:
        raise ValueError("Crop region is empty")
    if x + width > img_w:
        raise ValueError("Crop --width exceeds image bounds")
    if y + height > img_h:
        raise ValueError("Crop --height exceeds image bounds")

    return img.crop((x, y, x + width, y + height))


def working_mode(img):
    """RGBA when the source carries alpha, RGB otherwise."""
    if img.mode in ("RGBA", "LA", "PA") or "transparency" in img.info:
        return "RGBA"
    return "RGB"


def run_filter(args, image):
    convolve = get_backend(args.backend, args.jobs)
    filter_fn = FILTERS[args.filter]
    if args.filter.startswith("box_blur"):
        filter_fn(image, args.radius, convolve=convolve)
    else:
        filter_fn(image, args.sigma, convolve=convolve)


def filter_file(args):
    """Load, crop, filter, overlay and save; returns the filtered Image."""
    if not args.input.exists():
        raise ValueError(f"Input: {args.input} does not exist")
    if args.output.exists() and not args.force:
        raise ValueError(f"Output {args.output} exists. To overwrite files, use --force.")

    try:
        original = PILImage.open(args.input)
        original.load()
    except OSError as e:
        raise OSError(f"Failed to open file {args.input}: {e}") from e

    if original.mode not in ("RGB", "RGBA"):
        original = original.convert(working_mode(original))

    crop = crop_image(original, args.x, args.y, args.width, args.height)
    image = Image.from_array(np.array(crop))

    if args.verbose:
        print(f"Image:\n  width: {image.width}\n  height: {image.height}\n"
              f"  channels: {image.channels}", file=sys.stderr)

    # Measure elapsed time
    start = time.perf_counter()

    if args.profile:
        profiler = cProfile.Profile()
        profiler.enable()
        run_filter(args, image)
        profiler.disable()

        s = io.StringIO()
        stats = pstats.Stats(profiler, stream=s).sort_stats('cumulative')
        stats.print_stats(20)  # Top 20 functions
        print("\n=== Profiling Results ===", file=sys.stderr)
        print(s.getvalue(), file=sys.stderr)
    else:
        run_filter(args, image)

    if args.verbose:
        elapsed_ms = (time.perf_counter() - start) * 1000
        print(f"Time elapsed: {elapsed_ms:.0f} ms", file=sys.stderr)

    # Overlay result on top of original image
    original.paste(PILImage.fromarray(image.result()), (args.x, args.y))

    try:
        original.save(args.output)
    except (OSError, ValueError) as e:
        raise OSError(f"Failed to save file {args.output}: {e}") from e

    return image


def build_parser():
    parser = argparse.ArgumentParser(
        prog="filter-image",
        description="Apply a convolution filter to an image")
    parser.add_argument("-i", "--input", type=Path, required=True, help="Input image path")
    parser.add_argument("-o", "--output", type=Path, default=Path(DEFAULT_OUTPUT),
                        help=f"Output image path (default: {DEFAULT_OUTPUT})")
    parser.add_argument("-x", type=int, default=0, help="Crop x-coordinate")
    parser.add_argument("-y", type=int, default=0, help="Crop y-coordinate")
    parser.add_argument("--width", type=int, help="Crop width")
    parser.add_argument("--height", type=int, help="Crop height")
    parser.add_argument("-b", "--backend", choices=sorted(BACKENDS), default="threads",
                        help="Convolution back-end (default: threads)")
    parser.add_argument("-j", "--jobs", type=int, default=-1,
                        help="Worker count for parallel back-ends, -1 uses all cores")
    parser.add_argument("-f", "--force", action="store_true", help="Force output file overwrite")
    parser.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    parser.add_argument("--profile", action="store_true", help="Profile the filter with cProfile")

    subparsers = parser.add_subparsers(dest="filter", required=True, metavar="FILTER")

    for name in ("box_blur_1d", "box_blur_2d"):
        sub = subparsers.add_parser(name, help=f"{name.replace('_', ' ')} filter")
        sub.add_argument("-r", "--radius", type=int, default=DEFAULT_RADIUS)

    for name in ("gaussian_blur_1d", "gaussian_blur_2d"):
        sub = subparsers.add_parser(name, help=f"{name.replace('_', ' ')} filter")
        sub.add_argument("-s", "--sigma", type=float, default=DEFAULT_SIGMA)

    sub = subparsers.add_parser("sobel_2d", help="Sobel edge detection")
    sub.add_argument("-s", "--sigma", type=float, default=None,
                     help="Gaussian pre-blur sigma (no pre-blur when omitted)")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        filter_file(args)
    except (ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.verbose:
        print(f"Saved: {args.output}", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())
