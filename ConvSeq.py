#!/usr/bin/env python3
"""
Sequential image convolution.

Boundary pixels are handled by clamping: a kernel window that runs past the
image edge samples the nearest edge pixel instead of padding with zeros.
The row-band routine here is shared by the parallel back-ends.
"""
import cProfile
import io
import pstats

import numpy as np
from PIL import Image as PILImage

from pixel_buffer import check_buffers


def convolve_rows(src, dst, kernel, depth, start, end):
    """Compute output rows [start, end) of ``dst`` from the float source ``src``.

    ``src`` is an (h, w, c) float64 array, ``dst`` an (h, w, c) view of the
    destination samples. Only ``dst[start:end]`` is written.
    """
    h, w, c = src.shape
    kh, kw = kernel.shape
    rows_half = kh // 2
    cols_half = kw // 2

    ys = np.arange(start, end)
    xs = np.arange(w)

    # One accumulator per output sample of this band
    acc = np.zeros((end - start, w, c), dtype=np.float64)

    for (i, j), weight in np.ndenumerate(kernel):
        if weight == 0.0:
            continue
        # Clamp kernel to image bounds
        rows = np.clip(ys + (i - rows_half), 0, h - 1)
        cols = np.clip(xs + (j - cols_half), 0, w - 1)
        acc += weight * src[rows[:, np.newaxis], cols[np.newaxis, :]]

    dst[start:end] = depth.from_float(acc)


def convolve(source, destination, width, height, channels, kernel, n_jobs=None):
    """Convolve ``source`` with ``kernel`` into ``destination`` (flat row-major buffers).

    ``n_jobs`` is accepted for signature compatibility with the parallel
    back-ends and ignored.
    """
    depth = check_buffers(source, destination, width, height, channels)
    kernel = np.asarray(kernel, dtype=np.float64)
    if height == 0 or width == 0:
        return

    src = depth.to_float(source).reshape(height, width, channels)
    dst = destination.reshape(height, width, channels)

    convolve_rows(src, dst, kernel, depth, 0, height)


if __name__ == "__main__":
    from ConvKernels import gaussian_kernel_2d

    # Configuration
    input_path = "place.png"
    sigma = 3.0

    # Load RGB image
    img = PILImage.open(input_path).convert("RGB")
    arr = np.array(img)
    h, w, c = arr.shape
    source = arr.reshape(-1).copy()
    destination = np.empty_like(source)

    # Profile the convolution
    profiler = cProfile.Profile()
    profiler.enable()

    convolve(source, destination, w, h, c, gaussian_kernel_2d(sigma))

    profiler.disable()

    # Print profiling stats
    s = io.StringIO()
    stats = pstats.Stats(profiler, stream=s).sort_stats('cumulative')
    stats.print_stats(20)  # Top 20 functions
    print("\n=== Profiling Results ===")
    print(s.getvalue())
