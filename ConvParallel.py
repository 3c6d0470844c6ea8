#!/usr/bin/env python3
"""
Parallel image convolution using a joblib thread pool.

The output is split into disjoint bands of rows and each worker writes only
its own band of the shared destination buffer, so no locking is needed.
Parallel() returns once every band is done, which is the barrier between
passes.
"""
import math

import numpy as np
from joblib import Parallel, delayed, cpu_count

from ConvSeq import convolve_rows
from pixel_buffer import check_buffers


def resolve_n_jobs(n_jobs):
    if n_jobs is None or n_jobs == -1:
        return cpu_count()
    if n_jobs < -1:
        return max(1, cpu_count() + 1 + n_jobs)
    return max(1, n_jobs)


def row_bands(height, n_bands):
    """Split [0, height) into at most ``n_bands`` contiguous, non-overlapping ranges."""
    if height <= 0:
        return []
    n_bands = max(1, min(n_bands, height))
    band = math.ceil(height / n_bands)
    return [(start, min(start + band, height)) for start in range(0, height, band)]


def plan_bands(height, n_jobs, band_rows=None):
    """Pick the row bands for one pass."""
    if band_rows is None:
        # Aim for ~4 bands per worker for better load balancing
        return row_bands(height, resolve_n_jobs(n_jobs) * 4)
    return row_bands(height, math.ceil(height / max(1, band_rows)))


def convolve(source, destination, width, height, channels, kernel, n_jobs=-1, band_rows=None):
    """Thread-pool version of ConvSeq.convolve with the same contract."""
    depth = check_buffers(source, destination, width, height, channels)
    kernel = np.asarray(kernel, dtype=np.float64)
    if height == 0 or width == 0:
        return

    src = depth.to_float(source).reshape(height, width, channels)
    dst = destination.reshape(height, width, channels)

    bands = plan_bands(height, n_jobs, band_rows)

    # Workers must write into dst itself, so the pool has to share memory.
    # numpy releases the GIL inside the heavy array ops.
    Parallel(n_jobs=resolve_n_jobs(n_jobs), require="sharedmem")(
        delayed(convolve_rows)(src, dst, kernel, depth, start, end)
        for start, end in bands
    )


if __name__ == "__main__":
    from PIL import Image as PILImage

    from ConvKernels import gaussian_kernel_2d

    # Configuration
    input_path = "banana.png"
    sigma = 3.0
    n_jobs = -1  # -1 uses all available cores

    # Load RGB image
    img = PILImage.open(input_path).convert("RGB")
    arr = np.array(img)
    h, w, c = arr.shape
    source = arr.reshape(-1).copy()
    destination = np.empty_like(source)

    print(f"Processing image: {w}x{h} pixels")
    print(f"Parallelization: row bands over {resolve_n_jobs(n_jobs)} threads")

    convolve(source, destination, w, h, c, gaussian_kernel_2d(sigma), n_jobs=n_jobs)
    print("Done")
