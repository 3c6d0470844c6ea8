#!/usr/bin/env python3
"""
Advanced parallel image convolution using a joblib process pool.

Uses shared memory to avoid pickling overhead: the float source and the
output samples live in two shared blocks, each worker attaches by name and
writes its own band of rows. Same contract as ConvSeq.convolve.
"""
import numpy as np
from joblib import Parallel, delayed
from multiprocessing import shared_memory

from ConvParallel import plan_bands, resolve_n_jobs
from ConvSeq import convolve_rows
from pixel_buffer import SampleDepth, check_buffers


def process_band_shm(shm_input_name, shm_output_name, shape, out_dtype_str, kernel, start, end):
    """Process one band of rows using shared memory."""
    # Access shared memory as numpy arrays
    shm_input = shared_memory.SharedMemory(name=shm_input_name)
    shm_output = shared_memory.SharedMemory(name=shm_output_name)
    src = dst = None
    try:
        src = np.ndarray(shape, dtype=np.float64, buffer=shm_input.buf)
        dst = np.ndarray(shape, dtype=out_dtype_str, buffer=shm_output.buf)

        convolve_rows(src, dst, kernel, SampleDepth.from_dtype(out_dtype_str), start, end)
    finally:
        # Views must be dropped before close(), the buffers are still exported otherwise
        del src, dst
        # Close shared memory handles (but don't unlink)
        shm_input.close()
        shm_output.close()

    return start, end


def convolve(source, destination, width, height, channels, kernel, n_jobs=-1, band_rows=None):
    depth = check_buffers(source, destination, width, height, channels)
    kernel = np.asarray(kernel, dtype=np.float64)
    if height == 0 or width == 0:
        return

    shape = (height, width, channels)
    img_float = depth.to_float(source).reshape(shape)
    bands = plan_bands(height, n_jobs, band_rows)

    # Create shared memory for input image and output
    shm_input = shared_memory.SharedMemory(create=True, size=img_float.nbytes)
    try:
        shm_output = shared_memory.SharedMemory(create=True, size=destination.nbytes)
    except BaseException:
        shm_input.close()
        shm_input.unlink()
        raise

    input_arr = output_arr = None
    try:
        input_arr = np.ndarray(shape, dtype=np.float64, buffer=shm_input.buf)
        np.copyto(input_arr, img_float)

        # Use prefer="processes" to get true parallelism with shared memory (no GIL)
        Parallel(n_jobs=resolve_n_jobs(n_jobs), prefer="processes")(
            delayed(process_band_shm)(
                shm_input.name, shm_output.name, shape, destination.dtype.str,
                kernel, start, end
            )
            for start, end in bands
        )

        output_arr = np.ndarray(destination.shape, dtype=destination.dtype, buffer=shm_output.buf)
        np.copyto(destination, output_arr)
    finally:
        del input_arr, output_arr

        # Cleanup shared memory
        shm_input.close()
        shm_input.unlink()
        shm_output.close()
        shm_output.unlink()


if __name__ == "__main__":
    import cProfile
    import multiprocessing
    import pstats

    from PIL import Image as PILImage

    from ConvKernels import box_kernel_2d

    with cProfile.Profile() as pr:
        # Configuration
        input_path = "place.png"
        radius = 3
        n_jobs = -1  # -1 uses all available cores

        # Load RGB image
        img = PILImage.open(input_path).convert("RGB")
        arr = np.array(img)
        h, w, c = arr.shape
        source = arr.reshape(-1).copy()
        destination = np.empty_like(source)

        print(f"Processing image: {w}x{h} pixels")
        print(f"Parallelization: row bands (fully parallel with processes)")
        print(f"CPU cores: {multiprocessing.cpu_count()}")

        convolve(source, destination, w, h, c, box_kernel_2d(radius), n_jobs=n_jobs)

    # Print profiling results
    stats = pstats.Stats(pr)
    stats.sort_stats('cumtime').print_stats(10)
