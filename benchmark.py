#!/usr/bin/env python3
"""
Benchmark script to compare the convolution back-ends on every filter.

Also checks that every back-end produces identical output and writes the
timings to JSON for visualize_benchmark.py.
"""
import argparse
import json
import multiprocessing
import platform
import time

import numpy as np
from PIL import Image as PILImage

from filters import BACKENDS, FILTERS, get_backend
from pixel_buffer import Image

# Speedups are reported relative to this back-end when it is part of the run
BASELINE = 'sequential'

# (filter, parameter) pairs run by default
DEFAULT_CASES = [
    ('box_blur_1d', 3),
    ('box_blur_2d', 3),
    ('gaussian_blur_1d', 1.0),
    ('gaussian_blur_2d', 1.0),
    ('sobel_2d', 1.0),
]


def synthetic_image(size, channels=3, seed=0):
    """Square noise image with a fixed seed so runs are comparable."""
    rng = np.random.default_rng(seed)
    return rng.integers(0, 256, size=(size, size, channels), dtype=np.uint8)


def load_image(path, size=None):
    img = PILImage.open(path).convert("RGB")
    if size is not None:
        img = img.resize((size, size))
    return np.array(img)


def time_filter(arr, filter_name, param, backend, n_jobs=-1, n_runs=3):
    """Run one filter ``n_runs`` times; returns (output, mean_seconds, std_seconds)."""
    convolve = get_backend(backend, n_jobs)
    filter_fn = FILTERS[filter_name]

    times = []
    for _ in range(n_runs):
        image = Image.from_array(arr)
        start = time.perf_counter()
        filter_fn(image, param, convolve=convolve)
        times.append(time.perf_counter() - start)

    return image.result().copy(), float(np.mean(times)), float(np.std(times))


def benchmark_convolution(arr, cases=DEFAULT_CASES, backends=None, n_jobs=-1, n_runs=3):
    """Run benchmark comparing all back-ends; returns the result entries."""
    backends = backends or list(BACKENDS)
    h, w = arr.shape[0], arr.shape[1]

    print(f"Image size: {w}x{h} pixels")
    print(f"Number of runs: {n_runs}")
    print(f"CPU cores: {multiprocessing.cpu_count()}")
    print("=" * 70)

    results = []
    for filter_name, param in cases:
        print(f"\n{filter_name} ({param})")
        print("-" * 70)

        outputs = {}
        timings = {}
        for backend in backends:
            out, avg, std = time_filter(arr, filter_name, param, backend, n_jobs, n_runs)
            outputs[backend] = out
            timings[backend] = (avg, std)

        baseline_name = BASELINE if BASELINE in timings else backends[0]
        baseline = timings[baseline_name][0]
        print(f"  speedup vs {baseline_name}")
        for backend in backends:
            avg, std = timings[backend]
            speedup = baseline / avg if avg > 0 else 0.0
            print(f"  {backend:<12}: {avg:.4f} ± {std:.4f} seconds  ({speedup:.2f}x)")

            results.append({
                'filter': filter_name,
                'param': param,
                'backend': backend,
                'image_size': w,
                'n_jobs': n_jobs,
                'seconds': avg,
                'std': std,
            })

        # Verify results are identical
        reference = outputs[baseline_name]
        for backend in backends:
            if backend == baseline_name:
                continue
            diff = np.abs(reference.astype(int) - outputs[backend].astype(int)).max()
            mark = "✓" if diff == 0 else "⚠"
            print(f"  {mark} max difference ({baseline_name} vs {backend}): {diff}")

    return results


def save_results(results, path='benchmark_results.json'):
    data = {
        'metadata': {
            'cpu_count': multiprocessing.cpu_count(),
            'python': platform.python_version(),
            'numpy': np.__version__,
            'timestamp': time.strftime('%Y-%m-%dT%H:%M:%S'),
        },
        'results': results,
    }
    with open(path, 'w') as f:
        json.dump(data, f, indent=2)
    print(f"\n✓ Results saved to {path}")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Benchmark the convolution back-ends")
    parser.add_argument("-i", "--input", help="Image to benchmark on (default: synthetic noise)")
    parser.add_argument("--sizes", type=int, nargs="+", default=[256, 512])
    parser.add_argument("--runs", type=int, default=3)
    parser.add_argument("-j", "--jobs", type=int, default=-1)
    parser.add_argument("-b", "--backends", nargs="+", choices=sorted(BACKENDS))
    parser.add_argument("-o", "--output", default="benchmark_results.json")
    args = parser.parse_args(argv)

    print("=" * 70)
    print("CONVOLUTION BENCHMARK: Sequential vs Parallel Back-ends")
    print("=" * 70)

    results = []
    for size in args.sizes:
        arr = load_image(args.input, size) if args.input else synthetic_image(size)
        results.extend(benchmark_convolution(arr, backends=args.backends,
                                             n_jobs=args.jobs, n_runs=args.runs))

    save_results(results, args.output)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
