#!/usr/bin/env python3
"""
Visualize benchmark results from benchmark_results.json
Creates bar charts comparing execution times across back-ends.
"""

import argparse
import json
from pathlib import Path

import matplotlib
import matplotlib.pyplot as plt
import numpy as np

BASELINE = 'sequential'

# Define colors for back-ends
COLORS = {
    'sequential': '#2E86AB',
    'threads': '#A23B72',
    'processes': '#F18F01',
}

ORDER = {'sequential': 0, 'threads': 1, 'processes': 2}


def load_results(json_path='benchmark_results.json'):
    """Load benchmark results from JSON file."""
    with open(json_path, 'r') as f:
        data = json.load(f)
    return data


def organize_data(data):
    """Organize results as {(image_size, filter): {backend: time_ms}}."""
    results = {}

    for entry in data['results']:
        key = (entry['image_size'], entry['filter'])
        results.setdefault(key, {})[entry['backend']] = entry['seconds'] * 1000

    return results


def compute_speedups(times):
    """Speedup of every back-end over the sequential baseline, if present."""
    baseline = times.get(BASELINE)
    if not baseline:
        return {}
    return {backend: baseline / t for backend, t in times.items() if t > 0}


def plot_benchmark_results(data, output_path='benchmark_plot.png', show=False):
    """Create visualization of benchmark results with execution times and speedups."""
    results = organize_data(data)

    backends = sorted({b for times in results.values() for b in times},
                      key=lambda b: ORDER.get(b, 99))
    img_sizes = sorted({size for size, _ in results})
    n_sizes = len(img_sizes)

    # Row 1: execution times, row 2: speedups, one column per image size
    fig = plt.figure(figsize=(8 * n_sizes, 12))
    gs = fig.add_gridspec(2, n_sizes, hspace=0.3, wspace=0.25)
    fig.text(0.5, 0.96, 'Image Convolution Benchmark Results',
             ha='center', fontsize=16, fontweight='bold')

    width = 0.8 / max(1, len(backends))

    for idx, img_size in enumerate(img_sizes):
        filter_names = sorted(f for size, f in results if size == img_size)
        x = np.arange(len(filter_names))

        ax_time = fig.add_subplot(gs[0, idx])
        ax_speed = fig.add_subplot(gs[1, idx])

        for i, backend in enumerate(backends):
            offset = (i - len(backends) / 2 + 0.5) * width
            color = COLORS.get(backend, '#999999')

            times = [results[(img_size, f)].get(backend, 0) for f in filter_names]
            bars = ax_time.bar(x + offset, times, width, label=backend, color=color, alpha=0.8)
            for bar in bars:
                height = bar.get_height()
                if height > 0:
                    ax_time.text(bar.get_x() + bar.get_width() / 2., height, f'{height:.1f}',
                                 ha='center', va='bottom', fontsize=7)

            if backend == BASELINE:
                continue
            speedups = [compute_speedups(results[(img_size, f)]).get(backend, 0)
                        for f in filter_names]
            ax_speed.bar(x + offset, speedups, width, label=backend, color=color, alpha=0.8)

        ax_time.set_ylabel('Time (ms)', fontsize=11, fontweight='bold')
        ax_time.set_title(f'Execution Time - {img_size}x{img_size}', fontsize=12, fontweight='bold')
        ax_time.set_yscale('log')

        # Add reference line at 1.0x
        ax_speed.axhline(y=1.0, color='red', linestyle='--', linewidth=1, alpha=0.7,
                         label=f'Baseline ({BASELINE})')
        ax_speed.set_ylabel(f'Speedup vs {BASELINE}', fontsize=11, fontweight='bold')
        ax_speed.set_title(f'Speedup - {img_size}x{img_size}', fontsize=12, fontweight='bold')

        for ax in (ax_time, ax_speed):
            ax.set_xticks(x)
            ax.set_xticklabels(filter_names, rotation=20)
            ax.legend(fontsize=8, loc='best')
            ax.grid(True, alpha=0.3, axis='y')

    fig.savefig(output_path, dpi=150, bbox_inches='tight')
    print(f"✓ Execution times plot saved to: {output_path}")
    if show:
        plt.show()
    plt.close(fig)
    return output_path


def print_summary(data):
    """Print summary statistics."""
    results = organize_data(data)

    print("\n" + "=" * 80)
    print("BENCHMARK SUMMARY")
    print("=" * 80)

    for (img_size, filter_name), times in sorted(results.items()):
        print(f"\nImage: {img_size}x{img_size} | Filter: {filter_name}")
        print("-" * 80)

        # Sort by time
        for backend, time_ms in sorted(times.items(), key=lambda x: x[1]):
            print(f"  {backend:30s}: {time_ms:10.2f} ms")

        speedups = compute_speedups(times)
        if speedups:
            print(f"\n  Speedups vs {BASELINE}:")
            for backend, speedup in sorted(speedups.items(), key=lambda x: -x[1]):
                if backend != BASELINE:
                    print(f"    {backend:30s}: {speedup:6.2f}x")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Plot benchmark_results.json")
    parser.add_argument("results", nargs="?", default="benchmark_results.json")
    parser.add_argument("-o", "--output", default="benchmark_plot.png")
    parser.add_argument("--show", action="store_true", help="Open the plot window")
    args = parser.parse_args(argv)

    json_path = Path(args.results)
    if not json_path.exists():
        print(f"Error: {json_path} not found!")
        print("Run 'python benchmark.py' first to generate results.")
        return 1

    if not args.show:
        matplotlib.use('Agg')

    data = load_results(json_path)
    print_summary(data)

    print("\nGenerating plot...")
    plot_benchmark_results(data, args.output, show=args.show)

    print("\n✓ Visualization complete!")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
