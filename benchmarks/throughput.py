"""Correlation throughput benchmark.

Compares the flat and pyramid correlators on a synthetic stereo pair with a
known constant shift, reporting time per megapixel and the fraction of pixels
that recovered the shift.
"""

import time
from typing import List, Tuple

import numpy as np

from configs.settings import load_config
from correlation.flat import CorrelationView
from correlation.prefilter import NullPrefilter
from correlation.pyramid_view import PyramidCorrelationView
from imageview.geometry import BBox
from imageview.rasterize import rasterize
from log_config.logger import configure_logging


def create_stereo_pair(width: int, height: int, shift: Tuple[int, int], seed: int = 0) -> Tuple[np.ndarray, np.ndarray]:
    """Random texture and a copy displaced by ``shift`` (right = left moved by shift)."""
    rng = np.random.default_rng(seed)
    pad = max(abs(shift[0]), abs(shift[1])) + 1
    base = rng.integers(0, 256, (height + 2 * pad, width + 2 * pad)).astype(np.uint8)
    left = base[pad : pad + height, pad : pad + width]
    right = base[pad - shift[1] : pad - shift[1] + height, pad - shift[0] : pad - shift[0] + width]
    return np.ascontiguousarray(left), np.ascontiguousarray(right)


def benchmark_correlation(
    width: int = 512,
    height: int = 512,
    search: int = 32,
    kernel: int = 7,
    tile_size: int = 256,
    num_workers: int = 1,
) -> List[dict]:
    """Benchmark both correlators on one synthetic pair.

    Args:
        width: Image width in pixels
        height: Image height in pixels
        search: Half-width of the square search region
        kernel: Kernel size (odd)
        tile_size: Tile width and height
        num_workers: Tile worker threads

    Returns:
        One result dictionary per correlator
    """
    shift = (search // 2, -(search // 4))
    left, right = create_stereo_pair(width, height, shift)
    search_region = BBox.from_corners(-search, -search, search, search)

    print(f"\n{'='*60}")
    print(f"Correlation Throughput Benchmark")
    print(f"{'='*60}")
    print(f"Configuration:")
    print(f"  Resolution: {width}x{height}")
    print(f"  Search Region: {search_region}")
    print(f"  Kernel: {kernel}x{kernel}")
    print(f"  Tiles: {tile_size}x{tile_size}, {num_workers} workers")
    print(f"{'='*60}\n")

    results = []
    for view_class in (CorrelationView, PyramidCorrelationView):
        view = view_class(left, right, NullPrefilter(), search_region, (kernel, kernel))

        start = time.perf_counter()
        disparity = rasterize(view, tile_size=(tile_size, tile_size), num_workers=num_workers)
        elapsed = time.perf_counter() - start

        border = kernel // 2 + max(abs(shift[0]), abs(shift[1]))
        interior = disparity.crop(BBox.from_corners(border, border, width - border, height - border))
        correct = interior.valid & (interior.disparity[..., 0] == shift[0]) & (interior.disparity[..., 1] == shift[1])

        results.append(
            {
                "correlator": view_class.__name__,
                "elapsed_seconds": elapsed,
                "seconds_per_megapixel": elapsed / (width * height / 1e6),
                "accuracy": float(correct.mean()) if correct.size else 0.0,
                "resolution": f"{width}x{height}",
            }
        )

    print_summary(results)
    return results


def print_summary(results: List[dict]) -> None:
    """Print summary table of all results."""
    print(f"\n{'='*60}")
    print(f"Throughput Benchmark Summary")
    print(f"{'='*60}")
    print(f"{'Correlator':<25} {'Seconds':>10} {'s/MP':>10} {'Accuracy':>10}")
    print(f"{'-'*60}")

    for result in results:
        print(
            f"{result['correlator']:<25} {result['elapsed_seconds']:>10.2f} "
            f"{result['seconds_per_megapixel']:>10.2f} {result['accuracy']:>10.1%}"
        )

    print(f"{'='*60}\n")


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser(description="Correlation throughput benchmark")
    parser.add_argument("--width", type=int, default=512, help="Image width (default: 512)")
    parser.add_argument("--height", type=int, default=512, help="Image height (default: 512)")
    parser.add_argument("--search", type=int, default=32, help="Search half-width (default: 32)")
    parser.add_argument("--kernel", type=int, default=7, help="Kernel size (default: 7)")
    parser.add_argument("--tile-size", type=int, default=256, help="Tile size (default: 256)")
    parser.add_argument("--workers", type=int, default=1, help="Tile worker threads (default: 1)")
    parser.add_argument("--config", type=str, default=None, help="YAML config whose logging section is applied")

    args = parser.parse_args()

    if args.config:
        config = load_config(args.config)
        configure_logging(config.logging.level, config.logging.logs_dir)
    else:
        configure_logging("WARNING")

    benchmark_correlation(
        width=args.width,
        height=args.height,
        search=args.search,
        kernel=args.kernel,
        tile_size=args.tile_size,
        num_workers=args.workers,
    )
