"""Gaussian pyramid construction and depth selection."""

from __future__ import annotations

import math
from typing import List

import numpy as np

from correlation.prefilter import PreFilter
from imageview.geometry import BBox, VectorLike, as_vector
from imageview.ops import crop, separable_convolution, subsample

# 5-tap binomial approximation of a Gaussian (Szeliski)
BINOMIAL_KERNEL = np.array([1.0, 4.0, 6.0, 4.0, 1.0], dtype=np.float32) / 16.0


def max_level_by_search(search_region: BBox) -> int:
    """Deepest level the search range supports: floor(log2(largest side)) - 1."""
    largest_search = search_region.size.max()
    if largest_search <= 1:
        return 0
    return max(0, math.floor(math.log2(largest_search)) - 1)


def max_level_by_tile(bbox: BBox, kernel_size: VectorLike) -> int:
    """Deepest level at which the tile is still at least a kernel wide."""
    smallest_bbox = bbox.size.min()
    largest_kernel = as_vector(kernel_size).max()
    if smallest_bbox <= 0:
        return 0
    return max(0, math.floor(math.log2(smallest_bbox) - math.log2(largest_kernel)))


def pyramid_depth(search_region: BBox, bbox: BBox, kernel_size: VectorLike) -> int:
    return min(max_level_by_search(search_region), max_level_by_tile(bbox, kernel_size))


def build_pyramid(image: np.ndarray, region: BBox, levels: int, prefilter: PreFilter) -> List[np.ndarray]:
    """Build a ``levels + 1`` deep pyramid over ``region`` of ``image``.

    Level 0 is the edge-extended crop of ``region``. Each further level is the
    previous one smoothed with ``BINOMIAL_KERNEL`` and subsampled by two. Every
    level is pre-filtered on its own, after the next level has been derived
    from the unfiltered data.
    """
    pyramid = [crop(image, region)]
    for _ in range(levels):
        smoothed = separable_convolution(pyramid[-1], BINOMIAL_KERNEL, BINOMIAL_KERNEL)
        pyramid.append(subsample(smoothed, 2))
    return [prefilter(level) for level in pyramid]


__all__ = [
    "BINOMIAL_KERNEL",
    "max_level_by_search",
    "max_level_by_tile",
    "pyramid_depth",
    "build_pyramid",
]
