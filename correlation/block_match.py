"""Exhaustive block matching over a discrete displacement window."""

from __future__ import annotations

import numpy as np

from correlation.cost import CostMetric
from correlation.types import DisparityMap
from imageview.geometry import BBox, VectorLike, as_vector
from imageview.ops import crop


def best_of_search_convolution(
    cost: CostMetric,
    left: np.ndarray,
    right: np.ndarray,
    left_region: BBox,
    search_volume: VectorLike,
    kernel_size: VectorLike,
) -> DisparityMap:
    """Find the best displacement for every pixel of ``left_region``.

    Args:
        cost: Metric used to compare kernel-sized patches
        left: Left raster
        right: Right raster, aligned with ``left`` at zero displacement
        left_region: Box inside ``left`` including the half-kernel padding
        search_volume: Number of candidate displacements per axis
        kernel_size: Matching window size

    Returns:
        Map of ``left_region.size - kernel_size + 1`` pixels whose displacements
        are relative to the search window origin. A pixel is invalid when no
        candidate produced a finite score.
    """
    kernel_size = as_vector(kernel_size)
    search_volume = as_vector(search_volume)

    right_region = left_region.extend_max(search_volume - (1, 1))
    left_raster = crop(left, left_region)
    right_raster = crop(right, right_region)

    out_cols = left_region.width - kernel_size.x + 1
    out_rows = left_region.height - kernel_size.y + 1
    result = DisparityMap.invalid(max(out_cols, 0), max(out_rows, 0))
    if out_cols <= 0 or out_rows <= 0:
        return result

    best = np.full((out_rows, out_cols), np.inf)
    rows, cols = left_raster.shape
    for dx in range(search_volume.x):
        for dy in range(search_volume.y):
            shifted = right_raster[dy : dy + rows, dx : dx + cols]
            score = cost.window_score(left_raster, shifted, kernel_size)
            if cost.higher_is_better:
                score = -score
            # NaN never compares less, so degenerate windows are never selected
            better = score < best
            best[better] = score[better]
            result.disparity[better] = (dx, dy)

    result.valid[:] = np.isfinite(best)
    return result


__all__ = ["best_of_search_convolution"]
