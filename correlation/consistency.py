"""Left/right consistency check for disparity maps."""

from __future__ import annotations

from enum import Enum
from typing import Union

import numpy as np

from correlation.types import DisparityMap
from log_config.logger import get_logger

logger = get_logger(__name__)


class ConsistencyMetric(str, Enum):
    PER_AXIS = "per_axis"
    EUCLIDEAN = "euclidean"


def cross_corr_consistency_check(
    forward: DisparityMap,
    reverse: DisparityMap,
    threshold: float,
    metric: Union[ConsistencyMetric, str] = ConsistencyMetric.PER_AXIS,
) -> int:
    """Invalidate forward matches that do not round-trip through ``reverse``.

    A valid forward pixel ``p`` with displacement ``d`` survives when the
    reverse map is valid at ``p + d`` and ``d`` plus the reverse displacement
    stays within ``threshold``. Lookups outside the reverse map fail.

    Args:
        forward: Left-to-right map, modified in place
        reverse: Right-to-left map, read only
        threshold: Maximum round-trip error; negative disables the check
        metric: Per-axis absolute error or Euclidean norm

    Returns:
        Number of pixels that were invalidated
    """
    if threshold < 0:
        return 0
    metric = ConsistencyMetric(metric)

    ys, xs = np.nonzero(forward.valid)
    if ys.size == 0:
        return 0
    d = forward.disparity[ys, xs].astype(np.int64)
    tx = xs + d[:, 0]
    ty = ys + d[:, 1]

    inside = (tx >= 0) & (tx < reverse.cols) & (ty >= 0) & (ty < reverse.rows)
    keep = np.zeros(ys.size, dtype=bool)

    rx = tx[inside]
    ry = ty[inside]
    residual = d[inside] + reverse.disparity[ry, rx]
    if metric == ConsistencyMetric.EUCLIDEAN:
        within = np.hypot(residual[:, 0], residual[:, 1]) <= threshold
    else:
        within = np.all(np.abs(residual) <= threshold, axis=1)
    keep[inside] = reverse.valid[ry, rx] & within

    rejected = ~keep
    forward.valid[ys[rejected], xs[rejected]] = False

    count = int(rejected.sum())
    logger.debug(f"Consistency check rejected {count} of {ys.size} pixels (threshold {threshold})")
    return count


__all__ = ["ConsistencyMetric", "cross_corr_consistency_check"]
