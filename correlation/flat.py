"""Single-resolution correlation view."""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from correlation.block_match import best_of_search_convolution
from correlation.consistency import ConsistencyMetric, cross_corr_consistency_check
from correlation.cost import CostFunctionType, CostMetric, make_cost
from correlation.prefilter import NullPrefilter, PreFilter
from correlation.types import DisparityMap
from exceptions import TileSizeMismatchError
from imageview.geometry import BBox, Vector2, VectorLike, as_vector
from imageview.ops import as_float_image, crop
from imageview.view import CropView, TiledView
from log_config.logger import get_logger

logger = get_logger(__name__)


def validate_kernel_size(kernel_size: VectorLike) -> Vector2:
    kernel_size = as_vector(kernel_size)
    if kernel_size.min() <= 0 or kernel_size.x % 2 == 0 or kernel_size.y % 2 == 0:
        raise ValueError(f"Kernel size must be positive and odd on both axes, got {tuple(kernel_size)}")
    return kernel_size


def validate_search_region(search_region: BBox) -> BBox:
    if search_region.width < 0 or search_region.height < 0:
        raise ValueError(f"Search region must have non-negative size, got {search_region}")
    return search_region


def check_tile_size(requested: BBox, result: DisparityMap, source: str) -> None:
    if result.size != requested.size:
        message = (
            f"{source} solved disparity of size {tuple(result.size)} "
            f"doesn't match requested bbox size {tuple(requested.size)}"
        )
        logger.error(message)
        raise TileSizeMismatchError(message, requested=tuple(requested.size), produced=tuple(result.size))


def correlate_region(
    cost: CostMetric,
    left: CropView,
    right: CropView,
    left_region: BBox,
    window_offset: VectorLike,
    search_volume: VectorLike,
    kernel_size: VectorLike,
    consistency_threshold: float = -1,
    consistency_metric: Union[ConsistencyMetric, str] = ConsistencyMetric.PER_AXIS,
) -> DisparityMap:
    """Match one padded left region, optionally cross-checked right to left.

    The right view shares the left view's frame: a left pixel ``p`` compared
    at local displacement ``d`` meets the right pixel ``p + window_offset + d``.

    Args:
        cost: Patch metric
        left: Pre-filtered left raster
        right: Pre-filtered right raster
        left_region: Output region padded by half a kernel on each side
        window_offset: Displacement of the first search candidate
        search_volume: Number of candidates per axis
        kernel_size: Matching window size
        consistency_threshold: Round-trip tolerance; negative disables the check
        consistency_metric: Distance used by the consistency check

    Returns:
        Displacements relative to ``window_offset``
    """
    window_offset = as_vector(window_offset)
    search_volume = as_vector(search_volume)

    right_region = (left_region + window_offset).extend_max(search_volume - (1, 1))
    local_left = BBox(Vector2(0, 0), left_region.size)
    result = best_of_search_convolution(
        cost,
        left.crop(left_region),
        right.crop(right_region),
        local_left,
        search_volume,
        kernel_size,
    )

    if consistency_threshold >= 0:
        # Right-to-left pass: the right region becomes the reference and the
        # left image is read from the negated window, so a forward local
        # displacement d is confirmed by a reverse displacement of -d.
        reach = search_volume - (1, 1)
        mirrored_origin = left_region.min - reach
        mirrored = BBox(mirrored_origin, mirrored_origin + right_region.size + reach)
        reverse = best_of_search_convolution(
            cost,
            right.crop(right_region),
            left.crop(mirrored),
            BBox(Vector2(0, 0), right_region.size),
            search_volume,
            kernel_size,
        ).shift(-reach)
        cross_corr_consistency_check(result, reverse, consistency_threshold, consistency_metric)

    return result


class CorrelationView(TiledView):
    """Flat block-matching correlator evaluated one tile at a time."""

    def __init__(
        self,
        left: np.ndarray,
        right: np.ndarray,
        prefilter: Optional[PreFilter],
        search_region: BBox,
        kernel_size: VectorLike,
        cost_type: Union[CostFunctionType, str] = CostFunctionType.ABSOLUTE_DIFFERENCE,
        consistency_threshold: float = -1,
        consistency_metric: Union[ConsistencyMetric, str] = ConsistencyMetric.PER_AXIS,
    ) -> None:
        self._left = as_float_image(left)
        self._right = as_float_image(right)
        self._prefilter = prefilter if prefilter is not None else NullPrefilter()
        self._search_region = validate_search_region(search_region)
        self._kernel_size = validate_kernel_size(kernel_size)
        self._cost_type = CostFunctionType(cost_type)
        self._cost = make_cost(self._cost_type)
        self._consistency_threshold = float(consistency_threshold)
        self._consistency_metric = ConsistencyMetric(consistency_metric)

    @property
    def cols(self) -> int:
        return self._left.shape[1]

    @property
    def rows(self) -> int:
        return self._left.shape[0]

    @property
    def search_region(self) -> BBox:
        return self._search_region

    @property
    def kernel_size(self) -> Vector2:
        return self._kernel_size

    def prerasterize(self, bbox: BBox) -> CropView:
        half_kernel = self._kernel_size // 2
        search_volume = self._search_region.size + (1, 1)

        # 1) Expand the left raster region by the kernel size
        left_region = bbox.expand(half_kernel)

        # 2) Region of the right image that is read
        right_region = (left_region + self._search_region.min).extend_max(self._search_region.size)

        # Rasters cover what both passes read; the mirrored pass reaches back
        # the width of the search region before the left region.
        left_extent = left_region
        if self._consistency_threshold >= 0:
            left_extent = left_extent.grow(
                BBox(left_region.min - self._search_region.size, left_region.min + right_region.size)
            )
        left_view = CropView(self._prefilter(crop(self._left, left_extent)), left_extent.min)
        right_view = CropView(self._prefilter(crop(self._right, right_region)), right_region.min)

        # The right view is re-framed so zero local displacement sits on search min
        right_view = CropView(right_view.buffer, right_view.origin - self._search_region.min)

        # 3) Correlate, 4) optionally cross-check
        result = correlate_region(
            self._cost,
            left_view,
            right_view,
            left_region,
            Vector2(0, 0),
            search_volume,
            self._kernel_size,
            self._consistency_threshold,
            self._consistency_metric,
        )
        check_tile_size(bbox, result, "CorrelationView")

        # 5) Convert back to search region coordinates
        result.shift(self._search_region.min)
        return CropView(result, bbox.min)


def correlate(
    left: np.ndarray,
    right: np.ndarray,
    prefilter: Optional[PreFilter],
    search_region: BBox,
    kernel_size: VectorLike,
    cost_type: Union[CostFunctionType, str] = CostFunctionType.ABSOLUTE_DIFFERENCE,
    consistency_threshold: float = -1,
    consistency_metric: Union[ConsistencyMetric, str] = ConsistencyMetric.PER_AXIS,
) -> CorrelationView:
    return CorrelationView(
        left,
        right,
        prefilter,
        search_region,
        kernel_size,
        cost_type=cost_type,
        consistency_threshold=consistency_threshold,
        consistency_metric=consistency_metric,
    )


__all__ = [
    "CorrelationView",
    "correlate",
    "correlate_region",
    "check_tile_size",
    "validate_kernel_size",
    "validate_search_region",
]
