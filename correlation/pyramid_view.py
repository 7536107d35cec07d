"""Coarse-to-fine pyramid correlation view.

Matching starts at the coarsest pyramid level over the whole (scaled) search
region. After every level the disparity estimate is partitioned into zones,
each carrying the narrow range of disparities observed in it, and the next
finer level only searches those ranges.
"""

from __future__ import annotations

from typing import List, Optional, Union

import numpy as np

from correlation.consistency import ConsistencyMetric
from correlation.cost import CostFunctionType, make_cost
from correlation.flat import check_tile_size, correlate_region, validate_kernel_size, validate_search_region
from correlation.prefilter import NullPrefilter, PreFilter
from correlation.pyramid import build_pyramid, max_level_by_search, max_level_by_tile
from correlation.subdivide import subdivide_regions
from correlation.types import DisparityMap, Zone
from imageview.geometry import BBox, Vector2, VectorLike
from imageview.ops import as_float_image
from imageview.view import CropView, TiledView
from log_config.logger import get_logger

logger = get_logger(__name__)


class PyramidCorrelationView(TiledView):
    """Pyramid correlator, faster than ``CorrelationView`` on wide search ranges."""

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

        # Maximum pyramid levels according to the supplied search region
        self._max_level_by_search = max_level_by_search(search_region)

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

    def pyramid_levels(self, bbox: BBox) -> int:
        return min(self._max_level_by_search, max_level_by_tile(bbox, self._kernel_size))

    def prerasterize(self, bbox: BBox) -> CropView:
        # 1) Number of levels to process
        max_pyramid_levels = self.pyramid_levels(bbox)
        max_upscaling = 1 << max_pyramid_levels
        half_kernel = self._kernel_size // 2

        # 2) Build the pyramids
        left_region = bbox.expand(half_kernel * max_upscaling)
        right_region = (left_region + self._search_region.min).extend_max(
            self._search_region.size + (max_upscaling, max_upscaling)
        )
        left_pyramid = build_pyramid(self._left, left_region, max_pyramid_levels, self._prefilter)
        right_pyramid = build_pyramid(self._right, right_region, max_pyramid_levels, self._prefilter)

        # 3) Correlate, refining the zones on the way down
        zones = [
            Zone(
                BBox.from_xywh(0, 0, bbox.width // max_upscaling, bbox.height // max_upscaling),
                BBox.from_xywh(
                    0,
                    0,
                    self._search_region.width // max_upscaling + 1,
                    self._search_region.height // max_upscaling + 1,
                ),
            )
        ]
        for level in range(max_pyramid_levels, -1, -1):
            scaling = 1 << level
            disparity = DisparityMap.invalid(bbox.width // scaling, bbox.height // scaling)
            left_view = CropView(left_pyramid[level])
            right_view = CropView(right_pyramid[level])
            check_consistency = level == 0 and self._consistency_threshold >= 0

            # 3.1) Process each zone with its refined search estimate
            matched = 0
            for zone in zones:
                if zone.window.is_empty() or zone.region.is_empty():
                    continue
                zone_left = (zone.region + half_kernel * (max_upscaling // scaling)).expand(half_kernel)
                result = correlate_region(
                    self._cost,
                    left_view,
                    right_view,
                    zone_left,
                    zone.window.min,
                    zone.window.size,
                    self._kernel_size,
                    self._consistency_threshold if check_consistency else -1,
                    self._consistency_metric,
                )
                # Fix the offset
                result.shift(zone.window.min)
                disparity.paste(zone.region, result)
                matched += 1

            logger.debug(f"Level {level}: correlated {matched} of {len(zones)} zones over {tuple(disparity.size)}")

            # 3.2) Refine search estimates but never beyond the user's search region
            if level != 0:
                zones = self._refine_zones(disparity, bbox.size, scaling >> 1)

        check_tile_size(bbox, disparity, "PyramidCorrelationView")

        # 4) Reposition into the global search frame
        disparity.shift(self._search_region.min)
        return CropView(disparity, bbox.min)

    def _refine_zones(self, disparity: DisparityMap, tile_size: Vector2, scaling: int) -> List[Zone]:
        """Zones for the next finer level, whose scale factor is ``scaling``."""
        coarse = disparity.bbox
        zones = subdivide_regions(disparity, coarse, self._kernel_size)

        full_size = tile_size // scaling
        scaled_search = (self._search_region - self._search_region.min).shrink(scaling).extend_max((1, 1))

        refined = []
        for zone in zones:
            region = zone.region.scale(2)
            # Odd tile sizes leave one extra row/column at the finer level
            if zone.region.max.x == coarse.max.x:
                region = BBox(region.min, Vector2(full_size.x, region.max.y))
            if zone.region.max.y == coarse.max.y:
                region = BBox(region.min, Vector2(region.max.x, full_size.y))
            # A single candidate cannot correlate, so the window gets some slack
            window = zone.window.scale(2).expand(1).crop(scaled_search)
            refined.append(Zone(region, window))
        return refined


def pyramid_correlate(
    left: np.ndarray,
    right: np.ndarray,
    prefilter: Optional[PreFilter],
    search_region: BBox,
    kernel_size: VectorLike,
    cost_type: Union[CostFunctionType, str] = CostFunctionType.ABSOLUTE_DIFFERENCE,
    consistency_threshold: float = -1,
    consistency_metric: Union[ConsistencyMetric, str] = ConsistencyMetric.PER_AXIS,
) -> PyramidCorrelationView:
    return PyramidCorrelationView(
        left,
        right,
        prefilter,
        search_region,
        kernel_size,
        cost_type=cost_type,
        consistency_threshold=consistency_threshold,
        consistency_metric=consistency_metric,
    )


__all__ = ["PyramidCorrelationView", "pyramid_correlate"]
