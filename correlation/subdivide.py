"""Quad-tree partitioning of a tile into zones with tight search windows.

Given a disparity estimate, a region is split into quadrants when matching the
quadrants separately, each with the range of disparities observed in it, costs
clearly less than matching the region as a whole. A region that does not
benefit gets one more chance per quadrant; quadrants that still do not benefit
are handed back to the parent, which merges what it can.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from correlation.types import DisparityMap, Zone
from imageview.geometry import BBox, Vector2, VectorLike, as_vector

# Regions at or below this many pixels, or narrower than MIN_REGION_SIDE, are not split.
MIN_REGION_AREA = 200
MIN_REGION_SIDE = 16
# Splitting must bring the search cost under this fraction of the unsplit cost.
SPLIT_GAIN_RATIO = 0.9
MAX_SUBDIVISION_DEPTH = 32


def search_cost(window: BBox, region: BBox, kernel_size: Vector2) -> int:
    return window.area() * (region.size + kernel_size).prod()


def split_quadrants(bbox: BBox) -> Tuple[BBox, BBox, BBox, BBox]:
    """Top-left, top-right, bottom-left and bottom-right quadrants of ``bbox``."""
    split = bbox.size // 2
    mid = bbox.min + split
    q1 = BBox(bbox.min, mid)
    q2 = BBox(Vector2(mid.x, bbox.min.y), Vector2(bbox.max.x, mid.y))
    q3 = BBox(Vector2(bbox.min.x, mid.y), Vector2(mid.x, bbox.max.y))
    q4 = BBox(mid, bbox.max)
    return q1, q2, q3, q4


def is_terminal(bbox: BBox) -> bool:
    return bbox.area() <= MIN_REGION_AREA or bbox.width < MIN_REGION_SIDE or bbox.height < MIN_REGION_SIDE


def can_merge(a: Zone, b: Zone) -> bool:
    """Zones that line up on one axis and search the same window."""
    aligned = a.region.min.x == b.region.min.x or a.region.min.y == b.region.min.y
    return aligned and a.window == b.window


def merge(a: Zone, b: Zone) -> Zone:
    return Zone(a.region.grow(b.region), a.window)


def _merge_failed(failed: List[Zone]) -> List[Zone]:
    """Fold back quadrants that could not be split any further."""
    if len(failed) == 3:
        first, second, third = failed
        if can_merge(first, second):
            return [merge(first, second), third]
        if can_merge(second, third):
            return [merge(second, third), first]
        if can_merge(first, third):
            return [merge(first, third), second]
        return list(failed)
    if len(failed) == 2:
        first, second = failed
        if can_merge(first, second):
            return [merge(first, second)]
        return list(failed)
    return list(failed)


def _subdivide(
    disparity: DisparityMap,
    bbox: BBox,
    kernel_size: Vector2,
    retry: bool,
    depth: int,
) -> Optional[List[Zone]]:
    """Zones for ``bbox``, or None when a retry still does not pay off."""
    # 1) Too small to split
    if is_terminal(bbox) or depth >= MAX_SUBDIVISION_DEPTH:
        window = disparity.valid_bounds(bbox)
        if window.is_empty():
            return []
        return [Zone(bbox, window)]

    # 2) Does dividing into quadrants reduce the total search?
    quadrants = split_quadrants(bbox)
    windows = [disparity.valid_bounds(quadrant) for quadrant in quadrants]
    split_search = sum(
        search_cost(window, quadrant, kernel_size)
        for quadrant, window in zip(quadrants, windows)
        if not window.is_empty()
    )

    # 3) Search window of the region as a whole
    current_window = BBox()
    for window in windows:
        current_window = current_window.grow(window)
    current_search = search_cost(current_window, bbox, kernel_size)

    if split_search > current_search * SPLIT_GAIN_RATIO:
        if retry:
            return None

        # Maybe the next level down has better luck
        zones: List[Zone] = []
        failed: List[Zone] = []
        for quadrant, window in zip(quadrants, windows):
            result = _subdivide(disparity, quadrant, kernel_size, True, depth + 1)
            if result is None:
                failed.append(Zone(quadrant, window))
            else:
                zones.extend(result)

        if len(failed) == 4:
            return [Zone(bbox, current_window)]
        return zones + _merge_failed(failed)

    # 4) Good split
    zones = []
    for quadrant in quadrants:
        zones.extend(_subdivide(disparity, quadrant, kernel_size, False, depth + 1) or [])
    return zones


def subdivide_regions(disparity: DisparityMap, bbox: BBox, kernel_size: VectorLike) -> List[Zone]:
    """Partition ``bbox`` of ``disparity`` into zones with tight search windows.

    Args:
        disparity: Disparity estimate, in the same frame as ``bbox``
        bbox: Region to partition
        kernel_size: Matching kernel, used to weigh the cost of each zone

    Returns:
        Non-overlapping zones covering every part of ``bbox`` that holds valid
        samples. Windows have an exclusive max corner.
    """
    return _subdivide(disparity, bbox, as_vector(kernel_size), False, 0) or []


__all__ = [
    "MIN_REGION_AREA",
    "MIN_REGION_SIDE",
    "SPLIT_GAIN_RATIO",
    "search_cost",
    "split_quadrants",
    "can_merge",
    "subdivide_regions",
]
