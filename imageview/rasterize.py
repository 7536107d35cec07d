"""Tiled execution of correlation views."""

from __future__ import annotations

import time
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from correlation.types import DisparityMap
from imageview.geometry import BBox, VectorLike, as_vector
from imageview.view import CropView, TiledView
from log_config.logger import get_logger, log_performance

logger = get_logger(__name__)

DEFAULT_TILE_SIZE = (256, 256)


def tile_bboxes(bbox: BBox, tile_size: VectorLike = DEFAULT_TILE_SIZE) -> List[BBox]:
    """Split ``bbox`` into row-major tiles; edge tiles are clipped to ``bbox``."""
    tile_size = as_vector(tile_size)
    if tile_size.min() <= 0:
        raise ValueError(f"Tile size must be positive, got {tuple(tile_size)}")
    tiles = []
    for y in range(bbox.min.y, bbox.max.y, tile_size.y):
        for x in range(bbox.min.x, bbox.max.x, tile_size.x):
            tiles.append(BBox.from_xywh(x, y, tile_size.x, tile_size.y).crop(bbox))
    return tiles


def _compute_tile(view: TiledView, tile: BBox) -> CropView:
    start = time.perf_counter()
    result = view.prerasterize(tile)
    elapsed_ms = (time.perf_counter() - start) * 1000.0
    log_performance(f"{type(view).__name__} tile {tile}", elapsed_ms, threshold_ms=1000.0)
    return result


def rasterize(
    view: TiledView,
    bbox: Optional[BBox] = None,
    tile_size: VectorLike = DEFAULT_TILE_SIZE,
    num_workers: int = 1,
) -> DisparityMap:
    """Evaluate ``view`` over ``bbox`` tile by tile.

    Tiles share nothing, so with ``num_workers > 1`` they are computed on a
    thread pool; each result is pasted into its own part of the output.

    Args:
        view: View to evaluate
        bbox: Region to compute (default: the whole view)
        tile_size: Tile width and height
        num_workers: Number of worker threads

    Returns:
        Disparity map covering ``bbox``, indexed from ``bbox.min``
    """
    if bbox is None:
        bbox = view.bbox
    tiles = tile_bboxes(bbox, tile_size)
    output = DisparityMap.invalid(bbox.width, bbox.height)
    logger.info(f"Rasterizing {type(view).__name__} over {bbox} in {len(tiles)} tiles ({num_workers} workers)")

    start = time.perf_counter()
    if num_workers > 1 and len(tiles) > 1:
        with ThreadPoolExecutor(max_workers=num_workers) as executor:
            results = list(executor.map(lambda tile: _compute_tile(view, tile), tiles))
    else:
        results = [_compute_tile(view, tile) for tile in tiles]

    for tile, result in zip(tiles, results):
        output.paste(tile - bbox.min, result.buffer)

    elapsed_ms = (time.perf_counter() - start) * 1000.0
    log_performance(f"rasterize {bbox}", elapsed_ms, threshold_ms=10000.0)
    return output


__all__ = ["DEFAULT_TILE_SIZE", "tile_bboxes", "rasterize"]
