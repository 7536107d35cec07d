"""Tests for tiled rasterization."""

from __future__ import annotations

import numpy as np
import pytest

from correlation.flat import CorrelationView
from correlation.prefilter import NullPrefilter
from correlation.pyramid_view import PyramidCorrelationView
from imageview.geometry import BBox
from imageview.rasterize import rasterize, tile_bboxes


def test_tiles_cover_region_once() -> None:
    bbox = BBox.from_xywh(3, 4, 50, 30)
    tiles = tile_bboxes(bbox, (16, 16))

    assert len(tiles) == 4 * 2
    counts = np.zeros((bbox.height, bbox.width), dtype=int)
    for tile in tiles:
        assert not tile.is_empty()
        counts[(tile - bbox.min).slices()] += 1
    assert (counts == 1).all()


def test_tiles_are_row_major() -> None:
    tiles = tile_bboxes(BBox.from_xywh(0, 0, 20, 20), (10, 10))
    assert [tile.min for tile in tiles] == [(0, 0), (10, 0), (0, 10), (10, 10)]


def test_edge_tiles_are_clipped() -> None:
    tiles = tile_bboxes(BBox.from_xywh(0, 0, 25, 10), (10, 10))
    assert tiles[-1] == BBox.from_corners(20, 0, 25, 10)


def test_tile_size_must_be_positive() -> None:
    with pytest.raises(ValueError):
        tile_bboxes(BBox.from_xywh(0, 0, 10, 10), (0, 10))


def test_tiled_flat_matches_single_pass(shifted_pair, search_region, kernel_size) -> None:
    left, right = shifted_pair
    view = CorrelationView(left, right, NullPrefilter(), search_region, kernel_size)

    whole = view.prerasterize(view.bbox).buffer
    tiled = rasterize(view, tile_size=(16, 24))
    assert tiled.equals(whole)


def test_thread_pool_matches_sequential(shifted_pair, search_region, kernel_size) -> None:
    left, right = shifted_pair
    view = PyramidCorrelationView(left, right, NullPrefilter(), search_region, kernel_size)

    sequential = rasterize(view, tile_size=(32, 32), num_workers=1)
    threaded = rasterize(view, tile_size=(32, 32), num_workers=4)
    assert threaded.equals(sequential)


def test_sub_region(shifted_pair, search_region, kernel_size, true_shift) -> None:
    left, right = shifted_pair
    view = CorrelationView(left, right, NullPrefilter(), search_region, kernel_size)
    bbox = BBox.from_xywh(20, 20, 24, 16)

    disparity = rasterize(view, bbox, tile_size=(10, 10), num_workers=2)
    assert disparity.size == (24, 16)
    assert disparity.valid.all()
    assert np.all(disparity.disparity[..., 0] == true_shift[0])
    assert np.all(disparity.disparity[..., 1] == true_shift[1])
