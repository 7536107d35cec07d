"""Tests for exhaustive block matching."""

from __future__ import annotations

import numpy as np
import pytest

from correlation.block_match import best_of_search_convolution
from correlation.cost import AbsoluteCost, NCCCost, SquaredCost
from imageview.geometry import BBox


@pytest.fixture
def column_shifted():
    """Rasters where right[y, x + 2] == left[y, x]."""
    rng = np.random.default_rng(11)
    base = rng.integers(0, 256, (40, 60)).astype(np.float32)
    return base[:, 10:50], base[:, 8:48]


@pytest.mark.parametrize("cost", [AbsoluteCost(), SquaredCost(), NCCCost()])
def test_finds_known_displacement(column_shifted, cost) -> None:
    left, right = column_shifted
    result = best_of_search_convolution(cost, left, right, BBox.from_xywh(5, 5, 20, 20), (5, 5), (3, 3))

    assert result.size == (18, 18)
    assert result.valid.all()
    assert np.all(result.disparity[..., 0] == 2)
    assert np.all(result.disparity[..., 1] == 0)


def test_output_is_region_minus_kernel(column_shifted) -> None:
    left, right = column_shifted
    result = best_of_search_convolution(AbsoluteCost(), left, right, BBox.from_xywh(0, 0, 15, 11), (3, 3), (5, 7))
    assert (result.cols, result.rows) == (11, 5)


def test_displacements_stay_in_search_volume() -> None:
    rng = np.random.default_rng(5)
    left = rng.random((30, 30)).astype(np.float32)
    right = rng.random((30, 30)).astype(np.float32)
    result = best_of_search_convolution(AbsoluteCost(), left, right, BBox.from_xywh(2, 2, 20, 20), (4, 3), (5, 5))

    assert result.disparity[..., 0].min() >= 0
    assert result.disparity[..., 0].max() <= 3
    assert result.disparity[..., 1].min() >= 0
    assert result.disparity[..., 1].max() <= 2


def test_flat_windows_are_invalid_for_ncc() -> None:
    left = np.full((20, 20), 9.0, dtype=np.float32)
    right = np.full((20, 20), 9.0, dtype=np.float32)
    result = best_of_search_convolution(NCCCost(), left, right, BBox.from_xywh(0, 0, 10, 10), (3, 3), (3, 3))
    assert not result.valid.any()


def test_first_candidate_wins_ties() -> None:
    left = np.full((20, 20), 9.0, dtype=np.float32)
    result = best_of_search_convolution(AbsoluteCost(), left, left, BBox.from_xywh(0, 0, 10, 10), (3, 3), (3, 3))
    assert result.valid.all()
    assert not result.disparity.any()


def test_region_too_small_for_kernel(column_shifted) -> None:
    left, right = column_shifted
    result = best_of_search_convolution(AbsoluteCost(), left, right, BBox.from_xywh(0, 0, 2, 2), (3, 3), (3, 3))
    assert result.size == (0, 0)
