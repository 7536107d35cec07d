"""Tests for pyramid depth selection and construction."""

from __future__ import annotations

import numpy as np
import pytest

from correlation.prefilter import NullPrefilter
from correlation.pyramid import (
    BINOMIAL_KERNEL,
    build_pyramid,
    max_level_by_search,
    max_level_by_tile,
    pyramid_depth,
)
from imageview.geometry import BBox


@pytest.mark.parametrize(
    "search, expected",
    [
        (BBox.from_corners(-10, -10, 10, 10), 3),  # size 20
        (BBox.from_corners(0, 0, 4, 0), 1),
        (BBox.from_corners(-40, -2, 40, 2), 5),  # size 80
        (BBox.from_corners(0, 0, 1, 1), 0),
        (BBox.from_corners(0, 0, 0, 0), 0),
    ],
)
def test_max_level_by_search(search, expected) -> None:
    assert max_level_by_search(search) == expected


@pytest.mark.parametrize(
    "tile, kernel, expected",
    [
        (BBox.from_xywh(0, 0, 64, 64), (7, 7), 3),
        (BBox.from_xywh(0, 0, 256, 16), (7, 7), 1),
        (BBox.from_xywh(0, 0, 5, 5), (7, 7), 0),
        (BBox.from_xywh(0, 0, 128, 128), (1, 1), 7),
        (BBox(), (7, 7), 0),
    ],
)
def test_max_level_by_tile(tile, kernel, expected) -> None:
    assert max_level_by_tile(tile, kernel) == expected


def test_depth_is_the_tighter_limit() -> None:
    wide_search = BBox.from_corners(-100, 0, 100, 0)
    assert pyramid_depth(wide_search, BBox.from_xywh(0, 0, 64, 64), (7, 7)) == 3
    narrow_search = BBox.from_corners(-2, -2, 2, 2)
    assert pyramid_depth(narrow_search, BBox.from_xywh(0, 0, 256, 256), (7, 7)) == 1


def test_binomial_kernel_is_normalized() -> None:
    assert BINOMIAL_KERNEL.sum() == pytest.approx(1.0)
    np.testing.assert_allclose(BINOMIAL_KERNEL * 16, [1, 4, 6, 4, 1])


def test_build_pyramid_halves_each_level() -> None:
    image = np.random.default_rng(0).random((50, 70)).astype(np.float32)
    pyramid = build_pyramid(image, BBox.from_xywh(-3, -3, 65, 48), 3, NullPrefilter())

    assert [level.shape for level in pyramid] == [(48, 65), (24, 33), (12, 17), (6, 9)]


def test_build_pyramid_zero_levels_is_the_crop() -> None:
    image = np.arange(100, dtype=np.float32).reshape(10, 10)
    pyramid = build_pyramid(image, BBox.from_xywh(2, 3, 4, 5), 0, NullPrefilter())
    assert len(pyramid) == 1
    np.testing.assert_array_equal(pyramid[0], image[3:8, 2:6])


def test_constant_image_stays_constant() -> None:
    image = np.full((32, 32), 12.0, dtype=np.float32)
    for level in build_pyramid(image, BBox.from_xywh(0, 0, 32, 32), 3, NullPrefilter()):
        np.testing.assert_allclose(level, 12.0, rtol=1e-6)


def test_prefilter_applied_to_every_level_after_smoothing() -> None:
    seen = []

    def record(level):
        seen.append(level.copy())
        return level * 0.0

    image = np.full((16, 16), 4.0, dtype=np.float32)
    pyramid = build_pyramid(image, BBox.from_xywh(0, 0, 16, 16), 2, record)

    assert len(seen) == 3
    # The filter output never feeds the next level
    np.testing.assert_allclose(seen[2], 4.0, rtol=1e-6)
    assert all(not level.any() for level in pyramid)
