"""Tests for the concrete image primitives and the tiled view contract."""

from __future__ import annotations

import numpy as np
import pytest

from exceptions import ContractViolationError, PointEvaluationError
from imageview.geometry import BBox, Vector2
from imageview.ops import as_float_image, crop, image_bbox, separable_convolution, subsample, window_sum
from imageview.view import CropView, TiledView


@pytest.fixture
def ramp():
    return np.arange(48, dtype=np.float32).reshape(6, 8)


def test_crop_inside_image(ramp) -> None:
    out = crop(ramp, BBox.from_corners(2, 1, 5, 4))
    np.testing.assert_array_equal(out, ramp[1:4, 2:5])


def test_crop_replicates_edges(ramp) -> None:
    out = crop(ramp, BBox.from_corners(-2, -1, 3, 2))
    assert out.shape == (3, 5)
    # Rows and columns before the image repeat the first row and column
    np.testing.assert_array_equal(out[0], [0, 0, 0, 1, 2])
    np.testing.assert_array_equal(out[1], [0, 0, 0, 1, 2])
    np.testing.assert_array_equal(out[2], [8, 8, 8, 9, 10])


def test_crop_entirely_outside(ramp) -> None:
    out = crop(ramp, BBox.from_corners(10, 7, 13, 9))
    assert out.shape == (2, 3)
    assert np.all(out == ramp[-1, -1])


def test_crop_with_origin(ramp) -> None:
    out = crop(ramp, BBox.from_corners(12, 21, 14, 23), origin=(10, 20))
    np.testing.assert_array_equal(out, ramp[1:3, 2:4])


def test_crop_rejects_negative_size(ramp) -> None:
    with pytest.raises(ValueError):
        crop(ramp, BBox.from_corners(4, 4, 2, 6))


def test_window_sum_matches_brute_force() -> None:
    rng = np.random.default_rng(1)
    image = rng.integers(0, 50, (9, 11)).astype(np.float32)
    sums = window_sum(image, (3, 5))

    assert sums.shape == (9 - 5 + 1, 11 - 3 + 1)
    for r in range(sums.shape[0]):
        for c in range(sums.shape[1]):
            assert sums[r, c] == pytest.approx(image[r : r + 5, c : c + 3].sum())


def test_separable_convolution_preserves_constant() -> None:
    image = np.full((10, 12), 7.0, dtype=np.float32)
    kernel = np.array([1, 4, 6, 4, 1], dtype=np.float32) / 16.0
    out = separable_convolution(image, kernel, kernel)
    assert out.shape == image.shape
    np.testing.assert_allclose(out, 7.0, rtol=1e-6)


def test_subsample_keeps_even_pixels(ramp) -> None:
    out = subsample(ramp)
    assert out.shape == (3, 4)
    assert out[1, 1] == ramp[2, 2]
    assert subsample(np.zeros((5, 7))).shape == (3, 4)


def test_as_float_image_converts_colour() -> None:
    colour = np.zeros((4, 5, 3), dtype=np.uint8)
    colour[..., 1] = 100
    grey = as_float_image(colour)
    assert grey.shape == (4, 5)
    assert grey.dtype == np.float32
    assert np.all(grey > 0)


def test_as_float_image_rejects_volumes() -> None:
    with pytest.raises(ValueError):
        as_float_image(np.zeros((2, 3, 4, 5)))


def test_crop_view_addresses_global_frame(ramp) -> None:
    view = CropView(ramp, (100, 200))
    assert view.bbox == BBox.from_xywh(100, 200, 8, 6)
    assert view.origin == Vector2(100, 200)
    np.testing.assert_array_equal(view.crop(BBox.from_corners(101, 201, 103, 202)), ramp[1:2, 1:3])
    assert image_bbox(ramp, (1, 1)) == BBox.from_xywh(1, 1, 8, 6)


class _ConstantView(TiledView):
    @property
    def cols(self) -> int:
        return 8

    @property
    def rows(self) -> int:
        return 4

    def prerasterize(self, bbox):
        return CropView(np.ones((bbox.height, bbox.width)), bbox.min)


class TestTiledView:
    """Test the pull-based view contract."""

    def test_point_evaluation_not_supported(self):
        """Views reject single pixel access."""
        view = _ConstantView()
        with pytest.raises(PointEvaluationError):
            view(0, 0)

    def test_point_evaluation_error_types(self):
        """The error is both a contract violation and NotImplementedError."""
        with pytest.raises(NotImplementedError):
            _ConstantView()(1, 1, 0)
        assert issubclass(PointEvaluationError, ContractViolationError)

    def test_rasterize_defaults_to_full_view(self):
        """Rasterizing without a box covers the whole view."""
        view = _ConstantView()
        assert view.bbox == BBox.from_xywh(0, 0, 8, 4)
        assert view.planes == 1
        assert view.rasterize().shape == (4, 8)
