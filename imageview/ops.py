"""Concrete image primitives used by the correlators.

Images are numpy arrays indexed ``[row, col]``; boxes are expressed in the
array's own frame unless an origin is supplied.
"""

from __future__ import annotations

from typing import Sequence

import cv2
import numpy as np

from imageview.geometry import BBox, VectorLike, as_vector


def as_float_image(image: np.ndarray) -> np.ndarray:
    """Return a single-plane float32 copy-free view where possible."""
    image = np.asarray(image)
    if image.ndim == 3:
        if image.shape[2] == 1:
            image = image[:, :, 0]
        else:
            image = cv2.cvtColor(image.astype(np.float32, copy=False), cv2.COLOR_BGR2GRAY)
    if image.ndim != 2:
        raise ValueError(f"Expected a 2D image, got shape {image.shape}")
    return image.astype(np.float32, copy=False)


def image_bbox(image: np.ndarray, origin: VectorLike = (0, 0)) -> BBox:
    rows, cols = image.shape[:2]
    origin = as_vector(origin)
    return BBox.from_xywh(origin.x, origin.y, cols, rows)


def crop(image: np.ndarray, bbox: BBox, origin: VectorLike = (0, 0)) -> np.ndarray:
    """Crop ``bbox`` out of ``image``, replicating edge pixels outside it.

    Args:
        image: Source raster
        bbox: Region to extract, in the frame where ``image[0, 0]`` sits at ``origin``
        origin: Position of the raster's first pixel

    Returns:
        Array of exactly ``bbox.height`` x ``bbox.width`` pixels
    """
    if bbox.width < 0 or bbox.height < 0:
        raise ValueError(f"Cannot crop a negative sized region {bbox}")
    local = bbox - as_vector(origin)
    rows, cols = image.shape[:2]
    if rows == 0 or cols == 0:
        raise ValueError("Cannot crop from an empty image")

    top = max(0, -local.min.y)
    left = max(0, -local.min.x)
    bottom = max(0, local.max.y - rows)
    right = max(0, local.max.x - cols)

    if top or left or bottom or right:
        # Clamp the read window so the border only has to cover what is missing
        src = image[
            max(0, min(local.min.y, rows - 1)) : max(1, min(local.max.y, rows)),
            max(0, min(local.min.x, cols - 1)) : max(1, min(local.max.x, cols)),
        ]
        padded = cv2.copyMakeBorder(src, top, bottom, left, right, cv2.BORDER_REPLICATE)
        return padded[: bbox.height, : bbox.width]

    return np.ascontiguousarray(image[local.slices()])


def subsample(image: np.ndarray, factor: int = 2) -> np.ndarray:
    return np.ascontiguousarray(image[::factor, ::factor])


def separable_convolution(image: np.ndarray, kernel_x: Sequence[float], kernel_y: Sequence[float]) -> np.ndarray:
    """Separable filter with replicated borders, output the same size as the input."""
    kx = np.asarray(kernel_x, dtype=np.float32)
    ky = np.asarray(kernel_y, dtype=np.float32)
    return cv2.sepFilter2D(image, cv2.CV_32F, kx, ky, borderType=cv2.BORDER_REPLICATE)


def window_sum(image: np.ndarray, kernel_size: VectorLike) -> np.ndarray:
    """Sum every ``kernel_size`` window fully inside ``image``.

    The result has ``rows - kh + 1`` rows and ``cols - kw + 1`` columns; entry
    ``[r, c]`` is the sum of the window whose top-left pixel is ``[r, c]``.
    """
    kw, kh = as_vector(kernel_size)
    rows, cols = image.shape[:2]
    integral = cv2.integral(np.ascontiguousarray(image, dtype=np.float64), sdepth=cv2.CV_64F)
    out_rows = rows - kh + 1
    out_cols = cols - kw + 1
    return (
        integral[kh : kh + out_rows, kw : kw + out_cols]
        - integral[0:out_rows, kw : kw + out_cols]
        - integral[kh : kh + out_rows, 0:out_cols]
        + integral[0:out_rows, 0:out_cols]
    )


__all__ = [
    "as_float_image",
    "image_bbox",
    "crop",
    "subsample",
    "separable_convolution",
    "window_sum",
]
