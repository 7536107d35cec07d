"""Image view module."""

from .geometry import BBox, Vector2, as_vector
from .ops import as_float_image, crop, separable_convolution, subsample, window_sum
from .view import CropView, TiledView

__all__ = [
    "BBox",
    "Vector2",
    "as_vector",
    "as_float_image",
    "crop",
    "separable_convolution",
    "subsample",
    "window_sum",
    "CropView",
    "TiledView",
]
