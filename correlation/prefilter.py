"""Image pre-filters applied before cost computation.

Any callable mapping a float image to a float image of the same shape can be
used as a pre-filter; the classes here cover the usual choices.
"""

from __future__ import annotations

from typing import Callable, Optional

import cv2
import numpy as np

PreFilter = Callable[[np.ndarray], np.ndarray]

PREFILTER_TYPES = ("none", "laplacian_of_gaussian", "subtracted_mean", "normalize")


class NullPrefilter:
    def __call__(self, image: np.ndarray) -> np.ndarray:
        return image


class LaplacianOfGaussianPrefilter:
    """Band-pass the image, which removes brightness offsets between cameras."""

    def __init__(self, sigma: float = 1.5) -> None:
        if sigma <= 0:
            raise ValueError(f"sigma must be positive, got {sigma}")
        self.sigma = sigma

    def __call__(self, image: np.ndarray) -> np.ndarray:
        blurred = cv2.GaussianBlur(image, (0, 0), self.sigma, borderType=cv2.BORDER_REPLICATE)
        return cv2.Laplacian(blurred, cv2.CV_32F, ksize=3, borderType=cv2.BORDER_REPLICATE)


class SubtractedMeanPrefilter:
    """Subtract a Gaussian-weighted local mean."""

    def __init__(self, sigma: float = 3.0) -> None:
        if sigma <= 0:
            raise ValueError(f"sigma must be positive, got {sigma}")
        self.sigma = sigma

    def __call__(self, image: np.ndarray) -> np.ndarray:
        image = image.astype(np.float32, copy=False)
        mean = cv2.GaussianBlur(image, (0, 0), self.sigma, borderType=cv2.BORDER_REPLICATE)
        return image - mean


class NormalizePrefilter:
    """Contrast normalisation to zero mean and unit variance."""

    def __call__(self, image: np.ndarray) -> np.ndarray:
        image = image.astype(np.float32, copy=False)
        std = float(image.std())
        if std == 0.0:
            return image - image.mean()
        return (image - image.mean()) / std


def make_prefilter(prefilter_type: str = "none", sigma: Optional[float] = None) -> PreFilter:
    """Build a pre-filter by name.

    Args:
        prefilter_type: One of ``PREFILTER_TYPES``
        sigma: Gaussian width for the filters that take one (their default when None)

    Returns:
        Callable pre-filter
    """
    if prefilter_type == "none":
        return NullPrefilter()
    if prefilter_type == "laplacian_of_gaussian":
        return LaplacianOfGaussianPrefilter() if sigma is None else LaplacianOfGaussianPrefilter(sigma)
    if prefilter_type == "subtracted_mean":
        return SubtractedMeanPrefilter() if sigma is None else SubtractedMeanPrefilter(sigma)
    if prefilter_type == "normalize":
        return NormalizePrefilter()
    raise ValueError(f"Unknown prefilter type: {prefilter_type}")


__all__ = [
    "PreFilter",
    "PREFILTER_TYPES",
    "NullPrefilter",
    "LaplacianOfGaussianPrefilter",
    "SubtractedMeanPrefilter",
    "NormalizePrefilter",
    "make_prefilter",
]
