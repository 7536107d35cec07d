"""Disparity data contracts shared by the correlators."""

from __future__ import annotations

from dataclasses import dataclass
from typing import NamedTuple

import numpy as np

from imageview.geometry import BBox, Vector2, VectorLike, as_vector


class PixelMask(NamedTuple):
    """A displacement with a validity flag."""

    dx: int
    dy: int
    valid: bool

    @property
    def displacement(self) -> Vector2:
        return Vector2(self.dx, self.dy)


class Zone(NamedTuple):
    """Unit of work at one pyramid level: an output region and its search window."""

    region: BBox
    window: BBox


@dataclass
class DisparityMap:
    """Dense per-pixel displacements plus a validity mask.

    ``disparity`` is an int32 array of shape ``(rows, cols, 2)`` holding
    ``(dx, dy)``; ``valid`` is a boolean array of shape ``(rows, cols)``.
    """

    disparity: np.ndarray
    valid: np.ndarray

    def __post_init__(self) -> None:
        if self.disparity.ndim != 3 or self.disparity.shape[2] != 2:
            raise ValueError(f"Disparity must have shape (rows, cols, 2), got {self.disparity.shape}")
        if self.valid.shape != self.disparity.shape[:2]:
            raise ValueError(
                f"Validity mask shape {self.valid.shape} does not match disparity {self.disparity.shape[:2]}"
            )

    @classmethod
    def invalid(cls, cols: int, rows: int) -> "DisparityMap":
        return cls(
            disparity=np.zeros((rows, cols, 2), dtype=np.int32),
            valid=np.zeros((rows, cols), dtype=bool),
        )

    @property
    def cols(self) -> int:
        return self.valid.shape[1]

    @property
    def rows(self) -> int:
        return self.valid.shape[0]

    @property
    def size(self) -> Vector2:
        return Vector2(self.cols, self.rows)

    @property
    def bbox(self) -> BBox:
        return BBox.from_xywh(0, 0, self.cols, self.rows)

    def pixel(self, x: int, y: int) -> PixelMask:
        dx, dy = self.disparity[y, x]
        return PixelMask(int(dx), int(dy), bool(self.valid[y, x]))

    def crop(self, bbox: BBox) -> "DisparityMap":
        """View of ``bbox``; writes through to this map."""
        rows, cols = bbox.slices()
        return DisparityMap(self.disparity[rows, cols], self.valid[rows, cols])

    def paste(self, bbox: BBox, other: "DisparityMap") -> None:
        if other.size != bbox.size:
            raise ValueError(f"Cannot paste {other.size} into region {bbox}")
        rows, cols = bbox.slices()
        self.disparity[rows, cols] = other.disparity
        self.valid[rows, cols] = other.valid

    def shift(self, offset: VectorLike) -> "DisparityMap":
        """Add ``offset`` to every displacement in place."""
        offset = as_vector(offset)
        self.disparity[..., 0] += offset.x
        self.disparity[..., 1] += offset.y
        return self

    def copy(self) -> "DisparityMap":
        return DisparityMap(self.disparity.copy(), self.valid.copy())

    def __add__(self, offset: VectorLike) -> "DisparityMap":
        return self.copy().shift(offset)

    def __sub__(self, offset: VectorLike) -> "DisparityMap":
        return self.copy().shift(-as_vector(offset))

    def valid_bounds(self, bbox: BBox) -> BBox:
        """Tight bounding box of valid displacements inside ``bbox``.

        The max corner is exclusive, one past the largest displacement. Returns
        the empty ``BBox()`` when nothing in the region is valid.
        """
        rows, cols = bbox.slices()
        mask = self.valid[rows, cols]
        if not mask.any():
            return BBox()
        samples = self.disparity[rows, cols][mask]
        low = samples.min(axis=0)
        high = samples.max(axis=0)
        return BBox.from_corners(int(low[0]), int(low[1]), int(high[0]) + 1, int(high[1]) + 1)

    def equals(self, other: "DisparityMap") -> bool:
        return bool(np.array_equal(self.valid, other.valid) and np.array_equal(self.disparity, other.disparity))


__all__ = ["PixelMask", "Zone", "DisparityMap"]
