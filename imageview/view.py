"""Pull-based tiled view contract.

A view does its work one rectangular region at a time through
``prerasterize``; the returned ``CropView`` pairs a concrete buffer with the
position of its first pixel so callers can address it in global coordinates.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np

from exceptions import PointEvaluationError
from imageview.geometry import BBox, Vector2, VectorLike, as_vector
from imageview.ops import crop, image_bbox
from log_config.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CropView:
    """A concrete buffer placed at ``origin`` in some larger frame."""

    buffer: Any
    origin: Vector2 = Vector2(0, 0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "origin", as_vector(self.origin))

    @property
    def bbox(self) -> BBox:
        if isinstance(self.buffer, np.ndarray):
            return image_bbox(self.buffer, self.origin)
        return BBox.from_xywh(self.origin.x, self.origin.y, self.buffer.cols, self.buffer.rows)

    def crop(self, bbox: BBox) -> np.ndarray:
        """Edge-extended crop of an array buffer, ``bbox`` in the global frame."""
        return crop(self.buffer, bbox, self.origin)


class TiledView(ABC):
    """Base for views that can only be evaluated a tile at a time."""

    @property
    @abstractmethod
    def cols(self) -> int:
        """Number of columns in the full view."""

    @property
    @abstractmethod
    def rows(self) -> int:
        """Number of rows in the full view."""

    @property
    def planes(self) -> int:
        return 1

    @property
    def bbox(self) -> BBox:
        return BBox.from_xywh(0, 0, self.cols, self.rows)

    def __call__(self, i: int, j: int, p: int = 0):
        message = f"{type(self).__name__}.__call__({i}, {j}, {p}) has not been implemented."
        logger.error(message)
        raise PointEvaluationError(message)

    @abstractmethod
    def prerasterize(self, bbox: BBox) -> CropView:
        """Compute ``bbox`` and return the buffer positioned at ``bbox.min``."""

    def rasterize(self, bbox: Optional[BBox] = None):
        """Compute ``bbox`` (default the whole view) and return its buffer."""
        if bbox is None:
            bbox = self.bbox
        return self.prerasterize(bbox).buffer


__all__ = ["CropView", "TiledView"]
