"""Integer vectors and bounding boxes for image regions and search windows."""

from __future__ import annotations

from dataclasses import dataclass, field
from numbers import Integral
from typing import Iterable, NamedTuple, Tuple, Union


class Vector2(NamedTuple):
    """Integer 2D vector, x is the column axis and y the row axis."""

    x: int = 0
    y: int = 0

    def __add__(self, other) -> "Vector2":  # type: ignore[override]
        other = as_vector(other)
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other) -> "Vector2":
        other = as_vector(other)
        return Vector2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> "Vector2":
        return Vector2(-self.x, -self.y)

    def __mul__(self, scale: int) -> "Vector2":  # type: ignore[override]
        return Vector2(self.x * scale, self.y * scale)

    __rmul__ = __mul__

    def __floordiv__(self, divisor: int) -> "Vector2":
        return Vector2(self.x // divisor, self.y // divisor)

    def prod(self) -> int:
        return self.x * self.y

    def max(self) -> int:
        return max(self.x, self.y)

    def min(self) -> int:
        return min(self.x, self.y)


VectorLike = Union[Vector2, Tuple[int, int], Iterable[int]]


def as_vector(value: VectorLike) -> Vector2:
    if isinstance(value, Vector2):
        return value
    x, y = value
    return Vector2(int(x), int(y))


@dataclass(frozen=True)
class BBox:
    """Axis-aligned integer rectangle with inclusive min and exclusive max.

    The default ``BBox()`` is the empty sentinel. Any box with a non-positive
    width or height is considered empty.
    """

    min: Vector2 = field(default_factory=Vector2)
    max: Vector2 = field(default_factory=Vector2)

    def __post_init__(self) -> None:
        object.__setattr__(self, "min", as_vector(self.min))
        object.__setattr__(self, "max", as_vector(self.max))

    @classmethod
    def from_xywh(cls, x: int, y: int, width: int, height: int) -> "BBox":
        return cls(Vector2(x, y), Vector2(x + width, y + height))

    @classmethod
    def from_corners(cls, min_x: int, min_y: int, max_x: int, max_y: int) -> "BBox":
        return cls(Vector2(min_x, min_y), Vector2(max_x, max_y))

    @property
    def width(self) -> int:
        return self.max.x - self.min.x

    @property
    def height(self) -> int:
        return self.max.y - self.min.y

    @property
    def size(self) -> Vector2:
        return Vector2(self.width, self.height)

    def area(self) -> int:
        if self.width < 0 or self.height < 0:
            return 0
        return self.width * self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def __add__(self, offset: VectorLike) -> "BBox":
        offset = as_vector(offset)
        return BBox(self.min + offset, self.max + offset)

    def __sub__(self, offset: VectorLike) -> "BBox":
        offset = as_vector(offset)
        return BBox(self.min - offset, self.max - offset)

    def expand(self, amount: Union[int, VectorLike]) -> "BBox":
        """Move min down and max up by ``amount`` on each axis."""
        if isinstance(amount, Integral):
            amount = Vector2(int(amount), int(amount))
        amount = as_vector(amount)
        return BBox(self.min - amount, self.max + amount)

    def extend_max(self, amount: VectorLike) -> "BBox":
        return BBox(self.min, self.max + as_vector(amount))

    def grow(self, other: "BBox") -> "BBox":
        """Union with ``other``; empty boxes do not contribute."""
        if other.is_empty():
            return self
        if self.is_empty():
            return other
        return BBox(
            Vector2(min(self.min.x, other.min.x), min(self.min.y, other.min.y)),
            Vector2(max(self.max.x, other.max.x), max(self.max.y, other.max.y)),
        )

    def crop(self, other: "BBox") -> "BBox":
        """Intersection with ``other`` (may come back empty)."""
        return BBox(
            Vector2(max(self.min.x, other.min.x), max(self.min.y, other.min.y)),
            Vector2(min(self.max.x, other.max.x), min(self.max.y, other.max.y)),
        )

    def scale(self, factor: int) -> "BBox":
        return BBox(self.min * factor, self.max * factor)

    def shrink(self, divisor: int) -> "BBox":
        return BBox(self.min // divisor, self.max // divisor)

    def contains(self, point: VectorLike) -> bool:
        point = as_vector(point)
        return self.min.x <= point.x < self.max.x and self.min.y <= point.y < self.max.y

    def intersects(self, other: "BBox") -> bool:
        return not self.crop(other).is_empty()

    def slices(self) -> Tuple[slice, slice]:
        """Row/column slices for indexing a numpy array in this box's frame."""
        return slice(self.min.y, self.max.y), slice(self.min.x, self.max.x)

    def __repr__(self) -> str:
        return f"BBox(({self.min.x}, {self.min.y}) -> ({self.max.x}, {self.max.y}))"


__all__ = ["Vector2", "BBox", "VectorLike", "as_vector"]
