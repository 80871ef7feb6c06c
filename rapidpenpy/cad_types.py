import math
from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np

from .constants import POINT_TOLERANCE


@dataclass(frozen=True, eq=False)
class Point:
    """A position (or a relative offset) in the drawing plane."""

    x: float
    y: float

    def __post_init__(self):
        object.__setattr__(self, "x", float(self.x))
        object.__setattr__(self, "y", float(self.y))

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Point):
            return self.equals(other)
        if isinstance(other, (tuple, list)) and len(other) == 2:
            return self.equals(Point(other[0], other[1]))
        return NotImplemented

    # tolerant equality is not transitive, so no hash can agree with it
    __hash__ = None

    def __iter__(self):
        yield self.x
        yield self.y

    def __str__(self):
        return f"Point(x={self.x}, y={self.y})"

    def equals(self, other: "Point", tolerance: float = POINT_TOLERANCE) -> bool:
        return (
            abs(self.x - other.x) < tolerance and abs(self.y - other.y) < tolerance
        )

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y)

    def as_array(self) -> np.ndarray:
        return np.array((self.x, self.y), dtype=float)

    @staticmethod
    def from_array(array: Sequence[float]) -> "Point":
        return Point(float(array[0]), float(array[1]))

    def to_json(self):
        return {"x": float(self.x), "y": float(self.y)}

    @staticmethod
    def from_json(json_data):
        return Point(json_data["x"], json_data["y"])

    def to_python(self):
        return f"Point(x={self.x}, y={self.y})"


ORIGIN = Point(0.0, 0.0)

PointLike = Union[Point, Tuple[float, float]]


def to_point(value: PointLike) -> Point:
    """Coerce a ``(x, y)`` pair or a Point into a Point."""
    if isinstance(value, Point):
        return value
    if isinstance(value, np.ndarray):
        return Point.from_array(value)
    x, y = value
    return Point(x, y)
