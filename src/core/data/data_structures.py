"""Spatial data structures for mission coordinates and regions.

Data Flow:
1. MissionConfig labels/zones (YAML x, y) -> Vector2 / Rect (mission logic)
2. Rect collections -> numpy bounds arrays (batch containment queries)
"""

from dataclasses import dataclass
from typing import Optional, Union
import numpy as np
from numpy.typing import NDArray


@dataclass(frozen=True)
class Vector2:
    """2D vector for map coordinates.

    Uses (y, x) ordering for direct alignment with 2D array access patterns.
    First parameter is row (y-coordinate), second is column (x-coordinate).
    Mission files speak in x/y labels, so construct with keywords when in doubt.
    """
    y: int
    x: int

    def __add__(self, other: "Vector2") -> "Vector2":
        """Vector addition."""
        return Vector2(self.y + other.y, self.x + other.x)

    def __sub__(self, other: "Vector2") -> "Vector2":
        """Vector subtraction."""
        return Vector2(self.y - other.y, self.x - other.x)

    def __iter__(self):
        """Make Vector2 iterable for unpacking (y, x order)."""
        yield self.y
        yield self.x

    def __repr__(self) -> str:
        return f"Vector2({self.y}, {self.x})"

    def manhattan_distance_to(self, other: "Vector2") -> int:
        """Calculate Manhattan distance to another vector."""
        return abs(self.y - other.y) + abs(self.x - other.x)

    @classmethod
    def from_xy(cls, x: int, y: int) -> "Vector2":
        """Create Vector2 from map-label order (x, y)."""
        return cls(y=int(y), x=int(x))

    def to_tuple(self) -> tuple[int, int]:
        """Convert to coordinate tuple (y, x order)."""
        return (self.y, self.x)

    def to_numpy(self) -> NDArray[np.int32]:
        """Convert to numpy array (y, x order)."""
        return np.array([self.y, self.x], dtype=np.int32)


@dataclass(frozen=True)
class Rect:
    """Axis-aligned rectangle with inclusive min/max corners.

    Mirrors how mission labels describe areas: {x, y, x2, y2}, both corners
    part of the area.
    """
    min_y: int
    min_x: int
    max_y: int
    max_x: int

    @classmethod
    def from_corners(cls, x: int, y: int, x2: int, y2: int) -> "Rect":
        """Create a Rect from label order corners. Corners are not reordered."""
        return cls(min_y=int(y), min_x=int(x), max_y=int(y2), max_x=int(x2))

    @property
    def is_well_formed(self) -> bool:
        """True when min <= max on both axes."""
        return self.min_y <= self.max_y and self.min_x <= self.max_x

    @property
    def width(self) -> int:
        return self.max_x - self.min_x + 1

    @property
    def height(self) -> int:
        return self.max_y - self.min_y + 1

    @property
    def center(self) -> Vector2:
        """Integer center cell of the rectangle."""
        return Vector2((self.min_y + self.max_y) // 2, (self.min_x + self.max_x) // 2)

    def contains(self, point: Vector2) -> bool:
        """Inclusive containment test."""
        return (self.min_y <= point.y <= self.max_y and
                self.min_x <= point.x <= self.max_x)

    def to_numpy(self) -> NDArray[np.int32]:
        """Bounds as (min_y, min_x, max_y, max_x)."""
        return np.array([self.min_y, self.min_x, self.max_y, self.max_x], dtype=np.int32)


class VectorArray:
    """Collection of Vector2 positions backed by an (N, 2) numpy array.

    Used for batch containment checks against mission zones.
    """

    def __init__(self, vectors: Optional[Union[list[Vector2], NDArray[np.int32]]] = None):
        if vectors is None:
            self._data = np.empty((0, 2), dtype=np.int32)
        elif isinstance(vectors, list):
            if not vectors:
                self._data = np.empty((0, 2), dtype=np.int32)
            else:
                self._data = np.array([[v.y, v.x] for v in vectors], dtype=np.int32)
        else:
            if vectors.ndim != 2 or vectors.shape[-1] != 2:
                raise ValueError("Numpy array must have shape (N, 2)")
            self._data = vectors.astype(np.int32)

    @property
    def data(self) -> NDArray[np.int32]:
        """Get the underlying numpy array (N, 2) shape."""
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def __iter__(self):
        for row in self._data:
            yield Vector2(int(row[0]), int(row[1]))

    def to_vector_list(self) -> list[Vector2]:
        """Convert to list of Vector2 objects."""
        return [Vector2(int(row[0]), int(row[1])) for row in self._data]

    def within_rect(self, rect: Rect) -> NDArray[np.bool_]:
        """Boolean mask of positions inside the rectangle (inclusive).

        Args:
            rect: Rectangle to test against

        Returns:
            Array of shape (N,) with True for contained positions
        """
        ys = self._data[:, 0]
        xs = self._data[:, 1]
        return ((ys >= rect.min_y) & (ys <= rect.max_y) &
                (xs >= rect.min_x) & (xs <= rect.max_x))

    def filter_by_rect(self, rect: Rect) -> "VectorArray":
        """New VectorArray with only the positions inside the rectangle."""
        return VectorArray(self._data[self.within_rect(rect)])
