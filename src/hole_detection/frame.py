"""Value types exchanged between the detector stages and its callers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from .exceptions import ValidationError

Coord = Tuple[int, int]  # (col, row)
BBox = Tuple[int, int, int, int]  # (min_col, min_row, max_col, max_row)


class OrganizedGrid:
    """A row-major ``height x width`` grid of 3D samples.

    Samples with any non-finite coordinate are invalid (missing depth).
    The wrapped array is not copied and must not be modified while a
    detection run is using it.
    """

    def __init__(self, points: np.ndarray):
        points = np.asarray(points)
        if points.ndim != 3 or points.shape[2] != 3:
            raise ValidationError(
                "Grid must have shape (height, width, 3)",
                {"shape": tuple(points.shape)},
            )
        if points.shape[0] == 0 or points.shape[1] == 0:
            raise ValidationError("Grid cannot be empty", {"shape": tuple(points.shape)})
        if not np.issubdtype(points.dtype, np.floating):
            points = points.astype(np.float64)

        self.points = points
        self.finite_mask = np.isfinite(points).all(axis=2)

    @property
    def width(self) -> int:
        return int(self.points.shape[1])

    @property
    def height(self) -> int:
        return int(self.points.shape[0])

    @property
    def size(self) -> int:
        return self.width * self.height

    @property
    def is_organized(self) -> bool:
        return self.height > 1

    def point_at(self, col: int, row: int) -> np.ndarray:
        return self.points[row, col]

    def points_at(self, coords: Sequence[Coord]) -> np.ndarray:
        """Gather the samples at ``coords`` into an ``(N, 3)`` array."""
        if len(coords) == 0:
            return np.empty((0, 3), dtype=self.points.dtype)
        arr = np.asarray(coords, dtype=np.int64)
        return self.points[arr[:, 1], arr[:, 0]]


@dataclass(frozen=True)
class PlaneModel:
    """Plane ``a*x + b*y + c*z + d = 0``; the normal need not be unit length."""

    a: float
    b: float
    c: float
    d: float

    def __post_init__(self):
        if not np.all(np.isfinite([self.a, self.b, self.c, self.d])):
            raise ValidationError("Plane coefficients must be finite", {"plane": self.coefficients})
        if np.linalg.norm(self.normal) == 0.0:
            raise ValidationError("Plane normal cannot be zero", {"plane": self.coefficients})

    @classmethod
    def from_coefficients(cls, coefficients: Sequence[float]) -> "PlaneModel":
        values = [float(v) for v in np.asarray(coefficients, dtype=np.float64).ravel()]
        if len(values) != 4:
            raise ValidationError("Plane model needs exactly 4 coefficients", {"count": len(values)})
        return cls(*values)

    @property
    def coefficients(self) -> Tuple[float, float, float, float]:
        return (self.a, self.b, self.c, self.d)

    @property
    def normal(self) -> np.ndarray:
        return np.array([self.a, self.b, self.c], dtype=np.float64)

    @property
    def unit_normal(self) -> np.ndarray:
        n = self.normal
        return n / np.linalg.norm(n)

    def normalized(self) -> "PlaneModel":
        norm = float(np.linalg.norm(self.normal))
        return PlaneModel(self.a / norm, self.b / norm, self.c / norm, self.d / norm)


@dataclass(frozen=True)
class TableHull:
    """Convex hull of the table surface in grid and sensor coordinates."""

    indices: Tuple[int, ...]
    polygon: np.ndarray  # (N, 2) int (col, row)
    points: np.ndarray  # (N, 3) float
    bbox: BBox


@dataclass(frozen=True)
class Hole:
    """A 4-connected component of invalid samples and its finite border."""

    interior: Tuple[Coord, ...]
    border: Tuple[Coord, ...]

    @property
    def size(self) -> int:
        return len(self.interior)

    @property
    def seed(self) -> Coord:
        return self.interior[0]


class HoleClass(str, Enum):
    """Position of a hole relative to the table hull."""
    INSIDE = "inside"
    OVERLAP = "overlap"
    OUTSIDE = "outside"


@dataclass
class HoleOutline:
    """Accepted outline of one hole, ordered along its convex hull."""

    points: np.ndarray  # (K, 3) points on the plane, sensor frame
    grid_polygon: np.ndarray  # (K, 2) int (col, row) of the source border samples
    label: HoleClass
    hole_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "label": self.label.value,
            "hole_size": self.hole_size,
            "points": self.points.tolist(),
            "grid_polygon": self.grid_polygon.tolist(),
        }


@dataclass
class HoleDetectionResult:
    """Everything one detection run produces for a frame."""

    outlines: List[HoleOutline] = field(default_factory=list)
    removal_indices: np.ndarray = field(default_factory=lambda: np.empty(0, dtype=np.int64))
    stats: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "holes": [outline.to_dict() for outline in self.outlines],
            "remove_indices": self.removal_indices.tolist(),
            "stats": {k: v for k, v in self.stats.items() if k != "start_time"},
        }
