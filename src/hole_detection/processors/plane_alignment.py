"""Rejection of holes whose border does not lie on the table plane."""

import numpy as np

from ..exceptions import DegenerateGeometryError
from ..frame import Hole, OrganizedGrid, PlaneModel, TableHull
from .plane import point_to_plane_distance
from .polygon import points_in_polygon


def mean_plane_distance(points: np.ndarray, plane: PlaneModel) -> float:
    """Mean absolute distance of ``(N, 3)`` points to the plane.

    Raises:
        DegenerateGeometryError: If there are no points.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if points.shape[0] == 0:
        raise DegenerateGeometryError("Mean plane distance of an empty point set")
    return float(point_to_plane_distance(points, plane).mean())


def border_inside_mask(hole: Hole, hull: TableHull) -> np.ndarray:
    """Boolean mask of the hole's border samples lying inside the table hull."""
    if not hole.border:
        return np.zeros(0, dtype=bool)
    return points_in_polygon(hull.polygon, np.asarray(hole.border, dtype=np.int64))


def is_inside_hole_aligned(
    grid: OrganizedGrid, hole: Hole, plane: PlaneModel, plane_dist_threshold: float
) -> bool:
    """True if the mean distance of the whole border to the plane is within threshold."""
    mean_dist = mean_plane_distance(grid.points_at(hole.border), plane)
    return mean_dist <= plane_dist_threshold


def is_overlap_hole_aligned(
    grid: OrganizedGrid,
    hole: Hole,
    plane: PlaneModel,
    inside_mask: np.ndarray,
    threshold: float,
) -> bool:
    """True if the border samples inside the hull are, on average, within threshold.

    Raises:
        DegenerateGeometryError: If no border sample lies inside the hull.
    """
    border_points = grid.points_at(hole.border)
    mean_dist = mean_plane_distance(border_points[inside_mask], plane)
    return mean_dist <= threshold
