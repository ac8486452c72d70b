"""Projection of hole borders onto the plane and convex outline extraction."""

from typing import List, Sequence, Tuple

import cv2
import numpy as np

from ..exceptions import DegenerateGeometryError
from ..frame import Coord, Hole, HoleClass, HoleOutline, OrganizedGrid, PlaneModel
from ..utils.logging_utils import get_logger
from .plane import (
    point_to_plane_distance,
    project_point_perspective,
    project_points_orthogonal,
    to_plane_coordinates,
)

logger = get_logger(__name__)


def adjust_overlap_border(
    grid: OrganizedGrid,
    hole: Hole,
    plane: PlaneModel,
    inside_mask: np.ndarray,
    distance_limit: float,
) -> Tuple[np.ndarray, List[Coord], np.ndarray]:
    """Replace off-plane border samples of an overlapping hole by their projection.

    Samples farther than ``distance_limit`` from the plane are moved onto it
    along their viewing ray. Samples whose projection does not exist are
    dropped from the border.

    Returns:
        Tuple of (``(M, 3)`` points, their source coordinates, inside-hull flags)
    """
    raw_points = grid.points_at(hole.border).astype(np.float64)
    distances = point_to_plane_distance(raw_points, plane)

    points: List[np.ndarray] = []
    coords: List[Coord] = []
    inside: List[bool] = []
    dropped = 0
    for point, dist, coord, is_inside in zip(raw_points, distances, hole.border, inside_mask):
        if dist > distance_limit:
            projection = project_point_perspective(point, plane)
            if projection is None:
                dropped += 1
                continue
            point = projection
        points.append(point)
        coords.append(coord)
        inside.append(bool(is_inside))

    if dropped:
        logger.debug(f"Dropped {dropped} border samples without plane projection "
                     f"(hole seed {hole.seed})")

    return (np.asarray(points, dtype=np.float64).reshape(-1, 3),
            coords,
            np.asarray(inside, dtype=bool))


def build_outline(
    points: np.ndarray,
    coords: Sequence[Coord],
    plane: PlaneModel,
    label: HoleClass,
    hole_size: int,
) -> HoleOutline:
    """Project border points onto the plane and take their 2D convex hull.

    Args:
        points: ``(N, 3)`` border points
        coords: Grid coordinates the points came from, same order
        plane: The table plane
        label: Class of the hole the border belongs to
        hole_size: Number of interior samples of the hole

    Returns:
        Outline with hull vertices in hull order

    Raises:
        DegenerateGeometryError: If fewer than 3 points or hull vertices remain.
    """
    points = np.asarray(points, dtype=np.float64).reshape(-1, 3)
    if points.shape[0] < 3:
        raise DegenerateGeometryError(
            "Convex hull needs at least 3 points", {"points": points.shape[0]}
        )

    projected = project_points_orthogonal(points, plane)
    plane_2d = to_plane_coordinates(projected, plane).astype(np.float32)

    hull_indices = cv2.convexHull(plane_2d, returnPoints=False)
    hull_indices = np.asarray(hull_indices, dtype=np.int64).ravel()
    if hull_indices.shape[0] < 3:
        raise DegenerateGeometryError(
            "Convex hull of the border is degenerate", {"vertices": hull_indices.shape[0]}
        )

    grid_coords = np.asarray(coords, dtype=np.int64).reshape(-1, 2)
    return HoleOutline(
        points=projected[hull_indices],
        grid_polygon=grid_coords[hull_indices],
        label=label,
        hole_size=hole_size,
    )
