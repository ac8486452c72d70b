"""2D polygon containment, bounding boxes and polygon edge distances."""

from typing import Iterable, Sequence

import numpy as np

from ..exceptions import DegenerateGeometryError, MissingInputError
from ..frame import BBox, Coord, OrganizedGrid, TableHull
from .coordinates import indices_to_coords


def point_in_polygon(polygon: Sequence[Coord], query: Coord) -> bool:
    """Crossing-number test of ``query`` against a closed polygon.

    An edge counts when the query row separates its endpoints, with a
    vertex row ``>=`` the query row treated as "above". The side of the
    crossing is decided with an integer cross-product comparison, so
    boundary points always resolve the same way.

    Raises:
        DegenerateGeometryError: If the polygon has no vertices.
    """
    if len(polygon) == 0:
        raise DegenerateGeometryError("Point-in-polygon test on an empty polygon")

    qx, qy = query
    inside = False
    sx, sy = polygon[-1]
    start_above = sy >= qy
    for ex, ey in polygon:
        end_above = ey >= qy
        if start_above != end_above:
            if (ey - qy) * (ex - sx) <= (ey - sy) * (ex - qx):
                if end_above:
                    inside = not inside
            elif not end_above:
                inside = not inside
        start_above = end_above
        sx, sy = ex, ey
    return inside


def points_in_polygon(polygon: np.ndarray, queries: np.ndarray) -> np.ndarray:
    """Vectorized ``point_in_polygon`` over an ``(M, 2)`` array of queries.

    Returns:
        Boolean array of length M
    """
    polygon = np.asarray(polygon, dtype=np.int64).reshape(-1, 2)
    if polygon.shape[0] == 0:
        raise DegenerateGeometryError("Point-in-polygon test on an empty polygon")

    queries = np.asarray(queries, dtype=np.int64).reshape(-1, 2)
    qx = queries[:, 0]
    qy = queries[:, 1]
    inside = np.zeros(queries.shape[0], dtype=bool)

    sx, sy = polygon[-1]
    start_above = sy >= qy
    for ex, ey in polygon:
        end_above = ey >= qy
        lhs = (ey - qy) * (ex - sx)
        rhs = (ey - sy) * (ex - qx)
        crossing = (start_above != end_above) & np.where(lhs <= rhs, end_above, ~end_above)
        inside ^= crossing
        start_above = end_above
        sx, sy = ex, ey
    return inside


def polygon_bounding_box(polygon: np.ndarray) -> BBox:
    """Return ``(min_col, min_row, max_col, max_row)`` of a polygon.

    Raises:
        DegenerateGeometryError: If the polygon has no vertices.
    """
    polygon = np.asarray(polygon).reshape(-1, 2)
    if polygon.shape[0] == 0:
        raise DegenerateGeometryError("Bounding box of an empty polygon")
    min_col, min_row = polygon.min(axis=0)
    max_col, max_row = polygon.max(axis=0)
    return int(min_col), int(min_row), int(max_col), int(max_row)


def touches_border(bbox: BBox, width: int, height: int) -> bool:
    """True if a bounding box reaches the first or last column/row of the grid."""
    min_col, min_row, max_col, max_row = bbox
    return (min_col == 0 or min_row == 0 or
            max_col == width - 1 or max_row == height - 1)


def build_table_hull(grid: OrganizedGrid, hull_indices: Iterable[int]) -> TableHull:
    """Resolve the table hull indices into grid polygon, 3D points and bbox.

    Indices that cannot be addressed are skipped.

    Raises:
        MissingInputError: If no hull index can be resolved.
    """
    kept, coords = indices_to_coords(grid, hull_indices)
    if not coords:
        raise MissingInputError("Table hull has no valid grid index", input_name="hull_indices")

    polygon = np.asarray(coords, dtype=np.int64)
    points = grid.points_at(coords).astype(np.float64)
    return TableHull(
        indices=tuple(kept),
        polygon=polygon,
        points=points,
        bbox=polygon_bounding_box(polygon),
    )


def point_to_segment_distance(start: np.ndarray, end: np.ndarray, point: np.ndarray) -> float:
    """Euclidean distance from ``point`` to the segment ``start``-``end``."""
    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)
    point = np.asarray(point, dtype=np.float64)
    direction = end - start
    length2 = float(direction @ direction)
    if length2 == 0.0:
        return float(np.linalg.norm(point - start))
    t = float(np.clip((point - start) @ direction / length2, 0.0, 1.0))
    return float(np.linalg.norm(point - (start + t * direction)))


def _distances_to_edges(points: np.ndarray, polygon_points: np.ndarray) -> np.ndarray:
    """``(N, E)`` distances from each point to each cyclic polygon edge."""
    starts = np.roll(polygon_points, 1, axis=0)
    ends = polygon_points
    directions = ends - starts
    length2 = np.einsum("ij,ij->i", directions, directions)
    safe_length2 = np.where(length2 > 0.0, length2, 1.0)

    rel = points[:, None, :] - starts[None, :, :]
    t = np.einsum("nej,ej->ne", rel, directions) / safe_length2[None, :]
    t = np.where(length2[None, :] > 0.0, np.clip(t, 0.0, 1.0), 0.0)
    closest = starts[None, :, :] + t[:, :, None] * directions[None, :, :]
    return np.linalg.norm(points[:, None, :] - closest, axis=2)


def max_min_distance_to_polygon_edges(points: np.ndarray, polygon_points: np.ndarray) -> float:
    """Largest distance of any point to its closest polygon edge.

    Edges are taken cyclically (last vertex connects to the first).
    Returns ``-inf`` for an empty point set.

    Raises:
        DegenerateGeometryError: If the polygon has no vertices.
    """
    points = np.asarray(points, dtype=np.float64)
    polygon_points = np.asarray(polygon_points, dtype=np.float64)
    if polygon_points.shape[0] == 0:
        raise DegenerateGeometryError("Distance to an empty polygon")
    if points.shape[0] == 0:
        return float("-inf")
    return float(_distances_to_edges(points, polygon_points).min(axis=1).max())
