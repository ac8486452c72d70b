"""Rejection of overlapping holes that hug the edges of the table hull."""

import numpy as np

from ..frame import TableHull
from .polygon import max_min_distance_to_polygon_edges


def farthest_inside_distance(inside_points: np.ndarray, hull: TableHull) -> float:
    """Distance of the inside border point lying farthest from every hull edge.

    Returns ``-inf`` when there are no inside points.
    """
    return max_min_distance_to_polygon_edges(inside_points, hull.points)


def is_edge_artifact(inside_points: np.ndarray, hull: TableHull, min_distance: float) -> bool:
    """True if no inside border point gets farther than ``min_distance`` from the hull edges.

    Such holes are gaps at the table boundary rather than gaps in the surface.
    """
    return not farthest_inside_distance(inside_points, hull) > min_distance
