"""Flood fill of invalid samples into holes with their finite border."""

from typing import Dict, List, Tuple

import numpy as np

from ..frame import Coord, Hole, OrganizedGrid, TableHull
from ..utils.logging_utils import get_logger
from .polygon import points_in_polygon

logger = get_logger(__name__)

# 4-connected neighborhood as (dcol, drow)
_NEIGHBORS = ((-1, 0), (1, 0), (0, -1), (0, 1))


def grow_region(
    grid: OrganizedGrid,
    seed: Coord,
    visited: np.ndarray,
) -> Tuple[List[Coord], List[Coord]]:
    """Collect the invalid component containing ``seed`` and its finite border.

    Traverses 4-connected neighbors with an explicit stack. Invalid samples
    are claimed (marked in ``visited``) and expanded; finite samples are
    recorded as border and never expanded. A finite sample already claimed by
    a neighboring hole is still added to this hole's border, once.

    Args:
        grid: The organized grid
        seed: Invalid, unvisited ``(col, row)`` to start from
        visited: ``(height, width)`` bool matrix, updated in place

    Returns:
        Tuple of (interior coordinates, border coordinates) in discovery order
    """
    finite = grid.finite_mask
    width, height = grid.width, grid.height

    interior: List[Coord] = []
    border: Dict[Coord, None] = {}
    stack: List[Coord] = [seed]

    while stack:
        col, row = stack.pop()
        if col < 0 or row < 0 or col >= width or row >= height:
            continue
        is_finite = finite[row, col]
        if visited[row, col] and not is_finite:
            continue
        visited[row, col] = True
        if is_finite:
            border.setdefault((col, row), None)
            continue
        interior.append((col, row))
        # reversed so the left neighbor is explored first
        for dcol, drow in reversed(_NEIGHBORS):
            stack.append((col + dcol, row + drow))

    return interior, list(border)


def find_holes(grid: OrganizedGrid, hull: TableHull, min_hole_size: int) -> List[Hole]:
    """Find every hole with at least one seed inside the table hull.

    Seeds are scanned column-major over the half-open bounding box of the
    hull polygon. A fresh visited matrix is allocated for each call.

    Args:
        grid: The organized grid
        hull: Table hull the seeds must lie in
        min_hole_size: Holes need more interior samples than this

    Returns:
        Holes in discovery order
    """
    min_col, min_row, max_col, max_row = hull.bbox
    visited = np.zeros((grid.height, grid.width), dtype=bool)
    holes: List[Hole] = []

    if max_col <= min_col or max_row <= min_row:
        return holes

    cols, rows = np.meshgrid(
        np.arange(min_col, max_col), np.arange(min_row, max_row), indexing="ij"
    )
    candidates = np.column_stack([cols.ravel(), rows.ravel()])
    invalid = ~grid.finite_mask[candidates[:, 1], candidates[:, 0]]
    candidates = candidates[invalid]
    if candidates.shape[0] == 0:
        return holes
    candidates = candidates[points_in_polygon(hull.polygon, candidates)]

    small = 0
    for col, row in candidates.tolist():
        if visited[row, col]:
            continue
        interior, border = grow_region(grid, (col, row), visited)
        if len(interior) > min_hole_size:
            holes.append(Hole(interior=tuple(interior), border=tuple(border)))
        else:
            small += 1

    logger.debug(f"Region growing found {len(holes)} holes ({small} below min size {min_hole_size})")
    return holes
