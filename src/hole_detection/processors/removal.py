"""Collection of the grid indices covered by accepted hole outlines."""

from typing import List, Sequence, Tuple

import numpy as np

from ..frame import OrganizedGrid
from .coordinates import coords_to_indices
from .polygon import points_in_polygon, polygon_bounding_box, touches_border


def outline_removal_indices(
    grid: OrganizedGrid, grid_polygon: np.ndarray
) -> Tuple[np.ndarray, bool]:
    """Indices of finite samples enclosed by an outline polygon.

    Every coordinate of the polygon's half-open bounding box
    ``[min_col, max_col) x [min_row, max_row)`` is tested for containment.

    Returns:
        Tuple of (row-major indices in column-major scan order,
        whether the outline's bounding box touches the grid border)
    """
    bbox = polygon_bounding_box(grid_polygon)
    min_col, min_row, max_col, max_row = bbox
    at_border = touches_border(bbox, grid.width, grid.height)

    if max_col <= min_col or max_row <= min_row:
        return np.empty(0, dtype=np.int64), at_border

    cols, rows = np.meshgrid(
        np.arange(min_col, max_col), np.arange(min_row, max_row), indexing="ij"
    )
    queries = np.column_stack([cols.ravel(), rows.ravel()])
    keep = points_in_polygon(grid_polygon, queries)
    keep &= grid.finite_mask[queries[:, 1], queries[:, 0]]
    return coords_to_indices(grid, queries[keep]), at_border


def canonicalize_indices(chunks: Sequence[np.ndarray]) -> np.ndarray:
    """Sort and deduplicate removal indices gathered from several outlines."""
    if not chunks:
        return np.empty(0, dtype=np.int64)
    return np.unique(np.concatenate([np.asarray(c, dtype=np.int64) for c in chunks]))


class RemovalIndexBuilder:
    """Accumulates removal indices over a frame; canonicalized once at the end."""

    def __init__(self, grid: OrganizedGrid):
        self.grid = grid
        self._chunks: List[np.ndarray] = []

    def add_outline(self, grid_polygon: np.ndarray, keep_if_touching: bool = True) -> bool:
        """Add the indices enclosed by ``grid_polygon``.

        Returns:
            Whether the outline touches the grid border
        """
        indices, at_border = outline_removal_indices(self.grid, grid_polygon)
        if keep_if_touching or not at_border:
            self._chunks.append(indices)
        return at_border

    def build(self) -> np.ndarray:
        return canonicalize_indices(self._chunks)
