"""Classification of holes by their position relative to the table hull."""

from typing import Dict, List, Tuple

import numpy as np

from ..frame import Hole, HoleClass, TableHull
from .polygon import points_in_polygon


def classify_counts(inside: int, outside: int, inside_out_factor: float) -> HoleClass:
    """Label a hole from its inside/outside sample counts.

    No sample outside the hull is INSIDE; more than
    ``inside * inside_out_factor`` samples outside is OUTSIDE; anything in
    between is OVERLAP.
    """
    if outside == 0:
        return HoleClass.INSIDE
    if outside > inside * inside_out_factor:
        return HoleClass.OUTSIDE
    return HoleClass.OVERLAP


def count_inside(hole: Hole, hull: TableHull) -> Tuple[int, int]:
    """Count the hole's interior samples inside and outside the hull polygon."""
    mask = points_in_polygon(hull.polygon, np.asarray(hole.interior, dtype=np.int64))
    inside = int(np.count_nonzero(mask))
    return inside, len(hole.interior) - inside


def classify_hole(hole: Hole, hull: TableHull, inside_out_factor: float) -> HoleClass:
    inside, outside = count_inside(hole, hull)
    return classify_counts(inside, outside, inside_out_factor)


def classify_holes(
    holes: List[Hole], hull: TableHull, inside_out_factor: float
) -> Dict[HoleClass, List[Hole]]:
    """Bucket holes by class, keeping discovery order within each bucket."""
    buckets: Dict[HoleClass, List[Hole]] = {label: [] for label in HoleClass}
    for hole in holes:
        buckets[classify_hole(hole, hull, inside_out_factor)].append(hole)
    return buckets
