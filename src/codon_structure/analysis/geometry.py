"""
Geometric features of residue coordinates.
"""

from typing import Optional
import numpy as np
from scipy.spatial.distance import cdist

from ..exceptions import AnalysisError


def sparseness(points_a: np.ndarray, points_b: np.ndarray,
               exclude_self: Optional[bool] = None) -> float:
    """
    Alignment-free estimate of inverse packing density.

    For every point of each set, the distance to its nearest point in the
    other set; result is the sum of those distances over |a| + |b|.

    When both sets are the same point set, point i of a is never matched
    with point i of b. Distinct points at identical coordinates still match
    at distance 0.

    Args:
        points_a: (n, 3) coordinates
        points_b: (m, 3) coordinates
        exclude_self: Exclude index-identical pairs; defaults to whether
            points_a and points_b are the same object

    Returns:
        Mean nearest-neighbour distance
    """
    a = np.asarray(points_a, dtype=float)
    b = np.asarray(points_b, dtype=float)
    if exclude_self is None:
        exclude_self = points_a is points_b

    if len(a) == 0 or len(b) == 0:
        raise AnalysisError("Sparseness needs at least one point in each set")

    distances = cdist(a, b)

    if exclude_self:
        if a.shape != b.shape:
            raise AnalysisError("Self-comparison needs two sets of the same size")
        if len(a) < 2:
            raise AnalysisError("Self-comparison needs at least two points")
        np.fill_diagonal(distances, np.inf)

    total = distances.min(axis=1).sum() + distances.min(axis=0).sum()
    return float(total / (len(a) + len(b)))
