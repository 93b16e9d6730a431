"""
Random segment sets for experiments, benchmarks and tests.
"""

from typing import List, Optional, Tuple

import numpy as np

RawSegment = Tuple[Tuple[int, int], Tuple[int, int]]


def random_segments(count: int, grid: int = 10, seed: Optional[int] = None,
                    point_fraction: float = 0.0) -> List[RawSegment]:
    """
    Draw segments with integer endpoints on a small grid.

    A small grid makes shared endpoints, collinear overlaps, vertical
    segments and several segments through one point common, which is
    what a robust sweep has to get right.

    Args:
        count: Number of segments
        grid: Coordinates are drawn from 0..grid (default: 10)
        seed: Seed for numpy's random generator
        point_fraction: Share of segments collapsed to a single point

    Returns:
        List of ((x1, y1), (x2, y2)) with Python int coordinates

    Example:
        >>> segments = random_segments(20, grid=5, seed=42)
        >>> len(segments)
        20
    """
    rng = np.random.default_rng(seed)
    coords = rng.integers(0, grid + 1, size=(count, 4))
    collapse = rng.random(count) < point_fraction
    coords[collapse, 2:] = coords[collapse, :2]
    return [((int(x1), int(y1)), (int(x2), int(y2))) for x1, y1, x2, y2 in coords]


def layered_segments(count: int, seed: Optional[int] = None) -> Tuple[List[RawSegment], List[int]]:
    """
    Draw pairwise non-crossing segments that are all active at once.

    Segment k stays inside the horizontal band 10k <= y <= 10k + 3, starts
    at x < 40 and ends at x >= 60, so every pair is ordered and brackets
    each other.

    Returns:
        (segments, order) where order lists segment indices bottom to top
    """
    rng = np.random.default_rng(seed)
    bands = rng.permutation(count)
    segments = []
    for band in bands:
        x1, x2 = rng.integers(0, 40), rng.integers(60, 100)
        y1, y2 = 10 * band + rng.integers(0, 4, size=2)
        segments.append(((int(x1), int(y1)), (int(x2), int(y2))))
    order = [int(index) for index in np.argsort(bands)]
    return segments, order
