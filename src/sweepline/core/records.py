"""
Intersection records produced by the finders.
"""

from itertools import combinations
from typing import Any, Dict, FrozenSet, Iterable, NamedTuple, Optional, Tuple, Union

from ..utils.geometry import Point

PairResult = Union[Point, Tuple[Point, Point]]


class IntersectionRecord(NamedTuple):
    """
    One reported intersection.

    A point record (end is None) lists every segment taking part in the
    intersection at `point`. An overlap record covers the stretch
    [point, end] along which exactly `segments` share a common line.

    Attributes:
        point: Intersection point, or start of the overlap
        segments: Input indices of the participating segments (at least two)
        end: End of the overlap, None for a point record
    """

    point: Point
    segments: FrozenSet[int]
    end: Optional[Point] = None

    @property
    def is_overlap(self) -> bool:
        return self.end is not None

    def as_dict(self) -> Dict[str, Any]:
        """Plain representation with float coordinates, for saving results."""
        result = {
            'point': [float(self.point[0]), float(self.point[1])],
            'segments': sorted(self.segments),
        }
        if self.end is not None:
            result['end'] = [float(self.end[0]), float(self.end[1])]
        return result

    def sort_key(self) -> Tuple:
        return (self.point, self.end is not None, self.end or self.point, sorted(self.segments))


def pairwise_intersections(records: Iterable[IntersectionRecord]) -> Dict[Tuple[int, int], PairResult]:
    """
    Re-derive the intersection of every intersecting pair of segments.

    Overlap records are elementary pieces of the overlap arrangement; the
    pieces shared by one pair are contiguous and are joined back into that
    pair's full overlap.

    Args:
        records: Records from any finder

    Returns:
        Dictionary mapping (i, j) with i < j to either the intersection
        point or the (start, end) overlap of the pair

    Example:
        >>> records = find_intersections([((0, 0), (3, 0)), ((1, 0), (4, 0)), ((2, 0), (5, 0))])
        >>> pairwise_intersections(records)[(0, 1)]
        (Point(x=Fraction(1, 1), y=Fraction(0, 1)), Point(x=Fraction(3, 1), y=Fraction(0, 1)))
    """
    records = list(records)
    overlaps: Dict[Tuple[int, int], Tuple[Point, Point]] = {}
    for record in records:
        if not record.is_overlap:
            continue
        for pair in combinations(sorted(record.segments), 2):
            if pair in overlaps:
                start, end = overlaps[pair]
                overlaps[pair] = (min(start, record.point), max(end, record.end))
            else:
                overlaps[pair] = (record.point, record.end)

    result: Dict[Tuple[int, int], PairResult] = dict(overlaps)
    for record in records:
        if record.is_overlap:
            continue
        for pair in combinations(sorted(record.segments), 2):
            if pair not in overlaps:
                result[pair] = record.point
    return result
