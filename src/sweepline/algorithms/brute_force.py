"""
Brute-force intersection finder.

Tests every pair of segments whose bounding boxes meet and assembles the
same records as the sweep. Used as the reference oracle for the sweep and
as a baseline in comparisons. Runs in O(n^2) time.
"""

import time
from collections import defaultdict
from typing import Any, Dict, Iterator, List, Sequence, Set, Tuple

import numpy as np

from ..core.intersection_finder import IntersectionFinder
from ..core.records import IntersectionRecord
from ..utils.geometry import Point, is_degenerate, is_endpoint


def candidate_pairs(segments: Sequence[Tuple[Point, Point]]) -> List[Tuple[int, int]]:
    """
    Pairs of segments whose bounding boxes intersect.

    Coordinates are compared as floats. Rounding to float is monotone, so
    boxes that meet exactly still meet after conversion and no pair is lost.

    Args:
        segments: Normalized segments (left endpoint first)

    Returns:
        List of index pairs (i, j) with i < j

    Example:
        >>> candidate_pairs([((0, 0), (1, 1)), ((2, 2), (3, 3)), ((1, 0), (2, 2))])
        [(0, 2), (1, 2)]
    """
    if len(segments) < 2:
        return []
    coords = np.array([[float(p[0]), float(p[1]), float(q[0]), float(q[1])]
                       for p, q in segments])
    xmin, xmax = coords[:, 0], coords[:, 2]
    ymin = np.minimum(coords[:, 1], coords[:, 3])
    ymax = np.maximum(coords[:, 1], coords[:, 3])

    meets = ((xmin[:, None] <= xmax[None, :]) & (xmin[None, :] <= xmax[:, None])
             & (ymin[:, None] <= ymax[None, :]) & (ymin[None, :] <= ymax[:, None]))
    rows, cols = np.nonzero(np.triu(meets, k=1))
    return [(int(i), int(j)) for i, j in zip(rows, cols)]


class _UnionFind:
    def __init__(self):
        self.parent: Dict[int, int] = {}

    def find(self, item: int) -> int:
        self.parent.setdefault(item, item)
        while self.parent[item] != item:
            self.parent[item] = self.parent[self.parent[item]]
            item = self.parent[item]
        return item

    def union(self, a: int, b: int) -> None:
        self.parent[self.find(a)] = self.find(b)


class BruteForce(IntersectionFinder):
    """
    Pairwise intersection finder.

    Attributes:
        candidates (int): Pairs that passed the bounding-box filter
        pairs_tested (int): Pairs handed to the kernel
        search_time (float): Time spent in the last search (seconds)
    """

    def _initialize_algorithm(self) -> None:
        """Initialize counters."""
        self.candidates = 0
        self.pairs_tested = 0
        self.reported = 0
        self.segment_count = 0
        self.search_time = 0.0

    def find(self, segments: Sequence[Any]) -> Iterator[IntersectionRecord]:
        """
        Find all intersections by testing candidate pairs.

        The search runs eagerly; the returned iterator walks a finished list
        ordered like the sweep's output.
        """
        prepared = self.prepare(segments)
        start_time = time.time()
        records = self._search(prepared)
        self.search_time = time.time() - start_time
        self.reported = len(records)
        self.metrics = self.get_metrics()
        return iter(records)

    def _search(self, segments: List[Tuple[Point, Point]]) -> List[IntersectionRecord]:
        include_touches = self.options.include_endpoint_touches
        usable = [i for i, segment in enumerate(segments)
                  if include_touches or not is_degenerate(segment)]
        self.segment_count = len(usable)

        pairs = candidate_pairs([segments[i] for i in usable])
        self.candidates = len(pairs)
        self.pairs_tested = 0

        points: Dict[Point, Set[int]] = defaultdict(set)
        overlaps = _UnionFind()
        for a, b in pairs:
            i, j = usable[a], usable[b]
            self.pairs_tested += 1
            found = self.kernel.intersect(segments[i], segments[j])
            if found is None:
                continue
            if not isinstance(found, Point):
                overlaps.union(i, j)
                continue
            if (include_touches
                    or not (is_endpoint(found, segments[i]) or is_endpoint(found, segments[j]))):
                points[found].update((i, j))

        records = [IntersectionRecord(point, frozenset(members))
                   for point, members in points.items()]
        records.extend(self._overlap_runs(segments, overlaps))
        # Sweep order: by the point where a record is complete, point records first
        records.sort(key=lambda record: (record.end if record.is_overlap else record.point,
                                         record.is_overlap, record.sort_key()))
        return records

    @staticmethod
    def _overlap_runs(segments: List[Tuple[Point, Point]],
                      overlaps: _UnionFind) -> List[IntersectionRecord]:
        """Cut each group of collinear overlapping segments into elementary runs."""
        groups: Dict[int, List[int]] = defaultdict(list)
        for index in list(overlaps.parent):
            groups[overlaps.find(index)].append(index)

        runs = []
        for members in groups.values():
            cuts = sorted(set(point for index in members for point in segments[index]))
            for start, end in zip(cuts, cuts[1:]):
                covering = frozenset(index for index in members
                                     if segments[index][0] <= start and end <= segments[index][1])
                if len(covering) >= 2:
                    runs.append(IntersectionRecord(start, covering, end))
        return runs

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get search metrics.

        Returns:
            Dictionary with search statistics
        """
        return {
            'algorithm': 'Brute force',
            'kernel': self.kernel.name,
            'segments': self.segment_count,
            'intersections': self.reported,
            'search_time': self.search_time,
            'candidate_pairs': self.candidates,
            'pairs_tested': self.pairs_tested,
        }
