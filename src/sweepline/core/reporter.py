"""
Intersection reporter.

Collects what happens at one sweep position (fragments ending, starting or
passing through it) and turns it into intersection records once the whole
batch of events at that position has been handled.
"""

from itertools import combinations
from typing import Dict, List, Sequence, Set, Tuple

from .fragment import FragmentArena
from .records import IntersectionRecord
from ..utils.geometry import Point, is_endpoint


class IntersectionReporter:
    """
    Build point and overlap records batch by batch.

    Conventions:
    - A pair of segments meeting only at P is reported at P if endpoint
      touches are included, or if P is interior to both segments.
    - Segments overlapping collinearly never form point records; each
      maximal stretch with a constant set of covering segments becomes one
      overlap record.

    Attributes:
        records (List[IntersectionRecord]): Every record emitted so far
    """

    def __init__(self, arena: FragmentArena, segments: Sequence[Tuple[Point, Point]],
                 include_touches: bool = False):
        self.arena = arena
        self.segments = segments
        self.include_touches = include_touches
        self.records: List[IntersectionRecord] = []
        self.begin(None)

    def begin(self, point: Point) -> None:
        """Start collecting the batch at point."""
        self.point = point
        self._incoming: Dict[int, int] = {}
        self._through: Dict[int, int] = {}
        self._started: List[int] = []
        self._ended: List[int] = []
        self._isolated: Set[int] = set()

    def ended(self, fid: int) -> None:
        self._ended.append(fid)
        for index in self.arena[fid].ids:
            self._incoming[index] = fid

    def started(self, fid: int) -> None:
        # Merges may still change the fragment, so it is resolved at flush()
        self._started.append(fid)

    def through(self, fid: int) -> None:
        for index in self.arena[fid].ids:
            self._through[index] = fid

    def point_segment(self, index: int) -> None:
        self._isolated.add(index)

    def _outgoing(self) -> Dict[int, int]:
        outgoing = dict(self._through)
        for fid in self._started:
            fragment = self.arena.resolve(fid)
            if fragment.start == self.point:
                for index in fragment.ids:
                    outgoing[index] = fragment.id
        return outgoing

    def _point_record(self) -> List[IntersectionRecord]:
        incoming = dict(self._incoming)
        incoming.update(self._through)
        outgoing = self._outgoing()
        candidates = sorted(set(incoming) | set(outgoing) | self._isolated)

        participants = set()
        for i, j in combinations(candidates, 2):
            if i in incoming and j in incoming and incoming[i] == incoming[j]:
                continue
            if i in outgoing and j in outgoing and outgoing[i] == outgoing[j]:
                continue
            if (self.include_touches
                    or not (is_endpoint(self.point, self.segments[i])
                            or is_endpoint(self.point, self.segments[j]))):
                participants.update((i, j))

        if len(participants) < 2:
            return []
        return [IntersectionRecord(self.point, frozenset(participants))]

    def _overlap_records(self) -> List[IntersectionRecord]:
        found = []
        for fid in self._ended:
            fragment = self.arena[fid]
            if len(fragment.ids) < 2:
                continue
            continuation = self.arena.resolve(fragment.continuation)
            if (continuation is not None and continuation.start == self.point
                    and continuation.ids == fragment.ids):
                continuation.run_start = fragment.run_start
                continue
            found.append(IntersectionRecord(fragment.run_start, fragment.ids, self.point))
        found.sort(key=IntersectionRecord.sort_key)
        return found

    def flush(self) -> List[IntersectionRecord]:
        """
        Close the current batch.

        Returns:
            The batch's records: the point record (if any) first, then the
            overlap runs ending here
        """
        batch = self._point_record() + self._overlap_records()
        self.records.extend(batch)
        return batch
