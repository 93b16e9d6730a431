"""
Fragment arena for the sweep.

Segments are split and merged repeatedly during a sweep, so the sweep never
holds them by direct reference: every piece lives in an arena and events,
the active structure and continuation markers all refer to it by id.
"""

from typing import FrozenSet, Iterator, List, Optional, Sequence, Tuple

from .event_queue import EventKind
from ..utils.geometry import Point


class Fragment:
    """
    A piece of one or more collinear input segments.

    Attributes:
        id (int): Position in the arena
        start (Point): Left endpoint
        end (Point): Right endpoint
        ids (FrozenSet[int]): Input segments covering the whole fragment; split
                              pieces keep the ids of the fragment they came from
        continuation (Optional[int]): Fragment continuing this one past its end
        merged_into (Optional[int]): Fragment that absorbed this one
        run_start (Point): Start of the run of fragments sharing `ids`
        end_kind (EventKind): RIGHT for a segment end, INTERSECTION for a split
        placed (bool): Already holds a slot in the active structure before
                       its LEFT event is handled
    """

    __slots__ = ('id', 'start', 'end', 'ids', 'continuation',
                 'merged_into', 'run_start', 'end_kind', 'placed')

    def __init__(self, fid: int, start: Point, end: Point, ids: FrozenSet[int],
                 end_kind: EventKind = EventKind.RIGHT):
        self.id = fid
        self.start = start
        self.end = end
        self.ids = ids
        self.continuation: Optional[int] = None
        self.merged_into: Optional[int] = None
        self.run_start = start
        self.end_kind = end_kind
        self.placed = False

    @property
    def is_point(self) -> bool:
        return self.start == self.end

    @property
    def alive(self) -> bool:
        return self.merged_into is None

    def __repr__(self) -> str:
        return (f"Fragment({self.id}, {tuple(self.start)} -> {tuple(self.end)}, "
                f"ids={sorted(self.ids)})")


class FragmentArena:
    """
    Identity-indexed store of every fragment created during one sweep.

    The first len(segments) fragments are the input segments themselves, so
    fragment id and input index coincide for them.
    """

    def __init__(self):
        self._fragments: List[Fragment] = []

    @classmethod
    def from_segments(cls, segments: Sequence[Tuple[Point, Point]]) -> 'FragmentArena':
        arena = cls()
        for index, (start, end) in enumerate(segments):
            arena.create(start, end, frozenset((index,)))
        return arena

    def create(self, start: Point, end: Point, ids: FrozenSet[int],
               end_kind: EventKind = EventKind.RIGHT) -> Fragment:
        fragment = Fragment(len(self._fragments), start, end, ids, end_kind)
        self._fragments.append(fragment)
        return fragment

    def resolve(self, fid: Optional[int]) -> Optional[Fragment]:
        """Follow merge links to the fragment now carrying fid's segments."""
        if fid is None:
            return None
        fragment = self._fragments[fid]
        while fragment.merged_into is not None:
            fragment = self._fragments[fragment.merged_into]
        return fragment

    def __getitem__(self, fid: int) -> Fragment:
        return self._fragments[fid]

    def __len__(self) -> int:
        return len(self._fragments)

    def __iter__(self) -> Iterator[Fragment]:
        return iter(self._fragments)
