"""
Event queue simulating the left-to-right sweep.

Events are kept in a binary heap ordered by point (lexicographically), then
by kind, then by fragment id. At a shared point every ending fragment is
handled before any starting fragment, which keeps the active set free of
pairs that merely touch end to start.
"""

import heapq
from enum import IntEnum
from typing import Iterable, Iterator, List, NamedTuple

from ..utils.geometry import Point


class EventKind(IntEnum):
    """
    Kinds of sweep events, in processing order at a shared point.

    RIGHT: a fragment reaches the right endpoint of its segment
    INTERSECTION: a fragment shortened at a discovered crossing or overlap
                  boundary ends; its continuation takes its place
    LEFT: a fragment starts
    POINT: a zero-length segment lies at the point
    """

    RIGHT = 0
    INTERSECTION = 1
    LEFT = 2
    POINT = 3


class Event(NamedTuple):
    """A sweep event; fragments are referenced by id only."""

    point: Point
    kind: EventKind
    fragment: int


class EventQueue:
    """
    Min-priority queue of sweep events.

    Attributes:
        pushed (int): Number of events pushed over the queue's lifetime
    """

    def __init__(self):
        self._heap: List[Event] = []
        self.pushed = 0

    @classmethod
    def from_fragments(cls, fragments: Iterable) -> 'EventQueue':
        """
        Build the initial queue holding both endpoints of every fragment.

        Zero-length fragments get a single POINT event.
        """
        queue = cls()
        for fragment in fragments:
            if fragment.is_point:
                queue._heap.append(Event(fragment.start, EventKind.POINT, fragment.id))
            else:
                queue._heap.append(Event(fragment.start, EventKind.LEFT, fragment.id))
                queue._heap.append(Event(fragment.end, fragment.end_kind, fragment.id))
        heapq.heapify(queue._heap)
        queue.pushed = len(queue._heap)
        return queue

    def push(self, event: Event) -> None:
        heapq.heappush(self._heap, event)
        self.pushed += 1

    def pop(self) -> Event:
        return heapq.heappop(self._heap)

    def peek(self) -> Event:
        return self._heap[0]

    def pop_batch(self) -> Iterator[Event]:
        """
        Drain every event at the current minimum point.

        Events pushed at that same point while the batch is being consumed
        are drained as part of it.

        Yields:
            Events in queue order, all sharing one point
        """
        if not self._heap:
            return
        point = self._heap[0].point
        while self._heap and self._heap[0].point == point:
            yield self.pop()

    def __len__(self) -> int:
        return len(self._heap)

    def __bool__(self) -> bool:
        return bool(self._heap)

    def __repr__(self) -> str:
        return f"EventQueue(pending={len(self._heap)}, pushed={self.pushed})"
