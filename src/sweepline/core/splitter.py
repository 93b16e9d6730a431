"""
Segment splitter.

Breaks active fragments at discovered crossings and folds collinear
overlapping fragments into one merged fragment. Every structural change is
announced to the event queue: a shortened fragment gets an INTERSECTION
event at its new end and its continuation gets LEFT and end events.
"""

import logging

from .errors import PrecisionError
from .event_queue import Event, EventKind, EventQueue
from .fragment import Fragment, FragmentArena
from ..utils.geometry import Point

logger = logging.getLogger(__name__)


class SegmentSplitter:
    """
    Split and merge operations on the fragments of one sweep.

    Attributes:
        arena (FragmentArena): Fragment store of the sweep
        queue (EventQueue): Event queue of the sweep
        splits (int): Number of fragments split so far
        merges (int): Number of collinear overlaps folded so far
    """

    def __init__(self, arena: FragmentArena, queue: EventQueue):
        self.arena = arena
        self.queue = queue
        self.splits = 0
        self.merges = 0

    def split(self, fid: int, point: Point, sweep_point: Point) -> Fragment:
        """
        Shorten a fragment to end at point and create its continuation.

        Args:
            fid: Fragment to split
            point: Split point, strictly inside the fragment
            sweep_point: Current sweep position

        Returns:
            The continuation fragment [point, old end]

        Raises:
            PrecisionError: If point lies behind the sweep or outside the
                            fragment, which only an inexact kernel produces
        """
        fragment = self.arena[fid]
        if point < sweep_point:
            raise PrecisionError(
                f"Intersection {tuple(point)} of fragment {fid} lies behind the sweep",
                point=sweep_point,
            )
        if not fragment.start < point < fragment.end:
            raise PrecisionError(
                f"Intersection {tuple(point)} lies outside fragment {fid}",
                point=sweep_point,
            )

        continuation = self.arena.create(point, fragment.end, fragment.ids,
                                         end_kind=fragment.end_kind)
        continuation.continuation = fragment.continuation
        fragment.continuation = continuation.id
        fragment.end = point
        fragment.end_kind = EventKind.INTERSECTION

        self.queue.push(Event(point, EventKind.INTERSECTION, fragment.id))
        self.queue.push(Event(point, EventKind.LEFT, continuation.id))
        self.queue.push(Event(continuation.end, continuation.end_kind, continuation.id))
        self.splits += 1
        logger.debug("split fragment %d at %s into %d", fid, tuple(point), continuation.id)
        return continuation

    def merge(self, active_id: int, incoming_id: int, sweep_point: Point) -> None:
        """
        Fold an incoming fragment into a collinear active fragment.

        The incoming fragment starts at the sweep point. If the active one
        started earlier it is split at the sweep point first and the incoming
        fragment is queued again, to meet the continuation once the shortened
        piece has left. When both start here, the shared part becomes one
        fragment carrying the union of their segments and the rest of the
        longer one becomes a residual fragment.

        Args:
            active_id: Fragment already in the active structure
            incoming_id: Fragment being inserted
            sweep_point: Current sweep position
        """
        active = self.arena[active_id]
        incoming = self.arena[incoming_id]

        if active.start < sweep_point:
            if sweep_point < active.end:
                self.split(active_id, sweep_point, sweep_point)
            self.queue.push(Event(sweep_point, EventKind.LEFT, incoming_id))
            return

        if incoming.end < active.end:
            self.split(active_id, incoming.end, sweep_point)
        elif active.end < incoming.end:
            incoming.start = active.end
            incoming.run_start = active.end
            self.queue.push(Event(incoming.start, EventKind.LEFT, incoming_id))

        active.ids = active.ids | incoming.ids
        active.run_start = active.start
        if incoming.start == active.start:
            incoming.merged_into = active_id
        self.merges += 1
        logger.debug("merged fragment %d into %d, segments %s",
                     incoming_id, active_id, sorted(active.ids))
