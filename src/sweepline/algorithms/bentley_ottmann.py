"""
Bentley-Ottmann sweep-line intersection finder.

A vertical line sweeps the plane from left to right. The segments it
currently crosses are kept in bottom-to-top order; two segments can only
intersect after they have become neighbors in that order, so only
neighbors are ever tested. Discovered intersections split both segments,
which keeps the active order valid without a global sweep position.
Runs in O((n + k) log n) for n segments and k intersections.
"""

import logging
import time
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from ..core.active_segments import ActiveSegments, SweepComparator
from ..core.errors import PrecisionError
from ..core.event_queue import Event, EventKind, EventQueue
from ..core.fragment import Fragment, FragmentArena
from ..core.intersection_finder import IntersectionFinder
from ..core.kernel import Intersection, Orientation, PredicateKernel
from ..core.records import IntersectionRecord
from ..core.reporter import IntersectionReporter
from ..core.splitter import SegmentSplitter
from ..utils.geometry import Point, is_endpoint

logger = logging.getLogger(__name__)


class SweepState(Enum):
    """Lifecycle of a sweep."""

    INIT = 'init'
    PROCESSING = 'processing'
    DONE = 'done'


class SweepController:
    """
    State and event handling of a single sweep.

    The controller owns the fragment arena, event queue and active
    structure of one sweep. run() drains the queue one sweep position at a
    time and yields the records of each position.

    Attributes:
        state (SweepState): INIT until run() starts, DONE once the queue is empty
        events_processed (int): Events popped from the queue
        stale_events (int): Popped events skipped because their fragment changed
        max_active (int): Largest number of simultaneously active fragments
    """

    def __init__(self, segments: Sequence[Tuple[Point, Point]], kernel: PredicateKernel,
                 include_touches: bool = False):
        self.segments = segments
        self.kernel = kernel
        self.arena = FragmentArena.from_segments(segments)
        # Point segments only take part when touches are reported
        self.queue = EventQueue.from_fragments(
            fragment for fragment in self.arena if include_touches or not fragment.is_point
        )
        self.comparator = SweepComparator(kernel, self.arena)
        self.active = ActiveSegments(self.comparator)
        self.splitter = SegmentSplitter(self.arena, self.queue)
        self.reporter = IntersectionReporter(self.arena, segments, include_touches)

        self.state = SweepState.INIT
        self.events_processed = 0
        self.stale_events = 0
        self.max_active = 0
        self._pending_relinks: List[int] = []
        self._handlers = {
            EventKind.RIGHT: self._handle_end,
            EventKind.INTERSECTION: self._handle_end,
            EventKind.LEFT: self._handle_left,
            EventKind.POINT: self._handle_point,
        }

    def run(self) -> Iterator[List[IntersectionRecord]]:
        """
        Process the queue position by position.

        Yields:
            The records reported at each sweep position, in sweep order
        """
        self.state = SweepState.PROCESSING
        while self.queue:
            point = self.queue.peek().point
            self.reporter.begin(point)
            for event in self.queue.pop_batch():
                self.events_processed += 1
                if self._is_stale(event):
                    self.stale_events += 1
                    continue
                self._handlers[event.kind](event)
            self._settle(point)
            yield self.reporter.flush()
        self.state = SweepState.DONE

    def _is_stale(self, event: Event) -> bool:
        fragment = self.arena[event.fragment]
        if not fragment.alive:
            return True
        if event.kind is EventKind.LEFT:
            return fragment.start != event.point
        if event.kind is EventKind.POINT:
            return False
        return fragment.end != event.point or fragment.end_kind != event.kind

    def _handle_left(self, event: Event) -> None:
        self._settle(event.point)
        fid = event.fragment
        fragment = self.arena[fid]
        self.reporter.started(fid)

        if fragment.placed:
            # Continuation already holds its slot, only its new neighbors are tested
            above, below = self.active.neighbors(fid)
            self._check_neighbors(below, fid, above, event.point)
            return

        existing = self.active.insert(fid)
        if existing is not None:
            self.splitter.merge(existing, fid, event.point)
            return

        self.max_active = max(self.max_active, len(self.active))
        above, below = self.active.neighbors(fid)
        self.comparator.check_order([f for f in (below, fid, above) if f is not None],
                                    event.point)
        self._check_neighbors(below, fid, above, event.point)

    def _handle_end(self, event: Event) -> None:
        fid = event.fragment
        fragment = self.arena[fid]
        self.reporter.ended(fid)

        if event.kind is EventKind.INTERSECTION:
            continuation = self.arena[fragment.continuation]
            self.active.relink(fid, continuation.id)
            continuation.placed = True
            self._pending_relinks.append(continuation.id)
            return

        above, below = self.active.neighbors(fid)
        self.active.remove(fid)
        if above is not None and below is not None:
            self._check(below, above, event.point)

    def _handle_point(self, event: Event) -> None:
        self._settle(event.point)
        self.reporter.point_segment(event.fragment)
        for fid in self.active.locate(self.comparator.point_side(event.point)):
            fragment = self.arena[fid]
            if fragment.start < event.point < fragment.end:
                self.reporter.through(fid)

    def _settle(self, point: Point) -> None:
        """
        Put continuations that took over a slot at point into their order.

        Fragments crossing at one point occupy consecutive slots; past the
        point their continuations lie in exactly the reverse order. Until
        their slots are committed the tree still orders them by the
        fragments they continue, so walking the run is consistent.
        """
        pending = set(fid for fid in self._pending_relinks if fid in self.active)
        self._pending_relinks = []
        while pending:
            bottom = next(iter(pending))
            while self.active.below(bottom) in pending:
                bottom = self.active.below(bottom)
            run = [bottom]
            upper = self.active.above(bottom)
            while upper in pending:
                run.append(upper)
                upper = self.active.above(upper)
            pending.difference_update(run)

            for i in range(len(run) // 2):
                self.active.swap(run[i], run[-1 - i])
            run.reverse()
            for fid in run:
                self.active.commit(fid)

            below = self.active.below(run[0])
            sequence = ([below] if below is not None else []) + run
            if upper is not None:
                sequence.append(upper)
            self.comparator.check_order(sequence, point)

    def _check_neighbors(self, below: Optional[int], fid: int, above: Optional[int],
                         point: Point) -> None:
        if below is not None:
            self._check(below, fid, point)
        if above is not None:
            self._check(fid, above, point)

    def _meeting_point(self, first: Fragment, second: Fragment) -> Intersection:
        """
        Intersect the input segments carried by two fragments.

        Fragment endpoints may be rounded crossing points, so fragments are
        never intersected directly. All segments of a fragment lie on one
        line; a hit on an input endpoint is preferred, being exact under
        every kernel.
        """
        found = None
        for i in sorted(first.ids):
            for j in sorted(second.ids):
                a, b = sorted((i, j))
                hit = self.kernel.intersect(self.segments[a], self.segments[b])
                if hit is None:
                    continue
                if not isinstance(hit, Point):
                    return hit
                if is_endpoint(hit, self.segments[a]) or is_endpoint(hit, self.segments[b]):
                    return hit
                if found is None:
                    found = hit
        return found

    def _check(self, lower: int, upper: int, point: Point) -> None:
        """
        Test two neighboring fragments and split them where their segments meet.

        A meeting point behind either fragment's start has been passed
        already, so past it the fragments must be in the order the segments
        take there. A meeting point beyond either fragment's end is found
        again by its continuation.

        Raises:
            PrecisionError: If the segments overlap collinearly, or were
                            passed without being reordered
        """
        first, second = self.arena[lower], self.arena[upper]
        found = self._meeting_point(first, second)
        if found is None:
            return
        if not isinstance(found, Point):
            raise PrecisionError(
                f"Collinear overlap of fragments {lower} and {upper} missed by the ordering",
                point=point,
            )
        if found < max(first.start, second.start):
            lower_segment = self.segments[min(first.ids)]
            upper_end = self.segments[min(second.ids)][1]
            if self.kernel.orientation(*lower_segment, upper_end) is Orientation.CLOCKWISE:
                raise PrecisionError(
                    f"Fragments {lower} and {upper} passed {tuple(found)} without being reordered",
                    point=point,
                )
            return
        if min(first.end, second.end) < found:
            return
        for fragment in (first, second):
            if fragment.start < found < fragment.end:
                self.splitter.split(fragment.id, found, point)

    def get_metrics(self) -> Dict[str, Any]:
        return {
            'events_processed': self.events_processed,
            'events_pushed': self.queue.pushed,
            'stale_events': self.stale_events,
            'fragments': len(self.arena),
            'splits': self.splitter.splits,
            'merges': self.splitter.merges,
            'max_active': self.max_active,
        }


class BentleyOttmann(IntersectionFinder):
    """
    Bentley-Ottmann sweep-line intersection finder.

    Every call to find() builds a fresh sweep; the instance keeps the
    controller and metrics of the most recent one.

    Attributes:
        controller (Optional[SweepController]): Sweep of the last find() call
        reported (int): Records yielded by the last sweep
        search_time (float): Time spent in the last sweep (seconds)
    """

    def _initialize_algorithm(self) -> None:
        """Initialize sweep bookkeeping."""
        self.controller: Optional[SweepController] = None
        self.reported = 0
        self.search_time = 0.0

    @property
    def state(self) -> SweepState:
        """State of the most recent sweep."""
        return self.controller.state if self.controller is not None else SweepState.INIT

    def find(self, segments: Sequence[Any]) -> Iterator[IntersectionRecord]:
        """
        Find all intersections with a plane sweep.

        Args:
            segments: Sequence of ((x1, y1), (x2, y2)) pairs

        Returns:
            Lazy iterator over IntersectionRecord, in sweep order. Within one
            sweep position the point record comes before overlap records.

        Example:
            >>> finder = BentleyOttmann()
            >>> list(finder.find([((0, 0), (2, 2)), ((0, 2), (2, 0))]))
            [IntersectionRecord(point=Point(x=Fraction(1, 1), y=Fraction(1, 1)), segments=frozenset({0, 1}), end=None)]
        """
        prepared = self.prepare(segments)
        self.controller = SweepController(prepared, self.kernel,
                                          self.options.include_endpoint_touches)
        self.reported = 0
        return self._sweep(self.controller)

    def _sweep(self, controller: SweepController) -> Iterator[IntersectionRecord]:
        start_time = time.time()
        logger.debug("sweep started: %d segments, %d events",
                     len(controller.segments), len(controller.queue))
        try:
            for batch in controller.run():
                for record in batch:
                    self.reported += 1
                    yield record
        except PrecisionError as e:
            e.records = list(controller.reporter.records)
            logger.error("Sweep aborted with %d record(s) reported: %s", len(e.records), e)
            raise
        finally:
            self.search_time = time.time() - start_time
            self.metrics = self.get_metrics()
        logger.debug("sweep finished: %d records, %d events processed",
                     self.reported, controller.events_processed)

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get sweep performance metrics.

        Returns:
            Dictionary with sweep statistics
        """
        metrics = {
            'algorithm': 'Bentley-Ottmann',
            'kernel': self.kernel.name,
            'segments': len(self.controller.segments) if self.controller else 0,
            'intersections': self.reported,
            'search_time': self.search_time,
            'state': self.state.value,
        }
        if self.controller is not None:
            metrics.update(self.controller.get_metrics())
        return metrics


def find_intersections(segments: Sequence[Any], **options) -> Iterator[IntersectionRecord]:
    """
    Find all intersections among segments with the Bentley-Ottmann sweep.

    Args:
        segments: Sequence of ((x1, y1), (x2, y2)) pairs; segment i is
                  reported by its index i
        **options: include_endpoint_touches=False, kernel='exact',
                   allow_overlaps=True, on_degenerate='ignore', precision=50

    Returns:
        Lazy iterator over IntersectionRecord. Invalid input raises before
        this function returns.

    Example:
        >>> records = find_intersections([((0, 0), (4, 0)), ((2, -1), (2, 1))])
        >>> [sorted(r.segments) for r in records]
        [[0, 1]]
    """
    return BentleyOttmann(**options).find(segments)
