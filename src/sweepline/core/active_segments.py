"""
Active segment structure.

Holds the fragments currently crossing the sweep line in bottom-to-top
order, in a red-black tree (dendroid) whose keys compare fragments with the
sweep comparator at lookup time. Fragments change while they are stored
(split fragments get shorter, continuations take over slots), so the tree
stores mutable slots and every key reads its slot when it is compared.

The comparator needs no "current sweep position": for two active fragments
each left endpoint precedes the other's right endpoint (the bracketing
invariant) and active fragments never cross in their interiors, so the
relative position of one fragment's left endpoint against the other's
supporting line decides their order.
"""

from functools import partial
from typing import Callable, Dict, Iterator, List, Optional, Tuple, Union

from dendroid import red_black

from .errors import PrecisionError
from .fragment import FragmentArena
from .kernel import Orientation, PredicateKernel
from ..utils.geometry import Point


class SweepComparator:
    """
    Position-dependent order of active fragments.

    Calling the comparator with two fragment ids returns -1 if the first
    lies below the second, +1 if above and 0 if they are collinear (an
    overlap that must be merged).
    """

    def __init__(self, kernel: PredicateKernel, arena: FragmentArena):
        self.kernel = kernel
        self.arena = arena

    def __call__(self, first_id: int, second_id: int) -> int:
        if first_id == second_id:
            return 0
        first = self.arena[first_id]
        second = self.arena[second_id]
        sign = 1
        if second.start < first.start:
            first, second = second, first
            sign = -1
        orientation = self.kernel.orientation(first.start, first.end, second.start)
        if orientation is Orientation.COLLINEAR:
            orientation = self.kernel.orientation(first.start, first.end, second.end)
        # Counter-clockwise: the second fragment starts left of (above) the first
        return -sign * int(orientation)

    def point_side(self, point: Point) -> Callable[[int], int]:
        """
        Build a key locating fragments relative to a point.

        The returned function maps a fragment id to -1 if the fragment passes
        below the point, 0 if it contains it and +1 if it passes above.
        """
        def side(fid: int) -> int:
            fragment = self.arena[fid]
            return -int(self.kernel.orientation(fragment.start, fragment.end, point))
        return side

    def check_order(self, sequence: List[int], sweep_point: Point) -> None:
        """
        Verify that consecutive fragments are in consistent ascending order.

        Each adjacent pair must compare strictly ascending in both argument
        orders and satisfy the bracketing invariant, and the outermost pair
        must compare ascending too.

        Raises:
            PrecisionError: If the kernel contradicts itself
        """
        pairs = list(zip(sequence, sequence[1:]))
        if len(sequence) > 2:
            pairs.append((sequence[0], sequence[-1]))
        for lower, upper in pairs:
            if self(lower, upper) >= 0 or self(upper, lower) <= 0:
                raise PrecisionError(
                    f"Inconsistent ordering of fragments {lower} and {upper}",
                    point=sweep_point,
                )
            first, second = self.arena[lower], self.arena[upper]
            if not (first.start < second.end and second.start < first.end):
                raise PrecisionError(
                    f"Fragments {lower} and {upper} violate the bracketing invariant",
                    point=sweep_point,
                )


class _PointProbe:
    """Search value standing for a point; see SweepComparator.point_side."""

    __slots__ = ('side',)

    def __init__(self, side: Callable[[int], int]):
        self.side = side


class _Slot:
    """
    Position of one fragment in the order.

    `fragment` is the fragment occupying the slot and `ordered` the one its
    position is compared by. They differ between relink() and commit(),
    while a continuation holds the slot of the fragment it continues.
    """

    __slots__ = ('fragment', 'ordered')

    def __init__(self, fragment: int):
        self.fragment = fragment
        self.ordered = fragment


class ActiveKey:
    """Red-black tree key ordering slots (and point probes) by a comparator."""

    __slots__ = ('compare', 'item')

    def __init__(self, compare: SweepComparator, item: Union[_Slot, _PointProbe]):
        self.compare, self.item = compare, item

    def __lt__(self, other: 'ActiveKey') -> bool:
        item, other_item = self.item, other.item
        if item is other_item:
            return False
        if isinstance(item, _PointProbe):
            # The point lies below fragments passing above it
            return item.side(other_item.ordered) > 0
        if isinstance(other_item, _PointProbe):
            return other_item.side(item.ordered) < 0
        return self.compare(item.ordered, other_item.ordered) < 0


class ActiveSegments:
    """
    Active fragment ids in bottom-to-top order.

    The order lives in a red-black tree keyed by the sweep comparator.
    Tree values are slots, reachable from fragment ids through a handle map,
    so a continuation can take over the slot of the fragment it continues
    and crossing fragments can exchange slots without rebalancing.

    Args:
        compare: SweepComparator of the sweep
    """

    def __init__(self, compare: SweepComparator):
        self._set = red_black.set_(key=partial(ActiveKey, compare))
        self._compare = compare
        self._handles: Dict[int, _Slot] = {}

    def find_equal(self, fid: int) -> Optional[int]:
        """Return the active fragment comparing equal to fid, if any."""
        try:
            candidate = self._set.floor(_Slot(fid))
        except ValueError:
            return None
        if self._compare(candidate.ordered, fid) == 0:
            return candidate.fragment
        return None

    def insert(self, fid: int) -> Optional[int]:
        """
        Insert a fragment at its place in the order.

        Returns:
            None on success; the id of an active fragment comparing equal
            (collinear) to fid, in which case nothing is inserted
        """
        existing = self.find_equal(fid)
        if existing is not None:
            return existing
        slot = _Slot(fid)
        self._set.add(slot)
        self._handles[fid] = slot
        return None

    def remove(self, fid: int) -> None:
        self._set.remove(self._handles.pop(fid))

    def relink(self, old: int, new: int) -> None:
        """
        Hand old's slot over to new.

        The slot keeps being ordered by old until commit(new).
        """
        slot = self._handles.pop(old)
        slot.fragment = new
        self._handles[new] = slot

    def swap(self, first: int, second: int) -> None:
        """Exchange the slots of two fragments."""
        first_slot = self._handles[first]
        second_slot = self._handles[second]
        first_slot.fragment, second_slot.fragment = second, first
        self._handles[first] = second_slot
        self._handles[second] = first_slot

    def commit(self, fid: int) -> None:
        """Order fid's slot by fid itself from now on."""
        slot = self._handles[fid]
        slot.ordered = slot.fragment

    def above(self, fid: int) -> Optional[int]:
        try:
            return self._set.next(self._handles[fid]).fragment
        except ValueError:
            return None

    def below(self, fid: int) -> Optional[int]:
        try:
            return self._set.prev(self._handles[fid]).fragment
        except ValueError:
            return None

    def neighbors(self, fid: int) -> Tuple[Optional[int], Optional[int]]:
        """Return (above, below) of an active fragment."""
        return self.above(fid), self.below(fid)

    def _floor(self, side: Callable[[int], int]) -> Optional[int]:
        # Topmost fragment passing below or through the point
        try:
            return self._set.floor(_PointProbe(side)).fragment
        except ValueError:
            return None

    def locate(self, side: Callable[[int], int]) -> List[int]:
        """
        Fragments containing a point, bottom to top.

        Args:
            side: Key from SweepComparator.point_side
        """
        found = []
        fid = self._floor(side)
        while fid is not None and side(fid) == 0:
            found.append(fid)
            fid = self.below(fid)
        found.reverse()
        return found

    def predecessor_of_point(self, side: Callable[[int], int]) -> Optional[int]:
        """Topmost fragment passing strictly below a point."""
        fid = self._floor(side)
        while fid is not None and side(fid) == 0:
            fid = self.below(fid)
        return fid

    def successor_of_point(self, side: Callable[[int], int]) -> Optional[int]:
        """Lowest fragment passing strictly above a point."""
        fid = self._floor(side)
        if fid is None:
            return next(iter(self), None)
        return self.above(fid)

    def __contains__(self, fid: int) -> bool:
        return fid in self._handles

    def __len__(self) -> int:
        return len(self._handles)

    def __iter__(self) -> Iterator[int]:
        return (slot.fragment for slot in self._set)

    def __repr__(self) -> str:
        return f"ActiveSegments({list(self)})"
