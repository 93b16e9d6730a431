"""
Geometric predicate kernels.

A kernel fixes the number type of the coordinates and supplies the two
predicates the sweep is built on: the orientation test and segment
intersection. The sweep logic is written once against the PredicateKernel
interface and the kernel is picked at configuration time:

- 'exact': rational arithmetic (fractions.Fraction), every sign is exact
- 'arbitrary': decimal arithmetic with a configurable number of digits
- 'float': hardware floating point, fastest and inexact
"""

import math
from abc import ABC, abstractmethod
from decimal import Decimal, localcontext
from enum import IntEnum
from fractions import Fraction
from numbers import Integral
from typing import Any, Dict, Optional, Tuple, Type, Union

from .errors import ConfigurationError
from ..utils.geometry import Point, cross_product


class Orientation(IntEnum):
    """Turn direction of an ordered point triple."""

    CLOCKWISE = -1
    COLLINEAR = 0
    COUNTERCLOCKWISE = 1


Segment = Tuple[Point, Point]
Intersection = Union[None, Point, Tuple[Point, Point]]


class PredicateKernel(ABC):
    """
    Abstract base class for predicate kernels.

    Subclasses choose the number type through coerce(); orientation and
    intersection are written generically on top of it.

    Attributes:
        name (str): Registry name of the kernel
        exact (bool): True if every predicate answer is sign-exact
    """

    name = 'abstract'
    exact = False

    @abstractmethod
    def coerce(self, value: Any) -> Any:
        """
        Convert a coordinate to the kernel's number type.

        Raises:
            ValueError, TypeError or ArithmeticError for values that are not
            finite numbers
        """
        pass

    def point(self, x: Any, y: Any) -> Point:
        """Build a point with coerced coordinates."""
        return Point(self.coerce(x), self.coerce(y))

    def orientation(self, a: Point, b: Point, c: Point) -> Orientation:
        """
        Classify the turn a → b → c.

        Returns:
            COUNTERCLOCKWISE if c lies left of the directed line ab,
            CLOCKWISE if it lies right of it, COLLINEAR otherwise
        """
        value = cross_product(a, b, c)
        if value > 0:
            return Orientation.COUNTERCLOCKWISE
        if value < 0:
            return Orientation.CLOCKWISE
        return Orientation.COLLINEAR

    def contains(self, segment: Segment, point: Point) -> bool:
        """Return True if point lies on the closed segment."""
        start, end = segment
        return (start <= point <= end
                and self.orientation(start, end, point) is Orientation.COLLINEAR)

    def intersect(self, first: Segment, second: Segment) -> Intersection:
        """
        Intersect two segments given with their left endpoint first.

        Args:
            first: (left, right) endpoints of the first segment
            second: (left, right) endpoints of the second segment

        Returns:
            None if the segments are disjoint,
            a Point if they meet in exactly one point,
            a (start, end) pair of points for a collinear overlap

        Note:
            When the common point is an endpoint of either segment, that
            endpoint itself is returned without any arithmetic, so touching
            configurations are recognized exactly even by inexact kernels.
        """
        p1, q1 = first
        p2, q2 = second
        if p1 == q1:
            return p1 if self.contains(second, p1) else None
        if p2 == q2:
            return p2 if self.contains(first, p2) else None

        o1 = self.orientation(p1, q1, p2)
        o2 = self.orientation(p1, q1, q2)
        if o1 is Orientation.COLLINEAR and o2 is Orientation.COLLINEAR:
            # Points on a common line are ordered along it lexicographically
            start = max(p1, p2)
            end = min(q1, q2)
            if start < end:
                return (start, end)
            if start == end:
                return start
            return None
        if o1 == o2:
            return None

        o3 = self.orientation(p2, q2, p1)
        o4 = self.orientation(p2, q2, q1)
        if o3 == o4:
            return None

        if o1 is Orientation.COLLINEAR:
            return p2
        if o2 is Orientation.COLLINEAR:
            return q2
        if o3 is Orientation.COLLINEAR:
            return p1
        if o4 is Orientation.COLLINEAR:
            return q1
        return self.crossing_point(p1, q1, p2, q2)

    def crossing_point(self, p1: Point, q1: Point, p2: Point, q2: Point) -> Point:
        """
        Intersection of the lines through two properly crossing segments.

        Solves p1 + t * (q1 - p1) = p2 + s * (q2 - p2) for t.
        """
        dx1, dy1 = q1[0] - p1[0], q1[1] - p1[1]
        dx2, dy2 = q2[0] - p2[0], q2[1] - p2[1]
        denominator = dx1 * dy2 - dy1 * dx2
        t = ((p2[0] - p1[0]) * dy2 - (p2[1] - p1[1]) * dx2) / denominator
        return Point(p1[0] + t * dx1, p1[1] + t * dy1)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}()"


class ExactRationalKernel(PredicateKernel):
    """Kernel over fractions.Fraction; all predicates are exact."""

    name = 'exact'
    exact = True

    def coerce(self, value: Any) -> Fraction:
        return Fraction(value)


class FloatingPointKernel(PredicateKernel):
    """
    Kernel over Python floats.

    Orientation signs are those of the rounded cross product, and computed
    crossing points are rounded, so nearly degenerate input can make the
    sweep inconsistent. The sweep reports that as PrecisionError.
    """

    name = 'float'

    def coerce(self, value: Any) -> float:
        result = float(value)
        if not math.isfinite(result):
            raise ValueError(f"coordinate {value!r} is not finite")
        return result


class ArbitraryPrecisionKernel(PredicateKernel):
    """
    Kernel over decimal.Decimal with a configurable number of digits.

    Input coordinates are converted exactly; products and quotients are
    rounded to `precision` significant digits.

    Attributes:
        precision (int): Significant decimal digits used for arithmetic
    """

    name = 'arbitrary'

    def __init__(self, precision: int = 50):
        if isinstance(precision, bool) or not isinstance(precision, int) or precision < 1:
            raise ConfigurationError(
                f"precision must be a positive integer, got {precision!r}"
            )
        self.precision = precision

    def coerce(self, value: Any) -> Decimal:
        if isinstance(value, Fraction):
            with localcontext() as ctx:
                ctx.prec = self.precision
                result = Decimal(value.numerator) / Decimal(value.denominator)
        elif isinstance(value, Integral):
            result = Decimal(int(value))
        else:
            result = Decimal(value)
        if not result.is_finite():
            raise ValueError(f"coordinate {value!r} is not finite")
        return result

    def orientation(self, a: Point, b: Point, c: Point) -> Orientation:
        with localcontext() as ctx:
            ctx.prec = self.precision
            return super().orientation(a, b, c)

    def crossing_point(self, p1: Point, q1: Point, p2: Point, q2: Point) -> Point:
        with localcontext() as ctx:
            ctx.prec = self.precision
            return super().crossing_point(p1, q1, p2, q2)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(precision={self.precision})"


KERNELS: Dict[str, Type[PredicateKernel]] = {
    'exact': ExactRationalKernel,
    'arbitrary': ArbitraryPrecisionKernel,
    'float': FloatingPointKernel,
}


def get_kernel(kernel: Union[str, PredicateKernel] = 'exact',
               precision: Optional[int] = None) -> PredicateKernel:
    """
    Resolve a kernel name (or instance) to a kernel instance.

    Args:
        kernel: Registry name ('exact', 'arbitrary', 'float') or an existing
                PredicateKernel instance, returned unchanged
        precision: Digits for the 'arbitrary' kernel (default: 50)

    Returns:
        PredicateKernel instance

    Raises:
        ConfigurationError: If the name is unknown

    Example:
        >>> get_kernel('arbitrary', precision=80)
        ArbitraryPrecisionKernel(precision=80)
    """
    if isinstance(kernel, PredicateKernel):
        return kernel
    if kernel not in KERNELS:
        raise ConfigurationError(
            f"Unknown kernel {kernel!r}. Available kernels: {', '.join(KERNELS)}"
        )
    if kernel == 'arbitrary':
        return ArbitraryPrecisionKernel(50 if precision is None else precision)
    return KERNELS[kernel]()
