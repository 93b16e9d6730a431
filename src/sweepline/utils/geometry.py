"""
Geometric utility functions for the plane sweep.

This module provides the point type and the arithmetic building blocks
shared by every predicate kernel: the cross product behind the
orientation test, lexicographic segment normalization and endpoint tests.
"""

from typing import Any, NamedTuple, Tuple


class Point(NamedTuple):
    """
    A point in the plane.

    Points compare lexicographically (by x, then by y), which is the order
    in which the sweep visits them. Because of this order a vertical segment
    still has a well-defined left (lower) and right (upper) endpoint.
    """

    x: Any
    y: Any


def cross_product(A: Point, B: Point, C: Point) -> Any:
    """
    Compute the cross product of vectors AB and AC.

    This function is the building block of the orientation test. The result
    carries the number type of the coordinates, so exact coordinates
    (integers, fractions) give an exact sign.

    Args:
        A: Origin of both vectors (x, y)
        B: End of the first vector (x, y)
        C: End of the second vector (x, y)

    Returns:
        Twice the signed area of triangle ABC:
        - Positive → counter-clockwise turn
        - Negative → clockwise turn
        - Zero → collinear points

    Example:
        >>> cross_product((0, 0), (1, 1), (0, 2))
        2
        >>> cross_product((0, 0), (1, 1), (2, 2))
        0
    """
    return (B[0] - A[0]) * (C[1] - A[1]) - (B[1] - A[1]) * (C[0] - A[0])


def normalize_segment(first: Point, second: Point) -> Tuple[Point, Point]:
    """
    Order the endpoints of a segment so that the left endpoint comes first.

    Args:
        first: One endpoint
        second: The other endpoint

    Returns:
        (left, right) with left <= right in the lexicographic point order

    Example:
        >>> normalize_segment(Point(2, 0), Point(0, 2))
        (Point(x=0, y=2), Point(x=2, y=0))
    """
    return (first, second) if first <= second else (second, first)


def is_endpoint(point: Point, segment: Tuple[Point, Point]) -> bool:
    """Return True if point is one of the two endpoints of segment."""
    return point == segment[0] or point == segment[1]


def is_degenerate(segment: Tuple[Point, Point]) -> bool:
    """Return True for a zero-length (point) segment."""
    return segment[0] == segment[1]
