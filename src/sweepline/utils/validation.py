"""
Input validation for intersection finders.

Segments arrive as plain coordinate pairs in any endpoint order. They are
converted to the kernel's number type and normalized (left endpoint first)
before any finder looks at them. This module also hosts the collinear
overlap pre-scan used when overlaps are disallowed.
"""

from collections import defaultdict
from fractions import Fraction
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..core.errors import ConfigurationError
from ..core.kernel import PredicateKernel
from .geometry import Point, is_degenerate, normalize_segment


def normalize_segments(segments: Sequence[Any], kernel: PredicateKernel) -> List[Tuple[Point, Point]]:
    """
    Convert raw segments to normalized kernel points.

    Args:
        segments: Sequence of ((x1, y1), (x2, y2)) pairs
        kernel: Kernel whose number type the coordinates are coerced to

    Returns:
        List of (left, right) point pairs, in input order

    Raises:
        ConfigurationError: If a segment is not a pair of coordinate pairs
                            or holds a coordinate the kernel cannot represent

    Example:
        >>> normalize_segments([((2, 0), (0, 0))], get_kernel('float'))
        [(Point(x=0.0, y=0.0), Point(x=2.0, y=0.0))]
    """
    normalized = []
    for index, segment in enumerate(segments):
        try:
            (x1, y1), (x2, y2) = segment
            first = kernel.point(x1, y1)
            second = kernel.point(x2, y2)
        except (TypeError, ValueError, ArithmeticError) as e:
            raise ConfigurationError(f"Malformed segment {index} {segment!r}: {e}") from e
        normalized.append(normalize_segment(first, second))
    return normalized


def _line_key(segment: Tuple[Point, Point]) -> Tuple[Fraction, Fraction, Fraction]:
    # a*x + b*y = c, scaled so the first non-zero coefficient is 1
    (px, py), (qx, qy) = segment
    px, py, qx, qy = (Fraction(v) for v in (px, py, qx, qy))
    a = qy - py
    b = px - qx
    c = a * px + b * py
    scale = a if a != 0 else b
    return (a / scale, b / scale, c / scale)


def first_collinear_overlap(segments: Sequence[Tuple[Point, Point]]) -> Optional[Tuple[int, int]]:
    """
    Find a pair of segments sharing more than one point.

    Segments are grouped by supporting line and each group is swept in
    order of left endpoint. Collinear segments that only touch end to end
    do not count.

    Args:
        segments: Normalized segments

    Returns:
        (i, j) with i < j for the first overlapping pair found, else None
    """
    lines: Dict[Tuple[Fraction, Fraction, Fraction], List[int]] = defaultdict(list)
    for index, segment in enumerate(segments):
        if not is_degenerate(segment):
            lines[_line_key(segment)].append(index)

    for members in lines.values():
        if len(members) < 2:
            continue
        members.sort(key=lambda index: segments[index])
        reach = members[0]
        for index in members[1:]:
            if segments[index][0] < segments[reach][1]:
                return tuple(sorted((reach, index)))
            if segments[index][1] > segments[reach][1]:
                reach = index
    return None
