"""
Exceptions raised by the intersection finders.

Input problems are reported before a sweep starts; numeric inconsistencies
abort a running sweep and are never recovered internally.
"""

from typing import Any, Optional, Sequence


class SweepError(ValueError):
    """Base class for all errors raised by sweepline."""


class ConfigurationError(SweepError):
    """Invalid options, malformed input, or input the options forbid."""


class DegenerateInputError(SweepError):
    """
    A zero-length segment was found where point segments cannot take part.

    Attributes:
        index (int): Input position of the offending segment
        point: Location of the point segment
    """

    def __init__(self, index: int, point: Any):
        self.index = index
        self.point = point
        super().__init__(
            f"Segment {index} has zero length at {tuple(point)}; point segments "
            f"only take part when endpoint touches are included"
        )


class PrecisionError(SweepError):
    """
    The predicate kernel gave answers that cannot all be true at once.

    Raised when the active-segment ordering turns out to be non-transitive
    or when an intersection is found behind the sweep position. Retry with
    a higher-precision kernel ('arbitrary' with a larger precision, or
    'exact').

    Attributes:
        point: Sweep position at which the inconsistency was detected
        records (list): Intersection records reported before the abort
    """

    def __init__(self, message: str, point: Any = None,
                 records: Optional[Sequence] = None):
        self.point = point
        self.records = list(records) if records is not None else []
        location = f" at {tuple(point)}" if point is not None else ""
        super().__init__(
            f"{message}{location}; retry with a higher-precision kernel"
        )
