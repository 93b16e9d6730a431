"""
Abstract base class for all segment intersection finders.

This module defines the common interface that the intersection finders
(Bentley-Ottmann sweep, brute-force oracle) implement, together with the
input preparation and result persistence they share.
"""

import json
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .errors import ConfigurationError, DegenerateInputError
from .options import SweepOptions
from .records import IntersectionRecord
from ..utils.geometry import Point, is_degenerate
from ..utils.validation import first_collinear_overlap, normalize_segments

logger = logging.getLogger(__name__)

CSV_HEADER = 'x,y,end_x,end_y,segments'


class IntersectionFinder(ABC):
    """
    Abstract base class for intersection finders.

    All finders inherit from this class and implement the required abstract
    methods for finding intersections and reporting metrics.

    Attributes:
        options (SweepOptions): Validated finder options
        kernel (PredicateKernel): Kernel built from the options
        records (Optional[List[IntersectionRecord]]): Result of the last run()
        run_time (float): Time taken by the last run() (seconds)
        metrics (Dict[str, Any]): Performance metrics from the last search
    """

    def __init__(self, options: Optional[SweepOptions] = None, **overrides):
        """
        Initialize the finder.

        Args:
            options: Options object; built from overrides when omitted
            **overrides: Individual options (include_endpoint_touches, kernel,
                         allow_overlaps, on_degenerate, precision)

        Raises:
            ConfigurationError: If an option is invalid
        """
        if options is None:
            options = SweepOptions(**overrides)
        elif overrides:
            options = SweepOptions(**{**vars(options), **overrides})
        self.options = options
        self.kernel = options.make_kernel()
        self.records: Optional[List[IntersectionRecord]] = None
        self.run_time: float = 0.0
        self.metrics: Dict[str, Any] = {}
        self._initialize_algorithm()

    @abstractmethod
    def _initialize_algorithm(self) -> None:
        """
        Initialize algorithm-specific state.

        This method is called during __init__ and should set up any
        counters or data structures the algorithm keeps between runs.
        """
        pass

    @abstractmethod
    def find(self, segments: Sequence[Any]) -> Iterator[IntersectionRecord]:
        """
        Find all intersections among segments.

        Input validation happens before this method returns; the records
        themselves may be produced lazily.

        Args:
            segments: Sequence of ((x1, y1), (x2, y2)) pairs; a segment's
                      identity is its index in this sequence

        Returns:
            Iterator over IntersectionRecord

        Raises:
            ConfigurationError: If the input or options are invalid
            DegenerateInputError: If a zero-length segment is rejected
            PrecisionError: While iterating, if the kernel proves inconsistent

        Example:
            >>> finder = BentleyOttmann(include_endpoint_touches=True)
            >>> for record in finder.find([((0, 0), (2, 2)), ((0, 2), (2, 0))]):
            ...     print(record.point, sorted(record.segments))
        """
        pass

    @abstractmethod
    def get_metrics(self) -> Dict[str, Any]:
        """
        Get performance metrics from the last search.

        Returns:
            Dictionary containing metrics such as:
            - algorithm (str): Finder name
            - intersections (int): Number of records reported
            - search_time (float): Time spent searching (seconds)
            - algorithm specific counters
        """
        pass

    def prepare(self, segments: Sequence[Any]) -> List[Tuple[Point, Point]]:
        """
        Validate and normalize input segments.

        Zero-length segments are kept only when endpoint touches are
        included; otherwise they are ignored or rejected according to
        on_degenerate.

        Returns:
            Normalized segments in input order (ignored point segments
            included, finders skip them)
        """
        normalized = normalize_segments(segments, self.kernel)

        if not self.options.include_endpoint_touches:
            ignored = 0
            for index, segment in enumerate(normalized):
                if not is_degenerate(segment):
                    continue
                if self.options.on_degenerate == 'raise':
                    raise DegenerateInputError(index, segment[0])
                logger.debug("ignoring zero-length segment %d at %s", index, tuple(segment[0]))
                ignored += 1
            if ignored:
                logger.warning("Ignored %d zero-length segment(s); enable endpoint "
                               "touches to report them", ignored)

        if not self.options.allow_overlaps:
            pair = first_collinear_overlap(normalized)
            if pair is not None:
                raise ConfigurationError(
                    f"Segments {pair[0]} and {pair[1]} overlap collinearly but "
                    f"allow_overlaps is False"
                )

        logger.debug("prepared %d segments for %s with %r",
                     len(normalized), self.__class__.__name__, self.kernel)
        return normalized

    def run(self, segments: Sequence[Any]) -> List[IntersectionRecord]:
        """
        Find all intersections and collect them into a list.

        Returns:
            List of records, also stored in self.records
        """
        start_time = time.time()
        self.records = list(self.find(segments))
        self.run_time = time.time() - start_time
        return self.records

    def save_results(self, filename: str) -> None:
        """
        Save the records of the last run() to a file.

        Supports multiple formats based on file extension:
        - .json: JSON format with records and metrics
        - .csv: Comma-separated values, one record per row

        Args:
            filename: Output file path with extension

        Raises:
            ValueError: If nothing has been run or file format is unsupported

        Example:
            >>> finder.run(segments)
            >>> finder.save_results('outputs/intersections.json')
        """
        if self.records is None:
            raise ValueError("No results to save. Run run() first.")

        if filename.endswith('.json'):
            with open(filename, 'w') as f:
                json.dump({
                    'records': [record.as_dict() for record in self.records],
                    'metrics': self.get_metrics()
                }, f, indent=2)
        elif filename.endswith('.csv'):
            rows = []
            for record in self.records:
                data = record.as_dict()
                point, end = data['point'], data.get('end')
                rows.append([repr(point[0]), repr(point[1]),
                             repr(end[0]) if end else '', repr(end[1]) if end else '',
                             ';'.join(str(index) for index in data['segments'])])
            np.savetxt(filename, np.array(rows, dtype=str).reshape(-1, 5),
                       fmt='%s', delimiter=',', header=CSV_HEADER, comments='')
        else:
            raise ValueError(f"Unsupported file format: {filename}. "
                             f"Use .json or .csv")

    def load_results(self, filename: str) -> List[IntersectionRecord]:
        """
        Load records from a file written by save_results().

        Coordinates come back as floats.

        Example:
            >>> records = finder.load_results('outputs/intersections.csv')
        """
        records = []
        if filename.endswith('.json'):
            with open(filename, 'r') as f:
                data = json.load(f)
            for item in data['records']:
                end = Point(*item['end']) if 'end' in item else None
                records.append(IntersectionRecord(Point(*item['point']),
                                                  frozenset(item['segments']), end))
        elif filename.endswith('.csv'):
            rows = np.loadtxt(filename, delimiter=',', skiprows=1, dtype=str, ndmin=2)
            for x, y, end_x, end_y, segments in rows:
                end = Point(float(end_x), float(end_y)) if end_x else None
                records.append(IntersectionRecord(
                    Point(float(x), float(y)),
                    frozenset(int(index) for index in segments.split(';')),
                    end,
                ))
        else:
            raise ValueError(f"Unsupported file format: {filename}")

        self.records = records
        return records

    def __repr__(self) -> str:
        """String representation of the finder."""
        return f"{self.__class__.__name__}(options={self.options})"

    def __str__(self) -> str:
        """Human-readable string representation."""
        status = f"{len(self.records)} records" if self.records is not None else "not run"
        return f"{self.__class__.__name__} ({status})"
