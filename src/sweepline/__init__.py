"""
sweepline - Line Segment Intersection with the Bentley-Ottmann Sweep

A plane-sweep implementation reporting every intersection among a set of
line segments, robust to shared endpoints, collinear overlaps and several
segments meeting in one point.

Modules:
    core.kernel: Orientation and intersection predicates (exact, decimal, float)
    core.event_queue: Priority queue of sweep events
    core.active_segments: Ordered structure of segments crossing the sweep line
    core.reporter: Assembly of point and overlap records
    algorithms.bentley_ottmann: The sweep-line finder
    algorithms.brute_force: Pairwise reference finder
    utils.config_loader: YAML configuration management
"""

from .algorithms.bentley_ottmann import BentleyOttmann, SweepState, find_intersections
from .algorithms.brute_force import BruteForce
from .core.errors import ConfigurationError, DegenerateInputError, PrecisionError, SweepError
from .core.kernel import (ArbitraryPrecisionKernel, ExactRationalKernel, FloatingPointKernel,
                          Orientation, PredicateKernel, get_kernel)
from .core.options import SweepOptions
from .core.records import IntersectionRecord, pairwise_intersections
from .utils.geometry import Point

__version__ = "1.0.0"
