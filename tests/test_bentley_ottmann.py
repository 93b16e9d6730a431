"""Tests for the Bentley-Ottmann sweep, checked against the brute-force oracle."""

import logging
from collections import Counter
from fractions import Fraction

import pytest

from sweepline import (BentleyOttmann, BruteForce, ConfigurationError, DegenerateInputError,
                       ExactRationalKernel, IntersectionRecord, Point, PrecisionError,
                       SweepOptions, SweepState, find_intersections, pairwise_intersections)
from sweepline.core.kernel import Orientation
from sweepline.utils.generators import random_segments


def P(x, y):
    return Point(Fraction(x), Fraction(y))


def record(point, segments, end=None):
    return IntersectionRecord(P(*point), frozenset(segments), None if end is None else P(*end))


def oracle(segments, **options):
    return set(BruteForce(**options).run(segments))


SCENARIO_A = [((0, 0), (2, 2)), ((0, 2), (2, 0))]
SCENARIO_B = [((0, 0), (3, 0)), ((1, 0), (4, 0)), ((2, 0), (5, 0))]
SCENARIO_C = [((0, 0), (0, 5)), ((0, 2), (0, 7))]


def test_scenario_a_single_crossing():
    assert list(find_intersections(SCENARIO_A)) == [record((1, 1), {0, 1})]


def test_scenario_b_collinear_overlaps():
    records = list(find_intersections(SCENARIO_B))
    assert records == [
        record((1, 0), {0, 1}, end=(2, 0)),
        record((2, 0), {0, 1, 2}, end=(3, 0)),
        record((3, 0), {1, 2}, end=(4, 0)),
    ]
    assert all(r.is_overlap for r in records)

    pairs = pairwise_intersections(records)
    assert pairs == {
        (0, 1): (P(1, 0), P(3, 0)),
        (0, 2): (P(2, 0), P(3, 0)),
        (1, 2): (P(2, 0), P(4, 0)),
    }


def test_scenario_b_with_touches_reports_no_points():
    records = list(find_intersections(SCENARIO_B, include_endpoint_touches=True))
    assert not [r for r in records if not r.is_overlap]
    assert len(records) == 3


def test_scenario_c_vertical_overlap():
    assert list(find_intersections(SCENARIO_C)) == [record((0, 2), {0, 1}, end=(0, 5))]


def test_zero_length_segment_on_interior():
    segments = [((0, 0), (2, 0)), ((1, 0), (1, 0))]
    assert list(find_intersections(segments)) == []
    assert list(find_intersections(segments, include_endpoint_touches=True)) == [
        record((1, 0), {0, 1})
    ]


def test_zero_length_segment_policy():
    segments = [((0, 0), (2, 0)), ((1, 0), (1, 0))]
    with pytest.raises(DegenerateInputError) as excinfo:
        find_intersections(segments, on_degenerate='raise')
    assert excinfo.value.index == 1
    # Point segments are always accepted when touches are reported
    find_intersections(segments, on_degenerate='raise', include_endpoint_touches=True)


def test_endpoint_touches():
    segments = [
        ((0, 0), (2, 0)),   # shares (2, 0) with the next one
        ((2, 0), (4, 1)),
        ((1, -1), (1, 0)),  # T-junction on segment 0
    ]
    assert list(find_intersections(segments)) == []
    assert list(find_intersections(segments, include_endpoint_touches=True)) == [
        record((1, 0), {0, 2}),
        record((2, 0), {0, 1}),
    ]


def test_concurrent_segments_form_one_record():
    segments = [
        ((0, 0), (4, 4)),
        ((0, 4), (4, 0)),
        ((2, 0), (2, 4)),
        ((0, 2), (4, 2)),
        ((0, 1), (2, 2)),   # ends at the common point
    ]
    assert list(find_intersections(segments)) == [record((2, 2), {0, 1, 2, 3})]
    assert list(find_intersections(segments, include_endpoint_touches=True)) == [
        record((2, 2), {0, 1, 2, 3, 4})
    ]


def test_crossing_inside_an_overlap_keeps_the_run():
    segments = [((0, 0), (4, 0)), ((0, 0), (4, 0)), ((2, -1), (2, 1))]
    assert list(find_intersections(segments)) == [
        record((2, 0), {0, 1, 2}),
        record((0, 0), {0, 1}, end=(4, 0)),
    ]


def test_overlap_of_contained_segment():
    segments = [((0, 0), (6, 6)), ((2, 2), (3, 3)), ((0, 6), (6, 0))]
    records = list(find_intersections(segments))
    # The point record of a position precedes the overlap ending there
    assert records == [
        record((3, 3), {0, 2}),
        record((2, 2), {0, 1}, end=(3, 3)),
    ]


def test_allow_overlaps_false():
    with pytest.raises(ConfigurationError, match='overlap'):
        find_intersections(SCENARIO_B, allow_overlaps=False)
    # End-to-end collinear touches are not overlaps
    touching = [((0, 0), (1, 0)), ((1, 0), (2, 0))]
    assert list(find_intersections(touching, allow_overlaps=False)) == []


def test_invalid_input_fails_before_iteration():
    with pytest.raises(ConfigurationError, match='Malformed segment 1'):
        find_intersections([((0, 0), (1, 1)), ((0, 0),)])
    with pytest.raises(ConfigurationError, match='Unknown kernel'):
        find_intersections(SCENARIO_A, kernel='quad')
    with pytest.raises(ConfigurationError):
        find_intersections(SCENARIO_A, on_degenerate='skip')


@pytest.mark.parametrize('kernel', ['exact', 'arbitrary', 'float'])
def test_scenarios_with_every_kernel(kernel):
    finder = BentleyOttmann(kernel=kernel)
    assert [sorted(r.segments) for r in finder.run(SCENARIO_A)] == [[0, 1]]
    assert [r.point for r in finder.records] == [finder.kernel.point(1, 1)]
    assert len(finder.run(SCENARIO_B)) == 3
    assert len(finder.run(SCENARIO_C)) == 1


@pytest.mark.parametrize('seed', range(25))
@pytest.mark.parametrize('touches', [False, True])
def test_matches_brute_force(seed, touches):
    segments = random_segments(10 + 40 * seed // 24, grid=8, seed=seed,
                               point_fraction=0.1 if touches else 0.0)
    found = list(find_intersections(segments, include_endpoint_touches=touches))
    assert set(found) == oracle(segments, include_endpoint_touches=touches)
    assert len(found) == len(set(found))


@pytest.mark.parametrize('seed', range(5))
def test_matches_brute_force_with_zero_length_segments_ignored(seed):
    segments = random_segments(40, grid=6, seed=100 + seed, point_fraction=0.2)
    assert set(find_intersections(segments)) == oracle(segments)


@pytest.mark.parametrize('seed', range(5))
def test_decimal_kernel_on_collinear_input(seed):
    # Horizontal segments only: every reported point is an input endpoint
    segments = [((x1, y), (x2, y)) for (x1, y), (x2, _) in random_segments(30, grid=6, seed=seed)]
    for touches in (False, True):
        exact = list(find_intersections(segments, include_endpoint_touches=touches))
        decimal = list(find_intersections(segments, include_endpoint_touches=touches,
                                          kernel='arbitrary', precision=30))
        assert [(r.point, r.segments, r.end) for r in decimal] == [
            (r.point, r.segments, r.end) for r in exact
        ]


@pytest.mark.parametrize('seed', range(10))
def test_each_point_is_reported_once(seed):
    segments = random_segments(50, grid=6, seed=200 + seed)
    points = Counter(r.point for r in find_intersections(segments, include_endpoint_touches=True)
                     if not r.is_overlap)
    assert all(count == 1 for count in points.values())


def test_output_is_in_sweep_order_and_matches_oracle_order():
    segments = random_segments(40, grid=7, seed=11)
    found = list(find_intersections(segments, include_endpoint_touches=True))
    keys = [r.end if r.is_overlap else r.point for r in found]
    assert keys == sorted(keys)
    assert found == BruteForce(include_endpoint_touches=True).run(segments)


def test_runs_are_deterministic():
    segments = random_segments(50, grid=8, seed=5)
    assert list(find_intersections(segments)) == list(find_intersections(segments))


def test_finder_state_and_metrics():
    finder = BentleyOttmann()
    assert finder.state is SweepState.INIT
    records = finder.find(SCENARIO_A)
    assert finder.state is SweepState.INIT
    next(records)
    assert finder.state is SweepState.PROCESSING
    assert list(records) == []
    assert finder.state is SweepState.DONE

    metrics = finder.get_metrics()
    assert metrics['intersections'] == 1
    assert metrics['splits'] == 2
    assert metrics['segments'] == 2
    assert metrics['state'] == 'done'
    assert metrics['events_processed'] >= 8


def test_options_object_and_overrides():
    options = SweepOptions(include_endpoint_touches=True)
    finder = BentleyOttmann(options, kernel='float')
    assert finder.options.include_endpoint_touches
    assert finder.kernel.name == 'float'
    assert options.kernel == 'exact'


class MisplacedCrossingKernel(ExactRationalKernel):
    """Moves every crossing right of x = threshold far behind the sweep."""

    def __init__(self, threshold=-1000):
        self.threshold = threshold

    def intersect(self, first, second):
        found = super().intersect(first, second)
        if isinstance(found, Point) and found.x > self.threshold:
            return self.point(found.x - 100, found.y)
        return found


class AlwaysCounterClockwise(ExactRationalKernel):
    def orientation(self, a, b, c):
        return Orientation.COUNTERCLOCKWISE


def test_precision_error_from_misplaced_intersection(caplog):
    finder = BentleyOttmann(kernel=MisplacedCrossingKernel())
    with caplog.at_level(logging.ERROR, logger='sweepline'):
        with pytest.raises(PrecisionError) as excinfo:
            list(finder.find(SCENARIO_A))
    assert excinfo.value.point == P(0, 2)
    assert excinfo.value.records == []
    assert 'higher-precision kernel' in str(excinfo.value)
    assert 'Sweep aborted' in caplog.text
    assert finder.get_metrics()['state'] == 'processing'


def test_precision_error_keeps_partial_records():
    segments = SCENARIO_A + [((10, 10), (12, 12)), ((10, 12), (12, 10))]
    finder = BentleyOttmann(kernel=MisplacedCrossingKernel(threshold=5))
    with pytest.raises(PrecisionError) as excinfo:
        list(finder.find(segments))
    assert excinfo.value.point == P(10, 12)
    assert excinfo.value.records == [record((1, 1), {0, 1})]


def test_precision_error_from_inconsistent_ordering():
    segments = [((0, 0), (2, 1)), ((0, 0), (2, -1))]
    with pytest.raises(PrecisionError, match='Inconsistent ordering'):
        list(find_intersections(segments, kernel=AlwaysCounterClockwise()))


def test_line_crossing_two_others_before_they_cross():
    # Segment 2 crosses 0 and 1 before they cross each other
    segments = [((2, 7), (6, 0)), ((3, 7), (4, 0)), ((0, 6), (4, 5))]
    found = list(find_intersections(segments))
    assert found == BruteForce().run(segments)
    assert len(found) == 3


def float_pairs(segments, **options):
    """Pairwise view of a float sweep, or None if the sweep gave up."""
    try:
        records = list(find_intersections(segments, kernel='float', **options))
    except PrecisionError:
        return None
    return pairwise_intersections(records)


def flatten(value):
    points = [value] if isinstance(value, Point) else value
    return [float(c) for point in points for c in point]


def assert_same_pairs(found, expected):
    assert found.keys() == expected.keys()
    for pair, value in expected.items():
        assert flatten(found[pair]) == pytest.approx(flatten(value))


def test_float_kernel_reports_touch_at_input_endpoint():
    # Segment 5 ends on segment 2 after segment 2 was split at a rounded crossing
    segments = [((8, 6), (0, 0)), ((3, 1), (6, 5)), ((5, 1), (1, 5)), ((0, 4), (1, 1)),
                ((6, 0), (0, 5)), ((6, 8), (4, 2)), ((0, 8), (4, 1))]
    for touches in (False, True):
        pairs = float_pairs(segments, include_endpoint_touches=touches)
        if pairs is None:
            continue
        expected = pairwise_intersections(
            BruteForce(kernel='float', include_endpoint_touches=touches).run(segments))
        assert_same_pairs(pairs, expected)
        assert ((2, 5) in pairs) == touches


def test_float_kernel_splits_on_exact_endpoint():
    segments = [((0, 0), (6, 2)), ((1, -1), (1, 1)), ((3, 1), (3, 3))]
    assert [sorted(r.segments) for r in find_intersections(segments, kernel='float')] == [[0, 1]]
    records = list(find_intersections(segments, kernel='float', include_endpoint_touches=True))
    assert records[-1] == IntersectionRecord(Point(3.0, 1.0), frozenset({0, 2}))


@pytest.mark.parametrize('seed', range(20))
@pytest.mark.parametrize('touches', [False, True])
def test_float_kernel_is_correct_or_aborts(seed, touches):
    segments = random_segments(40, grid=8, seed=seed)
    pairs = float_pairs(segments, include_endpoint_touches=touches)
    if pairs is not None:
        expected = BruteForce(kernel='float', include_endpoint_touches=touches).run(segments)
        assert_same_pairs(pairs, pairwise_intersections(expected))
