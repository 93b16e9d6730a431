"""
Main entry point for the segment intersection finders.

This CLI runs a finder on segments read from a YAML configuration file or
drawn at random, prints the records and metrics, and can save the results
or cross-check the sweep against the brute-force finder.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

from .algorithms.bentley_ottmann import BentleyOttmann
from .algorithms.brute_force import BruteForce
from .core.errors import SweepError
from .core.intersection_finder import IntersectionFinder
from .core.kernel import KERNELS
from .core.options import SweepOptions
from .core.records import IntersectionRecord
from .utils.config_loader import load_sweep_config, merge_configs
from .utils.generators import random_segments


ALGORITHM_MAP = {
    'bentley_ottmann': BentleyOttmann,
    'brute_force': BruteForce,
}

MAX_PRINTED_RECORDS = 20


def format_record(record: IntersectionRecord) -> str:
    """One-line description of a record with float coordinates."""
    point = f"({float(record.point[0]):.6g}, {float(record.point[1]):.6g})"
    segments = sorted(record.segments)
    if record.is_overlap:
        end = f"({float(record.end[0]):.6g}, {float(record.end[1]):.6g})"
        return f"overlap {point} -> {end}: segments {segments}"
    return f"point {point}: segments {segments}"


def run_finder(algorithm_name: str, segments: Sequence[Any],
               options: SweepOptions) -> IntersectionFinder:
    """
    Run one intersection finder and print its results.

    Args:
        algorithm_name: Name of finder ('bentley_ottmann', 'brute_force')
        segments: Input segments
        options: Finder options

    Returns:
        The finder, holding records and metrics of the run
    """
    print(f"\n{'='*60}")
    print(f"Running {algorithm_name.upper()} Intersection Finder")
    print(f"{'='*60}\n")

    FinderClass = ALGORITHM_MAP[algorithm_name]
    finder = FinderClass(options)
    print(f"Finder: {finder}")
    print(f"Segments: {len(segments)}")

    print("\nFinding intersections...")
    records = finder.run(segments)

    for record in records[:MAX_PRINTED_RECORDS]:
        print(f"  {format_record(record)}")
    if len(records) > MAX_PRINTED_RECORDS:
        print(f"  ... {len(records) - MAX_PRINTED_RECORDS} more")

    # Display metrics
    print("\n" + "="*60)
    print("Results:")
    print("="*60)
    for key, value in finder.get_metrics().items():
        print(f"  {key}: {value}")
    print("="*60 + "\n")

    print(f"✅ Found {len(records)} intersection record(s)")
    return finder


def compare_finders(sweep: IntersectionFinder, oracle: IntersectionFinder) -> bool:
    """Print whether two finders reported the same records."""
    expected = set(oracle.records)
    found = set(sweep.records)
    if expected == found:
        print(f"✅ Sweep agrees with brute force on {len(found)} record(s)")
        return True
    print(f"❌ Sweep and brute force disagree: "
          f"{len(found - expected)} extra, {len(expected - found)} missing")
    for record in sorted(found - expected, key=IntersectionRecord.sort_key):
        print(f"  extra   {format_record(record)}")
    for record in sorted(expected - found, key=IntersectionRecord.sort_key):
        print(f"  missing {format_record(record)}")
    return False


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Line Segment Intersection Finders',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Run the sweep on the segments of a config file
  sweepline --config configs/sweep.yaml

  # 200 random segments, endpoint touches included, floating point kernel
  sweepline --random 200 --seed 7 --touches --kernel float

  # Cross-check the sweep against brute force and save the records
  sweepline --random 50 --compare --save outputs/intersections.json
        """
    )

    parser.add_argument(
        '--config', '-c',
        type=str,
        help='YAML configuration file with sweep options and segments'
    )

    parser.add_argument(
        '--algorithm', '-a',
        type=str,
        choices=list(ALGORITHM_MAP.keys()),
        default='bentley_ottmann',
        help='Intersection finder to use (default: bentley_ottmann)'
    )

    parser.add_argument(
        '--kernel', '-k',
        type=str,
        choices=list(KERNELS.keys()),
        help='Predicate kernel (overrides the config file)'
    )

    parser.add_argument(
        '--precision',
        type=int,
        help='Digits of the arbitrary precision kernel'
    )

    parser.add_argument(
        '--touches',
        action='store_true',
        help='Report shared endpoints and T-junctions as intersections'
    )

    parser.add_argument(
        '--random', '-r',
        type=int,
        metavar='N',
        help='Use N random segments instead of the config segments'
    )

    parser.add_argument(
        '--seed',
        type=int,
        help='Seed for random segments'
    )

    parser.add_argument(
        '--grid',
        type=int,
        default=10,
        help='Coordinate range of random segments (default: 10)'
    )

    parser.add_argument(
        '--compare',
        action='store_true',
        help='Also run the brute-force finder and compare the records'
    )

    parser.add_argument(
        '--save', '-s',
        type=str,
        metavar='FILE',
        help='Save records to a .json or .csv file'
    )

    parser.add_argument(
        '--log',
        type=str,
        default='WARNING',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
        help='Logging level (default: WARNING)'
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point with command-line argument parsing."""
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log),
                        format='%(levelname)s %(name)s: %(message)s')

    config: Dict[str, Any] = {'sweep': {}, 'segments': [], 'output': {}}
    if args.config:
        print("Loading configuration...")
        try:
            config = load_sweep_config(args.config)
        except (FileNotFoundError, yaml.YAMLError, SweepError) as e:
            print(f"❌ {e}")
            return 1

    overrides = {}
    if args.kernel:
        overrides['kernel'] = args.kernel
    if args.precision is not None:
        overrides['precision'] = args.precision
    if args.touches:
        overrides['include_endpoint_touches'] = True

    try:
        options = SweepOptions.from_config(merge_configs(config['sweep'], overrides))

        if args.random is not None:
            segments = random_segments(args.random, grid=args.grid, seed=args.seed)
        else:
            segments = config['segments']
        if not segments:
            print("❌ No segments: pass --config with a segments list or --random N")
            return 1

        finder = run_finder(args.algorithm, segments, options)
        agreed = True
        if args.compare:
            other = 'brute_force' if args.algorithm == 'bentley_ottmann' else 'bentley_ottmann'
            oracle = run_finder(other, segments, options)
            agreed = compare_finders(finder, oracle)
    except SweepError as e:
        print(f"❌ {e}")
        return 1

    save_file = args.save
    if save_file is None and config['output'].get('save'):
        save_file = str(Path(config['output']['save_path']) / config['output']['filename'])
    if save_file:
        Path(save_file).parent.mkdir(parents=True, exist_ok=True)
        finder.save_results(save_file)
        print(f"💾 Records saved to: {save_file}")

    return 0 if agreed else 1


if __name__ == '__main__':
    sys.exit(main())
