"""
YAML configuration file loader for intersection finders.

This module provides utilities to load and validate YAML configuration files
holding sweep options, an optional segment list and output settings.
"""

import yaml
from typing import Any, Dict, List, Tuple
from pathlib import Path

from ..core.errors import ConfigurationError

RawSegment = Tuple[Tuple[Any, Any], Tuple[Any, Any]]


def load_yaml_config(filepath: str) -> Dict[str, Any]:
    """
    Load a YAML configuration file.

    Args:
        filepath: Path to YAML file

    Returns:
        Dictionary containing configuration parameters

    Raises:
        FileNotFoundError: If config file doesn't exist
        yaml.YAMLError: If file is not valid YAML

    Example:
        >>> config = load_yaml_config('configs/sweep.yaml')
        >>> print(config['sweep']['kernel'])
        exact
    """
    filepath = Path(filepath)

    if not filepath.exists():
        raise FileNotFoundError(f"Config file not found: {filepath}")

    with open(filepath, 'r') as f:
        try:
            config = yaml.safe_load(f)
            return config if config is not None else {}
        except yaml.YAMLError as e:
            raise yaml.YAMLError(f"Error parsing YAML file {filepath}: {e}")


def parse_segments(entries: List[Any]) -> List[RawSegment]:
    """
    Read segments from their YAML form.

    Each entry is either a nested list [[x1, y1], [x2, y2]], a flat list
    [x1, y1, x2, y2] or a mapping {start: [x1, y1], end: [x2, y2]}.
    Numbers written as strings (e.g. '1/3' or '0.1') are kept as strings so
    the kernel converts them without rounding.

    Raises:
        ConfigurationError: If an entry has none of these shapes

    Example:
        >>> parse_segments([[[0, 0], [2, 2]], [0, 2, 2, 0]])
        [((0, 0), (2, 2)), ((0, 2), (2, 0))]
    """
    segments = []
    for index, entry in enumerate(entries or []):
        if isinstance(entry, dict) and 'start' in entry and 'end' in entry:
            first, second = entry['start'], entry['end']
        elif isinstance(entry, (list, tuple)) and len(entry) == 4:
            first, second = entry[:2], entry[2:]
        elif isinstance(entry, (list, tuple)) and len(entry) == 2:
            first, second = entry
        else:
            raise ConfigurationError(f"Cannot read segment {index}: {entry!r}")

        if not all(isinstance(p, (list, tuple)) and len(p) == 2 for p in (first, second)):
            raise ConfigurationError(f"Cannot read segment {index}: {entry!r}")
        segments.append((tuple(first), tuple(second)))
    return segments


def load_sweep_config(filepath: str) -> Dict[str, Any]:
    """
    Load a sweep configuration file.

    Args:
        filepath: Path to YAML file

    Returns:
        Dictionary with keys:
        - sweep: finder options (for SweepOptions.from_config)
        - segments: list of parsed segments (empty if the file has none)
        - output: {save_path, filename}

    Example:
        >>> config = load_sweep_config('configs/sweep.yaml')
        >>> options = SweepOptions.from_config(config['sweep'])
    """
    config = load_yaml_config(filepath)
    output = {'save_path': 'outputs/', 'filename': 'intersections.json'}
    output.update(config.get('output') or {})
    return {
        'sweep': config.get('sweep') or {},
        'segments': parse_segments(config.get('segments') or []),
        'output': output,
    }


def merge_configs(*configs: Dict[str, Any]) -> Dict[str, Any]:
    """
    Merge multiple configuration dictionaries.

    Later dictionaries override earlier ones for conflicting keys.

    Args:
        *configs: Variable number of configuration dictionaries

    Returns:
        Merged configuration dictionary

    Example:
        >>> base_config = {'kernel': 'exact', 'precision': 50}
        >>> override_config = {'kernel': 'float'}
        >>> merge_configs(base_config, override_config)
        {'kernel': 'float', 'precision': 50}
    """
    merged = {}
    for config in configs:
        merged.update(config)
    return merged
