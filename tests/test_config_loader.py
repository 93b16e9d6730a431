"""Tests for configuration loading, options and input helpers."""

from pathlib import Path

import pytest
import yaml

from sweepline import ConfigurationError, SweepOptions
from sweepline.core.kernel import ExactRationalKernel, FloatingPointKernel
from sweepline.utils.config_loader import (load_sweep_config, load_yaml_config, merge_configs,
                                           parse_segments)
from sweepline.utils.generators import random_segments
from sweepline.utils.validation import first_collinear_overlap, normalize_segments

REPO_CONFIG = Path(__file__).resolve().parents[1] / 'configs' / 'sweep.yaml'


def write(tmp_path, text):
    path = tmp_path / 'sweep.yaml'
    path.write_text(text)
    return str(path)


def test_load_yaml_config_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_yaml_config(str(tmp_path / 'missing.yaml'))
    with pytest.raises(yaml.YAMLError, match='Error parsing YAML'):
        load_yaml_config(write(tmp_path, 'sweep: [unclosed'))
    assert load_yaml_config(write(tmp_path, '')) == {}


def test_load_sweep_config(tmp_path):
    config = load_sweep_config(write(tmp_path, """
sweep:
  kernel: float
  include-endpoint-touches: true
segments:
  - [[0, 0], [2, 2]]
  - [0, 2, 2, 0]
  - {start: [1, 0], end: [1, 3]}
output:
  filename: out.csv
"""))
    assert config['segments'] == [((0, 0), (2, 2)), ((0, 2), (2, 0)), ((1, 0), (1, 3))]
    assert config['output'] == {'save_path': 'outputs/', 'filename': 'out.csv'}
    options = SweepOptions.from_config(config['sweep'])
    assert options.kernel == 'float'
    assert options.include_endpoint_touches


def test_repository_config_loads():
    config = load_sweep_config(str(REPO_CONFIG))
    options = SweepOptions.from_config(config['sweep'])
    assert options == SweepOptions()
    assert len(config['segments']) == 6


def test_parse_segments_rejects_bad_entries():
    with pytest.raises(ConfigurationError, match='segment 1'):
        parse_segments([[[0, 0], [1, 1]], [1, 2, 3]])
    with pytest.raises(ConfigurationError):
        parse_segments([{'start': [0, 0]}])
    with pytest.raises(ConfigurationError):
        parse_segments([[[0, 0, 0], [1, 1]]])
    assert parse_segments(None) == []


def test_merge_configs():
    assert merge_configs({'kernel': 'exact', 'precision': 50}, {'kernel': 'float'}) == {
        'kernel': 'float', 'precision': 50
    }


def test_options_validation():
    with pytest.raises(ConfigurationError, match='Unknown sweep option'):
        SweepOptions.from_config({'touches': True})
    with pytest.raises(ConfigurationError):
        SweepOptions(precision=0)
    with pytest.raises(ConfigurationError):
        SweepOptions(kernel='double')
    options = SweepOptions(kernel=FloatingPointKernel())
    assert options.as_dict()['kernel'] == 'float'
    assert 'allow_overlaps=True' in repr(SweepOptions())
    assert repr(SweepOptions.from_config({'kernel': 'float', 'include-endpoint-touches': True})) == (
        "SweepOptions(include_endpoint_touches=True, kernel='float', allow_overlaps=True, "
        "on_degenerate='ignore', precision=50)"
    )
    assert SweepOptions.from_config(None) == SweepOptions()


def test_normalize_segments():
    kernel = ExactRationalKernel()
    assert normalize_segments([((2, 0), ('1/2', 0))], kernel) == [
        (kernel.point('1/2', 0), kernel.point(2, 0))
    ]
    with pytest.raises(ConfigurationError, match='Malformed segment 0'):
        normalize_segments([((0, 0), (1, 'x'))], kernel)
    with pytest.raises(ConfigurationError):
        normalize_segments([5], kernel)


def test_first_collinear_overlap():
    kernel = ExactRationalKernel()

    def scan(raw):
        return first_collinear_overlap(normalize_segments(raw, kernel))

    assert scan([((0, 0), (2, 2)), ((3, 3), (4, 4)), ((1, 1), (5, 5))]) in {(0, 2), (1, 2)}
    assert scan([((0, 0), (2, 2)), ((2, 2), (4, 4)), ((0, 1), (2, 3))]) is None
    assert scan([((0, 0), (0, 3)), ((0, 7), (0, 1))]) == (0, 1)
    assert scan([((1, 1), (1, 1)), ((0, 0), (2, 2))]) is None


def test_random_segments():
    first = random_segments(20, grid=5, seed=42)
    assert first == random_segments(20, grid=5, seed=42)
    assert len(first) == 20
    assert all(0 <= v <= 5 for segment in first for point in segment for v in point)
    points = random_segments(50, seed=1, point_fraction=1.0)
    assert all(a == b for a, b in points)
