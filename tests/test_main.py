"""Smoke tests for the sweepline command line interface."""

import json
from pathlib import Path

import pytest

from sweepline.main import ALGORITHM_MAP, format_record, main
from sweepline import IntersectionRecord, Point

REPO_CONFIG = str(Path(__file__).resolve().parents[1] / 'configs' / 'sweep.yaml')


def test_random_compare(capsys):
    assert main(['--random', '30', '--seed', '3', '--compare']) == 0
    out = capsys.readouterr().out
    assert 'BENTLEY_OTTMANN' in out
    assert 'BRUTE_FORCE' in out
    assert 'Sweep agrees with brute force' in out


def test_config_file_and_save(tmp_path, capsys):
    save = tmp_path / 'out' / 'records.json'
    assert main(['--config', REPO_CONFIG, '--touches', '--save', str(save)]) == 0
    out = capsys.readouterr().out
    assert 'Loading configuration' in out
    assert 'Records saved' in out

    data = json.loads(save.read_text())
    assert data['metrics']['algorithm'] == 'Bentley-Ottmann'
    assert [1.0, 1.0] in [record['point'] for record in data['records']]


def test_brute_force_with_float_kernel(capsys):
    assert main(['--algorithm', 'brute_force', '--kernel', 'float',
                 '--random', '15', '--seed', '1', '--touches']) == 0
    assert "kernel: float" in capsys.readouterr().out


def test_errors_are_reported(tmp_path, capsys):
    assert main([]) == 1
    assert 'No segments' in capsys.readouterr().out

    config = tmp_path / 'bad.yaml'
    config.write_text("sweep:\n  allow_overlaps: false\n"
                      "segments:\n  - [0, 0, 3, 0]\n  - [1, 0, 4, 0]\n")
    assert main(['--config', str(config)]) == 1
    assert 'allow_overlaps is False' in capsys.readouterr().out


def test_unknown_algorithm_exits():
    with pytest.raises(SystemExit):
        main(['--algorithm', 'sweep'])
    assert set(ALGORITHM_MAP) == {'bentley_ottmann', 'brute_force'}


def test_format_record():
    assert format_record(IntersectionRecord(Point(1, 2), frozenset({1, 0}))) == \
        'point (1, 2): segments [0, 1]'
    assert format_record(IntersectionRecord(Point(0, 0), frozenset({3, 2}), Point(0.5, 0))) == \
        'overlap (0, 0) -> (0.5, 0): segments [2, 3]'


def test_config_errors_are_reported(tmp_path, capsys):
    assert main(['--config', str(tmp_path / 'missing.yaml')]) == 1
    assert '❌ Config file not found' in capsys.readouterr().out

    config = tmp_path / 'broken.yaml'
    config.write_text('sweep: [unclosed')
    assert main(['--config', str(config)]) == 1
    assert '❌ Error parsing YAML' in capsys.readouterr().out

    config.write_text('segments:\n  - [1, 2, 3]\n')
    assert main(['--config', str(config)]) == 1
    assert '❌ Cannot read segment 0' in capsys.readouterr().out
