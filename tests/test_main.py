"""Smoke tests for the headless runner."""

import json
import logging

import pytest

from main import main


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    yield
    root.handlers[:] = saved_handlers
    root.setLevel(saved_level)


def test_runs_to_max_steps(tmp_path, restore_root_logger):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "simulation_parameters": {"spawn_interval": 0.05, "spawn_count": 5, "seed": 3},
        "run_control": {"max_steps": 10, "delta_time": 0.05, "log_throttle_steps": 5},
        "logging": {"level": "DEBUG", "log_file": None},
    }))
    assert main(str(path)) == 0


def test_missing_config_fails(tmp_path, capsys):
    assert main(str(tmp_path / "absent.json")) == 1
    assert "FATAL" in capsys.readouterr().out


def test_bad_model_fails(tmp_path, restore_root_logger):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "simulation_parameters": {"model": "vortex"},
        "logging": {"log_file": None},
    }))
    assert main(str(path)) == 1
