"""Pytest configuration and shared fixtures."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Add the project root to the path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from config import Model, SimulationConfig  # noqa: E402
from particle import ParticleStore  # noqa: E402


@pytest.fixture
def rng():
    """Provide a seeded random generator."""
    return np.random.default_rng(1234)


@pytest.fixture
def store():
    """Provide an empty particle store."""
    return ParticleStore(capacity=4)


@pytest.fixture
def quiet_config():
    """A config that never spawns and keeps particles alive for a long time."""
    return SimulationConfig(
        spawn_interval=1e9,
        spawn_count=0,
        base_speed=0.0,
        lifetime=1e9,
        gravity_strength=0.0,
        boundary_enabled=False,
        model=Model.COLLISION,
    )


def add_particle(store, position, velocity=(0.0, 0.0, 0.0), size=0.5, lifetime=100.0):
    """Insert a gray particle and return its id."""
    return store.add(position, velocity, size, (0.5, 0.5, 0.5, 0.8), lifetime)
