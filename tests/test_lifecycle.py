"""Tests for spawning and lifetime expiry."""

import numpy as np
import pytest

from config import SimulationConfig
from conftest import add_particle
from constants import PARTICLE_ALPHA, SPAWN_EXTENT
from lifecycle import RepeatingTimer, Spawner, reap


class TestRepeatingTimer:
    """Interval timer behaviour."""

    def test_fires_when_interval_elapses(self):
        timer = RepeatingTimer(0.3)
        assert not timer.tick(0.2)
        assert timer.tick(0.2)
        assert timer.elapsed == pytest.approx(0.1)

    def test_fires_once_per_tick_and_keeps_remainder(self):
        timer = RepeatingTimer(0.3)
        assert timer.tick(0.7)
        assert timer.elapsed == pytest.approx(0.1)
        assert not timer.tick(0.1)

    def test_new_duration_keeps_elapsed_time(self):
        timer = RepeatingTimer(1.0)
        timer.tick(0.4)
        timer.set_duration(0.5)
        assert timer.tick(0.1)

    def test_zero_interval_fires_every_tick(self):
        timer = RepeatingTimer(0.0)
        assert timer.tick(0.01)
        assert timer.tick(0.01)


class TestSpawner:
    """Spawn batches and randomized attributes."""

    def test_spawns_batch_when_timer_fires(self, rng, store):
        config = SimulationConfig(spawn_interval=0.5, spawn_count=10, base_speed=3.0, lifetime=2.5)
        spawner = Spawner(rng, config.spawn_interval)

        assert spawner.tick(store, config, 0.25) == 0
        assert store.count == 0

        assert spawner.tick(store, config, 0.25) == 10
        assert store.count == 10

        live = store.live_slots()
        sizes = store.sizes[live]
        assert np.all(sizes >= 0.1)
        assert np.all(sizes < 1.0)
        np.testing.assert_array_equal(store.lifetimes[live], 2.5)

    def test_launch_attributes(self, rng, store):
        spawner = Spawner(rng, 1.0)
        spawner.spawn(store, 50, base_speed=4.0, lifetime=1.0)
        live = store.live_slots()

        positions = store.positions[live]
        np.testing.assert_array_equal(positions[:, 1], 0.0)
        assert np.all(np.abs(positions[:, [0, 2]]) <= SPAWN_EXTENT)

        velocities = store.velocities[live]
        np.testing.assert_array_equal(velocities[:, 1], 4.0)
        assert np.all(np.abs(velocities[:, [0, 2]]) <= 4.0)

        colors = store.colors[live]
        assert np.all((colors[:, :3] >= 0.0) & (colors[:, :3] < 1.0))
        np.testing.assert_array_equal(colors[:, 3], PARTICLE_ALPHA)

    def test_names_follow_running_total(self, rng, store):
        spawner = Spawner(rng, 1.0)
        spawner.spawn(store, 2, 1.0, 1.0)
        spawner.spawn(store, 1, 1.0, 1.0)
        assert spawner.total_spawned == 3
        assert [store.get(pid).name for pid in store.ids()] == [
            "Particle 0", "Particle 1", "Particle 2"
        ]

    def test_zero_count_spawns_nothing(self, rng, store):
        assert Spawner(rng, 1.0).spawn(store, 0, 1.0, 1.0) == 0
        assert store.count == 0

    def test_picks_up_new_interval(self, rng, store):
        config = SimulationConfig(spawn_interval=10.0, spawn_count=1)
        spawner = Spawner(rng, config.spawn_interval)
        assert spawner.tick(store, config, 0.2) == 0
        assert spawner.tick(store, config.replace(spawn_interval=0.3), 0.2) == 1


class TestReap:
    """Lifetime countdown."""

    def test_lifetime_is_non_increasing_and_clamps_at_zero(self, store):
        pid = add_particle(store, (0, 0, 0), lifetime=0.35)
        history = []
        expired = np.array([], dtype=np.int64)
        while expired.size == 0:
            expired = reap(store, 0.1)
            history.append(store.get(pid).remaining_lifetime)

        assert all(b <= a for a, b in zip(history, history[1:]))
        assert history[-1] == 0.0
        assert min(history) >= 0.0
        np.testing.assert_array_equal(expired, [pid.slot])

    def test_reap_does_not_remove(self, store):
        pid = add_particle(store, (0, 0, 0), lifetime=0.05)
        expired = reap(store, 0.1)
        assert list(expired) == [pid.slot]
        assert store.is_alive(pid)

    def test_empty_store(self, store):
        assert reap(store, 0.1).size == 0
