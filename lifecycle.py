# lifecycle.py
"""
Creates and expires particles.

The Spawner releases a batch of particles every time its repeating timer
fires. The reaper counts every particle's lifetime down and reports the
slots that ran out; the caller removes them once the tick's physics has
consumed them.
"""
import logging

import numpy as np

from config import SimulationConfig
from constants import (
    PARTICLE_ALPHA, SPAWN_EXTENT, SPAWN_SIZE_MAX, SPAWN_SIZE_MIN
)
from particle import ParticleStore

# --- Data Contracts ---
#
# class RepeatingTimer:
#   - tick(self, dt: float) -> bool:
#     - Outputs: True if the timer finished during this tick. It fires at
#       most once per tick; the overshoot carries into the next period.
#
# class Spawner:
#   - __init__(self, rng: np.random.Generator, spawn_interval: float)
#   - tick(self, store, config, dt) -> int:
#     - Outputs: Number of particles created this tick (0 or spawn_count).
#     - Side Effects: Adds particles to the store.
#
# reap(store: ParticleStore, dt: float) -> np.ndarray:
#   - Outputs: Slots whose remaining lifetime reached zero this tick.
#   - Side Effects: Decrements every live particle's lifetime, clamped at 0.
#   - Invariants: Lifetimes never go negative and never increase.


class RepeatingTimer:
    """A countdown that restarts itself every time it finishes."""
    def __init__(self, duration: float):
        self.duration = float(duration)
        self.elapsed = 0.0

    def set_duration(self, duration: float) -> None:
        """Changes the period without resetting the time already elapsed."""
        self.duration = float(duration)

    def tick(self, dt: float) -> bool:
        self.elapsed += dt
        if self.duration <= 0.0:
            self.elapsed = 0.0
            return True
        if self.elapsed >= self.duration:
            self.elapsed %= self.duration
            return True
        return False


class Spawner:
    """
    Periodically releases particles from the floor of the world.
    """
    def __init__(self, rng: np.random.Generator, spawn_interval: float):
        """
        Args:
            rng (np.random.Generator): Source of all spawn randomness.
            spawn_interval (float): Seconds between two batches.
        """
        self.rng = rng
        self.timer = RepeatingTimer(spawn_interval)
        self.total_spawned = 0

    def tick(self, store: ParticleStore, config: SimulationConfig, dt: float) -> int:
        """Advances the timer and spawns a batch if it fired."""
        if config.spawn_interval != self.timer.duration:
            self.timer.set_duration(config.spawn_interval)

        if not self.timer.tick(dt):
            return 0

        count = self.spawn(store, config.spawn_count, config.base_speed, config.lifetime)
        logging.debug(
            f"Spawned {count} particles. Particle count: {store.count} "
            f"(total spawned: {self.total_spawned})."
        )
        return count

    def spawn(self, store: ParticleStore, count: int, base_speed: float, lifetime: float) -> int:
        """
        Creates `count` particles with randomized attributes.

        Particles start on the y = 0 plane and are launched upwards at
        `base_speed` with a random lateral component of up to `base_speed`.
        """
        count = max(int(count), 0)
        if count == 0:
            return 0

        rng = self.rng
        sizes = rng.uniform(SPAWN_SIZE_MIN, SPAWN_SIZE_MAX, size=count)
        colors = np.empty((count, 4))
        colors[:, :3] = rng.uniform(0.0, 1.0, size=(count, 3))
        colors[:, 3] = PARTICLE_ALPHA

        positions = np.zeros((count, 3))
        positions[:, 0] = rng.uniform(-SPAWN_EXTENT, SPAWN_EXTENT, size=count)
        positions[:, 2] = rng.uniform(-SPAWN_EXTENT, SPAWN_EXTENT, size=count)

        jitter = rng.uniform(-1.0, 1.0, size=(count, 2))
        velocities = np.empty((count, 3))
        velocities[:, 0] = jitter[:, 0] * base_speed
        velocities[:, 1] = base_speed
        velocities[:, 2] = jitter[:, 1] * base_speed

        for i in range(count):
            store.add(
                positions[i], velocities[i], sizes[i], colors[i], lifetime,
                name=f"Particle {self.total_spawned}",
            )
            self.total_spawned += 1
        return count


def reap(store: ParticleStore, dt: float) -> np.ndarray:
    """
    Counts down the lifetime of every live particle.

    Returns the slots that expired. They are not removed here: an expiring
    particle still takes part in the current tick.
    """
    live = store.live_slots()
    if live.size == 0:
        return live
    remaining = np.maximum(store.lifetimes[live] - dt, 0.0)
    store.lifetimes[live] = remaining
    return live[remaining == 0.0]
