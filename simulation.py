# simulation.py
"""
Handles the per-tick simulation loop.

This module defines the Simulation class, which advances the particle store
by one time step. A tick runs four phases in a fixed order: spawn, reap,
interact and integrate. Particles that expired during the reap phase are
removed only after they have been integrated.
"""
import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from config import Model, SimulationConfig
from constants import VERTICAL_AXIS
from interaction import InteractionEngine
from lifecycle import Spawner, reap
from particle import ParticleStore

# --- Data Contracts ---
#
# class Simulation:
#   - __init__(self, config: SimulationConfig,
#              rng: Optional[np.random.Generator] = None,
#              store: Optional[ParticleStore] = None):
#     - Side Effects: Creates the spawner, the interaction engine and, unless
#       given, the store. Without an rng one is seeded from config.seed.
#
#   - step(self, dt: float) -> None:
#     - Side Effects: Applies staged config changes, then spawns, reaps,
#       interacts, integrates and finally removes expired particles.
#
#   - update_config(self, **changes) -> None:
#     - Side Effects: Stages changes; they take effect at the next step().
#     - Raises: ValueError for an unknown field or model, before staging.
#
#   - snapshot(self) -> ParticleSnapshot:
#     - Outputs: Copies of the positions, sizes and colors of live particles.
#
# integrate(store: ParticleStore, gravity_strength: float, dt: float) -> None:
#   - Side Effects: Commits pending velocities, applies gravity along -y and
#     moves every live particle by velocity * dt.


@dataclass(frozen=True)
class ParticleSnapshot:
    """What a renderer needs to draw the current frame."""
    positions: np.ndarray
    sizes: np.ndarray
    colors: np.ndarray

    @property
    def count(self) -> int:
        return self.sizes.shape[0]


def integrate(store: ParticleStore, gravity_strength: float, dt: float) -> None:
    """
    Moves every live particle.

    A particle with a pending velocity adopts it; every other particle keeps
    its current velocity. Gravity is then applied and positions advance with
    the updated velocity.
    """
    live = store.live_slots()
    if live.size == 0:
        return

    velocities = store.velocities[live]
    resolved = store.resolved[live]
    velocities[resolved] = store.pending_velocities[live][resolved]
    velocities[:, VERTICAL_AXIS] -= gravity_strength * dt

    store.velocities[live] = velocities
    store.positions[live] += velocities * dt


class Simulation:
    """
    Owns the particle store and runs the simulation phases over it.
    """
    def __init__(
        self,
        config: SimulationConfig,
        rng: Optional[np.random.Generator] = None,
        store: Optional[ParticleStore] = None,
    ):
        """
        Initializes the simulation.

        Args:
            config (SimulationConfig): Initial parameters.
            rng (np.random.Generator): Random source for spawning. Seeded
                from config.seed when omitted.
            store (ParticleStore): Store to simulate. A new, empty one is
                created when omitted.
        """
        self.config = config
        self.rng = rng if rng is not None else np.random.default_rng(config.seed)
        self.store = store if store is not None else ParticleStore()
        self.spawner = Spawner(self.rng, config.spawn_interval)
        self.engine = InteractionEngine()
        self.elapsed_time = 0.0
        self.step_count = 0
        self._staged_changes = {}

        logging.info(
            f"Simulation initialized: model={config.model.value}, "
            f"boundary_enabled={config.boundary_enabled}, "
            f"spawn {config.spawn_count} every {config.spawn_interval}s, "
            f"lifetime {config.lifetime}s."
        )

    @property
    def particle_count(self) -> int:
        return self.store.count

    @property
    def degenerate_pairs(self) -> int:
        return self.engine.degenerate_pairs

    def update_config(self, **changes) -> None:
        """
        Stages parameter changes to be applied at the start of the next tick.

        Raises:
            ValueError: If a name is not a config field or the model is
                unknown. Nothing is staged in that case.
        """
        if "model" in changes:
            changes["model"] = Model.parse(changes["model"])
        self.config.replace(**changes)
        self._staged_changes.update(changes)

    def _apply_staged_config(self) -> None:
        if not self._staged_changes:
            return
        changes, self._staged_changes = self._staged_changes, {}
        self.config = self.config.replace(**changes)
        logging.info(f"Configuration updated: {changes}")

    def step(self, dt: float) -> None:
        """
        Executes one time step of the simulation.
        """
        self._apply_staged_config()
        config = self.config

        # 1. Spawn new particles
        self.spawner.tick(self.store, config, dt)

        # 2. Count lifetimes down; expired particles stay for this tick
        expired = reap(self.store, dt)

        # 3. Compute pending velocities
        self.store.clear_pending()
        self.engine.step(self.store, config)

        # 4. Apply gravity and move
        integrate(self.store, config.gravity_strength, dt)

        if expired.size:
            self.store.remove(expired)
            logging.debug(f"Removed {expired.size} expired particles.")

        self.elapsed_time += dt
        self.step_count += 1

    def snapshot(self) -> ParticleSnapshot:
        """Returns the state a renderer needs for the live particles."""
        live = self.store.live_slots()
        return ParticleSnapshot(
            positions=self.store.positions[live],
            sizes=self.store.sizes[live],
            colors=self.store.colors[live],
        )
