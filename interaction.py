# interaction.py
"""
Computes how particles respond to each other and to the world's walls.

The InteractionEngine produces a pending velocity for the particles it
touches during a tick. It reads a frozen snapshot of the live particles and
writes only to the store's pending-velocity slots, leaving positions and
current velocities to the integrator.
"""
import logging
from typing import Tuple

import numpy as np
from numba import jit, prange

from config import Model, SimulationConfig
from constants import ALPHA, BETA, DAMPING, WALL_REPULSION_DISTANCE, WORLD_SIZE
from particle import ParticleStore

# --- Data Contracts ---
#
# class InteractionEngine:
#   - step(self, store: ParticleStore, config: SimulationConfig) -> None:
#     - Inputs: The store with pending slots cleared for this tick.
#     - Side Effects: Writes store.pending_velocities and sets store.resolved
#       for every particle that received a pending velocity.
#     - Invariants: A particle's pending velocity is written at most once by
#       particle-particle collisions (first write wins, pairs are taken in
#       increasing slot order). Wall reflections are applied on top of it.
#
# All kernels take contiguous arrays of the live particles, ordered by slot.

# Walls are visited x-, x+, z-, z+, y-, y+.
_WALL_AXES = (0, 2, 1)


@jit(nopython=True)
def _resolve_collisions_numba(positions, velocities, sizes, pending, resolved, damping):
    """
    Numba-jitted pairwise collision detection and response.

    Every unordered pair is tested once, lower index first. Responses are
    computed from the tick's frozen velocities, and a particle that already
    holds a pending velocity keeps it.

    Returns the number of colliding pairs skipped because their separation
    is zero and has no normal.
    """
    n = positions.shape[0]
    k = 1.0 + damping
    degenerate = 0

    for a in range(n):
        for b in range(a + 1, n):
            dx = positions[a, 0] - positions[b, 0]
            dy = positions[a, 1] - positions[b, 1]
            dz = positions[a, 2] - positions[b, 2]
            dvx = velocities[a, 0] - velocities[b, 0]
            dvy = velocities[a, 1] - velocities[b, 1]
            dvz = velocities[a, 2] - velocities[b, 2]

            # Only approaching particles collide
            if dx * dvx + dy * dvy + dz * dvz >= 0.0:
                continue

            dist = np.sqrt(dx * dx + dy * dy + dz * dz)
            if dist >= sizes[a] + sizes[b]:
                continue

            if dist == 0.0:
                degenerate += 1
                continue

            # Normal from a to b. The response uses it twice, so its sign
            # does not matter and both particles share it.
            nx = -dx / dist
            ny = -dy / dist
            nz = -dz / dist

            if not resolved[a]:
                dot = nx * velocities[a, 0] + ny * velocities[a, 1] + nz * velocities[a, 2]
                pending[a, 0] = velocities[a, 0] - k * dot * nx
                pending[a, 1] = velocities[a, 1] - k * dot * ny
                pending[a, 2] = velocities[a, 2] - k * dot * nz
                resolved[a] = True

            if not resolved[b]:
                dot = nx * velocities[b, 0] + ny * velocities[b, 1] + nz * velocities[b, 2]
                pending[b, 0] = velocities[b, 0] - k * dot * nx
                pending[b, 1] = velocities[b, 1] - k * dot * ny
                pending[b, 2] = velocities[b, 2] - k * dot * nz
                resolved[b] = True

    return degenerate


@jit(nopython=True)
def _reflect_walls_numba(positions, velocities, pending, resolved, world_size, damping, wall_axes):
    """
    Numba-jitted wall reflection.

    Every crossed wall reflects the pending velocity in place, so a particle
    outside two walls at once is reflected off both in the same tick.
    """
    n = positions.shape[0]
    k = 1.0 + damping

    for i in range(n):
        if not resolved[i]:
            pending[i, 0] = velocities[i, 0]
            pending[i, 1] = velocities[i, 1]
            pending[i, 2] = velocities[i, 2]
            resolved[i] = True

        for axis in wall_axes:
            # Wall normals are axis-aligned, so the reflection only touches
            # this axis' component.
            if positions[i, axis] < -world_size:
                pending[i, axis] -= k * pending[i, axis]
            if positions[i, axis] > world_size:
                pending[i, axis] -= k * pending[i, axis]


@jit(nopython=True, parallel=True)
def _flocking_field_numba(positions, boundary_enabled, world_size, alpha, wall_distance):
    """
    Numba-jitted flocking field.

    Each particle is pushed away from every other particle with a weight
    that falls off as (distance + 1) ** alpha. Near a wall, the field's
    component along that wall's axis is replaced by a push back inside.
    Particles are independent of each other, so the outer loop runs in
    parallel; every iteration writes only its own row.
    """
    n = positions.shape[0]
    field = np.zeros((n, 3))

    for a in prange(n):
        fx = 0.0
        fy = 0.0
        fz = 0.0
        for b in range(n):
            if a == b:
                continue
            dx = positions[a, 0] - positions[b, 0]
            dy = positions[a, 1] - positions[b, 1]
            dz = positions[a, 2] - positions[b, 2]
            weight = (np.sqrt(dx * dx + dy * dy + dz * dz) + 1.0) ** alpha
            fx += dx / weight
            fy += dy / weight
            fz += dz / weight
        field[a, 0] = fx
        field[a, 1] = fy
        field[a, 2] = fz

        if boundary_enabled:
            for axis in range(3):
                to_low = positions[a, axis] + world_size
                to_high = world_size - positions[a, axis]
                if to_low < wall_distance:
                    d = abs(to_low)
                    field[a, axis] = d / (d + 1.0) ** alpha
                elif to_high < wall_distance:
                    d = abs(to_high)
                    field[a, axis] = -d / (d + 1.0) ** alpha

    return field


def flocking_field(positions: np.ndarray, boundary_enabled: bool) -> np.ndarray:
    """Returns the flocking field for an (N, 3) array of positions."""
    return _flocking_field_numba(
        np.ascontiguousarray(positions, dtype=np.float64), bool(boundary_enabled),
        WORLD_SIZE, ALPHA, WALL_REPULSION_DISTANCE
    )


class InteractionEngine:
    """
    Fills in pending velocities using the configured interaction model.
    """
    def __init__(self):
        # Colliding pairs skipped because the particles sat on the same point.
        self.degenerate_pairs = 0
        self._wall_axes = np.array(_WALL_AXES, dtype=np.int64)

    def step(self, store: ParticleStore, config: SimulationConfig) -> None:
        """Computes this tick's pending velocities for all live particles."""
        live = store.live_slots()
        if live.size == 0:
            return

        if config.model is Model.FLOCKING:
            self._flock(store, live, config.boundary_enabled)
        else:
            self._collide(store, live, config.boundary_enabled)

    def _snapshot(self, store: ParticleStore, live: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        # Fancy indexing copies, so kernels never see later writes to the store.
        return store.positions[live], store.velocities[live]

    def _collide(self, store: ParticleStore, live: np.ndarray, boundary_enabled: bool) -> None:
        positions, velocities = self._snapshot(store, live)
        pending = store.pending_velocities[live]
        resolved = store.resolved[live]

        degenerate = _resolve_collisions_numba(
            positions, velocities, store.sizes[live], pending, resolved, DAMPING
        )
        if degenerate:
            self.degenerate_pairs += degenerate
            logging.warning(
                f"Skipped {degenerate} colliding pair(s) with coincident positions; "
                f"no collision normal exists. Total so far: {self.degenerate_pairs}."
            )

        if boundary_enabled:
            _reflect_walls_numba(
                positions, velocities, pending, resolved, WORLD_SIZE, DAMPING, self._wall_axes
            )

        store.pending_velocities[live] = pending
        store.resolved[live] = resolved

    def _flock(self, store: ParticleStore, live: np.ndarray, boundary_enabled: bool) -> None:
        positions, velocities = self._snapshot(store, live)
        field = flocking_field(positions, boundary_enabled)

        store.pending_velocities[live] = (1.0 - BETA) * velocities + BETA * field
        store.resolved[live] = True
