# particle.py
"""
Manages the state of all particles in the simulation.

This module defines the ParticleStore class, an arena of particle slots
backed by NumPy arrays. Slots freed by expired particles are recycled, and
every slot carries a generation counter so that a ParticleId handed out for
a dead particle never aliases the particle that later reuses its slot.
"""
import heapq
import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence

import numpy as np

from constants import INITIAL_CAPACITY

# --- Data Contracts ---
#
# class ParticleStore:
#   - __init__(self, capacity: int = INITIAL_CAPACITY):
#     - Side Effects: Allocates slot arrays for `capacity` particles.
#     - Invariants:
#       - self.positions, self.velocities, self.pending_velocities are
#         float64 arrays of shape (capacity, 3).
#       - self.sizes, self.lifetimes are float64 arrays of shape (capacity,).
#       - self.colors is a float64 array of shape (capacity, 4), RGBA.
#       - self.alive, self.resolved are bool arrays of shape (capacity,).
#       - A live slot has size > 0 and lifetime >= 0.
#
#   - add(...) -> ParticleId: Places a particle in the lowest free slot.
#   - remove(slots) -> None: Frees slots and bumps their generation.
#   - live_slots() -> np.ndarray: Live slot indices in increasing order.


class ParticleId(NamedTuple):
    """Stable handle of a particle: its slot and the slot's generation."""
    slot: int
    generation: int


@dataclass(frozen=True)
class ParticleRecord:
    """A read-only copy of one particle's state."""
    id: ParticleId
    name: str
    position: np.ndarray
    velocity: np.ndarray
    size: float
    color: np.ndarray
    remaining_lifetime: float


class ParticleStore:
    """
    A container for all live particles, storing their state in NumPy arrays.
    """
    def __init__(self, capacity: int = INITIAL_CAPACITY):
        """
        Initializes an empty store.

        Args:
            capacity (int): Number of slots to pre-allocate.
        """
        capacity = max(int(capacity), 1)
        self.capacity = 0
        self.positions = np.zeros((0, 3), dtype=np.float64)
        self.velocities = np.zeros((0, 3), dtype=np.float64)
        self.pending_velocities = np.zeros((0, 3), dtype=np.float64)
        self.sizes = np.zeros(0, dtype=np.float64)
        self.colors = np.zeros((0, 4), dtype=np.float64)
        self.lifetimes = np.zeros(0, dtype=np.float64)
        self.alive = np.zeros(0, dtype=bool)
        self.resolved = np.zeros(0, dtype=bool)
        self.generations = np.zeros(0, dtype=np.int64)
        self.names: List[str] = []

        self._free_slots: List[int] = []
        self._count = 0
        self._grow(capacity)

        logging.debug(f"ParticleStore initialized with capacity {self.capacity}.")

    def __len__(self) -> int:
        return self._count

    @property
    def count(self) -> int:
        """Number of live particles."""
        return self._count

    def _grow(self, new_capacity: int) -> None:
        """Extends every slot array to `new_capacity` and frees the new slots."""
        old = self.capacity
        extra = new_capacity - old

        self.positions = np.vstack([self.positions, np.zeros((extra, 3))])
        self.velocities = np.vstack([self.velocities, np.zeros((extra, 3))])
        self.pending_velocities = np.vstack([self.pending_velocities, np.zeros((extra, 3))])
        self.sizes = np.concatenate([self.sizes, np.zeros(extra)])
        self.colors = np.vstack([self.colors, np.zeros((extra, 4))])
        self.lifetimes = np.concatenate([self.lifetimes, np.zeros(extra)])
        self.alive = np.concatenate([self.alive, np.zeros(extra, dtype=bool)])
        self.resolved = np.concatenate([self.resolved, np.zeros(extra, dtype=bool)])
        self.generations = np.concatenate([self.generations, np.zeros(extra, dtype=np.int64)])
        self.names.extend([""] * extra)

        for slot in range(old, new_capacity):
            heapq.heappush(self._free_slots, slot)
        self.capacity = new_capacity

        if old:
            logging.debug(f"ParticleStore grown from {old} to {new_capacity} slots.")

    def add(
        self,
        position: Sequence[float],
        velocity: Sequence[float],
        size: float,
        color: Sequence[float],
        lifetime: float,
        name: Optional[str] = None,
    ) -> ParticleId:
        """
        Inserts a particle into the lowest free slot.

        Returns:
            ParticleId: The handle of the new particle.
        """
        if not self._free_slots:
            self._grow(self.capacity * 2)
        slot = heapq.heappop(self._free_slots)

        self.positions[slot] = position
        self.velocities[slot] = velocity
        self.pending_velocities[slot] = 0.0
        self.sizes[slot] = size
        self.colors[slot] = color
        self.lifetimes[slot] = lifetime
        self.alive[slot] = True
        self.resolved[slot] = False
        self.names[slot] = name if name is not None else f"Particle {slot}"
        self._count += 1

        return ParticleId(slot, int(self.generations[slot]))

    def remove(self, slots) -> None:
        """Frees the given slots. Their generation is bumped so stale ids die."""
        for slot in np.atleast_1d(np.asarray(slots, dtype=np.int64)):
            slot = int(slot)
            if not self.alive[slot]:
                continue
            self.alive[slot] = False
            self.resolved[slot] = False
            self.generations[slot] += 1
            self.names[slot] = ""
            heapq.heappush(self._free_slots, slot)
            self._count -= 1

    def is_alive(self, pid: ParticleId) -> bool:
        return (
            0 <= pid.slot < self.capacity
            and bool(self.alive[pid.slot])
            and int(self.generations[pid.slot]) == pid.generation
        )

    def live_slots(self) -> np.ndarray:
        """Returns the live slot indices in increasing order."""
        return np.flatnonzero(self.alive)

    def ids(self) -> List[ParticleId]:
        return [ParticleId(int(s), int(self.generations[s])) for s in self.live_slots()]

    def get(self, pid: ParticleId) -> ParticleRecord:
        """Returns a copy of a live particle's state."""
        if not self.is_alive(pid):
            raise KeyError(f"{pid} does not identify a live particle.")
        s = pid.slot
        return ParticleRecord(
            id=pid,
            name=self.names[s],
            position=self.positions[s].copy(),
            velocity=self.velocities[s].copy(),
            size=float(self.sizes[s]),
            color=self.colors[s].copy(),
            remaining_lifetime=float(self.lifetimes[s]),
        )

    def clear_pending(self) -> None:
        """Forgets every pending velocity. Called at the start of a tick."""
        self.resolved[:] = False
