"""Tests for the particle store."""

import numpy as np
import pytest

from conftest import add_particle
from particle import ParticleId


class TestParticleStore:
    """Slot allocation, identity and growth."""

    def test_starts_empty(self, store):
        assert len(store) == 0
        assert store.count == 0
        assert store.live_slots().size == 0

    def test_add_returns_increasing_slots(self, store):
        ids = [add_particle(store, (i, 0, 0)) for i in range(3)]
        assert [pid.slot for pid in ids] == [0, 1, 2]
        assert store.count == 3
        np.testing.assert_array_equal(store.live_slots(), [0, 1, 2])

    def test_get_copies_state(self, store):
        pid = store.add((1, 2, 3), (4, 5, 6), 0.25, (0.1, 0.2, 0.3, 0.8), 2.0, name="probe")
        record = store.get(pid)
        assert record.id == pid
        assert record.name == "probe"
        np.testing.assert_array_equal(record.position, [1, 2, 3])
        np.testing.assert_array_equal(record.velocity, [4, 5, 6])
        assert record.size == 0.25
        assert record.remaining_lifetime == 2.0

        record.position[0] = 99.0
        assert store.positions[pid.slot, 0] == 1.0

    def test_removed_slot_is_recycled_with_new_generation(self, store):
        first = add_particle(store, (0, 0, 0))
        add_particle(store, (1, 0, 0))
        store.remove([first.slot])

        assert not store.is_alive(first)
        with pytest.raises(KeyError):
            store.get(first)

        reused = add_particle(store, (2, 0, 0))
        assert reused.slot == first.slot
        assert reused.generation == first.generation + 1
        assert store.is_alive(reused)
        assert not store.is_alive(first)

    def test_lowest_free_slot_is_reused_first(self, store):
        ids = [add_particle(store, (i, 0, 0)) for i in range(4)]
        store.remove([ids[3].slot, ids[1].slot])
        assert add_particle(store, (0, 0, 0)).slot == 1
        assert add_particle(store, (0, 0, 0)).slot == 3

    def test_remove_ignores_dead_slots(self, store):
        pid = add_particle(store, (0, 0, 0))
        store.remove(pid.slot)
        store.remove(pid.slot)
        assert store.count == 0
        assert store.generations[pid.slot] == pid.generation + 1

    def test_grows_past_capacity(self, store):
        ids = [add_particle(store, (i, 0, 0)) for i in range(10)]
        assert store.capacity >= 10
        assert store.count == 10
        for i, pid in enumerate(ids):
            assert store.get(pid).position[0] == i

    def test_ids_match_live_particles(self, store):
        a = add_particle(store, (0, 0, 0))
        b = add_particle(store, (1, 0, 0))
        store.remove(a.slot)
        assert store.ids() == [ParticleId(b.slot, b.generation)]

    def test_clear_pending(self, store):
        pid = add_particle(store, (0, 0, 0))
        store.resolved[pid.slot] = True
        store.clear_pending()
        assert not store.resolved.any()
