"""Tests for EpisodeRegistry: ids, lookups and per-episode locking."""

import threading
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from delve.api.registry import EpisodeNotFoundError, EpisodeRegistry
from delve.config import SimulationConfig
from delve.core.enums import CanonicalAction
from delve.core.observation import compute_state_hash


class TestRegistryBasics:

    def test_create_get_delete(self):
        registry = EpisodeRegistry(SimulationConfig())
        episode_id, runner = registry.create(3, "WARRIOR", 0)
        assert registry.get(episode_id) is runner
        assert len(registry) == 1
        registry.delete(episode_id)
        with pytest.raises(EpisodeNotFoundError):
            registry.get(episode_id)

    def test_snapshot_unknown_episode(self):
        registry = EpisodeRegistry(SimulationConfig())
        with pytest.raises(EpisodeNotFoundError):
            registry.snapshot("ep-404", lambda runner: runner.turn_index)


class TestSnapshotLocking:

    def test_snapshot_returns_view(self):
        registry = EpisodeRegistry(SimulationConfig())
        episode_id, runner = registry.create(3, "WARRIOR", 0)
        registry.step(episode_id, CanonicalAction.WAIT)
        view = registry.snapshot(episode_id, lambda r: (r.turn_index, compute_state_hash(r.world)))
        assert view == (1, runner.last_result.state_hash)

    def test_step_waits_for_snapshot(self):
        registry = EpisodeRegistry(SimulationConfig())
        episode_id, _ = registry.create(3, "WARRIOR", 0)
        worker = threading.Thread(target=registry.step, args=(episode_id, CanonicalAction.WAIT))
        blocked: list[bool] = []

        def view(runner) -> int:
            worker.start()
            worker.join(timeout=0.2)
            # The step cannot start while the view holds the episode
            blocked.append(worker.is_alive())
            return runner.turn_index

        assert registry.snapshot(episode_id, view) == 0
        worker.join(timeout=5.0)
        assert blocked == [True]
        assert registry.get(episode_id).turn_index == 1
