"""EpisodeRegistry: holds the live episodes served over HTTP.

FastAPI runs sync endpoints on a thread pool, so two requests may touch the
same episode at once. The registry dict has its own lock and every episode
carries a lock of its own; a step runs to completion while holding it.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Iterator, TypeVar

from delve.engine.episode import new_episode

if TYPE_CHECKING:
    from delve.config import SimulationConfig
    from delve.core.enums import CanonicalAction
    from delve.engine.episode import EpisodeRunner, StepResult

logger = logging.getLogger(__name__)

T = TypeVar("T")


class EpisodeNotFoundError(KeyError):
    """No episode is registered under the requested id."""


@dataclass
class _Slot:
    runner: EpisodeRunner
    lock: threading.Lock = field(default_factory=threading.Lock)


class EpisodeRegistry:
    """Thread-safe map of episode id to :class:`EpisodeRunner`."""

    def __init__(self, config: SimulationConfig) -> None:
        self._config = config
        self._lock = threading.Lock()
        self._episodes: dict[str, _Slot] = {}
        self._next_id = 1

    @property
    def config(self) -> SimulationConfig:
        return self._config

    def __len__(self) -> int:
        with self._lock:
            return len(self._episodes)

    def create(self, seed: int | str, hero_class: str | int, challenges: int) -> tuple[str, EpisodeRunner]:
        """Bootstrap a new episode. Raises ConfigurationError on bad parameters."""
        runner = new_episode(seed, hero_class, challenges, self._config)
        with self._lock:
            episode_id = f"ep-{self._next_id}"
            self._next_id += 1
            self._episodes[episode_id] = _Slot(runner)
        logger.info("Episode %s created (seed=%d)", episode_id, runner.run_config.seed)
        return episode_id, runner

    def _slot(self, episode_id: str) -> _Slot:
        with self._lock:
            slot = self._episodes.get(episode_id)
        if slot is None:
            raise EpisodeNotFoundError(episode_id)
        return slot

    def get(self, episode_id: str) -> EpisodeRunner:
        return self._slot(episode_id).runner

    def snapshot(self, episode_id: str, view: Callable[[EpisodeRunner], T]) -> T:
        """Build ``view(runner)`` while holding the episode lock, so it never sees a half-run step."""
        slot = self._slot(episode_id)
        with slot.lock:
            return view(slot.runner)

    def step(self, episode_id: str, action: CanonicalAction) -> StepResult:
        slot = self._slot(episode_id)
        with slot.lock:
            return slot.runner.step(action)

    def render_replay(self, episode_id: str) -> str:
        slot = self._slot(episode_id)
        with slot.lock:
            return slot.runner.replay.render()

    def delete(self, episode_id: str) -> None:
        with self._lock:
            if self._episodes.pop(episode_id, None) is None:
                raise EpisodeNotFoundError(episode_id)
        logger.info("Episode %s deleted", episode_id)

    def ids(self) -> Iterator[str]:
        with self._lock:
            return iter(list(self._episodes))

    def clear(self) -> None:
        with self._lock:
            count = len(self._episodes)
            self._episodes.clear()
        if count:
            logger.info("Dropped %d live episodes", count)
