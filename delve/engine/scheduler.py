"""Scheduler: time-ordered actor selection and the run-until-decision-point loop.

Each call advances the world from one hero decision point to the next:
  1. Check termination (hero gone/dead, hero awaiting input, safety limit)
  2. Select the live actor with the smallest ``time``; ties go to the higher
     ``priority``, then to the earlier registration (``Actor.id``)
  3. Advance ``now`` to that actor's time and let it act
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from delve.core.enums import TerminationReason
from delve.core.errors import EngineInvariantError, PresentationUnavailableError
from delve.core.models import TICK

if TYPE_CHECKING:
    from delve.core.models import Actor
    from delve.core.world_state import WorldState

logger = logging.getLogger(__name__)


class Scheduler:
    """Drives the actors of one world. Owns the simulation clock.

    ``now`` is the instant of the most recent activation and ``current`` the
    actor being processed, if any; at most one actor is current at a time.
    """

    __slots__ = (
        "_world",
        "_safety_limit",
        "now",
        "current",
        "activations",
        "safety_limit_hits",
        "presentation_failures",
    )

    def __init__(self, world: WorldState, safety_limit: int = 500) -> None:
        self._world = world
        self._safety_limit = safety_limit
        self.now: float = 0.0
        self.current: Actor | None = None
        self.activations: int = 0
        self.safety_limit_hits: int = 0
        self.presentation_failures: int = 0

    @property
    def world(self) -> WorldState:
        return self._world

    def select_next(self) -> Actor | None:
        """Return the live actor that acts next, or None if nothing can act."""
        best: Actor | None = None
        best_key: tuple[float, int, int] | None = None
        for actor in self._world.actors:
            if not actor.alive:
                continue
            key = (actor.time, -actor.priority, actor.id)
            if best_key is None or key < best_key:
                best, best_key = actor, key
        return best

    def run_until_decision_point(self) -> TerminationReason:
        world = self._world
        count = 0
        while True:
            hero = world.hero
            if hero is None or not hero.alive:
                self.current = None
                return TerminationReason.EPISODE_ENDED
            if self.current is None and hero.ready and hero.pending_intent is None:
                return TerminationReason.READY_FOR_INPUT
            if count >= self._safety_limit:
                return self._safety_limit_hit(count)

            actor = self.select_next()
            if actor is None:
                raise EngineInvariantError("Hero is alive but no actor can be scheduled")

            self.now = actor.time
            self.current = actor
            count += 1
            self.activations += 1
            try:
                again = actor.act()
            except PresentationUnavailableError as exc:
                self._presentation_failed(actor, exc)
                continue

            if not again:
                self.current = None

    def _safety_limit_hit(self, count: int) -> TerminationReason:
        hero = self._world.hero
        self.current = None
        self.safety_limit_hits += 1
        hero.force_ready()
        logger.warning(
            "Safety limit hit after %d activations at t=%.2f (total %d), hero forced ready",
            count, self.now, self.safety_limit_hits,
        )
        return TerminationReason.SAFETY_LIMIT_HIT

    def _presentation_failed(self, actor: Actor, exc: PresentationUnavailableError) -> None:
        self.presentation_failures += 1
        self.current = None
        logger.warning("%r done acting, presentation unavailable: %s", actor, exc)
        hero = self._world.hero
        if actor is hero:
            hero.force_ready()
        elif actor.time <= self.now:
            actor.spend(TICK)
