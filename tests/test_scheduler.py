"""Tests for the turn scheduler: selection order, decision points and recovery paths."""

import logging
import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from delve.core.enums import CanonicalAction, HeroClass, TerminationReason
from delve.core.errors import EngineInvariantError, PresentationUnavailableError
from delve.core.models import Actor
from delve.systems.presentation import MissingPresentation
from tests.helpers.dungeon_arena import DungeonArena


class Recorder(Actor):
    """Appends its name to a shared log each time it acts."""

    def __init__(self, name: str, log: list, priority: int, delay: float = 5.0) -> None:
        super().__init__(priority)
        self.name = name
        self.log = log
        self.delay = delay

    def act(self) -> bool:
        self.log.append(self.name)
        self.spend(self.delay)
        return False


class Spinner(Actor):
    """Never spends time: the scheduler would pick it forever."""

    def __init__(self) -> None:
        super().__init__(10)
        self.calls = 0

    def act(self) -> bool:
        self.calls += 1
        return False


class Raiser(Actor):
    def __init__(self, exc: Exception) -> None:
        super().__init__(10)
        self.exc = exc

    def act(self) -> bool:
        raise self.exc


class Burst(Actor):
    """Asks to run again a fixed number of times before yielding."""

    def __init__(self, repeats: int, log: list) -> None:
        super().__init__(10)
        self.repeats = repeats
        self.log = log

    def act(self) -> bool:
        self.log.append(self.id)
        if self.repeats > 0:
            self.repeats -= 1
            return True
        self.spend(5.0)
        return False


# ---------------------------------------------------------------------------
# Selection order
# ---------------------------------------------------------------------------

class TestSelection:

    def test_higher_priority_wins_tie_on_time(self):
        arena = DungeonArena()
        log: list[str] = []
        low = arena.add_actor(Recorder("low", log, priority=5))
        high = arena.add_actor(Recorder("high", log, priority=10))
        assert arena.scheduler.select_next() is high
        assert low.id < high.id

    def test_priority_order_stable_across_runs(self):
        for _ in range(5):
            arena = DungeonArena()
            log: list[str] = []
            arena.add_hero(1, 1, at=1.0)
            arena.add_actor(Recorder("low", log, priority=5))
            arena.add_actor(Recorder("high", log, priority=10))
            assert arena.start() == TerminationReason.READY_FOR_INPUT
            assert log == ["high", "low"]

    def test_earliest_time_beats_priority(self):
        arena = DungeonArena()
        log: list[str] = []
        arena.add_actor(Recorder("vfx", log, priority=100), at=2.0)
        early = arena.add_actor(Recorder("buff", log, priority=-30), at=1.0)
        assert arena.scheduler.select_next() is early

    def test_registration_order_breaks_full_tie(self):
        arena = DungeonArena()
        log: list[str] = []
        first = arena.add_actor(Recorder("a", log, priority=0))
        arena.add_actor(Recorder("b", log, priority=0))
        assert arena.scheduler.select_next() is first

    def test_dead_actors_skipped(self):
        arena = DungeonArena()
        dead = arena.add_mob(1, 1, hp=5)
        dead.hp = 0
        alive = arena.add_mob(2, 2, at=3.0)
        assert arena.scheduler.select_next() is alive


# ---------------------------------------------------------------------------
# Decision points
# ---------------------------------------------------------------------------

class TestDecisionPoint:

    def test_start_leaves_hero_ready(self):
        arena = DungeonArena()
        hero = arena.add_hero(2, 2)
        assert arena.start() == TerminationReason.READY_FOR_INPUT
        assert hero.ready
        assert hero.pending_intent is None
        assert arena.scheduler.current is None

    def test_step_advances_through_other_actors(self):
        arena = DungeonArena()
        log: list[str] = []
        hero = arena.add_hero(2, 2)
        arena.add_actor(Recorder("buff", log, priority=-30, delay=0.5), at=0.5)
        arena.start()
        reason = arena.step(CanonicalAction.MOVE_E)
        assert reason == TerminationReason.READY_FOR_INPUT
        assert arena.hero_xy() == (3, 2)
        # Buff at t=0.5 acted before the hero's next turn at t=1.0
        assert log == ["buff"]
        assert hero.time == pytest.approx(1.0)
        assert arena.scheduler.now == pytest.approx(1.0)

    def test_hero_pending_intent_never_returned(self):
        arena = DungeonArena()
        hero = arena.add_hero(2, 2)
        arena.start()
        arena.translator.apply_intent(hero, arena.world, CanonicalAction.MOVE_S)
        assert hero.pending_intent is not None
        arena.scheduler.run_until_decision_point()
        assert hero.pending_intent is None
        assert hero.ready

    def test_run_again_keeps_actor_current(self):
        arena = DungeonArena()
        log: list[int] = []
        arena.add_hero(2, 2, at=1.0)
        burst = arena.add_actor(Burst(repeats=2, log=log))
        arena.start()
        assert log == [burst.id, burst.id, burst.id]
        assert arena.scheduler.current is None

    def test_dead_hero_ends_episode(self):
        arena = DungeonArena()
        hero = arena.add_hero(2, 2)
        hero.hp = 0
        assert arena.start() == TerminationReason.EPISODE_ENDED

    def test_missing_hero_ends_episode(self):
        arena = DungeonArena()
        arena.add_mob(1, 1)
        assert arena.start() == TerminationReason.EPISODE_ENDED

    def test_no_schedulable_actor_is_invariant_violation(self):
        arena = DungeonArena()
        hero = arena.world.generator.create_hero(HeroClass.WARRIOR)
        arena.world.hero = hero  # never registered as an actor
        with pytest.raises(EngineInvariantError):
            arena.start()


# ---------------------------------------------------------------------------
# Recovery paths
# ---------------------------------------------------------------------------

class TestSafetyLimit:

    def test_forces_hero_ready(self, caplog):
        arena = DungeonArena(safety_limit=50)
        hero = arena.add_hero(2, 2, at=1.0)
        spinner = arena.add_actor(Spinner())
        with caplog.at_level(logging.WARNING, logger="delve.engine.scheduler"):
            reason = arena.start()
        assert reason == TerminationReason.SAFETY_LIMIT_HIT
        assert spinner.calls == 50
        assert hero.ready
        assert hero.pending_intent is None
        assert arena.scheduler.safety_limit_hits == 1
        assert arena.scheduler.current is None
        assert any("Safety limit" in r.getMessage() for r in caplog.records)

    def test_counter_accumulates(self):
        arena = DungeonArena(safety_limit=10)
        arena.add_hero(2, 2, at=1.0)
        arena.add_actor(Spinner())
        arena.start()
        arena.step(CanonicalAction.WAIT)
        assert arena.scheduler.safety_limit_hits == 2


class TestPresentationRecovery:

    def test_hero_forced_ready(self, caplog):
        arena = DungeonArena(presentation=MissingPresentation())
        hero = arena.add_hero(2, 2)
        arena.start()
        with caplog.at_level(logging.WARNING, logger="delve.engine.scheduler"):
            reason = arena.step(CanonicalAction.MOVE_E)
        assert reason == TerminationReason.READY_FOR_INPUT
        assert hero.ready
        assert arena.hero_xy() == (2, 2)
        assert arena.scheduler.presentation_failures == 1
        assert any("presentation unavailable" in r.getMessage() for r in caplog.records)

    def test_other_actor_done_acting(self):
        arena = DungeonArena()
        arena.add_hero(2, 2, at=0.5)
        raiser = arena.add_actor(Raiser(PresentationUnavailableError("no sprites")))
        assert arena.start() == TerminationReason.READY_FOR_INPUT
        assert arena.scheduler.presentation_failures == 1
        assert raiser.time == pytest.approx(1.0)

    def test_other_errors_propagate(self):
        arena = DungeonArena()
        arena.add_hero(2, 2, at=1.0)
        arena.add_actor(Raiser(ZeroDivisionError("boom")))
        with pytest.raises(ZeroDivisionError):
            arena.start()
