"""EpisodeRunner: the step protocol around the scheduler.

One ``step(action)`` call:
  1. Bail out with ``done=True`` if the hero is already gone or dead
  2. Snapshot depth / hp / gold
  3. Translate the action into a hero intent
  4. Run the scheduler to the next decision point
  5. Classify termination, build observation, reward and hash
  6. Advance the turn index and record the replay entry
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from delve.actions.translator import ActionTranslator
from delve.config import RunConfig, SimulationConfig
from delve.core.enums import CanonicalAction, Challenge, HeroClass, TerminationReason
from delve.core.errors import EngineInvariantError
from delve.core.observation import Observation, compute_state_hash, extract_observation
from delve.core.world_state import WorldState
from delve.engine.scheduler import Scheduler
from delve.systems.generator import LevelGenerator
from delve.systems.interactions import InteractionResolver
from delve.systems.presentation import HeadlessPresentation
from delve.systems.rng import DeterministicRNG
from delve.utils.replay import ReplayLogger

logger = logging.getLogger(__name__)

DONE_HERO_DIED = "hero_died"
DONE_HERO_NULL = "hero_null"


@dataclass(frozen=True, slots=True)
class StepMetrics:
    """The slice of world state the reward is computed from."""

    depth: int
    hp: int
    gold: int
    alive: bool

    @classmethod
    def capture(cls, world: WorldState) -> StepMetrics:
        hero = world.hero
        if hero is None:
            return cls(world.depth, 0, world.gold, False)
        return cls(world.depth, hero.hp, world.gold, hero.alive)


@dataclass(frozen=True, slots=True)
class StepInfo:
    turn: int
    done: bool
    done_reason: str | None
    hero_alive: bool
    depth: int
    hero_hp: int
    hero_max_hp: int
    safety_limit_hits: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "turn": self.turn,
            "done": self.done,
            "done_reason": self.done_reason,
            "hero_alive": self.hero_alive,
            "depth": self.depth,
            "hero_hp": self.hero_hp,
            "hero_max_hp": self.hero_max_hp,
            "safety_limit_hits": self.safety_limit_hits,
        }


@dataclass(frozen=True, slots=True)
class StepResult:
    observation: Observation
    reward: float
    done: bool
    done_reason: str | None
    state_hash: int
    turn_index: int
    info: StepInfo

    def to_dict(self) -> dict[str, Any]:
        return {
            "observation": self.observation.to_dict(),
            "reward": self.reward,
            "done": self.done,
            "done_reason": self.done_reason,
            "state_hash": self.state_hash,
            "turn_index": self.turn_index,
            "info": self.info.to_dict(),
        }


def compute_reward(pre: StepMetrics, post: StepMetrics, done: bool, weights: SimulationConfig) -> float:
    """Additive, unclipped reward for one step.

    Progress, gold, survival and damage terms only count while the hero is
    alive after the step; the death penalty applies when the episode ended.
    """
    reward = 0.0
    if post.alive:
        reward += (post.depth - pre.depth) * weights.reward_depth
        reward += (post.gold - pre.gold) * weights.reward_gold
        reward += weights.reward_survival
        hp_lost = pre.hp - post.hp
        if hp_lost > 0:
            reward -= hp_lost * weights.penalty_hp_lost
    if done:
        reward -= weights.penalty_death
    return reward


class EpisodeRunner:
    """One independent episode: world, scheduler, translator and replay log."""

    __slots__ = (
        "_run_config",
        "_config",
        "_world",
        "_scheduler",
        "_translator",
        "_replay",
        "_turn_index",
        "_last_result",
        "_started",
    )

    def __init__(
        self,
        run_config: RunConfig,
        sim_config: SimulationConfig | None = None,
        presentation: HeadlessPresentation | None = None,
        replay: ReplayLogger | None = None,
    ) -> None:
        self._run_config = run_config
        self._config = sim_config if sim_config is not None else SimulationConfig()
        rng = DeterministicRNG(run_config.seed)
        self._world = WorldState(
            seed=run_config.seed,
            config=self._config,
            rng=rng,
            generator=LevelGenerator(self._config, rng),
            resolver=InteractionResolver(),
            presentation=presentation if presentation is not None else HeadlessPresentation(),
            challenges=run_config.challenges,
        )
        self._scheduler = Scheduler(self._world, self._config.safety_limit)
        self._translator = ActionTranslator()
        self._replay = replay if replay is not None else ReplayLogger(run_config)
        self._turn_index = 0
        self._last_result: StepResult | None = None
        self._started = False

    # -- accessors --

    @property
    def run_config(self) -> RunConfig:
        return self._run_config

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def world(self) -> WorldState:
        return self._world

    @property
    def scheduler(self) -> Scheduler:
        return self._scheduler

    @property
    def replay(self) -> ReplayLogger:
        return self._replay

    @property
    def turn_index(self) -> int:
        return self._turn_index

    @property
    def last_result(self) -> StepResult | None:
        return self._last_result

    @property
    def done(self) -> bool:
        hero = self._world.hero
        return hero is None or not hero.alive

    # -- lifecycle --

    def start_new_game(self) -> TerminationReason:
        """Generate the first level and run until the hero awaits its first action."""
        if self._started:
            raise EngineInvariantError("Episode already started")
        self._started = True

        world = self._world
        hero = world.generator.create_hero(self._run_config.hero_class)
        world.enter_first_level(hero)
        if world.grid is None:
            raise EngineInvariantError("No level after generation")
        if world.hero is None:
            raise EngineInvariantError("No hero after generation")

        reason = self._scheduler.run_until_decision_point()
        logger.info(
            "=== Episode started (seed=%d, class=%s, challenges=%d) -> %s ===",
            self._run_config.seed, self._run_config.hero_class.name,
            int(self._run_config.challenges), reason.name,
        )
        return reason

    def step(self, action: CanonicalAction) -> StepResult:
        world = self._world
        hero = world.hero

        if hero is None or not hero.alive:
            self._turn_index += 1
            reason = DONE_HERO_NULL if hero is None else DONE_HERO_DIED
            result = self._build_result(0.0, True, reason)
            logger.debug("Turn %d: episode already over (%s)", self._turn_index, reason)
            return self._finish(action, result)

        pre = StepMetrics.capture(world)
        self._translator.apply_intent(hero, world, action)
        termination = self._scheduler.run_until_decision_point()

        done = world.hero is None or not world.hero.alive
        done_reason: str | None = None
        if done:
            done_reason = DONE_HERO_NULL if world.hero is None else DONE_HERO_DIED
        reward = compute_reward(pre, StepMetrics.capture(world), done, self._config)

        self._turn_index += 1
        result = self._build_result(reward, done, done_reason)
        logger.debug(
            "Turn %d: %s -> %s, reward=%.2f",
            self._turn_index, getattr(action, "name", action), termination.name, reward,
        )
        if done:
            logger.info("Turn %d: episode ended (%s) at depth %d", self._turn_index, done_reason, world.depth)
        if self._turn_index % self._config.hash_log_interval == 0:
            logger.info("Turn %d state hash: %d", self._turn_index, result.state_hash)
        return self._finish(action, result)

    def _build_result(self, reward: float, done: bool, done_reason: str | None) -> StepResult:
        world = self._world
        hero = world.hero
        info = StepInfo(
            turn=self._turn_index,
            done=done,
            done_reason=done_reason,
            hero_alive=hero is not None and hero.alive,
            depth=world.depth,
            hero_hp=hero.hp if hero is not None else 0,
            hero_max_hp=hero.max_hp if hero is not None else 0,
            safety_limit_hits=self._scheduler.safety_limit_hits,
        )
        return StepResult(
            observation=extract_observation(world),
            reward=reward,
            done=done,
            done_reason=done_reason,
            state_hash=compute_state_hash(world),
            turn_index=self._turn_index,
            info=info,
        )

    def _finish(self, action: CanonicalAction, result: StepResult) -> StepResult:
        self._replay.record(result.turn_index, action, result)
        self._last_result = result
        return result


def new_episode(
    seed: int | str,
    hero_class: str | int | HeroClass = HeroClass.WARRIOR,
    challenges: int | Challenge = 0,
    sim_config: SimulationConfig | None = None,
) -> EpisodeRunner:
    """Validate bootstrap parameters, build an episode and bring the hero to its first turn."""
    run_config = RunConfig.create(seed, hero_class, challenges)
    runner = EpisodeRunner(run_config, sim_config)
    runner.start_new_game()
    return runner
