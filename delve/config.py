"""Simulation configuration with sensible defaults."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping

from delve.core.enums import Challenge, HeroClass
from delve.core.errors import ConfigurationError

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1


@dataclass(frozen=True)
class SimulationConfig:
    """Immutable engine tunables shared by every episode."""

    # Level
    level_width: int = 32
    level_height: int = 32
    max_rooms: int = 8
    room_attempts: int = 60

    # Scheduler
    safety_limit: int = 500             # Actor activations per step before forcing the hero ready
    hash_log_interval: int = 100        # Log the state hash every N turns

    # Monsters
    mobs_base: int = 3
    mobs_per_two_depths: int = 1
    swarm_extra_mobs: int = 3
    mob_cap: int = 10
    respawn_interval: float = 50.0
    swarm_respawn_interval: float = 25.0
    respawn_min_distance: int = 8
    champion_mult: float = 1.5

    # Hero
    regen_interval: float = 10.0
    rest_heal: int = 1

    # Reward weights
    reward_depth: float = 10.0
    reward_gold: float = 0.1
    reward_survival: float = 0.1
    penalty_hp_lost: float = 0.5
    penalty_death: float = 100.0

    # Logging
    log_level: str = "INFO"
    replay_file: str = "replay.txt"


@dataclass(frozen=True)
class RunConfig:
    """Per-episode configuration. Created once at bootstrap, never mutated."""

    seed: int
    hero_class: HeroClass = HeroClass.WARRIOR
    challenges: Challenge = Challenge.NONE

    @classmethod
    def create(
        cls,
        seed: int | str,
        hero_class: str | int | HeroClass = HeroClass.WARRIOR,
        challenges: int | Challenge = 0,
    ) -> RunConfig:
        """Validate raw bootstrap parameters and build a RunConfig."""
        if isinstance(seed, bool):
            raise ConfigurationError(f"Malformed seed {seed!r}")
        try:
            seed_value = int(seed)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Malformed seed {seed!r}") from None
        if not _INT64_MIN <= seed_value <= _INT64_MAX:
            raise ConfigurationError(f"Seed {seed_value} does not fit in a signed 64-bit integer")

        try:
            bits = int(challenges)
        except (TypeError, ValueError):
            raise ConfigurationError(f"Malformed challenges {challenges!r}") from None
        if bits < 0 or bits & ~Challenge.all_bits():
            raise ConfigurationError(f"Unknown challenge bits in {bits}")

        return cls(
            seed=seed_value,
            hero_class=HeroClass.parse(hero_class),
            challenges=Challenge(bits),
        )

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        seed: int | str | None = None,
        hero_class: str | int | HeroClass | None = None,
        challenges: int | Challenge | str | None = None,
    ) -> RunConfig:
        """Read ``DELVE_SEED``, ``DELVE_CLASS`` and ``DELVE_CHALLENGES``.

        Explicit arguments win; the environment is only consulted for the
        ones left as None.
        """
        env = os.environ if environ is None else environ
        return cls.create(
            seed=seed if seed is not None else env.get("DELVE_SEED", "12345"),
            hero_class=hero_class if hero_class is not None else env.get("DELVE_CLASS", "WARRIOR"),
            challenges=challenges if challenges is not None else env.get("DELVE_CHALLENGES", "0"),
        )
