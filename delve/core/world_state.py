"""Mutable authoritative world state: level grid, counters, actors and floor items."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from delve.core.enums import Challenge, Domain, ItemKind, Terrain
from delve.core.grid import Grid
from delve.core.models import Actor, Hero, Mob, Regeneration, Respawner

if TYPE_CHECKING:
    from delve.config import SimulationConfig
    from delve.systems.generator import Level, LevelGenerator
    from delve.systems.interactions import InteractionResolver
    from delve.systems.presentation import HeadlessPresentation
    from delve.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)


class WorldState:
    """The single source of truth for one episode.

    ``actors`` is kept in registration order; the scheduler relies on
    ``Actor.id`` (assigned here, monotonically) as its final tie-breaker.
    """

    __slots__ = (
        "seed", "config", "challenges", "depth", "gold", "grid", "hero", "actors",
        "items", "entrance", "exit", "rng", "generator", "resolver", "presentation",
        "_next_actor_id", "_rolls",
    )

    def __init__(
        self,
        seed: int,
        config: SimulationConfig,
        rng: DeterministicRNG,
        generator: LevelGenerator,
        resolver: InteractionResolver,
        presentation: HeadlessPresentation,
        challenges: Challenge = Challenge.NONE,
    ) -> None:
        self.seed = seed
        self.config = config
        self.challenges = challenges
        self.depth: int = 0
        self.gold: int = 0
        self.grid: Grid | None = None
        self.hero: Hero | None = None
        self.actors: list[Actor] = []
        self.items: dict[int, tuple[ItemKind, int]] = {}
        self.entrance: int = 0
        self.exit: int = 0
        self.rng = rng
        self.generator = generator
        self.resolver = resolver
        self.presentation = presentation
        self._next_actor_id: int = 1
        self._rolls: int = 0

    # -- actors --

    def add_actor(self, actor: Actor, at: float | None = None) -> None:
        actor.id = self._next_actor_id
        self._next_actor_id += 1
        if at is not None:
            actor.time = at
        actor.world = self
        self.actors.append(actor)

    def remove_actor(self, actor: Actor) -> None:
        if actor in self.actors:
            self.actors.remove(actor)

    def actor_by_id(self, actor_id: int | None) -> Actor | None:
        for actor in self.actors:
            if actor.id == actor_id:
                return actor
        return None

    def mobs(self) -> list[Mob]:
        return [a for a in self.actors if isinstance(a, Mob) and a.alive]

    def mob_at(self, cell: int) -> Mob | None:
        for actor in self.actors:
            if isinstance(actor, Mob) and actor.alive and actor.pos == cell:
                return actor
        return None

    def kill_mob(self, mob: Mob) -> None:
        self.remove_actor(mob)
        if mob.gold_drop > 0:
            self.drop_item(mob.pos, ItemKind.GOLD, mob.gold_drop)
        logger.debug("Depth %d: %s #%d died at cell %d", self.depth, mob.name, mob.id, mob.pos)

    # -- items --

    def drop_item(self, cell: int, kind: ItemKind, amount: int = 1) -> None:
        """Place an item on the floor; gold piles on the same cell merge."""
        existing = self.items.get(cell)
        if existing is not None and existing[0] == kind == ItemKind.GOLD:
            self.items[cell] = (kind, existing[1] + amount)
        elif existing is None:
            self.items[cell] = (kind, amount)
        else:
            logger.debug("Cell %d already holds %s, %s lost", cell, existing[0].name, kind.name)

    def pick_up(self, hero: Hero, cell: int) -> ItemKind | None:
        """Move the item at *cell* into the hero's possession."""
        item = self.items.pop(cell, None)
        if item is None:
            return None
        kind, amount = item
        if kind == ItemKind.GOLD:
            self.gold += amount
        elif kind == ItemKind.IRON_KEY:
            hero.keys += amount
        elif kind == ItemKind.DEWDROP:
            hero.hp = min(hero.max_hp, hero.hp + amount)
        logger.debug("Depth %d: hero picked up %s x%d", self.depth, kind.name, amount)
        return kind

    # -- terrain --

    def unlock(self, cell: int) -> bool:
        if self.grid.get(cell) != Terrain.LOCKED_DOOR:
            return False
        self.grid.set(cell, Terrain.DOOR)
        return True

    # -- randomness --

    def roll_int(self, domain: Domain, low: int, high: int) -> int:
        """Draw the next value from the episode-wide roll sequence."""
        self._rolls += 1
        return self.rng.next_int(domain, self.depth, self._rolls, low, high)

    def roll_bool(self, domain: Domain, probability: float) -> bool:
        self._rolls += 1
        return self.rng.next_bool(domain, self.depth, self._rolls, probability)

    # -- levels --

    def enter_first_level(self, hero: Hero) -> None:
        """Generate depth 1, register the hero and its buffs."""
        self.hero = hero
        self.add_actor(hero, at=0.0)
        if not self.challenges & Challenge.NO_REGEN:
            self.add_actor(Regeneration(self.config.regen_interval), at=self.config.regen_interval)
        self._load_level(self.generator.generate(1, self.challenges), at=0.0)

    def descend(self) -> None:
        """Replace the current level with the next one; the hero lands on the stairs up."""
        at = self.hero.time if self.hero is not None else 0.0
        for actor in list(self.actors):
            if isinstance(actor, (Mob, Respawner)):
                self.remove_actor(actor)
        self._load_level(self.generator.generate(self.depth + 1, self.challenges), at=at)
        logger.info("Hero descended to depth %d", self.depth)

    def _load_level(self, level: Level, at: float) -> None:
        self.depth = level.depth
        self.grid = level.grid
        self.items = dict(level.items)
        self.entrance = level.entrance
        self.exit = level.exit
        if self.hero is not None:
            self.hero.pos = level.entrance
        for mob in level.mobs:
            self.add_actor(mob, at=at)
        self.add_actor(Respawner(level.respawn_interval, self.config.mob_cap), at=at + level.respawn_interval)
