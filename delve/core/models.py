"""Core data models: Intent and the schedulable actors (Hero, Mob, buffs)."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from delve.core.enums import Domain, HeroClass, IntentKind
from delve.core.grid import NEIGHBOURS8

if TYPE_CHECKING:
    from delve.core.world_state import WorldState

logger = logging.getLogger(__name__)

TICK = 1.0

# Among actors due at the same instant, higher priority acts first.
VFX_PRIORITY = 100
HERO_PRIORITY = 0
MOB_PRIORITY = -20
BUFF_PRIORITY = -30
DEFAULT_PRIORITY = -100


@dataclass(frozen=True, slots=True)
class Intent:
    """A translated, world-applicable hero action waiting for the hero's next turn."""

    kind: IntentKind
    cell: int
    target_id: int | None = None

    def __repr__(self) -> str:
        target = f", target={self.target_id}" if self.target_id is not None else ""
        return f"Intent({self.kind.name}, cell={self.cell}{target})"


class Actor:
    """Anything that takes turns on the shared timeline.

    ``time`` is the instant at which the actor next acts. ``act()`` performs
    one activation and returns True when the actor wants to be selected again
    before anything else is allowed to yield control.
    """

    __slots__ = ("id", "time", "priority", "world")

    def __init__(self, priority: int = DEFAULT_PRIORITY) -> None:
        self.id: int = 0
        self.time: float = 0.0
        self.priority = priority
        self.world: WorldState | None = None

    @property
    def alive(self) -> bool:
        return True

    def act(self) -> bool:
        raise NotImplementedError

    def spend(self, duration: float) -> None:
        self.time += duration

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id}, time={self.time}, priority={self.priority})"


class Hero(Actor):
    """The controlled agent.

    The hero becomes ``ready`` at the start of its turn when it has nothing
    left to do; the step protocol then hands control back to the caller.
    """

    __slots__ = (
        "hero_class", "pos", "hp", "max_hp", "damage_min", "damage_max", "armor",
        "accuracy", "move_time", "attack_time", "ready", "pending_intent",
        "resting", "keys", "dead", "_turn_complete",
    )

    def __init__(
        self,
        hero_class: HeroClass,
        pos: int,
        max_hp: int,
        damage_min: int,
        damage_max: int,
        armor: int,
        accuracy: float = 0.85,
        move_time: float = TICK,
        attack_time: float = TICK,
    ) -> None:
        super().__init__(HERO_PRIORITY)
        self.hero_class = hero_class
        self.pos = pos
        self.hp = max_hp
        self.max_hp = max_hp
        self.damage_min = damage_min
        self.damage_max = damage_max
        self.armor = armor
        self.accuracy = accuracy
        self.move_time = move_time
        self.attack_time = attack_time
        self.ready = False
        self.pending_intent: Intent | None = None
        self.resting = False
        self.keys = 0
        self.dead = False
        # True once the hero has spent time since it last asked for input
        self._turn_complete = True

    @property
    def alive(self) -> bool:
        return self.hp > 0 and not self.dead

    def force_ready(self) -> None:
        """Put the hero straight into the awaiting-input state."""
        self.ready = True
        self.pending_intent = None
        self.resting = False
        self._turn_complete = False

    def interrupt(self) -> None:
        """Stop resting (taking damage does this)."""
        self.resting = False

    def act(self) -> bool:
        world = self.world
        if self.pending_intent is not None:
            intent = self.pending_intent
            self.pending_intent = None
            self._perform(intent, world)
            self._turn_complete = True
            return False

        if self.resting:
            if self.hp < self.max_hp:
                self.hp = min(self.max_hp, self.hp + world.config.rest_heal)
                self.spend(TICK)
                self._turn_complete = True
                return False
            self.resting = False

        if not self._turn_complete:
            # No intent: the hero waits in place for one turn
            self.spend(TICK)
            self._turn_complete = True
            return False

        self.ready = True
        self._turn_complete = False
        return False

    def _perform(self, intent: Intent, world: WorldState) -> None:
        from delve.systems import combat

        kind = intent.kind
        if kind == IntentKind.ATTACK:
            mob = world.actor_by_id(intent.target_id)
            if isinstance(mob, Mob) and mob.alive and world.grid.adjacent(self.pos, mob.pos):
                world.presentation.animate(self, "attack")
                combat.hero_attack(self, mob, world)
                self.spend(self.attack_time)
                return
            logger.debug("Attack target %s gone, hero waits", intent.target_id)
            self.spend(TICK)
            return

        if kind == IntentKind.UNLOCK:
            if self.keys > 0 and world.unlock(intent.cell):
                self.keys -= 1
            self.spend(TICK)
            return

        if intent.cell != self.pos and not self._step_to(intent.cell, world):
            self.spend(TICK)
            return

        if kind == IntentKind.DESCEND:
            self.spend(self.move_time)
            world.descend()
        elif kind == IntentKind.PICKUP:
            world.pick_up(self, self.pos)
            self.spend(self.move_time)
        else:
            self.spend(self.move_time)

    def _step_to(self, cell: int, world: WorldState) -> bool:
        if not world.grid.adjacent(self.pos, cell):
            return False
        if not world.grid.is_passable(cell) or world.mob_at(cell) is not None:
            logger.debug("Hero blocked at cell %d", cell)
            return False
        world.presentation.animate(self, "move")
        self.pos = cell
        return True


class Mob(Actor):
    """A hostile monster: attacks when adjacent, hunts the hero when in view, wanders otherwise."""

    __slots__ = (
        "name", "pos", "hp", "max_hp", "damage_min", "damage_max", "armor",
        "accuracy", "move_time", "attack_time", "view_distance", "gold_drop",
        "always_hunts", "_turns",
    )

    def __init__(
        self,
        name: str,
        pos: int,
        max_hp: int,
        damage_min: int,
        damage_max: int,
        armor: int = 0,
        accuracy: float = 0.7,
        move_time: float = TICK,
        attack_time: float = TICK,
        view_distance: int = 6,
        gold_drop: int = 0,
        always_hunts: bool = False,
    ) -> None:
        super().__init__(MOB_PRIORITY)
        self.name = name
        self.pos = pos
        self.hp = max_hp
        self.max_hp = max_hp
        self.damage_min = damage_min
        self.damage_max = damage_max
        self.armor = armor
        self.accuracy = accuracy
        self.move_time = move_time
        self.attack_time = attack_time
        self.view_distance = view_distance
        self.gold_drop = gold_drop
        self.always_hunts = always_hunts
        self._turns = 0

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def act(self) -> bool:
        from delve.systems import combat

        world = self.world
        self._turns += 1
        hero = world.hero
        grid = world.grid

        if hero is not None and hero.alive and grid.adjacent(self.pos, hero.pos):
            world.presentation.animate(self, "attack")
            combat.mob_attack(self, hero, world)
            self.spend(self.attack_time)
            return False

        if hero is not None and hero.alive and (
            self.always_hunts or grid.distance(self.pos, hero.pos) <= self.view_distance
        ):
            dest = self._step_towards(hero.pos, world)
        else:
            dest = self._wander(world)

        if dest is not None:
            self.pos = dest
        self.spend(self.move_time)
        return False

    def _free(self, cell: int | None, world: WorldState) -> bool:
        if cell is None or not world.grid.is_passable(cell):
            return False
        if world.mob_at(cell) is not None:
            return False
        hero = world.hero
        return hero is None or hero.pos != cell

    def _step_towards(self, target: int, world: WorldState) -> int | None:
        grid = world.grid
        best: int | None = None
        best_dist = grid.distance(self.pos, target)
        for dx, dy in NEIGHBOURS8:
            cell = grid.offset(self.pos, dx, dy)
            if not self._free(cell, world):
                continue
            d = grid.distance(cell, target)
            if d < best_dist:
                best, best_dist = cell, d
        return best

    def _wander(self, world: WorldState) -> int | None:
        start = world.rng.next_int(Domain.AI_DECISION, self.id, self._turns, 0, len(NEIGHBOURS8) - 1)
        for i in range(len(NEIGHBOURS8)):
            dx, dy = NEIGHBOURS8[(start + i) % len(NEIGHBOURS8)]
            cell = world.grid.offset(self.pos, dx, dy)
            if self._free(cell, world):
                return cell
        return None


class Regeneration(Actor):
    """Passive healing buff attached to the hero."""

    __slots__ = ("interval",)

    def __init__(self, interval: float) -> None:
        super().__init__(BUFF_PRIORITY)
        self.interval = interval

    def act(self) -> bool:
        hero = self.world.hero
        if hero is not None and hero.alive and hero.hp < hero.max_hp:
            hero.hp += 1
        self.spend(self.interval)
        return False


class Respawner(Actor):
    """Keeps the current level populated by spawning a monster every ``interval`` turns."""

    __slots__ = ("interval", "cap")

    def __init__(self, interval: float, cap: int) -> None:
        super().__init__(BUFF_PRIORITY)
        self.interval = interval
        self.cap = cap

    def act(self) -> bool:
        world = self.world
        if len(world.mobs()) < self.cap:
            mob = world.generator.spawn_mob(world)
            if mob is not None:
                world.add_actor(mob, at=self.time)
                logger.debug("Depth %d: respawned %s at cell %d", world.depth, mob.name, mob.pos)
        self.spend(self.interval)
        return False
