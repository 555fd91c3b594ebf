"""Melee combat resolution between the hero and monsters.

Every roll goes through ``WorldState.roll_*`` so outcomes depend only on
the seed and the order of attacks.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from delve.core.enums import Domain

if TYPE_CHECKING:
    from delve.core.models import Hero, Mob
    from delve.core.world_state import WorldState

logger = logging.getLogger(__name__)


def roll_damage(world: WorldState, damage_min: int, damage_max: int, armor: int) -> int:
    """Roll raw damage in [min, max] and subtract armor; never negative."""
    raw = world.roll_int(Domain.COMBAT, damage_min, damage_max)
    return max(0, raw - armor)


def hero_attack(hero: Hero, mob: Mob, world: WorldState) -> int:
    """Resolve one hero swing. Returns the damage dealt (0 on a miss)."""
    if not world.roll_bool(Domain.COMBAT, hero.accuracy):
        logger.debug("Hero missed %s #%d", mob.name, mob.id)
        return 0
    dmg = roll_damage(world, hero.damage_min, hero.damage_max, mob.armor)
    mob.hp -= dmg
    logger.debug("Hero hit %s #%d for %d (hp %d)", mob.name, mob.id, dmg, mob.hp)
    if not mob.alive:
        world.kill_mob(mob)
    return dmg


def mob_attack(mob: Mob, hero: Hero, world: WorldState) -> int:
    """Resolve one monster swing. Any hit interrupts resting."""
    if not world.roll_bool(Domain.COMBAT, mob.accuracy):
        logger.debug("%s #%d missed the hero", mob.name, mob.id)
        return 0
    dmg = roll_damage(world, mob.damage_min, mob.damage_max, hero.armor)
    hero.hp = max(0, hero.hp - dmg)
    hero.interrupt()
    if not hero.alive:
        hero.dead = True
        logger.info("Hero slain by %s #%d at depth %d", mob.name, mob.id, world.depth)
    else:
        logger.debug("%s #%d hit the hero for %d (hp %d/%d)", mob.name, mob.id, dmg, hero.hp, hero.max_hp)
    return dmg
