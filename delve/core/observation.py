"""Observation snapshot and state hash handed back to the agent after each step."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from delve.core.world_state import WorldState


@dataclass(frozen=True, slots=True)
class Observation:
    """Flat, serializable view of what the agent can see.

    ``passable`` holds one 0/1 entry per cell, row-major, so its length is
    ``width * height``.
    """

    hero_x: int
    hero_y: int
    hero_hp: int
    hero_max_hp: int
    depth: int
    gold: int
    passable: tuple[int, ...]
    alive: bool
    width: int = 0
    height: int = 0

    @classmethod
    def empty(cls) -> Observation:
        """Canonical zero observation used when there is no hero."""
        return cls(0, 0, 0, 0, 0, 0, (), False)

    def to_dict(self) -> dict[str, Any]:
        return {
            "hero_x": self.hero_x,
            "hero_y": self.hero_y,
            "hero_hp": self.hero_hp,
            "hero_max_hp": self.hero_max_hp,
            "depth": self.depth,
            "gold": self.gold,
            "width": self.width,
            "height": self.height,
            "passable": list(self.passable),
            "alive": self.alive,
        }


def extract_observation(world: WorldState | None) -> Observation:
    if world is None or world.hero is None or world.grid is None:
        return Observation.empty()
    hero = world.hero
    grid = world.grid
    x, y = grid.xy(hero.pos)
    return Observation(
        hero_x=x,
        hero_y=y,
        hero_hp=hero.hp,
        hero_max_hp=hero.max_hp,
        depth=world.depth,
        gold=world.gold,
        passable=grid.passable_bitmap(),
        alive=hero.alive,
        width=grid.width,
        height=grid.height,
    )


def compute_state_hash(world: WorldState | None) -> int:
    """Unsigned 64-bit integrity hash of the hero's vital signs and the level size.

    SHA-256 over ``pos:{pos},hp:{hp}/{max_hp},depth:{depth},gold:{gold}``
    followed by ``level:{width}x{height}``, keeping the first 8 bytes
    big-endian. The map contents and other actors are not covered: two
    worlds that agree on these fields hash the same.
    """
    digest = hashlib.sha256()
    if world is not None and world.hero is not None:
        hero = world.hero
        digest.update(
            f"pos:{hero.pos},hp:{hero.hp}/{hero.max_hp},depth:{world.depth},gold:{world.gold}".encode()
        )
    if world is not None and world.grid is not None:
        digest.update(f"level:{world.grid.width}x{world.grid.height}".encode())
    return int.from_bytes(digest.digest()[:8], "big")
