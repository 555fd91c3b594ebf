"""Level and actor generators.

Levels are rooms-and-corridors maps: rectangular rooms joined in sequence
by L-shaped corridors, the stairs up in the first room, the stairs down in
the last. A locked treasure closet hangs off one room and its iron key lies
in another. Every roll is keyed by depth so a level depends only on the seed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from delve.core.enums import Challenge, Domain, HeroClass, ItemKind, Terrain
from delve.core.grid import Grid
from delve.core.models import Hero, Mob

if TYPE_CHECKING:
    from delve.config import SimulationConfig
    from delve.core.world_state import WorldState
    from delve.systems.rng import DeterministicRNG

logger = logging.getLogger(__name__)


# Hero archetypes: (max_hp, dmg_min, dmg_max, armor, accuracy, move_time, attack_time)
_HERO_STATS: dict[HeroClass, tuple[int, int, int, int, float, float, float]] = {
    HeroClass.WARRIOR:  (20, 1, 6, 2, 0.85, 1.0, 1.0),
    HeroClass.MAGE:     (15, 1, 8, 0, 0.90, 1.0, 1.0),
    HeroClass.ROGUE:    (17, 1, 6, 1, 0.90, 1.0, 0.75),
    HeroClass.HUNTRESS: (16, 1, 7, 1, 0.95, 0.75, 1.0),
}


@dataclass(frozen=True, slots=True)
class MobTemplate:
    name: str
    min_depth: int
    max_hp: int
    damage_min: int
    damage_max: int
    armor: int
    accuracy: float
    move_time: float = 1.0
    attack_time: float = 1.0
    view_distance: int = 6
    gold_drop: int = 0
    always_hunts: bool = False


MOB_TEMPLATES: tuple[MobTemplate, ...] = (
    MobTemplate("rat", 1, 8, 1, 4, 0, 0.70, gold_drop=1),
    MobTemplate("snake", 1, 6, 1, 3, 0, 0.80, move_time=0.5),
    MobTemplate("gnoll scout", 2, 12, 1, 6, 2, 0.70, gold_drop=5),
    MobTemplate("crab", 3, 15, 1, 7, 4, 0.60, move_time=0.5),
    MobTemplate("skeleton", 4, 25, 2, 10, 5, 0.75, gold_drop=8),
    MobTemplate("bat", 5, 18, 5, 9, 2, 0.80, move_time=0.5, always_hunts=True),
)


@dataclass(frozen=True, slots=True)
class Room:
    x: int
    y: int
    w: int
    h: int

    @property
    def center(self) -> tuple[int, int]:
        return self.x + self.w // 2, self.y + self.h // 2

    def intersects(self, other: Room, margin: int = 1) -> bool:
        return (
            self.x - margin < other.x + other.w
            and other.x - margin < self.x + self.w
            and self.y - margin < other.y + other.h
            and other.y - margin < self.y + self.h
        )


@dataclass(slots=True)
class Level:
    """A freshly generated level, not yet attached to a world."""

    depth: int
    grid: Grid
    entrance: int
    exit: int
    rooms: list[Room]
    items: dict[int, tuple[ItemKind, int]] = field(default_factory=dict)
    mobs: list[Mob] = field(default_factory=list)
    respawn_interval: float = 50.0


class _Roller:
    """Sequential draws from one (domain, key) stream."""

    __slots__ = ("_rng", "_domain", "_key", "_counter")

    def __init__(self, rng: DeterministicRNG, domain: Domain, key: int) -> None:
        self._rng = rng
        self._domain = domain
        self._key = key
        self._counter = 0

    def between(self, low: int, high: int) -> int:
        self._counter += 1
        return self._rng.next_int(self._domain, self._key, self._counter, low, high)


class LevelGenerator:
    """Builds levels, monsters and the hero from the episode seed."""

    __slots__ = ("_config", "_rng")

    def __init__(self, config: SimulationConfig, rng: DeterministicRNG) -> None:
        self._config = config
        self._rng = rng

    # -- hero --

    def create_hero(self, hero_class: HeroClass) -> Hero:
        max_hp, dmg_min, dmg_max, armor, accuracy, move_time, attack_time = _HERO_STATS[hero_class]
        return Hero(
            hero_class, pos=0, max_hp=max_hp, damage_min=dmg_min, damage_max=dmg_max,
            armor=armor, accuracy=accuracy, move_time=move_time, attack_time=attack_time,
        )

    # -- levels --

    def generate(self, depth: int, challenges: Challenge = Challenge.NONE) -> Level:
        cfg = self._config
        roll = _Roller(self._rng, Domain.MAP_GEN, depth)
        grid = Grid(cfg.level_width, cfg.level_height)

        rooms = self._place_rooms(roll, grid)
        for room in rooms:
            for y in range(room.y, room.y + room.h):
                for x in range(room.x, room.x + room.w):
                    grid.set_xy(x, y, Terrain.FLOOR)
        for a, b in zip(rooms, rooms[1:]):
            self._carve_corridor(roll, grid, a.center, b.center)

        entrance = grid.cell(*rooms[0].center)
        exit_ = grid.cell(*rooms[-1].center)
        grid.set(entrance, Terrain.STAIRS_UP)
        grid.set(exit_, Terrain.STAIRS_DOWN)

        level = Level(
            depth=depth, grid=grid, entrance=entrance, exit=exit_, rooms=rooms,
            respawn_interval=(
                cfg.swarm_respawn_interval if challenges & Challenge.SWARM else cfg.respawn_interval
            ),
        )
        self._place_closet(roll, level)
        self._place_loot(level)
        self._place_mobs(level, challenges)
        logger.debug(
            "Generated depth %d: %d rooms, %d items, %d mobs",
            depth, len(rooms), len(level.items), len(level.mobs),
        )
        return level

    def _place_rooms(self, roll: _Roller, grid: Grid) -> list[Room]:
        cfg = self._config
        rooms: list[Room] = []
        for _ in range(cfg.room_attempts):
            if len(rooms) >= cfg.max_rooms:
                break
            w = roll.between(4, 8)
            h = roll.between(4, 7)
            if w + 2 > grid.width or h + 2 > grid.height:
                continue
            room = Room(roll.between(1, grid.width - w - 1), roll.between(1, grid.height - h - 1), w, h)
            if any(room.intersects(other) for other in rooms):
                continue
            rooms.append(room)

        if len(rooms) < 2:
            # Tiny or unlucky maps: fall back to two opposite corner rooms
            w = max(1, min(4, (grid.width - 3) // 2))
            h = max(1, min(4, grid.height - 2))
            rooms = [Room(1, 1, w, h), Room(grid.width - w - 1, grid.height - h - 1, w, h)]
        return rooms

    def _carve_corridor(
        self, roll: _Roller, grid: Grid, start: tuple[int, int], end: tuple[int, int],
    ) -> None:
        (x1, y1), (x2, y2) = start, end
        horizontal_first = roll.between(0, 1) == 0
        corner = (x2, y1) if horizontal_first else (x1, y2)
        for (ax, ay), (bx, by) in ((start, corner), (corner, end)):
            for x in range(min(ax, bx), max(ax, bx) + 1):
                for y in range(min(ay, by), max(ay, by) + 1):
                    if grid.get_xy(x, y) == Terrain.WALL:
                        grid.set_xy(x, y, Terrain.FLOOR)

    def _place_closet(self, roll: _Roller, level: Level) -> None:
        """Attach a 3x3 treasure closet behind a locked door; drop its key elsewhere."""
        grid = level.grid
        rooms = level.rooms
        start = roll.between(0, len(rooms) - 1)
        for i in range(len(rooms)):
            room = rooms[(start + i) % len(rooms)]
            cx, cy = room.center
            # (door, closet interior top-left) for each side of the room
            sides = (
                ((room.x + room.w, cy), (room.x + room.w + 1, cy - 1)),
                ((room.x - 1, cy), (room.x - 4, cy - 1)),
                ((cx, room.y + room.h), (cx - 1, room.y + room.h + 1)),
                ((cx, room.y - 1), (cx - 1, room.y - 4)),
            )
            for (dx, dy), (ix, iy) in sides:
                if not self._solid(grid, ix - 1, iy - 1, 5, 5) or not self._solid(grid, dx, dy, 1, 1):
                    continue
                if not (1 <= ix and ix + 3 <= grid.width - 1 and 1 <= iy and iy + 3 <= grid.height - 1):
                    continue
                for y in range(iy, iy + 3):
                    for x in range(ix, ix + 3):
                        grid.set_xy(x, y, Terrain.FLOOR)
                grid.set_xy(dx, dy, Terrain.LOCKED_DOOR)
                treasure = grid.cell(ix + 1, iy + 1)
                level.items[treasure] = (ItemKind.GOLD, 25 + 10 * level.depth)

                key_rooms = [r for r in rooms if r is not room] or [room]
                key_cell = self._free_floor_cell(roll, level, key_rooms)
                if key_cell is not None:
                    level.items[key_cell] = (ItemKind.IRON_KEY, 1)
                return

    @staticmethod
    def _solid(grid: Grid, x: int, y: int, w: int, h: int) -> bool:
        for yy in range(y, y + h):
            for xx in range(x, x + w):
                if not grid.in_bounds_xy(xx, yy) or grid.get_xy(xx, yy) != Terrain.WALL:
                    return False
        return True

    def _free_floor_cell(self, roll: _Roller, level: Level, rooms: list[Room]) -> int | None:
        grid = level.grid
        taken = {m.pos for m in level.mobs}
        for _ in range(20):
            room = rooms[roll.between(0, len(rooms) - 1)]
            cell = grid.cell(roll.between(room.x, room.x + room.w - 1), roll.between(room.y, room.y + room.h - 1))
            if grid.get(cell) != Terrain.FLOOR or cell in level.items or cell in taken:
                continue
            return cell
        return None

    def _place_loot(self, level: Level) -> None:
        roll = _Roller(self._rng, Domain.LOOT, level.depth)
        for _ in range(roll.between(1, 3)):
            cell = self._free_floor_cell(roll, level, level.rooms)
            if cell is not None:
                level.items[cell] = (ItemKind.GOLD, roll.between(3, 10 + 5 * level.depth))
        for _ in range(roll.between(0, 2)):
            cell = self._free_floor_cell(roll, level, level.rooms)
            if cell is not None:
                level.items[cell] = (ItemKind.DEWDROP, 5)

    # -- monsters --

    def _place_mobs(self, level: Level, challenges: Challenge) -> None:
        cfg = self._config
        roll = _Roller(self._rng, Domain.SPAWN, level.depth)
        count = cfg.mobs_base + (level.depth - 1) // 2 * cfg.mobs_per_two_depths
        if challenges & Challenge.SWARM:
            count += cfg.swarm_extra_mobs
        count = min(count, cfg.mob_cap)
        # Keep the arrival room clear
        rooms = level.rooms[1:] or level.rooms
        for _ in range(count):
            cell = self._free_floor_cell(roll, level, rooms)
            if cell is None:
                continue
            level.mobs.append(self._make_mob(roll.between, level.depth, cell, challenges))

    def spawn_mob(self, world: WorldState) -> Mob | None:
        """Create a monster on a floor cell out of the hero's reach, or None if none found."""
        grid = world.grid
        hero = world.hero
        floor = grid.cells_of(Terrain.FLOOR)
        if not floor:
            return None
        for _ in range(30):
            cell = floor[world.roll_int(Domain.SPAWN, 0, len(floor) - 1)]
            if world.mob_at(cell) is not None or cell in world.items:
                continue
            if hero is not None and grid.distance(cell, hero.pos) < self._config.respawn_min_distance:
                continue
            return self._make_mob(
                lambda lo, hi: world.roll_int(Domain.SPAWN, lo, hi), world.depth, cell, world.challenges,
            )
        return None

    def _make_mob(self, roll_int, depth: int, cell: int, challenges: Challenge) -> Mob:
        eligible = [t for t in MOB_TEMPLATES if t.min_depth <= depth]
        tpl = eligible[roll_int(0, len(eligible) - 1)]
        hp = tpl.max_hp + 2 * (depth - 1)
        dmg_min, dmg_max = tpl.damage_min, tpl.damage_max
        if challenges & Challenge.CHAMPIONS:
            mult = self._config.champion_mult
            hp = int(hp * mult)
            dmg_min = int(dmg_min * mult)
            dmg_max = int(dmg_max * mult)
        return Mob(
            tpl.name, cell, max_hp=hp, damage_min=dmg_min, damage_max=dmg_max,
            armor=tpl.armor, accuracy=tpl.accuracy, move_time=tpl.move_time,
            attack_time=tpl.attack_time, view_distance=tpl.view_distance,
            gold_drop=tpl.gold_drop, always_hunts=tpl.always_hunts,
        )
