"""Tests for level generation and hero archetypes."""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from delve.config import SimulationConfig
from delve.core.enums import Challenge, HeroClass, ItemKind, Terrain
from delve.systems.generator import MOB_TEMPLATES, LevelGenerator
from delve.systems.rng import DeterministicRNG


def _generator(seed: int, config: SimulationConfig | None = None) -> LevelGenerator:
    return LevelGenerator(config or SimulationConfig(), DeterministicRNG(seed))


def _in_room(room, grid, cell) -> bool:
    x, y = grid.xy(cell)
    return room.x <= x < room.x + room.w and room.y <= y < room.y + room.h


class TestLevelLayout:

    @pytest.mark.parametrize("seed", [1, 42, 12345, -9])
    @pytest.mark.parametrize("depth", [1, 2, 5])
    def test_one_staircase_each_way(self, seed, depth):
        level = _generator(seed).generate(depth)
        grid = level.grid
        assert grid.cells_of(Terrain.STAIRS_UP) == [level.entrance]
        assert grid.cells_of(Terrain.STAIRS_DOWN) == [level.exit]
        assert level.entrance != level.exit

    def test_default_size(self):
        level = _generator(3).generate(1)
        assert (level.grid.width, level.grid.height) == (32, 32)
        assert len(level.grid) == 32 * 32

    def test_border_is_wall(self):
        grid = _generator(3).generate(1).grid
        for x in range(grid.width):
            assert grid.get_xy(x, 0) == Terrain.WALL
            assert grid.get_xy(x, grid.height - 1) == Terrain.WALL
        for y in range(grid.height):
            assert grid.get_xy(0, y) == Terrain.WALL
            assert grid.get_xy(grid.width - 1, y) == Terrain.WALL

    @pytest.mark.parametrize("seed", range(6))
    def test_items_lie_on_floor(self, seed):
        level = _generator(seed).generate(2)
        for cell, (kind, amount) in level.items.items():
            assert level.grid.get(cell) == Terrain.FLOOR
            assert amount > 0

    @pytest.mark.parametrize("seed", range(6))
    def test_key_only_with_locked_door(self, seed):
        level = _generator(seed).generate(1)
        doors = level.grid.cells_of(Terrain.LOCKED_DOOR)
        keys = [c for c, (kind, _) in level.items.items() if kind == ItemKind.IRON_KEY]
        assert len(doors) <= 1
        assert len(keys) <= len(doors)

    def test_tiny_map_falls_back_to_two_rooms(self):
        cfg = SimulationConfig(level_width=8, level_height=6)
        level = _generator(1, cfg).generate(1)
        assert len(level.rooms) >= 2
        assert level.grid.get(level.entrance) == Terrain.STAIRS_UP


class TestDeterminism:

    def test_same_seed_same_level(self):
        a = _generator(77).generate(3)
        b = _generator(77).generate(3)
        assert a.grid.passable_bitmap() == b.grid.passable_bitmap()
        assert a.items == b.items
        assert [(m.name, m.pos, m.max_hp) for m in a.mobs] == [(m.name, m.pos, m.max_hp) for m in b.mobs]

    def test_depth_independent_of_generation_order(self):
        gen = _generator(77)
        gen.generate(1)
        after_one = gen.generate(2)
        fresh = _generator(77).generate(2)
        assert after_one.grid.passable_bitmap() == fresh.grid.passable_bitmap()
        assert after_one.items == fresh.items

    def test_depths_differ(self):
        gen = _generator(77)
        assert gen.generate(1).grid.passable_bitmap() != gen.generate(2).grid.passable_bitmap()


class TestMonsters:

    @pytest.mark.parametrize("seed", range(5))
    def test_arrival_room_is_clear(self, seed):
        level = _generator(seed).generate(1)
        for mob in level.mobs:
            assert not _in_room(level.rooms[0], level.grid, mob.pos)
            assert level.grid.get(mob.pos) == Terrain.FLOOR

    def test_count_scales_with_swarm(self):
        plain = _generator(5).generate(1)
        swarm = _generator(5).generate(1, Challenge.SWARM)
        assert 1 <= len(plain.mobs) <= 3
        assert len(swarm.mobs) > len(plain.mobs)
        assert len(swarm.mobs) <= SimulationConfig().mob_cap

    def test_shallow_depth_only_weak_monsters(self):
        shallow = {t.name for t in MOB_TEMPLATES if t.min_depth <= 1}
        for seed in range(5):
            for mob in _generator(seed).generate(1).mobs:
                assert mob.name in shallow

    def test_swarm_respawns_faster(self):
        cfg = SimulationConfig()
        assert _generator(1).generate(1).respawn_interval == cfg.respawn_interval
        assert _generator(1).generate(1, Challenge.SWARM).respawn_interval == cfg.swarm_respawn_interval


class TestHeroArchetypes:

    @pytest.mark.parametrize("hero_class, max_hp", [
        (HeroClass.WARRIOR, 20),
        (HeroClass.MAGE, 15),
        (HeroClass.ROGUE, 17),
        (HeroClass.HUNTRESS, 16),
    ])
    def test_starting_hp(self, hero_class, max_hp):
        hero = _generator(1).create_hero(hero_class)
        assert hero.hp == hero.max_hp == max_hp
        assert hero.alive
        assert not hero.ready

    def test_class_speed_traits(self):
        gen = _generator(1)
        assert gen.create_hero(HeroClass.HUNTRESS).move_time < 1.0
        assert gen.create_hero(HeroClass.ROGUE).attack_time < 1.0
        assert gen.create_hero(HeroClass.WARRIOR).armor > gen.create_hero(HeroClass.MAGE).armor
