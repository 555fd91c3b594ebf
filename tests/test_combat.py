"""Tests for melee combat between the hero and monsters."""

import sys
import os

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from delve.core.enums import CanonicalAction, ItemKind
from delve.systems import combat
from tests.helpers.dungeon_arena import DungeonArena


def _sure_hit_arena(damage: int = 5) -> DungeonArena:
    arena = DungeonArena()
    hero = arena.add_hero(2, 2)
    hero.accuracy = 1.0
    hero.damage_min = hero.damage_max = damage
    arena.start()
    return arena


class TestHeroAttack:

    def test_armor_reduces_damage(self):
        arena = _sure_hit_arena(5)
        mob = arena.add_mob(3, 2, hp=10, armor=3, at=10.0)
        assert combat.hero_attack(arena.hero, mob, arena.world) == 2
        assert mob.hp == 8

    def test_armor_never_heals(self):
        arena = _sure_hit_arena(2)
        mob = arena.add_mob(3, 2, hp=10, armor=6, at=10.0)
        assert combat.hero_attack(arena.hero, mob, arena.world) == 0
        assert mob.hp == 10

    def test_miss_deals_nothing(self):
        arena = _sure_hit_arena()
        arena.hero.accuracy = 0.0
        mob = arena.add_mob(3, 2, hp=10, at=10.0)
        assert combat.hero_attack(arena.hero, mob, arena.world) == 0
        assert mob.hp == 10

    def test_kill_removes_mob_and_drops_gold(self):
        arena = _sure_hit_arena(5)
        mob = arena.add_mob(3, 2, hp=3, gold_drop=4, at=10.0)
        combat.hero_attack(arena.hero, mob, arena.world)
        assert not mob.alive
        assert mob not in arena.world.actors
        assert arena.mob_at(3, 2) is None
        assert arena.world.items[arena.cell(3, 2)] == (ItemKind.GOLD, 4)

    def test_drop_merges_with_gold_on_floor(self):
        arena = _sure_hit_arena(5)
        arena.drop(3, 2, ItemKind.GOLD, 6)
        mob = arena.add_mob(3, 2, hp=1, gold_drop=4, at=10.0)
        combat.hero_attack(arena.hero, mob, arena.world)
        assert arena.world.items[arena.cell(3, 2)] == (ItemKind.GOLD, 10)

    def test_bump_attack_through_step(self):
        arena = _sure_hit_arena(5)
        arena.add_mob(3, 2, hp=1, gold_drop=2, at=10.0)
        arena.step(CanonicalAction.MOVE_E)
        assert arena.mob_at(3, 2) is None
        assert arena.hero_xy() == (2, 2)
        # The loot is collected by walking onto it
        arena.step(CanonicalAction.MOVE_E)
        assert arena.world.gold == 2

    def test_rogue_attacks_faster(self):
        arena = _sure_hit_arena(1)
        arena.hero.attack_time = 0.75
        arena.add_mob(3, 2, hp=50, at=10.0)
        before = arena.hero.time
        arena.step(CanonicalAction.MOVE_E)
        assert arena.hero.time == pytest.approx(before + 0.75)


class TestMobAttack:

    def test_hp_floors_at_zero(self):
        arena = _sure_hit_arena()
        arena.hero.hp = 2
        mob = arena.add_mob(3, 2, damage=10, accuracy=1.0, at=10.0)
        combat.mob_attack(mob, arena.hero, arena.world)
        assert arena.hero.hp == 0
        assert arena.hero.dead
        assert not arena.hero.alive

    def test_adjacent_mob_attacks_on_its_turn(self):
        arena = DungeonArena()
        hero = arena.add_hero(2, 2)
        arena.add_mob(3, 2, damage=4, accuracy=1.0, at=0.5)
        arena.start()
        arena.step(CanonicalAction.WAIT)
        assert hero.hp == hero.max_hp - 2  # 4 damage minus the warrior's 2 armor

    def test_same_seed_same_fight(self):
        def fight() -> list[int]:
            arena = DungeonArena(seed=99)
            arena.add_hero(2, 2)
            arena.add_mob(3, 2, hp=40, damage=3, at=0.5)
            arena.start()
            hps = []
            for _ in range(8):
                arena.step(CanonicalAction.MOVE_E)
                mob = arena.mob_at(3, 2)
                hps.append((arena.hero.hp, mob.hp if mob else 0))
            return hps

        assert fight() == fight()
