"""Destination-cell interaction strategies.

Moving into a cell can mean several things depending on what is there.
The resolver asks each strategy in order and the first one that claims the
cell decides the hero's intent. To add a new interaction:
  1. Create a new Interaction subclass.
  2. Insert it into DEFAULT_INTERACTIONS at the right priority.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Sequence

from delve.core.enums import IntentKind, Terrain
from delve.core.models import Intent

if TYPE_CHECKING:
    from delve.core.models import Hero
    from delve.core.world_state import WorldState

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Abstract strategy
# ---------------------------------------------------------------------------

class Interaction(ABC):
    """One kind of thing the hero can do by moving into a cell."""

    name: str = "interaction"

    @abstractmethod
    def resolve(self, hero: Hero, world: WorldState, cell: int) -> Intent | None:
        """Return an intent if this interaction applies to *cell*, else None."""


# ---------------------------------------------------------------------------
# Concrete strategies, highest priority first
# ---------------------------------------------------------------------------

class AttackInteraction(Interaction):
    name = "attack"

    def resolve(self, hero: Hero, world: WorldState, cell: int) -> Intent | None:
        mob = world.mob_at(cell)
        if mob is None:
            return None
        return Intent(IntentKind.ATTACK, cell, target_id=mob.id)


class UnlockInteraction(Interaction):
    name = "unlock"

    def resolve(self, hero: Hero, world: WorldState, cell: int) -> Intent | None:
        if world.grid.get(cell) != Terrain.LOCKED_DOOR or hero.keys <= 0:
            return None
        return Intent(IntentKind.UNLOCK, cell)


class DescendInteraction(Interaction):
    name = "descend"

    def resolve(self, hero: Hero, world: WorldState, cell: int) -> Intent | None:
        if world.grid.get(cell) != Terrain.STAIRS_DOWN:
            return None
        return Intent(IntentKind.DESCEND, cell)


class PickupInteraction(Interaction):
    name = "pickup"

    def resolve(self, hero: Hero, world: WorldState, cell: int) -> Intent | None:
        if cell not in world.items or not world.grid.is_passable(cell):
            return None
        return Intent(IntentKind.PICKUP, cell)


class MoveInteraction(Interaction):
    name = "move"

    def resolve(self, hero: Hero, world: WorldState, cell: int) -> Intent | None:
        if not world.grid.is_passable(cell):
            return None
        return Intent(IntentKind.MOVE, cell)


DEFAULT_INTERACTIONS: tuple[Interaction, ...] = (
    AttackInteraction(),
    UnlockInteraction(),
    DescendInteraction(),
    PickupInteraction(),
    MoveInteraction(),
)


class InteractionResolver:
    """Ordered chain of interactions; the first match wins."""

    __slots__ = ("_interactions",)

    def __init__(self, interactions: Sequence[Interaction] = DEFAULT_INTERACTIONS) -> None:
        self._interactions = tuple(interactions)

    @property
    def interactions(self) -> tuple[Interaction, ...]:
        return self._interactions

    def resolve(self, hero: Hero, world: WorldState, cell: int) -> Intent | None:
        for interaction in self._interactions:
            intent = interaction.resolve(hero, world, cell)
            if intent is not None:
                return intent
        logger.debug("No interaction for cell %d, move declined", cell)
        return None
