"""ActionTranslator: turns a canonical action into the hero's next intent.

Called once at the start of every step, before the scheduler runs. The
translator only touches ``ready``, ``pending_intent`` and ``resting``; the
hero carries the intent out on its next turn.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from delve.core.enums import CanonicalAction, IntentKind
from delve.core.models import Intent

if TYPE_CHECKING:
    from delve.core.models import Hero
    from delve.core.world_state import WorldState

logger = logging.getLogger(__name__)


class ActionTranslator:
    """Stateless mapping from :class:`CanonicalAction` to hero intents."""

    @staticmethod
    def apply_intent(hero: Hero | None, world: WorldState, action: CanonicalAction) -> None:
        if hero is None or not hero.alive:
            return

        hero.ready = False
        if not isinstance(action, CanonicalAction):
            logger.debug("Unrecognised action %r treated as WAIT", action)
            action = CanonicalAction.WAIT

        if action.is_movement:
            hero.resting = False
            dest = world.grid.offset(hero.pos, action.dx, action.dy)
            if dest is None:
                logger.debug("%s from cell %d leaves the map, hero waits", action.name, hero.pos)
                hero.pending_intent = None
                return
            hero.pending_intent = world.resolver.resolve(hero, world, dest)
        elif action == CanonicalAction.PICKUP:
            hero.resting = False
            hero.pending_intent = Intent(IntentKind.PICKUP, hero.pos)
        elif action == CanonicalAction.REST:
            hero.pending_intent = None
            hero.resting = True
        else:
            hero.pending_intent = None
            hero.resting = False
