"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import Enum, IntEnum, IntFlag, unique

from delve.core.errors import ConfigurationError


@unique
class CanonicalAction(Enum):
    """The closed 11-member action space accepted by ``EpisodeRunner.step``.

    Members are identified by name; the ordinal is not part of the protocol.
    Movement actions are context-aware: the destination cell decides whether
    the hero attacks, unlocks, descends, picks up or simply walks.
    """

    MOVE_N = ("MOVE_N", 0, -1)
    MOVE_NE = ("MOVE_NE", 1, -1)
    MOVE_E = ("MOVE_E", 1, 0)
    MOVE_SE = ("MOVE_SE", 1, 1)
    MOVE_S = ("MOVE_S", 0, 1)
    MOVE_SW = ("MOVE_SW", -1, 1)
    MOVE_W = ("MOVE_W", -1, 0)
    MOVE_NW = ("MOVE_NW", -1, -1)
    WAIT = ("WAIT", 0, 0)
    PICKUP = ("PICKUP", 0, 0)
    REST = ("REST", 0, 0)

    def __init__(self, _label: str, dx: int, dy: int) -> None:
        self.dx = dx
        self.dy = dy

    @property
    def is_movement(self) -> bool:
        return self not in (CanonicalAction.WAIT, CanonicalAction.PICKUP, CanonicalAction.REST)

    @property
    def description(self) -> str:
        return _ACTION_DESCRIPTIONS[self]

    @classmethod
    def count(cls) -> int:
        return len(cls.__members__)

    @classmethod
    def parse(cls, name: str | CanonicalAction) -> CanonicalAction:
        """Resolve an action by name (case-insensitive)."""
        if isinstance(name, CanonicalAction):
            return name
        try:
            return cls[str(name).strip().upper()]
        except KeyError:
            raise ConfigurationError(f"Unknown action {name!r}") from None


_ACTION_DESCRIPTIONS: dict[CanonicalAction, str] = {
    CanonicalAction.MOVE_N: "Move north (context-aware: attacks, unlocks, descends, picks up)",
    CanonicalAction.MOVE_NE: "Move northeast (context-aware)",
    CanonicalAction.MOVE_E: "Move east (context-aware)",
    CanonicalAction.MOVE_SE: "Move southeast (context-aware)",
    CanonicalAction.MOVE_S: "Move south (context-aware)",
    CanonicalAction.MOVE_SW: "Move southwest (context-aware)",
    CanonicalAction.MOVE_W: "Move west (context-aware)",
    CanonicalAction.MOVE_NW: "Move northwest (context-aware)",
    CanonicalAction.WAIT: "Wait one turn without moving",
    CanonicalAction.PICKUP: "Pick up the item at the current position",
    CanonicalAction.REST: "Rest until fully healed or interrupted",
}


@unique
class HeroClass(IntEnum):
    """Playable hero archetypes."""

    WARRIOR = 0
    MAGE = 1
    ROGUE = 2
    HUNTRESS = 3

    @classmethod
    def parse(cls, value: str | int | HeroClass) -> HeroClass:
        if isinstance(value, HeroClass):
            return value
        try:
            if isinstance(value, int):
                return cls(value)
            return cls[str(value).strip().upper()]
        except (ValueError, KeyError):
            raise ConfigurationError(f"Unknown hero class {value!r}") from None


class Challenge(IntFlag):
    """Optional difficulty modifiers, combined as a bitset."""

    NONE = 0
    NO_REGEN = 1        # Hero never regenerates passively
    SWARM = 2           # More monsters, faster respawns
    CHAMPIONS = 4       # Monsters get +50% HP and damage

    @classmethod
    def all_bits(cls) -> int:
        return int(cls.NO_REGEN | cls.SWARM | cls.CHAMPIONS)


@unique
class TerminationReason(IntEnum):
    """Why ``Scheduler.run_until_decision_point`` returned."""

    READY_FOR_INPUT = 0
    EPISODE_ENDED = 1
    SAFETY_LIMIT_HIT = 2


@unique
class IntentKind(IntEnum):
    """Concrete world-applicable hero intents."""

    MOVE = 0
    ATTACK = 1
    PICKUP = 2
    UNLOCK = 3
    DESCEND = 4


@unique
class Domain(IntEnum):
    """RNG domains for deterministic randomness isolation."""

    COMBAT = 0
    LOOT = 1
    AI_DECISION = 2
    SPAWN = 3
    MAP_GEN = 4


@unique
class Terrain(IntEnum):
    """Tile terrain on the level grid."""

    WALL = 0
    FLOOR = 1
    DOOR = 2
    LOCKED_DOOR = 3
    STAIRS_UP = 4
    STAIRS_DOWN = 5


@unique
class ItemKind(IntEnum):
    """Items lying on the level floor."""

    GOLD = 0
    IRON_KEY = 1
    DEWDROP = 2
