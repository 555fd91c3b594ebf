"""Core data models and world representation."""

from delve.core.enums import CanonicalAction, Challenge, Domain, HeroClass, IntentKind, Terrain, TerminationReason
from delve.core.errors import ConfigurationError, EngineInvariantError, PresentationUnavailableError
from delve.core.grid import Grid
from delve.core.models import Actor, Hero, Intent, Mob
from delve.core.observation import Observation, compute_state_hash, extract_observation
from delve.core.world_state import WorldState

__all__ = [
    "Actor",
    "CanonicalAction",
    "Challenge",
    "ConfigurationError",
    "Domain",
    "EngineInvariantError",
    "Grid",
    "Hero",
    "HeroClass",
    "Intent",
    "IntentKind",
    "Mob",
    "Observation",
    "PresentationUnavailableError",
    "Terrain",
    "TerminationReason",
    "WorldState",
    "compute_state_hash",
    "extract_observation",
]
