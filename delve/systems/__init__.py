"""Engine systems: RNG, level generation, combat, interactions, presentation."""

from delve.systems.rng import DeterministicRNG
from delve.systems.generator import LevelGenerator
from delve.systems.interactions import InteractionResolver
from delve.systems.presentation import HeadlessPresentation

__all__ = ["DeterministicRNG", "HeadlessPresentation", "InteractionResolver", "LevelGenerator"]
