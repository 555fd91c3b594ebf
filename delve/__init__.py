"""Delve: a deterministic, turn-based dungeon simulation with a step-wise agent protocol."""

__version__ = "0.1.0"
