"""Exception types raised by the engine and its bootstrap layer."""

from __future__ import annotations


class ConfigurationError(ValueError):
    """Invalid run configuration (unknown hero class, malformed seed, bad action name).

    Raised at bootstrap, before any episode exists.
    """


class EngineInvariantError(RuntimeError):
    """World or hero unexpectedly absent, or the actor schedule is broken. Fatal."""


class PresentationUnavailableError(RuntimeError):
    """An actor needed a presentation layer (sprites, animations) that headless runs lack.

    The scheduler downgrades this one failure class to a recoverable condition.
    """


class ReplayFormatError(ValueError):
    """A replay log could not be parsed (bad header, wrong field count, unknown action)."""
