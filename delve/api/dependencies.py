"""FastAPI dependency injection: provides the EpisodeRegistry singleton."""

from __future__ import annotations

from delve.api.registry import EpisodeRegistry

_registry: EpisodeRegistry | None = None


def set_registry(registry: EpisodeRegistry | None) -> None:
    global _registry
    _registry = registry


def get_registry() -> EpisodeRegistry:
    if _registry is None:
        raise RuntimeError("EpisodeRegistry not initialized: server not started correctly.")
    return _registry
