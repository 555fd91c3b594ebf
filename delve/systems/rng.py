"""Seeded random draws for level generation, spawning, combat and monster wandering.

Each draw hashes ``(seed, domain, key, counter)`` with xxhash64. Level
generation keys its streams by depth and counts draws itself; in-play rolls
go through ``WorldState.roll_int``/``roll_bool``, keyed by depth with an
episode-wide counter; wandering monsters key by actor id and their own turn
count. Nothing here is mutable, so two episodes with the same seed and
actions see the same numbers.
"""

from __future__ import annotations

import struct

import xxhash

from delve.core.enums import Domain


class DeterministicRNG:
    """Stateless domain-separated pseudo-random number generator."""

    __slots__ = ("_seed",)

    _MAX_UINT64 = (1 << 64) - 1

    def __init__(self, seed: int) -> None:
        self._seed = seed

    @property
    def seed(self) -> int:
        return self._seed

    def _hash(self, domain: Domain, key: int, counter: int) -> int:
        payload = struct.pack("<qiqq", self._seed, domain.value, key, counter)
        return xxhash.xxh64(payload).intdigest()

    def next_float(self, domain: Domain, key: int, counter: int) -> float:
        """Return a deterministic float in [0.0, 1.0)."""
        return self._hash(domain, key, counter) / (self._MAX_UINT64 + 1)

    def next_int(self, domain: Domain, key: int, counter: int, low: int, high: int) -> int:
        """Return a deterministic integer in [low, high] inclusive."""
        if high <= low:
            return low
        f = self.next_float(domain, key, counter)
        return low + int(f * (high - low + 1))

    def next_bool(self, domain: Domain, key: int, counter: int, probability: float = 0.5) -> bool:
        """Return True with the given probability."""
        return self.next_float(domain, key, counter) < probability
