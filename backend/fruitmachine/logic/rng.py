"""Random sources for outcome selection.

Outcome selection only talks to RNGBase so tests and the audit script can
inject a deterministic source.
"""
import hashlib
import random
import secrets
from abc import ABC, abstractmethod


def seed_to_int(seed_str: str) -> int:
    """Convert string seed to integer deterministically."""
    return int(hashlib.sha256(seed_str.encode()).hexdigest(), 16) % (2**31)


class RNGBase(ABC):
    """Abstract RNG interface."""

    @abstractmethod
    def random(self) -> float:
        """Return random float in [0, 1)."""
        pass

    @abstractmethod
    def randint(self, a: int, b: int) -> int:
        """Return random int in [a, b] inclusive."""
        pass

    def uniform(self, a: float, b: float) -> float:
        """Return random float in [a, b)."""
        return a + (b - a) * self.random()


class ProductionRNG(RNGBase):
    """Cryptographically secure source, no fixed seed."""

    def random(self) -> float:
        return secrets.randbelow(2**32) / (2**32)

    def randint(self, a: int, b: int) -> int:
        return secrets.randbelow(b - a + 1) + a


class SeededRNG(RNGBase):
    """
    Deterministic source for tests and simulation.

    Accepts an int seed or a string seed (hashed with seed_to_int) so audit
    runs can be keyed by a readable label.
    """

    def __init__(self, seed: int | str):
        self.seed = seed
        self._rng = random.Random(seed_to_int(seed) if isinstance(seed, str) else seed)

    def random(self) -> float:
        return self._rng.random()

    def randint(self, a: int, b: int) -> int:
        return self._rng.randint(a, b)
