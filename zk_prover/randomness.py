"""
Randomness providers for setup and proving.

Setup and every proof draw their scalars from an explicit provider. The
default provider reads system entropy through ``secrets`` on each call and
keeps no state between proofs. ``SeededRandomness`` is deterministic and
exists for reproducible tests only; it must never be used for real votes.
"""

import random
import secrets
from abc import ABC, abstractmethod

from .field import FIELD_MODULUS


class RandomnessProvider(ABC):
    """Source of uniformly random non-zero scalars"""

    @abstractmethod
    def random_scalar(self) -> int:
        """Return a uniform element of [1, r)"""

    @abstractmethod
    def random_bytes(self, size: int) -> bytes:
        pass


class SystemRandomness(RandomnessProvider):
    """Cryptographically secure provider backed by the OS CSPRNG"""

    def random_scalar(self) -> int:
        return secrets.randbelow(FIELD_MODULUS - 1) + 1

    def random_bytes(self, size: int) -> bytes:
        return secrets.token_bytes(size)


class SeededRandomness(RandomnessProvider):
    """Deterministic provider for tests. NOT secure."""

    def __init__(self, seed: int):
        self._rng = random.Random(seed)

    def random_scalar(self) -> int:
        return self._rng.randrange(1, FIELD_MODULUS)

    def random_bytes(self, size: int) -> bytes:
        return bytes(self._rng.getrandbits(8) for _ in range(size))
