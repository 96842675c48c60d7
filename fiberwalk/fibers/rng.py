"""
Random sources for fibers.

Every strategy takes its random source as an argument. Anything with
random(), uniform(lo, hi) and randint(lo, hi) works, so random.Random
can stand in for XorShift32.
"""

import random
from typing import Optional, Protocol


class RandomSource(Protocol):
    def random(self) -> float: ...

    def uniform(self, lo: float, hi: float) -> float: ...

    def randint(self, lo: int, hi: int) -> int: ...


class XorShift32:
    """Deterministic PRNG using xorshift32 algorithm."""

    def __init__(self, seed: int):
        self._state = (seed & 0xFFFFFFFF) or 1

    def next_uint32(self) -> int:
        x = self._state
        x ^= (x << 13) & 0xFFFFFFFF
        x ^= (x >> 17) & 0xFFFFFFFF
        x ^= (x << 5) & 0xFFFFFFFF
        self._state = x
        return x

    def random(self) -> float:
        """Random float in [0, 1)."""
        return self.next_uint32() * 2.3283064365386963e-10

    def uniform(self, lo: float, hi: float) -> float:
        """Random float in [lo, hi)."""
        return lo + self.random() * (hi - lo)

    def randint(self, lo: int, hi: int) -> int:
        """Random int in [lo, hi], both ends included."""
        return lo + int(self.random() * (hi - lo + 1))


def generate_random_seed() -> int:
    """Generate a random seed value."""
    return random.randint(0, 0x7FFFFFFF)


def make_rng(seed: Optional[int]) -> XorShift32:
    """Seeded source, or a fresh random seed when seed is None."""
    return XorShift32(generate_random_seed() if seed is None else seed)
