"""
Deterministic seeding and random stream for snowflake generation.

``seed_from_string`` is a 32-bit FNV-1a hash over the UTF-16 code units
of the text. ``SeededRandom`` is a mulberry32 generator: a 32-bit counter
advanced by a fixed increment and passed through an xorshift-multiply
mixer. One instance belongs to one pipeline run and must not be shared.
"""
from typing import Callable

MASK32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
MULBERRY_INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK32


def seed_from_string(text: str) -> int:
    """Hash *text* to an unsigned 32-bit seed."""
    h = FNV_OFFSET_BASIS
    data = text.encode("utf-16-le", errors="surrogatepass")
    for i in range(0, len(data), 2):
        unit = data[i] | (data[i + 1] << 8)
        h ^= unit
        h = _imul(h, FNV_PRIME)
    return h & MASK32


class SeededRandom:
    """mulberry32 stream of floats in [0, 1)."""

    def __init__(self, seed: int):
        self.state = int(seed) & MASK32

    def next(self) -> float:
        self.state = (self.state + MULBERRY_INCREMENT) & MASK32
        t = self.state
        x = _imul(t ^ (t >> 15), t | 1)
        x ^= (x + _imul(x ^ (x >> 7), x | 61)) & MASK32
        return ((x ^ (x >> 14)) & MASK32) / TWO_POW_32

    def __call__(self) -> float:
        return self.next()


def make_generator(seed: int) -> Callable[[], float]:
    """Return a fresh generator; calling it yields the next value."""
    return SeededRandom(seed)
