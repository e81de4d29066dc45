# src/tilefactors/sampling.py
"""
Index generators over combinatorial spaces too large for 64-bit counters.

Each sampler hands out one index in [0, bound) per next() call. Samplers
carry mutable state (cursor / random engine); give each thread its own.
"""

from __future__ import annotations

import random

from tilefactors.runtime import CFG
from tilefactors.utility import ContractError

UINT64_SPAN = 1 << 64
MAX_BOUND = (1 << 128) - 1


class SpaceSampler:
    def __init__(self, bound: int):
        if isinstance(bound, bool) or not isinstance(bound, int) or not 1 <= bound <= MAX_BOUND:
            raise ContractError(f"sampler bound must be an integer in [1, 2**128 - 1], got {bound!r}")
        self._bound = bound

    @property
    def bound(self) -> int:
        return self._bound

    def next(self) -> int:
        raise NotImplementedError

    def take(self, count: int) -> list[int]:
        return [self.next() for _ in range(count)]


class SequentialSampler(SpaceSampler):
    """0, 1, 2, ... bound-1; then wraps to 0 if autoloop, else refuses."""

    def __init__(self, bound: int, autoloop: bool = False):
        super().__init__(bound)
        self.autoloop = autoloop
        self._cur = 0

    def next(self) -> int:
        if self._cur == self._bound:
            if not self.autoloop:
                raise ContractError(f"sequential sampler exhausted its bound of {self._bound}")
            self._cur = 0
        value = self._cur
        self._cur += 1
        return value

    def reset(self) -> None:
        self._cur = 0

    def __repr__(self) -> str:
        return f"SequentialSampler(bound={self._bound}, autoloop={self.autoloop}, cursor={self._cur})"


class RandomSampler(SpaceSampler):
    """
    Uniform draws from [0, bound).

    Bounds up to 2**64 use a single draw. Wider bounds combine a 64-bit low
    word with a high word as low + high * 2**64; combinations at or above
    the bound are redrawn, so every value stays equally likely.
    """

    def __init__(self, bound: int, seed: int | None = None, rng: random.Random | None = None):
        super().__init__(bound)
        if rng is None:
            if seed is None:
                seed = CFG("SAMPLING.SEED", None)
            rng = random.Random(seed)
        self._rng = rng
        self._two_words = bound > UINT64_SPAN
        self._high_span = (bound - 1) // UINT64_SPAN + 1

    def next(self) -> int:
        if not self._two_words:
            return self._rng.randrange(self._bound)
        while True:
            low = self._rng.getrandbits(64)
            high = self._rng.randrange(self._high_span)
            value = low + high * UINT64_SPAN
            if value < self._bound:
                return value

    def __repr__(self) -> str:
        return f"RandomSampler(bound={self._bound})"
