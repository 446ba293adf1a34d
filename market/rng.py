"""
Seeded random source for the market simulation.

Every component takes a ``SeededRNG`` explicitly.  Nothing in the engine
touches the module-level ``random`` state, so a career replays identically
from its seed.

Usage:
    rng = SeededRNG("career-2026")
    rng.next_int(1, 20)
    rng.chance(0.25)
    rng.pick_weighted([("a", 3), ("b", 1)])
"""

from __future__ import annotations

import math
import random
from typing import List, Sequence, Tuple, TypeVar, Union

T = TypeVar("T")

_ID_CHARS = "abcdefghijklmnopqrstuvwxyz0123456789"


class SeededRNG(random.Random):
    """``random.Random`` with the draw vocabulary the simulation uses."""

    def __init__(self, seed: Union[str, int] = 0):
        super().__init__(seed)
        self.seed_value = seed

    def next(self) -> float:
        """Float in [0, 1)."""
        return self.random()

    def next_int(self, lo: int, hi: int) -> int:
        """Uniform integer in [lo, hi], both inclusive."""
        if lo > hi:
            raise ValueError(f"next_int: min ({lo}) must be <= max ({hi})")
        return math.floor(self.random() * (hi - lo + 1)) + lo

    def next_float(self, lo: float, hi: float) -> float:
        """Uniform float in [lo, hi)."""
        if lo > hi:
            raise ValueError(f"next_float: min ({lo}) must be <= max ({hi})")
        return self.random() * (hi - lo) + lo

    def chance(self, probability: float) -> bool:
        """Bernoulli trial. ``probability`` must lie in [0, 1]."""
        if probability < 0 or probability > 1:
            raise ValueError(f"chance: probability must be in [0, 1], got {probability}")
        return self.random() < probability

    def pick(self, items: Sequence[T]) -> T:
        if len(items) == 0:
            raise ValueError("pick: sequence must not be empty")
        return items[self.next_int(0, len(items) - 1)]

    def pick_weighted(self, items: Sequence[Tuple[T, float]]) -> T:
        """Pick an item proportionally to its weight from ``(item, weight)`` pairs."""
        if len(items) == 0:
            raise ValueError("pick_weighted: items must not be empty")

        total = 0.0
        for _, weight in items:
            if weight < 0:
                raise ValueError(f"pick_weighted: weight must be non-negative, got {weight}")
            total += weight
        if total <= 0:
            raise ValueError("pick_weighted: total weight must be positive")

        threshold = self.random() * total
        for item, weight in items:
            threshold -= weight
            if threshold <= 0:
                return item
        # float rounding
        return items[-1][0]

    def shuffled(self, items: Sequence[T]) -> List[T]:
        """Fisher-Yates shuffle into a new list; the input is left alone."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.next_int(0, i)
            result[i], result[j] = result[j], result[i]
        return result

    def gaussian(self, mean: float, stddev: float) -> float:
        """Box-Muller normal sample; consumes two uniform draws."""
        u1 = max(self.random(), 1e-10)
        u2 = self.random()
        z = math.sqrt(-2 * math.log(u1)) * math.cos(2 * math.pi * u2)
        return mean + stddev * z


def make_message_id(prefix: str, rng: SeededRNG) -> str:
    """Build an inbox message id like ``fa_release_k3x9q0ab`` from the RNG."""
    suffix = "".join(_ID_CHARS[rng.next_int(0, len(_ID_CHARS) - 1)] for _ in range(8))
    return f"{prefix}_{suffix}"
