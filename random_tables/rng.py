"""Random sources.

The engine only needs `uniform()`; `weighted_index()` is offered to callers
that pick among plain weights without building a table.

    SystemRandomSource   — OS entropy via random.SystemRandom (default).
    DefaultRandomSource  — Mersenne Twister, optionally seeded for
                           reproducible rolls.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Protocol

from .errors import InvalidArgumentError


class RandomSource(Protocol):
    def uniform(self) -> float:
        """Return a float in [0, 1)."""
        ...

    def weighted_index(self, weights: Sequence[float]) -> int: ...


def pick_weighted(uniform: float, weights: Sequence[float]) -> int:
    """Map one uniform draw onto an index of `weights`."""
    if not weights:
        raise InvalidArgumentError("Weights cannot be empty")
    if any(w <= 0 for w in weights):
        raise InvalidArgumentError("All weights must be positive")
    remaining = uniform * sum(weights)
    for i, weight in enumerate(weights):
        remaining -= weight
        if remaining <= 0:
            return i
    return len(weights) - 1


class DefaultRandomSource:
    def __init__(self, seed: int | None = None) -> None:
        self._random = random.Random(seed)

    def uniform(self) -> float:
        return self._random.random()

    def weighted_index(self, weights: Sequence[float]) -> int:
        return pick_weighted(self.uniform(), weights)


class SystemRandomSource(DefaultRandomSource):
    def __init__(self) -> None:
        self._random = random.SystemRandom()
