"""Injectable random sources for weighted selection."""

import random
from collections.abc import Iterable
from typing import Protocol


class RandomSource(Protocol):
    """Anything that yields floats uniformly in [0, 1)."""

    def random(self) -> float:
        ...


def system_random(seed: int | None = None) -> RandomSource:
    """Default random source (stdlib Mersenne Twister, optionally seeded)."""
    return random.Random(seed)


class SequenceRandom:
    """Deterministic source replaying a fixed sequence of draws.

    Used by tests and tooling that need reproducible picks.

    Raises:
        ValueError: If a draw lies outside [0, 1)
        IndexError: If more draws are requested than supplied (cycle=False)
    """

    def __init__(self, draws: Iterable[float], *, cycle: bool = False) -> None:
        self._draws = list(draws)
        for d in self._draws:
            if not 0.0 <= d < 1.0:
                raise ValueError(f"draw {d} outside [0, 1)")
        self._cycle = cycle
        self._index = 0

    def random(self) -> float:
        if self._index >= len(self._draws):
            if not self._cycle or not self._draws:
                raise IndexError("SequenceRandom exhausted")
            self._index = 0
        value = self._draws[self._index]
        self._index += 1
        return value
