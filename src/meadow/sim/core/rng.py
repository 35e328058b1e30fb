from __future__ import annotations

import random
from typing import Optional, Sequence, TypeVar

from pygame.math import Vector2

T = TypeVar("T")


class SimulationRng:
    """Random stream shared by every system of one simulation context.

    Unseeded by default; a seed only pins the stream for tests.
    """

    def __init__(self, seed: Optional[int] = None):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def next_int_range(self, low: int, high: int) -> int:
        return self._random.randint(low, high)

    def next_point(self, low: float, high: float) -> Vector2:
        return Vector2(self._random.uniform(low, high), self._random.uniform(low, high))

    def sample_choice(self, items: Sequence[T]) -> Optional[T]:
        if not items:
            return None
        return self._random.choice(items)
