from __future__ import annotations

import math
import random

from pygame.math import Vector3


class DeterministicRng:
    def __init__(self, seed: int):
        self._seed = seed
        self._random = random.Random(seed)

    def reset(self) -> None:
        self._random.seed(self._seed)

    def next_float(self) -> float:
        return self._random.random()

    def next_range(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def random_direction(self) -> Vector3:
        """Unit vector uniformly distributed in the z=0 plane."""
        radians = 2.0 * math.pi * self._random.random()
        return Vector3(math.cos(radians), math.sin(radians), 0.0)

    def next_in_disc(self, radius: float) -> Vector3:
        return self.random_direction() * self.next_range(0.0, radius)
