from __future__ import annotations

from itertools import combinations
from typing import List, Sequence, Set, Tuple

from ..core.agent import Agent, Capability
from ..types.events import ContactStarted


class ContactTracker:
    """Reports sensor spheres that start overlapping, like a physics broad phase would.

    Each groupable agent carries a sensor of ``sensor_radius``; a contact starts on the
    first tick two sensors overlap and is not reported again until they separate.
    """

    def __init__(self, sensor_radius: float):
        self._sensor_radius = sensor_radius
        self._touching: Set[Tuple[int, int]] = set()

    @property
    def touching(self) -> Set[Tuple[int, int]]:
        return set(self._touching)

    def clear(self) -> None:
        self._touching.clear()

    def update(self, agents: Sequence[Agent]) -> List[ContactStarted]:
        reach = 2.0 * self._sensor_radius
        reach_sq = reach * reach
        groupable = [agent for agent in agents if Capability.GROUPABLE in agent.capabilities]
        current: Set[Tuple[int, int]] = set()
        started: List[ContactStarted] = []
        for first, second in combinations(groupable, 2):
            if first.position.distance_squared_to(second.position) > reach_sq:
                continue
            key = (first.id, second.id) if first.id < second.id else (second.id, first.id)
            current.add(key)
            if key not in self._touching:
                started.append(ContactStarted(*key))
        self._touching = current
        return started
