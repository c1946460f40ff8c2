from __future__ import annotations

import logging
from dataclasses import dataclass, field
from itertools import combinations
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from ..core.agent import PLAYER_GROUP, Agent, Capability
from ..types.events import ContactStarted, GroupsMerged, JoinedPlayerGroup

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class GroupingResult:
    allocated: List[int] = field(default_factory=list)
    merges: List[GroupsMerged] = field(default_factory=list)
    joined: List[JoinedPlayerGroup] = field(default_factory=list)
    replacements: Dict[int, int] = field(default_factory=dict)
    proximity_checks: int = 0
    joined_groups: Set[int] = field(default_factory=set)


def proximity_pairs(agents: Sequence[Agent], group_distance: float) -> Tuple[List[Tuple[Agent, Agent]], int]:
    """All groupable pairs within ``group_distance`` of each other, plus the number of checks made."""
    groupable = [agent for agent in agents if Capability.GROUPABLE in agent.capabilities]
    limit_sq = group_distance * group_distance
    pairs: List[Tuple[Agent, Agent]] = []
    checks = 0
    for first, second in combinations(groupable, 2):
        checks += 1
        if first.position.distance_squared_to(second.position) <= limit_sq:
            pairs.append((first, second))
    return pairs, checks


def contact_pairs(agents: Sequence[Agent], contacts: Iterable[ContactStarted]) -> List[Tuple[Agent, Agent]]:
    by_id = {agent.id: agent for agent in agents}
    pairs: List[Tuple[Agent, Agent]] = []
    for contact in contacts:
        first = by_id.get(contact.first)
        second = by_id.get(contact.second)
        if first is None or second is None or first is second:
            logger.debug("Ignoring contact between %s and %s", contact.first, contact.second)
            continue
        if Capability.GROUPABLE not in first.capabilities or Capability.GROUPABLE not in second.capabilities:
            continue
        pairs.append((first, second))
    return pairs


def build_replacement_map(merges: Iterable[GroupsMerged]) -> Dict[int, int]:
    """Map every merged-away id to the lowest id of its merge component.

    Higher roots are always attached below lower roots, so each component's root is
    its minimum and merges within one batch are order independent.
    """
    parent: Dict[int, int] = {}

    def find(group_id: int) -> int:
        root = group_id
        while parent.get(root, root) != root:
            root = parent[root]
        while parent.get(group_id, group_id) != root:
            parent[group_id], group_id = root, parent[group_id]
        return root

    for merge in merges:
        root_a = find(merge.first)
        root_b = find(merge.second)
        if root_a == root_b:
            continue
        parent[max(root_a, root_b)] = min(root_a, root_b)

    replacements: Dict[int, int] = {}
    for group_id in parent:
        root = find(group_id)
        if root != group_id:
            replacements[group_id] = root
    return replacements


class GroupingEngine:
    """Assigns and merges group ids from proximity pairs or contact events.

    Ids are handed out by a monotonic counter owned by the engine; 0 is reserved
    for the player's group and is never allocated.
    """

    def __init__(self, group_distance: float = 10.0, first_group_id: int = 1):
        if first_group_id <= PLAYER_GROUP:
            raise ValueError("first_group_id must be greater than the player group id")
        self._group_distance = group_distance
        self._next_group_id = first_group_id

    @property
    def group_distance(self) -> float:
        return self._group_distance

    @property
    def sensor_radius(self) -> float:
        return self._group_distance / 2.0

    @property
    def next_group_id(self) -> int:
        return self._next_group_id

    def allocate(self) -> int:
        group_id = self._next_group_id
        self._next_group_id += 1
        return group_id

    def update(
        self, agents: Sequence[Agent], contacts: Optional[Iterable[ContactStarted]] = None
    ) -> GroupingResult:
        """Run one detect-then-apply grouping pass.

        With ``contacts`` the pairs come from the collision collaborator; otherwise
        every groupable pair within ``group_distance`` is considered.
        """
        result = GroupingResult()
        if contacts is None:
            pairs, result.proximity_checks = proximity_pairs(agents, self._group_distance)
        else:
            pairs = contact_pairs(agents, contacts)
        for first, second in pairs:
            self.resolve_pair(first, second, result)
        result.replacements = self.apply_merges(agents, result.merges)
        return result

    def resolve_pair(self, first: Agent, second: Agent, result: GroupingResult) -> None:
        first_id = first.group_id
        second_id = second.group_id
        if first_id is None and second_id is None:
            group_id = self.allocate()
            first.group_id = group_id
            second.group_id = group_id
            result.allocated.append(group_id)
            logger.debug("Allocated group %d for agents %d and %d", group_id, first.id, second.id)
        elif second_id is None:
            second.group_id = first_id
            if first_id == PLAYER_GROUP:
                result.joined.append(JoinedPlayerGroup(second.id))
        elif first_id is None:
            first.group_id = second_id
            if second_id == PLAYER_GROUP:
                result.joined.append(JoinedPlayerGroup(first.id))
        elif first_id != second_id:
            if PLAYER_GROUP in (first_id, second_id):
                joining = second if first_id == PLAYER_GROUP else first
                # One cue per group absorbed by the player group, however many pairs touch it.
                if joining.group_id not in result.joined_groups:
                    result.joined_groups.add(joining.group_id)
                    result.joined.append(JoinedPlayerGroup(joining.id))
            # Ids are rewritten only in apply_merges so no agent sees a half-merged group.
            result.merges.append(GroupsMerged(first_id, second_id))

    def apply_merges(self, agents: Sequence[Agent], merges: Sequence[GroupsMerged]) -> Dict[int, int]:
        if not merges:
            return {}
        replacements = build_replacement_map(merges)
        for agent in agents:
            if agent.group_id is None:
                continue
            new_id = replacements.get(agent.group_id)
            if new_id is not None:
                agent.group_id = new_id
        logger.debug("Applied %d merge(s): %s", len(merges), replacements)
        return replacements


def group_sizes(agents: Iterable[Agent]) -> Dict[int, int]:
    sizes: Dict[int, int] = {}
    for agent in agents:
        if agent.group_id is not None:
            sizes[agent.group_id] = sizes.get(agent.group_id, 0) + 1
    return sizes
