from __future__ import annotations

from typing import Sequence

from ..core.agent import PLAYER_GROUP, Agent
from ..types.metrics import TickMetrics
from .groups import GroupingResult, group_sizes


def create_metrics(
    tick: int,
    agents: Sequence[Agent],
    grouping: GroupingResult,
    duration_ms: float,
) -> TickMetrics:
    sizes = group_sizes(agents)
    population = len(agents)
    speed_sum = 0.0
    for agent in agents:
        speed_sum += agent.velocity.length()
    return TickMetrics(
        tick=tick,
        population=population,
        groups=len(sizes),
        ungrouped=population - sum(sizes.values()),
        player_group_size=sizes.get(PLAYER_GROUP, 0),
        groups_allocated=len(grouping.allocated),
        merges=len(grouping.merges),
        joined_player=len(grouping.joined),
        proximity_checks=grouping.proximity_checks,
        average_speed=0.0 if population == 0 else speed_sum / population,
        tick_duration_ms=duration_ms,
    )
