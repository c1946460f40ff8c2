from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class TickMetrics:
    tick: int
    population: int
    groups: int
    ungrouped: int
    player_group_size: int
    groups_allocated: int
    merges: int
    joined_player: int
    proximity_checks: int
    average_speed: float
    tick_duration_ms: float = 0.0
