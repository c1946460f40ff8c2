from __future__ import annotations

import argparse
import csv
import json
import logging
import math
from pathlib import Path
from typing import Optional

from ..sim.core.config import SimulationConfig
from ..sim.core.world import World
from ..sim.systems.groups import group_sizes

logger = logging.getLogger(__name__)


_BASIC_HEADER = [
    "tick",
    "population",
    "groups",
    "ungrouped",
    "player_group_size",
    "tick_ms",
]

_DETAILED_HEADER = [
    "tick",
    "population",
    "groups",
    "ungrouped",
    "player_group_size",
    "groups_allocated",
    "merges",
    "joined_player",
    "proximity_checks",
    "tick_ms",
    "ungrouped_ratio",
    "avg_speed",
    "max_speed",
    "avg_group_size",
    "max_group_size",
    "camera_x",
    "camera_y",
    "camera_z",
]


def _format_basic_row(metrics: object, tick_ms: float) -> list[object]:
    return [
        metrics.tick,
        metrics.population,
        metrics.groups,
        metrics.ungrouped,
        metrics.player_group_size,
        f"{tick_ms:.3f}",
    ]


def _format_detailed_row(world: World, metrics: object, tick_ms: float) -> list[object]:
    population = metrics.population
    ungrouped_ratio = 0.0 if population <= 0 else metrics.ungrouped / population
    max_speed = 0.0
    for agent in world.agents:
        max_speed = max(max_speed, agent.velocity.length())
    sizes = group_sizes(world.agents)
    if sizes:
        avg_group_size = sum(sizes.values()) / len(sizes)
        max_group_size = max(sizes.values())
    else:
        avg_group_size = 0.0
        max_group_size = 0
    camera = world.camera.position
    return [
        metrics.tick,
        population,
        metrics.groups,
        metrics.ungrouped,
        metrics.player_group_size,
        metrics.groups_allocated,
        metrics.merges,
        metrics.joined_player,
        metrics.proximity_checks,
        f"{tick_ms:.3f}",
        f"{ungrouped_ratio:.4f}",
        f"{metrics.average_speed:.4f}",
        f"{max_speed:.4f}",
        f"{avg_group_size:.4f}",
        max_group_size,
        f"{camera.x:.4f}",
        f"{camera.y:.4f}",
        f"{camera.z:.4f}",
    ]


def _summary_stats(values: list[float]) -> dict[str, float]:
    if not values:
        return {"min": 0.0, "max": 0.0, "mean": 0.0, "std": 0.0}
    mean = sum(values) / len(values)
    variance = sum((value - mean) ** 2 for value in values) / len(values)
    return {"min": min(values), "max": max(values), "mean": mean, "std": math.sqrt(variance)}


def run_headless(
    steps: int,
    seed: Optional[int],
    log_path: Optional[Path],
    deterministic_log: bool = False,
    log_format: str = "detailed",
    summary_path: Optional[Path] = None,
    config_path: Optional[Path] = None,
) -> World:
    log_mode = log_format.lower()
    if log_mode not in {"basic", "detailed"}:
        raise ValueError(f"Unknown log format: {log_format}")

    config = SimulationConfig.from_yaml(config_path) if config_path else SimulationConfig()
    if seed is not None:
        config.seed = seed
    world = World(config)

    writer = None
    csv_file = None
    if log_path:
        csv_file = Path(log_path).open("w", newline="")
        writer = csv.writer(csv_file)
        writer.writerow(_DETAILED_HEADER if log_mode == "detailed" else _BASIC_HEADER)

    tick_ms_series: list[float] = []
    player_group_series: list[float] = []
    groups_series: list[float] = []
    joined_total = 0
    merges_total = 0
    first_join_tick: Optional[int] = None

    try:
        for tick in range(steps):
            metrics = world.step(tick)
            tick_ms = 0.0 if deterministic_log else metrics.tick_duration_ms
            tick_ms_series.append(tick_ms)
            player_group_series.append(float(metrics.player_group_size))
            groups_series.append(float(metrics.groups))
            joined_total += metrics.joined_player
            merges_total += metrics.merges
            if world.consume_joined_player_group() and first_join_tick is None:
                first_join_tick = tick
            if writer:
                if log_mode == "detailed":
                    writer.writerow(_format_detailed_row(world, metrics, tick_ms))
                else:
                    writer.writerow(_format_basic_row(metrics, tick_ms))
    finally:
        if csv_file:
            csv_file.close()

    final = world.metrics
    if final is not None:
        logger.info(
            "Ran %d ticks: %d groups, %d ungrouped, player group size %d",
            steps,
            final.groups,
            final.ungrouped,
            final.player_group_size,
        )

    if summary_path:
        summary = {
            "steps": steps,
            "seed": config.seed,
            "log_format": log_mode,
            "deterministic_log": deterministic_log,
            "proximity_mode": config.grouping.proximity_mode,
            "tick_ms": _summary_stats(tick_ms_series),
            "groups": _summary_stats(groups_series),
            "player_group_size": _summary_stats(player_group_series),
            "joined_player_total": joined_total,
            "merges_total": merges_total,
            "first_join_tick": first_join_tick,
            "next_group_id": world.grouping.next_group_id,
        }
        Path(summary_path).write_text(json.dumps(summary, indent=2))
    return world


def main() -> None:
    parser = argparse.ArgumentParser(description="Headless fish school simulation")
    parser.add_argument("--steps", type=int, default=3000)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--config", type=Path, default=None, help="YAML configuration file")
    parser.add_argument("--log", type=Path, default=None, help="CSV file to write metrics")
    parser.add_argument(
        "--log-format",
        choices=["basic", "detailed"],
        default="detailed",
        help="CSV format to write when --log is provided.",
    )
    parser.add_argument(
        "--summary",
        type=Path,
        default=None,
        help="Optional JSON file to write summary stats for the run.",
    )
    parser.add_argument(
        "--deterministic-log",
        action="store_true",
        help="Write deterministic CSV (tick_ms is forced to 0.000 so identical seeds match).",
    )
    parser.add_argument("--log-level", default="INFO", help="Python logging level")
    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    run_headless(
        args.steps,
        args.seed,
        args.log,
        deterministic_log=args.deterministic_log,
        log_format=args.log_format,
        summary_path=args.summary,
        config_path=args.config,
    )


if __name__ == "__main__":
    main()
