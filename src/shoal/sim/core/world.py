from __future__ import annotations

import logging
from time import perf_counter
from typing import Any, Dict, Iterable, List

from pygame.math import Vector3

from .agent import Agent, new_npc, new_player
from .config import SimulationConfig
from .rng import DeterministicRng
from ..systems import camera as camera_system
from ..systems import forces, steering
from ..systems.contacts import ContactTracker
from ..systems.groups import GroupingEngine, GroupingResult
from ..systems.metrics import create_metrics
from ..types.events import ContactStarted, JoinedPlayerGroup
from ..types.metrics import TickMetrics
from ..types.snapshot import Snapshot, SnapshotCamera, SnapshotMetadata

logger = logging.getLogger(__name__)


def _xyz(vector: Vector3) -> List[float]:
    return [vector.x, vector.y, vector.z]


class World:
    """Owns the school and runs the per-tick pipeline.

    Order per tick: grouping (detect, then merge) -> steering -> force write ->
    velocity integration -> position integration -> camera retarget.
    """

    def __init__(self, config: SimulationConfig):
        self._config = config
        self._rng = DeterministicRng(config.seed)
        self._agents: List[Agent] = []
        self._metrics: TickMetrics | None = None
        self._joined_player_group = False
        self._joined_events: List[JoinedPlayerGroup] = []
        self._build()

    @property
    def config(self) -> SimulationConfig:
        return self._config

    @property
    def agents(self) -> List[Agent]:
        return self._agents

    @property
    def player(self) -> Agent:
        return self._player

    @property
    def camera(self) -> camera_system.CameraRig:
        return self._camera

    @property
    def grouping(self) -> GroupingEngine:
        return self._grouping

    @property
    def metrics(self) -> TickMetrics | None:
        return self._metrics

    @property
    def joined_events(self) -> List[JoinedPlayerGroup]:
        return list(self._joined_events)

    def reset(self) -> None:
        self._rng.reset()
        self._metrics = None
        self._joined_player_group = False
        self._joined_events = []
        self._build(first_group_id=self._grouping.next_group_id)
        logger.info("World reset with seed %d", self._config.seed)

    def consume_joined_player_group(self) -> bool:
        """Read the one-shot join signal; it stays cleared until a later tick fires it again."""
        fired = self._joined_player_group
        self._joined_player_group = False
        return fired

    def step(
        self,
        tick: int,
        elapsed: float | None = None,
        pointer_target: Vector3 | None = None,
        contacts: Iterable[ContactStarted] | None = None,
    ) -> TickMetrics:
        start = perf_counter()
        config = self._config
        dt = config.time_step if elapsed is None else max(0.0, float(elapsed))
        self._joined_player_group = False

        grouping = self._update_groups(contacts)
        self._joined_events = list(grouping.joined)
        if grouping.joined:
            self._joined_player_group = True
            logger.info("%d agent(s) joined the player group on tick %d", len(grouping.joined), tick)
        camera_system.track_player_group(self._agents)

        steering.steer(
            self._agents,
            pointer_target,
            min(config.steering.max_speed, config.forces.max_speed),
        )
        forces.compute_forces(self._agents, config.forces, self._rng)
        forces.apply_forces(self._agents, dt, config.forces.max_speed)
        forces.move(self._agents, dt, config.forces.epsilon)
        camera_system.frame(self._camera, self._agents, config.camera)

        duration_ms = (perf_counter() - start) * 1000.0
        self._metrics = create_metrics(tick, self._agents, grouping, duration_ms)
        return self._metrics

    def snapshot(self, tick: int) -> Snapshot:
        metrics = self._metrics if self._metrics is not None else create_metrics(tick, self._agents, GroupingResult(), 0.0)
        time_step = self._config.time_step
        return Snapshot(
            tick=tick,
            metrics=metrics,
            agents=[self._agent_snapshot(agent) for agent in self._agents],
            camera=SnapshotCamera(position=_xyz(self._camera.position), forward=_xyz(self._camera.forward)),
            metadata=SnapshotMetadata(
                sim_dt=time_step,
                tick_rate=0.0 if time_step <= 0 else 1.0 / time_step,
                seed=self._config.seed,
                config_version=self._config.config_version,
                proximity_mode=self._config.grouping.proximity_mode,
            ),
        )

    def _update_groups(self, contacts: Iterable[ContactStarted] | None) -> GroupingResult:
        if not self._config.grouping.enabled:
            return GroupingResult()
        if contacts is None and self._config.grouping.proximity_mode == "collision":
            contacts = self._contacts.update(self._agents)
        return self._grouping.update(self._agents, contacts)

    def _build(self, first_group_id: int | None = None) -> None:
        config = self._config
        if first_group_id is None:
            first_group_id = config.grouping.first_group_id
        self._grouping = GroupingEngine(config.grouping.group_distance, first_group_id)
        self._contacts = ContactTracker(self._grouping.sensor_radius)
        self._camera = camera_system.CameraRig(position=Vector3(config.camera.initial_position))
        self._player = new_player(0)
        self._agents = [self._player]
        for agent_id in range(1, config.spawn.npc_count + 1):
            position = self._rng.next_in_disc(config.spawn.spawn_radius)
            self._agents.append(new_npc(agent_id, position, forward=self._rng.random_direction()))

    def _agent_snapshot(self, agent: Agent) -> Dict[str, Any]:
        return {
            "id": agent.id,
            "kind": agent.kind.value,
            "is_player": agent.is_player,
            "x": agent.position.x,
            "y": agent.position.y,
            "z": agent.position.z,
            "vx": agent.velocity.x,
            "vy": agent.velocity.y,
            "vz": agent.velocity.z,
            "forward": _xyz(agent.forward),
            "up": _xyz(agent.up),
            "group": agent.group_id,
            "speed": agent.velocity.length(),
            "animation_speed": agent.animation_speed,
        }
