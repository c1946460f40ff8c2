from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import TYPE_CHECKING, Dict, Sequence

from pygame.math import Vector3

from ..core.agent import Agent, Capability
from ..utils.math3d import WORLD_UP, _clamp_length, _look_basis

if TYPE_CHECKING:
    from ..core.config import ForceConfig
    from ..core.rng import DeterministicRng


@dataclass(slots=True)
class GroupAggregate:
    position_sum: Vector3 = field(default_factory=Vector3)
    velocity_sum: Vector3 = field(default_factory=Vector3)
    count: int = 0

    @property
    def centroid(self) -> Vector3:
        return self.position_sum / self.count

    @property
    def average_velocity(self) -> Vector3:
        return self.velocity_sum / self.count


def compute_forces(agents: Sequence[Agent], config: ForceConfig, rng: DeterministicRng) -> None:
    """Write every force accumulator for this tick from the current positions and velocities."""
    friction_forces(agents, config)
    if config.group_aware:
        group_forces(agents, group_aggregates(agents), config)
        separation_forces(agents, config, grouped_only=True)
    else:
        cohesion_forces(agents, config)
        alignment_forces(agents, config)
        separation_forces(agents, config, grouped_only=False)
    wander_forces(agents, config, rng)


def friction_forces(agents: Sequence[Agent], config: ForceConfig) -> None:
    for agent in agents:
        if Capability.FRICTION in agent.capabilities:
            agent.friction_force = agent.velocity * -config.friction_coefficient


def cohesion_forces(agents: Sequence[Agent], config: ForceConfig) -> None:
    cohesive = [agent for agent in agents if Capability.COHESION in agent.capabilities]
    if not cohesive:
        return
    center = Vector3()
    for agent in cohesive:
        center += agent.position
    center /= len(cohesive)
    for agent in cohesive:
        agent.cohesion_force = (center - agent.position) * config.cohesion_strength


def alignment_forces(agents: Sequence[Agent], config: ForceConfig) -> None:
    aligned = [agent for agent in agents if Capability.ALIGNMENT in agent.capabilities]
    if not aligned:
        return
    velocity_sum = Vector3()
    for agent in aligned:
        velocity_sum += agent.velocity
    force = velocity_sum / len(aligned) * config.alignment_strength
    for agent in aligned:
        agent.alignment_force = Vector3(force)


def group_aggregates(agents: Sequence[Agent]) -> Dict[int, GroupAggregate]:
    aggregates: Dict[int, GroupAggregate] = {}
    for agent in agents:
        if agent.group_id is None:
            continue
        aggregate = aggregates.get(agent.group_id)
        if aggregate is None:
            aggregate = GroupAggregate()
            aggregates[agent.group_id] = aggregate
        aggregate.position_sum += agent.position
        aggregate.velocity_sum += agent.velocity
        aggregate.count += 1
    return aggregates


def group_forces(agents: Sequence[Agent], aggregates: Dict[int, GroupAggregate], config: ForceConfig) -> None:
    for agent in agents:
        aggregate = aggregates.get(agent.group_id) if agent.group_id is not None else None
        if aggregate is None:
            agent.cohesion_force = Vector3()
            agent.alignment_force = Vector3()
            continue
        if Capability.COHESION in agent.capabilities:
            agent.cohesion_force = (aggregate.centroid - agent.position) * config.cohesion_strength
        if Capability.ALIGNMENT in agent.capabilities:
            agent.alignment_force = aggregate.average_velocity * config.alignment_strength


def separation_forces(agents: Sequence[Agent], config: ForceConfig, grouped_only: bool) -> None:
    for agent in agents:
        agent.separation_force = Vector3()
    separating = [
        agent
        for agent in agents
        if Capability.SEPARATION in agent.capabilities and (not grouped_only or agent.group_id is not None)
    ]
    for first, second in combinations(separating, 2):
        impulse = separation_impulse(first.position, second.position, config)
        if impulse is None:
            continue
        first.separation_force += impulse
        second.separation_force -= impulse


def separation_impulse(first: Vector3, second: Vector3, config: ForceConfig) -> Vector3 | None:
    """Inverse-cube repulsion felt by ``first`` from ``second``; ``None`` when they coincide."""
    delta = first - second
    distance = delta.length()
    if distance <= config.epsilon:
        return None
    r = distance / config.separation_radius
    return delta * (config.separation_strength / (r * r * r))


def wander_forces(agents: Sequence[Agent], config: ForceConfig, rng: DeterministicRng) -> None:
    for agent in agents:
        if Capability.WANDER not in agent.capabilities:
            continue
        if config.wander_ungrouped_only and agent.group_id is not None:
            agent.wander_force = Vector3()
            continue
        magnitude = config.wander_strength * rng.next_float()
        agent.wander_force = rng.random_direction() * magnitude


def apply_forces(agents: Sequence[Agent], elapsed: float, max_speed: float) -> None:
    for agent in agents:
        if Capability.FORCEABLE not in agent.capabilities:
            continue
        agent.velocity = _clamp_length(agent.velocity + agent.enabled_force() * elapsed, max_speed)


def move(agents: Sequence[Agent], elapsed: float, epsilon: float) -> None:
    for agent in agents:
        delta_position = agent.velocity * elapsed
        if delta_position.length() > epsilon:
            face(agent, delta_position)
        agent.position += delta_position


def face(agent: Agent, direction: Vector3) -> None:
    basis = _look_basis(direction, WORLD_UP, fallback_up=agent.up)
    if basis is None:
        return
    agent.forward, agent.up = basis
